from __future__ import annotations
import uuid
from datetime import datetime, timedelta
from typing import Dict, Generic, Iterator, List, Optional, TypeVar

from pydantic import BaseModel

from navigator.models import ChecklistItem, Note, Reminder

M = TypeVar("M", bound=BaseModel)


def new_id() -> str:
    return uuid.uuid4().hex


class _Collection(Generic[M]):
    """Ordered records replaced in place by id."""

    def __init__(self):
        self._items: List[M] = []

    def __iter__(self) -> Iterator[M]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    @property
    def items(self) -> List[M]:
        return list(self._items)

    def get(self, item_id: str) -> M:
        for it in self._items:
            if it.id == item_id:
                return it
        raise KeyError(item_id)

    def _replace(self, item_id: str, **changes) -> M:
        for i, it in enumerate(self._items):
            if it.id == item_id:
                # validated like a fresh record, so "2026-01-01" becomes a datetime
                self._items[i] = type(it).model_validate({**it.model_dump(), **changes})
                return self._items[i]
        raise KeyError(item_id)

    def delete(self, item_id: str) -> None:
        before = len(self._items)
        self._items = [it for it in self._items if it.id != item_id]
        if len(self._items) == before:
            raise KeyError(item_id)

    def for_step(self, step_id: Optional[str]) -> List[M]:
        return [it for it in self._items if getattr(it, "step_id", None) == step_id]


class Notebook(_Collection[Note]):
    def add(self, step_id: Optional[str], content: str) -> Note:
        now = datetime.now()
        note = Note(id=new_id(), step_id=step_id, content=content.strip(), created_at=now, updated_at=now)
        self._items.append(note)
        return note

    def edit(self, note_id: str, content: str) -> Note:
        return self._replace(note_id, content=content.strip(), updated_at=datetime.now())


class ReminderList(_Collection[Reminder]):
    def add(
        self,
        title: str,
        due_date: datetime,
        notify_before: int = 1,
        description: Optional[str] = None,
        step_id: Optional[str] = None,
    ) -> Reminder:
        r = Reminder(
            id=new_id(),
            title=title.strip(),
            description=description,
            due_date=due_date,
            notify_before=notify_before,
            step_id=step_id,
        )
        self._items.append(r)
        return r

    def edit(self, reminder_id: str, **changes) -> Reminder:
        bad = set(changes) - (set(Reminder.model_fields) - {"id"})
        if bad:
            raise ValueError(f"cannot edit fields: {sorted(bad)}")
        return self._replace(reminder_id, **changes)

    def toggle(self, reminder_id: str) -> Reminder:
        return self._replace(reminder_id, is_completed=not self.get(reminder_id).is_completed)

    @staticmethod
    def is_overdue(reminder: Reminder, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(reminder.due_date.tzinfo)
        return not reminder.is_completed and reminder.due_date < now

    def overdue(self, now: Optional[datetime] = None) -> List[Reminder]:
        return [r for r in self._items if self.is_overdue(r, now)]

    def due_soon(self, now: Optional[datetime] = None) -> List[Reminder]:
        out = []
        for r in self._items:
            current = now or datetime.now(r.due_date.tzinfo)
            window_start = r.due_date - timedelta(days=r.notify_before)
            if not r.is_completed and window_start <= current < r.due_date:
                out.append(r)
        return out


class Checklist(_Collection[ChecklistItem]):
    def add(self, text: str, category: str = "general", step_id: Optional[str] = None) -> ChecklistItem:
        item = ChecklistItem(id=new_id(), text=text.strip(), category=category, step_id=step_id)
        self._items.append(item)
        return item

    def edit(self, item_id: str, text: Optional[str] = None, category: Optional[str] = None) -> ChecklistItem:
        changes = {}
        if text is not None:
            changes["text"] = text.strip()
        if category is not None:
            changes["category"] = category
        return self._replace(item_id, **changes)

    def toggle(self, item_id: str) -> ChecklistItem:
        return self._replace(item_id, is_completed=not self.get(item_id).is_completed)

    def by_category(self) -> Dict[str, List[ChecklistItem]]:
        groups: Dict[str, List[ChecklistItem]] = {}
        for it in self._items:
            groups.setdefault(it.category or "general", []).append(it)
        return groups

    def completion(self) -> int:
        if not self._items:
            return 0
        done = sum(1 for it in self._items if it.is_completed)
        return round(done * 100 / len(self._items))


class Personalization:
    """Notes, reminders and checklist for one procedure, held for the session only."""

    def __init__(self, procedure_id: Optional[str] = None):
        self.procedure_id = procedure_id
        self.notes = Notebook()
        self.reminders = ReminderList()
        self.checklist = Checklist()
