from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Protocol


@dataclass
class Notification:
    title: str
    description: str = ""
    variant: str = "default"  # default | destructive

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"


class Notifier(Protocol):
    def notify(self, title: str, description: str = "", variant: str = "default") -> None: ...


class NotificationLog:
    """Transient notifications waiting to be shown (toasts in the UI)."""

    def __init__(self):
        self._items: List[Notification] = []

    def notify(self, title: str, description: str = "", variant: str = "default") -> None:
        self._items.append(Notification(title, description, variant))

    def drain(self) -> List[Notification]:
        items, self._items = self._items, []
        return items

    @property
    def latest(self) -> Optional[Notification]:
        return self._items[-1] if self._items else None

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items))
