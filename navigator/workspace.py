from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Optional

import requests

from navigator.api import ApiClient
from navigator.assistant import ChatSession
from navigator.cache import QueryCache
from navigator.config import AppConfig
from navigator.dispatcher import AnalysisDispatcher
from navigator.history import HistoryBrowser
from navigator.i18n import Translator, load_translator
from navigator.intake import ContractDraft
from navigator.notify import NotificationLog
from navigator.personalization import Personalization
from navigator.presenter import SectionTracker
from navigator.results import ResultStore


@dataclass
class Workspace:
    """Everything one browser session works with, wired once."""

    config: AppConfig
    translator: Translator
    notes: NotificationLog
    client: ApiClient
    cache: QueryCache
    store: ResultStore
    dispatcher: AnalysisDispatcher
    history: HistoryBrowser
    chat: ChatSession
    tracker: SectionTracker
    draft: ContractDraft  # Analyze form
    comparison_draft: ContractDraft  # Compare form; never shares uploads with the Analyze form
    personal: Dict[str, Personalization] = field(default_factory=dict)

    @classmethod
    def build(cls, config: AppConfig, session: Optional[requests.Session] = None) -> "Workspace":
        translator = load_translator(config.language)
        notes = NotificationLog()
        client = ApiClient(config, session=session)
        cache = QueryCache(ttl=config.cache_ttl)
        store = ResultStore()
        return cls(
            config=config,
            translator=translator,
            notes=notes,
            client=client,
            cache=cache,
            store=store,
            dispatcher=AnalysisDispatcher(client, store, notes, cache=cache, translator=translator),
            history=HistoryBrowser(client, store, cache, notes, translator=translator),
            chat=ChatSession(client, notes, translator=translator),
            tracker=SectionTracker(),
            draft=cls._new_draft(config),
            comparison_draft=cls._new_draft(config),
        )

    @staticmethod
    def _new_draft(config: AppConfig) -> ContractDraft:
        return ContractDraft(
            jurisdiction=config.default_jurisdiction,
            contract_type=config.default_contract_type,
        )

    def personalization(self, procedure_id: str) -> Personalization:
        if procedure_id not in self.personal:
            self.personal[procedure_id] = Personalization(procedure_id)
        return self.personal[procedure_id]
