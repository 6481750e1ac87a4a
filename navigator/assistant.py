from __future__ import annotations
import logging
from typing import List, Optional

from navigator.api import ApiClient
from navigator.dispatcher import RequestStatus
from navigator.errors import ApiError, InputError
from navigator.i18n import Translator
from navigator.models import ChatMessage
from navigator.notify import Notifier

logger = logging.getLogger(__name__)

SUGGESTION_KEYS = (
    "suggest_rental_laws",
    "suggest_business_regulations",
    "suggest_employment_rights",
    "suggest_will_requirements",
)


def suggested_questions(translator: Translator) -> List[str]:
    return [translator.t(k) for k in SUGGESTION_KEYS]


class ChatSession:
    """Transcript with the legal assistant; the server stores both sides."""

    def __init__(self, client: ApiClient, notifier: Notifier, translator: Optional[Translator] = None):
        self.client = client
        self.notifier = notifier
        self.t = (translator or Translator.english()).t
        self.messages: List[ChatMessage] = []
        self.status = RequestStatus.IDLE

    def load(self) -> List[ChatMessage]:
        try:
            raw = self.client.chat_messages()
        except ApiError as e:
            self.notifier.notify(self.t("chat_failed"), e.message, "destructive")
            raise
        self.messages = [ChatMessage.model_validate(m) for m in raw]
        return self.messages

    def send(self, content: str) -> Optional[ChatMessage]:
        text = (content or "").strip()
        if not text:
            raise InputError(self.t("empty_message"), self.t("empty_message_desc"))
        self.status = RequestStatus.PENDING
        try:
            resp = self.client.send_chat_message(text)
        except ApiError as e:
            self.status = RequestStatus.ERROR
            self.notifier.notify(self.t("chat_failed"), e.message or self.t("chat_failed_desc"), "destructive")
            return None
        user_msg = resp.get("userMessage") if isinstance(resp, dict) else None
        ai_msg = resp.get("aiMessage") if isinstance(resp, dict) else None
        self.messages.append(ChatMessage.model_validate(user_msg or {"role": "user", "content": text}))
        reply = None
        if ai_msg:
            reply = ChatMessage.model_validate(ai_msg)
            self.messages.append(reply)
        else:
            logger.warning("assistant reply missing from chat response")
        self.status = RequestStatus.SUCCESS
        return reply

    def clear(self) -> None:
        self.messages = []
        self.status = RequestStatus.IDLE
