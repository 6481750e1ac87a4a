from __future__ import annotations
from typing import Any, Optional

# Phrases the analysis service uses when a contract is too big for the model.
SIZE_LIMIT_MARKERS = (
    "token",
    "too large",
    "too long",
    "context length",
    "size limit",
    "payload",
    "413",
)


class NavigatorError(Exception):
    """Base class for client-side failures."""


class InputError(NavigatorError):
    """Validation failure caught before any request is sent."""

    def __init__(self, title: str, description: str):
        super().__init__(f"{title}: {description}")
        self.title = title
        self.description = description


class ApiError(NavigatorError):
    """Remote failure: non-2xx response, unreadable body, or network error (status 0)."""

    def __init__(self, status: int, message: str, data: Any = None):
        super().__init__(message)
        self.status = status
        self.message = message
        self.data = data

    @property
    def is_network_error(self) -> bool:
        return self.status == 0

    @property
    def is_server_error(self) -> bool:
        return self.status >= 500

    @property
    def is_auth_error(self) -> bool:
        return self.status in (401, 403)

    def __repr__(self) -> str:
        return f"ApiError(status={self.status}, message={self.message!r})"


def is_size_limit_message(message: Optional[str]) -> bool:
    t = (message or "").lower()
    return any(m in t for m in SIZE_LIMIT_MARKERS)
