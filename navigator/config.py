from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from dotenv import load_dotenv

# -----------------------------------------------------------------------------
# Settings (env-driven, .env supported for local dev)
# -----------------------------------------------------------------------------
DEFAULT_API_BASE = "http://127.0.0.1:8787"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class AppConfig:
    api_base: str = DEFAULT_API_BASE
    request_timeout: float = 120.0
    cache_ttl: float = 300.0  # seconds a cached query stays fresh
    language: str = "en"
    default_jurisdiction: str = "Canada"
    default_contract_type: str = "general"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "AppConfig":
        load_dotenv()
        return cls(
            api_base=os.getenv("API_BASE", DEFAULT_API_BASE).rstrip("/"),
            request_timeout=float(os.getenv("REQUEST_TIMEOUT", "120")),
            cache_ttl=float(os.getenv("CACHE_TTL", "300")),
            language=os.getenv("LANGUAGE", "en"),
            default_jurisdiction=os.getenv("DEFAULT_JURISDICTION", "Canada"),
            default_contract_type=os.getenv("DEFAULT_CONTRACT_TYPE", "general"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Install the root handler once; later calls only adjust the level."""
    global _configured
    if not _configured:
        logging.basicConfig(level=level, format=LOG_FORMAT)
        _configured = True
    else:
        logging.getLogger().setLevel(level)
