from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

TRANSLATIONS_DIR = Path(__file__).parent / "data" / "translations"

Catalogs = Dict[str, Dict[str, str]]


class Translator:
    """Key lookup with {{placeholder}} substitution.

    Passed explicitly to anything that renders text; there is no module-level
    current language.
    """

    def __init__(self, catalogs: Catalogs, language: str = "en", fallback: str = "en"):
        self.catalogs = catalogs
        self.fallback = fallback
        self.language = language if language in catalogs else fallback

    @property
    def languages(self) -> List[str]:
        return sorted(self.catalogs)

    def set_language(self, language: str) -> bool:
        if language not in self.catalogs:
            logger.debug("ignoring unknown language %r", language)
            return False
        self.language = language
        return True

    def t(self, key: str, **replacements: object) -> str:
        text = self.catalogs.get(self.language, {}).get(key)
        if text is None:
            text = self.catalogs.get(self.fallback, {}).get(key, key)
        for name, value in replacements.items():
            text = text.replace("{{" + name + "}}", str(value))
        return text

    __call__ = t

    @classmethod
    def english(cls) -> "Translator":
        return load_translator("en")


def load_catalogs(directory: Optional[Path] = None) -> Catalogs:
    d = directory or TRANSLATIONS_DIR
    catalogs: Catalogs = {}
    for path in sorted(d.glob("*.json")):
        catalogs[path.stem] = json.loads(path.read_text(encoding="utf-8"))
    return catalogs


def load_translator(language: str = "en", directory: Optional[Path] = None) -> Translator:
    return Translator(load_catalogs(directory), language=language)
