from __future__ import annotations
import re
from dataclasses import dataclass
from datetime import date
from pathlib import PurePath
from typing import Dict, List, Optional, Tuple

from navigator.errors import InputError

# -----------------------------------------------------------------------------
# Form options
# -----------------------------------------------------------------------------
JURISDICTIONS: List[Tuple[str, str]] = [
    ("Canada", "Canada (Federal)"),
    ("Alberta", "Alberta"),
    ("British Columbia", "British Columbia"),
    ("Manitoba", "Manitoba"),
    ("New Brunswick", "New Brunswick"),
    ("Newfoundland", "Newfoundland and Labrador"),
    ("Nova Scotia", "Nova Scotia"),
    ("Ontario", "Ontario"),
    ("Prince Edward Island", "Prince Edward Island"),
    ("Quebec", "Quebec"),
    ("Saskatchewan", "Saskatchewan"),
    ("Northwest Territories", "Northwest Territories"),
    ("Nunavut", "Nunavut"),
    ("Yukon", "Yukon"),
]

CONTRACT_TYPES: List[Tuple[str, str]] = [
    ("general", "General Contract"),
    ("employment", "Employment Contract"),
    ("service", "Service Agreement"),
    ("nda", "Non-Disclosure Agreement"),
    ("lease", "Lease Agreement"),
    ("sale", "Sales Contract"),
    ("partnership", "Partnership Agreement"),
    ("licensing", "Licensing Agreement"),
]

TEXT_MIME = "text/plain"
_EXT_RE = re.compile(r"\.[^/.]+$")


def fallback_title(today: Optional[date] = None) -> str:
    d = today or date.today()
    return f"Contract Analysis {d.month}/{d.day}/{d.year}"


def title_from_filename(name: str) -> str:
    return _EXT_RE.sub("", PurePath(name or "").name)


def _is_plain_text(name: str, mime_type: Optional[str]) -> bool:
    if mime_type:
        return mime_type == TEXT_MIME
    return (name or "").lower().endswith(".txt")


@dataclass
class UploadedContract:
    name: str
    content: bytes
    mime_type: str = "application/octet-stream"

    @property
    def is_text(self) -> bool:
        return _is_plain_text(self.name, self.mime_type)

    def as_tuple(self) -> Tuple[str, bytes, str]:
        return (self.name, self.content, self.mime_type)


def _guess_mime(name: str) -> str:
    ext = PurePath(name or "").suffix.lower()
    return {
        ".txt": TEXT_MIME,
        ".pdf": "application/pdf",
        ".doc": "application/msword",
        ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    }.get(ext, "application/octet-stream")


@dataclass
class ContractDraft:
    """Everything the user has entered on the analysis form."""

    text: str = ""
    file: Optional[UploadedContract] = None
    second_text: str = ""
    second_file: Optional[UploadedContract] = None
    jurisdiction: str = "Canada"
    contract_type: str = "general"
    title: str = ""
    save: bool = False

    # ---- uploads --------------------------------------------------------
    def attach_file(self, name: str, content: bytes, mime_type: Optional[str] = None) -> bool:
        """Select the primary file. Returns True when its text was read locally.

        Only plain-text files are read here; PDF/DOC/DOCX are forwarded as-is and
        the server extracts their text.
        """
        upload = UploadedContract(name, content, mime_type or _guess_mime(name))
        self.file = upload
        self.title = title_from_filename(name)
        if upload.is_text:
            self.text = content.decode("utf-8", errors="replace")
            return True
        return False

    def attach_second_file(self, name: str, content: bytes, mime_type: Optional[str] = None) -> bool:
        upload = UploadedContract(name, content, mime_type or _guess_mime(name))
        self.second_file = upload
        if upload.is_text:
            self.second_text = content.decode("utf-8", errors="replace")
            return True
        return False

    # ---- titles ---------------------------------------------------------
    def resolved_title(self, today: Optional[date] = None, *, for_file: bool = False) -> str:
        if self.title.strip():
            return self.title.strip()
        if for_file and self.file is not None and self.file.name:
            return self.file.name
        return fallback_title(today)

    # ---- request payloads -----------------------------------------------
    def text_request(self, today: Optional[date] = None) -> dict:
        if not self.text.strip():
            raise InputError("Empty contract", "Please enter or upload contract text to analyze.")
        return {
            "content": self.text,
            "jurisdiction": self.jurisdiction,
            "contractType": self.contract_type,
            "save": bool(self.save),
            "title": self.resolved_title(today),
        }

    def file_request(self, today: Optional[date] = None) -> Tuple[Dict[str, str], Tuple[str, bytes, str]]:
        if self.file is None:
            raise InputError("No file selected", "Please select a file to analyze.")
        fields = {
            "jurisdiction": self.jurisdiction,
            "contractType": self.contract_type,
            "save": "true" if self.save else "false",
            "title": self.resolved_title(today, for_file=True),
        }
        return fields, self.file.as_tuple()

    def comparison_request(self) -> Tuple[str, str]:
        if not self.text.strip() or not self.second_text.strip():
            raise InputError("Missing contracts", "Please enter or upload both contracts to compare.")
        return self.text, self.second_text
