from __future__ import annotations
import json
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

import requests

from navigator.config import AppConfig
from navigator.errors import ApiError

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------
ANALYZE_PATH = "/api/analyze-contract"
ANALYZE_UPLOAD_PATH = "/api/analyze-contract/upload"
COMPARE_PATH = "/api/compare-contracts"
ANALYSES_PATH = "/api/contract-analyses"
CHAT_PATH = "/api/chat/messages"
HEALTH_PATH = "/health"

FileTuple = Tuple[str, bytes, str]  # (filename, content, mime type)


def _error_message(resp: requests.Response) -> Tuple[str, Any]:
    try:
        data = resp.json()
    except ValueError:
        text = (resp.text or "").strip()
        return (text or resp.reason or "Unknown error"), None
    if isinstance(data, dict):
        msg = data.get("message") or data.get("error") or data.get("detail")
        if msg:
            return str(msg), data
    return json.dumps(data), data


def _parse_body(resp: requests.Response) -> Any:
    ctype = resp.headers.get("content-type", "")
    if "application/json" in ctype:
        return resp.json()
    text = resp.text
    if not text:
        return {}
    try:
        return json.loads(text)
    except ValueError:
        return text


class ApiClient:
    """Thin wrapper over the legal-assistant REST API.

    One request per call: no retries, no backoff. Every failure surfaces as
    ApiError (status 0 for network errors).
    """

    def __init__(self, config: Optional[AppConfig] = None, session: Optional[requests.Session] = None):
        self.config = config or AppConfig()
        self.base = self.config.api_base.rstrip("/")
        self.session = session or requests.Session()

    # ---- core -----------------------------------------------------------
    def request(
        self,
        method: str,
        path: str,
        *,
        json_body: Optional[dict] = None,
        data: Optional[Dict[str, str]] = None,
        files: Optional[Dict[str, FileTuple]] = None,
    ) -> Any:
        url = f"{self.base}{path}"
        fields = sorted((json_body or data or {}).keys())
        logger.debug("API request: %s %s fields=%s", method, path, fields)
        try:
            resp = self.session.request(
                method,
                url,
                json=json_body,
                data=data,
                files=files,
                timeout=self.config.request_timeout,
            )
        except requests.RequestException as e:
            logger.warning("API request failed: %s %s (%s)", method, path, e)
            raise ApiError(0, str(e) or "Network error") from e

        if not resp.ok:
            message, payload = _error_message(resp)
            logger.warning("API error %s for %s %s: %s", resp.status_code, method, path, message)
            raise ApiError(resp.status_code, message, payload)

        try:
            return _parse_body(resp)
        except ValueError as e:
            raise ApiError(resp.status_code, f"Malformed JSON response: {e}") from e

    # ---- analysis -------------------------------------------------------
    def analyze_contract(self, payload: dict) -> dict:
        return self.request("POST", ANALYZE_PATH, json_body=payload)

    def analyze_contract_file(self, fields: Dict[str, str], file: FileTuple) -> dict:
        return self.request("POST", ANALYZE_UPLOAD_PATH, data=fields, files={"contractFile": file})

    def compare_contracts(self, first: str, second: str) -> dict:
        return self.request(
            "POST", COMPARE_PATH, json_body={"firstContract": first, "secondContract": second}
        )

    # ---- saved analyses -------------------------------------------------
    def list_analyses(self) -> List[dict]:
        out = self.request("GET", ANALYSES_PATH)
        return out if isinstance(out, list) else []

    def get_analysis(self, analysis_id: Union[int, str]) -> dict:
        return self.request("GET", f"{ANALYSES_PATH}/{analysis_id}")

    def save_analysis(self, payload: dict) -> dict:
        return self.request("POST", ANALYSES_PATH, json_body=payload)

    def delete_analysis(self, analysis_id: Union[int, str]) -> None:
        self.request("DELETE", f"{ANALYSES_PATH}/{analysis_id}")

    # ---- assistant ------------------------------------------------------
    def chat_messages(self) -> List[dict]:
        out = self.request("GET", CHAT_PATH)
        return out if isinstance(out, list) else []

    def send_chat_message(self, content: str) -> dict:
        return self.request("POST", CHAT_PATH, json_body={"role": "user", "content": content})

    # ---- misc -----------------------------------------------------------
    def ping(self) -> bool:
        try:
            r = self.session.request("GET", f"{self.base}{HEALTH_PATH}", timeout=3)
            return bool(r.ok)
        except requests.RequestException:
            return False
