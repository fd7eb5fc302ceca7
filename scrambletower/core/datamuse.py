"""HTTP client for the Datamuse word API."""

from __future__ import annotations

import logging
from typing import List, Optional

import requests

from scrambletower.core.config import (
    DATAMUSE_URL,
    DEFINITION_NOT_AVAILABLE,
    DEFINITION_NOT_FOUND,
    REQUEST_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)


class DatamuseClient:
    """Word and definition lookups against https://api.datamuse.com.

    ``lookup_words`` raises ``requests.RequestException`` (or ``ValueError`` for
    a non-JSON body) so callers can pick their own fallback.
    ``lookup_definition`` never raises.
    """

    def __init__(
        self,
        base_url: str = DATAMUSE_URL,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, params: dict) -> list:
        response = self.session.get(self.base_url, params=params, timeout=self.timeout)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, list):
            raise ValueError(f"Unexpected Datamuse payload: {type(data).__name__}")
        return data

    def lookup_words(self, max_results: int, topic: Optional[str] = None, pattern: str = "?????") -> List[dict]:
        """Return ``[{"word": ..., "score": ...}, ...]`` matching the spelling pattern."""
        params = {"sp": pattern, "max": max_results}
        if topic:
            params["topics"] = topic
        return [item for item in self._get(params) if isinstance(item, dict)]

    def lookup_definition(self, word: str) -> str:
        try:
            data = self._get({"sp": word, "md": "d", "max": 1})
        except (requests.RequestException, ValueError) as e:
            logger.warning("Definition lookup failed for %r: %s", word, e)
            return DEFINITION_NOT_AVAILABLE

        if not data or not isinstance(data[0], dict) or not data[0].get("defs"):
            return DEFINITION_NOT_AVAILABLE
        # Entries look like "n\tthe fruit of an apple tree"
        parts = str(data[0]["defs"][0]).split("\t", 1)
        if len(parts) < 2 or not parts[1].strip():
            return DEFINITION_NOT_FOUND
        return parts[1].strip()
