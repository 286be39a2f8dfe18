#!/usr/bin/env python3
"""
Translation backend interface and the DeepL implementation.

The sync engine only depends on TranslationBackend; DeeplBackend is the
HTTP client used by the CLI.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

import requests

from .errors import AuthError, BackendError, RateLimitedError
from .languages import source_locale as language_part

logger = logging.getLogger(__name__)

API_FREE = "free"
API_PAID = "paid"

API_URLS = {
    API_FREE: "https://api-free.deepl.com/v2/",
    API_PAID: "https://api.deepl.com/v2/",
}

ENDPOINT_TRANSLATE = "translate"
ENDPOINT_USAGE = "usage"

STATUS_FORBIDDEN = 403
STATUS_TOO_MANY_REQUESTS = 429


@dataclass
class Translation:
    """One translated text as returned by the backend."""
    text: str
    detected_source_locale: Optional[str] = None


@dataclass
class Usage:
    """Character quota of the current billing period."""
    character_count: int
    character_limit: int

    @property
    def remaining(self) -> int:
        return max(self.character_limit - self.character_count, 0)


class TranslationBackend(ABC):
    """Capability consumed by the sync engine."""

    @abstractmethod
    def translate(
        self,
        texts: Sequence[str],
        source_locale: str,
        target_locale: str,
        ignore_tags: Sequence[str] = (),
        glossary_id: Optional[str] = None,
    ) -> list[Translation]:
        """
        Translate a batch of texts.

        Args:
            texts: Texts to translate (already escaped)
            source_locale: Backend locale of the texts
            target_locale: Backend locale to translate into
            ignore_tags: XML tag names whose content must be returned untouched
            glossary_id: Optional backend glossary

        Returns:
            One Translation per input text, in order

        Raises:
            AuthError: credentials rejected
            RateLimitedError: too many requests
            BackendError: any other failure
        """
        pass

    @abstractmethod
    def usage(self) -> Usage:
        """Return the current character usage."""
        pass


class DeeplBackend(TranslationBackend):
    """
    DeepL REST API client.

    Uses JSON requests with `DeepL-Auth-Key` authentication. When ignore tags
    are given, XML tag handling is enabled and outline detection disabled so
    protected markup comes back unchanged.
    """

    def __init__(
        self,
        token: str,
        api_type: str = API_FREE,
        session: Optional[requests.Session] = None,
        timeout: float = 30,
    ):
        if api_type not in API_URLS:
            raise ValueError(
                f"API type {api_type} unknown please choose one of {API_FREE} or {API_PAID}"
            )
        self.token = token
        self.api_type = api_type
        self.base_url = API_URLS[api_type]
        self.session = session or requests.Session()
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"DeepL-Auth-Key {self.token}",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, endpoint: str, payload: Optional[dict] = None) -> dict:
        url = self.base_url + endpoint
        try:
            response = self.session.request(
                method,
                url,
                json=payload,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise BackendError(f"DeepL request failed: {e}") from e

        status = response.status_code
        if status != 200:
            logger.debug("DeepL response (%d): %s", status, response.text)
        if status == STATUS_FORBIDDEN:
            raise AuthError("invalid token", status=status)
        if status == STATUS_TOO_MANY_REQUESTS:
            raise RateLimitedError("too many requests", status=status)
        if status != 200:
            raise BackendError(f"DeepL returned {status} {response.reason}", status=status)

        try:
            return response.json()
        except ValueError as e:
            raise BackendError(f"Invalid DeepL response: {e}", status=status) from e

    def translate(
        self,
        texts: Sequence[str],
        source_locale: str,
        target_locale: str,
        ignore_tags: Sequence[str] = (),
        glossary_id: Optional[str] = None,
    ) -> list[Translation]:
        payload = {
            "text": list(texts),
            "source_lang": language_part(source_locale),
            "target_lang": target_locale,
        }
        if ignore_tags:
            payload["tag_handling"] = "xml"
            payload["ignore_tags"] = list(ignore_tags)
            payload["outline_detection"] = False
        if glossary_id:
            payload["glossary_id"] = glossary_id

        data = self._request("POST", ENDPOINT_TRANSLATE, payload)
        translations = [
            Translation(
                text=item.get("text", ""),
                detected_source_locale=item.get("detected_source_language"),
            )
            for item in data.get("translations", [])
        ]
        if len(translations) != len(texts):
            raise BackendError(
                f"DeepL returned {len(translations)} translations for {len(texts)} texts"
            )
        return translations

    def usage(self) -> Usage:
        data = self._request("GET", ENDPOINT_USAGE)
        return Usage(
            character_count=int(data.get("character_count", 0)),
            character_limit=int(data.get("character_limit", 0)),
        )
