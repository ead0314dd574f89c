"""Advisory text about a signature's visual style.

The export and drawing paths never depend on this module: the interaction
layer only sees the :class:`AdvisoryService` capability and converts every
failure into a static fallback message.
"""

from __future__ import annotations

import base64
import logging
from abc import ABC, abstractmethod
from typing import Optional

import requests

from ..exceptions.errors import AdvisoryError

logger = logging.getLogger(__name__)

ADVISORY_PROMPT = (
    "Briefly analyze the visual style of this digital signature in 2 sentences. "
    "Is it professional, creative, messy, or bold? Give a one-line tip for professional signing."
)
ANALYSIS_UNAVAILABLE = "Analysis unavailable."
ANALYSIS_FAILED = "Could not analyze signature at this time."


class AdvisoryService(ABC):
    """describe(image) -> text; may raise AdvisoryError."""

    @abstractmethod
    def describe(self, image_png: bytes) -> str:
        raise NotImplementedError


class GeminiAdvisoryClient(AdvisoryService):
    """Calls the Gemini ``generateContent`` REST endpoint with one inline PNG."""

    def __init__(self, *, api_key: str, model: str, endpoint: str,
                 timeout: float = 20.0, session: Optional[requests.Session] = None) -> None:
        self.api_key = api_key
        self.model = model
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    @property
    def url(self) -> str:
        return f"{self.endpoint}/{self.model}:generateContent"

    def describe(self, image_png: bytes) -> str:
        payload = {
            "contents": [{
                "parts": [
                    {"inline_data": {"mime_type": "image/png",
                                     "data": base64.b64encode(image_png).decode("ascii")}},
                    {"text": ADVISORY_PROMPT},
                ]
            }]
        }
        try:
            resp = self._session.post(
                self.url,
                json=payload,
                headers={"x-goog-api-key": self.api_key},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as e:
            raise AdvisoryError(f"Advisory request failed: {e}") from e
        except ValueError as e:
            raise AdvisoryError("Advisory response is not JSON") from e
        return self._extract_text(data)

    @staticmethod
    def _extract_text(data: dict) -> str:
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as e:
            raise AdvisoryError("Malformed advisory response") from e
        return "".join(p.get("text", "") for p in parts if isinstance(p, dict)).strip()


def build_advisory_client(cfg) -> Optional[AdvisoryService]:
    """Client from an AdvisoryConfig, or None when no API key is configured."""
    if not (cfg.api_key or "").strip():
        logger.debug("no advisory api key configured, analysis disabled")
        return None
    return GeminiAdvisoryClient(api_key=cfg.api_key.strip(), model=cfg.model,
                                endpoint=cfg.endpoint, timeout=float(cfg.timeout))
