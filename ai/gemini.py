# ai/gemini.py
# ------------------------------------------------------------------------------
import json
import logging
from typing import Optional

import requests

from core.config import Settings
from core.errors import EnvelopeError, ItineraryParseError, TransientProviderError
from core.models import (
    Failure,
    Itinerary,
    Outcome,
    Success,
    UNREADABLE_CHAT_REPLY,
    UNREADABLE_ITINERARY,
)

log = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────────────
# Transport: one POST to generateContent
# ──────────────────────────────────────────────────────────────────────────────
class GeminiClient:
    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()

    def generate(self, payload: dict) -> dict:
        """
        Send one generateContent request and return the decoded envelope.
        - Network errors and non-2xx statuses raise TransientProviderError
        - A body that isn't JSON raises EnvelopeError
        """
        try:
            r = self.session.post(
                self.settings.endpoint,
                params={"key": self.settings.api_key},
                json=payload,
                timeout=self.settings.timeout,
            )
        except requests.RequestException as e:
            raise TransientProviderError(f"Request to {self.settings.model} failed: {e}") from e

        if not 200 <= r.status_code < 300:
            raise TransientProviderError(
                f"API call failed with status: {r.status_code}", status_code=r.status_code
            )

        try:
            return r.json()
        except ValueError as e:
            raise EnvelopeError(f"Response body is not JSON: {r.text[:200]!r}") from e


# ──────────────────────────────────────────────────────────────────────────────
# Response envelope
# ──────────────────────────────────────────────────────────────────────────────
def extract_text(raw) -> str:
    """First candidate → content → first part → text, or EnvelopeError."""
    candidates = raw.get("candidates") if isinstance(raw, dict) else None
    if not isinstance(candidates, list) or not candidates:
        raise EnvelopeError("Response has no candidates.")
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list) or not parts:
        raise EnvelopeError("First candidate has no content parts.")
    text = parts[0].get("text") if isinstance(parts[0], dict) else None
    if not isinstance(text, str) or not text:
        raise EnvelopeError("First part has no text.")
    return text


def parse_itinerary(text: str) -> Itinerary:
    raw_json = text.strip().strip("`").strip()
    if raw_json.startswith("json"):
        raw_json = raw_json[len("json"):]
    return Itinerary.from_json(raw_json)


def interpret_itinerary_response(raw) -> Outcome[Itinerary]:
    """
    Success with the parsed itinerary, or Failure carrying the
    "Planning Failed" placeholder. Neither case is retryable.
    """
    try:
        return Success(parse_itinerary(extract_text(raw)))
    except (EnvelopeError, ItineraryParseError) as e:
        log.error("Unusable itinerary response (%s): %.300s", e, json.dumps(raw, default=str))
        return Failure(UNREADABLE_ITINERARY, str(e))


def read_chat_response(raw) -> Outcome[str]:
    try:
        return Success(extract_text(raw))
    except EnvelopeError as e:
        log.error("Unusable chat response (%s): %.300s", e, json.dumps(raw, default=str))
        return Failure(UNREADABLE_CHAT_REPLY, str(e))


def interpret_chat_response(raw) -> str:
    """The reply text, or the apology when the envelope has none. Never raises."""
    return read_chat_response(raw).value
