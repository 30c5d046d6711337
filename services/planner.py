# services/planner.py
"""
Pipeline orchestrators: build the request, call the provider with backoff,
interpret the answer and push the result into the store.

Both pipelines always settle to a renderable value. Any failure, expected
or not, becomes a Failure outcome carrying a placeholder, and the busy /
typing flag is cleared on every exit path.
"""

import logging
import time
from typing import Callable, Optional

from ai.gemini import GeminiClient, interpret_itinerary_response, read_chat_response
from ai.prompts import build_chat_request, build_itinerary_request
from core.config import Settings
from core.errors import PermanentProviderError, RetryExhaustedError
from core.models import (
    ChatMessage,
    Failure,
    Itinerary,
    Outcome,
    Speaker,
    TripQuery,
    UNREACHABLE_CHAT_REPLY,
    UNREACHABLE_ITINERARY,
    UNREADABLE_CHAT_REPLY,
    UNREADABLE_ITINERARY,
)
from core.state import (
    ChatReplied,
    ChatSent,
    ChatSettled,
    ItineraryCommitted,
    PlanningSettled,
    PlanningStarted,
    Store,
)
from services.backoff import call_with_backoff

log = logging.getLogger(__name__)


class _Pipeline:
    def __init__(
        self,
        client: GeminiClient,
        store: Store,
        max_retries: int = 3,
        backoff_base: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.store = store
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.sleep = sleep

    def _call(self, payload: dict) -> dict:
        return call_with_backoff(
            lambda: self.client.generate(payload),
            max_retries=self.max_retries,
            base=self.backoff_base,
            sleep=self.sleep,
        )


class ItineraryPipeline(_Pipeline):
    def submit(self, query: TripQuery) -> Outcome[Itinerary]:
        """Plan a trip. Clears the previous itinerary and commits the new one."""
        ticket = self.store.issue_ticket()
        self.store.dispatch(PlanningStarted(ticket))
        try:
            outcome = self._plan(query)
            self.store.dispatch(ItineraryCommitted(ticket, outcome.value))
            return outcome
        finally:
            self.store.dispatch(PlanningSettled(ticket))

    def _plan(self, query: TripQuery) -> Outcome[Itinerary]:
        log.info("Planning trip %s → %s", query.origin or "?", query.destination or "?")
        try:
            raw = self._call(build_itinerary_request(query))
        except RetryExhaustedError as e:
            return Failure(UNREACHABLE_ITINERARY, str(e))
        except PermanentProviderError as e:
            log.error("Planning request rejected: %s", e)
            return Failure(UNREADABLE_ITINERARY, str(e))
        except Exception as e:
            log.exception("Planning failed unexpectedly")
            return Failure(UNREADABLE_ITINERARY, f"{type(e).__name__}: {e}")
        return interpret_itinerary_response(raw)


class ChatPipeline(_Pipeline):
    def __init__(self, *args, window: Optional[int] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.window = window

    def send(self, text: str) -> Optional[Outcome[str]]:
        """
        Append the user's message, ask the provider, append the reply.
        Blank input is ignored (returns None, nothing is dispatched).
        """
        if not text or not text.strip():
            return None

        history = self.store.state.transcript + (ChatMessage(Speaker.USER, text),)
        self.store.dispatch(ChatSent(text))
        try:
            outcome = self._reply(history)
            self.store.dispatch(ChatReplied(outcome.value))
            return outcome
        finally:
            self.store.dispatch(ChatSettled())

    def _reply(self, history) -> Outcome[str]:
        try:
            raw = self._call(build_chat_request(history, self.window))
        except RetryExhaustedError as e:
            return Failure(UNREACHABLE_CHAT_REPLY, str(e))
        except PermanentProviderError as e:
            log.error("Chat request rejected: %s", e)
            return Failure(UNREADABLE_CHAT_REPLY, str(e))
        except Exception as e:
            log.exception("Chat request failed unexpectedly")
            return Failure(UNREADABLE_CHAT_REPLY, f"{type(e).__name__}: {e}")
        return read_chat_response(raw)


def build_pipelines(settings: Settings, store: Store, client: Optional[GeminiClient] = None):
    """Return (itinerary_pipeline, chat_pipeline) sharing one client and store."""
    client = client or GeminiClient(settings)
    opts = dict(max_retries=settings.max_retries, backoff_base=settings.backoff_base)
    return (
        ItineraryPipeline(client, store, **opts),
        ChatPipeline(client, store, window=settings.chat_window, **opts),
    )
