# tests/test_planner.py

import datetime

import pytest

from core.errors import EnvelopeError, TransientProviderError
from core.models import (
    Speaker,
    TripQuery,
    UNREACHABLE_CHAT_REPLY,
    UNREACHABLE_ITINERARY,
    UNREADABLE_CHAT_REPLY,
    UNREADABLE_ITINERARY,
)
from services.budget import WITHIN_BUDGET, summarize
from services.planner import ChatPipeline, ItineraryPipeline, build_pipelines

from conftest import FakeClient, envelope, itinerary_envelope

GOA_QUERY = TripQuery(
    origin="Mumbai",
    destination="Goa",
    start=datetime.date(2024, 12, 1),
    end=datetime.date(2024, 12, 5),
    budget=20000,
    styles=frozenset({"Relaxation"}),
)

GOA_PLAN = {
    "destination": "Goa",
    "days": [
        {"day": 1, "title": "Travel to Destination", "activities": ["Train from Mumbai"], "cost": 4000},
        {"day": 2, "title": "North Goa beaches", "activities": ["Baga", "Anjuna"], "cost": 6000},
        {"day": 3, "title": "Spa and sunset", "activities": ["Ayurvedic massage"], "cost": 8000},
    ],
}

HTTP_500 = TransientProviderError("API call failed with status: 500", status_code=500)


def _itinerary(client, store, sleep):
    return ItineraryPipeline(client, store, sleep=sleep)


def _chat(client, store, sleep, window=None):
    return ChatPipeline(client, store, sleep=sleep, window=window)


# ──────────────────────────────────────────────────────────────────────────────
# Itinerary pipeline
# ──────────────────────────────────────────────────────────────────────────────
def test_goa_trip_within_budget(store, sleep):
    client = FakeClient(itinerary_envelope(GOA_PLAN))
    outcome = _itinerary(client, store, sleep).submit(GOA_QUERY)

    assert outcome.ok
    itin = store.state.itinerary
    assert itin == outcome.value
    assert len(itin.days) == 3
    assert itin.total_cost == 18000
    assert summarize(itin, GOA_QUERY.budget).status == WITHIN_BUDGET
    assert not store.state.planning
    assert sleep.delays == []


def test_server_errors_commit_planning_failed(store, sleep):
    client = FakeClient(HTTP_500)
    outcome = _itinerary(client, store, sleep).submit(GOA_QUERY)

    assert not outcome.ok
    assert store.state.itinerary == UNREACHABLE_ITINERARY
    assert store.state.itinerary.destination == "Planning Failed"
    assert len(client.payloads) == 4
    assert sleep.delays == [1, 2, 4]
    assert not store.state.planning


def test_recovers_after_two_server_errors(store, sleep):
    client = FakeClient(HTTP_500, HTTP_500, itinerary_envelope(GOA_PLAN))
    outcome = _itinerary(client, store, sleep).submit(GOA_QUERY)
    assert outcome.ok
    assert store.state.itinerary.destination == "Goa"
    assert sleep.delays == [1, 2]


@pytest.mark.parametrize(
    "raw",
    [{"candidates": []}, envelope("not json at all"), envelope('{"destination": "Goa"}')],
)
def test_unusable_responses_are_not_retried(store, sleep, raw):
    client = FakeClient(raw)
    outcome = _itinerary(client, store, sleep).submit(GOA_QUERY)
    assert store.state.itinerary == UNREADABLE_ITINERARY
    assert outcome.fallback == UNREADABLE_ITINERARY
    assert len(client.payloads) == 1
    assert sleep.delays == []


def test_non_json_body_falls_back_without_retry(store, sleep):
    client = FakeClient(EnvelopeError("Response body is not JSON"))
    _itinerary(client, store, sleep).submit(GOA_QUERY)
    assert store.state.itinerary == UNREADABLE_ITINERARY
    assert len(client.payloads) == 1


def test_busy_flag_is_set_while_in_flight(store, sleep):
    seen = []
    client = FakeClient(
        itinerary_envelope(GOA_PLAN),
        on_call=lambda: seen.append((store.state.planning, store.state.itinerary)),
    )
    assert not store.state.planning
    _itinerary(client, store, sleep).submit(GOA_QUERY)
    assert seen == [(True, None)]
    assert not store.state.planning


def test_unexpected_error_commits_planning_failed(store, sleep):
    client = FakeClient(KeyError("boom"))
    outcome = _itinerary(client, store, sleep).submit(GOA_QUERY)
    assert not outcome.ok
    assert "KeyError" in outcome.cause
    assert store.state.itinerary == UNREADABLE_ITINERARY
    assert not store.state.planning
    assert len(client.payloads) == 1


@pytest.mark.parametrize(
    "raw",
    [
        {"candidates": {"0": {"content": {"parts": [{"text": "{}"}]}}}},
        itinerary_envelope({"destination": "Goa", "days": [
            {"day": float("inf"), "title": "x", "activities": [], "cost": 0},
        ]}),
    ],
)
def test_malformed_shapes_settle_without_retry(store, sleep, raw):
    client = FakeClient(raw)
    _itinerary(client, store, sleep).submit(GOA_QUERY)
    assert len(client.payloads) == 1
    assert store.state.itinerary == UNREADABLE_ITINERARY
    assert not store.state.planning


def test_superseded_submission_does_not_commit(store, sleep):
    inner = _itinerary(FakeClient(itinerary_envelope({"destination": "Rome", "days": []})), store, sleep)

    # While the Goa request is in flight the user submits again (Rome).
    client = FakeClient(itinerary_envelope(GOA_PLAN), on_call=lambda: inner.submit(TripQuery()))
    _itinerary(client, store, sleep).submit(GOA_QUERY)

    assert store.state.itinerary.destination == "Rome"
    assert not store.state.planning


# ──────────────────────────────────────────────────────────────────────────────
# Chat pipeline
# ──────────────────────────────────────────────────────────────────────────────
def test_hotel_question_adds_user_then_assistant(store, sleep):
    client = FakeClient(envelope("🏨 **Taj Exotica**"))
    outcome = _chat(client, store, sleep).send("Suggest hotels in Goa")

    assert outcome.ok
    assert [(m.speaker, m.text) for m in store.state.transcript] == [
        (Speaker.USER, "Suggest hotels in Goa"),
        (Speaker.ASSISTANT, "🏨 **Taj Exotica**"),
    ]
    assert not store.state.typing


def test_outbound_request_includes_new_message(store, sleep):
    seen = []
    client = FakeClient(envelope("ok"), on_call=lambda: seen.append(store.state.typing))
    chat = _chat(client, store, sleep)
    chat.send("first")
    chat.send("second")

    last = client.payloads[-1]["contents"]
    assert [c["parts"][0]["text"] for c in last[1:]] == ["first", "ok", "second"]
    assert seen == [True, True]
    assert store.state.transcript[-2].text == "second"
    assert store.state.transcript[-1].speaker is Speaker.ASSISTANT


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_blank_input_is_ignored(store, sleep, text):
    client = FakeClient(envelope("never"))
    assert _chat(client, store, sleep).send(text) is None
    assert store.state.transcript == ()
    assert client.payloads == []


def test_chat_envelope_failure_replies_with_apology(store, sleep):
    client = FakeClient({"candidates": [{"content": {"parts": []}}]})
    outcome = _chat(client, store, sleep).send("Hello?")
    assert not outcome.ok
    assert store.state.transcript[-1].text == UNREADABLE_CHAT_REPLY
    assert len(client.payloads) == 1


def test_chat_gives_up_after_retries(store, sleep):
    client = FakeClient(HTTP_500)
    _chat(client, store, sleep).send("Hello?")
    assert store.state.transcript[-1].text == UNREACHABLE_CHAT_REPLY
    assert len(store.state.transcript) == 2
    assert sleep.delays == [1, 2, 4]
    assert not store.state.typing


def test_unexpected_error_replies_with_apology(store, sleep):
    client = FakeClient(KeyError("boom"))
    outcome = _chat(client, store, sleep).send("Hello?")
    assert not outcome.ok
    assert not store.state.typing
    assert [m.speaker for m in store.state.transcript] == [Speaker.USER, Speaker.ASSISTANT]
    assert store.state.transcript[-1].text == UNREADABLE_CHAT_REPLY


def test_chat_parts_as_object_replies_with_apology(store, sleep):
    client = FakeClient({"candidates": [{"content": {"parts": {"text": "hi"}}}]})
    outcome = _chat(client, store, sleep).send("Hello?")
    assert not outcome.ok
    assert store.state.transcript[-1].text == UNREADABLE_CHAT_REPLY


def test_reply_that_reads_like_the_apology_is_still_a_success(store, sleep):
    client = FakeClient(envelope(UNREADABLE_CHAT_REPLY))
    outcome = _chat(client, store, sleep).send("Say sorry")
    assert outcome.ok
    assert store.state.transcript[-1].text == UNREADABLE_CHAT_REPLY


def test_chat_window_limits_upstream_history(store, sleep):
    client = FakeClient(envelope("ok"))
    chat = _chat(client, store, sleep, window=2)
    for q in ["a", "b", "c"]:
        chat.send(q)
    assert len(store.state.transcript) == 6
    assert [c["parts"][0]["text"] for c in client.payloads[-1]["contents"][1:]] == ["ok", "c"]


def test_build_pipelines_uses_settings(settings, store):
    client = FakeClient(envelope("ok"))
    itinerary, chat = build_pipelines(settings, store, client=client)
    assert itinerary.client is chat.client is client
    assert itinerary.max_retries == settings.max_retries
    assert chat.window == settings.chat_window
