# ai/prompts.py
# ------------------------------------------------------------------------------
import textwrap
from typing import Optional, Sequence

from core.models import ChatMessage, Speaker, TRAVEL_STYLES, TripQuery

# ──────────────────────────────────────────────────────────────────────────────
# Output shape the provider is asked to follow. propertyOrdering is guidance
# for the generator; the interpreter validates field types, not key order.
# ──────────────────────────────────────────────────────────────────────────────
ITINERARY_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "destination": {"type": "STRING"},
        "days": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "day": {"type": "NUMBER"},
                    "title": {"type": "STRING"},
                    "activities": {"type": "ARRAY", "items": {"type": "STRING"}},
                    "cost": {"type": "NUMBER"},
                },
                "propertyOrdering": ["day", "title", "activities", "cost"],
            },
        },
    },
    "propertyOrdering": ["destination", "days"],
}

_ITINERARY_TEMPLATE = textwrap.dedent(
    """\
    Create a realistic and detailed travel itinerary.
    The trip is from {origin} to {destination}.
    The trip dates are from {start} to {end}.
    The budget is approximately INR {budget}.
    The traveler's style is focused on: {styles}.
    Please provide a comprehensive itinerary that includes the travel from the starting point to the destination, as well as the day-by-day activities at the destination.
    Please provide the itinerary as a JSON object with the following structure.
    The 'days' array should contain one object for each day of the trip. The first day should always be titled "Travel to Destination" and provide details on transportation and cost in INR.
    """
)

SYSTEM_PROMPT = (
    "You are a helpful travel assistant. Please answer questions in a clear and "
    "concise manner, using headings, subheadings, bullet points, and relevant "
    "emojis where appropriate. If you are suggesting a booking or a place, include "
    "a link to a related search on a major platform like Google, Skyscanner, or "
    "Booking.com for further information. Use markdown for all formatting."
)

# Speaker → provider role
_ROLES = {Speaker.USER: "user", Speaker.ASSISTANT: "model"}


def build_itinerary_prompt(query: TripQuery) -> str:
    """Natural-language instruction for the itinerary request.

    Blank fields fall back to generic phrasing instead of failing.
    """
    styles = [s for s in TRAVEL_STYLES if s in query.styles]
    styles += sorted(s for s in query.styles if s not in TRAVEL_STYLES)
    return _ITINERARY_TEMPLATE.format(
        origin=query.origin.strip() or "a starting location",
        destination=query.destination.strip() or "a new destination",
        start=query.start.isoformat() if query.start else "a flexible start date",
        end=query.end.isoformat() if query.end else "a flexible end date",
        budget=query.budget,
        styles=", ".join(styles) if styles else "a balanced mix of everything",
    )


def build_itinerary_request(query: TripQuery) -> dict:
    return {
        "contents": [{"role": "user", "parts": [{"text": build_itinerary_prompt(query)}]}],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": ITINERARY_SCHEMA,
        },
    }


def build_chat_request(transcript: Sequence[ChatMessage], window: Optional[int] = None) -> dict:
    """System persona first, then the transcript in order.

    ``window`` caps how many of the most recent messages go upstream; the
    caller keeps the full transcript for display.
    """
    recent = list(transcript)
    if window is not None and window > 0:
        recent = recent[-window:]
    return {
        "contents": [{"role": "user", "parts": [{"text": SYSTEM_PROMPT}]}]
        + [{"role": _ROLES[m.speaker], "parts": [{"text": m.text}]} for m in recent],
    }
