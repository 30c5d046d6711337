# core/models.py

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Annotated, Any, FrozenSet, Generic, Optional, Tuple, TypeVar, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, FiniteFloat, StrictStr, ValidationError

from core.errors import ItineraryParseError

T = TypeVar("T")

TRAVEL_STYLES = ["Adventure", "Relaxation", "Cultural", "Foodie", "Budget-Friendly", "Luxury"]

BUDGET_MIN = 5000
BUDGET_MAX = 100000
BUDGET_STEP = 1000
BUDGET_DEFAULT = 20000


@dataclass(frozen=True)
class TripQuery:
    """Snapshot of the planning form taken when the user submits it."""
    origin: str = ""
    destination: str = ""
    start: Optional[date] = None
    end: Optional[date] = None
    budget: int = BUDGET_DEFAULT          # INR
    styles: FrozenSet[str] = field(default_factory=frozenset)


def _number(value: Any) -> Any:
    # JSON numbers only; bools and numeric strings are not costs or day numbers.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected a number, got {value!r}")
    return value


class DayPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    day: Annotated[int, BeforeValidator(_number)]   # 1.0 is fine, 1.5 / Infinity are not
    title: StrictStr
    activities: Tuple[StrictStr, ...]
    cost: Annotated[FiniteFloat, BeforeValidator(_number)]


class Itinerary(BaseModel):
    model_config = ConfigDict(frozen=True)

    destination: StrictStr
    days: Tuple[DayPlan, ...] = ()

    @property
    def total_cost(self) -> float:
        return sum(d.cost for d in self.days)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")

    @classmethod
    def from_json(cls, text: str) -> "Itinerary":
        try:
            return cls.model_validate_json(text)
        except ValidationError as e:
            raise ItineraryParseError(f"Not a valid itinerary: {e}") from e


class Speaker(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ChatMessage:
    speaker: Speaker
    text: str


# ──────────────────────────────────────────────────────────────────────────────
# Pipeline outcomes
# ──────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Success(Generic[T]):
    value: T
    ok = True


@dataclass(frozen=True)
class Failure(Generic[T]):
    fallback: T
    cause: str
    ok = False

    @property
    def value(self) -> T:
        return self.fallback


Outcome = Union[Success[T], Failure[T]]


# ──────────────────────────────────────────────────────────────────────────────
# Fallback payloads
# ──────────────────────────────────────────────────────────────────────────────
def _failed_itinerary(message: str) -> Itinerary:
    return Itinerary(
        destination="Planning Failed",
        days=(DayPlan(day=1, title="Error", activities=(message,), cost=0),),
    )


UNREADABLE_ITINERARY = _failed_itinerary("Could not generate itinerary. Please try again.")
UNREACHABLE_ITINERARY = _failed_itinerary(
    "Could not connect to the planning service. Please check your network and try again."
)

UNREADABLE_CHAT_REPLY = "Sorry, I couldn't process that. Please try again."
UNREACHABLE_CHAT_REPLY = "I'm having trouble connecting to my service. Please try again later."

