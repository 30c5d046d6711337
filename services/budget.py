# services/budget.py

from dataclasses import dataclass

import pandas as pd

from core.models import Itinerary

WITHIN_BUDGET = "Within Budget"
OVER_BUDGET = "Over Budget"


@dataclass(frozen=True)
class BudgetSummary:
    total: float
    budget: float
    status: str

    @property
    def over(self) -> bool:
        return self.status == OVER_BUDGET


def summarize(itinerary: Itinerary, budget: float) -> BudgetSummary:
    total = itinerary.total_cost
    return BudgetSummary(
        total=total,
        budget=budget,
        status=OVER_BUDGET if total > budget else WITHIN_BUDGET,
    )


def chart_frame(itinerary: Itinerary) -> pd.DataFrame:
    """One row per day: name ("Day N"), cost and its share of the total in %."""
    df = pd.DataFrame(
        [{"name": f"Day {d.day}", "cost": d.cost} for d in itinerary.days],
        columns=["name", "cost"],
    )
    total = df["cost"].sum()
    df["share"] = (df["cost"] / total * 100).round(1) if total else 0.0
    return df
