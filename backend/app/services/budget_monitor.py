"""Budget monitor — advisory check, never blocks a booking."""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from app.models.event import Event
from app.money import to_money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BudgetWarning:
    event_id: int
    budget: Decimal
    total_cost: Decimal

    @property
    def overrun(self) -> Decimal:
        return self.total_cost - self.budget

    @property
    def message(self) -> str:
        return f"Total cost {self.total_cost} exceeds declared budget {self.budget} by {self.overrun}"


def check_budget(event: Event, total_cost: Decimal) -> Optional[BudgetWarning]:
    """Return a warning when ``total_cost`` is above the event's declared budget."""
    if event.budget is None:
        return None
    budget = to_money(event.budget)
    if total_cost <= budget:
        return None
    warning = BudgetWarning(event_id=event.event_id, budget=budget, total_cost=total_cost)
    logger.warning("Budget overrun on event %s: %s", event.event_id, warning.message)
    return warning
