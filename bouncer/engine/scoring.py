# ABOUTME: Values a candidate as the shadow prices they would help pay off, minus a seat cost
# ABOUTME: Seat cost is convex in venue utilization so late admissions must be worth more

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from ..core.domain import GameState, Person
from .feasibility import compute_deficits


@dataclass(frozen=True)
class PersonScore:
    total_value: float
    shadow_price_sum: float
    seat_cost: float
    helped_attributes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_value": self.total_value,
            "shadow_price_sum": self.shadow_price_sum,
            "seat_cost": self.seat_cost,
            "helped_attributes": list(self.helped_attributes),
        }


class PersonScorer:
    def __init__(self, cost_multiplier: float = 3.0, cost_exponent: float = 3.0):
        self.cost_multiplier = cost_multiplier
        self.cost_exponent = cost_exponent

    def seat_cost(self, game_state: GameState) -> float:
        utilization = 1.0 - game_state.remaining_capacity / game_state.venue_capacity
        return self.cost_multiplier * (utilization ** self.cost_exponent)

    def score(self, person: Person, dual_prices: Mapping[str, float], game_state: GameState) -> PersonScore:
        deficits = compute_deficits(game_state)

        helped = []
        shadow_sum = 0.0
        for attr, need in deficits.items():
            if need <= 0 or not person.has_attribute(attr):
                continue
            helped.append(attr)
            price = dual_prices.get(attr, 0.0)
            if price > 0:
                shadow_sum += price

        cost = self.seat_cost(game_state)
        return PersonScore(
            total_value=shadow_sum - cost,
            shadow_price_sum=shadow_sum,
            seat_cost=cost,
            helped_attributes=helped,
        )
