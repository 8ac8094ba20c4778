# ABOUTME: Probabilistic feasibility check for the remaining constraint deficits
# ABOUTME: Evaluates "can every minimum still be met?" under accept or reject hypotheses

import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional

from ..core.domain import AttributeStatistics, GameState, Person

# Smallest min-slack a non-helping candidate must leave behind to be let in.
FILLER_MIN_SLACK = 0.5


def safety_z_for_seats(seats_remaining: int) -> float:
    """Safety quantile schedule: loose early, tighter as seats run out."""
    if seats_remaining >= 600:
        return 0.90
    if seats_remaining >= 250:
        return 1.15
    return 1.35


def clamp_probability(value: Optional[float]) -> float:
    """Coerce a supplied frequency into [0, 1]; missing or NaN counts as 0."""
    if value is None:
        return 0.0
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value):
        return 0.0
    return min(1.0, max(0.0, value))


def compute_deficits(game_state: GameState) -> Dict[str, int]:
    """Remaining need per constraint, in constraint declaration order."""
    return game_state.constraint_shortage()


def all_minima_met(deficits: Mapping[str, int]) -> bool:
    return all(need <= 0 for need in deficits.values())


def helped_attributes(person: Person, deficits: Mapping[str, int]) -> List[str]:
    """Constrained attributes the person carries that still have positive need."""
    return [attr for attr, need in deficits.items() if need > 0 and person.has_attribute(attr)]


def constraint_slack(probability: float, seats: int, need: int, z: float):
    """Expected supply minus safety buffer minus need for one attribute."""
    expected = probability * seats
    sd = math.sqrt(max(0.0, probability * (1.0 - probability) * seats))
    slack = expected - z * sd - need
    return expected, sd, slack


@dataclass(frozen=True)
class AttributeFeasibility:
    need: int
    probability: float
    expected: float
    sd: float
    slack: float

    @property
    def feasible(self) -> bool:
        return self.slack >= 0


@dataclass(frozen=True)
class FeasibilityResult:
    feasible: bool
    seats_remaining: int
    safety_z: float
    min_slack: float
    min_slack_attribute: Optional[str]
    per_attribute: Dict[str, AttributeFeasibility] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            "feasible": self.feasible,
            "seats_remaining": self.seats_remaining,
            "safety_z": self.safety_z,
            "min_slack": self.min_slack,
            "min_slack_attribute": self.min_slack_attribute,
        }


class FeasibilityEvaluator:
    """Checks whether the remaining seats can still cover every deficit.

    For each constrained attribute with frequency p, the number of carriers among
    the remaining seats is treated as Binomial(seats, p) and compared, minus a
    Z * sd buffer, against the remaining need. The evaluator is stateless and the
    same inputs always produce the same result.
    """

    def __init__(self, safety_z: Optional[float] = None,
                 z_schedule: Callable[[int], float] = safety_z_for_seats):
        self.fixed_z = safety_z
        self.z_schedule = z_schedule

    def safety_z(self, seats_remaining: int) -> float:
        if self.fixed_z is not None:
            return self.fixed_z
        return self.z_schedule(seats_remaining)

    def evaluate(self, game_state: GameState, statistics: Optional[AttributeStatistics] = None,
                 person: Optional[Person] = None, accept: bool = False) -> FeasibilityResult:
        statistics = statistics or game_state.statistics
        hypothetical_accept = accept and person is not None

        seats = game_state.venue_capacity - game_state.admitted_count - (1 if hypothetical_accept else 0)
        seats = max(0, seats)
        z = self.safety_z(seats)

        feasible = True
        min_slack = math.inf
        min_attr = None
        per_attribute: Dict[str, AttributeFeasibility] = {}

        for attr, need in compute_deficits(game_state).items():
            if hypothetical_accept and need > 0 and person.has_attribute(attr):
                need -= 1

            p = clamp_probability(statistics.frequencies.get(attr))
            expected, sd, slack = constraint_slack(p, seats, need, z)
            per_attribute[attr] = AttributeFeasibility(need, p, expected, sd, slack)

            if slack < 0:
                feasible = False
            # Strict comparison keeps the first attribute in declaration order on ties
            if slack < min_slack:
                min_slack = slack
                min_attr = attr

        if min_attr is None:
            min_slack = 0.0

        return FeasibilityResult(
            feasible=feasible,
            seats_remaining=seats,
            safety_z=z,
            min_slack=min_slack,
            min_slack_attribute=min_attr,
            per_attribute=per_attribute,
        )


def evaluate_feasibility(game_state: GameState, person: Optional[Person] = None,
                         accept: bool = False) -> FeasibilityResult:
    """Module-level shortcut using the default Z schedule."""
    return FeasibilityEvaluator().evaluate(game_state, game_state.statistics, person, accept)
