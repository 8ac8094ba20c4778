# ABOUTME: Formulates the per-arrival single-variable LP relaxation on a progress schedule
# ABOUTME: Capacities scale with how far through the expected arrival stream the game is

from dataclasses import dataclass, field
from typing import Any, Dict, List

import numpy as np

from ..core.domain import GameState, Person

EXPECTED_TOTAL_ARRIVALS = 8000
TOLERANCE_FACTOR = 0.10


@dataclass(frozen=True)
class LPConstraint:
    attribute: str
    min_count: int
    current_admitted: int
    scaled_capacity: float
    tolerance: float
    person_contribution: int
    deficit_weight: float

    @property
    def effective_capacity(self) -> float:
        return self.scaled_capacity + self.tolerance


@dataclass
class ScaledLPProblem:
    """maximize x subject to current + x * contribution <= scaled_capacity + tolerance, 0 <= x <= 1."""
    person_index: int
    progress_ratio: float
    people_processed: int
    expected_total: int
    constraints: List[LPConstraint] = field(default_factory=list)

    @property
    def objective_weight(self) -> float:
        return float(sum(c.deficit_weight for c in self.constraints if c.person_contribution))

    @property
    def current(self) -> np.ndarray:
        return np.array([c.current_admitted for c in self.constraints], dtype=float)

    @property
    def scaled_capacity(self) -> np.ndarray:
        return np.array([c.scaled_capacity for c in self.constraints], dtype=float)

    @property
    def tolerance(self) -> np.ndarray:
        return np.array([c.tolerance for c in self.constraints], dtype=float)

    @property
    def contribution(self) -> np.ndarray:
        return np.array([c.person_contribution for c in self.constraints], dtype=float)

    def summary(self) -> Dict[str, Any]:
        return {
            "person_index": self.person_index,
            "progress_ratio": self.progress_ratio,
            "people_processed": self.people_processed,
            "objective_weight": self.objective_weight,
            "constraints": len(self.constraints),
            "helped": [c.attribute for c in self.constraints if c.person_contribution],
        }


class ScaledLPFormulator:
    def __init__(self, expected_total: int = EXPECTED_TOTAL_ARRIVALS,
                 tolerance_factor: float = TOLERANCE_FACTOR):
        if expected_total <= 0:
            raise ValueError(f"expected_total must be positive, got {expected_total}")
        self.expected_total = expected_total
        self.tolerance_factor = tolerance_factor

    def progress_ratio(self, game_state: GameState) -> float:
        return min(1.0, game_state.people_processed / self.expected_total)

    def formulate(self, game_state: GameState, person: Person) -> ScaledLPProblem:
        progress = self.progress_ratio(game_state)

        constraints = []
        for c in game_state.constraints:
            current = game_state.admitted_attributes.get(c.attribute, 0)
            scaled = progress * c.min_count
            constraints.append(LPConstraint(
                attribute=c.attribute,
                min_count=c.min_count,
                current_admitted=current,
                scaled_capacity=scaled,
                tolerance=self.tolerance_factor * c.min_count,
                person_contribution=1 if person.has_attribute(c.attribute) else 0,
                deficit_weight=max(0.0, scaled - current),
            ))

        return ScaledLPProblem(
            person_index=person.index,
            progress_ratio=progress,
            people_processed=game_state.people_processed,
            expected_total=self.expected_total,
            constraints=constraints,
        )


def admits_within_tolerance(problem: ScaledLPProblem) -> bool:
    """Would a full admission (x = 1) stay under every tolerance-widened capacity?"""
    if not problem.constraints:
        return True
    load = problem.current + problem.contribution
    return bool(np.all(load <= problem.scaled_capacity + problem.tolerance))
