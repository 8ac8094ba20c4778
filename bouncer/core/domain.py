# ABOUTME: Core domain models for the venue admission game
# ABOUTME: Clean separation of business logic from infrastructure concerns

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Any
from enum import Enum


VENUE_CAPACITY = 1000
MAX_REJECTIONS = 20000


class GameStatus(Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class UnknownConstraintError(KeyError):
    """Raised when an attribute is looked up that has no declared constraint."""

    def __init__(self, attribute: str):
        super().__init__(attribute)
        self.attribute = attribute

    def __str__(self) -> str:
        return f"No constraint declared for attribute '{self.attribute}'"


@dataclass(frozen=True)
class Person:
    """Represents a person arriving at the venue."""
    index: int
    attributes: Dict[str, bool]

    def has_attribute(self, attribute: str) -> bool:
        return bool(self.attributes.get(attribute, False))

    def true_attributes(self) -> List[str]:
        return [attr for attr, has_attr in self.attributes.items() if has_attr]


@dataclass(frozen=True)
class Constraint:
    """A required minimum count of admissions carrying one attribute."""
    attribute: str
    min_count: int

    def __post_init__(self):
        if self.min_count < 0:
            raise ValueError(f"min_count must be >= 0, got {self.min_count} for '{self.attribute}'")

    def is_satisfied(self, current_count: int) -> bool:
        return current_count >= self.min_count

    def shortage(self, current_count: int) -> int:
        return max(0, self.min_count - current_count)


@dataclass
class AttributeStatistics:
    """Marginal frequencies and pairwise correlations supplied at game start."""
    frequencies: Dict[str, float]
    correlations: Dict[str, Dict[str, float]] = field(default_factory=dict)

    def get_frequency(self, attribute: str) -> float:
        return self.frequencies.get(attribute, 0.0)

    def get_correlation(self, attr1: str, attr2: str) -> float:
        return self.correlations.get(attr1, {}).get(attr2, 0.0)


@dataclass
class Decision:
    """Represents a decision made about a person."""
    person: Person
    accepted: bool
    reasoning: str
    scoring: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def person_index(self) -> int:
        return self.person.index


@dataclass
class StrategyDecision:
    """What a strategy returns for one arrival: the verdict plus diagnostics."""
    accept: bool
    reasoning: str
    scoring: Dict[str, Any] = field(default_factory=dict)


@dataclass
class GameState:
    """Complete state of a game in progress.

    The decision engine only reads this record. It is mutated by the driving
    loop once per arrival, after the server has confirmed the decision.
    """
    game_id: str
    scenario: int
    constraints: List[Constraint]
    statistics: AttributeStatistics

    # Counters
    admitted_count: int = 0
    rejected_count: int = 0
    admitted_attributes: Dict[str, int] = field(default_factory=dict)

    # Limits
    venue_capacity: int = VENUE_CAPACITY
    max_rejections: int = MAX_REJECTIONS

    # Metadata
    status: GameStatus = GameStatus.RUNNING
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None

    def __post_init__(self):
        tracked = [c.attribute for c in self.constraints]
        tracked += [a for a in self.statistics.frequencies if a not in tracked]
        for attr in tracked:
            self.admitted_attributes.setdefault(attr, 0)

    @property
    def remaining_capacity(self) -> int:
        return max(0, self.venue_capacity - self.admitted_count)

    @property
    def people_processed(self) -> int:
        return self.admitted_count + self.rejected_count

    @property
    def rejection_ratio(self) -> float:
        return self.rejected_count / self.max_rejections

    @property
    def capacity_ratio(self) -> float:
        return self.admitted_count / self.venue_capacity

    def constraint_for(self, attribute: str) -> Constraint:
        for constraint in self.constraints:
            if constraint.attribute == attribute:
                return constraint
        raise UnknownConstraintError(attribute)

    def constraint_progress(self) -> Dict[str, float]:
        """Progress toward each constraint (0.0 to 1.0+)."""
        return {
            c.attribute: (self.admitted_attributes.get(c.attribute, 0) / c.min_count) if c.min_count else 1.0
            for c in self.constraints
        }

    def constraint_shortage(self) -> Dict[str, int]:
        """How many more people needed for each constraint."""
        return {
            c.attribute: c.shortage(self.admitted_attributes.get(c.attribute, 0))
            for c in self.constraints
        }

    def are_all_constraints_satisfied(self) -> bool:
        return all(
            c.is_satisfied(self.admitted_attributes.get(c.attribute, 0))
            for c in self.constraints
        )

    def update_decision(self, decision: Decision):
        """Apply a decision locally: totals plus per-attribute tallies."""
        if decision.accepted:
            self.admitted_count += 1
            for attr in decision.person.true_attributes():
                if attr in self.admitted_attributes:
                    self.admitted_attributes[attr] += 1
        else:
            self.rejected_count += 1

    def sync_counts(self, admitted_count: Optional[int] = None, rejected_count: Optional[int] = None):
        """Overwrite the totals with the server's authoritative values."""
        if admitted_count is not None:
            self.admitted_count = int(admitted_count)
        if rejected_count is not None:
            self.rejected_count = int(rejected_count)

    def can_continue(self) -> bool:
        return (
            self.status == GameStatus.RUNNING and
            self.admitted_count < self.venue_capacity and
            self.rejected_count < self.max_rejections
        )

    def complete_game(self, status: GameStatus, end_time: Optional[datetime] = None):
        """Mark game as completed."""
        self.status = status
        self.end_time = end_time or datetime.now()


@dataclass
class GameResult:
    """Final result of a completed game."""
    game_state: GameState
    decisions: List[Decision]
    solver_id: str
    strategy_name: str
    strategy_params: Dict[str, Any]

    @property
    def success(self) -> bool:
        return self.game_state.status == GameStatus.COMPLETED

    @property
    def total_decisions(self) -> int:
        return len(self.decisions)

    @property
    def acceptance_rate(self) -> float:
        if not self.decisions:
            return 0.0
        accepted = sum(1 for d in self.decisions if d.accepted)
        return accepted / len(self.decisions)

    @property
    def duration(self) -> float:
        """Game duration in seconds."""
        if not self.game_state.end_time:
            return 0.0
        return (self.game_state.end_time - self.game_state.start_time).total_seconds()

    def constraint_satisfaction_summary(self) -> Dict[str, Dict[str, Any]]:
        summary = {}
        for constraint in self.game_state.constraints:
            current = self.game_state.admitted_attributes.get(constraint.attribute, 0)
            summary[constraint.attribute] = {
                "current": current,
                "required": constraint.min_count,
                "satisfied": constraint.is_satisfied(current),
                "progress": current / constraint.min_count if constraint.min_count else 1.0,
                "shortage": constraint.shortage(current)
            }
        return summary
