# ABOUTME: Strategy interface and base classes for decision making
# ABOUTME: Clean abstraction that separates strategy from execution logic

from abc import ABC, abstractmethod
from typing import Dict, Any
from .domain import GameState, Person, StrategyDecision


class DecisionStrategy(ABC):
    """Abstract base class for decision strategies.

    One instance belongs to exactly one game. Strategies may keep counters or
    prices between arrivals, so they must not be shared across sessions.
    """

    def __init__(self, strategy_params: Dict[str, Any] = None):
        self.params = strategy_params or {}

    @abstractmethod
    def decide(self, game_state: GameState, person: Person) -> StrategyDecision:
        """Decide whether to admit the person given the current (read-only) state."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Strategy name for identification."""
        pass

    def get_params(self) -> Dict[str, Any]:
        """Get current strategy parameters."""
        return self.params.copy()


class BaseDecisionStrategy(DecisionStrategy):
    """Base implementation with the decisions every policy shares.

    A full venue is always refused. When every minimum is already met the
    remaining seats are filled unconditionally unless the strategy is built
    with ``fill_when_minima_met: false``. Everything else goes to
    ``evaluate_candidate``.
    """

    def decide(self, game_state: GameState, person: Person) -> StrategyDecision:
        if game_state.remaining_capacity <= 0:
            return StrategyDecision(False, "venue_full", {"phase": self.get_game_phase(game_state)})

        deficits = game_state.constraint_shortage()
        if self.params.get("fill_when_minima_met", True) and all(need <= 0 for need in deficits.values()):
            return StrategyDecision(True, "filler_minima_met", {"phase": self.get_game_phase(game_state)})

        return self.evaluate_candidate(game_state, person, deficits)

    @abstractmethod
    def evaluate_candidate(self, game_state: GameState, person: Person,
                           deficits: Dict[str, int]) -> StrategyDecision:
        pass

    def reset(self):
        """Clear per-game internal state. Most strategies have none."""
        pass

    def get_game_phase(self, game_state: GameState) -> str:
        """Determine current game phase."""
        capacity_ratio = game_state.capacity_ratio
        rejection_ratio = game_state.rejection_ratio

        if capacity_ratio < 0.3:
            return "early"
        elif capacity_ratio < 0.7:
            return "mid"
        elif rejection_ratio > 0.9:
            return "panic"
        else:
            return "late"
