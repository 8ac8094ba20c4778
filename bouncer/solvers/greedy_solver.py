"""Deficit-greedy baseline strategy."""

from typing import Dict
from ..core import GameState, Person, StrategyDecision
from ..core.strategy import BaseDecisionStrategy
from ..engine.feasibility import helped_attributes


class DeficitGreedyStrategy(BaseDecisionStrategy):
    """Accepts anyone who helps an unmet constraint. Uses no statistics at all."""

    def __init__(self, strategy_params: dict = None):
        default_params = {
            'fill_when_minima_met': True,
        }
        if strategy_params:
            default_params.update(strategy_params)
        super().__init__(default_params)

    @property
    def name(self) -> str:
        return "DeficitGreedy"

    def evaluate_candidate(self, game_state: GameState, person: Person,
                           deficits: Dict[str, int]) -> StrategyDecision:
        helped = helped_attributes(person, deficits)
        scoring = {
            "helped_attributes": helped,
            "unmet_constraints": sum(1 for need in deficits.values() if need > 0),
        }
        if helped:
            return StrategyDecision(True, f"greedy_helps_{'+'.join(helped)}", scoring)
        return StrategyDecision(False, "greedy_no_unmet_helped", scoring)
