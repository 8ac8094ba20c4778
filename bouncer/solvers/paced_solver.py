"""Feasibility-paced admission strategy.

Every arrival is checked against two hypotheses, "reject" and "accept", using the
statistical feasibility evaluator:
- If rejecting keeps every minimum reachable but accepting breaks one, reject.
- If accepting restores feasibility from an infeasible reject state, accept.
- Helpers are accepted when they do not shrink the bottleneck slack. With a single
  unmet constraint left, the slack of the original bottleneck is compared directly.
- Fillers must leave a comfortable buffer behind.

With ``use_duals`` the policy also consults learned shadow prices.
"""

import logging
from typing import Any, Dict
from ..core import GameState, Person, StrategyDecision
from ..engine.feasibility import FeasibilityEvaluator, FeasibilityResult, FILLER_MIN_SLACK, helped_attributes
from .dual_pricing_solver import DualPricedStrategy


logger = logging.getLogger(__name__)


class PacedFeasibleStrategy(DualPricedStrategy):
    def __init__(self, strategy_params: dict = None):
        defaults = {
            # None selects the seat-based Z schedule
            'safety_z': None,
            'helper_eps': 0.0,
            'filler_margin': 0.3,
            'filler_min_slack': FILLER_MIN_SLACK,
            'fill_when_minima_met': True,
            # Dual blending
            'use_duals': False,
            'update_frequency': 25,
            'learning_rate': 0.1,
            'min_dual': 0.0,
            'max_dual': 10.0,
            'dual_seeding': 'rarity',
            'slack_safety_z': 1.15,
            'value_threshold': 0.5,
            'filler_value_threshold': 0.0,
            'aggressive_unmet_limit': 2,
            'cost_multiplier': 3.0,
            'cost_exponent': 3.0,
        }
        if strategy_params:
            defaults.update(strategy_params)
        super().__init__(defaults)
        safety_z = self.params.get('safety_z')
        self.evaluator = FeasibilityEvaluator(safety_z=None if safety_z is None else float(safety_z))

    @property
    def name(self) -> str:
        return "PacedFeasibleDuals" if self.params.get('use_duals') else "PacedFeasible"

    def evaluate_candidate(self, game_state: GameState, person: Person,
                           deficits: Dict[str, int]) -> StrategyDecision:
        helped = helped_attributes(person, deficits)
        unmet = sum(1 for need in deficits.values() if need > 0)

        on_reject = self.evaluator.evaluate(game_state, game_state.statistics, person, accept=False)
        on_accept = self.evaluator.evaluate(game_state, game_state.statistics, person, accept=True)

        scoring: Dict[str, Any] = {
            "helped_attributes": helped,
            "unmet_constraints": unmet,
            "reject_slack": on_reject.min_slack,
            "reject_bottleneck": on_reject.min_slack_attribute,
            "accept_slack": on_accept.min_slack,
            "accept_bottleneck": on_accept.min_slack_attribute,
            "reject_feasible": on_reject.feasible,
            "accept_feasible": on_accept.feasible,
            "seats_remaining": on_reject.seats_remaining,
        }

        use_duals = bool(self.params.get('use_duals'))
        value = None
        if use_duals:
            score = self._score(game_state, person)
            value = score.total_value
            scoring.update(self._dual_scoring(score))

        if helped:
            return self._decide_helper(on_reject, on_accept, unmet, value, scoring)
        return self._decide_filler(on_reject, on_accept, value, scoring)

    def _decide_helper(self, on_reject: FeasibilityResult, on_accept: FeasibilityResult,
                       unmet: int, value, scoring: Dict[str, Any]) -> StrategyDecision:
        if on_reject.feasible and not on_accept.feasible:
            return StrategyDecision(False, "paced_helper_breaks_feasibility", scoring)
        if not on_reject.feasible and on_accept.feasible:
            return StrategyDecision(True, "paced_helper_restores_feasibility", scoring)

        eps = float(self.params['helper_eps'])

        if unmet == 1:
            # Accepting can move the tightest constraint, so track the original bottleneck
            bottleneck = on_reject.min_slack_attribute
            accept_detail = on_accept.per_attribute.get(bottleneck)
            accept_slack = accept_detail.slack if accept_detail else on_accept.min_slack
            delta = accept_slack - on_reject.min_slack
            scoring["delta_slack"] = delta
            scoring["endgame_bottleneck"] = bottleneck
            if delta >= eps:
                return StrategyDecision(True, "paced_endgame_bottleneck_improves", scoring)
            return StrategyDecision(False, "paced_endgame_bottleneck_worsens", scoring)

        delta = on_accept.min_slack - on_reject.min_slack
        scoring["delta_slack"] = delta

        if value is not None:
            if unmet <= int(self.params['aggressive_unmet_limit']):
                return StrategyDecision(True, "paced_duals_helper_few_unmet", scoring)
            if value < float(self.params['value_threshold']):
                return StrategyDecision(False, "paced_duals_helper_low_value", scoring)

        if delta >= eps:
            return StrategyDecision(True, "paced_helper_delta_slack", scoring)
        return StrategyDecision(False, "paced_helper_worsens_slack", scoring)

    def _decide_filler(self, on_reject: FeasibilityResult, on_accept: FeasibilityResult,
                       value, scoring: Dict[str, Any]) -> StrategyDecision:
        threshold = max(float(self.params['filler_min_slack']),
                        on_reject.min_slack + float(self.params['filler_margin']))
        scoring["filler_threshold"] = threshold

        if not on_accept.feasible or on_accept.min_slack < threshold:
            return StrategyDecision(False, "paced_filler_erodes_buffer", scoring)
        if value is not None and value < float(self.params['filler_value_threshold']):
            return StrategyDecision(False, "paced_duals_filler_low_value", scoring)
        return StrategyDecision(True, "paced_filler_safe", scoring)
