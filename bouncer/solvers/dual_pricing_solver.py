"""Shadow-price (dual pricing) admission strategy.

Principles:
- One bounded price per constraint, seeded by rarity and refreshed every few arrivals
  from the statistical slack of each constraint (behind schedule -> price up).
- A candidate is worth the prices of the unmet constraints they help, minus a
  convex seat cost that grows as the venue fills.
- Helpers and fillers face different value thresholds.
"""

import logging
from typing import Any, Dict, Optional
from ..core import GameState, Person, StrategyDecision
from ..core.strategy import BaseDecisionStrategy
from ..engine.duals import DualPriceTracker
from ..engine.scoring import PersonScore, PersonScorer
from ..engine.slack import SlackCalculator


logger = logging.getLogger(__name__)


class DualPricedStrategy(BaseDecisionStrategy):
    """Shared dual-price machinery: lazy seeding, throttled updates, scoring."""

    def __init__(self, strategy_params: dict = None):
        super().__init__(strategy_params)
        self._tracker: Optional[DualPriceTracker] = None
        self._slack_calculator = SlackCalculator(float(self.params.get('slack_safety_z', 1.15)))
        self._scorer = PersonScorer(
            cost_multiplier=float(self.params.get('cost_multiplier', 3.0)),
            cost_exponent=float(self.params.get('cost_exponent', 3.0)),
        )
        self._last_dual_update = 0

    def reset(self):
        self._tracker = None
        self._last_dual_update = 0

    @property
    def dual_prices(self) -> Dict[str, float]:
        return self._tracker.get_all() if self._tracker else {}

    def _refresh_duals(self, game_state: GameState) -> DualPriceTracker:
        if self._tracker is None:
            self._tracker = DualPriceTracker(
                learning_rate=float(self.params.get('learning_rate', 0.1)),
                min_dual=float(self.params.get('min_dual', 0.0)),
                max_dual=float(self.params.get('max_dual', 20.0)),
                seeding=self.params.get('dual_seeding', 'rarity'),
                venue_capacity=game_state.venue_capacity,
            )
            self._tracker.init(game_state.constraints, game_state.statistics)

        processed = game_state.people_processed
        if processed - self._last_dual_update >= int(self.params.get('update_frequency', 10)):
            slacks, _ = self._slack_calculator.slacks_for(game_state)
            self._tracker.update(slacks)
            self._last_dual_update = processed
            logger.debug(f"Dual prices at {processed} arrivals: "
                         + ', '.join(f"{a}={p:.3f}" for a, p in self._tracker.get_all().items()))
        return self._tracker

    def _score(self, game_state: GameState, person: Person) -> PersonScore:
        tracker = self._refresh_duals(game_state)
        return self._scorer.score(person, tracker.get_all(), game_state)

    def _dual_scoring(self, score: PersonScore) -> Dict[str, Any]:
        scoring = score.to_dict()
        scoring["dual_prices"] = self.dual_prices
        return scoring


class DualPricingStrategy(DualPricedStrategy):
    """Pure shadow pricing. Accepts when the candidate's value clears its threshold."""

    def __init__(self, strategy_params: dict = None):
        defaults = {
            'update_frequency': 10,
            'learning_rate': 0.15,
            'min_dual': 0.0,
            'max_dual': 20.0,
            'dual_seeding': 'rarity',
            'slack_safety_z': 1.15,
            'helper_threshold': 0.0,
            'filler_threshold': -0.5,
            # Only consulted when fill_when_minima_met is disabled
            'safe_filler_threshold': 0.8,
            'cost_multiplier': 3.0,
            'cost_exponent': 3.0,
            'fill_when_minima_met': True,
        }
        if strategy_params:
            defaults.update(strategy_params)
        super().__init__(defaults)

    @property
    def name(self) -> str:
        return "DualPricing"

    def evaluate_candidate(self, game_state: GameState, person: Person,
                           deficits: Dict[str, int]) -> StrategyDecision:
        score = self._score(game_state, person)
        scoring = self._dual_scoring(score)

        if all(need <= 0 for need in deficits.values()):
            threshold = float(self.params['safe_filler_threshold'])
            kind = "safe_filler"
        elif score.helped_attributes:
            threshold = float(self.params['helper_threshold'])
            kind = "helper"
        else:
            threshold = float(self.params['filler_threshold'])
            kind = "filler"

        scoring["threshold"] = threshold
        accept = score.total_value >= threshold
        verdict = "accept" if accept else "below_threshold"
        return StrategyDecision(accept, f"dual_{kind}_{verdict}", scoring)
