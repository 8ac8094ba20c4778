# ABOUTME: Shadow price learner with one bounded price per constraint attribute
# ABOUTME: Rarity-aware seeding plus projected sub-gradient steps driven by slack

import logging
import math
from typing import Dict, Iterable, Mapping

from ..core.domain import AttributeStatistics, Constraint, VENUE_CAPACITY

logger = logging.getLogger(__name__)

SEEDING_POLICIES = ("rarity", "zero")

RARITY_PRICE_LOW = 0.5
RARITY_PRICE_HIGH = 5.0
MIN_SEED_FREQUENCY = 0.01
MISSING_SEED_FREQUENCY = 0.1
UNIFORM_SEED_PRICE = 2.5


class DualPriceTracker:
    """Owns the dual price map for one game.

    Sign convention: slack < 0 means the constraint is behind its statistical
    pace, so the update

        price <- clamp(price - learning_rate * slack / venue_capacity, min_dual, max_dual)

    raises the price when behind and lowers it (down to the floor) when ahead.
    Throttling is left to the caller.
    """

    def __init__(self, learning_rate: float = 0.1, min_dual: float = 0.0, max_dual: float = 20.0,
                 seeding: str = "rarity", venue_capacity: int = VENUE_CAPACITY):
        if seeding not in SEEDING_POLICIES:
            raise ValueError(f"Unknown dual seeding policy '{seeding}'. Available: {list(SEEDING_POLICIES)}")
        if min_dual > max_dual:
            raise ValueError(f"min_dual ({min_dual}) must not exceed max_dual ({max_dual})")

        self.learning_rate = learning_rate
        self.min_dual = min_dual
        self.max_dual = max_dual
        self.seeding = seeding
        self.venue_capacity = venue_capacity
        self._prices: Dict[str, float] = {}
        self.updates_applied = 0

    def _clamp(self, value: float) -> float:
        return max(self.min_dual, min(self.max_dual, value))

    def init(self, constraints: Iterable[Constraint], statistics: AttributeStatistics):
        attributes = [c.attribute for c in constraints]
        self._prices = {}
        self.updates_applied = 0

        if self.seeding == "zero" or not attributes:
            for attr in attributes:
                self._prices[attr] = self._clamp(0.0)
            return

        inverse = {}
        for attr in attributes:
            freq = statistics.frequencies.get(attr, MISSING_SEED_FREQUENCY)
            if freq is None or math.isnan(freq):
                freq = MISSING_SEED_FREQUENCY
            inverse[attr] = 1.0 / max(freq, MIN_SEED_FREQUENCY)

        low, high = min(inverse.values()), max(inverse.values())
        spread = high - low
        for attr, inv in inverse.items():
            if spread > 0:
                normalized = (inv - low) / spread
                price = RARITY_PRICE_LOW + (RARITY_PRICE_HIGH - RARITY_PRICE_LOW) * normalized
            else:
                price = UNIFORM_SEED_PRICE
            self._prices[attr] = self._clamp(price)

        logger.debug(f"Seeded dual prices: {self._prices}")

    def update(self, slacks: Mapping[str, float]):
        for attr, slack in slacks.items():
            if attr not in self._prices:
                continue
            if slack is None or math.isnan(slack):
                logger.warning(f"Ignoring NaN slack for '{attr}'")
                continue
            current = self._prices[attr]
            self._prices[attr] = self._clamp(current - self.learning_rate * slack / self.venue_capacity)
        self.updates_applied += 1

    def get(self, attribute: str) -> float:
        return self._prices.get(attribute, 0.0)

    def get_all(self) -> Dict[str, float]:
        return dict(self._prices)
