# ABOUTME: Solver module exports
# ABOUTME: Admission strategy family, name registry and the game driving loop

from typing import Any, Dict, Optional, Type

from .base_solver import BaseSolver
from .greedy_solver import DeficitGreedyStrategy
from .paced_solver import PacedFeasibleStrategy
from .dual_pricing_solver import DualPricedStrategy, DualPricingStrategy
from .primal_solver import PrimalLPStrategy
from ..core.strategy import BaseDecisionStrategy


STRATEGY_REGISTRY: Dict[str, Type[BaseDecisionStrategy]] = {
    "deficit_greedy": DeficitGreedyStrategy,
    "paced_feasible": PacedFeasibleStrategy,
    "dual_pricing": DualPricingStrategy,
    "primal_lp": PrimalLPStrategy,
}


def create_strategy(strategy_key: str, params: Optional[Dict[str, Any]] = None) -> BaseDecisionStrategy:
    """Build a fresh strategy instance. One instance per game, never shared."""
    try:
        strategy_class = STRATEGY_REGISTRY[strategy_key]
    except KeyError:
        raise ValueError(f"Unknown strategy '{strategy_key}'. Available: {sorted(STRATEGY_REGISTRY)}")
    return strategy_class(params or {})


__all__ = [
    "BaseSolver",
    "DeficitGreedyStrategy",
    "PacedFeasibleStrategy",
    "DualPricedStrategy",
    "DualPricingStrategy",
    "PrimalLPStrategy",
    "STRATEGY_REGISTRY",
    "create_strategy",
]
