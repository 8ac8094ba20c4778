# ABOUTME: Per-constraint slack at the current state with a fixed safety quantile
# ABOUTME: Feeds the dual price updates of the shadow-pricing strategies

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..core.domain import AttributeStatistics, GameState
from .feasibility import clamp_probability, constraint_slack

DEFAULT_SAFETY_Z = 1.15


@dataclass(frozen=True)
class SlackDetail:
    attribute: str
    slack: float
    expected: float
    safety_buffer: float
    remaining_need: int
    probability: float


class SlackCalculator:
    """Computes expected supply minus buffer minus need on the current seats."""

    def __init__(self, safety_z: float = DEFAULT_SAFETY_Z):
        self.safety_z = safety_z

    def slack_for(self, attribute: str, game_state: GameState,
                  statistics: Optional[AttributeStatistics] = None) -> SlackDetail:
        # Raises UnknownConstraintError for undeclared attributes
        constraint = game_state.constraint_for(attribute)
        statistics = statistics or game_state.statistics

        need = constraint.shortage(game_state.admitted_attributes.get(attribute, 0))
        seats = game_state.remaining_capacity
        p = clamp_probability(statistics.frequencies.get(attribute))
        expected, sd, slack = constraint_slack(p, seats, need, self.safety_z)

        return SlackDetail(
            attribute=attribute,
            slack=slack,
            expected=expected,
            safety_buffer=self.safety_z * sd,
            remaining_need=need,
            probability=p,
        )

    def slacks_for(self, game_state: GameState,
                   statistics: Optional[AttributeStatistics] = None) -> Tuple[Dict[str, float], List[SlackDetail]]:
        details = [self.slack_for(c.attribute, game_state, statistics) for c in game_state.constraints]
        return {d.attribute: d.slack for d in details}, details
