from __future__ import annotations

from typing import Dict, Iterable, Optional, Tuple

from bouncer.core import AttributeStatistics, Constraint, GameState, Person


def build_state(
    constraints: Iterable[Tuple[str, int]],
    frequencies: Dict[str, float],
    admitted: int = 0,
    rejected: int = 0,
    admitted_attributes: Optional[Dict[str, int]] = None,
    correlations: Optional[Dict[str, Dict[str, float]]] = None,
) -> GameState:
    state = GameState(
        game_id="test-game-0001",
        scenario=1,
        constraints=[Constraint(attr, count) for attr, count in constraints],
        statistics=AttributeStatistics(frequencies=dict(frequencies), correlations=correlations or {}),
    )
    state.admitted_count = admitted
    state.rejected_count = rejected
    for attr, count in (admitted_attributes or {}).items():
        state.admitted_attributes[attr] = count
    return state


def person(index: int = 0, **attributes: bool) -> Person:
    return Person(index=index, attributes=dict(attributes))
