# ABOUTME: Diagnostics sink interface injected into the game loop
# ABOUTME: Null, fan-out and in-memory recording implementations

import logging
from typing import Any, Dict, List, Tuple

from .domain import Decision, GameResult, GameState, Person

logger = logging.getLogger(__name__)


class DiagnosticsSink:
    """Receives per-game and per-decision observability events. Every hook is optional."""

    def on_game_start(self, game_state: GameState):
        pass

    def on_decision(self, person: Person, decision: Decision, game_state: GameState):
        pass

    def on_state_update(self, game_state: GameState):
        pass

    def on_game_end(self, result: GameResult):
        pass


class NullDiagnosticsSink(DiagnosticsSink):
    pass


class CompositeSink(DiagnosticsSink):
    """Fans every event out to several sinks; one failing sink does not silence the others."""

    def __init__(self, *sinks: DiagnosticsSink):
        self.sinks = list(sinks)

    def _dispatch(self, method: str, *args):
        for sink in self.sinks:
            try:
                getattr(sink, method)(*args)
            except Exception as e:
                logger.error(f"Diagnostics sink {type(sink).__name__}.{method} failed: {e}")

    def on_game_start(self, game_state: GameState):
        self._dispatch("on_game_start", game_state)

    def on_decision(self, person: Person, decision: Decision, game_state: GameState):
        self._dispatch("on_decision", person, decision, game_state)

    def on_state_update(self, game_state: GameState):
        self._dispatch("on_state_update", game_state)

    def on_game_end(self, result: GameResult):
        self._dispatch("on_game_end", result)


class RecordingSink(DiagnosticsSink):
    """Keeps every event in memory."""

    def __init__(self):
        self.games_started: List[str] = []
        self.decisions: List[Tuple[int, bool, str, Dict[str, Any]]] = []
        self.state_updates: List[Tuple[int, int]] = []
        self.results: List[GameResult] = []

    def on_game_start(self, game_state: GameState):
        self.games_started.append(game_state.game_id)

    def on_decision(self, person: Person, decision: Decision, game_state: GameState):
        self.decisions.append((person.index, decision.accepted, decision.reasoning, dict(decision.scoring)))

    def on_state_update(self, game_state: GameState):
        self.state_updates.append((game_state.admitted_count, game_state.rejected_count))

    def on_game_end(self, result: GameResult):
        self.results.append(result)
