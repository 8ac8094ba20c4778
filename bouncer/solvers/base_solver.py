# ABOUTME: Base solver with common game execution logic
# ABOUTME: Separates strategy from execution - clean architecture

import logging
from typing import Any, Dict, List, Optional, Union

from ..core import GameState, Person, Decision, GameResult, GameStatus
from ..core.api_client import BouncerAPIClient, BouncerAPIError, GameFinishedError, parse_person
from ..core.diagnostics import DiagnosticsSink, NullDiagnosticsSink
from ..core.local_simulator import LocalSimulatorClient
from ..core.strategy import DecisionStrategy


logger = logging.getLogger(__name__)

GameClient = Union[BouncerAPIClient, LocalSimulatorClient]


class BaseSolver:
    """Drives one game: fetch an arrival, ask the strategy, submit, sync state."""

    def __init__(self, strategy: DecisionStrategy, solver_id: str = "base",
                 api_client: Optional[GameClient] = None,
                 diagnostics: Optional[DiagnosticsSink] = None,
                 max_iterations: int = 25000):
        self.strategy = strategy
        self.solver_id = solver_id
        self.api_client = api_client or BouncerAPIClient()
        self.diagnostics = diagnostics or NullDiagnosticsSink()
        self.max_iterations = max_iterations
        self.decisions: List[Decision] = []

    def play_game(self, scenario: int) -> GameResult:
        """Execute a complete game using the configured strategy."""
        logger.info(f"Starting game - Solver: {self.solver_id}, Strategy: {self.strategy.name}, Scenario: {scenario}")

        game_state = self.api_client.start_new_game(scenario)
        self.decisions = []
        self.diagnostics.on_game_start(game_state)

        for c in game_state.constraints:
            freq = game_state.statistics.get_frequency(c.attribute)
            logger.info(f"📊 {c.attribute}: {freq:.3f} freq, need {c.min_count}")

        try:
            person = self.api_client.get_first_person(game_state)
        except GameFinishedError as e:
            logger.warning(f"[{self.solver_id}] Game finished before the first arrival: {e}")
            person = None
            self._finish_from_local_state(game_state)

        iteration_count = 0
        while person and game_state.can_continue() and iteration_count < self.max_iterations:
            iteration_count += 1
            person = self._play_turn(game_state, person)

            if person and person.index % 1000 == 0:
                progress_str = ', '.join(f"{k}: {v:.1%}" for k, v in game_state.constraint_progress().items())
                logger.debug(f"👥 P{person.index}: A{game_state.admitted_count}, "
                             f"R{game_state.rejected_count} | {progress_str}")

        if game_state.status == GameStatus.RUNNING:
            if iteration_count >= self.max_iterations:
                logger.warning(f"⚠️ [{self.solver_id}] Game ended due to iteration limit ({self.max_iterations})")
                game_state.complete_game(GameStatus.FAILED)
            else:
                self._finish_from_local_state(game_state)

        result = GameResult(
            game_state=game_state,
            decisions=self.decisions,
            solver_id=self.solver_id,
            strategy_name=self.strategy.name,
            strategy_params=self.strategy.get_params()
        )

        if result.success:
            logger.info(f"🎉 [{self.solver_id}] SUCCESS! Rejected {game_state.rejected_count} people")
        else:
            logger.error(f"❌ [{self.solver_id}] FAILED. Rejected {game_state.rejected_count}")

        for attr, summary in result.constraint_satisfaction_summary().items():
            satisfied = "✅" if summary["satisfied"] else "❌"
            shortage = f" (need {summary['shortage']} more)" if summary['shortage'] > 0 else ""
            logger.info(f"📊 {attr}: {summary['current']}/{summary['required']} {satisfied}{shortage}")

        self.diagnostics.on_game_end(result)
        return result

    def _play_turn(self, game_state: GameState, person: Person) -> Optional[Person]:
        """Decide on one person, submit it and return the next arrival (None when the game is over)."""
        verdict = self.strategy.decide(game_state, person)
        decision = Decision(person, verdict.accept, verdict.reasoning, verdict.scoring)

        try:
            response = self.api_client.decide_and_next(game_state, person.index, verdict.accept)
        except GameFinishedError as e:
            logger.info(f"🏁 [{self.solver_id}] Server reports game finished: {e}")
            self._finish_from_local_state(game_state)
            return None
        except BouncerAPIError as e:
            logger.error(f"❌ [{self.solver_id}] API error during decision submission: {e}")
            game_state.complete_game(GameStatus.FAILED)
            return None

        self.decisions.append(decision)
        game_state.update_decision(decision)
        self._sync_from_response(game_state, response)

        self.diagnostics.on_decision(person, decision, game_state)
        self.diagnostics.on_state_update(game_state)
        logger.debug(f"[{self.solver_id}] P{person.index} {'ACCEPT' if verdict.accept else 'REJECT'} "
                     f"({verdict.reasoning})")

        status = response.get("status", "running")
        if status == "running":
            try:
                return parse_person(response.get("nextPerson"))
            except BouncerAPIError as e:
                logger.error(f"❌ [{self.solver_id}] Unusable next person from server: {e}")
                game_state.complete_game(GameStatus.FAILED)
                return None

        if status == "completed":
            game_state.complete_game(GameStatus.COMPLETED)
        else:
            logger.error(f"❌ [{self.solver_id}] Game failed: {response.get('reason', 'unknown reason')}")
            game_state.complete_game(GameStatus.FAILED)
        return None

    def _sync_from_response(self, game_state: GameState, response: Dict[str, Any]):
        """Server counts are authoritative; local per-attribute tallies are kept as they are."""
        admitted = response.get("admittedCount")
        rejected = response.get("rejectedCount")
        if admitted is not None and admitted != game_state.admitted_count:
            logger.warning(f"⚠️ [{self.solver_id}] Admitted count diverged: local {game_state.admitted_count}, "
                           f"server {admitted}")
        if rejected is not None and rejected != game_state.rejected_count:
            logger.warning(f"⚠️ [{self.solver_id}] Rejected count diverged: local {game_state.rejected_count}, "
                           f"server {rejected}")
        game_state.sync_counts(admitted, rejected)

    def _finish_from_local_state(self, game_state: GameState):
        if game_state.status != GameStatus.RUNNING:
            return
        full = game_state.admitted_count >= game_state.venue_capacity
        if full and game_state.are_all_constraints_satisfied():
            game_state.complete_game(GameStatus.COMPLETED)
        else:
            game_state.complete_game(GameStatus.FAILED)

    def cleanup(self):
        """Clean up resources."""
        self.api_client.close()
