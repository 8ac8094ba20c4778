# ABOUTME: Single game executor with clean separation of concerns
# ABOUTME: Handles configuration loading, client selection and result logging

import logging
from datetime import datetime
from typing import Dict, Any, Optional

from ..config import ConfigManager
from ..core import GameResult
from ..core.api_client import BouncerAPIClient
from ..core.diagnostics import DiagnosticsSink
from ..core.local_simulator import LocalSimulatorClient
from ..core.strategy import DecisionStrategy
from ..logging import GameLogger
from ..solvers import BaseSolver, create_strategy


logger = logging.getLogger(__name__)

MODES = ("local", "api")


class GameExecutor:
    """Executes single games with configuration-driven setup."""

    def __init__(self, config: Optional[ConfigManager] = None, logs_directory: Optional[str] = None,
                 save_logs: bool = True):
        self.config = config or ConfigManager()
        self.settings = self.config.get_settings()
        self.save_logs = save_logs
        self.game_logger = None
        if save_logs:
            logs_dir = logs_directory or self.settings["logging"]["game_logs_dir"]
            self.game_logger = GameLogger(logs_dir, int(self.settings["logging"].get("sample_decisions", 1000)))

    def create_strategy(self, strategy_name: str, scenario_id: int,
                        overrides: Optional[Dict[str, Any]] = None) -> DecisionStrategy:
        """Create a fresh strategy instance from its YAML config."""
        resolved = self.config.resolve_strategy(strategy_name, scenario_id)
        params = resolved["parameters"]
        if overrides:
            params.update(overrides)
        return create_strategy(resolved["strategy"], params)

    def create_client(self, mode: str = "local", seed: Optional[int] = None):
        if mode not in MODES:
            raise ValueError(f"Unknown mode '{mode}'. Available: {list(MODES)}")
        game = self.settings["game"]
        if mode == "local":
            return LocalSimulatorClient(seed=seed, config=self.config,
                                        venue_capacity=int(game["venue_capacity"]),
                                        max_rejections=int(game["max_rejections"]))
        api = self.settings["api"]
        return BouncerAPIClient(base_url=api["base_url"], player_id=api["player_id"],
                                timeout=int(api["timeout_seconds"]), max_retries=int(api["max_retries"]))

    def execute_game(self,
                     scenario_id: int,
                     strategy_name: str = 'paced_feasible',
                     solver_id: str = None,
                     mode: str = "local",
                     seed: Optional[int] = None,
                     strategy_overrides: Optional[Dict[str, Any]] = None,
                     diagnostics: Optional[DiagnosticsSink] = None) -> GameResult:
        """Execute a single game."""

        if solver_id is None:
            solver_id = f"{strategy_name}_{scenario_id}_{datetime.now().strftime('%H%M%S')}"

        logger.info(f"Executing game - Scenario: {scenario_id}, Strategy: {strategy_name}, "
                    f"Solver: {solver_id}, Mode: {mode}")

        overrides = dict(strategy_overrides or {})
        if seed is not None:
            overrides.setdefault("seed", seed)
        strategy = self.create_strategy(strategy_name, scenario_id, overrides)
        solver = BaseSolver(strategy, solver_id, api_client=self.create_client(mode, seed),
                            diagnostics=diagnostics)

        try:
            result = solver.play_game(scenario_id)
        finally:
            solver.cleanup()

        if self.game_logger:
            extra = {"mode": mode, "seed": seed}
            stats = getattr(strategy, "get_performance_stats", None)
            if stats:
                extra["strategy_stats"] = stats()
            self.game_logger.log_game_result(result, extra)

        logger.info(f"Game completed - {solver_id}: {'SUCCESS' if result.success else 'FAILED'}")
        return result
