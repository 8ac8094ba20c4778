# ABOUTME: Parallel runner for executing multiple independent games simultaneously
# ABOUTME: Clean implementation using ThreadPoolExecutor with proper resource management

import concurrent.futures
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Dict, Any, Optional
from dataclasses import dataclass

from ..core import AttributeStatistics, GameResult, GameState, GameStatus
from ..core.diagnostics import DiagnosticsSink
from .game_executor import GameExecutor


logger = logging.getLogger(__name__)


@dataclass
class GameTask:
    """Configuration for a single game task."""
    scenario_id: int
    strategy_name: str
    solver_id: str
    strategy_params: Optional[Dict[str, Any]] = None
    mode: str = "local"
    seed: Optional[int] = None


@dataclass
class BatchResult:
    """Results from a batch of parallel games."""
    tasks: List[GameTask]
    results: List[GameResult]
    successful_count: int
    total_duration: float
    best_result: Optional[GameResult] = None

    @property
    def success_rate(self) -> float:
        if not self.results:
            return 0.0
        return self.successful_count / len(self.results)


class ParallelRunner:
    """Runs multiple games in parallel. Every game gets its own strategy and client."""

    def __init__(self, max_workers: int = 4, executor: Optional[GameExecutor] = None,
                 diagnostics: Optional[DiagnosticsSink] = None):
        self.max_workers = max_workers
        self.executor = executor or GameExecutor()
        self.diagnostics = diagnostics

    def create_tasks(self,
                     scenarios: List[int],
                     strategies: List[str],
                     games_per_combination: int = 1,
                     mode: str = "local",
                     base_seed: Optional[int] = None) -> List[GameTask]:
        """Create game tasks for parallel execution."""
        tasks = []

        for scenario_id in scenarios:
            for strategy_name in strategies:
                for i in range(games_per_combination):
                    seed = None if base_seed is None else base_seed + len(tasks)
                    tasks.append(GameTask(
                        scenario_id=scenario_id,
                        strategy_name=strategy_name,
                        solver_id=f"{Path(strategy_name).name}_s{scenario_id}_g{i:02d}",
                        mode=mode,
                        seed=seed,
                    ))

        return tasks

    def execute_task(self, task: GameTask) -> GameResult:
        """Execute a single game task; failures become a FAILED result rather than killing the batch."""
        try:
            return self.executor.execute_game(
                task.scenario_id,
                task.strategy_name,
                task.solver_id,
                mode=task.mode,
                seed=task.seed,
                strategy_overrides=task.strategy_params,
                diagnostics=self.diagnostics,
            )
        except Exception as e:
            logger.error(f"Task {task.solver_id} failed: {e}")
            failed_state = GameState(
                game_id="failed",
                scenario=task.scenario_id,
                constraints=[],
                statistics=AttributeStatistics(frequencies={})
            )
            failed_state.complete_game(GameStatus.FAILED)

            return GameResult(
                game_state=failed_state,
                decisions=[],
                solver_id=task.solver_id,
                strategy_name=task.strategy_name,
                strategy_params=task.strategy_params or {}
            )

    def run_batch(self, tasks: List[GameTask]) -> BatchResult:
        """Execute a batch of tasks in parallel."""

        start_time = datetime.now()
        logger.info(f"🚀 Starting parallel batch: {len(tasks)} games, {self.max_workers} workers")

        results = []
        successful_count = 0
        best_result = None

        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            future_to_task = {pool.submit(self.execute_task, task): task for task in tasks}

            for future in concurrent.futures.as_completed(future_to_task):
                result = future.result()
                results.append(result)

                if result.success:
                    successful_count += 1
                    if (best_result is None or
                            result.game_state.rejected_count < best_result.game_state.rejected_count):
                        best_result = result

                status_emoji = "🎉" if result.success else "❌"
                logger.info(f"{status_emoji} {result.solver_id}: {result.game_state.rejected_count} rejections "
                            f"({result.duration:.1f}s) {'SUCCESS' if result.success else 'FAILED'}")

        total_duration = (datetime.now() - start_time).total_seconds()

        batch_result = BatchResult(
            tasks=tasks,
            results=results,
            successful_count=successful_count,
            total_duration=total_duration,
            best_result=best_result
        )

        logger.info(f"📈 Batch completed: {successful_count}/{len(tasks)} successful "
                    f"({batch_result.success_rate:.1%}) in {total_duration:.1f}s")

        if self.executor.game_logger and results:
            self.executor.game_logger.log_batch_summary(results, {
                "workers": self.max_workers,
                "total_duration": total_duration,
            })

        return batch_result
