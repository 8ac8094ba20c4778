# ABOUTME: Runner module for executing games
# ABOUTME: Provides parallel and single game execution capabilities

from .game_executor import GameExecutor
from .parallel_runner import ParallelRunner, GameTask, BatchResult

__all__ = [
    "GameExecutor",
    "ParallelRunner",
    "GameTask",
    "BatchResult",
]
