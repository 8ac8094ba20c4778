# ABOUTME: Logging module for structured game data recording
# ABOUTME: Provides consistent JSON game logs and batch summaries

from .game_logger import GameLogger

__all__ = [
    "GameLogger",
]
