# ABOUTME: Core module exports for clean imports
# ABOUTME: Provides main domain models, strategy interface and game clients

from .domain import (
    Person, Constraint, Decision, StrategyDecision, AttributeStatistics,
    GameState, GameResult, GameStatus, UnknownConstraintError,
    VENUE_CAPACITY, MAX_REJECTIONS
)
from .api_client import BouncerAPIClient, BouncerAPIError, GameFinishedError
from .diagnostics import DiagnosticsSink, NullDiagnosticsSink, CompositeSink, RecordingSink

__all__ = [
    "Person", "Constraint", "Decision", "StrategyDecision", "AttributeStatistics",
    "GameState", "GameResult", "GameStatus", "UnknownConstraintError",
    "VENUE_CAPACITY", "MAX_REJECTIONS",
    "BouncerAPIClient", "BouncerAPIError", "GameFinishedError",
    "DiagnosticsSink", "NullDiagnosticsSink", "CompositeSink", "RecordingSink",
]
