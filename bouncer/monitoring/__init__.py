# ABOUTME: Monitoring module with diagnostics sinks
# ABOUTME: Rich console reporting and JSONL decision streams

from .console_reporter import ConsoleReporter
from .decision_stream import DecisionStreamSink

__all__ = [
    "ConsoleReporter",
    "DecisionStreamSink",
]
