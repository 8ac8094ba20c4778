# ABOUTME: Decision-level JSONL stream for detailed offline analysis
# ABOUTME: Appends one line per decision with the strategy's scoring payload

import json
from pathlib import Path
from typing import Any, Dict, List

from ..core import Decision, GameResult, GameState, Person
from ..core.diagnostics import DiagnosticsSink


class DecisionStreamSink(DiagnosticsSink):
    """Logs individual decisions for detailed analysis."""

    def __init__(self, logs_directory: str = "game_logs", filename: str = "decision_stream.jsonl"):
        self.logs_directory = Path(logs_directory)
        self.logs_directory.mkdir(parents=True, exist_ok=True)
        self.decision_stream_file = self.logs_directory / filename

    def _append(self, record: Dict[str, Any]):
        with open(self.decision_stream_file, 'a') as f:
            f.write(json.dumps(record, default=str) + '\n')

    def on_game_start(self, game_state: GameState):
        self._append({
            "event": "game_start",
            "game_id": game_state.game_id,
            "scenario": game_state.scenario,
            "constraints": [{"attribute": c.attribute, "min_count": c.min_count} for c in game_state.constraints],
        })

    def on_decision(self, person: Person, decision: Decision, game_state: GameState):
        self._append({
            "event": "decision",
            "game_id": game_state.game_id,
            "timestamp": decision.timestamp.isoformat(),
            "person_index": person.index,
            "person_attributes": person.attributes,
            "decision": decision.accepted,
            "reasoning": decision.reasoning,
            "scoring": decision.scoring,
            "admitted": game_state.admitted_count,
            "rejected": game_state.rejected_count,
        })

    def on_game_end(self, result: GameResult):
        self._append({
            "event": "game_end",
            "game_id": result.game_state.game_id,
            "status": result.game_state.status.value,
            "admitted": result.game_state.admitted_count,
            "rejected": result.game_state.rejected_count,
        })

    def get_recent_decisions(self, limit: int = 100) -> List[Dict[str, Any]]:
        """Get recent decision records from the stream."""
        if not self.decision_stream_file.exists():
            return []

        with open(self.decision_stream_file, 'r') as f:
            lines = f.readlines()

        decisions = []
        for line in lines:
            try:
                record = json.loads(line.strip())
            except json.JSONDecodeError:
                continue
            if record.get("event") == "decision":
                decisions.append(record)
        return decisions[-limit:]
