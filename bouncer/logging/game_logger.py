# ABOUTME: Structured game logging with consistent format
# ABOUTME: Single responsibility for game data persistence

import json
import logging
from pathlib import Path
from datetime import datetime
from typing import Dict, Any, List, Optional

from ..core import Decision, GameResult


logger = logging.getLogger(__name__)


class GameLogger:
    """Handles structured logging of game results."""

    def __init__(self, logs_directory: str = "game_logs", max_sampled_decisions: int = 1000):
        self.logs_directory = Path(logs_directory)
        self.logs_directory.mkdir(parents=True, exist_ok=True)
        self.max_sampled_decisions = max_sampled_decisions

    def log_game_result(self, result: GameResult, additional_data: Optional[Dict[str, Any]] = None) -> Path:
        """Log a complete game result to JSON file."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"game_{result.solver_id}_{timestamp}_{result.game_state.game_id[:8]}.json"
        filepath = self.logs_directory / filename

        state = result.game_state
        log_data = {
            # Metadata
            "log_version": "1.0",
            "timestamp": datetime.now().isoformat(),
            "solver_id": result.solver_id,
            "game_id": state.game_id,

            # Game info
            "scenario_id": state.scenario,
            "start_time": state.start_time.isoformat(),
            "end_time": state.end_time.isoformat() if state.end_time else None,
            "duration_seconds": result.duration,

            # Strategy
            "strategy_name": result.strategy_name,
            "strategy_params": result.strategy_params,

            # Constraints and statistics
            "constraints": [
                {"attribute": c.attribute, "min_count": c.min_count}
                for c in state.constraints
            ],
            "attribute_frequencies": state.statistics.frequencies,
            "attribute_correlations": state.statistics.correlations,

            # Results
            "status": state.status.value,
            "success": result.success,
            "admitted_count": state.admitted_count,
            "rejected_count": state.rejected_count,
            "total_decisions": result.total_decisions,
            "acceptance_rate": result.acceptance_rate,

            # Final state
            "final_admitted_attributes": state.admitted_attributes,
            "constraint_satisfaction": result.constraint_satisfaction_summary(),

            # Decision log (sample to avoid huge files)
            "decisions_sample": [
                self.decision_record(d) for d in self._sample_decisions(result.decisions)
            ]
        }

        if additional_data:
            log_data.update(additional_data)

        with open(filepath, 'w') as f:
            json.dump(log_data, f, indent=2, default=str)

        logger.info(f"💾 Game log saved: {filename}")
        return filepath

    @staticmethod
    def decision_record(decision: Decision) -> Dict[str, Any]:
        return {
            "person_index": decision.person.index,
            "attributes": decision.person.attributes,
            "decision": decision.accepted,
            "reasoning": decision.reasoning,
            "scoring": decision.scoring,
            "timestamp": decision.timestamp.isoformat()
        }

    def _sample_decisions(self, decisions: List[Decision]) -> List[Decision]:
        """Keep the first and last 200 decisions and an even sample of the middle."""
        max_decisions = self.max_sampled_decisions
        if len(decisions) <= max_decisions:
            return decisions

        edge = min(200, max_decisions // 4)
        if edge == 0:
            return decisions[:max_decisions]
        first_chunk = decisions[:edge]
        last_chunk = decisions[-edge:]
        middle_chunk = decisions[edge:-edge]
        middle_slots = max_decisions - 2 * edge

        if middle_chunk and middle_slots > 0:
            step = max(1, len(middle_chunk) // middle_slots)
            sampled_middle = middle_chunk[::step][:middle_slots]
        else:
            sampled_middle = []

        return first_chunk + sampled_middle + last_chunk

    def log_batch_summary(self, batch_results: List[GameResult], batch_metadata: Optional[Dict[str, Any]] = None) -> Path:
        """Log summary of batch results."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"batch_summary_{timestamp}.json"
        filepath = self.logs_directory / filename

        successful_games = [r for r in batch_results if r.success]
        by_scenario: Dict[int, Dict[str, Any]] = {}
        by_strategy: Dict[str, Dict[str, Any]] = {}

        for result in batch_results:
            scenario = result.game_state.scenario
            bucket = by_scenario.setdefault(scenario, {"total": 0, "successful": 0, "results": []})
            bucket["total"] += 1
            if result.success:
                bucket["successful"] += 1
            bucket["results"].append({
                "solver_id": result.solver_id,
                "success": result.success,
                "rejected_count": result.game_state.rejected_count,
                "duration": result.duration
            })

            bucket = by_strategy.setdefault(result.strategy_name, {"total": 0, "successful": 0, "results": []})
            bucket["total"] += 1
            if result.success:
                bucket["successful"] += 1
            bucket["results"].append({
                "solver_id": result.solver_id,
                "scenario": scenario,
                "success": result.success,
                "rejected_count": result.game_state.rejected_count
            })

        summary_data = {
            "log_version": "1.0",
            "timestamp": datetime.now().isoformat(),
            "batch_metadata": batch_metadata or {},
            "total_games": len(batch_results),
            "successful_games": len(successful_games),
            "success_rate": len(successful_games) / len(batch_results) if batch_results else 0,
            "best_result": None,
            "by_scenario": by_scenario,
            "by_strategy": by_strategy
        }

        if successful_games:
            best_result = min(successful_games, key=lambda r: r.game_state.rejected_count)
            summary_data["best_result"] = {
                "solver_id": best_result.solver_id,
                "scenario": best_result.game_state.scenario,
                "strategy_name": best_result.strategy_name,
                "rejected_count": best_result.game_state.rejected_count,
                "duration": best_result.duration,
                "strategy_params": best_result.strategy_params
            }

        with open(filepath, 'w') as f:
            json.dump(summary_data, f, indent=2, default=str)

        logger.info(f"💾 Batch summary saved: {filename}")
        return filepath
