from __future__ import annotations

import io
import json

from rich.console import Console

from bouncer.core import CompositeSink, Decision, GameResult, GameStatus, RecordingSink
from bouncer.core.diagnostics import DiagnosticsSink
from bouncer.logging import GameLogger
from bouncer.monitoring import ConsoleReporter, DecisionStreamSink
from bouncer.monitoring.console_reporter import strongest_correlations
from factories import build_state, person


class ExplodingSink(DiagnosticsSink):
    def on_decision(self, person, decision, game_state):
        raise RuntimeError("sink failure")


def _finished_result(decisions=3):
    state = build_state([("young", 2), ("creative", 1)], {"young": 0.3, "creative": 0.06},
                        correlations={"young": {"creative": -0.4}, "creative": {"young": -0.4}})
    made = []
    for i in range(decisions):
        decision = Decision(person(i, young=bool(i % 2)), bool(i % 2), "test", {"step": i})
        state.update_decision(decision)
        made.append(decision)
    state.complete_game(GameStatus.FAILED)
    return GameResult(state, made, "solver_01", "DeficitGreedy", {"fill_when_minima_met": True})


def test_composite_sink_isolates_failures():
    recorder = RecordingSink()
    composite = CompositeSink(ExplodingSink(), recorder)
    state = build_state([("young", 2)], {"young": 0.3})

    composite.on_decision(person(0), Decision(person(0), False, "test"), state)

    assert recorder.decisions == [(0, False, "test", {})]


def test_console_reporter_renders_tables():
    buffer = io.StringIO()
    reporter = ConsoleReporter(console=Console(file=buffer, width=140), progress_every=1)
    result = _finished_result()

    reporter.on_game_start(result.game_state)
    reporter.on_decision(person(0), result.decisions[0], result.game_state)
    reporter.on_game_end(result)

    output = buffer.getvalue()
    assert "Constraints" in output
    assert "creative x young" in output
    assert "All minima satisfied? NO" in output
    assert "failed" in output


def test_strongest_correlations_dedupes_pairs():
    state = build_state([], {"a": 0.5, "b": 0.5, "c": 0.5},
                        correlations={"a": {"b": 0.1, "c": -0.7}, "b": {"a": 0.1}, "c": {"a": -0.7}})
    assert strongest_correlations(state.statistics) == [("a", "c", -0.7), ("a", "b", 0.1)]


def test_decision_stream_appends_jsonl(tmp_path):
    sink = DecisionStreamSink(str(tmp_path))
    result = _finished_result()

    sink.on_game_start(result.game_state)
    for decision in result.decisions:
        sink.on_decision(decision.person, decision, result.game_state)
    sink.on_game_end(result)

    lines = (tmp_path / "decision_stream.jsonl").read_text().splitlines()
    assert [json.loads(line)["event"] for line in lines] == ["game_start", "decision", "decision", "decision",
                                                            "game_end"]
    recent = sink.get_recent_decisions(limit=2)
    assert [r["person_index"] for r in recent] == [1, 2]
    assert recent[0]["scoring"] == {"step": 1}


def test_game_logger_writes_result_and_samples_decisions(tmp_path):
    logger = GameLogger(str(tmp_path), max_sampled_decisions=8)
    result = _finished_result(decisions=20)

    path = logger.log_game_result(result, {"strategy_stats": {"total_lp_solves": 0}})

    data = json.loads(path.read_text())
    assert data["strategy_name"] == "DeficitGreedy"
    assert data["status"] == "failed"
    assert data["total_decisions"] == 20
    assert data["strategy_stats"] == {"total_lp_solves": 0}
    sample = [d["person_index"] for d in data["decisions_sample"]]
    assert len(sample) <= 8
    assert sample[:2] == [0, 1]
    assert sample[-2:] == [18, 19]


def test_game_logger_tiny_sample_limit_is_respected(tmp_path):
    logger = GameLogger(str(tmp_path), max_sampled_decisions=2)
    result = _finished_result(decisions=50)

    data = json.loads(logger.log_game_result(result).read_text())

    assert data["total_decisions"] == 50
    assert [d["person_index"] for d in data["decisions_sample"]] == [0, 1]


def test_batch_summary_picks_fewest_rejections(tmp_path):
    logger = GameLogger(str(tmp_path))
    good = _finished_result()
    good.game_state.status = GameStatus.COMPLETED

    path = logger.log_batch_summary([good, _finished_result()], {"note": "test"})

    data = json.loads(path.read_text())
    assert data["total_games"] == 2
    assert data["successful_games"] == 1
    assert data["best_result"]["strategy_name"] == "DeficitGreedy"
    assert data["by_strategy"]["DeficitGreedy"]["total"] == 2
