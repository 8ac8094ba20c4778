from __future__ import annotations

import pytest

from bouncer.solvers import PacedFeasibleStrategy
from factories import build_state, person


def _paced(**params):
    params.setdefault("safety_z", 0.0)
    return PacedFeasibleStrategy(params)


def test_helper_that_breaks_feasibility_is_rejected():
    state = build_state([("a", 100), ("b", 500)], {"a": 0.9, "b": 0.5})

    decision = _paced().decide(state, person(0, a=True))

    assert not decision.accept
    assert decision.reasoning == "paced_helper_breaks_feasibility"
    assert decision.scoring["reject_feasible"] is True
    assert decision.scoring["accept_feasible"] is False


def test_helper_that_restores_feasibility_is_accepted():
    state = build_state([("b", 100)], {"b": 0.1}, admitted=5)

    decision = _paced().decide(state, person(0, b=True))

    assert decision.accept
    assert decision.reasoning == "paced_helper_restores_feasibility"


def test_endgame_compares_original_bottleneck():
    # a is the only unmet constraint but c, already met, is the tightest
    state = build_state([("a", 100), ("c", 5)], {"a": 0.5, "c": 0.01}, admitted=500,
                        admitted_attributes={"a": 0, "c": 5})

    decision = _paced().decide(state, person(0, a=True))

    assert decision.scoring["endgame_bottleneck"] == "c"
    assert decision.scoring["delta_slack"] == pytest.approx(-0.01)
    assert not decision.accept
    assert decision.reasoning == "paced_endgame_bottleneck_worsens"


def test_endgame_accepts_when_bottleneck_improves():
    state = build_state([("a", 400)], {"a": 0.5}, admitted=500, admitted_attributes={"a": 100})

    decision = _paced().decide(state, person(0, a=True))

    assert decision.accept
    assert decision.reasoning == "paced_endgame_bottleneck_improves"
    assert decision.scoring["delta_slack"] == pytest.approx(0.5)


def test_helper_accepted_only_if_min_slack_does_not_shrink():
    state = build_state([("a", 200), ("b", 200)], {"a": 0.3, "b": 0.3})
    strategy = _paced()

    both = strategy.decide(state, person(0, a=True, b=True))
    assert both.accept
    assert both.reasoning == "paced_helper_delta_slack"
    assert both.scoring["delta_slack"] == pytest.approx(0.7)

    one = strategy.decide(state, person(1, a=True))
    assert not one.accept
    assert one.reasoning == "paced_helper_worsens_slack"
    assert one.scoring["delta_slack"] == pytest.approx(-0.3)


def test_filler_must_leave_a_buffer():
    state = build_state([("a", 200), ("b", 200)], {"a": 0.3, "b": 0.3})

    decision = _paced().decide(state, person(0))
    assert not decision.accept
    assert decision.reasoning == "paced_filler_erodes_buffer"
    assert decision.scoring["filler_threshold"] == pytest.approx(100.3)

    relaxed = _paced(filler_margin=-1.0).decide(state, person(0))
    assert relaxed.accept
    assert relaxed.reasoning == "paced_filler_safe"


def test_all_minima_met_accepts_filler():
    state = build_state([("a", 10)], {"a": 0.3}, admitted=20, admitted_attributes={"a": 10})
    decision = _paced().decide(state, person(0))
    assert decision.accept
    assert decision.reasoning == "filler_minima_met"


def test_duals_variant_gates_helpers_on_value_when_many_constraints_unmet():
    state = build_state([("a", 200), ("b", 200), ("c", 200)], {"a": 0.3, "b": 0.3, "c": 0.3})
    strategy = _paced(use_duals=True, value_threshold=3.0)

    decision = strategy.decide(state, person(0, a=True))

    assert strategy.name == "PacedFeasibleDuals"
    assert not decision.accept
    assert decision.reasoning == "paced_duals_helper_low_value"
    assert decision.scoring["total_value"] == pytest.approx(2.5)


def test_duals_variant_is_aggressive_with_few_unmet_constraints():
    state = build_state([("a", 200), ("b", 200)], {"a": 0.3, "b": 0.3})

    decision = _paced(use_duals=True).decide(state, person(0, a=True))

    assert decision.accept
    assert decision.reasoning == "paced_duals_helper_few_unmet"
    assert decision.scoring["delta_slack"] < 0


def test_duals_variant_can_veto_a_safe_filler():
    state = build_state([("a", 200), ("b", 200)], {"a": 0.3, "b": 0.3})
    strategy = _paced(use_duals=True, filler_margin=-1.0, filler_value_threshold=0.1)

    decision = strategy.decide(state, person(0))

    assert not decision.accept
    assert decision.reasoning == "paced_duals_filler_low_value"


def test_name_without_duals():
    assert PacedFeasibleStrategy().name == "PacedFeasible"
