from __future__ import annotations

import math

import pytest

from bouncer.engine.feasibility import (
    FeasibilityEvaluator,
    all_minima_met,
    clamp_probability,
    constraint_slack,
    evaluate_feasibility,
    helped_attributes,
    safety_z_for_seats,
)
from factories import build_state, person


def test_single_constraint_accept_is_roughly_break_even_before_buffer():
    state = build_state([("A", 500)], {"A": 0.5})
    evaluator = FeasibilityEvaluator()

    on_reject = evaluator.evaluate(state, state.statistics, person(0, A=True), accept=False)
    on_accept = evaluator.evaluate(state, state.statistics, person(0, A=True), accept=True)

    assert on_reject.seats_remaining == 1000
    assert on_reject.per_attribute["A"].need == 500
    assert on_reject.per_attribute["A"].expected == pytest.approx(500.0)

    detail = on_accept.per_attribute["A"]
    assert on_accept.seats_remaining == 999
    assert detail.need == 499
    assert detail.expected == pytest.approx(499.5)
    # expected - need is +0.5; only the safety buffer pushes it under zero
    assert detail.slack == pytest.approx(0.5 - 0.9 * math.sqrt(0.25 * 999))
    assert not on_accept.feasible
    assert on_accept.min_slack_attribute == "A"


def test_reject_hypothesis_never_reduces_any_deficit():
    state = build_state(
        [("a", 10), ("b", 20), ("c", 5)],
        {"a": 0.3, "b": 0.4, "c": 0.2},
        admitted=40,
        admitted_attributes={"a": 4, "b": 20, "c": 1},
    )
    candidate = person(1, a=True, b=True, c=True)

    result = FeasibilityEvaluator().evaluate(state, state.statistics, candidate, accept=False)

    assert {attr: d.need for attr, d in result.per_attribute.items()} == {"a": 6, "b": 0, "c": 4}
    assert result.seats_remaining == 960


def test_accept_hypothesis_reduces_only_owned_deficits_by_one_floored_at_zero():
    state = build_state(
        [("a", 10), ("b", 20), ("c", 5)],
        {"a": 0.3, "b": 0.4, "c": 0.2},
        admitted=40,
        admitted_attributes={"a": 4, "b": 20, "c": 1},
    )
    candidate = person(1, a=True, b=True, c=False)

    result = FeasibilityEvaluator().evaluate(state, state.statistics, candidate, accept=True)

    assert {attr: d.need for attr, d in result.per_attribute.items()} == {"a": 5, "b": 0, "c": 4}
    assert result.seats_remaining == 959


def test_accept_without_candidate_behaves_like_reject():
    state = build_state([("a", 10)], {"a": 0.3})
    evaluator = FeasibilityEvaluator()
    assert evaluator.evaluate(state, None, None, accept=True) == evaluator.evaluate(state, None, None, accept=False)


@pytest.mark.parametrize("p", [0.1, 0.3, 0.5, 0.9])
def test_slack_is_non_increasing_in_need(p):
    slacks = [constraint_slack(p, 500, need, 1.15)[2] for need in range(0, 400, 7)]
    assert all(later <= earlier for earlier, later in zip(slacks, slacks[1:]))


@pytest.mark.parametrize("p", [0.3, 0.5, 0.7])
def test_slack_is_non_decreasing_in_seats(p):
    slacks = [constraint_slack(p, seats, 100, 1.15)[2] for seats in range(10, 1001, 10)]
    assert all(later >= earlier for earlier, later in zip(slacks, slacks[1:]))


def test_evaluate_is_pure():
    state = build_state([("a", 300), ("b", 200)], {"a": 0.4, "b": 0.25}, admitted=100,
                        admitted_attributes={"a": 30, "b": 10})
    candidate = person(5, a=True)
    evaluator = FeasibilityEvaluator()

    first = evaluator.evaluate(state, state.statistics, candidate, accept=True)
    second = evaluator.evaluate(state, state.statistics, candidate, accept=True)

    assert first == second
    assert state.admitted_attributes == {"a": 30, "b": 10}
    assert state.admitted_count == 100


def test_no_constraints_reports_zero_slack_and_no_bottleneck():
    state = build_state([], {"a": 0.5})
    result = FeasibilityEvaluator().evaluate(state, state.statistics, person(0, a=True), accept=True)
    assert result.feasible
    assert result.min_slack == 0.0
    assert result.min_slack_attribute is None


def test_ties_keep_first_declared_constraint():
    state = build_state([("x", 100), ("y", 100)], {"x": 0.3, "y": 0.3})
    result = FeasibilityEvaluator().evaluate(state, state.statistics)
    assert result.per_attribute["x"].slack == result.per_attribute["y"].slack
    assert result.min_slack_attribute == "x"


def test_missing_nan_and_out_of_range_frequencies_are_clamped():
    state = build_state([("missing", 10), ("nan", 10), ("high", 10)], {"nan": float("nan"), "high": 1.7})
    result = FeasibilityEvaluator().evaluate(state, state.statistics)

    assert result.per_attribute["missing"].probability == 0.0
    assert result.per_attribute["missing"].slack == -10
    assert result.per_attribute["nan"].probability == 0.0
    assert result.per_attribute["high"].probability == 1.0
    assert result.per_attribute["high"].sd == 0.0
    assert clamp_probability(None) == 0.0
    assert clamp_probability(-0.2) == 0.0


def test_full_venue_floors_seats_at_zero():
    state = build_state([("a", 10)], {"a": 0.5}, admitted=1000, admitted_attributes={"a": 4})
    result = FeasibilityEvaluator().evaluate(state, state.statistics, person(0, a=True), accept=True)
    assert result.seats_remaining == 0
    assert result.per_attribute["a"].slack == pytest.approx(-5.0)


def test_safety_z_schedule_and_fixed_override():
    assert safety_z_for_seats(1000) == 0.90
    assert safety_z_for_seats(600) == 0.90
    assert safety_z_for_seats(599) == 1.15
    assert safety_z_for_seats(250) == 1.15
    assert safety_z_for_seats(249) == 1.35

    state = build_state([("a", 100)], {"a": 0.5})
    fixed = FeasibilityEvaluator(safety_z=0.0).evaluate(state, state.statistics)
    assert fixed.safety_z == 0.0
    assert fixed.min_slack == pytest.approx(400.0)


def test_helper_and_minima_helpers():
    deficits = {"a": 3, "b": 0, "c": 1}
    assert helped_attributes(person(0, a=True, b=True), deficits) == ["a"]
    assert helped_attributes(person(0, b=True), deficits) == []
    assert not all_minima_met(deficits)
    assert all_minima_met({"a": 0, "b": 0})
    assert all_minima_met({})


def test_module_shortcut_matches_default_evaluator():
    state = build_state([("a", 300)], {"a": 0.4}, admitted=100, admitted_attributes={"a": 20})
    candidate = person(0, a=True)
    assert evaluate_feasibility(state, candidate, accept=True) == \
        FeasibilityEvaluator().evaluate(state, state.statistics, candidate, accept=True)
    assert evaluate_feasibility(state).to_dict()["seats_remaining"] == 900
