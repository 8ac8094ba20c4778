# ABOUTME: Engine module exports
# ABOUTME: Feasibility, slack, dual prices, scoring and the scaled LP relaxation

from .feasibility import (
    FeasibilityEvaluator, FeasibilityResult, AttributeFeasibility,
    FILLER_MIN_SLACK, safety_z_for_seats, clamp_probability,
    compute_deficits, all_minima_met, helped_attributes, evaluate_feasibility
)
from .slack import SlackCalculator, SlackDetail
from .duals import DualPriceTracker
from .scoring import PersonScorer, PersonScore
from .scaled_lp import ScaledLPFormulator, ScaledLPProblem, LPConstraint, admits_within_tolerance
from .lp_solver import AnalyticalLPSolver, LPSolution, solve_lp_problem

__all__ = [
    "FeasibilityEvaluator", "FeasibilityResult", "AttributeFeasibility",
    "FILLER_MIN_SLACK", "safety_z_for_seats", "clamp_probability",
    "compute_deficits", "all_minima_met", "helped_attributes", "evaluate_feasibility",
    "SlackCalculator", "SlackDetail",
    "DualPriceTracker",
    "PersonScorer", "PersonScore",
    "ScaledLPFormulator", "ScaledLPProblem", "LPConstraint", "admits_within_tolerance",
    "AnalyticalLPSolver", "LPSolution", "solve_lp_problem",
]
