# ABOUTME: Closed-form solver for the single-variable scaled LP relaxation
# ABOUTME: Returns the admission probability plus slack and active-constraint diagnostics

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List

import numpy as np

from .scaled_lp import ScaledLPProblem

logger = logging.getLogger(__name__)

ACTIVE_TOLERANCE = 1e-6


@dataclass
class LPSolution:
    feasible: bool
    optimal_value: float
    admission_probability: float
    active_constraints: List[str] = field(default_factory=list)
    constraint_slacks: Dict[str, float] = field(default_factory=dict)
    solution_type: str = "optimal"
    iterations: int = 1
    solve_time_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "feasible": self.feasible,
            "optimal_value": self.optimal_value,
            "admission_probability": self.admission_probability,
            "active_constraints": list(self.active_constraints),
            "solution_type": self.solution_type,
            "solve_time_ms": self.solve_time_ms,
        }


class AnalyticalLPSolver:
    """With one variable the LP optimum is the tightest per-constraint ceiling.

    Ceilings come from the scaled capacities only; the tolerance band is kept on
    the problem for diagnostics and is not added to them.
    """

    name = "analytical"

    def solve(self, problem: ScaledLPProblem) -> LPSolution:
        started = time.perf_counter()
        attributes = [c.attribute for c in problem.constraints]
        current = problem.current
        capacity = problem.scaled_capacity
        contribution = problem.contribution

        if np.any(current > capacity):
            slacks = capacity - current
            logger.debug(f"LP infeasible at x=0 for person {problem.person_index}")
            return LPSolution(
                feasible=False,
                optimal_value=-math.inf,
                admission_probability=0.0,
                constraint_slacks=dict(zip(attributes, slacks.tolist())),
                solution_type="infeasible",
                iterations=1,
                solve_time_ms=(time.perf_counter() - started) * 1000,
            )

        x = 1.0
        helped = contribution > 0
        if np.any(helped):
            ceilings = np.maximum(0.0, (capacity[helped] - current[helped]) / contribution[helped])
            x = min(x, float(ceilings.min()))
        x = min(1.0, max(0.0, x))

        slacks = capacity - (current + x * contribution)
        active = [attr for attr, slack in zip(attributes, slacks) if abs(slack) < ACTIVE_TOLERANCE]

        return LPSolution(
            feasible=True,
            optimal_value=x,
            admission_probability=x,
            active_constraints=active,
            constraint_slacks=dict(zip(attributes, slacks.tolist())),
            solution_type="optimal",
            iterations=1,
            solve_time_ms=(time.perf_counter() - started) * 1000,
        )


SOLVERS = {
    AnalyticalLPSolver.name: AnalyticalLPSolver,
}


def solve_lp_problem(problem: ScaledLPProblem, solver_type: str = "analytical") -> LPSolution:
    if solver_type not in SOLVERS:
        raise ValueError(f"Unknown LP solver '{solver_type}'. Available: {list(SOLVERS)}")
    return SOLVERS[solver_type]().solve(problem)
