"""Primal LP strategy with randomized rounding.

Each arrival is modelled as a one-variable LP: maximize the admission probability x
such that every constraint stays on its progress-scaled schedule. The person is then
admitted with probability x*.
"""

import logging
import random
from typing import Any, Dict, List, Tuple

import numpy as np

from ..core import GameState, Person, StrategyDecision
from ..core.strategy import BaseDecisionStrategy
from ..engine.lp_solver import LPSolution, solve_lp_problem
from ..engine.scaled_lp import ScaledLPFormulator, admits_within_tolerance


logger = logging.getLogger(__name__)


class PrimalLPStrategy(BaseDecisionStrategy):
    def __init__(self, strategy_params: dict = None):
        defaults = {
            'expected_total': 8000,
            'tolerance_factor': 0.10,
            'min_probability': 0.001,
            'lp_solver': 'analytical',
            'seed': None,
            'fill_when_minima_met': True,
        }
        if strategy_params:
            defaults.update(strategy_params)
        super().__init__(defaults)
        self.formulator = ScaledLPFormulator(
            expected_total=int(self.params['expected_total']),
            tolerance_factor=float(self.params['tolerance_factor']),
        )
        self.rng = random.Random(self.params.get('seed'))
        self.reset()

    @property
    def name(self) -> str:
        return "PrimalLP"

    def reset(self):
        self.total_lp_solves = 0
        self.total_solve_time_ms = 0.0
        self._admissions_by_probability: List[Tuple[float, bool]] = []

    def evaluate_candidate(self, game_state: GameState, person: Person,
                           deficits: Dict[str, int]) -> StrategyDecision:
        problem = self.formulator.formulate(game_state, person)
        solution = solve_lp_problem(problem, self.params['lp_solver'])
        self.total_lp_solves += 1
        self.total_solve_time_ms += solution.solve_time_ms

        scoring = self._lp_scoring(problem, solution)
        scoring["within_tolerance"] = admits_within_tolerance(problem)

        if not solution.feasible:
            return StrategyDecision(False, "primal_lp_infeasible", scoring)

        probability = min(1.0, max(0.0, solution.admission_probability))
        if probability < float(self.params['min_probability']):
            accept = False
            reasoning = "primal_probability_below_min"
        else:
            draw = self.rng.random()
            accept = draw < probability
            scoring["random_draw"] = draw
            reasoning = "primal_rounded_admit" if accept else "primal_rounded_reject"

        self._admissions_by_probability.append((probability, accept))
        return StrategyDecision(accept, reasoning, scoring)

    def _lp_scoring(self, problem, solution: LPSolution) -> Dict[str, Any]:
        scoring = problem.summary()
        scoring.update({
            "admission_probability": solution.admission_probability if solution.feasible else 0.0,
            "lp_optimal_value": solution.optimal_value,
            "active_constraints": list(solution.active_constraints),
            "constraint_slacks": dict(solution.constraint_slacks),
            "feasible": solution.feasible,
            "solution_type": solution.solution_type,
        })
        tight = [f"{a}:{s:.2f}" for a, s in sorted(solution.constraint_slacks.items(), key=lambda kv: kv[1]) if s < 0.1]
        if tight:
            logger.debug(f"P{problem.person_index} tight constraints: {', '.join(tight)}")
        return scoring

    def get_performance_stats(self) -> Dict[str, Any]:
        probabilities = np.array([p for p, _ in self._admissions_by_probability], dtype=float)
        has_data = probabilities.size > 0
        return {
            "total_lp_solves": self.total_lp_solves,
            "average_solve_time_ms": self.total_solve_time_ms / self.total_lp_solves if self.total_lp_solves else 0.0,
            "admission_probability_distribution": {
                "mean": float(probabilities.mean()) if has_data else 0.0,
                "min": float(probabilities.min()) if has_data else 0.0,
                "max": float(probabilities.max()) if has_data else 0.0,
            },
            "calibration": {
                "expected_admissions": float(probabilities.sum()),
                "actual_admissions": sum(1 for _, admitted in self._admissions_by_probability if admitted),
            },
        }
