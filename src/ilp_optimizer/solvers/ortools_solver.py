from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence

from ortools.linear_solver import pywraplp

from ..errors import SolverEngineError, UnrecognizedStatusError
from ..schemas import Direction, Objective, Polyhedron, Solution, Status
from ..sparse import rows_by_index
from .base import Solver, failed_solution, objective_value, rounded_solution

logger = logging.getLogger(__name__)

_SOLVED = {
    pywraplp.Solver.OPTIMAL: Status.OPTIMAL,
    pywraplp.Solver.FEASIBLE: Status.FEASIBLE,
}
_UNSOLVED = {
    pywraplp.Solver.INFEASIBLE: (Status.INFEASIBLE, "Problem is infeasible"),
    pywraplp.Solver.UNBOUNDED: (Status.UNBOUNDED, "Problem is unbounded"),
    pywraplp.Solver.ABNORMAL: (Status.UNDEFINED, "OR-Tools solver stopped abnormally"),
    pywraplp.Solver.MODEL_INVALID: (Status.UNDEFINED, "OR-Tools rejected the model"),
    pywraplp.Solver.NOT_SOLVED: (Status.UNDEFINED, "OR-Tools did not solve the model"),
}


@contextmanager
def _mp_solver(engine: str) -> Iterator[pywraplp.Solver]:
    solver = pywraplp.Solver.CreateSolver(engine)
    if solver is None:
        raise SolverEngineError(f"Failed to create OR-Tools {engine} solver")
    try:
        yield solver
    finally:
        solver.Clear()


class OrToolsSolver(Solver):
    """
    OR-Tools linear solver wrapper (SCIP unless another MIP engine is named).

    The model is built once; each objective clears and rewrites the objective row.
    """

    name = "OR-Tools"

    def __init__(
        self,
        time_limit: Optional[float] = None,
        binary_fast_path: bool = True,
        engine: str = "SCIP",
    ) -> None:
        super().__init__(time_limit=time_limit)
        self.binary_fast_path = binary_fast_path
        self.engine = engine

    def _solve(
        self,
        polyhedron: Polyhedron,
        objectives: Sequence[Objective],
        direction: Direction,
        use_presolve: bool,
    ) -> List[Solution]:
        ids = [var.id for var in polyhedron.variables]
        with _mp_solver(self.engine) as solver:
            if self.time_limit is not None:
                solver.SetTimeLimit(int(self.time_limit * 1000))

            variables = []
            for var in polyhedron.variables:
                if self.binary_fast_path and var.is_binary:
                    variables.append(solver.BoolVar(var.id))
                else:
                    variables.append(solver.IntVar(var.lower, var.upper, var.id))

            for row_idx, ((lower, upper), entries) in enumerate(zip(polyhedron.row_bounds(), rows_by_index(polyhedron.a))):
                if not entries:
                    continue
                row_lower = -solver.infinity() if lower is None else lower
                constraint = solver.RowConstraint(row_lower, upper, f"c{row_idx}")
                for col, val in entries:
                    constraint.SetCoefficient(variables[col], val)

            params = pywraplp.MPSolverParameters()
            params.SetIntegerParam(
                pywraplp.MPSolverParameters.PRESOLVE,
                pywraplp.MPSolverParameters.PRESOLVE_ON if use_presolve else pywraplp.MPSolverParameters.PRESOLVE_OFF,
            )

            solutions: List[Solution] = []
            for objective in objectives:
                goal = solver.Objective()
                goal.Clear()
                for var, mp_var in zip(polyhedron.variables, variables):
                    goal.SetCoefficient(mp_var, objective.get(var.id, 0.0))
                if direction == "maximize":
                    goal.SetMaximization()
                else:
                    goal.SetMinimization()

                code = solver.Solve(params)
                if code in _SOLVED:
                    solution = rounded_solution(ids, [mp_var.solution_value() for mp_var in variables])
                    solutions.append(
                        Solution(
                            status=_SOLVED[code],
                            objective=objective_value(objective, solution),
                            solution=solution,
                        )
                    )
                elif code in _UNSOLVED:
                    status, message = _UNSOLVED[code]
                    if status is Status.UNDEFINED:
                        logger.warning("OR-Tools solve failed", extra={"reason": message})
                    solutions.append(failed_solution(status, message))
                else:
                    raise UnrecognizedStatusError(f"OR-Tools returned status {code}")
            return solutions
