from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence

import highspy
import numpy as np

from ..errors import SolverEngineError, UnrecognizedStatusError
from ..schemas import Direction, Objective, Polyhedron, Solution, Status
from ..sparse import to_csc
from .base import Solver, failed_solution, objective_coefficients, objective_value, rounded_solution

logger = logging.getLogger(__name__)

_MODEL_STATUS = highspy.HighsModelStatus

_SOLVED = {
    _MODEL_STATUS.kOptimal: Status.OPTIMAL,
}
_UNSOLVED = {
    _MODEL_STATUS.kInfeasible: (Status.INFEASIBLE, "Problem is infeasible"),
    _MODEL_STATUS.kUnboundedOrInfeasible: (Status.UNBOUNDED, "Problem is unbounded or infeasible"),
    _MODEL_STATUS.kUnbounded: (Status.UNBOUNDED, "Problem is unbounded"),
    _MODEL_STATUS.kNotset: (Status.UNDEFINED, "Model status not set"),
    _MODEL_STATUS.kLoadError: (Status.UNDEFINED, "HiGHS load error"),
    _MODEL_STATUS.kModelError: (Status.UNDEFINED, "HiGHS model error"),
    _MODEL_STATUS.kPresolveError: (Status.UNDEFINED, "HiGHS presolve error"),
    _MODEL_STATUS.kSolveError: (Status.UNDEFINED, "HiGHS solve error"),
    _MODEL_STATUS.kPostsolveError: (Status.UNDEFINED, "HiGHS postsolve error"),
    _MODEL_STATUS.kModelEmpty: (Status.UNDEFINED, "Model is empty"),
    _MODEL_STATUS.kUnknown: (Status.UNDEFINED, "Model status unknown"),
}
# Stopped early; the incumbent is reported as feasible when there is one
_LIMITS = {
    _MODEL_STATUS.kObjectiveBound,
    _MODEL_STATUS.kObjectiveTarget,
    _MODEL_STATUS.kTimeLimit,
    _MODEL_STATUS.kIterationLimit,
    _MODEL_STATUS.kSolutionLimit,
    _MODEL_STATUS.kInterrupt,
}

_PRIMAL_SOLUTION_FEASIBLE = 2


@contextmanager
def _highs_instance() -> Iterator[highspy.Highs]:
    highs = highspy.Highs()
    try:
        yield highs
    finally:
        highs.clear()


class HighsSolver(Solver):
    """
    HiGHS through its native handle.

    Rows go in first, then the columns with their compressed column entries.
    One instance serves every objective of a request; only the costs change.
    """

    name = "HiGHS"

    def _solve(
        self,
        polyhedron: Polyhedron,
        objectives: Sequence[Objective],
        direction: Direction,
        use_presolve: bool,
    ) -> List[Solution]:
        ids = [var.id for var in polyhedron.variables]
        ncols = len(ids)
        col_indices = np.arange(ncols, dtype=np.int32)

        with _highs_instance() as highs:
            self._configure(highs, use_presolve)
            self._build(highs, polyhedron)
            sense = highspy.ObjSense.kMaximize if direction == "maximize" else highspy.ObjSense.kMinimize
            self._check(highs.changeObjectiveSense(sense), "set the objective sense")

            solutions: List[Solution] = []
            for objective in objectives:
                costs = np.asarray(objective_coefficients(polyhedron, objective), dtype=np.float64)
                self._check(highs.changeColsCost(ncols, col_indices, costs), "set objective coefficients")
                solutions.append(self._run(highs, ids, objective))
            return solutions

    def _configure(self, highs: highspy.Highs, use_presolve: bool) -> None:
        highs.setOptionValue("output_flag", False)
        highs.setOptionValue("presolve", "on" if use_presolve else "off")
        if self.time_limit is not None:
            highs.setOptionValue("time_limit", float(self.time_limit))

    def _build(self, highs: highspy.Highs, polyhedron: Polyhedron) -> None:
        inf = highspy.kHighsInf
        nrows = len(polyhedron.b)
        row_lower = np.array(
            [-inf if lower is None else float(lower) for lower, _ in polyhedron.row_bounds()], dtype=np.float64
        )
        row_upper = np.array([float(upper) for upper in polyhedron.b], dtype=np.float64)
        no_starts = np.zeros(nrows, dtype=np.int32)
        no_entries = np.zeros(0, dtype=np.int32)
        self._check(
            highs.addRows(nrows, row_lower, row_upper, 0, no_starts, no_entries, np.zeros(0, dtype=np.float64)),
            "add rows",
        )

        ncols = len(polyhedron.variables)
        csc = to_csc(polyhedron.a)
        col_lower = np.array([float(var.lower) for var in polyhedron.variables], dtype=np.float64)
        col_upper = np.array([float(var.upper) for var in polyhedron.variables], dtype=np.float64)
        self._check(
            highs.addCols(
                ncols,
                np.zeros(ncols, dtype=np.float64),
                col_lower,
                col_upper,
                csc.nnz,
                csc.starts[:-1],
                csc.indices,
                csc.values,
            ),
            "add columns",
        )
        for col in range(ncols):
            self._check(highs.changeColIntegrality(col, highspy.HighsVarType.kInteger), "mark columns integer")

    def _run(self, highs: highspy.Highs, ids: List[str], objective: Objective) -> Solution:
        run_status = highs.run()
        if run_status == highspy.HighsStatus.kError:
            logger.warning("HiGHS run failed", extra={"reason": str(run_status)})
            return failed_solution(Status.UNDEFINED, f"HiGHS run failed with status: {run_status}")

        model_status = highs.getModelStatus()
        if model_status in _SOLVED:
            status = _SOLVED[model_status]
        elif model_status in _LIMITS:
            if highs.getInfo().primal_solution_status != _PRIMAL_SOLUTION_FEASIBLE:
                return failed_solution(Status.UNDEFINED, f"HiGHS stopped without a solution: {model_status}")
            status = Status.FEASIBLE
        elif model_status in _UNSOLVED:
            status, message = _UNSOLVED[model_status]
            return failed_solution(status, message)
        else:
            raise UnrecognizedStatusError(f"Unknown HiGHS model status ({model_status})")

        values = list(highs.getSolution().col_value)
        solution = rounded_solution(ids, values)
        return Solution(status=status, objective=objective_value(objective, solution), solution=solution)

    @staticmethod
    def _check(status, action: str) -> None:
        if status == highspy.HighsStatus.kError:
            raise SolverEngineError(f"HiGHS failed to {action}")
