from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence

import gurobipy as gp
from gurobipy import GRB

from ..errors import SolverEngineError, UnrecognizedStatusError
from ..schemas import Direction, Objective, Polyhedron, Solution, Status
from ..sparse import rows_by_index
from .base import Solver, failed_solution, objective_value, round_half_away

logger = logging.getLogger(__name__)

_SOLVED = {
    GRB.OPTIMAL: Status.OPTIMAL,
    GRB.SUBOPTIMAL: Status.FEASIBLE,
}
_UNSOLVED = {
    GRB.INFEASIBLE: (Status.INFEASIBLE, "Problem is infeasible"),
    GRB.INF_OR_UNBD: (Status.UNBOUNDED, "Problem is infeasible or unbounded"),
    GRB.UNBOUNDED: (Status.UNBOUNDED, "Problem is unbounded"),
    GRB.LOADED: (Status.UNDEFINED, "Model was not optimized"),
    GRB.NUMERIC: (Status.UNDEFINED, "Optimization stopped on numerical difficulties"),
    GRB.CUTOFF: (Status.UNDEFINED, "Objective is worse than the cutoff"),
}
_LIMITS = {
    GRB.ITERATION_LIMIT,
    GRB.NODE_LIMIT,
    GRB.TIME_LIMIT,
    GRB.SOLUTION_LIMIT,
    GRB.INTERRUPTED,
    GRB.USER_OBJ_LIMIT,
    GRB.WORK_LIMIT,
    GRB.MEM_LIMIT,
}


class GurobiSolver(Solver):
    """
    Gurobi with a fresh model per objective inside one environment per request.
    """

    name = "Gurobi"

    def __init__(self, time_limit: Optional[float] = None, binary_fast_path: bool = True) -> None:
        super().__init__(time_limit=time_limit)
        self.binary_fast_path = binary_fast_path

    def _solve(
        self,
        polyhedron: Polyhedron,
        objectives: Sequence[Objective],
        direction: Direction,
        use_presolve: bool,
    ) -> List[Solution]:
        rows = rows_by_index(polyhedron.a)
        sense = GRB.MAXIMIZE if direction == "maximize" else GRB.MINIMIZE
        try:
            with self._environment(use_presolve) as env:
                return [self._solve_objective(env, polyhedron, rows, objective, sense) for objective in objectives]
        except gp.GurobiError as exc:
            raise SolverEngineError(f"Gurobi failed: {exc}") from exc

    @contextmanager
    def _environment(self, use_presolve: bool) -> Iterator[gp.Env]:
        with gp.Env(empty=True) as env:
            env.setParam("OutputFlag", 0)
            env.setParam("Threads", 0)
            # -1 automatic, 0 off
            env.setParam("Presolve", -1 if use_presolve else 0)
            if self.time_limit is not None:
                env.setParam("TimeLimit", float(self.time_limit))
            env.start()
            yield env

    def _solve_objective(self, env: gp.Env, polyhedron: Polyhedron, rows, objective: Objective, sense: int) -> Solution:
        with gp.Model("optimization", env=env) as model:
            variables = []
            for var in polyhedron.variables:
                if self.binary_fast_path and var.is_binary:
                    variables.append(model.addVar(vtype=GRB.BINARY, name=var.id))
                else:
                    variables.append(model.addVar(lb=var.lower, ub=var.upper, vtype=GRB.INTEGER, name=var.id))
            model.update()

            for row_idx, ((lower, upper), entries) in enumerate(zip(polyhedron.row_bounds(), rows)):
                if not entries:
                    continue
                expr = gp.LinExpr([float(val) for _, val in entries], [variables[col] for col, _ in entries])
                if lower is None:
                    model.addLConstr(expr, GRB.LESS_EQUAL, float(upper), name=f"c{row_idx}")
                else:
                    model.addRange(expr, float(lower), float(upper), name=f"c{row_idx}")

            coeffs: List[float] = []
            terms = []
            for var, gvar in zip(polyhedron.variables, variables):
                coef = objective.get(var.id, 0.0)
                if coef != 0.0:
                    coeffs.append(float(coef))
                    terms.append(gvar)
            model.setObjective(gp.LinExpr(coeffs, terms), sense)
            model.optimize()

            status, message = self._translate(model)
            if message is not None:
                return failed_solution(status, message)

            solution = {}
            for var, gvar in zip(polyhedron.variables, variables):
                solution[var.id] = round_half_away(self._value(var, gvar))
            return Solution(status=status, objective=objective_value(objective, solution), solution=solution)

    @staticmethod
    def _translate(model: gp.Model):
        """(status, None) when the model holds a solution, (status, message) otherwise."""

        code = model.Status
        if code in _SOLVED:
            return _SOLVED[code], None
        if code in _LIMITS:
            if model.SolCount > 0:
                return Status.FEASIBLE, None
            return Status.UNDEFINED, f"Gurobi stopped without a solution (status {code})"
        if code in _UNSOLVED:
            return _UNSOLVED[code]
        raise UnrecognizedStatusError(f"Unknown Gurobi status ({code})")

    @staticmethod
    def _value(var, gvar) -> float:
        try:
            return gvar.X
        except (gp.GurobiError, AttributeError):
            # eliminated by presolve
            return float(var.lower) if var.is_fixed else 0.0
