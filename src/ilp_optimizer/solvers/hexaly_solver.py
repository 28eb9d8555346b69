from __future__ import annotations

import logging
import math
from typing import List, Sequence

import hexaly.optimizer
from hexaly.optimizer import HxSolutionStatus, HxState

from ..errors import SolverEngineError, UnrecognizedStatusError
from ..schemas import Direction, Objective, Polyhedron, Solution, Status
from ..sparse import rows_by_index
from .base import Solver, failed_solution, objective_value

logger = logging.getLogger(__name__)

# A stopped run only says the search finished; the solution status says how good it is.
_SOLUTION_STATUS = {
    HxSolutionStatus.OPTIMAL: (Status.OPTIMAL, None),
    HxSolutionStatus.FEASIBLE: (Status.FEASIBLE, None),
    HxSolutionStatus.INCONSISTENT: (Status.INFEASIBLE, "Model is inconsistent"),
    HxSolutionStatus.INFEASIBLE: (Status.NO_FEASIBLE, "No feasible solution found"),
}
_UNFINISHED_STATES = {HxState.RUNNING, HxState.PAUSED}


def _scalar(value: float):
    return int(value) if float(value).is_integer() else float(value)


class HexalySolver(Solver):
    """
    Hexaly local search on an expression-tree model.

    Each objective gets its own optimizer; no expression is shared between runs.
    """

    name = "Hexaly"

    def _solve(
        self,
        polyhedron: Polyhedron,
        objectives: Sequence[Objective],
        direction: Direction,
        use_presolve: bool,
    ) -> List[Solution]:
        rows = rows_by_index(polyhedron.a)
        try:
            return [self._solve_objective(polyhedron, rows, objective, direction) for objective in objectives]
        except hexaly.optimizer.HxError as exc:
            raise SolverEngineError(f"Hexaly failed: {exc}") from exc

    def _solve_objective(self, polyhedron: Polyhedron, rows, objective: Objective, direction: Direction) -> Solution:
        with hexaly.optimizer.HexalyOptimizer() as optimizer:
            optimizer.param.verbosity = 0
            if self.time_limit is not None:
                optimizer.param.time_limit = max(1, math.ceil(self.time_limit))

            model = optimizer.model
            decisions = [model.int(var.lower, var.upper) for var in polyhedron.variables]

            for (lower, upper), entries in zip(polyhedron.row_bounds(), rows):
                if not entries:
                    continue
                total = model.sum()
                for col, coef in entries:
                    total.add_operand(self._term(model, decisions[col], coef))
                model.constraint(model.leq(total, model.create_constant(upper)))
                if lower is not None:
                    model.constraint(model.geq(total, model.create_constant(lower)))

            goal = model.sum()
            for var, decision in zip(polyhedron.variables, decisions):
                coef = objective.get(var.id, 0.0)
                if coef != 0.0:
                    goal.add_operand(self._term(model, decision, coef))
            if direction == "maximize":
                model.maximize(goal)
            else:
                model.minimize(goal)

            # no structural edits after this point
            model.close()
            optimizer.solve()

            status, message = self._translate(optimizer)
            if message is not None:
                return failed_solution(status, message)

            solution = {var.id: int(decision.value) for var, decision in zip(polyhedron.variables, decisions)}
            return Solution(status=status, objective=objective_value(objective, solution), solution=solution)

    @staticmethod
    def _term(model, decision, coef):
        if coef == 1:
            return decision
        if coef == -1:
            return model.prod(model.create_constant(-1), decision)
        return model.prod(model.create_constant(_scalar(coef)), decision)

    @staticmethod
    def _translate(optimizer):
        state = optimizer.state
        if state == HxState.STOPPED:
            solution_status = optimizer.solution.status
            if solution_status not in _SOLUTION_STATUS:
                raise UnrecognizedStatusError(f"Unknown Hexaly solution status ({solution_status})")
            return _SOLUTION_STATUS[solution_status]
        if state in _UNFINISHED_STATES:
            logger.warning("Hexaly returned before stopping", extra={"reason": str(state)})
            return Status.UNDEFINED, f"Hexaly run did not stop (state {state})"
        raise UnrecognizedStatusError(f"Unknown Hexaly state ({state})")
