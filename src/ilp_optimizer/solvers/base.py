from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from typing import Dict, List, Mapping, Optional, Sequence

from ..schemas import Direction, Objective, Polyhedron, Solution, Status
from ..validate import validate_dimensions, validate_objectives

logger = logging.getLogger(__name__)


class Solver(ABC):
    """
    Common interface for the ILP backends.

    Subclasses keep only constructor configuration; everything native is created
    and released inside a single ``solve`` call so one instance can serve
    concurrent requests.
    """

    name: str = "solver"

    def __init__(self, time_limit: Optional[float] = None) -> None:
        self.time_limit = time_limit

    def solve(
        self,
        polyhedron: Polyhedron,
        objectives: Sequence[Objective],
        direction: Direction,
        use_presolve: bool = False,
    ) -> List[Solution]:
        """
        Solve one integer program per objective against the same polyhedron.

        Raises SolveInputError before any engine call when the polyhedron is
        malformed or an objective references an undeclared variable.
        """

        validate_dimensions(polyhedron)
        validate_objectives(polyhedron.variables, objectives)

        if not objectives:
            return []
        if polyhedron.nnz == 0:
            logger.info("Empty constraint matrix, skipping %s", self.name, extra={"count": len(objectives)})
            return [empty_space_solution() for _ in objectives]

        logger.debug(
            "Solving with %s",
            self.name,
            extra={
                "count": len(objectives),
                "row_count": len(polyhedron.b),
                "total": len(polyhedron.variables),
            },
        )
        solutions = self._solve(polyhedron, objectives, direction, use_presolve)
        logger.info("%s solved %d objective(s)", self.name, len(solutions))
        return solutions

    @abstractmethod
    def _solve(
        self,
        polyhedron: Polyhedron,
        objectives: Sequence[Objective],
        direction: Direction,
        use_presolve: bool,
    ) -> List[Solution]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(time_limit={self.time_limit!r})"


def empty_space_solution() -> Solution:
    return Solution(status=Status.EMPTY_SPACE)


def failed_solution(status: Status, message: str) -> Solution:
    return Solution(status=status, error=message)


def round_half_away(value: float) -> int:
    """Nearest integer, with halves rounded away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def objective_value(objective: Objective, solution: Mapping[str, int]) -> int:
    """Objective evaluated on the integer assignment, so reported values stay integral."""

    total = 0.0
    for var_id, value in solution.items():
        total += objective.get(var_id, 0.0) * value
    return round_half_away(total)


def rounded_solution(ids: Sequence[str], values: Sequence[float]) -> Dict[str, int]:
    return {var_id: round_half_away(value) for var_id, value in zip(ids, values)}


def objective_coefficients(polyhedron: Polyhedron, objective: Objective) -> List[float]:
    return [float(objective.get(var.id, 0.0)) for var in polyhedron.variables]
