from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .errors import SolveInputError
from .schemas import (
    Direction,
    IntegerSparseMatrix,
    Objective,
    Polyhedron,
    Shape,
    SolveRequest,
    Variable,
)


class SolveRequestBuilder:
    """
    Assemble a SolveRequest constraint by constraint, e.g.:

        request = (
            SolveRequestBuilder()
            .add_variable("x", 0, 100)
            .add_variable("y", 0, 100)
            .add_constraint({"x": 2, "y": 3}, 100)
            .add_objective({"x": 1, "y": 2})
            .direction("maximize")
            .build()
        )
    """

    def __init__(self) -> None:
        self._variables: List[Variable] = []
        self._constraints: List[Tuple[Dict[str, int], int, Optional[int]]] = []
        self._objectives: List[Objective] = []
        self._direction: Optional[Direction] = None

    def add_variable(self, var_id: str, lower: int, upper: int) -> "SolveRequestBuilder":
        self._variables.append(Variable(id=var_id, bound=(lower, upper)))
        return self

    def add_variables(self, variables: Iterable[Variable]) -> "SolveRequestBuilder":
        self._variables.extend(variables)
        return self

    def add_constraint(
        self,
        coefficients: Mapping[str, int],
        upper: int,
        lower: Optional[int] = None,
    ) -> "SolveRequestBuilder":
        """Add ``lower <= sum(coef * var) <= upper`` (no lower bound unless given)."""
        self._constraints.append((dict(coefficients), upper, lower))
        return self

    def add_objective(self, objective: Mapping[str, float]) -> "SolveRequestBuilder":
        self._objectives.append(dict(objective))
        return self

    def add_objectives(self, objectives: Iterable[Mapping[str, float]]) -> "SolveRequestBuilder":
        for objective in objectives:
            self.add_objective(objective)
        return self

    def direction(self, direction: Direction) -> "SolveRequestBuilder":
        self._direction = direction
        return self

    def build(self) -> SolveRequest:
        if not self._variables:
            raise SolveInputError("At least one variable is required")
        if not self._objectives:
            raise SolveInputError("At least one objective is required")
        if self._direction is None:
            raise SolveInputError("Direction (maximize/minimize) must be set")

        index = {var.id: idx for idx, var in enumerate(self._variables)}
        rows: List[int] = []
        cols: List[int] = []
        vals: List[int] = []
        b: List[int] = []
        lowers: List[int] = []
        double_bound = any(lower is not None for _, _, lower in self._constraints)

        for row_idx, (coefficients, upper, lower) in enumerate(self._constraints):
            for var_id, coef in coefficients.items():
                if var_id not in index:
                    raise SolveInputError(f"Constraint {row_idx} references unknown variable {var_id}")
                rows.append(row_idx)
                cols.append(index[var_id])
                vals.append(coef)
            b.append(upper)
            if double_bound:
                # rows without a lower bound stay effectively one-sided
                if lower is None:
                    lower = min(upper, _row_floor(coefficients, self._variables, index))
                lowers.append(lower)

        polyhedron = Polyhedron(
            A=IntegerSparseMatrix(
                rows=rows,
                cols=cols,
                vals=vals,
                shape=Shape(nrows=len(b), ncols=len(self._variables)),
            ),
            b=b,
            variables=list(self._variables),
            b_lower=lowers if double_bound else None,
        )
        return SolveRequest(polyhedron=polyhedron, objectives=list(self._objectives), direction=self._direction)


def _row_floor(coefficients: Mapping[str, int], variables: List[Variable], index: Mapping[str, int]) -> int:
    """Smallest value the row can take given the variable bounds."""
    floor = 0
    for var_id, coef in coefficients.items():
        var = variables[index[var_id]]
        floor += coef * (var.lower if coef > 0 else var.upper)
    return floor
