from __future__ import annotations

from typing import Iterable, Sequence

from .errors import SolveInputError
from .schemas import Objective, Polyhedron, Variable


def validate_dimensions(polyhedron: Polyhedron) -> None:
    """Check that the matrix, the right-hand side and the variables agree."""

    shape = polyhedron.a.shape
    if len(polyhedron.variables) != shape.ncols:
        raise SolveInputError(
            "The number of variables must be equal to the number of columns in the constraint matrix, "
            f"got ({len(polyhedron.variables)},{shape.ncols})"
        )
    if len(polyhedron.b) != shape.nrows:
        raise SolveInputError(
            "The number of rows in the constraint matrix must be equal to the number of elements in b, "
            f"got ({shape.nrows},{len(polyhedron.b)})"
        )
    if polyhedron.b_lower is not None and len(polyhedron.b_lower) != len(polyhedron.b):
        raise SolveInputError(
            f"b_lower must have the same length as b, got ({len(polyhedron.b_lower)},{len(polyhedron.b)})"
        )
    for i, (lower, upper) in enumerate(polyhedron.row_bounds()):
        if lower is not None and lower > upper:
            raise SolveInputError(f"Row {i} has b_lower {lower} greater than b {upper}")

    for row in polyhedron.a.rows:
        if row < 0 or row >= shape.nrows:
            raise SolveInputError(f"Row index {row} is outside the matrix shape ({shape.nrows},{shape.ncols})")
    for col in polyhedron.a.cols:
        if col < 0 or col >= shape.ncols:
            raise SolveInputError(f"Column index {col} is outside the matrix shape ({shape.nrows},{shape.ncols})")

    seen = set()
    for var in polyhedron.variables:
        if var.id in seen:
            raise SolveInputError(f"Variable {var.id} is declared more than once")
        seen.add(var.id)


def validate_objectives(variables: Iterable[Variable], objectives: Sequence[Objective]) -> None:
    variable_ids = {var.id for var in variables}
    for objective in objectives:
        for variable_id in objective:
            if variable_id not in variable_ids:
                raise SolveInputError(f"Objective contains missing variable {variable_id}")


def validate_request(polyhedron: Polyhedron, objectives: Sequence[Objective]) -> None:
    validate_dimensions(polyhedron)
    validate_objectives(polyhedron.variables, objectives)
