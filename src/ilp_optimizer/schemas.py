from __future__ import annotations

from enum import IntEnum
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

Direction = Literal["maximize", "minimize"]
Objective = Dict[str, float]
Bound = Tuple[int, int]


class Status(IntEnum):
    UNDEFINED = 1
    FEASIBLE = 2
    INFEASIBLE = 3
    NO_FEASIBLE = 4
    OPTIMAL = 5
    UNBOUNDED = 6
    SIMPLEX_FAILED = 7
    MIP_FAILED = 8
    EMPTY_SPACE = 9

    @property
    def label(self) -> str:
        """Name used on the wire."""
        return _STATUS_LABELS[self]

    @classmethod
    def from_label(cls, label: str) -> "Status":
        for status, name in _STATUS_LABELS.items():
            if name == label:
                return status
        raise ValueError(f"Unknown status '{label}'")


_STATUS_LABELS = {
    Status.UNDEFINED: "Undefined",
    Status.FEASIBLE: "Feasible",
    Status.INFEASIBLE: "Infeasible",
    Status.NO_FEASIBLE: "NoFeasible",
    Status.OPTIMAL: "Optimal",
    Status.UNBOUNDED: "Unbounded",
    Status.SIMPLEX_FAILED: "SimplexFailed",
    Status.MIP_FAILED: "MIPFailed",
    Status.EMPTY_SPACE: "EmptySpace",
}


class Variable(BaseModel):
    id: str
    bound: Bound

    @model_validator(mode="after")
    def _check_bound(self) -> "Variable":
        lower, upper = self.bound
        if lower > upper:
            raise ValueError(f"Variable {self.id} has inconsistent bounds (lower {lower} > upper {upper}).")
        return self

    @property
    def lower(self) -> int:
        return self.bound[0]

    @property
    def upper(self) -> int:
        return self.bound[1]

    @property
    def is_binary(self) -> bool:
        return self.bound == (0, 1)

    @property
    def is_fixed(self) -> bool:
        return self.bound[0] == self.bound[1]


class Shape(BaseModel):
    nrows: int = Field(ge=0)
    ncols: int = Field(ge=0)


class IntegerSparseMatrix(BaseModel):
    """Coordinate-form matrix: entry k is vals[k] at (rows[k], cols[k])."""

    rows: List[int] = Field(default_factory=list)
    cols: List[int] = Field(default_factory=list)
    vals: List[int] = Field(default_factory=list)
    shape: Shape

    @model_validator(mode="after")
    def _check_lengths(self) -> "IntegerSparseMatrix":
        if not (len(self.rows) == len(self.cols) == len(self.vals)):
            raise ValueError(
                "Rows, columns and values must have the same length, "
                f"got ({len(self.rows)},{len(self.cols)},{len(self.vals)})"
            )
        return self

    @property
    def nnz(self) -> int:
        return len(self.vals)


class Polyhedron(BaseModel):
    """
    A·x <= b with every x_i bounded by its Variable.

    When b_lower is given the rows are double bounded: b_lower[i] <= A_i·x <= b[i].
    """

    model_config = ConfigDict(populate_by_name=True)

    a: IntegerSparseMatrix = Field(alias="A")
    b: List[int]
    variables: List[Variable]
    b_lower: Optional[List[int]] = None

    @property
    def nnz(self) -> int:
        return self.a.nnz

    def row_bounds(self) -> List[Tuple[Optional[int], int]]:
        lowers = self.b_lower if self.b_lower is not None else [None] * len(self.b)
        return list(zip(lowers, self.b))


class Solution(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Status
    objective: int = 0
    solution: Dict[str, int] = Field(default_factory=dict)
    error: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value):
        if isinstance(value, str):
            return Status.from_label(value)
        return value

    @field_serializer("status")
    def _dump_status(self, status: Status) -> str:
        return status.label


class SolveRequest(BaseModel):
    polyhedron: Polyhedron
    objectives: List[Objective]
    direction: Direction


class SolveResponse(BaseModel):
    solutions: List[Solution]
