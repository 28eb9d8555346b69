from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from ..errors import UnknownSolverError
from .base import Solver


class SolverType(str, Enum):
    GLPK = "glpk"
    HIGHS = "highs"
    GUROBI = "gurobi"
    HEXALY = "hexaly"
    ORTOOLS = "ortools"

    @classmethod
    def from_str(cls, value: str) -> Optional["SolverType"]:
        """Case-insensitive lookup; None for unknown names."""
        normalized = value.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        return None


def create_solver(solver_type: SolverType, **options: Any) -> Solver:
    """
    Instantiate the adapter for ``solver_type``.

    Engine modules are imported here so a deployment only needs the engine it runs.
    """

    if solver_type is SolverType.GLPK:
        from .glpk_solver import GlpkSolver

        return GlpkSolver(**options)
    if solver_type is SolverType.HIGHS:
        from .highs_solver import HighsSolver

        return HighsSolver(**options)
    if solver_type is SolverType.GUROBI:
        from .gurobi_solver import GurobiSolver

        return GurobiSolver(**options)
    if solver_type is SolverType.HEXALY:
        from .hexaly_solver import HexalySolver

        return HexalySolver(**options)
    if solver_type is SolverType.ORTOOLS:
        from .ortools_solver import OrToolsSolver

        return OrToolsSolver(**options)
    raise UnknownSolverError(f"Unsupported solver type {solver_type!r}")


def solver_from_name(name: str, **options: Any) -> Solver:
    solver_type = SolverType.from_str(name)
    if solver_type is None:
        choices = ", ".join(member.value for member in SolverType)
        raise UnknownSolverError(f"Unknown solver '{name}' (expected one of: {choices})")
    return create_solver(solver_type, **options)
