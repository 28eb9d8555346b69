"""ILP Optimizer: sparse integer programs solved over interchangeable native engines."""

from .builder import SolveRequestBuilder
from .errors import SolveInputError, SolverEngineError, UnknownSolverError, UnrecognizedStatusError
from .schemas import (
    IntegerSparseMatrix,
    Polyhedron,
    Shape,
    Solution,
    SolveRequest,
    SolveResponse,
    Status,
    Variable,
)
from .solvers import Solver, SolverType, create_solver, solver_from_name

__all__ = [
    "IntegerSparseMatrix",
    "Polyhedron",
    "Shape",
    "Solution",
    "SolveInputError",
    "SolveRequest",
    "SolveRequestBuilder",
    "SolveResponse",
    "Solver",
    "SolverEngineError",
    "SolverType",
    "Status",
    "UnknownSolverError",
    "UnrecognizedStatusError",
    "Variable",
    "create_solver",
    "solver_from_name",
]
