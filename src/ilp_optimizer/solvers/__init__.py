"""Backend adapters behind the common Solver contract."""

from .base import Solver
from .factory import SolverType, create_solver, solver_from_name

__all__ = ["Solver", "SolverType", "create_solver", "solver_from_name"]
