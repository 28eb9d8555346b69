import json
from pathlib import Path

import pytest

from ilp_optimizer.errors import SolverEngineError
from ilp_optimizer.schemas import IntegerSparseMatrix, Polyhedron, Shape, SolveRequest, Variable
from ilp_optimizer.solvers import SolverType, create_solver

EXAMPLES = Path(__file__).parent.parent / "examples"

ENGINE_MODULES = {
    SolverType.GLPK: "swiglpk",
    SolverType.HIGHS: "highspy",
    SolverType.GUROBI: "gurobipy",
    SolverType.HEXALY: "hexaly.optimizer",
    SolverType.ORTOOLS: "ortools.linear_solver.pywraplp",
}
LICENSED = {SolverType.GUROBI, SolverType.HEXALY}


def load_example(name: str) -> SolveRequest:
    return SolveRequest.model_validate(json.loads((EXAMPLES / name).read_text()))


def make_polyhedron(rows, cols, vals, b, bounds, b_lower=None) -> Polyhedron:
    variables = [Variable(id=var_id, bound=bound) for var_id, bound in bounds.items()]
    return Polyhedron(
        A=IntegerSparseMatrix(
            rows=rows,
            cols=cols,
            vals=vals,
            shape=Shape(nrows=len(b), ncols=len(variables)),
        ),
        b=b,
        variables=variables,
        b_lower=b_lower,
    )


def make_solver(solver_type: SolverType, **options):
    pytest.importorskip(ENGINE_MODULES[solver_type])
    solver = create_solver(solver_type, time_limit=10, **options)
    if solver_type in LICENSED:
        probe = make_polyhedron([0], [0], [1], [1], {"x": (0, 1)})
        try:
            solver.solve(probe, [{"x": 1.0}], "maximize")
        except SolverEngineError as exc:
            pytest.skip(f"{solver.name} is installed but not usable: {exc}")
    return solver


@pytest.fixture
def three_binary() -> SolveRequest:
    return load_example("three_binary.json")


@pytest.fixture
def knapsack() -> SolveRequest:
    return load_example("knapsack.json")


@pytest.fixture(params=list(SolverType), ids=lambda solver_type: solver_type.value)
def backend(request):
    return make_solver(request.param)
