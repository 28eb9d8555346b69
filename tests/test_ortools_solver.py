import pytest

pywraplp = pytest.importorskip("ortools.linear_solver.pywraplp")

from ilp_optimizer.errors import SolverEngineError, UnrecognizedStatusError  # noqa: E402
from ilp_optimizer.schemas import Status  # noqa: E402
from ilp_optimizer.solvers.ortools_solver import OrToolsSolver  # noqa: E402
from conftest import make_polyhedron  # noqa: E402


def test_unknown_engine_is_an_engine_error(three_binary):
    solver = OrToolsSolver(engine="NOT_A_SOLVER")

    with pytest.raises(SolverEngineError, match="NOT_A_SOLVER"):
        solver.solve(three_binary.polyhedron, three_binary.objectives, "maximize")


@pytest.mark.parametrize("engine", ["SCIP", "CBC"])
def test_alternative_mip_engines(three_binary, engine):
    if pywraplp.Solver.CreateSolver(engine) is None:
        pytest.skip(f"{engine} is not built into this OR-Tools wheel")

    solutions = OrToolsSolver(engine=engine).solve(three_binary.polyhedron, three_binary.objectives, "maximize")

    assert [s.objective for s in solutions] == [1, 2]


def test_objective_is_rewritten_between_runs(three_binary):
    # the second objective must not inherit the x1 coefficient of the first
    solutions = OrToolsSolver().solve(three_binary.polyhedron, [{"x1": 5.0}, {"x3": 1.0}], "maximize")

    assert solutions[0].solution == {"x1": 1, "x2": 0, "x3": 0}
    assert solutions[1].solution == {"x1": 0, "x2": 0, "x3": 1}
    assert solutions[1].objective == 1


def test_general_integers_without_fast_path():
    polyhedron = make_polyhedron([0, 0], [0, 1], [3, 2], [11], {"x": (0, 1), "y": (0, 9)})

    (solution,) = OrToolsSolver(binary_fast_path=False).solve(polyhedron, [{"x": 4.0, "y": 1.0}], "maximize")

    assert solution.status is Status.OPTIMAL
    assert solution.solution == {"x": 1, "y": 4}
    assert solution.objective == 8


def test_unexpected_status_raises(monkeypatch, three_binary):
    monkeypatch.setattr(pywraplp.Solver, "Solve", lambda self, *args: 99)

    with pytest.raises(UnrecognizedStatusError, match="99"):
        OrToolsSolver().solve(three_binary.polyhedron, three_binary.objectives, "maximize")
