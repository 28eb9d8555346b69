import pytest

glp = pytest.importorskip("swiglpk")

from ilp_optimizer.errors import UnrecognizedStatusError  # noqa: E402
from ilp_optimizer.schemas import Status  # noqa: E402
from ilp_optimizer.solvers import glpk_solver  # noqa: E402
from ilp_optimizer.solvers.glpk_solver import GlpkSolver  # noqa: E402
from conftest import make_polyhedron  # noqa: E402


@pytest.mark.parametrize("binary_fast_path", [True, False])
def test_binary_fast_path_gives_same_answer(three_binary, binary_fast_path):
    solver = GlpkSolver(binary_fast_path=binary_fast_path)

    solutions = solver.solve(three_binary.polyhedron, three_binary.objectives, "maximize")

    assert [s.status for s in solutions] == [Status.OPTIMAL, Status.OPTIMAL]
    assert [s.objective for s in solutions] == [1, 2]


def test_duplicate_entries_are_summed():
    # (0, 0) appears twice: 1 + 2 = 3, so 3x <= 7
    polyhedron = make_polyhedron([0, 0], [0, 0], [1, 2], [7], {"x": (0, 10)})

    (solution,) = GlpkSolver().solve(polyhedron, [{"x": 1.0}], "maximize")

    assert solution.solution == {"x": 2}


def test_relaxation_failure_without_presolve():
    polyhedron = make_polyhedron([0], [0], [-1], [-2], {"x": (0, 1)})

    (solution,) = GlpkSolver().solve(polyhedron, [{"x": 1.0}], "maximize", use_presolve=False)

    assert solution.status is Status.NO_FEASIBLE
    assert solution.error == "No feasible solution exists"


def test_presolver_reports_infeasibility():
    polyhedron = make_polyhedron([0], [0], [-1], [-2], {"x": (0, 1)})

    (solution,) = GlpkSolver().solve(polyhedron, [{"x": 1.0}], "maximize", use_presolve=True)

    assert solution.status is Status.INFEASIBLE
    assert solution.solution == {}


def test_integer_gap_detected_by_branch_and_bound():
    # 2x = 1 has a fractional relaxation but no integer point
    polyhedron = make_polyhedron([0, 1], [0, 0], [2, -2], [1, -1], {"x": (0, 3)})

    (solution,) = GlpkSolver().solve(polyhedron, [{"x": 1.0}], "maximize")

    assert solution.status is Status.NO_FEASIBLE
    assert solution.error


def test_equality_rows_use_fixed_bounds():
    polyhedron = make_polyhedron([0, 0], [0, 1], [1, 1], [5], {"x": (0, 5), "y": (0, 5)}, b_lower=[5])

    (solution,) = GlpkSolver().solve(polyhedron, [{"x": 1.0, "y": 2.0}], "minimize")

    assert solution.solution == {"x": 5, "y": 0}
    assert solution.objective == 5


def test_mip_failure_is_scoped_to_objective(monkeypatch, three_binary):
    calls = []

    def fake_intopt(lp, params):
        calls.append(params.presolve)
        return glp.GLP_EFAIL if len(calls) == 1 else 0

    monkeypatch.setattr(glpk_solver.glp, "glp_intopt", fake_intopt)

    first, second = GlpkSolver().solve(three_binary.polyhedron, three_binary.objectives, "maximize")

    assert first.status is Status.MIP_FAILED
    assert first.error == f"GLPK MIP solver failed with code: {glp.GLP_EFAIL}"
    # a zero return with nothing stored reads back as an undefined MIP status
    assert second.status is Status.UNDEFINED
    assert calls == [glp.GLP_OFF, glp.GLP_OFF]


def test_time_limit_without_incumbent(monkeypatch, three_binary):
    monkeypatch.setattr(glpk_solver.glp, "glp_intopt", lambda lp, params: glp.GLP_ETMLIM)

    solutions = GlpkSolver(time_limit=0.5).solve(three_binary.polyhedron, three_binary.objectives, "maximize")

    assert [s.status for s in solutions] == [Status.MIP_FAILED, Status.MIP_FAILED]


def test_simplex_failure(monkeypatch, three_binary):
    monkeypatch.setattr(glpk_solver.glp, "glp_simplex", lambda lp, params: glp.GLP_ESING)

    (solution,) = GlpkSolver().solve(three_binary.polyhedron, three_binary.objectives[:1], "maximize")

    assert solution.status is Status.SIMPLEX_FAILED
    assert solution.error == f"GLPK simplex solver failed with code: {glp.GLP_ESING}"


def test_unknown_return_code_raises(monkeypatch, three_binary):
    monkeypatch.setattr(glpk_solver.glp, "glp_intopt", lambda lp, params: 12345)

    with pytest.raises(UnrecognizedStatusError, match="12345"):
        GlpkSolver().solve(three_binary.polyhedron, three_binary.objectives, "maximize")
