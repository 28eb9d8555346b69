from types import SimpleNamespace

import pytest

gp = pytest.importorskip("gurobipy")

from ilp_optimizer.errors import UnrecognizedStatusError  # noqa: E402
from ilp_optimizer.schemas import Status, Variable  # noqa: E402
from ilp_optimizer.solvers import SolverType  # noqa: E402
from ilp_optimizer.solvers.gurobi_solver import GurobiSolver  # noqa: E402
from conftest import make_solver  # noqa: E402

GRB = gp.GRB


@pytest.mark.parametrize(
    "code, sol_count, expected, has_message",
    [
        (GRB.OPTIMAL, 1, Status.OPTIMAL, False),
        (GRB.SUBOPTIMAL, 1, Status.FEASIBLE, False),
        (GRB.TIME_LIMIT, 2, Status.FEASIBLE, False),
        (GRB.TIME_LIMIT, 0, Status.UNDEFINED, True),
        (GRB.INFEASIBLE, 0, Status.INFEASIBLE, True),
        (GRB.INF_OR_UNBD, 0, Status.UNBOUNDED, True),
        (GRB.NUMERIC, 0, Status.UNDEFINED, True),
    ],
)
def test_translate(code, sol_count, expected, has_message):
    status, message = GurobiSolver._translate(SimpleNamespace(Status=code, SolCount=sol_count))

    assert status is expected
    assert (message is not None) == has_message


def test_translate_unknown_code():
    with pytest.raises(UnrecognizedStatusError):
        GurobiSolver._translate(SimpleNamespace(Status=424242, SolCount=0))


class _Eliminated:
    @property
    def X(self):
        raise AttributeError("X")


def test_value_falls_back_for_presolved_columns():
    assert GurobiSolver._value(Variable(id="f", bound=(3, 3)), _Eliminated()) == 3.0
    assert GurobiSolver._value(Variable(id="g", bound=(0, 5)), _Eliminated()) == 0.0
    assert GurobiSolver._value(Variable(id="h", bound=(0, 5)), SimpleNamespace(X=4.0)) == 4.0


def test_presolve_and_fast_path(three_binary):
    solver = make_solver(SolverType.GUROBI, binary_fast_path=False)

    solutions = solver.solve(three_binary.polyhedron, three_binary.objectives, "maximize", use_presolve=True)

    assert [s.status for s in solutions] == [Status.OPTIMAL, Status.OPTIMAL]
    assert [s.objective for s in solutions] == [1, 2]
