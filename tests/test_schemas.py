import pytest
from pydantic import ValidationError

from ilp_optimizer.schemas import IntegerSparseMatrix, Polyhedron, Shape, Solution, Status, Variable
from conftest import load_example, make_polyhedron


def test_status_ordinals_are_preserved():
    assert [status.value for status in Status] == list(range(1, 10))
    assert Status.OPTIMAL == 5
    assert Status.EMPTY_SPACE.label == "EmptySpace"
    assert Status.MIP_FAILED.label == "MIPFailed"


def test_solution_serialises_status_by_label():
    solution = Solution(status=Status.OPTIMAL, objective=3, solution={"x": 1})

    dumped = solution.model_dump(mode="json")

    assert dumped == {"status": "Optimal", "objective": 3, "solution": {"x": 1}, "error": None}


def test_solution_accepts_label_or_ordinal():
    assert Solution.model_validate({"status": "NoFeasible"}).status is Status.NO_FEASIBLE
    assert Solution.model_validate({"status": 7}).status is Status.SIMPLEX_FAILED
    with pytest.raises(ValidationError):
        Solution.model_validate({"status": "Done"})


def test_solution_is_immutable():
    solution = Solution(status=Status.FEASIBLE)
    with pytest.raises(ValidationError):
        solution.objective = 4


def test_variable_rejects_inverted_bound():
    with pytest.raises(ValidationError):
        Variable(id="x", bound=(2, 1))


def test_variable_kinds():
    assert Variable(id="b", bound=(0, 1)).is_binary
    assert Variable(id="f", bound=(3, 3)).is_fixed
    general = Variable.model_validate({"id": "g", "bound": [-2, 5]})
    assert (general.lower, general.upper) == (-2, 5)
    assert not general.is_binary and not general.is_fixed


def test_matrix_requires_parallel_arrays():
    with pytest.raises(ValidationError):
        IntegerSparseMatrix(rows=[0, 1], cols=[0], vals=[1, 1], shape=Shape(nrows=2, ncols=1))


def test_polyhedron_reads_wire_field_names(three_binary):
    polyhedron = three_binary.polyhedron

    assert polyhedron.nnz == 6
    assert polyhedron.model_dump(by_alias=True)["A"]["shape"] == {"nrows": 3, "ncols": 3}
    assert three_binary.direction == "maximize"


def test_row_bounds_single_and_double():
    single = make_polyhedron([0, 1], [0, 0], [1, 1], [4, 5], {"x": (0, 9)})
    double = make_polyhedron([0, 1], [0, 0], [1, 1], [4, 5], {"x": (0, 9)}, b_lower=[1, 2])

    assert single.row_bounds() == [(None, 4), (None, 5)]
    assert double.row_bounds() == [(1, 4), (2, 5)]


def test_example_files_parse():
    request = load_example("knapsack.json")
    assert isinstance(request.polyhedron, Polyhedron)
    assert request.objectives == [{"x": 1.0, "y": 2.0}]
