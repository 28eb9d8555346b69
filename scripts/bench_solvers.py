#!/usr/bin/env python3
import argparse
import json
import time
from pathlib import Path

from ilp_optimizer.errors import SolverEngineError
from ilp_optimizer.schemas import SolveRequest
from ilp_optimizer.solvers import SolverType, create_solver
from scripts.generate_instances import generate_random_ilp


def load_example(name: str) -> SolveRequest:
    path = Path(__file__).resolve().parent.parent / "examples" / name
    return SolveRequest.model_validate_json(path.read_text())


def main() -> None:
    parser = argparse.ArgumentParser(description="Time every installed backend on the same requests.")
    parser.add_argument("--presolve", action="store_true", help="Enable presolve")
    parser.add_argument("--time-limit", type=float, default=10.0, help="Per-solve time limit in seconds")
    args = parser.parse_args()

    cases = [("examples/three_binary.json", load_example("three_binary.json"))]
    for seed in range(3):
        cases.append((f"random-{seed}", generate_random_ilp(12, 6, seed, num_objectives=2)))

    print("solver,name,status,objective,time_ms")
    for solver_type in SolverType:
        try:
            solver = create_solver(solver_type, time_limit=args.time_limit)
        except ImportError:
            continue
        for name, request in cases:
            start = time.perf_counter()
            try:
                solutions = solver.solve(request.polyhedron, request.objectives, request.direction, args.presolve)
            except SolverEngineError as exc:
                print(f"{solver.name},{name},error,{json.dumps(str(exc))},")
                continue
            elapsed_ms = (time.perf_counter() - start) * 1000
            for solution in solutions:
                print(f"{solver.name},{name},{solution.status.label},{solution.objective},{elapsed_ms:.2f}")


if __name__ == "__main__":
    main()
