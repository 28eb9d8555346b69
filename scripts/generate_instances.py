#!/usr/bin/env python3
import argparse
import json
import random
from pathlib import Path
from typing import Optional

from ilp_optimizer.builder import SolveRequestBuilder
from ilp_optimizer.schemas import SolveRequest


def generate_random_ilp(
    num_vars: int,
    num_constraints: int,
    seed: Optional[int] = None,
    num_objectives: int = 1,
    density: float = 0.6,
) -> SolveRequest:
    """Random multi-knapsack: nonnegative weights, capacities that keep the origin feasible."""

    rng = random.Random(seed)
    builder = SolveRequestBuilder()
    names = [f"x{i}" for i in range(num_vars)]
    for name in names:
        upper = 1 if rng.random() < 0.5 else rng.randint(2, 10)
        builder.add_variable(name, 0, upper)

    for _ in range(num_constraints):
        weights = {name: rng.randint(1, 9) for name in names if rng.random() < density}
        if not weights:
            weights = {rng.choice(names): rng.randint(1, 9)}
        capacity = rng.randint(num_vars, num_vars * 5)
        builder.add_constraint(weights, capacity)

    for _ in range(num_objectives):
        builder.add_objective({name: float(rng.randint(1, 6)) for name in names})

    return builder.direction("maximize").build()


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate random feasible ILP solve requests.")
    parser.add_argument("--vars", type=int, default=5, help="Number of variables")
    parser.add_argument("--constraints", type=int, default=3, help="Number of constraints")
    parser.add_argument("--objectives", type=int, default=1, help="Objectives per request")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--count", type=int, default=1, help="Number of instances")
    parser.add_argument("--out", type=Path, default=None, help="Optional output file")
    args = parser.parse_args()

    instances = [
        generate_random_ilp(args.vars, args.constraints, (args.seed or 0) + idx, args.objectives)
        for idx in range(args.count)
    ]
    payload = [instance.model_dump(by_alias=True) for instance in instances]

    if args.out:
        Path(args.out).write_text(json.dumps(payload, indent=2))
    else:
        print(json.dumps(payload, indent=2))


if __name__ == "__main__":
    main()
