from __future__ import annotations

import logging
import secrets
from functools import lru_cache
from typing import List

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response

from .config import get_settings, setup_logging
from .errors import SolveInputError, SolverEngineError
from .schemas import Direction, Objective, Polyhedron, SolveRequest, SolveResponse
from .solvers import Solver, solver_from_name
from .validate import validate_dimensions

logger = logging.getLogger(__name__)

app = FastMCP("ILP Optimizer")


@lru_cache
def get_solver() -> Solver:
    """The process-wide adapter, resolved once from configuration."""
    settings = get_settings()
    return solver_from_name(settings.solver, time_limit=settings.time_limit)


def run_solve(request: SolveRequest) -> SolveResponse:
    validate_dimensions(request.polyhedron)
    solutions = get_solver().solve(
        request.polyhedron,
        request.objectives,
        request.direction,
        use_presolve=get_settings().use_presolve,
    )
    return SolveResponse(solutions=solutions)


@app.tool()
def solve(polyhedron: Polyhedron, objectives: List[Objective], direction: Direction) -> dict:
    "Solve one integer linear program per objective over the polyhedron A·x <= b."
    request = SolveRequest(polyhedron=polyhedron, objectives=objectives, direction=direction)
    try:
        response = run_solve(request)
    except SolveInputError as exc:
        return {"error": exc.details, "solutions": None}
    return response.model_dump(mode="json")


@app.tool()
def describe_solver() -> dict:
    "Report the configured backend and presolve setting."
    settings = get_settings()
    return {
        "solver": get_solver().name,
        "use_presolve": settings.use_presolve,
        "time_limit": settings.time_limit,
    }


@app.custom_route("/health", methods=["GET"])
async def health(request: Request) -> Response:
    return PlainTextResponse("OK")


@app.custom_route("/solve", methods=["POST"])
async def solve_http(request: Request) -> Response:
    settings = get_settings()
    if settings.protect:
        provided = request.headers.get("x-api-key", "")
        if not settings.api_key or not secrets.compare_digest(provided, settings.api_key):
            return JSONResponse({"error": "Unauthorized"}, status_code=401)

    too_large = JSONResponse({"error": f"Payload exceeds {settings.json_limit} bytes"}, status_code=413)
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > settings.json_limit:
        return too_large

    body = await request.body()
    # chunked bodies carry no content-length
    if len(body) > settings.json_limit:
        return too_large

    try:
        solve_request = SolveRequest.model_validate_json(body)
    except ValidationError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)

    try:
        response = await run_in_threadpool(run_solve, solve_request)
    except SolveInputError as exc:
        return JSONResponse({"error": exc.details}, status_code=400)
    except SolverEngineError:
        logger.exception("Solver failed")
        return JSONResponse({"error": "Something went wrong"}, status_code=500)

    return JSONResponse(response.model_dump(mode="json"))


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_json)
    # fail on a bad SOLVER value before accepting traffic
    solver = get_solver()
    logger.info("Starting with %s", solver.name)

    if settings.mcp_transport == "stdio":
        app.run(transport="stdio")
        return

    app.settings.host = settings.host
    app.settings.port = settings.port
    app.settings.streamable_http_path = "/mcp"
    app.settings.transport_security = TransportSecuritySettings(
        enable_dns_rebinding_protection=False,
        allowed_hosts=["*"],
        allowed_origins=["*"],
    )
    app.run(transport="streamable-http")


if __name__ == "__main__":
    main()
