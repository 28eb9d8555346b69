from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence

import swiglpk as glp

from ..errors import UnrecognizedStatusError
from ..schemas import Direction, Objective, Polyhedron, Solution, Status
from ..sparse import coordinate_entries
from .base import Solver, failed_solution, objective_coefficients, round_half_away, rounded_solution

logger = logging.getLogger(__name__)

# glp_get_status / glp_mip_status codes
_STATUS_MAP = {
    glp.GLP_UNDEF: (Status.UNDEFINED, "Solution is undefined"),
    glp.GLP_FEAS: (Status.FEASIBLE, None),
    glp.GLP_INFEAS: (Status.INFEASIBLE, "Infeasible solution exists"),
    glp.GLP_NOFEAS: (Status.NO_FEASIBLE, "No feasible solution exists"),
    glp.GLP_OPT: (Status.OPTIMAL, None),
    glp.GLP_UNBND: (Status.UNBOUNDED, "Problem is unbounded"),
}

_INTOPT_LIMIT_CODES = {glp.GLP_ETMLIM, glp.GLP_EMIPGAP, glp.GLP_ESTOP}
_INTOPT_FAILURE_CODES = {glp.GLP_EBOUND, glp.GLP_EROOT, glp.GLP_EFAIL}
_SIMPLEX_FAILURE_CODES = {
    glp.GLP_EBADB,
    glp.GLP_ESING,
    glp.GLP_ECOND,
    glp.GLP_EBOUND,
    glp.GLP_EFAIL,
    glp.GLP_EOBJLL,
    glp.GLP_EOBJUL,
    glp.GLP_EITLIM,
    glp.GLP_ETMLIM,
    glp.GLP_ENOPFS,
    glp.GLP_ENODFS,
}


@contextmanager
def _glpk_problem() -> Iterator[object]:
    lp = glp.glp_create_prob()
    try:
        yield lp
    finally:
        glp.glp_delete_prob(lp)


class GlpkSolver(Solver):
    """
    GLPK simplex + branch-and-bound.

    The problem is built once per request; only the objective coefficients are
    rewritten between objectives.
    """

    name = "GLPK"

    def __init__(self, time_limit: Optional[float] = None, binary_fast_path: bool = True) -> None:
        super().__init__(time_limit=time_limit)
        self.binary_fast_path = binary_fast_path

    def _solve(
        self,
        polyhedron: Polyhedron,
        objectives: Sequence[Objective],
        direction: Direction,
        use_presolve: bool,
    ) -> List[Solution]:
        glp.glp_term_out(glp.GLP_OFF)
        ids = [var.id for var in polyhedron.variables]

        with _glpk_problem() as lp:
            glp.glp_set_obj_dir(lp, glp.GLP_MAX if direction == "maximize" else glp.GLP_MIN)
            self._add_rows(lp, polyhedron)
            self._add_columns(lp, polyhedron)
            self._load_matrix(lp, polyhedron)

            solutions: List[Solution] = []
            for objective in objectives:
                for j, coef in enumerate(objective_coefficients(polyhedron, objective), start=1):
                    glp.glp_set_obj_coef(lp, j, coef)
                solutions.append(self._solve_objective(lp, ids, use_presolve))
            return solutions

    def _add_rows(self, lp, polyhedron: Polyhedron) -> None:
        glp.glp_add_rows(lp, len(polyhedron.b))
        for i, (lower, upper) in enumerate(polyhedron.row_bounds(), start=1):
            if lower is None:
                glp.glp_set_row_bnds(lp, i, glp.GLP_UP, 0.0, float(upper))
            elif lower == upper:
                glp.glp_set_row_bnds(lp, i, glp.GLP_FX, float(lower), float(upper))
            else:
                glp.glp_set_row_bnds(lp, i, glp.GLP_DB, float(lower), float(upper))

    def _add_columns(self, lp, polyhedron: Polyhedron) -> None:
        glp.glp_add_cols(lp, len(polyhedron.variables))
        for j, var in enumerate(polyhedron.variables, start=1):
            bound_type = glp.GLP_FX if var.is_fixed else glp.GLP_DB
            glp.glp_set_col_bnds(lp, j, bound_type, float(var.lower), float(var.upper))
            if self.binary_fast_path and var.is_binary:
                glp.glp_set_col_kind(lp, j, glp.GLP_BV)
            else:
                glp.glp_set_col_kind(lp, j, glp.GLP_IV)

    def _load_matrix(self, lp, polyhedron: Polyhedron) -> None:
        entries = coordinate_entries(polyhedron.a)
        ne = len(entries)
        # GLPK arrays are 1-based; element 0 is ignored
        ia = glp.intArray(ne + 1)
        ja = glp.intArray(ne + 1)
        ar = glp.doubleArray(ne + 1)
        for k, (row, col, val) in enumerate(entries, start=1):
            ia[k] = row + 1
            ja[k] = col + 1
            ar[k] = float(val)
        glp.glp_load_matrix(lp, ne, ia, ja, ar)

    def _solve_objective(self, lp, ids: List[str], use_presolve: bool) -> Solution:
        if not use_presolve:
            relaxation = self._solve_relaxation(lp)
            if relaxation is not None:
                return relaxation

        params = glp.glp_iocp()
        glp.glp_init_iocp(params)
        params.msg_lev = glp.GLP_MSG_OFF
        params.presolve = glp.GLP_ON if use_presolve else glp.GLP_OFF
        if self.time_limit is not None:
            params.tm_lim = int(self.time_limit * 1000)

        ret = glp.glp_intopt(lp, params)
        if ret == 0:
            return self._read_mip(lp, ids)
        if ret == glp.GLP_ENOPFS:
            return failed_solution(Status.INFEASIBLE, "Problem has no primal feasible solution")
        if ret == glp.GLP_ENODFS:
            return failed_solution(Status.UNBOUNDED, "LP relaxation has no dual feasible solution")
        if ret in _INTOPT_LIMIT_CODES and glp.glp_mip_status(lp) == glp.GLP_FEAS:
            return self._read_mip(lp, ids)
        if ret in _INTOPT_LIMIT_CODES or ret in _INTOPT_FAILURE_CODES:
            logger.warning("GLPK MIP solver failed", extra={"reason": ret})
            return failed_solution(Status.MIP_FAILED, f"GLPK MIP solver failed with code: {ret}")
        raise UnrecognizedStatusError(f"Unknown GLPK return code when solving ({ret})")

    def _solve_relaxation(self, lp) -> Optional[Solution]:
        """Without the integer presolver glp_intopt needs an optimal relaxation basis."""

        params = glp.glp_smcp()
        glp.glp_init_smcp(params)
        params.msg_lev = glp.GLP_MSG_OFF
        if self.time_limit is not None:
            params.tm_lim = int(self.time_limit * 1000)

        ret = glp.glp_simplex(lp, params)
        if ret != 0:
            if ret not in _SIMPLEX_FAILURE_CODES:
                raise UnrecognizedStatusError(f"Unknown GLPK return code from simplex ({ret})")
            logger.warning("GLPK simplex failed", extra={"reason": ret})
            return failed_solution(Status.SIMPLEX_FAILED, f"GLPK simplex solver failed with code: {ret}")

        status = glp.glp_get_status(lp)
        if status == glp.GLP_OPT:
            return None
        status, message = self._translate(status)
        return failed_solution(status, message or "LP relaxation has no optimal solution")

    def _read_mip(self, lp, ids: List[str]) -> Solution:
        status, message = self._translate(glp.glp_mip_status(lp))
        if status not in (Status.OPTIMAL, Status.FEASIBLE):
            return failed_solution(status, message)
        values = [glp.glp_mip_col_val(lp, j) for j in range(1, len(ids) + 1)]
        return Solution(
            status=status,
            objective=round_half_away(glp.glp_mip_obj_val(lp)),
            solution=rounded_solution(ids, values),
        )

    @staticmethod
    def _translate(code: int):
        try:
            return _STATUS_MAP[code]
        except KeyError:
            raise UnrecognizedStatusError(f"Unknown status when solving ({code})") from None
