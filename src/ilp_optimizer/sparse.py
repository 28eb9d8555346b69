from __future__ import annotations

from typing import List, NamedTuple, Tuple

import numpy as np
from scipy.sparse import coo_matrix

from .schemas import IntegerSparseMatrix


class CompressedColumns(NamedTuple):
    """
    Column-major layout: the entries of column j are
    indices[starts[j]:starts[j + 1]] / values[starts[j]:starts[j + 1]].
    starts has ncols + 1 entries.
    """

    starts: np.ndarray
    indices: np.ndarray
    values: np.ndarray

    @property
    def nnz(self) -> int:
        return int(self.values.size)


def to_coo(matrix: IntegerSparseMatrix) -> coo_matrix:
    """
    Build a scipy COO matrix with duplicate coordinates summed and zeros dropped.
    The canonical matrix is left untouched.
    """

    shape = (matrix.shape.nrows, matrix.shape.ncols)
    coo = coo_matrix(
        (
            np.asarray(matrix.vals, dtype=np.int64),
            (np.asarray(matrix.rows, dtype=np.int64), np.asarray(matrix.cols, dtype=np.int64)),
        ),
        shape=shape,
    )
    coo.sum_duplicates()
    coo.eliminate_zeros()
    return coo


def coordinate_entries(matrix: IntegerSparseMatrix) -> List[Tuple[int, int, int]]:
    coo = to_coo(matrix)
    return [(int(r), int(c), int(v)) for r, c, v in zip(coo.row, coo.col, coo.data)]


def rows_by_index(matrix: IntegerSparseMatrix) -> List[List[Tuple[int, int]]]:
    """Nonzero (col, val) pairs of every row, in column order."""

    csr = to_coo(matrix).tocsr()
    csr.sort_indices()
    grouped: List[List[Tuple[int, int]]] = []
    for row in range(matrix.shape.nrows):
        start, end = csr.indptr[row], csr.indptr[row + 1]
        grouped.append([(int(c), int(v)) for c, v in zip(csr.indices[start:end], csr.data[start:end])])
    return grouped


def to_csc(matrix: IntegerSparseMatrix) -> CompressedColumns:
    csc = to_coo(matrix).tocsc()
    csc.sort_indices()
    return CompressedColumns(
        starts=csc.indptr.astype(np.int32),
        indices=csc.indices.astype(np.int32),
        values=csc.data.astype(np.float64),
    )
