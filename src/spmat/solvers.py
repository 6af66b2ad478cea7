"""
Iterative solvers for square sparse linear systems A x = b.

All solvers share the same contract:
    - A must be square and len(b) == A.nrow, otherwise DimensionMismatchError
    - every row needs a non-zero diagonal entry, otherwise SingularDiagonalError
    - reaching max_iter without meeting the threshold raises NonConvergenceError
      and the partial iterate is discarded

An optional progress callable is invoked as progress(iteration, error) every
report_every iterations.
"""

from typing import Callable, Optional

import numpy as np

from .sparse_matrix import CRSMatrix
from .matrix_ops import multiply
from .constants import DEFAULT_THRESHOLD, DEFAULT_MAX_ITER, DEFAULT_SOR_RELAXATION
from .spmat_errors import DimensionMismatchError, SingularDiagonalError, NonConvergenceError, InvalidParameterError


ProgressSink = Callable[[int, object], None]


def _prepare_system(matrix: CRSMatrix, b, threshold, max_iter: int, report_every: int) -> np.ndarray:
    if matrix.nrow != matrix.ncol:
        raise DimensionMismatchError("solve", matrix.shape, matrix.shape)
    b = np.asarray(b)
    if b.ndim != 1 or b.shape[0] != matrix.nrow:
        raise DimensionMismatchError("solve", matrix.shape, b.shape)
    if threshold < 0:
        raise InvalidParameterError("threshold", threshold, "a non-negative value")
    if max_iter < 1:
        raise InvalidParameterError("max_iter", max_iter, "at least 1")
    if report_every < 1:
        raise InvalidParameterError("report_every", report_every, "at least 1")
    # integer systems are solved in floating point, object (custom field) systems stay object
    dtype = np.result_type(matrix.dtype, b.dtype, np.float64)
    return b.astype(dtype, copy=True)


def _check_diagonal(matrix: CRSMatrix, method: str) -> np.ndarray:
    diag = matrix.diagonal()
    zero_rows = np.flatnonzero(np.asarray(diag == 0, dtype=bool))
    if len(zero_rows) > 0:
        raise SingularDiagonalError(int(zero_rows[0]), method)
    return diag


def _split_diagonal(matrix: CRSMatrix, method: str) -> tuple[np.ndarray, CRSMatrix]:
    """Split A into its diagonal D (dense) and off-diagonal part R (sparse), A = D + R."""
    diag = _check_diagonal(matrix, method)
    rows = matrix.row_indices()
    off_mask = rows != matrix.columns

    off = CRSMatrix(matrix.nrow, matrix.ncol, dtype=matrix.dtype)
    off.values = matrix.values[off_mask]
    off.columns = matrix.columns[off_mask]
    counts = np.bincount(rows[off_mask], minlength=matrix.nrow)
    off.row_start = np.concatenate(([0], np.cumsum(counts))).astype(np.intp)
    return diag, off


def _report(progress: Optional[ProgressSink], report_every: int, n_iter: int, error) -> None:
    if progress is not None and n_iter % report_every == 0:
        progress(n_iter, error)


def solve_jacobi(matrix: CRSMatrix, b, threshold=DEFAULT_THRESHOLD, max_iter: int = DEFAULT_MAX_ITER,
                 progress: Optional[ProgressSink] = None, report_every: int = 1) -> np.ndarray:
    """
    Solve A x = b with Jacobi iteration.

    Every sweep uses only the previous iterate:
        x_next = (b - R x_prev) / D
    starting from x = b. Stops once max|x_next - x_prev| <= threshold.

    Args:
        matrix: Square system matrix
        b: Dense right-hand side
        threshold: Convergence threshold on the max-norm of the per-sweep change
        max_iter: Iteration cap
        progress: Optional sink called as progress(iteration, max_norm_change)
        report_every: Call progress every this many iterations

    Returns:
        The approximate solution vector
    """
    b = _prepare_system(matrix, b, threshold, max_iter, report_every)
    diag, off = _split_diagonal(matrix, "Jacobi")
    if len(b) == 0:
        return b

    x = b.copy()
    diff = None
    for n_iter in range(1, max_iter + 1):
        x_next = (b - multiply(off, x)) / diag
        diff = np.max(np.abs(x_next - x))
        x = x_next
        _report(progress, report_every, n_iter, diff)
        if diff <= threshold:
            return x

    raise NonConvergenceError("Jacobi", max_iter, diff)


def solve_sor(matrix: CRSMatrix, b, relaxation=DEFAULT_SOR_RELAXATION, threshold=DEFAULT_THRESHOLD,
              max_iter: int = DEFAULT_MAX_ITER, progress: Optional[ProgressSink] = None,
              report_every: int = 1) -> np.ndarray:
    """
    Solve A x = b with successive over-relaxation.

    The iterate is updated in place row by row, so each row already sees the values
    written earlier in the same sweep:
        x[i] <- relaxation * (b[i] - sum_{j != i} A[i, j] x[j]) / A[i, i] + (1 - relaxation) * x[i]
    starting from x = b. Stops once the max-norm of the per-sweep change is <= threshold.
    relaxation == 1 is Gauss-Seidel.

    Raises:
        InvalidParameterError: If relaxation is outside [1, 2)
    """
    b = _prepare_system(matrix, b, threshold, max_iter, report_every)
    if not (1 <= relaxation < 2):
        raise InvalidParameterError("relaxation", relaxation, "a value in [1, 2)")
    method = "Gauss-Seidel" if relaxation == 1 else f"SOR({relaxation})"
    diag, off = _split_diagonal(matrix, method)
    if len(b) == 0:
        return b

    x = b.copy()
    diff = None
    for n_iter in range(1, max_iter + 1):
        diff = 0
        for r in range(matrix.nrow):
            start, end = off.row_start[r], off.row_start[r + 1]
            sigma = b[r]
            if start < end:
                sigma = sigma - np.dot(off.values[start:end], x[off.columns[start:end]])
            x_r = relaxation * sigma / diag[r] + (1 - relaxation) * x[r]
            diff = max(diff, abs(x_r - x[r]))
            x[r] = x_r
        _report(progress, report_every, n_iter, diff)
        if diff <= threshold:
            return x

    raise NonConvergenceError(method, max_iter, diff)


def solve_gauss_seidel(matrix: CRSMatrix, b, threshold=DEFAULT_THRESHOLD, max_iter: int = DEFAULT_MAX_ITER,
                       progress: Optional[ProgressSink] = None, report_every: int = 1) -> np.ndarray:
    """Solve A x = b with Gauss-Seidel iteration, i.e. SOR with relaxation 1."""
    return solve_sor(matrix, b, relaxation=1, threshold=threshold, max_iter=max_iter,
                     progress=progress, report_every=report_every)


def solve_cg(matrix: CRSMatrix, b, threshold=DEFAULT_THRESHOLD, max_iter: int = DEFAULT_MAX_ITER,
             progress: Optional[ProgressSink] = None, report_every: int = 1) -> np.ndarray:
    """
    Solve A x = b with the unpreconditioned conjugate gradient method.

    A is assumed symmetric positive-definite; nothing checks this. Starting from x = 0,
    iterates until the residual norm |b - A x|_2 drops below threshold. The progress
    sink receives the squared residual r.r, so no square root is ever taken.
    """
    b = _prepare_system(matrix, b, threshold, max_iter, report_every)
    _check_diagonal(matrix, "Conjugate Gradient")

    x = np.zeros_like(b)
    if len(b) == 0:
        return x
    r = b.copy()
    p = r.copy()
    rr_old = np.dot(r, r)
    # compare squared norms so custom field types never need a square root
    threshold_sq = threshold * threshold
    if rr_old < threshold_sq:
        return x

    rr_new = rr_old
    for n_iter in range(1, max_iter + 1):
        ap = multiply(matrix, p)
        p_ap = np.dot(p, ap)
        if p_ap == 0:
            # search direction annihilated by A, no further progress is possible
            raise NonConvergenceError("Conjugate Gradient", max_iter, rr_new, iterations=n_iter)
        alpha = rr_old / p_ap
        x = x + alpha * p
        r = r - alpha * ap
        rr_new = np.dot(r, r)
        _report(progress, report_every, n_iter, rr_new)
        if rr_new < threshold_sq:
            return x
        beta = rr_new / rr_old
        p = r + beta * p
        rr_old = rr_new

    raise NonConvergenceError("Conjugate Gradient", max_iter, rr_new)
