"""
Shifted QR iteration for symmetric matrices.

One solve owns its scratch state:
    rq:           working copy of the input, mutated every iteration
    eigenvectors: accumulator, starts at I, right-multiplied by each Q

Per iteration:
    1. find the deflation boundary (innermost non-deflated trailing row)
    2. Wilkinson shift from the trailing 2×2 block (0 on iteration 0, damped after)
    3. RQ -= μI
    4. RQ = QR  (modified Gram-Schmidt)
    5. V  = V · Q
    6. RQ = R · Q
    7. RQ += μI
    8. converged when every sub-diagonal |RQ[i, j]| < threshold
    9. stop at features² × 16 iterations unless the bound is lifted

Eigenvalues are diag(RQ) in whatever order the iteration leaves them.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np

from goldenpca.config import SolveOptions

logger = logging.getLogger(__name__)

# Norm ratio below which a Gram-Schmidt column is projected a second time
REORTHOGONALIZE = 0.7


@dataclass
class IterationState:
    """
    Snapshot handed to observers after each iteration.

    rq and eigenvectors are read-only views into solver scratch, valid
    for the duration of the callback. Copy them to keep them.
    """
    iteration: int
    shift: float
    residual: float
    converged: bool
    rq: np.ndarray
    eigenvectors: np.ndarray


@dataclass
class EigenResult:
    eigenvalues: np.ndarray
    eigenvectors: np.ndarray
    iterations: int
    converged: bool


Observer = Callable[[IterationState], None]


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------

def find_shift_row(rq: np.ndarray, threshold: float) -> int:
    """
    Top-left index of the trailing 2×2 block to take the shift from.

    Scans rows bottom-up. A row is deflated when every entry left of the
    diagonal is below threshold. Returns (first non-deflated row) - 1,
    or -1 when the whole matrix is deflated.
    """
    n = rq.shape[0]
    for row in range(n - 1, 0, -1):
        if not np.all(np.abs(rq[row, :row]) < threshold):
            return row - 1
    return -1


def wilkinson_shift(a: float, b: float, c: float) -> float:
    """
    Eigenvalue of [[a, b], [b, c]] closest to c.

        d = (a - c) / 2
        μ = c - sign(d) · b² / (|d| + √(d² + b²)),   sign(0) = +1

    b ≈ 0 and d ≈ 0 together give μ = c.
    """
    d = (a - c) / 2.0
    b_squared = b * b
    denom = abs(d) + np.sqrt(d * d + b_squared)
    if denom <= np.finfo(np.float64).tiny:
        return float(c)
    signed = -b_squared if d < 0 else b_squared
    return float(c - signed / denom)


def _orthonormal_complement(basis: np.ndarray) -> np.ndarray:
    """Unit vector orthogonal to the (orthonormal) columns of `basis`."""
    n = basis.shape[0]
    candidates = np.eye(n) - basis @ basis.T
    norms = np.linalg.norm(candidates, axis=0)
    k = int(np.argmax(norms))
    return candidates[:, k] / norms[k]


def modified_gram_schmidt(matrix: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    QR decomposition by modified Gram-Schmidt on columns.

    Column i is normalized into Q[:, i] with its norm in R[i, i]; its
    component is then projected out of every later column, the coefficient
    going to R[i, j].

    A column that loses most of its norm to the projections is
    orthogonalized a second time against Q[:, :i]. If the second pass
    cancels it again, or it is negligible against its original norm, the
    column lies in the span of the previous ones (rank-deficient or
    singular shifted matrix): it gets R[i, i] = 0 and a unit vector
    orthogonal to the previous columns, so Q stays orthogonal and Q · R
    still equals the input.
    """
    work = np.array(matrix, dtype=np.float64, copy=True)
    n = work.shape[0]
    q = np.zeros_like(work)
    r = np.zeros_like(work)
    original = np.linalg.norm(work, axis=0)
    negligible = n * np.finfo(np.float64).eps * original

    for i in range(n):
        column = work[:, i]
        rii = float(np.linalg.norm(column))
        dependent = False
        if i > 0 and rii < REORTHOGONALIZE * original[i]:
            correction = q[:, :i].T @ column
            column -= q[:, :i] @ correction
            r[:i, i] += correction
            before, rii = rii, float(np.linalg.norm(column))
            dependent = rii < REORTHOGONALIZE * before

        if dependent or rii <= negligible[i]:
            q[:, i] = _orthonormal_complement(q[:, :i])
        else:
            r[i, i] = rii
            q[:, i] = column / rii

        if i + 1 < n:
            coeffs = q[:, i] @ work[:, i + 1:]
            r[i, i + 1:] = coeffs
            work[:, i + 1:] -= np.outer(q[:, i], coeffs)

    return q, r


def subdiagonal_residual(rq: np.ndarray) -> float:
    """Largest |entry| strictly below the diagonal (0.0 for 1×1)."""
    rows, cols = np.tril_indices(rq.shape[0], -1)
    if len(rows) == 0:
        return 0.0
    return float(np.max(np.abs(rq[rows, cols])))


def is_converged(rq: np.ndarray, threshold: float) -> bool:
    rows, cols = np.tril_indices(rq.shape[0], -1)
    return bool(np.all(np.abs(rq[rows, cols]) < threshold))


def _read_only(a: np.ndarray) -> np.ndarray:
    v = a.view()
    v.flags.writeable = False
    return v


# ---------------------------------------------------------------------------
# Solve
# ---------------------------------------------------------------------------

def solve_eigen(
    covariance: np.ndarray,
    options: Optional[SolveOptions] = None,
    observer: Optional[Observer] = None,
) -> EigenResult:
    """
    Eigenvalues and eigenvectors of a symmetric matrix by shifted QR.

    Parameters
    ----------
    covariance : np.ndarray
        (features, features) symmetric matrix. Not modified.
    options : SolveOptions, optional
        Thresholds and iteration bound. Defaults from CONFIG.
    observer : callable, optional
        Called with an IterationState after every iteration.

    Returns
    -------
    EigenResult
        eigenvalues : (features,) diagonal of the final iterate, unsorted
        eigenvectors : (features, features) accumulated Q, columns are vectors
        iterations : number of QR iterations performed
        converged : False when the iteration bound stopped the solve
    """
    options = options or SolveOptions()

    rq = np.array(covariance, dtype=np.float64, copy=True)
    if rq.ndim != 2 or rq.shape[0] != rq.shape[1]:
        raise ValueError(f"Expected a square matrix, got shape {rq.shape}")
    n = rq.shape[0]
    if n == 0:
        raise ValueError("Cannot solve a 0×0 matrix")

    threshold = options.zero_threshold
    limit = options.iteration_limit(n)
    diag = np.diag_indices(n)

    eigenvectors = np.eye(n)
    iterations = 0
    converged = False

    while not converged:
        shift = 0.0
        if iterations > 0:
            shift_row = find_shift_row(rq, threshold)
            if shift_row >= 0:
                shift = options.shift_damping * wilkinson_shift(
                    rq[shift_row, shift_row],
                    rq[shift_row + 1, shift_row],
                    rq[shift_row + 1, shift_row + 1],
                )

        rq[diag] -= shift
        q, r = modified_gram_schmidt(rq)
        eigenvectors = eigenvectors @ q
        rq = r @ q
        rq[diag] += shift

        converged = is_converged(rq, threshold)
        iterations += 1

        if observer is not None:
            observer(IterationState(
                iteration=iterations,
                shift=float(shift),
                residual=subdiagonal_residual(rq),
                converged=converged,
                rq=_read_only(rq),
                eigenvectors=_read_only(eigenvectors),
            ))

        if not converged and options.enforce_iteration_bound and iterations >= limit:
            logger.warning(
                "Number of iterations too high: stopped after %d iterations "
                "(residual %.3e)", iterations, subdiagonal_residual(rq),
            )
            break

    return EigenResult(
        eigenvalues=np.diag(rq).copy(),
        eigenvectors=eigenvectors,
        iterations=iterations,
        converged=converged,
    )
