"""
Batch golden reference: covariance, then eigenpairs, for every entry.

    pca = GoldenPCA(samples, features, count, input_matrices=mats)
    pca.compute_covariance_matrix()
    pca.compute_eigen_values_and_vectors()
    pca.eigenvalues      # (count, features), unsorted
    pca.eigenvectors     # (count, features, features), columns are vectors
    pca.iterations       # (count,)

Entries are independent. Every output buffer is allocated once here and
filled in place.
"""

import logging
from functools import partial
from typing import Any, Callable, Dict, Optional, Sequence

import numpy as np

from goldenpca.config import CONFIG, SolveOptions, get_threshold
from goldenpca.covariance import compute_covariance
from goldenpca.eigen import IterationState, solve_eigen
from goldenpca.storage import BatchBuffer

logger = logging.getLogger(__name__)


def _format_matlab(matrix: np.ndarray) -> str:
    rows = [" ".join(f"{v:.10g}" for v in row) for row in matrix]
    return "[" + "; ".join(rows) + "]"


class GoldenPCA:
    """
    Software reference for batched covariance + shifted-QR eigendecomposition.

    Parameters
    ----------
    samples, features : int
        Shape of every input matrix.
    matrix_count : int
        Number of batch entries.
    debug : bool
        Log intermediate covariance/eigen state at DEBUG level.
    benchmark : bool
        Lift the iteration bound so every solve runs to convergence.
    input_matrices : sequence of array-like
        matrix_count matrices, each (samples, features).
    dtype : numpy dtype
        Storage precision of the buffers. Accumulation is always float64.
    config : dict, optional
        CONFIG-shaped overrides (see goldenpca.config.load_config).
    observer : callable, optional
        observer(matrix_index, IterationState) after every QR iteration.
    """

    def __init__(
        self,
        samples: int,
        features: int,
        matrix_count: int,
        debug: bool = False,
        benchmark: bool = False,
        input_matrices: Sequence = (),
        dtype=np.float64,
        config: Optional[Dict[str, Any]] = None,
        observer: Optional[Callable[[int, IterationState], None]] = None,
    ):
        for name, value in (('samples', samples), ('features', features),
                            ('matrix_count', matrix_count)):
            if int(value) != value or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value}")
        if len(input_matrices) != matrix_count:
            raise ValueError(
                f"Expected {matrix_count} input matrices, got {len(input_matrices)}"
            )

        self.samples = int(samples)
        self.features = int(features)
        self.matrix_count = int(matrix_count)
        self.debug = debug
        self.benchmark = benchmark
        self.config = CONFIG if config is None else config
        self.observer = observer
        self.options = SolveOptions.from_config(self.config, benchmark=benchmark)
        self.normalize = bool(get_threshold('covariance.normalize', False, self.config))

        self._a = BatchBuffer(matrix_count, (samples, features), dtype)
        self._covariance = BatchBuffer(matrix_count, (features, features), dtype)
        self._eigenvalues = BatchBuffer(matrix_count, (features,), dtype)
        self._eigenvectors = BatchBuffer(matrix_count, (features, features), dtype)
        self._iterations = BatchBuffer(matrix_count, (), np.int64)
        self._converged = BatchBuffer(matrix_count, (), np.bool_)
        self._has_covariance = False

        for index, matrix in enumerate(input_matrices):
            matrix = np.asarray(matrix)
            if matrix.shape != (self.samples, self.features):
                raise ValueError(
                    f"Input matrix {index} has shape {matrix.shape}, "
                    f"expected ({self.samples}, {self.features})"
                )
            self._a.store(index, matrix)

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    @property
    def sample_matrices(self) -> np.ndarray:
        return self._a.view()

    @property
    def covariance_matrices(self) -> np.ndarray:
        return self._covariance.view()

    @property
    def eigenvalues(self) -> np.ndarray:
        return self._eigenvalues.view()

    @property
    def eigenvectors(self) -> np.ndarray:
        return self._eigenvectors.view()

    @property
    def iterations(self) -> np.ndarray:
        return self._iterations.view()

    @property
    def converged(self) -> np.ndarray:
        return self._converged.view()

    # ------------------------------------------------------------------
    # Covariance
    # ------------------------------------------------------------------

    def compute_covariance_ith_matrix(self, matrix_index: int) -> None:
        cov = compute_covariance(self._a.entry(matrix_index), normalize=self.normalize)
        self._covariance.store(matrix_index, cov)

        if self.debug:
            logger.debug("Covariance matrix #%d", matrix_index)
            logger.debug("Cov=%s", _format_matlab(self._covariance.entry(matrix_index)))

    def compute_covariance_matrix(self) -> None:
        """Covariance of every entry. Re-running overwrites the previous output."""
        for matrix_index in range(self.matrix_count):
            self.compute_covariance_ith_matrix(matrix_index)
        self._has_covariance = True

    # ------------------------------------------------------------------
    # Eigenvalues / eigenvectors
    # ------------------------------------------------------------------

    def compute_eigen_ith_matrix(self, matrix_index: int) -> None:
        if not self._has_covariance:
            raise RuntimeError(
                "compute_covariance_matrix() must run before the eigen solve"
            )
        if self.debug:
            logger.debug("Computing eigenvalues and vectors of matrix #%d", matrix_index)

        observer = None
        if self.observer is not None:
            observer = partial(self.observer, matrix_index)

        result = solve_eigen(
            self._covariance.entry(matrix_index),
            options=self.options,
            observer=observer,
        )
        self._eigenvalues.store(matrix_index, result.eigenvalues)
        self._eigenvectors.store(matrix_index, result.eigenvectors)
        self._iterations.store(matrix_index, result.iterations)
        self._converged.store(matrix_index, result.converged)

        if self.debug:
            logger.debug("QR iteration stopped after %d iterations", result.iterations)
            logger.debug("Eigenvalues for matrix #%d: %s", matrix_index,
                         " ".join(f"{v:.10g}" for v in self._eigenvalues.entry(matrix_index)))
            logger.debug("Eigenvectors for matrix #%d: %s", matrix_index,
                         _format_matlab(self._eigenvectors.entry(matrix_index)))

    def compute_eigen_values_and_vectors(self) -> None:
        """Shifted-QR eigenpairs of every stored covariance matrix."""
        for matrix_index in range(self.matrix_count):
            self.compute_eigen_ith_matrix(matrix_index)
