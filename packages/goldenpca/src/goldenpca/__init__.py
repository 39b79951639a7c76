"""
goldenpca — software golden reference for batched PCA.

Computes, per batch entry, the covariance (Gram) matrix of a sample matrix
and its eigenvalues/eigenvectors by shifted QR iteration. Accelerated
implementations are validated against these outputs.

    from goldenpca import GoldenPCA
    pca = GoldenPCA(samples, features, count, input_matrices=mats)
    pca.compute_covariance_matrix()
    pca.compute_eigen_values_and_vectors()
"""

__version__ = '0.1.0'

from goldenpca.config import CONFIG, SolveOptions, load_config, get_threshold, validate_config
from goldenpca.covariance import compute_covariance, compute_covariance_batch
from goldenpca.eigen import (
    EigenResult,
    IterationState,
    solve_eigen,
    find_shift_row,
    wilkinson_shift,
    modified_gram_schmidt,
)
from goldenpca.golden import GoldenPCA
from goldenpca.postprocess import sort_eigenpairs, sort_batch

__all__ = [
    'CONFIG',
    'SolveOptions',
    'load_config',
    'get_threshold',
    'validate_config',
    'compute_covariance',
    'compute_covariance_batch',
    'EigenResult',
    'IterationState',
    'solve_eigen',
    'find_shift_row',
    'wilkinson_shift',
    'modified_gram_schmidt',
    'GoldenPCA',
    'sort_eigenpairs',
    'sort_batch',
]
