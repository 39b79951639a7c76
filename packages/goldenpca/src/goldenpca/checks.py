"""
Numerical diagnostics for golden results.

All return a single max-abs error, 0.0 meaning exact:
    symmetry_error(C)            max |C - Cᵗ|
    orthogonality_error(V)       max |VᵗV - I|
    reconstruction_error(C,λ,V)  max |VᵗCV - diag(λ)|
"""

import numpy as np

from goldenpca.eigen import subdiagonal_residual

__all__ = [
    'subdiagonal_residual',
    'symmetry_error',
    'orthogonality_error',
    'reconstruction_error',
]


def symmetry_error(matrix: np.ndarray) -> float:
    m = np.asarray(matrix, dtype=np.float64)
    return float(np.max(np.abs(m - m.T)))


def orthogonality_error(vectors: np.ndarray) -> float:
    """Deviation of the columns of `vectors` from an orthonormal set."""
    v = np.asarray(vectors, dtype=np.float64)
    return float(np.max(np.abs(v.T @ v - np.eye(v.shape[1]))))


def reconstruction_error(
    covariance: np.ndarray,
    eigenvalues: np.ndarray,
    eigenvectors: np.ndarray,
) -> float:
    """How far VᵗCV is from diag(eigenvalues)."""
    c = np.asarray(covariance, dtype=np.float64)
    v = np.asarray(eigenvectors, dtype=np.float64)
    lam = np.asarray(eigenvalues, dtype=np.float64)
    return float(np.max(np.abs(v.T @ c @ v - np.diag(lam))))
