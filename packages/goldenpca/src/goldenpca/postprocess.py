"""
Explicit eigenpair ordering.

The QR iteration leaves eigenvalues in whatever order it converges to.
Consumers that compare against a canonical order sort here, on copies,
keeping each eigenvector column paired with its eigenvalue.
"""

import numpy as np
from typing import Tuple


def sort_eigenpairs(
    eigenvalues: np.ndarray,
    eigenvectors: np.ndarray,
    descending: bool = True,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Sort one solve's eigenpairs by eigenvalue.

    Parameters
    ----------
    eigenvalues : np.ndarray
        (features,)
    eigenvectors : np.ndarray
        (features, features), column k pairs with eigenvalues[k].
    descending : bool
        Largest first (default) or smallest first.

    Returns
    -------
    (eigenvalues, eigenvectors) as new arrays.
    """
    eigenvalues = np.asarray(eigenvalues)
    eigenvectors = np.asarray(eigenvectors)
    if eigenvectors.shape != (len(eigenvalues), len(eigenvalues)):
        raise ValueError(
            f"Eigenvector shape {eigenvectors.shape} does not match "
            f"{len(eigenvalues)} eigenvalues"
        )

    # Stable so equal eigenvalues keep their iteration order
    keys = -eigenvalues if descending else eigenvalues
    idx = np.argsort(keys, kind='stable')
    return eigenvalues[idx].copy(), eigenvectors[:, idx].copy()


def sort_batch(
    eigenvalues: np.ndarray,
    eigenvectors: np.ndarray,
    descending: bool = True,
) -> Tuple[np.ndarray, np.ndarray]:
    """Sort every entry of (count, features) / (count, features, features) arrays."""
    eigenvalues = np.asarray(eigenvalues)
    eigenvectors = np.asarray(eigenvectors)
    values_out = np.empty_like(eigenvalues)
    vectors_out = np.empty_like(eigenvectors)
    for i in range(eigenvalues.shape[0]):
        values_out[i], vectors_out[i] = sort_eigenpairs(
            eigenvalues[i], eigenvectors[i], descending=descending
        )
    return values_out, vectors_out
