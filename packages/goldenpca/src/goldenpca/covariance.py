"""
Covariance of a sample matrix.

For A (samples × features) the covariance is the Gram product AᵗA:
    C[row, col] = Σₖ A[k, row] · A[k, col]

Accumulation is always float64, whatever the storage precision of A.
No division by (samples - 1) unless asked for.
"""

import numpy as np


def compute_covariance(sample: np.ndarray, normalize: bool = False) -> np.ndarray:
    """
    Covariance matrix of one sample matrix.

    Parameters
    ----------
    sample : np.ndarray
        (samples, features) matrix.
    normalize : bool
        If True, divide by (samples - 1). Default keeps the raw Gram product.

    Returns
    -------
    np.ndarray
        (features, features) float64, exactly symmetric.
    """
    a = np.asarray(sample)
    if a.ndim != 2:
        raise ValueError(f"Sample matrix must be 2-D, got shape {a.shape}")
    n_samples, n_features = a.shape
    if n_samples < 1 or n_features < 1:
        raise ValueError(f"Sample matrix needs samples >= 1 and features >= 1, got {a.shape}")

    a = a.astype(np.float64, copy=False)
    gram = a.T @ a

    # Mirror the upper triangle so C[i, j] == C[j, i] bit for bit
    cov = np.triu(gram) + np.triu(gram, 1).T

    if normalize:
        cov /= max(n_samples - 1, 1)
    return cov


def compute_covariance_batch(samples: np.ndarray, normalize: bool = False) -> np.ndarray:
    """
    Covariance for a stack of sample matrices.

    samples : (count, n_samples, n_features) → (count, n_features, n_features)
    """
    stack = np.asarray(samples)
    if stack.ndim != 3:
        raise ValueError(f"Expected (count, samples, features) stack, got shape {stack.shape}")

    count, _, n_features = stack.shape
    out = np.empty((count, n_features, n_features), dtype=np.float64)
    for i in range(count):
        out[i] = compute_covariance(stack[i], normalize=normalize)
    return out
