"""
Random sample matrices for exercising the golden reference.

Uniform draws in [low, high), one (samples × features) float64 matrix per
batch entry. Seeded runs are reproducible.
"""

import numpy as np
from typing import List, Optional

from goldenpca.config import CONFIG


def generate_sample_matrices(
    samples: int,
    features: int,
    count: int,
    seed: Optional[int] = CONFIG['generator']['seed'],
    low: float = CONFIG['generator']['low'],
    high: float = CONFIG['generator']['high'],
) -> List[np.ndarray]:
    """
    Generate `count` random sample matrices.

    Args:
        samples: Rows per matrix
        features: Columns per matrix
        count: Number of matrices
        seed: RNG seed (None = fresh entropy)
        low, high: Uniform bounds

    Returns:
        List of (samples, features) float64 arrays
    """
    if samples < 1 or features < 1 or count < 1:
        raise ValueError(
            f"samples, features and count must be >= 1, got {samples}, {features}, {count}"
        )
    if low >= high:
        raise ValueError(f"low must be < high, got [{low}, {high})")

    rng = np.random.default_rng(seed)
    return [rng.uniform(low, high, size=(samples, features)) for _ in range(count)]
