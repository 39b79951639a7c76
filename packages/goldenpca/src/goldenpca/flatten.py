"""
Flatten golden results to parquet-ready rows.

GoldenPCA holds arrays per batch entry (eigenvalues, eigenvectors). This
module flattens each entry into a single dict of scalars, and a batch into
a polars DataFrame.
"""

import polars as pl
from typing import Any, Dict, List


def flatten_entry(
    pca,
    matrix_index: int,
    include_vectors: bool = False,
) -> Dict[str, Any]:
    """
    Flatten one batch entry to scalar key-value pairs.

    Parameters
    ----------
    pca : GoldenPCA
        A batch whose eigen solve has run.
    matrix_index : int
        Batch position.
    include_vectors : bool
        If True, include eigenvector_{row}_{col} (features² columns).

    Returns
    -------
    dict of {str: scalar}
    """
    row = {
        'matrix_index': int(matrix_index),
        'iterations': int(pca.iterations[matrix_index]),
        'converged': bool(pca.converged[matrix_index]),
    }

    eigenvalues = pca.eigenvalues[matrix_index]
    for k in range(len(eigenvalues)):
        row[f'eigenvalue_{k}'] = float(eigenvalues[k])

    if include_vectors:
        vectors = pca.eigenvectors[matrix_index]
        n = vectors.shape[0]
        for r in range(n):
            for c in range(n):
                row[f'eigenvector_{r}_{c}'] = float(vectors[r, c])

    return row


def flatten_batch(pca, include_vectors: bool = False) -> List[Dict[str, Any]]:
    """Flatten every entry of a batch."""
    return [flatten_entry(pca, i, include_vectors) for i in range(pca.matrix_count)]


def to_frame(pca, include_vectors: bool = False) -> pl.DataFrame:
    """One row per batch entry."""
    return pl.DataFrame(flatten_batch(pca, include_vectors))
