"""
Z-score normalization of feature matrices.
"""

import numpy as np
from typing import Tuple

from happymath.math.named_matrix import FeatureMatrix


def zscore(matrix) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Standardize each column to zero mean and unit population deviation.

    A constant column (every value equal to the first) gets a deviation
    of 1 and normalizes to exact zeros, whatever the magnitude of its values.

    Args:
        matrix: Rectangular numeric matrix (rows are records)

    Returns:
        Tuple of (normalized matrix, column means, column deviations used)
    """
    try:
        data = np.array(matrix, dtype=float)
    except ValueError as e:
        raise ValueError(f"Matrix must be rectangular and numeric: {e}") from e

    if data.ndim != 2:
        raise ValueError(f"Expected a 2-dimensional matrix, got shape {data.shape}")

    n, d = data.shape
    if n == 0 or d == 0:
        raise ValueError(f"Cannot normalize an empty matrix of shape {data.shape}")

    if np.isnan(data).any():
        raise ValueError("Matrix contains missing values; drop incomplete rows first")

    means = data.mean(axis=0)
    stds = data.std(axis=0)  # population deviation (ddof=0)

    # Rounding in the mean leaves a tiny nonzero std on large constant values
    constant = (data == data[0]).all(axis=0)
    stds[constant] = 1.0

    normalized = (data - means) / stds
    normalized[:, constant] = 0.0

    return normalized, means, stds


def zscore_matrix(nmat: FeatureMatrix) -> FeatureMatrix:
    """
    Normalize a FeatureMatrix, keeping its row and column names.

    Args:
        nmat: Complete FeatureMatrix (no missing values)

    Returns:
        Normalized FeatureMatrix
    """
    normalized, _, _ = zscore(nmat.values)
    return FeatureMatrix(normalized, nmat.rownames(), nmat.colnames())
