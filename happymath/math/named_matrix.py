"""
Named feature matrix for happymath.

This module provides a numeric matrix with named rows (record labels) and
named columns (features), using a pandas DataFrame as the underlying storage.
"""

import numpy as np
import pandas as pd
from typing import Any, List, Optional, Sequence, Union

from happymath.records import Record
from happymath.utils.general import check_feature_list


class FeatureMatrix:
    """
    A matrix with named rows and columns.

    Rows are records, columns follow a fixed feature order. Missing values
    are stored as NaN.
    """

    def __init__(self,
                 matrix: Optional[Union[np.ndarray, pd.DataFrame]] = None,
                 rownames: Optional[List[Any]] = None,
                 colnames: Optional[List[Any]] = None):
        """
        Initialize a FeatureMatrix.

        Args:
            matrix: Matrix data (numpy array or pandas DataFrame)
            rownames: List of row names
            colnames: List of column names
        """
        if matrix is None:
            self._matrix = pd.DataFrame(
                index=list(rownames or []),
                columns=list(colnames or []),
                dtype=float
            )
        elif isinstance(matrix, pd.DataFrame):
            self._matrix = matrix.copy()
            if rownames is not None:
                self._matrix.index = list(rownames)
            if colnames is not None:
                self._matrix.columns = list(colnames)
        else:
            matrix = np.asarray(matrix, dtype=float)
            if matrix.ndim != 2:
                raise ValueError(f"Expected a 2-dimensional matrix, got shape {matrix.shape}")
            rows = list(rownames) if rownames is not None else list(range(matrix.shape[0]))
            cols = list(colnames) if colnames is not None else list(range(matrix.shape[1]))
            self._matrix = pd.DataFrame(matrix, index=rows, columns=cols)

    @classmethod
    def from_records(cls, records: Sequence[Record], features: Sequence[str]) -> 'FeatureMatrix':
        """
        Build a matrix from records, one row per record.

        Args:
            records: Validated records
            features: Ordered feature list (the column order)

        Returns:
            FeatureMatrix with NaN where a record lacks a feature
        """
        features = check_feature_list(features)

        data = np.array(
            [[np.nan if r.value(f) is None else r.value(f) for f in features] for r in records],
            dtype=float
        ).reshape(len(records), len(features))

        return cls(data, [r.label for r in records], features)

    @property
    def matrix(self) -> pd.DataFrame:
        """Get the underlying DataFrame."""
        return self._matrix

    @property
    def values(self) -> np.ndarray:
        """Get the matrix as a numpy array."""
        return self._matrix.values.astype(float)

    def rownames(self) -> List[Any]:
        """Get the list of row names."""
        return list(self._matrix.index)

    def colnames(self) -> List[Any]:
        """Get the list of column names."""
        return list(self._matrix.columns)

    def complete_rows(self) -> 'FeatureMatrix':
        """
        Keep only the rows without any missing value.

        Returns:
            A new FeatureMatrix
        """
        return FeatureMatrix(self._matrix.dropna(axis=0, how='any'))

    def __len__(self) -> int:
        return self._matrix.shape[0]

    def __repr__(self) -> str:
        return f"FeatureMatrix(rows={self._matrix.shape[0]}, cols={self._matrix.shape[1]})"
