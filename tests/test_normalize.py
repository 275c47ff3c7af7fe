"""
Tests for z-score normalization.
"""

import pytest
import numpy as np
import sys
import os
from sklearn.preprocessing import StandardScaler

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from happymath.math.named_matrix import FeatureMatrix
from happymath.math.normalize import zscore, zscore_matrix


class TestZscore:
    """Tests for the zscore function."""

    def test_columns_standardized(self):
        rng = np.random.default_rng(11)
        data = rng.normal(loc=5.0, scale=3.0, size=(40, 4))

        normalized, means, stds = zscore(data)

        assert np.allclose(normalized.mean(axis=0), 0.0)
        assert np.allclose(normalized.std(axis=0), 1.0)
        assert np.allclose(means, data.mean(axis=0))
        assert np.allclose(stds, data.std(axis=0))

    def test_population_deviation(self):
        data = np.array([[0.0], [2.0]])
        normalized, _, stds = zscore(data)

        # Population std of [0, 2] is 1, not sqrt(2)
        assert np.allclose(stds, [1.0])
        assert np.allclose(normalized[:, 0], [-1.0, 1.0])

    def test_constant_column(self):
        data = np.array([
            [1.0, 5.0],
            [2.0, 5.0],
            [3.0, 5.0]
        ])
        normalized, _, stds = zscore(data)

        assert stds[1] == 1.0
        assert np.allclose(normalized[:, 1], 0.0)
        assert np.allclose(normalized[:, 0].std(), 1.0)

    def test_large_constant_column(self):
        # A constant in the tens of thousands over many rows leaves the mean
        # a few ulps off, so the raw std is not exactly zero
        data = np.array([[22026.17960560632, float(i)] for i in range(158)])
        normalized, means, stds = zscore(data)

        assert stds[0] == 1.0
        assert np.all(normalized[:, 0] == 0.0)
        assert np.allclose(normalized[:, 1].std(), 1.0)

    @pytest.mark.parametrize("value", [0.1, 7.0, 1234.5678, 22026.17960560632, 99999.999])
    def test_constant_column_any_magnitude(self, value):
        data = np.column_stack([np.full(200, value), np.arange(200.0)])
        normalized, _, _ = zscore(data)

        assert np.all(normalized[:, 0] == 0.0)

    def test_matches_standard_scaler(self):
        rng = np.random.default_rng(2)
        data = np.hstack([rng.uniform(size=(25, 3)), np.full((25, 1), 7.0)])

        normalized, _, _ = zscore(data)
        expected = StandardScaler().fit_transform(data)

        assert np.allclose(normalized, expected)

    def test_single_row(self):
        normalized, _, _ = zscore([[3.0, 4.0]])
        assert np.allclose(normalized, [[0.0, 0.0]])

    def test_invalid_input(self):
        with pytest.raises(ValueError):
            zscore([[1.0, 2.0], [3.0]])
        with pytest.raises(ValueError):
            zscore(np.zeros((0, 3)))
        with pytest.raises(ValueError):
            zscore([1.0, 2.0])
        with pytest.raises(ValueError):
            zscore([[1.0, np.nan]])


class TestFeatureMatrix:
    """Tests for normalizing a named feature matrix."""

    def test_keeps_names(self):
        nmat = FeatureMatrix(
            np.array([[1.0, 10.0], [3.0, 30.0]]),
            rownames=['a', 'b'],
            colnames=['x', 'y']
        )
        normalized = zscore_matrix(nmat)

        assert normalized.rownames() == ['a', 'b']
        assert normalized.colnames() == ['x', 'y']
        assert np.allclose(normalized.matrix['x'].values, [-1.0, 1.0])
        assert np.allclose(normalized.matrix['y'].values, [-1.0, 1.0])

    def test_complete_rows(self):
        nmat = FeatureMatrix(
            np.array([[1.0, np.nan], [2.0, 3.0]]),
            rownames=['a', 'b'],
            colnames=['x', 'y']
        )
        complete = nmat.complete_rows()

        assert complete.rownames() == ['b']
        assert len(complete) == 1
        assert np.array_equal(complete.values, [[2.0, 3.0]])
