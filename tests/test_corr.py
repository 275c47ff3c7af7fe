"""
Tests for the live correlation module.
"""

import pytest
import numpy as np
import sys
import os
from scipy import stats as scipy_stats

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from happymath.records import Record
from happymath.math.corr import (
    pearson, significance_level, median_split_support, pearson_p_value,
    factor_correlation, live_correlations
)


def make_records(rows):
    return [Record(label=f"c{i}", partition=2020, values=row) for i, row in enumerate(rows)]


class TestPearson:
    """Tests for the Pearson coefficient."""

    def test_perfect_correlation(self):
        assert np.isclose(pearson([1, 2, 3, 4], [2, 4, 6, 8]), 1.0)
        assert np.isclose(pearson([1, 2, 3, 4], [8, 6, 4, 2]), -1.0)

    def test_matches_scipy(self):
        rng = np.random.default_rng(0)
        x = rng.normal(size=50)
        y = 0.5 * x + rng.normal(size=50)

        expected, _ = scipy_stats.pearsonr(x, y)
        assert np.isclose(pearson(x.tolist(), y.tolist()), expected)

    @pytest.mark.parametrize("seed", range(5))
    def test_symmetric(self, seed):
        rng = np.random.default_rng(seed)
        a = rng.normal(size=20).tolist()
        b = rng.normal(size=20).tolist()

        assert pearson(a, b) == pearson(b, a)

    def test_skips_missing_pairs(self):
        xs = [1.0, 2.0, None, 3.0, np.nan]
        ys = [2.0, 4.0, 5.0, 6.0, 1.0]

        assert np.isclose(pearson(xs, ys), 1.0)

    def test_degenerate(self):
        assert pearson([], []) == 0.0
        assert pearson([1.0, 1.0, 1.0], [1.0, 2.0, 3.0]) == 0.0
        assert pearson([1.0], [2.0]) == 0.0

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            pearson([1.0, 2.0], [1.0])


class TestSignificance:

    def test_levels(self):
        assert significance_level(0.7) == 'strong'
        assert significance_level(-0.85) == 'strong'
        assert significance_level(0.69) == 'moderate'
        assert significance_level(-0.4) == 'moderate'
        assert significance_level(0.39) == 'weak'
        assert significance_level(0.0) == 'weak'

    def test_p_value_matches_scipy(self):
        rng = np.random.default_rng(6)
        x = rng.normal(size=30)
        y = 0.3 * x + rng.normal(size=30)

        r, expected = scipy_stats.pearsonr(x, y)
        assert np.isclose(pearson_p_value(r, 30), expected, rtol=1e-6, atol=1e-12)

    def test_p_value_small_samples(self):
        assert pearson_p_value(0.5, 2) is None
        assert pearson_p_value(1.0, 10) == 0.0


class TestSupport:
    """Tests for median-split support."""

    def test_positive_agreement(self):
        xs = [1.0, 2.0, 3.0, 4.0]
        assert median_split_support(xs, [1.0, 2.0, 3.0, 4.0], 1.0) == 1.0
        assert median_split_support(xs, [4.0, 3.0, 2.0, 1.0], 1.0) == 0.0

    def test_negative_agreement(self):
        xs = [1.0, 2.0, 3.0, 4.0]
        assert median_split_support(xs, [4.0, 3.0, 2.0, 1.0], -1.0) == 1.0

    def test_partial(self):
        xs = [1.0, 2.0, 3.0, 4.0]
        ys = [1.0, 3.0, 2.0, 4.0]
        # medians 2.5 and 2.5: halves agree for points 0 and 3 only
        assert median_split_support(xs, ys, 0.5) == 0.5

    def test_no_pairs(self):
        assert median_split_support([None, 1.0], [2.0, None], 0.3) == 0.0


class TestLiveCorrelations:
    """Tests for factor correlations against a target."""

    def test_coverage_and_fields(self):
        records = make_records([
            {'score': 1.0, 'gdp': 1.0},
            {'score': 2.0, 'gdp': 2.1},
            {'score': 3.0, 'gdp': 2.9},
            {'score': 4.0, 'gdp': None},
            {'score': None, 'gdp': 5.0},
        ])
        result = factor_correlation(records, 'score', 'gdp', partition=2020)

        assert result['factor_a'] == 'gdp'
        assert result['factor_b'] == 'score'
        assert result['n_pairs'] == 3
        # 3 of the 4 records with a score also have gdp
        assert result['coverage'] == 0.75
        assert result['coefficient'] > 0.99
        assert result['significance_level'] == 'strong'
        assert result['partition'] == 2020

    def test_bounds(self):
        rng = np.random.default_rng(8)
        rows = []
        for _ in range(40):
            row = {'score': float(rng.normal())}
            for f in ('a', 'b', 'c'):
                row[f] = None if rng.random() < 0.2 else float(rng.normal())
            rows.append(row)

        results = live_correlations(make_records(rows), 'score', ['a', 'b', 'c'])

        assert [r['factor_a'] for r in results] == ['a', 'b', 'c']
        for result in results:
            assert 0.0 <= result['support'] <= 1.0
            assert 0.0 <= result['coverage'] <= 1.0
            assert -1.0 <= result['coefficient'] <= 1.0

    def test_no_records(self):
        result = factor_correlation([], 'score', 'gdp')

        assert result['coefficient'] == 0.0
        assert result['support'] == 0.0
        assert result['coverage'] == 0.0
        assert result['p_value'] is None

    def test_target_in_factors(self):
        with pytest.raises(ValueError):
            live_correlations([], 'score', ['score', 'gdp'])
