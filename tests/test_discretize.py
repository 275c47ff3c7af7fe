"""
Tests for median discretization.
"""

import pytest
import numpy as np
import sys
import os

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from happymath.records import Record
from happymath.math.discretize import discretize, feature_medians, token
from happymath.utils.general import median, check_feature_list


def make_records(values, feature='f'):
    return [Record(label=f"r{i}", values={feature: v}) for i, v in enumerate(values)]


class TestMedian:
    """Tests for the median helper."""

    def test_odd_and_even(self):
        assert median([3, 1, 2]) == 2.0
        assert median([4, 1, 3, 2]) == 2.5

    def test_matches_numpy(self):
        rng = np.random.default_rng(3)
        for size in (1, 2, 7, 10):
            values = rng.normal(size=size).tolist()
            assert np.isclose(median(values), np.median(values))

    def test_empty(self):
        assert median([]) == 0.0
        assert median([float('nan')]) == 0.0


class TestFeatureMedians:
    """Tests for per-feature medians."""

    def test_ignores_missing_values(self):
        records = make_records([1.0, None, 5.0, 3.0])
        assert feature_medians(records, ['f']) == {'f': 3.0}

    def test_even_count(self):
        records = make_records([4.0, 1.0, 2.0, 3.0])
        assert feature_medians(records, ['f']) == {'f': 2.5}

    def test_no_values(self):
        records = make_records([None, None])
        assert feature_medians(records, ['f']) == {'f': 0.0}

    def test_invalid_feature_list(self):
        with pytest.raises(ValueError):
            feature_medians([], [])
        with pytest.raises(ValueError):
            feature_medians([], ['a', 'a'])
        with pytest.raises(ValueError):
            check_feature_list('abc')


class TestDiscretize:
    """Tests for turning records into transactions."""

    def test_high_low_tokens(self):
        records = make_records([1.0, 2.0, 3.0])
        transactions = discretize(records, ['f'])

        # Median is 2; a value equal to the median counts as high
        assert transactions == [
            frozenset({'f:low'}),
            frozenset({'f:high'}),
            frozenset({'f:high'}),
        ]

    def test_missing_feature_is_omitted(self):
        records = [
            Record(label='a', values={'x': 1.0, 'y': 5.0}),
            Record(label='b', values={'x': 3.0}),
            Record(label='c', values={'x': 2.0, 'y': None}),
        ]
        transactions = discretize(records, ['x', 'y'])

        assert transactions[0] == frozenset({'x:low', 'y:high'})
        assert transactions[1] == frozenset({'x:high'})
        assert transactions[2] == frozenset({'x:high'})

    def test_precomputed_medians(self):
        records = make_records([1.0, 2.0])
        transactions = discretize(records, ['f'], medians={'f': 10.0})

        assert transactions == [frozenset({'f:low'}), frozenset({'f:low'})]

    def test_token_format(self):
        assert token('generosity', 'high') == 'generosity:high'
