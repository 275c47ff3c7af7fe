"""
Live correlation analysis for happymath.

This module correlates a target metric (e.g. the happiness score) with
each candidate factor over one partition of records, and reports a
rule-style support figure alongside the Pearson coefficient.
"""

import logging
import math
import numpy as np
from typing import Any, Dict, List, Optional, Sequence
from scipy import stats

from happymath.records import Record
from happymath.utils.general import is_valid, median, paired_values, round_to

logger = logging.getLogger(__name__)

STRONG = 0.7
MODERATE = 0.4


def pearson(xs: Sequence[Optional[float]], ys: Sequence[Optional[float]]) -> float:
    """
    Pearson correlation coefficient using the sum-of-products formula.

    Positions where either series is missing are skipped.

    Args:
        xs: First series
        ys: Second series

    Returns:
        Correlation coefficient, or 0.0 when it is undefined
    """
    x, y = paired_values(xs, ys)
    n = x.size

    if n == 0:
        return 0.0

    sum_x = float(np.sum(x))
    sum_y = float(np.sum(y))
    sum_xy = float(np.sum(x * y))
    sum_x2 = float(np.sum(x * x))
    sum_y2 = float(np.sum(y * y))

    num = n * sum_xy - sum_x * sum_y
    den_sq = (n * sum_x2 - sum_x * sum_x) * (n * sum_y2 - sum_y * sum_y)

    if den_sq <= 0:
        return 0.0

    r = num / math.sqrt(den_sq)
    return float(min(1.0, max(-1.0, r)))


def significance_level(r: float) -> str:
    """
    Classify the strength of a correlation.

    Args:
        r: Correlation coefficient

    Returns:
        'strong', 'moderate' or 'weak'
    """
    strength = abs(r)
    if strength >= STRONG:
        return 'strong'
    if strength >= MODERATE:
        return 'moderate'
    return 'weak'


def median_split_support(xs: Sequence[Optional[float]],
                         ys: Sequence[Optional[float]],
                         r: float) -> float:
    """
    Fraction of paired observations whose median halves agree with r.

    Each series is split at the median of its own valid values (a value
    at the median counts as high). For r >= 0 an observation agrees when
    both values sit on the same side; for r < 0 when they sit on opposite
    sides.

    Args:
        xs: First series
        ys: Second series
        r: Correlation coefficient between the series

    Returns:
        Support in [0, 1]; 0 when there are no paired observations
    """
    mx = median(v for v in xs if is_valid(v))
    my = median(v for v in ys if is_valid(v))

    x, y = paired_values(xs, ys)
    if x.size == 0:
        return 0.0

    high_x = x >= mx
    high_y = y >= my

    if r >= 0:
        agree = high_x == high_y
    else:
        agree = high_x != high_y

    return float(np.mean(agree))


def pearson_p_value(r: float, n: int) -> Optional[float]:
    """
    Two-sided p-value for a Pearson coefficient from n pairs.

    Args:
        r: Correlation coefficient
        n: Number of paired observations

    Returns:
        p-value, or None when n < 3
    """
    if n < 3:
        return None

    if abs(r) >= 1.0:
        return 0.0

    t = r * math.sqrt((n - 2) / (1.0 - r * r))
    return float(2 * stats.t.sf(abs(t), n - 2))


def factor_correlation(records: Sequence[Record],
                       target: str,
                       factor: str,
                       partition: Optional[int] = None) -> Dict[str, Any]:
    """
    Correlate one factor with the target metric.

    Coverage is the share of records carrying the target that also carry
    the factor.

    Args:
        records: Records of a single partition
        target: Target feature
        factor: Candidate factor feature
        partition: Partition the records belong to, echoed in the result

    Returns:
        Correlation result dictionary
    """
    base = [r for r in records if r.has(target)]
    attempted = len(base)

    xs = [r.value(target) for r in base]
    ys = [np.nan if r.value(factor) is None else r.value(factor) for r in base]

    n_pairs = sum(1 for y in ys if is_valid(y))
    coverage = n_pairs / attempted if attempted else 0.0

    r = pearson(xs, ys)
    support = median_split_support(xs, ys, r)

    return {
        'factor_a': factor,
        'factor_b': target,
        'coefficient': round_to(r, 3),
        'support': round_to(support, 3),
        'coverage': round_to(coverage, 3),
        'significance_level': significance_level(r),
        'p_value': round_to(pearson_p_value(r, n_pairs), 4),
        'n_pairs': n_pairs,
        'partition': partition
    }


def live_correlations(records: Sequence[Record],
                      target: str,
                      factors: Sequence[str],
                      partition: Optional[int] = None) -> List[Dict[str, Any]]:
    """
    Correlate every candidate factor with the target metric.

    Args:
        records: Records of a single partition
        target: Target feature
        factors: Candidate factor features
        partition: Partition the records belong to

    Returns:
        One correlation result per factor, in factor order
    """
    if not isinstance(target, str) or not target:
        raise ValueError(f"Invalid target name: {target!r}")
    if target in factors:
        raise ValueError(f"Target {target!r} must not be among the factors")

    results = [factor_correlation(records, target, f, partition) for f in factors]

    logger.debug(f"Computed {len(results)} correlations against {target}")
    return results
