"""
General utility functions for the happymath package.

Small numeric helpers shared by the mining, clustering and
correlation modules.
"""

import math
import numpy as np
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple, TypeVar

T = TypeVar('T')
U = TypeVar('U')


def to_number(value: Any) -> Optional[float]:
    """
    Parse a value into a finite float.

    Booleans, empty strings, non-numeric strings, NaN and infinite values
    are all treated as missing.

    Args:
        value: Value to parse

    Returns:
        Float value, or None if the value is not a usable number
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None

    try:
        number = float(value)
    except (ValueError, TypeError):
        return None

    if math.isnan(number) or math.isinf(number):
        return None

    return number


def is_valid(value: Optional[float]) -> bool:
    """Check that a value is present and not NaN."""
    return value is not None and not math.isnan(value)


def median(values: Iterable[float]) -> float:
    """
    Calculate the median of a collection of numbers.

    An even count averages the two middle values. An empty collection
    has a median of 0.

    Args:
        values: Values to summarize (NaN values are ignored)

    Returns:
        Median value
    """
    arr = np.array([v for v in values if is_valid(v)], dtype=float)

    if arr.size == 0:
        return 0.0

    arr.sort()
    mid = arr.size // 2
    if arr.size % 2:
        return float(arr[mid])
    return float((arr[mid - 1] + arr[mid]) / 2)


def round_to(n: Optional[float], digits: int = 3) -> Optional[float]:
    """
    Round a number to a specific number of decimal places.

    Args:
        n: Number to round (None passes through)
        digits: Number of decimal digits to keep

    Returns:
        Rounded number
    """
    if n is None:
        return None
    return round(float(n), digits)


def map_rest(f: Callable[[T, T], U], coll: Sequence[T]) -> List[U]:
    """
    Apply a function to each element and all remaining elements.

    For each element in coll, apply function f to that element and each
    element that comes after it.

    Args:
        f: Function taking two arguments
        coll: Collection to process

    Returns:
        List of results
    """
    result = []
    n = len(coll)
    for i in range(n):
        for j in range(i + 1, n):
            result.append(f(coll[i], coll[j]))
    return result


def distinct(coll: Iterable[T]) -> List[T]:
    """
    Return a list with duplicates removed, preserving order.

    Args:
        coll: Collection to process

    Returns:
        List with duplicates removed
    """
    seen = set()
    result = []
    for item in coll:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def check_feature_list(features: Sequence[str]) -> List[str]:
    """
    Validate a feature list.

    Args:
        features: Ordered feature names

    Returns:
        The feature names as a list

    Raises:
        ValueError: If the list is empty, has duplicates or non-string names
    """
    if isinstance(features, str):
        raise ValueError("Feature list must be a sequence of names, not a string")

    features = list(features)

    if not features:
        raise ValueError("Feature list must not be empty")

    for feature in features:
        if not isinstance(feature, str) or not feature:
            raise ValueError(f"Invalid feature name: {feature!r}")

    if len(distinct(features)) != len(features):
        raise ValueError(f"Feature list contains duplicates: {features}")

    return [str(feature) for feature in features]


def check_fraction(name: str, value: float) -> float:
    """
    Validate a threshold in the half-open interval (0, 1].

    Args:
        name: Parameter name for the error message
        value: Threshold value

    Returns:
        The threshold as a float
    """
    try:
        value = float(value)
    except (ValueError, TypeError):
        raise ValueError(f"{name} must be a number, got {value!r}")

    if not 0 < value <= 1:
        raise ValueError(f"{name} must be in (0, 1], got {value}")

    return value


def paired_values(xs: Sequence[Optional[float]],
                  ys: Sequence[Optional[float]]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Keep only the positions where both series hold a valid number.

    Args:
        xs: First series
        ys: Second series (same length as xs)

    Returns:
        Tuple of aligned numpy arrays
    """
    if len(xs) != len(ys):
        raise ValueError(f"Series lengths differ: {len(xs)} != {len(ys)}")

    pairs = [(x, y) for x, y in zip(xs, ys) if is_valid(x) and is_valid(y)]
    if not pairs:
        return np.array([], dtype=float), np.array([], dtype=float)

    x_arr, y_arr = zip(*pairs)
    return np.array(x_arr, dtype=float), np.array(y_arr, dtype=float)
