"""
Median discretization of numeric records.

Each record becomes a transaction: a set of "<feature>:high" or
"<feature>:low" tokens, split at the per-feature median.
"""

import logging
from typing import Dict, FrozenSet, List, Optional, Sequence

from happymath.records import Record
from happymath.utils.general import check_feature_list, median

logger = logging.getLogger(__name__)

Transaction = FrozenSet[str]

HIGH = 'high'
LOW = 'low'


def token(feature: str, level: str) -> str:
    """Build a transaction token such as 'generosity:high'."""
    return f"{feature}:{level}"


def feature_medians(records: Sequence[Record], features: Sequence[str]) -> Dict[str, float]:
    """
    Compute the median of each feature across records holding a value.

    Args:
        records: Validated records
        features: Feature names

    Returns:
        Dictionary mapping feature to median (0.0 when no record has a value)
    """
    features = check_feature_list(features)
    return {
        f: median(r.value(f) for r in records if r.has(f))
        for f in features
    }


def discretize(records: Sequence[Record],
               features: Sequence[str],
               medians: Optional[Dict[str, float]] = None) -> List[Transaction]:
    """
    Turn records into transactions of high/low tokens.

    A value at or above the median is 'high'. Features a record does not
    carry are left out of its transaction.

    Args:
        records: Validated records
        features: Feature names
        medians: Precomputed medians (computed from records if omitted)

    Returns:
        One transaction per record, in record order
    """
    features = check_feature_list(features)
    if medians is None:
        medians = feature_medians(records, features)

    transactions = []
    for record in records:
        tokens = set()
        for f in features:
            value = record.value(f)
            if value is None:
                continue
            tokens.add(token(f, HIGH if value >= medians[f] else LOW))
        transactions.append(frozenset(tokens))

    logger.debug(f"Discretized {len(records)} records over {len(features)} features")
    return transactions
