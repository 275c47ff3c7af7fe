"""
Association rule generation from frequent pairs.
"""

import logging
from typing import Any, Dict, List, Sequence

from happymath.utils.general import check_fraction, round_to

logger = logging.getLogger(__name__)


def make_rule(antecedent: str,
              consequent: str,
              support: float,
              confidence: float,
              lift: float) -> Dict[str, Any]:
    """Build a presentation rule, rounding its measures to 3 decimals."""
    return {
        'antecedent': [antecedent],
        'consequent': [consequent],
        'support': round_to(support, 3),
        'confidence': round_to(confidence, 3),
        'lift': round_to(lift, 3)
    }


def generate_rules(L1: Sequence[Dict[str, Any]],
                   L2: Sequence[Dict[str, Any]],
                   num_transactions: int,
                   min_confidence: float = 0.6) -> List[Dict[str, Any]]:
    """
    Derive directional rules from frequent pairs.

    For a pair {a, b} seen together in c transactions:
    support = c / N, confidence(a -> b) = c / count(a) and
    lift(a -> b) = confidence(a -> b) / (count(b) / N).
    Both directions are checked independently against min_confidence.

    Args:
        L1: Frequent single itemsets
        L2: Frequent pair itemsets
        num_transactions: Number of transactions N
        min_confidence: Minimum confidence in (0, 1]

    Returns:
        Rules sorted by descending confidence, then lift
    """
    min_confidence = check_fraction('min_confidence', min_confidence)

    if num_transactions <= 0 or not L2:
        return []

    item_counts = {itemset['items'][0]: itemset['count'] for itemset in L1}

    rules = []
    for pair in L2:
        if len(pair['items']) != 2:
            raise ValueError(f"Expected a 2-itemset, got {pair['items']}")

        a, b = pair['items']
        if a not in item_counts or b not in item_counts:
            raise ValueError(f"Pair {pair['items']} references an item missing from L1")

        joint = pair['count']
        support = joint / num_transactions

        for antecedent, consequent in ((a, b), (b, a)):
            confidence = joint / item_counts[antecedent]
            if confidence < min_confidence:
                continue
            lift = confidence / (item_counts[consequent] / num_transactions)
            rules.append(make_rule(antecedent, consequent, support, confidence, lift))

    rules.sort(key=lambda r: (-r['confidence'], -r['lift'], r['antecedent'], r['consequent']))

    logger.debug(f"Generated {len(rules)} rules from {len(L2)} frequent pairs")
    return rules
