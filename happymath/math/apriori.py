"""
Frequent itemset mining for happymath.

A bounded Apriori: frequent single tokens (L1) and frequent pairs of
those tokens (L2). Larger itemsets are never generated since only
pairwise rules are consumed downstream.
"""

import logging
from collections import Counter
from typing import Any, Dict, Iterable, List, Sequence

from happymath.utils.general import check_fraction, map_rest

logger = logging.getLogger(__name__)


def count_items(transactions: Sequence[Iterable[str]]) -> Counter:
    """
    Count the transactions each token occurs in.

    Args:
        transactions: Sets of tokens

    Returns:
        Counter of token to transaction count
    """
    counts = Counter()
    for tx in transactions:
        counts.update(set(tx))
    return counts


def support_count(transactions: Sequence[Iterable[str]], items: Iterable[str]) -> int:
    """
    Count the transactions that contain every one of the given tokens.

    Args:
        transactions: Sets of tokens
        items: Tokens that must all be present

    Returns:
        Number of matching transactions
    """
    items = set(items)
    return sum(1 for tx in transactions if items.issubset(tx))


def _itemset_order(itemset: Dict[str, Any]):
    return (-itemset['count'], itemset['items'])


def frequent_itemsets(transactions: Sequence[Iterable[str]],
                      min_support: float = 0.3) -> Dict[str, Any]:
    """
    Find frequent 1-itemsets and 2-itemsets.

    An itemset is frequent when count / N >= min_support, so a support
    exactly at the threshold is kept.

    Args:
        transactions: Sets of tokens
        min_support: Minimum support in (0, 1]

    Returns:
        Dictionary with 'L1', 'L2' (lists of {'items', 'count'}) and
        'num_transactions'
    """
    min_support = check_fraction('min_support', min_support)

    transactions = [frozenset(tx) for tx in transactions]
    n = len(transactions)

    if n == 0:
        return {'L1': [], 'L2': [], 'num_transactions': 0}

    counts = count_items(transactions)

    L1 = [
        {'items': [item], 'count': count}
        for item, count in counts.items()
        if count / n >= min_support
    ]
    L1.sort(key=_itemset_order)

    frequent_tokens = sorted(itemset['items'][0] for itemset in L1)

    L2 = []
    for a, b in map_rest(lambda x, y: (x, y), frequent_tokens):
        count = support_count(transactions, (a, b))
        if count / n >= min_support:
            L2.append({'items': [a, b], 'count': count})
    L2.sort(key=_itemset_order)

    logger.debug(f"Apriori over {n} transactions: {len(L1)} frequent items, {len(L2)} frequent pairs")

    return {'L1': L1, 'L2': L2, 'num_transactions': n}
