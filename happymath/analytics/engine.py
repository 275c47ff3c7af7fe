"""
Analytics engine for the well-being dashboard.

This module ties the mining, clustering and correlation math together
behind the three operations the dashboard calls, and adds the partition
helpers callers use to pick a year of records.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from happymath.components.config import Config, ConfigManager
from happymath.errors import InsufficientDataError
from happymath.math.apriori import frequent_itemsets
from happymath.math.clusters import RandomSource, cluster_named_matrix
from happymath.math.corr import live_correlations
from happymath.math.discretize import discretize, feature_medians
from happymath.math.named_matrix import FeatureMatrix
from happymath.math.naming import describe_cluster, name_cluster
from happymath.math.rules import generate_rules
from happymath.records import Record, ensure_records
from happymath.utils.general import check_feature_list, distinct, round_to

# Logging configuration
logger = logging.getLogger(__name__)


def latest_partition(records: Sequence[Record]) -> Optional[int]:
    """
    Find the most recent partition (year) among the records.

    Args:
        records: Validated records

    Returns:
        Largest partition key, or None if no record has one
    """
    partitions = [r.partition for r in records if r.partition is not None]
    return max(partitions) if partitions else None


def filter_partition(records: Sequence[Record], partition: Optional[int]) -> List[Record]:
    """
    Keep the records of one partition.

    Args:
        records: Validated records
        partition: Partition to keep; None keeps every record

    Returns:
        Filtered list of records
    """
    if partition is None:
        return list(records)
    return [r for r in records if r.partition == partition]


def partition_summary(records: Sequence[Record], features: Sequence[str]) -> List[Dict[str, Any]]:
    """
    Average each feature per partition.

    Missing values are left out of the averages. Records without a
    partition are grouped under None.

    Args:
        records: Validated records
        features: Features to average

    Returns:
        One summary per partition, sorted by partition
    """
    features = check_feature_list(features)
    if not records:
        return []

    frame = pd.DataFrame(
        [{'partition': r.partition, **{f: r.value(f) for f in features}} for r in records],
        columns=['partition'] + features
    )
    frame[features] = frame[features].astype(float)

    summaries = []
    for partition, group in frame.groupby('partition', dropna=False, sort=False):
        means = group[features].mean()
        summaries.append({
            'partition': None if pd.isna(partition) else int(partition),
            'count': int(len(group)),
            'averages': {f: None if pd.isna(means[f]) else round_to(means[f], 3) for f in features}
        })

    summaries.sort(key=lambda s: (s['partition'] is None, s['partition'] or 0))
    return summaries


class AnalyticsEngine:
    """
    Runs association mining, k-means clustering and live correlations
    over in-memory records.
    """

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize the engine.

        Args:
            config: Configuration (defaults to the shared configuration)
        """
        self.config = config or ConfigManager.get_config()

    def _records(self, records) -> List[Record]:
        return ensure_records(
            records,
            label_key=self.config.get('records.label-key', 'country_name'),
            partition_key=self.config.get('records.partition-key', 'year')
        )

    def association_features(self) -> List[str]:
        """Configured factors plus the target metric."""
        return distinct(list(self.config.get('features')) + [self.config.get('target')])

    def mine_associations(self,
                          records,
                          features: Optional[Sequence[str]] = None,
                          min_support: Optional[float] = None,
                          min_confidence: Optional[float] = None) -> Dict[str, Any]:
        """
        Discover pairwise association rules between high/low factor levels.

        Records without the target metric are dropped when the target is
        one of the mined features.

        Args:
            records: Records or raw rows
            features: Features to discretize (defaults to factors + target)
            min_support: Minimum itemset support
            min_confidence: Minimum rule confidence

        Returns:
            Dictionary with 'rules', 'num_transactions', 'medians' and the
            frequent itemsets
        """
        records = self._records(records)
        features = check_feature_list(features if features is not None else self.association_features())
        if min_support is None:
            min_support = self.config.get('associations.min-support')
        if min_confidence is None:
            min_confidence = self.config.get('associations.min-confidence')

        target = self.config.get('target')
        if target in features:
            kept = [r for r in records if r.has(target)]
            if len(kept) < len(records):
                logger.warning(f"Dropped {len(records) - len(kept)} records without {target}")
            records = kept

        medians = feature_medians(records, features)
        transactions = discretize(records, features, medians)
        frequent = frequent_itemsets(transactions, min_support)
        rules = generate_rules(
            frequent['L1'], frequent['L2'], frequent['num_transactions'], min_confidence
        )

        logger.info(f"Mined {len(rules)} rules from {frequent['num_transactions']} transactions")

        return {
            'status': 'ok',
            'rules': rules,
            'num_transactions': frequent['num_transactions'],
            'medians': medians,
            'frequent': {'L1': frequent['L1'], 'L2': frequent['L2']},
            'min_support': min_support,
            'min_confidence': min_confidence
        }

    def run_kmeans(self,
                   records,
                   features: Optional[Sequence[str]] = None,
                   k: Optional[int] = None,
                   max_iter: Optional[int] = None,
                   rng: RandomSource = None) -> Dict[str, Any]:
        """
        Group records by normalized multi-factor similarity.

        Records missing any feature are dropped. Fewer usable records than
        k yields a failure result rather than an exception.

        Args:
            records: Records or raw rows
            features: Features to cluster on (defaults to configured factors)
            k: Number of clusters
            max_iter: Maximum number of k-means iterations
            rng: Seed or numpy Generator (defaults to the configured seed)

        Returns:
            Dictionary with labelled 'clusters', or a failure result
        """
        records = self._records(records)
        features = check_feature_list(features if features is not None else self.config.get('features'))
        if k is None:
            k = self.config.get('kmeans.k')
        if max_iter is None:
            max_iter = self.config.get('kmeans.max-iter')
        if rng is None:
            rng = self.config.get('kmeans.seed')

        if isinstance(k, bool) or not isinstance(k, int) or k < 2:
            raise ValueError(f"k must be an integer >= 2, got {k!r}")

        complete = [r for r in records if r.has_all(features)]
        if len(complete) < len(records):
            logger.warning(f"Dropped {len(records) - len(complete)} records with missing features")

        if len(complete) < k:
            error = InsufficientDataError(
                'Not enough rows for requested k',
                required=int(k),
                available=len(complete)
            )
            logger.warning(f"k-means rejected: {len(complete)} usable records for k={k}")
            return error.to_dict({'k': k})

        nmat = FeatureMatrix.from_records(complete, features)
        output = cluster_named_matrix(nmat, k, max_iter, rng)
        result = output['result']

        target = self.config.get('target')
        clusters = []
        for cluster in output['clusters']:
            centroid = {f: round_to(v, 3) for f, v in cluster['center'].items()}
            name = name_cluster(
                features,
                centroid,
                labels=self.config.get('naming.labels'),
                inverted=self.config.get('naming.inverted', []),
                separator=self.config.get('naming.separator'),
                default_name=self.config.get('naming.default-name')
            )
            targets = [
                complete[idx].value(target)
                for idx in cluster['member_indices']
                if complete[idx].has(target)
            ]
            clusters.append({
                'id': cluster['id'],
                'name': name,
                'description': describe_cluster(name, cluster['size']),
                'centroid': centroid,
                'members': cluster['members'],
                'size': cluster['size'],
                'avg_target': round_to(sum(targets) / len(targets), 3) if targets else None
            })

        logger.info(f"k-means produced {len(clusters)} clusters from {len(complete)} records "
                    f"in {result.iterations} iterations")

        return {
            'status': 'ok',
            'k': k,
            'clusters': clusters,
            'num_records': len(complete),
            'iterations': result.iterations,
            'converged': result.converged,
            'inertia': round_to(result.inertia, 3),
            'silhouette': round_to(output['silhouette'], 3)
        }

    def compute_live_correlations(self,
                                  records,
                                  target: Optional[str] = None,
                                  factors: Optional[Sequence[str]] = None,
                                  partition: Optional[int] = None) -> Dict[str, Any]:
        """
        Correlate each factor with the target metric.

        Args:
            records: Records or raw rows
            target: Target feature (defaults to the configured target)
            factors: Candidate factors (defaults to the configured features)
            partition: If given, only records of this partition are used

        Returns:
            Dictionary with 'correlations' and the partition used
        """
        records = filter_partition(self._records(records), partition)
        target = target if target is not None else self.config.get('target')
        factors = check_feature_list(factors if factors is not None else self.config.get('features'))

        correlations = live_correlations(records, target, factors, partition)

        logger.info(f"Computed {len(correlations)} live correlations over {len(records)} records")

        return {
            'correlations': correlations,
            'partition': partition
        }


def mine_associations(records,
                      features: Optional[Sequence[str]] = None,
                      min_support: Optional[float] = None,
                      min_confidence: Optional[float] = None) -> Dict[str, Any]:
    """Mine association rules with the shared configuration."""
    return AnalyticsEngine().mine_associations(records, features, min_support, min_confidence)


def run_kmeans(records,
               features: Optional[Sequence[str]] = None,
               k: Optional[int] = None,
               max_iter: Optional[int] = None,
               rng: RandomSource = None) -> Dict[str, Any]:
    """Cluster records with the shared configuration."""
    return AnalyticsEngine().run_kmeans(records, features, k, max_iter, rng)


def compute_live_correlations(records,
                              target: Optional[str] = None,
                              factors: Optional[Sequence[str]] = None,
                              partition: Optional[int] = None) -> Dict[str, Any]:
    """Compute live correlations with the shared configuration."""
    return AnalyticsEngine().compute_live_correlations(records, target, factors, partition)
