"""
Core mathematical algorithms for association mining, K-means clustering
and correlation analysis.

This module contains implementations of:
- Median discretization and bounded Apriori (frequent items and pairs)
- Association rule generation
- Z-score normalization and K-means with k-means++ seeding
- Cluster naming
- Live correlation analysis
"""

from happymath.math.discretize import discretize, feature_medians
from happymath.math.apriori import frequent_itemsets
from happymath.math.rules import generate_rules
from happymath.math.normalize import zscore
from happymath.math.clusters import kmeans, Cluster
from happymath.math.naming import name_cluster
from happymath.math.corr import pearson, live_correlations

__all__ = [
    'discretize',
    'feature_medians',
    'frequent_itemsets',
    'generate_rules',
    'zscore',
    'kmeans',
    'Cluster',
    'name_cluster',
    'pearson',
    'live_correlations',
]
