"""
Analytics operations for the well-being dashboard.

This module exposes association mining, k-means clustering and live
correlations over in-memory records.
"""

from happymath.analytics.engine import (
    AnalyticsEngine, mine_associations, run_kmeans, compute_live_correlations,
    latest_partition, filter_partition, partition_summary
)
