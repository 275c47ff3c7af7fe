"""
Happymath package for well-being dashboard analytics.

This is the in-process data-mining engine behind the dashboard:
association rules between factor levels, k-means country clustering
and live factor correlations.
"""

__version__ = '0.1.0'

from happymath.records import Record, load_records
from happymath.errors import HappyMathError, InsufficientDataError, InvalidInputError
from happymath.components.config import Config, ConfigManager
from happymath.analytics import (
    AnalyticsEngine, mine_associations, run_kmeans, compute_live_correlations
)
