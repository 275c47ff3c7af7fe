"""
Main entry point for happymath.

Runs one analytics operation over a JSON file of records and prints the
result as JSON.
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from happymath.analytics.engine import AnalyticsEngine, filter_partition, latest_partition
from happymath.components.config import ConfigManager, load_config_file
from happymath.records import load_records

logger = logging.getLogger('happymath')


def setup_logging(level: str = 'INFO') -> None:
    """
    Set up logging.

    Args:
        level: Logging level
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )


def partition_arg(value: str):
    """Parse a partition argument: an integer year or 'latest'."""
    if value == 'latest':
        return value
    try:
        return int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer or 'latest', got {value!r}")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description='Well-being dashboard analytics')

    parser.add_argument(
        'command',
        choices=['associations', 'kmeans', 'correlations'],
        help='Operation to run'
    )

    parser.add_argument(
        '--records',
        required=True,
        help='Path to a JSON file holding a list of record rows'
    )

    parser.add_argument(
        '--config',
        help='Path to configuration file (JSON or YAML)'
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logging level (defaults to logging.level from the configuration)'
    )

    parser.add_argument(
        '--partition',
        type=partition_arg,
        help="Partition (year) to analyze, or 'latest'"
    )

    parser.add_argument('--min-support', type=float, help='Minimum itemset support')
    parser.add_argument('--min-confidence', type=float, help='Minimum rule confidence')
    parser.add_argument('--k', type=int, help='Number of clusters')
    parser.add_argument('--max-iter', type=int, help='Maximum k-means iterations')
    parser.add_argument('--seed', type=int, help='Random seed for k-means seeding')

    return parser.parse_args(argv)


def read_rows(filepath: str) -> List[Dict[str, Any]]:
    """
    Read record rows from a JSON file.

    Args:
        filepath: Path to a JSON list, or an object with a 'records' list

    Returns:
        List of rows
    """
    with open(filepath, 'r') as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get('records', [])

    if not isinstance(data, list):
        raise ValueError(f"Expected a list of records in {filepath}")

    return data


def build_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Create configuration overrides from a file and command line arguments."""
    overrides = {}

    # Load configuration from file if provided
    if args.config:
        overrides.update(load_config_file(args.config))

    if args.min_support is not None:
        overrides.setdefault('associations', {})['min-support'] = args.min_support

    if args.min_confidence is not None:
        overrides.setdefault('associations', {})['min-confidence'] = args.min_confidence

    if args.k is not None:
        overrides.setdefault('kmeans', {})['k'] = args.k

    if args.max_iter is not None:
        overrides.setdefault('kmeans', {})['max-iter'] = args.max_iter

    if args.seed is not None:
        overrides.setdefault('kmeans', {})['seed'] = args.seed

    return overrides


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.
    """
    # Parse arguments
    args = parse_args(argv)

    # Initialize configuration
    config = ConfigManager.get_config(build_overrides(args))

    # Set up logging
    setup_logging(args.log_level or config.get('logging.level'))

    engine = AnalyticsEngine(config)

    records = load_records(
        read_rows(args.records),
        label_key=config.get('records.label-key'),
        partition_key=config.get('records.partition-key')
    )

    partition = None
    if args.partition == 'latest':
        partition = latest_partition(records)
    elif args.partition is not None:
        partition = args.partition

    if args.command == 'correlations':
        result = engine.compute_live_correlations(records, partition=partition)
    else:
        records = filter_partition(records, partition)
        if args.command == 'associations':
            result = engine.mine_associations(records)
        else:
            result = engine.run_kmeans(records)
        result['partition'] = partition

    json.dump(result, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write('\n')

    if result.get('status') == 'error':
        logger.error(result.get('message'))
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
