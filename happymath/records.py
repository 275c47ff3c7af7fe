"""
Record ingestion for happymath.

Raw rows arrive as loose key-value mappings (one per country and year).
They are validated once here into immutable Record objects so that the
mining and clustering code only ever sees floats or None.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import pandas as pd
from pydantic import BaseModel, ConfigDict, field_validator

from happymath.errors import InvalidInputError
from happymath.utils.general import to_number

# Set up logging
logger = logging.getLogger(__name__)


class Record(BaseModel):
    """A labelled row of nullable numeric feature values."""

    model_config = ConfigDict(frozen=True)

    label: str
    partition: Optional[int] = None
    values: Dict[str, Optional[float]] = {}

    @field_validator('label', mode='before')
    @classmethod
    def _coerce_label(cls, value: Any) -> str:
        if value is None:
            raise ValueError("label is required")
        label = str(value).strip()
        if not label:
            raise ValueError("label must not be empty")
        return label

    @field_validator('partition', mode='before')
    @classmethod
    def _coerce_partition(cls, value: Any) -> Optional[int]:
        number = to_number(value)
        if number is None:
            return None
        return int(number)

    @field_validator('values', mode='before')
    @classmethod
    def _coerce_values(cls, value: Any) -> Dict[str, Optional[float]]:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise ValueError("values must be a mapping of feature name to number")
        return {str(k): to_number(v) for k, v in value.items()}

    def value(self, feature: str) -> Optional[float]:
        """Return the numeric value of a feature, or None if absent."""
        return self.values.get(feature)

    def has(self, feature: str) -> bool:
        """Check whether the record carries a usable value for a feature."""
        return self.values.get(feature) is not None

    def has_all(self, features: Iterable[str]) -> bool:
        return all(self.has(f) for f in features)

    @classmethod
    def from_mapping(cls,
                     row: Mapping[str, Any],
                     label_key: str = 'country_name',
                     partition_key: Optional[str] = 'year',
                     default_label: Optional[str] = None) -> 'Record':
        """
        Build a record from a flat row.

        Every key other than the label and partition keys is a candidate
        feature value.

        Args:
            row: Flat key-value mapping
            label_key: Key holding the record label
            partition_key: Key holding the partition (e.g. year), if any
            default_label: Label used when the row has none

        Returns:
            Validated Record
        """
        label = row.get(label_key)
        if label is None or (isinstance(label, float) and label != label):
            label = default_label

        partition = row.get(partition_key) if partition_key else None

        values = {
            k: v for k, v in row.items()
            if k != label_key and k != partition_key
        }

        try:
            return cls(label=label, partition=partition, values=values)
        except ValueError as e:
            raise InvalidInputError(f"Invalid record {row!r}: {e}") from e


def load_records(rows: Union[pd.DataFrame, Sequence[Mapping[str, Any]]],
                 label_key: str = 'country_name',
                 partition_key: Optional[str] = 'year') -> List[Record]:
    """
    Ingest raw rows into records.

    Args:
        rows: List of mappings or a pandas DataFrame
        label_key: Key holding the record label
        partition_key: Key holding the partition, if any

    Returns:
        List of Records in input order
    """
    if isinstance(rows, pd.DataFrame):
        rows = rows.to_dict(orient='records')

    records = []
    for i, row in enumerate(rows):
        if isinstance(row, Record):
            records.append(row)
            continue
        if not isinstance(row, Mapping):
            raise InvalidInputError(f"Row {i} is not a mapping: {row!r}")
        records.append(Record.from_mapping(
            row,
            label_key=label_key,
            partition_key=partition_key,
            default_label=f"row-{i}"
        ))

    logger.debug(f"Loaded {len(records)} records")
    return records


def ensure_records(records: Union[pd.DataFrame, Sequence[Any]],
                   label_key: str = 'country_name',
                   partition_key: Optional[str] = 'year') -> List[Record]:
    """Accept either validated records or raw rows."""
    if isinstance(records, pd.DataFrame):
        return load_records(records, label_key, partition_key)

    records = list(records)
    if all(isinstance(r, Record) for r in records):
        return records

    return load_records(records, label_key, partition_key)
