"""Flatten nested stop & search records into a single pandas DataFrame.

A record from the API looks roughly like::

    {"type": "Person search", "outcome": "Arrest",
     "outcome_object": {"id": "bu-arrest", "name": "Arrest"},
     "location": {"latitude": "52.1", "longitude": "-1.9",
                  "street": {"id": 123, "name": "On or near High Street"}}}

Nested mappings become dotted columns (``location.street.name``). Records do
not all carry the same keys, so the table's columns are the union of every
record's columns, in first-seen order. Cells a record does not have hold
``ABSENT``; a field the API sent as ``null`` stays ``None``.
"""
import logging
from collections.abc import Mapping

import pandas as pd

from stop_search.errors import MalformedRecord

logger = logging.getLogger(__name__)

ABSENT = pd.NA
SEPARATOR = "."
NESTED_FIELDS = ("location", "location.street", "outcome_object")


def flatten_record(record, sep=SEPARATOR, nested_fields=NESTED_FIELDS, index=None):
    """Flatten one record into an ordered dict of column -> value."""
    if not isinstance(record, Mapping):
        raise MalformedRecord(
            f"Record {index} is a {type(record).__name__}, not a mapping", index=index
        )

    flat = {}

    def walk(mapping, prefix):
        for key, value in mapping.items():
            path = f"{prefix}{sep}{key}" if prefix else str(key)
            if isinstance(value, Mapping):
                walk(value, path)
            elif value is not None and path in nested_fields:
                raise MalformedRecord(
                    f"Record {index}: field {path!r} should be a mapping, got {value!r}",
                    index=index,
                    path=path,
                )
            else:
                flat[path] = value

    walk(record, "")
    return flat


def flatten_records(records, strict=False, sep=SEPARATOR, nested_fields=NESTED_FIELDS):
    """Flatten a sequence of records into a DataFrame, one row per record.

    Malformed records are skipped with a warning, or raise MalformedRecord when
    ``strict`` is set. The returned index holds each row's position in
    ``records``, so skipped records leave a gap.
    """
    rows = []
    positions = []
    columns = {}

    for i, record in enumerate(records):
        try:
            flat = flatten_record(record, sep=sep, nested_fields=nested_fields, index=i)
        except MalformedRecord as e:
            if strict:
                raise
            logger.warning(f"Skipping malformed record: {e}")
            continue
        for column in flat:
            columns.setdefault(column, None)
        rows.append(flat)
        positions.append(i)

    columns = list(columns)
    data = [[row.get(c, ABSENT) for c in columns] for row in rows]
    return pd.DataFrame(data, columns=columns, index=pd.Index(positions, dtype="int64"), dtype=object)
