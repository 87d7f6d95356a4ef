import json
import logging
from pathlib import Path

import pandas as pd

from stop_search.flatten import ABSENT

logger = logging.getLogger(__name__)

ABSENT_MARKER = "<absent>"


def _render(value, absence_marker, null_marker):
    if value is ABSENT:
        return absence_marker
    if value is None:
        return null_marker
    # Convert dicts/lists to JSON strings
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return value


def write_table(table, path, absence_marker=ABSENT_MARKER, null_marker="", index=False):
    """Write a flattened table to CSV, one row per stop."""
    path = Path(path)
    out = table.copy()
    for col in out.columns:
        out[col] = out[col].apply(lambda x: _render(x, absence_marker, null_marker))
    path.parent.mkdir(parents=True, exist_ok=True)
    out.to_csv(path, index=index, index_label="row" if index else None)
    logger.info(f"Saved {len(out)} rows and {len(out.columns)} columns to {path}")
    return path


def summarise(table):
    """Per-month row counts and share of missing cells, in window order."""
    periods = table.attrs.get("periods", {})
    summary = []
    for month, count in periods.items():
        rows = table[table["query_month"] == month] if "query_month" in table.columns else table.iloc[0:0]
        cells = rows.size
        summary.append({
            "month": month,
            "records": count,
            "rows": len(rows),
            "columns": len(table.columns),
            "null_percentage": float(rows.isna().sum().sum()) / cells * 100 if cells else 0.0,
        })
    return pd.DataFrame(summary, columns=["month", "records", "rows", "columns", "null_percentage"])
