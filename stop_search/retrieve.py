"""Month-by-month retrieval of stop & search records for an area or a force."""
import logging
from typing import NamedTuple

from stop_search.errors import (
    InvalidArgument,
    RetrievalCancelled,
    RetrievalFailed,
    UpstreamUnavailable,
)
from stop_search.flatten import NESTED_FIELDS, flatten_record, flatten_records
from stop_search.periods import Period

logger = logging.getLogger(__name__)


class Progress(NamedTuple):
    index: int
    total: int
    period: Period
    records: int


def resolve_latest_period(client):
    """Ask the API for the most recent month that has data."""
    dates = client.street_dates()
    if not isinstance(dates, list) or not dates:
        raise UpstreamUnavailable(f"Unexpected response from crimes-street-dates: {dates!r}")
    try:
        latest = max(entry["date"] for entry in dates)
        period = Period.parse(latest)
    except (KeyError, TypeError, InvalidArgument) as e:
        raise UpstreamUnavailable(f"Could not read latest date from crimes-street-dates: {e}")
    logger.info(f"Latest available month is {period}")
    return period


def resolve_start(client, month=None, year=None):
    """Use the caller's month and year if both are given, else the latest month."""
    if month is not None and year is not None:
        return Period(year, month)
    if month is not None or year is not None:
        logger.warning("Both month and year are needed to pick a start month, using the latest month instead")
    return resolve_latest_period(client)


def list_forces(client):
    """Return (name, id) pairs for every force the API knows about."""
    forces = client.forces()
    if not isinstance(forces, list):
        raise UpstreamUnavailable(f"Unexpected response from forces: {forces!r}")
    try:
        return [(f["name"], f["id"]) for f in forces]
    except (KeyError, TypeError) as e:
        raise UpstreamUnavailable(f"Unexpected force entry in forces response: {e}")


def check_force_id(force_id):
    if not isinstance(force_id, str) or not force_id.strip():
        raise InvalidArgument("Force id must be a non-empty string")
    return force_id.strip()


def _retrieve(fetch, window, label, extra_columns=None, strict=False,
              nested_fields=NESTED_FIELDS, progress=None, cancel=None):
    if not window:
        raise InvalidArgument("Retrieval window must contain at least one month")

    records = []
    months = []
    counts = {}
    completed = []
    total = len(window)

    def build_table(fail_fast=False):
        table = flatten_records(records, strict=fail_fast, nested_fields=nested_fields)
        table.insert(0, "query_month", [months[i] for i in table.index])
        for position, (name, value) in enumerate((extra_columns or {}).items(), start=1):
            table.insert(position, name, value)
        table = table.reset_index(drop=True)
        table.attrs["periods"] = dict(counts)
        return table

    for i, period in enumerate(window, start=1):
        if cancel is not None and cancel.is_set():
            logger.warning(f"Retrieval for {label} cancelled before {period}")
            raise RetrievalCancelled(
                f"Cancelled after {len(completed)} of {total} months", completed, build_table()
            )

        date = str(period)
        logger.info(f"Fetching stop & search data for {label} in {date} ({i}/{total})...")
        try:
            batch = fetch(date, period)
        except UpstreamUnavailable as e:
            logger.error(f"Failed to fetch {label} in {date}: {e}")
            raise RetrievalFailed(
                f"Failed at {date} after {len(completed)} of {total} months: {e}",
                period, completed, build_table(),
            ) from e

        if not isinstance(batch, list):
            raise RetrievalFailed(
                f"Unexpected response for {date}: expected a list, got {type(batch).__name__}",
                period, completed, build_table(),
            )
        if not batch:
            logger.info(f"No stop & search data for {label} in {date}.")
        if strict:
            for position, record in enumerate(batch, start=len(records)):
                flatten_record(record, nested_fields=nested_fields, index=position)

        records.extend(batch)
        months.extend([date] * len(batch))
        counts[date] = len(batch)
        completed.append(period)
        if progress is not None:
            progress(Progress(i, total, period, len(batch)))

    table = build_table(fail_fast=strict)
    logger.info(f"Retrieved {len(table)} records for {label} across {total} months")
    return table


def retrieve_area(client, polygon, window, **kwargs):
    """Fetch every month in ``window`` for the area inside ``polygon``.

    Returns a DataFrame with one row per stop, months in window order, and
    ``attrs["periods"]`` mapping each month to the number of records the API
    returned for it. Raises RetrievalFailed if a month cannot be fetched.
    """
    poly = polygon.to_api_string()

    def fetch(date, period):
        return client.stops_street(poly, date, period=period)

    return _retrieve(fetch, window, "area", **kwargs)


def retrieve_force(client, force_id, window, **kwargs):
    """Fetch every month in ``window`` for one force (see list_forces for ids)."""
    force_id = check_force_id(force_id)

    def fetch(date, period):
        return client.stops_force(force_id, date, period=period)

    return _retrieve(fetch, window, force_id, extra_columns={"query_force": force_id}, **kwargs)
