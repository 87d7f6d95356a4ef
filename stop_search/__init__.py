from stop_search.client import PoliceApiClient
from stop_search.config import Settings, load_settings
from stop_search.errors import (
    InvalidArgument,
    MalformedRecord,
    RetrievalCancelled,
    RetrievalFailed,
    StopSearchError,
    UpstreamUnavailable,
)
from stop_search.export import summarise, write_table
from stop_search.flatten import ABSENT, flatten_record, flatten_records
from stop_search.periods import Period, generate_window
from stop_search.polygon import GeoPolygon, polygon_from_geojson, read_boundary
from stop_search.retrieve import (
    Progress,
    list_forces,
    resolve_latest_period,
    resolve_start,
    retrieve_area,
    retrieve_force,
)

__version__ = "0.1.0"
