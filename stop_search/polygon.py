"""Area boundaries for the ``stops-street`` endpoint."""
import json
import logging
from dataclasses import dataclass
from pathlib import Path

from shapely.errors import ShapelyError
from shapely.geometry import Polygon, MultiPolygon, shape

from stop_search.errors import InvalidArgument

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeoPolygon:
    """Boundary ring stored as (latitude, longitude) vertices, in ring order."""

    vertices: tuple

    def __post_init__(self):
        try:
            vertices = tuple((float(lat), float(lon)) for lat, lon in self.vertices)
        except (TypeError, ValueError) as e:
            raise InvalidArgument(f"Polygon vertices must be (latitude, longitude) number pairs: {e}")
        if len(vertices) < 3:
            raise InvalidArgument(f"A polygon needs at least 3 vertices, got {len(vertices)}")
        object.__setattr__(self, "vertices", vertices)

    @classmethod
    def from_lon_lat(cls, coords):
        try:
            vertices = tuple((lat, lon) for lon, lat in coords)
        except (TypeError, ValueError) as e:
            raise InvalidArgument(f"Polygon coordinates must be (longitude, latitude) pairs: {e}")
        return cls(vertices)

    @property
    def lat_lon(self):
        return self.vertices

    @property
    def lon_lat(self):
        """Vertices as (longitude, latitude), the order map libraries expect."""
        return tuple((lon, lat) for lat, lon in self.vertices)

    def to_api_string(self):
        """Serialise as ``lat,long:lat,long:...`` for the ``poly`` parameter."""
        return ":".join(f"{lat},{lon}" for lat, lon in self.vertices)

    def to_shapely(self):
        return Polygon(self.lon_lat)

    def simplified(self, max_points):
        """Return a copy with at most ``max_points`` vertices."""
        if max_points < 3:
            raise InvalidArgument("max_points must be at least 3")
        if len(self.vertices) <= max_points:
            return self

        geom = self.to_shapely()
        tolerance = 0.0001
        simplified = geom
        for _ in range(30):
            simplified = geom.simplify(tolerance, preserve_topology=True)
            if len(simplified.exterior.coords) - 1 <= max_points:
                break
            tolerance *= 2.0
        return GeoPolygon.from_lon_lat(_open_ring(simplified.exterior.coords))


def _open_ring(coords):
    coords = list(coords)
    if len(coords) > 1 and coords[0] == coords[-1]:
        coords = coords[:-1]  # drop duplicate closing vertex
    return [(x, y) for x, y, *_ in coords]


def _geometry(data):
    kind = data.get("type")
    if kind == "FeatureCollection":
        features = data.get("features") or []
        if not features:
            raise InvalidArgument("Boundary file contains no features")
        if len(features) > 1:
            logger.warning(f"Boundary file has {len(features)} features, using the first")
        return _geometry(features[0])
    if kind == "Feature":
        return _geometry(data.get("geometry") or {})
    if kind is None and "coordinates" in data:
        return {"type": "Polygon", "coordinates": data["coordinates"]}
    return data


def polygon_from_geojson(data):
    """Build a GeoPolygon from a GeoJSON geometry, Feature or FeatureCollection."""
    try:
        geom = shape(_geometry(data))
    except (KeyError, TypeError, ValueError, AttributeError, ShapelyError) as e:
        raise InvalidArgument(f"Boundary is not a valid GeoJSON polygon: {e}")

    if isinstance(geom, MultiPolygon):
        parts = list(geom.geoms)
        geom = max(parts, key=lambda p: p.area)
        logger.warning(f"Boundary is a multipolygon with {len(parts)} parts, using the largest")
    if not isinstance(geom, Polygon):
        raise InvalidArgument(f"Boundary must be a Polygon, got {geom.geom_type}")

    return GeoPolygon.from_lon_lat(_open_ring(geom.exterior.coords))


def read_boundary(path):
    """Read a boundary polygon from a GeoJSON file on disk."""
    try:
        with open(Path(path), encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidArgument(f"Boundary file {path} is not valid JSON: {e}")
    except OSError as e:
        raise InvalidArgument(f"Could not read boundary file {path}: {e}")
    polygon = polygon_from_geojson(data)
    logger.info(f"Loaded boundary from {path} with {len(polygon.vertices)} vertices")
    return polygon
