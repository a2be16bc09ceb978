from enum import Enum
from typing import NamedTuple, TypeAlias, Union

import shapely

CrsInput: TypeAlias = Union[int, str]


class LatLng(NamedTuple):
    """A latitude/longitude coordinate pair."""

    lat: float
    lng: float


class Bbox(NamedTuple):
    """A bounding box defined by southwest and northeast corners."""

    sw: LatLng
    ne: LatLng

    @property
    def min_lat(self) -> float:
        return self.sw.lat

    @property
    def max_lat(self) -> float:
        return self.ne.lat

    @property
    def min_lng(self) -> float:
        return self.sw.lng

    @property
    def max_lng(self) -> float:
        return self.ne.lng

    @classmethod
    def from_coordinates(
        cls, min_lat: float, max_lat: float, min_lng: float, max_lng: float
    ) -> "Bbox":
        """Create a Bbox from individual coordinate values."""
        return cls(sw=LatLng(min_lat, min_lng), ne=LatLng(max_lat, max_lng))


class Boundary(NamedTuple):
    """A polygonal reference area together with its coordinate reference system.

    ``crs`` is anything pyproj accepts as user input, e.g. ``4326`` or
    ``"EPSG:3035"``. Coordinates of ``geometry`` are in (x, y) order, which
    for geographic systems means (longitude, latitude).
    """

    geometry: shapely.Polygon | shapely.MultiPolygon
    crs: CrsInput = 4326


class DateRepresentation(Enum):
    YEAR = "year"
    DAY_MONTH_YEAR = "day_month_year"
    DATE_STRING = "date_string"
