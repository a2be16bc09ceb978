"""Spatial filtering and joins of point records against reference polygons.

Points are always built as (x, y) = (longitude column, latitude column) in
the CRS of the records. When a polygon is in a different CRS it is the
polygon that gets reprojected, once, never the points.

Membership uses shapely's ``within`` predicate, which is strict: a point
lying exactly on a polygon's boundary is not within it.
"""

import logging
from typing import Any, TypeVar

import geojson
import numpy as np
import polars as pl
import shapely
from contexttimer import Timer
from pyproj import CRS, Transformer
from shapely.geometry import shape
from shapely.geometry.polygon import orient
from shapely.ops import transform, unary_union

from danube_occurrence import defaults
from danube_occurrence.coercion import to_float
from danube_occurrence.columns import require_columns
from danube_occurrence.errors import ConfigurationError, TypeMismatchError
from danube_occurrence.logging import report
from danube_occurrence.types import Bbox, Boundary, CrsInput

logger = logging.getLogger(__name__)

FrameT = TypeVar("FrameT", pl.DataFrame, pl.LazyFrame)

GEOMETRY_COLUMN = "geometry"


def _require_boundary(boundary: Any) -> Boundary:
    if not isinstance(boundary, Boundary):
        raise TypeMismatchError(
            f"The 'boundary' parameter must be a Boundary, got {type(boundary).__name__}."
        )
    if not isinstance(boundary.geometry, (shapely.Polygon, shapely.MultiPolygon)):
        raise TypeMismatchError(
            f"Boundary geometry must be a Polygon or MultiPolygon, got {boundary.geometry.geom_type}."
        )
    return boundary


def _transformer(source: CrsInput, target: CrsInput) -> Transformer | None:
    """A transformer between two CRSs, or None when they are the same."""
    source_crs = CRS.from_user_input(source)
    target_crs = CRS.from_user_input(target)
    if source_crs == target_crs:
        return None
    return Transformer.from_crs(source_crs, target_crs, always_xy=True)


def reproject_boundary(boundary: Boundary, crs: CrsInput) -> Boundary:
    """Return ``boundary`` expressed in ``crs``, unchanged if already there."""
    boundary = _require_boundary(boundary)
    transformer = _transformer(boundary.crs, crs)
    if transformer is None:
        return boundary
    return Boundary(geometry=transform(transformer.transform, boundary.geometry), crs=crs)


def _point_arrays(
    df: pl.DataFrame, lat_col: str, lon_col: str
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Longitudes, latitudes and a mask of rows with both present."""
    lats = to_float(df[lat_col]).to_numpy()
    lons = to_float(df[lon_col]).to_numpy()
    present = ~(np.isnan(lats) | np.isnan(lons))
    return lons, lats, present


def points_within(
    boundary: Boundary,
    df: pl.DataFrame,
    lat_col: str,
    lon_col: str,
    crs: CrsInput = defaults.POINT_CRS,
) -> pl.Series:
    """Boolean series, True for rows whose point lies within ``boundary``.

    Rows with a missing or non-numeric coordinate are never within.
    """
    boundary = reproject_boundary(boundary, crs)
    lons, lats, present = _point_arrays(df, lat_col, lon_col)

    within = np.zeros(df.height, dtype=bool)
    if present.any():
        geometry = boundary.geometry
        shapely.prepare(geometry)
        points = shapely.points(lons[present], lats[present])
        within[present] = shapely.within(points, geometry)
    return pl.Series("within", within)


def get_spatial_subset(
    boundary: Any,
    data: Any,
    lat_col: str,
    lon_col: str,
    crs: CrsInput = defaults.POINT_CRS,
    verbose: bool = False,
) -> pl.DataFrame:
    """Filter point records to those falling within a reference polygon.

    Args:
        boundary: The reference area. A point inside any part of a
            MultiPolygon counts as within.
        data: Point records.
        lat_col: Name of the latitude (or northing) column.
        lon_col: Name of the longitude (or easting) column.
        crs: CRS of the points, WGS84 by default. The boundary is reprojected
            to it when needed.
        verbose: Log how many points were retained.

    Returns:
        The rows of ``data`` within the boundary, in their original order.

    Raises:
        TypeMismatchError: If ``boundary`` is not a polygonal Boundary.
        ConfigurationError: If ``data`` is not a DataFrame or a column is absent.
    """
    data = require_columns(data, [lat_col, lon_col], name="data")
    boundary = _require_boundary(boundary)

    if CRS.from_user_input(boundary.crs) != CRS.from_user_input(crs):
        report(
            logger,
            verbose,
            "CRS mismatch: Transforming the polygon to match the CRS of the data.",
        )

    within = points_within(boundary, data, lat_col, lon_col, crs=crs)
    filtered = data.filter(within)

    report(
        logger,
        verbose,
        f"{filtered.height} out of {data.height} points are within the polygon.",
    )
    return filtered


def filter_by_bounding_box(
    lf: FrameT,
    bounding_box: Bbox,
    lat_col: str = defaults.LATITUDE_COLUMN,
    lng_col: str = defaults.LONGITUDE_COLUMN,
) -> FrameT:
    """Filter a frame to rows within a geographic bounding box.

    Args:
        lf: The DataFrame or LazyFrame to filter.
        bounding_box: Geographic bounding box to filter records.
        lat_col: Name of the latitude column.
        lng_col: Name of the longitude column.

    Returns:
        A frame filtered to rows with valid coordinates within the bounding box.
    """
    return lf.filter(
        pl.col(lat_col).is_not_null()
        & pl.col(lng_col).is_not_null()
        & pl.col(lat_col).is_between(bounding_box.min_lat, bounding_box.max_lat)
        & pl.col(lng_col).is_between(bounding_box.min_lng, bounding_box.max_lng)
    )


def load_boundary(path: str, crs: CrsInput = defaults.POINT_CRS) -> Boundary:
    """Load a GeoJSON file as a single Boundary (union of all its features).

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file holds no features.
        TypeMismatchError: If the union of the features is not polygonal.
    """
    # Let FileNotFoundError propagate if the file doesn't exist
    with open(path, "r") as f:
        data = geojson.load(f)

    geometries = [shape(feature["geometry"]) for feature in data.get("features", [])]
    if not geometries:
        raise ValueError(f"No valid geometries found in {path}")

    return _require_boundary(Boundary(geometry=unary_union(geometries), crs=crs))


def boundary_to_wkt(boundary: Any) -> str:
    """WKT of a single-polygon boundary with counterclockwise exterior ring.

    Occurrence databases such as GBIF expect counterclockwise polygons in
    geometry filters.
    """
    boundary = _require_boundary(boundary)
    if not isinstance(boundary.geometry, shapely.Polygon):
        raise TypeMismatchError("The boundary must contain a single polygon geometry.")
    return orient(boundary.geometry, sign=1.0).wkt


def spatial_join(
    df: Any,
    layer: Any,
    lat_col: str = defaults.LATITUDE_COLUMN,
    lon_col: str = defaults.LONGITUDE_COLUMN,
    crs: CrsInput = defaults.POINT_CRS,
    layer_crs: CrsInput = defaults.POINT_CRS,
) -> pl.DataFrame:
    """Attach to each record the attributes of the layer polygon containing it.

    This is how records get administrative units or sub-catchment
    identifiers. The join is a left join: records outside every polygon keep
    null attributes. When polygons overlap, the first one in layer order wins.

    Args:
        df: Point records.
        layer: Polygon layer with a WKB ``geometry`` column, such as a
            :class:`BoundaryLayerSchema` frame.
        lat_col: Name of the latitude column of ``df``.
        lon_col: Name of the longitude column of ``df``.
        crs: CRS of the points.
        layer_crs: CRS of the layer; its polygons are reprojected to ``crs``.
    """
    df = require_columns(df, [lat_col, lon_col])
    layer = require_columns(layer, [GEOMETRY_COLUMN], name="layer")
    if layer[GEOMETRY_COLUMN].dtype != pl.Binary:
        raise TypeMismatchError(
            f"Layer column '{GEOMETRY_COLUMN}' must hold WKB geometries, got {layer[GEOMETRY_COLUMN].dtype}."
        )
    clashing = [c for c in layer.columns if c != GEOMETRY_COLUMN and c in df.columns]
    if clashing:
        raise ConfigurationError(
            f"Layer attributes already present in the data frame: {', '.join(clashing)}"
        )

    polygons = shapely.from_wkb(np.array(layer[GEOMETRY_COLUMN].to_list(), dtype=object))
    transformer = _transformer(layer_crs, crs)
    if transformer is not None:
        polygons = np.array(
            [transform(transformer.transform, p) for p in polygons], dtype=object
        )

    lons, lats, present = _point_arrays(df, lat_col, lon_col)
    rows = np.flatnonzero(present)
    points = shapely.points(lons[rows], lats[rows])
    with Timer(output=logger.info, prefix="Querying layer polygons"):
        point_idx, polygon_idx = shapely.STRtree(polygons).query(
            points, predicate="within"
        )

    matches: list[int | None] = [None] * df.height
    for p, g in sorted(zip(point_idx.tolist(), polygon_idx.tolist())):
        row = int(rows[p])
        if matches[row] is None:
            matches[row] = g

    logger.info(
        f"Joined {sum(m is not None for m in matches)} of {df.height} records to layer polygons"
    )

    attributes = layer.drop(GEOMETRY_COLUMN).with_row_index("__layer_row")
    return (
        df.with_row_index("__row")
        .with_columns(__layer_row=pl.Series(matches, dtype=pl.UInt32))
        .join(attributes, on="__layer_row", how="left")
        .sort("__row")
        .drop("__row", "__layer_row")
    )
