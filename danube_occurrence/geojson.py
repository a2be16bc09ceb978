import datetime
from typing import Any, Optional

import geojson
import polars as pl
import shapely

from danube_occurrence import defaults, output
from danube_occurrence.coercion import to_float
from danube_occurrence.columns import require_columns


def _property_value(value: Any) -> Any:
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    return value


def build_point_feature(
    lng: float, lat: float, properties: dict[str, Any]
) -> geojson.Feature:
    return geojson.Feature(
        properties={k: _property_value(v) for k, v in properties.items()},
        geometry=shapely.geometry.mapping(shapely.Point(lng, lat)),  # type: ignore
    )


def build_points_feature_collection(
    df: Any,
    lat_col: str = defaults.LATITUDE_COLUMN,
    lon_col: str = defaults.LONGITUDE_COLUMN,
    property_columns: Optional[list[str]] = None,
) -> geojson.FeatureCollection:
    """One Point feature per record; records without coordinates are skipped.

    ``property_columns`` defaults to every column except the coordinates.
    """
    df = require_columns(df, [lat_col, lon_col])
    if property_columns is None:
        property_columns = [c for c in df.columns if c not in (lat_col, lon_col)]
    require_columns(df, property_columns)

    points = df.select(
        to_float(df[lat_col]).alias("__lat"),
        to_float(df[lon_col]).alias("__lng"),
        pl.struct(property_columns).alias("__properties")
        if property_columns
        else pl.lit(None).alias("__properties"),
    ).filter(
        pl.col("__lat").is_not_null()
        & pl.col("__lng").is_not_null()
        & pl.col("__lat").is_not_nan()
        & pl.col("__lng").is_not_nan()
    )

    features: list[geojson.Feature] = []
    for lat, lng, properties in points.iter_rows():
        features.append(build_point_feature(lng, lat, properties or {}))
    return geojson.FeatureCollection(features)


def write_geojson(
    feature_collection: geojson.FeatureCollection, output_file: str
) -> None:
    # Prepare the output file path
    output_file = output.prepare_file_path(output_file)

    with open(output_file, "w") as geojson_writer:
        geojson.dump(feature_collection, geojson_writer)
