import html
from typing import Any

import folium
import polars as pl

from danube_occurrence import output
from danube_occurrence.coercion import to_float
from danube_occurrence.columns import require_columns


def build_popup(row: dict[str, Any], lat_col: str, lon_col: str, extra: list[str]) -> str:
    """
    HTML popup text for one point: its coordinates, then one line per extra column.
    """
    lines = [f"Latitude: {row[lat_col]}", f"Longitude: {row[lon_col]}"]
    lines.extend(f"{html.escape(col)}: {html.escape(str(row[col]))}" for col in extra)
    return "<br>".join(lines)


def visualize_points(
    df: Any,
    lat_col: str = "latitude",
    lon_col: str = "longitude",
    show_extra_columns: bool = False,
) -> folium.Map:
    """
    Plot point records as circle markers on an interactive map.

    Args:
        df: Records with latitude and longitude columns.
        lat_col: Name of the latitude column.
        lon_col: Name of the longitude column.
        show_extra_columns: Also show every other column in the popups.

    Returns:
        A folium Map fitted to the points. Records without coordinates are
        not drawn.
    """
    df = require_columns(df, [lat_col, lon_col])
    extra = [c for c in df.columns if c not in (lat_col, lon_col)] if show_extra_columns else []

    points = df.with_columns(
        to_float(df[lat_col]).alias(lat_col), to_float(df[lon_col]).alias(lon_col)
    ).filter(
        pl.col(lat_col).is_not_null()
        & pl.col(lon_col).is_not_null()
        & pl.col(lat_col).is_not_nan()
        & pl.col(lon_col).is_not_nan()
    )

    _map = folium.Map(tiles="OpenStreetMap")

    for row in points.iter_rows(named=True):
        folium.CircleMarker(
            location=[row[lat_col], row[lon_col]],
            radius=5,
            color="blue",
            fill=True,
            fill_opacity=0.7,
            popup=folium.Popup(build_popup(row, lat_col, lon_col, extra)),
        ).add_to(_map)

    if points.height:
        _map.fit_bounds(
            [
                [points[lat_col].min(), points[lon_col].min()],
                [points[lat_col].max(), points[lon_col].max()],
            ]
        )

    return _map


def write_map(_map: folium.Map, output_file: str) -> None:
    _map.save(output.prepare_file_path(output_file))
