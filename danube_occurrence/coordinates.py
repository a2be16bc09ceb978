import logging
from dataclasses import dataclass
from typing import Any

import polars as pl

from danube_occurrence.coercion import failed_mask, indices, missing_mask, to_float
from danube_occurrence.columns import require_columns
from danube_occurrence.constants import LATITUDE_RANGE, LONGITUDE_RANGE
from danube_occurrence.logging import report

logger = logging.getLogger(__name__)


@dataclass
class CoordinateReport:
    """Result of :func:`check_coordinates`.

    All index lists hold 0-based row positions. ``values_converted`` counts
    present values whose representation changed because they were coerced
    to numbers (e.g. the string ``"45.5"``); values that failed coercion are
    not counted.
    """

    df: pl.DataFrame
    invalid_latitudes: list[int]
    invalid_longitudes: list[int]
    non_numeric_latitudes: list[int]
    non_numeric_longitudes: list[int]
    values_converted: int


def _out_of_range(values: pl.Series, bounds: tuple[float, float]) -> list[int]:
    low, high = bounds
    present = ~missing_mask(values)
    return indices(present & ((values < low) | (values > high)))


def _converted_count(original: pl.Series, coerced: pl.Series) -> int:
    if original.dtype.is_numeric():
        return 0
    return int((~missing_mask(original) & ~missing_mask(coerced)).sum())


def _indices_message(label: str, rows: list[int], ok_message: str) -> str:
    if rows:
        return f"{label} found at rows: {', '.join(str(r) for r in rows)}"
    return ok_message


def check_coordinates(
    df: Any,
    lat_col: str,
    lon_col: str,
    convert_to_numeric: bool = True,
    verbose: bool = False,
) -> CoordinateReport:
    """Check that coordinates are numeric WGS84 decimal degrees.

    Latitudes must lie in [-90, 90] and longitudes in [-180, 180], bounds
    included. Individual bad rows never fail the call; they are reported by
    index. A value that was missing in the input is neither non-numeric nor
    out of range.

    Args:
        df: Table with the coordinates.
        lat_col: Name of the latitude column.
        lon_col: Name of the longitude column.
        convert_to_numeric: Write the coerced Float64 columns back into the
            returned table. When False the table is returned unchanged.
        verbose: Log a validation summary at INFO level.

    Raises:
        ConfigurationError: If ``df`` is not a DataFrame or a column is absent.
    """
    df = require_columns(df, [lat_col, lon_col])

    latitudes = df[lat_col]
    longitudes = df[lon_col]
    lat_numeric = to_float(latitudes)
    lon_numeric = to_float(longitudes)

    result = CoordinateReport(
        df=df,
        invalid_latitudes=_out_of_range(lat_numeric, LATITUDE_RANGE),
        invalid_longitudes=_out_of_range(lon_numeric, LONGITUDE_RANGE),
        non_numeric_latitudes=indices(failed_mask(latitudes, lat_numeric)),
        non_numeric_longitudes=indices(failed_mask(longitudes, lon_numeric)),
        values_converted=0,
    )

    if convert_to_numeric:
        result.values_converted = _converted_count(
            latitudes, lat_numeric
        ) + _converted_count(longitudes, lon_numeric)
        # with_columns keeps the column order, only the dtype changes
        result.df = df.with_columns(lat_numeric, lon_numeric)

    report(logger, verbose, "### Coordinate Validation Summary ###")
    report(
        logger,
        verbose,
        _indices_message(
            "Non-numeric latitude values",
            result.non_numeric_latitudes,
            "All latitude values are numeric.",
        ),
    )
    report(
        logger,
        verbose,
        _indices_message(
            "Non-numeric longitude values",
            result.non_numeric_longitudes,
            "All longitude values are numeric.",
        ),
    )
    report(
        logger,
        verbose,
        _indices_message(
            "Invalid latitude values (out of -90 to 90 range)",
            result.invalid_latitudes,
            "All latitude values are within the valid range (-90 to 90).",
        ),
    )
    report(
        logger,
        verbose,
        _indices_message(
            "Invalid longitude values (out of -180 to 180 range)",
            result.invalid_longitudes,
            "All longitude values are within the valid range (-180 to 180).",
        ),
    )
    report(
        logger,
        verbose,
        f"Values converted to numeric: {result.values_converted}",
    )

    return result


def drop_invalid_coordinates(result: CoordinateReport) -> pl.DataFrame:
    """Remove the rows a :class:`CoordinateReport` flagged as non-numeric or out of range."""
    bad = set(
        result.invalid_latitudes
        + result.invalid_longitudes
        + result.non_numeric_latitudes
        + result.non_numeric_longitudes
    )
    if not bad:
        return result.df
    keep = pl.Series([row not in bad for row in range(result.df.height)])
    return result.df.filter(keep)
