"""Detect and remove duplicate occurrence records.

Two records are duplicates when they agree exactly on latitude, longitude,
spatial unit (e.g. sub-catchment), resolved date and species. A record with
a missing value in any of these fields has no complete key: it is never
flagged and never removed.
"""

import logging
from typing import Any, Optional

import polars as pl

from danube_occurrence import defaults
from danube_occurrence.coercion import missing_mask, to_float
from danube_occurrence.columns import ColumnBindings, DateColumns, require_columns
from danube_occurrence.dates import resolve_dates
from danube_occurrence.errors import ConfigurationError
from danube_occurrence.logging import report
from danube_occurrence.types import DateRepresentation

logger = logging.getLogger(__name__)

FLAG_COLUMN = "duplicate_flag"


def _resolved_date(
    df: pl.DataFrame,
    year_col: Optional[str],
    day_col: Optional[str],
    month_col: Optional[str],
    date_col: Optional[str],
    resolved_date_col: Optional[str],
) -> pl.Series:
    """The date component of the duplicate key, one value per row."""
    if resolved_date_col is not None:
        if any(c is not None for c in (year_col, day_col, month_col, date_col)):
            raise ConfigurationError(
                "resolved_date_col cannot be combined with year, day, month or date columns."
            )
        return require_columns(df, [resolved_date_col])[resolved_date_col]

    date_columns = DateColumns(year=year_col, month=month_col, day=day_col, date=date_col)
    resolved = resolve_dates(df, date_columns)
    if date_columns.representation == DateRepresentation.YEAR:
        return resolved["year"]
    return resolved["date"]


def _coordinate(series: pl.Series, precision: Optional[int]) -> pl.Series:
    if precision is None:
        return series
    if precision < 0:
        raise ConfigurationError(
            f"coordinate_precision must be a non-negative number of decimals, got {precision}."
        )
    return to_float(series).round(precision)


def _key_frame(
    df: Any,
    lat_col: str,
    lon_col: str,
    subcatchment_col: str,
    species_col: str,
    year_col: Optional[str],
    day_col: Optional[str],
    month_col: Optional[str],
    date_col: Optional[str],
    resolved_date_col: Optional[str],
    coordinate_precision: Optional[int],
) -> tuple[pl.DataFrame, pl.Series, pl.Series]:
    """The input table, its key struct series and its eligibility mask."""
    bindings = ColumnBindings(
        latitude=lat_col,
        longitude=lon_col,
        species=species_col,
        spatial_unit=subcatchment_col,
    )
    df = bindings.resolve(df)

    key = pl.DataFrame(
        [
            _coordinate(df[lat_col], coordinate_precision).alias("latitude"),
            _coordinate(df[lon_col], coordinate_precision).alias("longitude"),
            df[subcatchment_col].alias("spatial_unit"),
            _resolved_date(
                df, year_col, day_col, month_col, date_col, resolved_date_col
            ).alias("date"),
            df[species_col].alias("species"),
        ]
    )

    eligible = pl.Series([True] * df.height, dtype=pl.Boolean)
    for column in key.columns:
        eligible = eligible & ~missing_mask(key[column])

    return df, key.select(pl.struct(pl.all()).alias("key")).to_series(), eligible


def flag_duplicates(
    df: Any,
    lat_col: str,
    lon_col: str,
    subcatchment_col: str,
    species_col: str,
    year_col: Optional[str] = None,
    day_col: Optional[str] = None,
    month_col: Optional[str] = None,
    date_col: Optional[str] = None,
    resolved_date_col: Optional[str] = None,
    coordinate_precision: Optional[int] = defaults.DUPLICATE_COORDINATE_PRECISION,
) -> pl.Series:
    """Boolean series, True for every member of a group of two or more duplicates."""
    _, key, eligible = _key_frame(
        df,
        lat_col,
        lon_col,
        subcatchment_col,
        species_col,
        year_col,
        day_col,
        month_col,
        date_col,
        resolved_date_col,
        coordinate_precision,
    )
    return (key.is_duplicated() & eligible).alias(FLAG_COLUMN)


def check_duplicates(
    df: Any,
    lat_col: str,
    lon_col: str,
    subcatchment_col: str,
    species_col: str,
    year_col: Optional[str] = None,
    day_col: Optional[str] = None,
    month_col: Optional[str] = None,
    date_col: Optional[str] = None,
    resolved_date_col: Optional[str] = None,
    delete_duplicates: bool = defaults.DELETE_DUPLICATES,
    coordinate_precision: Optional[int] = defaults.DUPLICATE_COORDINATE_PRECISION,
    verbose: bool = False,
) -> pl.DataFrame:
    """Remove or flag duplicate records.

    Args:
        df: Occurrence records.
        lat_col: Name of the latitude column.
        lon_col: Name of the longitude column.
        subcatchment_col: Name of the spatial unit column.
        species_col: Name of the species column.
        year_col: Year column, alone or with ``day_col`` and ``month_col``.
        day_col: Day column; requires ``month_col`` and ``year_col``.
        month_col: Month column; requires ``day_col`` and ``year_col``.
        date_col: Formatted date column (``dd/mm/yyyy``), used alone.
        resolved_date_col: Column already holding a resolved date or year,
            used alone.
        delete_duplicates: Keep only the first record of each duplicate group,
            in original order. The result has exactly the input columns, so
            running the function again removes nothing. When False, every
            record is kept and a Boolean ``duplicate_flag`` column marks all
            members of each group, replacing any existing one.
        coordinate_precision: Round coordinates to this many decimals before
            comparing. By default coordinates must be exactly equal.
        verbose: Log the number of duplicates at INFO level.

    Raises:
        ConfigurationError: For absent columns or an ambiguous date
            configuration.
        ParseError: If a date value cannot be parsed.
    """
    df, key, eligible = _key_frame(
        df,
        lat_col,
        lon_col,
        subcatchment_col,
        species_col,
        year_col,
        day_col,
        month_col,
        date_col,
        resolved_date_col,
        coordinate_precision,
    )
    flags = key.is_duplicated() & eligible

    report(logger, verbose, f"Number of duplicate records flagged: {flags.sum()}")

    if not delete_duplicates:
        return df.with_columns(flags.alias(FLAG_COLUMN))

    keep = key.is_first_distinct() | ~eligible
    deduplicated = df.filter(keep)
    report(
        logger,
        verbose,
        f"Removed {df.height - deduplicated.height} duplicate records, {deduplicated.height} remain.",
    )
    return deduplicated
