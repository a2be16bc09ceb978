import datetime
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

import dataframely as dy
import polars as pl
from dateutil import parser as date_parser

from danube_occurrence import defaults
from danube_occurrence.coercion import indices, missing_mask
from danube_occurrence.columns import DateColumns, require_columns
from danube_occurrence.dataframes.resolved_date import ResolvedDateSchema
from danube_occurrence.errors import ConfigurationError
from danube_occurrence.logging import report

logger = logging.getLogger(__name__)


@dataclass
class TemporalReport:
    """Result of :func:`check_temporal_fields`. Indices are 0-based row positions."""

    missing_values: list[int]
    invalid_years: list[int]
    resolved: dy.DataFrame[ResolvedDateSchema]


@dataclass
class YearCheck:
    missing_values: list[int]
    invalid_years: list[int]
    updated_df: pl.DataFrame


def _validate_year_range(year_range: tuple[int, int]) -> tuple[int, int]:
    if len(year_range) != 2:
        raise ConfigurationError("year_range must hold exactly two years: (min, max).")
    low, high = year_range
    if low > high:
        raise ConfigurationError(
            f"year_range minimum {low} is greater than its maximum {high}."
        )
    return low, high


def resolve_dates(
    df: Any,
    date_columns: DateColumns,
    date_format: str = defaults.DATE_STRING_FORMAT,
) -> dy.DataFrame[ResolvedDateSchema]:
    return ResolvedDateSchema.build(df, date_columns, date_format=date_format)


def check_temporal_fields(
    df: Any,
    date_columns: DateColumns,
    year_range: tuple[int, int] = defaults.YEAR_RANGE,
    date_format: str = defaults.DATE_STRING_FORMAT,
    verbose: bool = False,
) -> TemporalReport:
    """Report missing dates and dates whose year lies outside ``year_range``.

    ``year_range`` is inclusive at both ends. A value that is present but out
    of range is reported as invalid, never as missing.

    Raises:
        ConfigurationError: For an ambiguous or incomplete ``date_columns``,
            an absent column or an inverted ``year_range``.
        ParseError: If any present value cannot be parsed into a date.
    """
    low, high = _validate_year_range(year_range)
    resolved = resolve_dates(df, date_columns, date_format=date_format)

    years = resolved["year"]
    result = TemporalReport(
        missing_values=indices(years.is_null()),
        invalid_years=indices(years.is_not_null() & ~years.is_between(low, high)),
        resolved=resolved,
    )

    report(logger, verbose, f"Missing dates: {len(result.missing_values)}")
    report(
        logger,
        verbose,
        f"Dates outside {low}-{high}: {len(result.invalid_years)}"
        + (f" at rows {result.invalid_years}" if result.invalid_years else ""),
    )
    return result


def check_year_column(
    df: Any,
    col_year: str,
    year_range: tuple[int, int] = defaults.YEAR_RANGE,
    transform_numeric: bool = True,
    verbose: bool = False,
) -> YearCheck:
    """Check missing values and validity of a year column.

    Args:
        df: Table containing the year column.
        col_year: Name of the year column.
        year_range: Inclusive (min, max) range of valid years.
        transform_numeric: Replace the column by its integer years and add a
            ``transformed_flag`` column marking the rows whose representation
            changed (e.g. the string ``"2001"`` became the integer 2001).
        verbose: Log a summary at INFO level.

    Raises:
        ConfigurationError: If the column is absent, or is not numeric while
            ``transform_numeric`` is False.
        ParseError: If a present value cannot be read as a whole year.
    """
    df = require_columns(df, [col_year])
    original = df[col_year]
    if not transform_numeric and not original.dtype.is_numeric():
        raise ConfigurationError(
            f"The column {col_year} is not numeric ({original.dtype}) and transform_numeric is False."
        )

    temporal = check_temporal_fields(
        df, DateColumns(year=col_year), year_range=year_range, verbose=verbose
    )

    updated_df = df
    if transform_numeric:
        if original.dtype.is_integer():
            changed = pl.Series([False] * df.height, dtype=pl.Boolean)
        else:
            changed = ~missing_mask(original)
        updated_df = df.with_columns(
            temporal.resolved["year"].alias(col_year),
            changed.alias("transformed_flag"),
        )

    return YearCheck(
        missing_values=temporal.missing_values,
        invalid_years=temporal.invalid_years,
        updated_df=updated_df,
    )


# Day or month first for ambiguous numeric dates; dateutil handles the spelling variants
_DAYFIRST = {"dmy": True, "mdy": False}

# dateutil fills absent components from its default; parsing against two
# different defaults exposes them
_FILL_DEFAULTS = (datetime.datetime(1, 1, 1), datetime.datetime(2, 2, 2))


def _parse_free_form(value: str, date_format: str) -> Optional[datetime.date]:
    value = value.strip()
    if not value:
        return None
    # ISO 8601 is unambiguous; dateutil would swap its month and day when dayfirst
    try:
        return datetime.datetime.fromisoformat(value).date()
    except ValueError:
        pass
    dayfirst = _DAYFIRST.get(date_format, False)
    try:
        first, second = (
            date_parser.parse(value, dayfirst=dayfirst, default=default).date()
            for default in _FILL_DEFAULTS
        )
    except (ValueError, OverflowError):
        return None
    # Incomplete dates (no day, month or year) are not guessed
    if first != second:
        return None
    return first


def extract_date(
    date_col: Iterable[Optional[str]], date_format: str = "dmy"
) -> pl.DataFrame:
    """Extract day, month and year from dates written in various common formats.

    Args:
        date_col: Date strings, e.g. ``"2 October 2024"``, ``"02-10-2024"``,
            ``"02/10/2024"`` or ``"2024-10-02 14:30:00"``.
        date_format: ``"dmy"`` or ``"mdy"`` to resolve day/month ambiguity.
            ISO 8601 values are always read as year-month-day.

    Returns:
        A frame with ``day``, ``month`` and ``year`` columns, one row per
        input value. Values that cannot be parsed give a row of nulls.
    """
    rows: list[tuple[Optional[int], Optional[int], Optional[int]]] = []
    unparsed = 0
    for value in date_col:
        date = _parse_free_form(value, date_format) if value is not None else None
        if date is None:
            if value is not None:
                unparsed += 1
            rows.append((None, None, None))
        else:
            rows.append((date.day, date.month, date.year))

    if unparsed:
        logger.debug(f"{unparsed} date value(s) could not be parsed")

    return pl.DataFrame(
        rows,
        schema={"day": pl.Int32, "month": pl.Int32, "year": pl.Int32},
        orient="row",
    )
