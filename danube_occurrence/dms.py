"""Conversion of degree/minute/second coordinates to decimal degrees.

Two input layouts are supported:

- symbolic strings such as ``34°30'00"N`` held in a single column per axis;
- separate numeric columns for degrees, minutes and seconds, where the sign
  of the degrees column carries the hemisphere.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

import polars as pl

from danube_occurrence import defaults
from danube_occurrence.coercion import failures, to_float
from danube_occurrence.columns import require_columns
from danube_occurrence.errors import ParseError, ParseFailure
from danube_occurrence.logging import report

logger = logging.getLogger(__name__)

DMS_PATTERN = re.compile(
    r"""^\s*
    (?P<degrees>\d+(?:\.\d+)?)\s*°\s*
    (?P<minutes>\d+(?:\.\d+)?)\s*['′]\s*
    (?P<seconds>\d+(?:\.\d+)?)\s*["″]\s*
    (?P<direction>[NSEW])
    \s*$""",
    re.VERBOSE | re.IGNORECASE,
)

LATITUDE_DIRECTIONS = frozenset("NS")
LONGITUDE_DIRECTIONS = frozenset("EW")

# Seconds are written with four decimals, i.e. in units of 1e-4 s
_SECOND_FRACTIONS = 10_000


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing one DMS value.

    Exactly one of three states: a parsed ``value``; a failure with a
    ``reason``; or neither, when the input was missing.
    """

    value: Optional[float] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.reason is None


def parse_dms(value: Any, axis: Optional[str] = None) -> ParseResult:
    """Parse a symbolic DMS string into decimal degrees.

    Args:
        value: A string like ``45°30'15.5"N``. ``None`` is treated as missing.
        axis: ``"latitude"`` or ``"longitude"`` to also check that the
            hemisphere letter belongs to that axis.
    """
    if value is None:
        return ParseResult()
    if not isinstance(value, str):
        return ParseResult(reason=f"expected a string, got {type(value).__name__}")

    match = DMS_PATTERN.match(value)
    if match is None:
        return ParseResult(reason="does not match <deg>°<min>'<sec>\"<N|S|E|W>")

    degrees = float(match["degrees"])
    minutes = float(match["minutes"])
    seconds = float(match["seconds"])
    direction = match["direction"].upper()

    if minutes >= 60:
        return ParseResult(reason=f"minutes out of range: {match['minutes']}")
    if seconds >= 60:
        return ParseResult(reason=f"seconds out of range: {match['seconds']}")
    if axis == "latitude" and direction not in LATITUDE_DIRECTIONS:
        return ParseResult(reason=f"direction {direction} is not valid for a latitude")
    if axis == "longitude" and direction not in LONGITUDE_DIRECTIONS:
        return ParseResult(reason=f"direction {direction} is not valid for a longitude")

    decimal = degrees + minutes / 60 + seconds / 3600
    if direction in ("S", "W"):
        decimal = -decimal
    return ParseResult(value=decimal)


def decimal_to_dms(value: float, is_latitude: bool) -> str:
    """Format decimal degrees as a symbolic DMS string with 4-decimal seconds."""
    if is_latitude:
        direction = "N" if value >= 0 else "S"
    else:
        direction = "E" if value >= 0 else "W"

    # Work in integer fractions of a second so rounding carries into minutes
    total = round(abs(value) * 3600 * _SECOND_FRACTIONS)
    degrees, remainder = divmod(total, 3600 * _SECOND_FRACTIONS)
    minutes, remainder = divmod(remainder, 60 * _SECOND_FRACTIONS)
    seconds = remainder / _SECOND_FRACTIONS
    return f"{degrees}°{minutes}'{seconds:.4f}\"{direction}"


def _parse_symbolic_column(series: pl.Series, axis: str) -> tuple[pl.Series, list[ParseFailure]]:
    values: list[Optional[float]] = []
    problems: list[ParseFailure] = []
    for row, raw in enumerate(series.to_list()):
        result = parse_dms(raw, axis=axis)
        if not result.ok:
            problems.append(
                ParseFailure(row=row, column=series.name, value=raw, reason=str(result.reason))
            )
        values.append(result.value)
    return pl.Series(series.name, values, dtype=pl.Float64), problems


def _signed_magnitude(degrees: pl.Series, minutes: pl.Series, seconds: pl.Series) -> pl.Series:
    magnitude = degrees.abs() + minutes.abs() / 60 + seconds.abs() / 3600
    frame = pl.DataFrame(
        {"d": degrees, "m": minutes, "s": seconds, "magnitude": magnitude}
    )
    # A zero degrees value carries no sign, so fall back to minutes, then seconds
    negative = (
        pl.when(pl.col("d") != 0)
        .then(pl.col("d") < 0)
        .when(pl.col("m") != 0)
        .then(pl.col("m") < 0)
        .otherwise(pl.col("s") < 0)
    )
    return frame.select(
        pl.when(negative)
        .then(-pl.col("magnitude"))
        .otherwise(pl.col("magnitude"))
        .alias("decimal")
    ).to_series()


def dms_to_decimal(
    data: pl.DataFrame,
    lat_col: str,
    lon_col: str,
    is_dms_symbol: bool = True,
    verbose: bool = False,
    lat_out: str = defaults.DMS_LATITUDE_OUTPUT,
    lon_out: str = defaults.DMS_LONGITUDE_OUTPUT,
    minutes_suffix: str = defaults.DMS_MINUTES_SUFFIX,
    seconds_suffix: str = defaults.DMS_SECONDS_SUFFIX,
) -> pl.DataFrame:
    """Add decimal-degree latitude and longitude columns to ``data``.

    Args:
        data: Table holding the DMS coordinates.
        lat_col: Latitude column; a symbolic DMS string column, or the degrees
            column when ``is_dms_symbol`` is False.
        lon_col: Longitude column, same conventions as ``lat_col``.
        is_dms_symbol: True for symbolic strings (``34°30'45"N``), False for
            separate degree/minute/second columns. The minute and second
            columns are found by appending ``minutes_suffix`` and
            ``seconds_suffix`` to the degree column names.
        verbose: Log progress at INFO level.
        lat_out: Name of the decimal latitude column to write.
        lon_out: Name of the decimal longitude column to write.

    Returns:
        ``data`` with ``lat_out`` and ``lon_out`` added (or replaced).

    Raises:
        ConfigurationError: If a required column is absent.
        ParseError: If any present value cannot be converted. Every offending
            row is listed in ``ParseError.failures``.
    """
    problems: list[ParseFailure] = []

    if is_dms_symbol:
        require_columns(data, [lat_col, lon_col], name="data")
        report(logger, verbose, "Converting from DMS with symbols to decimal degrees.")
        lat_dd, lat_problems = _parse_symbolic_column(data[lat_col], "latitude")
        lon_dd, lon_problems = _parse_symbolic_column(data[lon_col], "longitude")
        problems = lat_problems + lon_problems
    else:
        lat_parts = [lat_col, lat_col + minutes_suffix, lat_col + seconds_suffix]
        lon_parts = [lon_col, lon_col + minutes_suffix, lon_col + seconds_suffix]
        require_columns(data, lat_parts + lon_parts, name="data")
        report(
            logger,
            verbose,
            "Converting from separate degree, minute, second columns to decimal degrees.",
        )
        converted: list[pl.Series] = []
        for column in lat_parts + lon_parts:
            original = data[column]
            coerced = to_float(original)
            problems.extend(failures(original, coerced, "not a number"))
            converted.append(coerced)
        lat_dd = _signed_magnitude(*converted[:3])
        lon_dd = _signed_magnitude(*converted[3:])

    if problems:
        raise ParseError.from_failures("DMS coordinate", problems)

    result = data.with_columns(lat_dd.alias(lat_out), lon_dd.alias(lon_out))
    report(logger, verbose, "Conversion completed successfully.")
    return result
