"""Helpers for coercing loosely typed columns to numbers."""

import polars as pl

from danube_occurrence.errors import ParseFailure


def missing_mask(series: pl.Series) -> pl.Series:
    """True where a value is absent: null, or NaN in a float column."""
    mask = series.is_null()
    if series.dtype.is_float():
        mask = mask | series.is_nan().fill_null(False)
    return mask


def to_float(series: pl.Series) -> pl.Series:
    """Cast to Float64, turning values that cannot be read as numbers into null."""
    if series.dtype == pl.String:
        series = series.str.strip_chars()
    return series.cast(pl.Float64, strict=False)


def failed_mask(original: pl.Series, coerced: pl.Series) -> pl.Series:
    """True where a value was present before coercion and is missing after it."""
    return ~missing_mask(original) & missing_mask(coerced)


def failures(
    original: pl.Series, coerced: pl.Series, reason: str
) -> list[ParseFailure]:
    rows = failed_mask(original, coerced).arg_true().to_list()
    return [
        ParseFailure(row=row, column=original.name, value=original[row], reason=reason)
        for row in rows
    ]


def indices(mask: pl.Series) -> list[int]:
    """0-based row positions where ``mask`` is True (nulls count as False)."""
    return mask.fill_null(False).arg_true().to_list()
