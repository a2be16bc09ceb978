"""Record dates resolved to calendar components.

Whatever representation the source table uses (a year, a day/month/year
triple, or a formatted date string), dates are resolved into one row per
record with ``year``, ``month``, ``day`` and ``date`` columns. Components the
representation does not carry (month and day of a year-only column) are null.
"""

import datetime
import logging

import dataframely as dy
import polars as pl

from danube_occurrence import defaults
from danube_occurrence.coercion import missing_mask, to_float
from danube_occurrence.columns import DateColumns
from danube_occurrence.errors import ParseError, ParseFailure
from danube_occurrence.types import DateRepresentation

logger = logging.getLogger(__name__)

# Years are stored as Int32; anything beyond this is not a plausible year
_MAX_ABS_YEAR = 1_000_000


class ResolvedDateSchema(dy.Schema):
    year = dy.Int32(nullable=True)
    month = dy.Int32(nullable=True)
    day = dy.Int32(nullable=True)
    date = dy.Date(nullable=True)

    @dy.rule()
    def valid_month(cls) -> pl.Expr:
        return pl.col("month").is_null() | pl.col("month").is_between(1, 12)

    @dy.rule()
    def valid_day(cls) -> pl.Expr:
        return pl.col("day").is_null() | pl.col("day").is_between(1, 31)

    @dy.rule()
    def date_matches_components(cls) -> pl.Expr:
        """A full date is only present together with its three components."""
        return pl.col("date").is_null() | (
            (pl.col("date").dt.year() == pl.col("year"))
            & (pl.col("date").dt.month() == pl.col("month"))
            & (pl.col("date").dt.day() == pl.col("day"))
        )

    @classmethod
    def build(
        cls,
        df: pl.DataFrame,
        date_columns: DateColumns,
        date_format: str = defaults.DATE_STRING_FORMAT,
    ) -> dy.DataFrame["ResolvedDateSchema"]:
        """Resolve the date of every row of ``df``.

        Args:
            df: Table holding the date columns.
            date_columns: Which columns hold the date, in which representation.
            date_format: ``strptime`` format of a date string column.

        Returns:
            A validated frame with one row per row of ``df``, in the same order.

        Raises:
            ConfigurationError: If ``date_columns`` is ambiguous or incomplete,
                or a column is absent.
            ParseError: If any present value cannot be parsed. The whole call
                fails; every offending row is listed.
        """
        df = date_columns.resolve(df)
        representation = date_columns.representation
        problems: list[ParseFailure] = []

        match representation:
            case DateRepresentation.YEAR:
                years = _whole_numbers(df[str(date_columns.year)], "not a year", problems)
                resolved = pl.DataFrame({"year": years}).with_columns(
                    month=pl.lit(None, dtype=pl.Int32),
                    day=pl.lit(None, dtype=pl.Int32),
                    date=pl.lit(None, dtype=pl.Date),
                )
            case DateRepresentation.DAY_MONTH_YEAR:
                days = _whole_numbers(df[str(date_columns.day)], "not a day", problems)
                months = _whole_numbers(df[str(date_columns.month)], "not a month", problems)
                years = _whole_numbers(df[str(date_columns.year)], "not a year", problems)
                resolved = _from_components(
                    days, months, years, str(date_columns.day), problems
                )
            case DateRepresentation.DATE_STRING:
                resolved = _from_strings(
                    df[str(date_columns.date)], date_format, problems
                )

        if problems:
            raise ParseError.from_failures("date", problems)

        logger.debug(f"Resolved {resolved.height} dates from {representation.value} columns")
        return cls.validate(resolved.select("year", "month", "day", "date"), cast=True)


def _whole_numbers(
    original: pl.Series, reason: str, problems: list[ParseFailure]
) -> pl.Series:
    numeric = to_float(original)
    present = ~missing_mask(numeric)
    whole = (
        present
        & numeric.is_finite()
        & (numeric.round(0) == numeric)
        & (numeric.abs() < _MAX_ABS_YEAR)
    ).fill_null(False)
    bad = ~missing_mask(original) & ~whole
    for row in bad.arg_true().to_list():
        problems.append(
            ParseFailure(row=row, column=original.name, value=original[row], reason=reason)
        )
    return (
        pl.DataFrame({"value": numeric, "whole": whole})
        .select(pl.when(pl.col("whole")).then(pl.col("value")).cast(pl.Int32))
        .to_series()
        .alias(original.name)
    )


def _from_components(
    days: pl.Series,
    months: pl.Series,
    years: pl.Series,
    day_column: str,
    problems: list[ParseFailure],
) -> pl.DataFrame:
    rows: list[tuple] = []
    for row, (d, m, y) in enumerate(zip(days.to_list(), months.to_list(), years.to_list())):
        if d is None or m is None or y is None:
            rows.append((None, None, None, None))
            continue
        try:
            date = datetime.date(y, m, d)
        except ValueError as e:
            problems.append(
                ParseFailure(
                    row=row, column=day_column, value=f"{d}/{m}/{y}", reason=str(e)
                )
            )
            rows.append((None, None, None, None))
            continue
        rows.append((y, m, d, date))
    return pl.DataFrame(
        rows,
        schema={"year": pl.Int32, "month": pl.Int32, "day": pl.Int32, "date": pl.Date},
        orient="row",
    )


def _from_strings(
    original: pl.Series, date_format: str, problems: list[ParseFailure]
) -> pl.DataFrame:
    if original.dtype == pl.Datetime:
        dates = original.dt.date().to_list()
    elif original.dtype == pl.Date:
        dates = original.to_list()
    else:
        dates = []
        for row, raw in enumerate(original.cast(pl.String, strict=False).to_list()):
            if raw is None:
                dates.append(None)
                continue
            try:
                dates.append(datetime.datetime.strptime(raw.strip(), date_format).date())
            except ValueError:
                problems.append(
                    ParseFailure(
                        row=row,
                        column=original.name,
                        value=raw,
                        reason=f"does not match format {date_format}",
                    )
                )
                dates.append(None)

    resolved = pl.DataFrame({"date": pl.Series(dates, dtype=pl.Date)})
    return resolved.with_columns(
        year=pl.col("date").dt.year().cast(pl.Int32),
        month=pl.col("date").dt.month().cast(pl.Int32),
        day=pl.col("date").dt.day().cast(pl.Int32),
    )
