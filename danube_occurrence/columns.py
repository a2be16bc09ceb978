"""Column bindings: resolving caller-supplied column names against a table."""

import logging
from dataclasses import dataclass, fields
from typing import Any, Iterable, Optional

import polars as pl

from danube_occurrence.constants import DWC_TERMS
from danube_occurrence.errors import ConfigurationError
from danube_occurrence.logging import report
from danube_occurrence.types import DateRepresentation

logger = logging.getLogger(__name__)


def require_dataframe(df: Any, name: str = "df") -> pl.DataFrame:
    if not isinstance(df, pl.DataFrame):
        raise ConfigurationError(
            f"The '{name}' parameter must be a polars DataFrame, got {type(df).__name__}."
        )
    return df


def require_columns(df: Any, columns: Iterable[str], name: str = "df") -> pl.DataFrame:
    """Check that ``df`` is a DataFrame holding every column in ``columns``.

    Raises:
        ConfigurationError: listing all absent columns at once.
    """
    df = require_dataframe(df, name)
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ConfigurationError(
            f"The data frame must contain the following columns: {', '.join(missing)}"
        )
    return df


@dataclass(frozen=True)
class ColumnBindings:
    """Names of the columns that play a semantic role in an occurrence table."""

    latitude: str
    longitude: str
    species: Optional[str] = None
    spatial_unit: Optional[str] = None

    def bound(self) -> dict[str, str]:
        """Roles that have a column assigned, mapped to the column name."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def resolve(self, df: Any) -> pl.DataFrame:
        return require_columns(df, self.bound().values())


@dataclass(frozen=True)
class DateColumns:
    """Columns holding the date of each record, in exactly one representation.

    - ``year`` alone: a single year column;
    - ``day``, ``month`` and ``year``: three component columns;
    - ``date`` alone: a formatted date string column (``dd/mm/yyyy`` by default).
    """

    year: Optional[str] = None
    month: Optional[str] = None
    day: Optional[str] = None
    date: Optional[str] = None

    @property
    def representation(self) -> DateRepresentation:
        """The representation these columns describe.

        Raises:
            ConfigurationError: If no representation, or more than one, is given,
                or the day/month/year triple is incomplete.
        """
        if self.date is not None:
            if any(c is not None for c in (self.year, self.month, self.day)):
                raise ConfigurationError(
                    "A date column cannot be combined with year, month or day columns."
                )
            return DateRepresentation.DATE_STRING
        if self.day is not None or self.month is not None:
            if self.day is None or self.month is None or self.year is None:
                raise ConfigurationError(
                    "Day, month and year columns must all be given together."
                )
            return DateRepresentation.DAY_MONTH_YEAR
        if self.year is not None:
            return DateRepresentation.YEAR
        raise ConfigurationError(
            "You must provide either a year column, or day, month, and year columns, or a date column."
        )

    @property
    def columns(self) -> list[str]:
        match self.representation:
            case DateRepresentation.DATE_STRING:
                return [str(self.date)]
            case DateRepresentation.DAY_MONTH_YEAR:
                return [str(self.day), str(self.month), str(self.year)]
            case DateRepresentation.YEAR:
                return [str(self.year)]

    def resolve(self, df: Any) -> pl.DataFrame:
        return require_columns(df, self.columns)


@dataclass(frozen=True)
class ColumnNameReport:
    missing_columns: list[str]
    extra_columns: list[str]


def check_column_names(
    df: Any,
    standard_names: list[str] = DWC_TERMS,
    verbose: bool = False,
) -> ColumnNameReport:
    """Compare the columns of ``df`` with a list of standard names.

    Args:
        df: The table to check.
        standard_names: Expected column names, the Darwin Core terms by default.
        verbose: Log the missing and extra columns at INFO level.

    Returns:
        The names in ``standard_names`` absent from ``df`` and the columns of
        ``df`` not listed in ``standard_names``, both in their original order.
    """
    df = require_dataframe(df)
    if isinstance(standard_names, str) or not all(
        isinstance(n, str) for n in standard_names
    ):
        raise ConfigurationError(
            "The 'standard_names' parameter must be a list of strings."
        )

    present = set(df.columns)
    standard = set(standard_names)
    result = ColumnNameReport(
        missing_columns=[n for n in standard_names if n not in present],
        extra_columns=[c for c in df.columns if c not in standard],
    )

    if result.missing_columns:
        report(logger, verbose, f"Missing columns in the data frame: {result.missing_columns}")
    else:
        report(logger, verbose, "No missing columns.")
    if result.extra_columns:
        report(logger, verbose, f"Extra columns in the data frame: {result.extra_columns}")
    else:
        report(logger, verbose, "No extra columns.")

    return result
