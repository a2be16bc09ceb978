"""Cleaning of occurrence records downloaded from GBIF."""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import polars as pl

from danube_occurrence import defaults
from danube_occurrence.columns import require_columns
from danube_occurrence.constants import SUSPICIOUS_UNCERTAINTY_VALUES
from danube_occurrence.dataframes.occurrence import OccurrenceSchema

logger = logging.getLogger(__name__)

PRECISION_COLUMN = "coordinatePrecision"
UNCERTAINTY_COLUMN = "coordinateUncertaintyInMeters"


@dataclass
class CleaningReport:
    """The cleaned records and, per cleaning step, how many rows it removed."""

    df: pl.DataFrame
    removed_counts: dict[str, int] = field(default_factory=dict)


def _apply(
    report: CleaningReport, step: str, cleaned: pl.DataFrame, message: str
) -> None:
    removed = report.df.height - cleaned.height
    report.removed_counts[step] = removed
    report.df = cleaned
    logger.info(f"{message}: Removed {removed} records.")


def clean_gbif(
    df: Any,
    coordinate_precision: Optional[float] = None,
    coordinate_uncertainty_in_meters: Optional[float] = None,
    decimal_longitude: str = defaults.LONGITUDE_COLUMN,
    decimal_latitude: str = defaults.LATITUDE_COLUMN,
    species_key: str = "speciesKey",
    dataset_key: str = "datasetKey",
    year: str = defaults.YEAR_COLUMN,
    species: str = defaults.SPECIES_COLUMN,
    remove_duplicates: bool = False,
) -> CleaningReport:
    """Clean GBIF occurrence records.

    Steps, in order, each skipped when its parameter is None or False:

    1. drop records whose ``coordinatePrecision`` is present and not above
       ``coordinate_precision``;
    2. drop records whose ``coordinateUncertaintyInMeters`` is above
       ``coordinate_uncertainty_in_meters`` and is one of the values GBIF
       publishers commonly use as placeholders (301, 3036, 999, 9999);
    3. drop records repeating the longitude, latitude, species key and dataset
       key of an earlier record;
    4. drop records with a missing year, or a missing or empty species;
    5. drop records whose coordinates are not numeric or out of range.

    Raises:
        ConfigurationError: If a required column is absent.
    """
    required = [decimal_longitude, decimal_latitude, species_key, dataset_key, year, species]
    if coordinate_precision is not None:
        required.append(PRECISION_COLUMN)
    if coordinate_uncertainty_in_meters is not None:
        required.append(UNCERTAINTY_COLUMN)
    df = require_columns(df, required)

    before = df.height
    report = CleaningReport(df=df)

    if coordinate_precision is not None:
        _apply(
            report,
            "coordinate_precision",
            report.df.filter(
                pl.col(PRECISION_COLUMN).is_null()
                | (pl.col(PRECISION_COLUMN) > coordinate_precision)
            ),
            "Testing coordinate precision",
        )

    if coordinate_uncertainty_in_meters is not None:
        _apply(
            report,
            "coordinate_uncertainty",
            report.df.filter(
                pl.col(UNCERTAINTY_COLUMN).is_null()
                | (pl.col(UNCERTAINTY_COLUMN) <= coordinate_uncertainty_in_meters)
                | ~pl.col(UNCERTAINTY_COLUMN)
                .cast(pl.Float64)
                .is_in(SUSPICIOUS_UNCERTAINTY_VALUES)
            ),
            "Testing coordinate uncertainty",
        )

    if remove_duplicates:
        _apply(
            report,
            "duplicates",
            report.df.unique(
                subset=[decimal_longitude, decimal_latitude, species_key, dataset_key],
                keep="first",
                maintain_order=True,
            ),
            "Testing duplicates",
        )

    _apply(
        report,
        "missing_year_or_species",
        report.df.filter(
            pl.col(year).is_not_null()
            & pl.col(species).is_not_null()
            & (pl.col(species).cast(pl.String).str.strip_chars() != "")
        ),
        "Testing missing year or species",
    )

    _apply(
        report,
        "invalid_coordinates",
        OccurrenceSchema.keep_valid(
            report.df, lat_col=decimal_latitude, lon_col=decimal_longitude
        ),
        "Testing coordinate validity",
    )

    logger.info(
        f"Retained {report.df.height} out of {before} records after cleaning."
    )
    return report
