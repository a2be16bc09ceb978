"""Georeferenced occurrence records.

Validates the coordinates of an occurrence table independently of how its
columns are named: rows are projected to a row index plus the two coordinate
columns, validated against this schema, and the surviving row indices select
the rows of the original table.
"""

import logging

import dataframely as dy
import polars as pl

from danube_occurrence import defaults
from danube_occurrence.columns import require_columns

logger = logging.getLogger(__name__)


class OccurrenceSchema(dy.Schema):
    row_index = dy.UInt32(primary_key=True)
    decimalLatitude = dy.Float64(nullable=False)
    decimalLongitude = dy.Float64(nullable=False)

    @dy.rule()
    def valid_latitude(cls) -> pl.Expr:
        """Validate that latitude is within valid range [-90, 90]."""
        return (pl.col("decimalLatitude") >= -90) & (pl.col("decimalLatitude") <= 90)

    @dy.rule()
    def valid_longitude(cls) -> pl.Expr:
        """Validate that longitude is within valid range [-180, 180]."""
        return (pl.col("decimalLongitude") >= -180) & (
            pl.col("decimalLongitude") <= 180
        )

    @classmethod
    def keep_valid(
        cls,
        df: pl.DataFrame,
        lat_col: str = defaults.LATITUDE_COLUMN,
        lon_col: str = defaults.LONGITUDE_COLUMN,
    ) -> pl.DataFrame:
        """Rows of ``df`` whose coordinates are present, numeric and in range.

        Row order is preserved.
        """
        df = require_columns(df, [lat_col, lon_col])
        projected = df.with_row_index("row_index").select(
            "row_index",
            pl.col(lat_col).alias("decimalLatitude"),
            pl.col(lon_col).alias("decimalLongitude"),
        )

        valid, failure = cls.filter(projected, cast=True)
        counts = failure.counts()
        if counts:
            logger.info(f"Coordinate rule failures: {counts}")

        return (
            df.with_row_index("row_index")
            .join(valid.select("row_index"), on="row_index", how="semi")
            .sort("row_index")
            .drop("row_index")
        )
