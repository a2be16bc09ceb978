import unittest

import polars as pl

from danube_occurrence.duplicates import check_duplicates, flag_duplicates
from danube_occurrence.errors import ConfigurationError, ParseError
from test.fixtures.occurrences import mock_duplicate_records_df

COLUMNS = dict(
    lat_col="latitude",
    lon_col="longitude",
    subcatchment_col="subcatchment_id",
    species_col="species",
)


class TestCheckDuplicates(unittest.TestCase):
    def test_delete_mode_keeps_first(self):
        df = mock_duplicate_records_df()

        result = check_duplicates(df, year_col="year", **COLUMNS)

        self.assertEqual(result.height, 2)
        self.assertEqual(result["species"].to_list(), ["A", "B"])
        self.assertEqual(result.columns, df.columns)

    def test_flag_mode_keeps_everything(self):
        df = mock_duplicate_records_df()

        result = check_duplicates(
            df, year_col="year", delete_duplicates=False, **COLUMNS
        )

        self.assertEqual(result.height, 3)
        self.assertEqual(result["duplicate_flag"].to_list(), [True, True, False])

    def test_verbose_reports_flag_count(self):
        with self.assertLogs("danube_occurrence.duplicates", "INFO") as logs:
            check_duplicates(
                mock_duplicate_records_df(),
                year_col="year",
                delete_duplicates=False,
                verbose=True,
                **COLUMNS,
            )

        self.assertIn(
            "Number of duplicate records flagged: 2", "\n".join(logs.output)
        )

    def test_quiet_by_default(self):
        with self.assertNoLogs("danube_occurrence.duplicates", "INFO"):
            check_duplicates(mock_duplicate_records_df(), year_col="year", **COLUMNS)

    def test_flags_are_symmetric(self):
        df = pl.DataFrame(
            {
                "latitude": [1.0, 2.0, 1.0, 1.0],
                "longitude": [1.0, 2.0, 1.0, 1.0],
                "subcatchment_id": [7, 8, 7, 7],
                "year": [2000, 2000, 2000, 2000],
                "species": ["X", "Y", "X", "X"],
            }
        )

        flags = flag_duplicates(df, year_col="year", **COLUMNS)

        self.assertEqual(flags.name, "duplicate_flag")
        self.assertEqual(flags.to_list(), [True, False, True, True])

    def test_delete_is_idempotent(self):
        df = mock_duplicate_records_df()

        once = check_duplicates(df, year_col="year", **COLUMNS)
        twice = check_duplicates(once, year_col="year", **COLUMNS)

        self.assertTrue(once.equals(twice))

    def test_existing_flag_is_overwritten(self):
        df = mock_duplicate_records_df().with_columns(
            duplicate_flag=pl.lit(False)
        )

        result = check_duplicates(
            df, year_col="year", delete_duplicates=False, **COLUMNS
        )

        self.assertEqual(result.columns, df.columns)
        self.assertEqual(result["duplicate_flag"].to_list(), [True, True, False])

    def test_missing_key_field_never_matches(self):
        df = pl.DataFrame(
            {
                "latitude": [1.0, 1.0, float("nan"), float("nan")],
                "longitude": [1.0, 1.0, 1.0, 1.0],
                "subcatchment_id": [None, None, 7, 7],
                "year": [2000, 2000, 2000, 2000],
                "species": ["X", "X", "X", "X"],
            }
        )

        flags = flag_duplicates(df, year_col="year", **COLUMNS)
        deduplicated = check_duplicates(df, year_col="year", **COLUMNS)

        self.assertEqual(flags.to_list(), [False, False, False, False])
        self.assertEqual(deduplicated.height, 4)

    def test_day_month_year_key(self):
        df = pl.DataFrame(
            {
                "latitude": [1.0, 1.0, 1.0],
                "longitude": [1.0, 1.0, 1.0],
                "subcatchment_id": [7, 7, 7],
                "day": [1, 2, 1],
                "month": [5, 5, 5],
                "year": [2000, 2000, 2000],
                "species": ["X", "X", "X"],
            }
        )

        flags = flag_duplicates(
            df, year_col="year", month_col="month", day_col="day", **COLUMNS
        )

        self.assertEqual(flags.to_list(), [True, False, True])

    def test_date_string_key(self):
        df = pl.DataFrame(
            {
                "latitude": [1.0, 1.0],
                "longitude": [1.0, 1.0],
                "subcatchment_id": [7, 7],
                "eventDate": ["01/05/2000", " 01/05/2000"],
                "species": ["X", "X"],
            }
        )

        flags = flag_duplicates(df, date_col="eventDate", **COLUMNS)

        self.assertEqual(flags.to_list(), [True, True])

    def test_resolved_date_column(self):
        df = mock_duplicate_records_df()

        result = check_duplicates(df, resolved_date_col="year", **COLUMNS)

        self.assertEqual(result.height, 2)

    def test_resolved_date_column_is_exclusive(self):
        with self.assertRaises(ConfigurationError):
            check_duplicates(
                mock_duplicate_records_df(),
                year_col="year",
                resolved_date_col="year",
                **COLUMNS,
            )

    def test_coordinate_precision(self):
        df = pl.DataFrame(
            {
                "latitude": [45.12341, 45.12344],
                "longitude": [16.0, 16.0],
                "subcatchment_id": [7, 7],
                "year": [2000, 2000],
                "species": ["X", "X"],
            }
        )

        exact = flag_duplicates(df, year_col="year", **COLUMNS)
        rounded = flag_duplicates(df, year_col="year", coordinate_precision=3, **COLUMNS)

        self.assertEqual(exact.to_list(), [False, False])
        self.assertEqual(rounded.to_list(), [True, True])

    def test_no_date_configuration(self):
        with self.assertRaises(ConfigurationError):
            check_duplicates(mock_duplicate_records_df(), **COLUMNS)

    def test_missing_column(self):
        with self.assertRaises(ConfigurationError):
            check_duplicates(
                mock_duplicate_records_df().drop("species"), year_col="year", **COLUMNS
            )

    def test_unparseable_year(self):
        df = mock_duplicate_records_df().with_columns(pl.col("year").cast(pl.String))
        df = df.with_columns(
            pl.when(pl.int_range(pl.len()) == 0)
            .then(pl.lit("last year"))
            .otherwise(pl.col("year"))
            .alias("year")
        )
        with self.assertRaises(ParseError):
            check_duplicates(df, year_col="year", **COLUMNS)


if __name__ == "__main__":
    unittest.main()
