import unittest

import polars as pl

from danube_occurrence.coordinates import check_coordinates, drop_invalid_coordinates
from danube_occurrence.errors import ConfigurationError


class TestCheckCoordinates(unittest.TestCase):
    def setUp(self):
        self.df = pl.DataFrame(
            {
                "lat": ["45.5", "abc", None, "95", "-90"],
                "lon": ["16.4", "20.1", "21.0", "181", "180"],
                "species": ["A", "B", "C", "D", "E"],
            }
        )

    def test_reports_indices(self):
        result = check_coordinates(self.df, "lat", "lon")

        self.assertEqual(result.non_numeric_latitudes, [1])
        self.assertEqual(result.non_numeric_longitudes, [])
        self.assertEqual(result.invalid_latitudes, [3])
        self.assertEqual(result.invalid_longitudes, [3])

    def test_verbose_summary(self):
        with self.assertLogs("danube_occurrence.coordinates", "INFO") as logs:
            check_coordinates(self.df, "lat", "lon", verbose=True)

        output = "\n".join(logs.output)
        self.assertIn("Non-numeric latitude values found at rows: 1", output)
        self.assertIn("All longitude values are numeric.", output)
        self.assertIn("Invalid latitude values (out of -90 to 90 range) found at rows: 3", output)
        self.assertIn("Values converted to numeric: 8", output)

    def test_converts_to_float_preserving_columns(self):
        result = check_coordinates(self.df, "lat", "lon")

        self.assertEqual(result.df.columns, self.df.columns)
        self.assertEqual(result.df.height, self.df.height)
        self.assertEqual(result.df["lat"].dtype, pl.Float64)
        self.assertEqual(result.df["lon"].dtype, pl.Float64)
        # 3 latitudes and 5 longitudes were read as numbers
        self.assertEqual(result.values_converted, 8)

    def test_without_conversion_returns_input(self):
        result = check_coordinates(self.df, "lat", "lon", convert_to_numeric=False)

        self.assertIs(result.df, self.df)
        self.assertEqual(result.values_converted, 0)
        self.assertEqual(result.invalid_latitudes, [3])

    def test_numeric_input_counts_no_conversions(self):
        df = pl.DataFrame({"lat": [10.0, float("nan")], "lon": [20.0, 30.0]})
        result = check_coordinates(df, "lat", "lon")

        self.assertEqual(result.values_converted, 0)
        self.assertEqual(result.non_numeric_latitudes, [])
        self.assertEqual(result.invalid_latitudes, [])

    def test_bounds_are_inclusive(self):
        df = pl.DataFrame({"lat": [-90.0, 90.0], "lon": [-180.0, 180.0]})
        result = check_coordinates(df, "lat", "lon")

        self.assertEqual(result.invalid_latitudes, [])
        self.assertEqual(result.invalid_longitudes, [])

    def test_missing_column(self):
        with self.assertRaises(ConfigurationError):
            check_coordinates(self.df, "latitude", "lon")

    def test_not_a_dataframe(self):
        with self.assertRaises(ConfigurationError):
            check_coordinates({"lat": [1.0], "lon": [2.0]}, "lat", "lon")

    def test_drop_invalid_coordinates(self):
        result = check_coordinates(self.df, "lat", "lon")
        cleaned = drop_invalid_coordinates(result)

        self.assertEqual(cleaned["species"].to_list(), ["A", "C", "E"])


if __name__ == "__main__":
    unittest.main()
