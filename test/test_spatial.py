import json
import os
import tempfile
import unittest

import polars as pl
import shapely
from pyproj import Transformer
from shapely.ops import transform

from danube_occurrence.dataframes.boundary_layer import BoundaryLayerSchema
from danube_occurrence.errors import ConfigurationError, TypeMismatchError
from danube_occurrence.spatial import (
    boundary_to_wkt,
    filter_by_bounding_box,
    get_spatial_subset,
    load_boundary,
    reproject_boundary,
    spatial_join,
)
from danube_occurrence.types import Bbox, Boundary


def unit_square() -> Boundary:
    return Boundary(
        geometry=shapely.Polygon([(-10, -10), (10, -10), (10, 10), (-10, 10)]),
        crs=4326,
    )


class TestGetSpatialSubset(unittest.TestCase):
    def setUp(self):
        self.points = pl.DataFrame(
            {
                "lat": [0.0, -15.0, 5.0, None, 9.9],
                "lon": [0.0, 15.0, -5.0, 1.0, 9.9],
                "id": ["inside", "outside", "inside2", "missing", "corner"],
            }
        )

    def test_unit_square(self):
        result = get_spatial_subset(unit_square(), self.points, "lat", "lon")

        self.assertEqual(result["id"].to_list(), ["inside", "inside2", "corner"])
        self.assertEqual(result.columns, self.points.columns)

    def test_verbose_reports_retained_count(self):
        with self.assertLogs("danube_occurrence.spatial", "INFO") as logs:
            get_spatial_subset(unit_square(), self.points, "lat", "lon", verbose=True)

        self.assertIn(
            "3 out of 5 points are within the polygon.", "\n".join(logs.output)
        )

    def test_quiet_by_default(self):
        with self.assertNoLogs("danube_occurrence.spatial", "INFO"):
            get_spatial_subset(unit_square(), self.points, "lat", "lon")

    def test_point_on_boundary_is_not_within(self):
        df = pl.DataFrame({"lat": [10.0, 0.0], "lon": [0.0, -10.0]})

        result = get_spatial_subset(unit_square(), df, "lat", "lon")

        self.assertEqual(result.height, 0)

    def test_any_part_of_multipolygon(self):
        boundary = Boundary(
            geometry=shapely.MultiPolygon(
                [
                    shapely.Polygon([(0, 0), (1, 0), (1, 1), (0, 1)]),
                    shapely.Polygon([(10, 10), (11, 10), (11, 11), (10, 11)]),
                ]
            )
        )
        df = pl.DataFrame({"lat": [0.5, 10.5, 5.0], "lon": [0.5, 10.5, 5.0]})

        result = get_spatial_subset(boundary, df, "lat", "lon")

        self.assertEqual(result["lat"].to_list(), [0.5, 10.5])

    def test_projected_boundary_matches_native(self):
        to_mercator = Transformer.from_crs(4326, 3857, always_xy=True)
        projected = Boundary(
            geometry=transform(to_mercator.transform, unit_square().geometry),
            crs="EPSG:3857",
        )

        native = get_spatial_subset(unit_square(), self.points, "lat", "lon")
        reprojected = get_spatial_subset(projected, self.points, "lat", "lon")

        self.assertTrue(native.equals(reprojected))

    def test_points_in_projected_crs(self):
        to_mercator = Transformer.from_crs(4326, 3857, always_xy=True)
        x, y = to_mercator.transform(5.0, 5.0)
        df = pl.DataFrame({"northing": [y, y * 3], "easting": [x, x * 3]})

        result = get_spatial_subset(
            unit_square(), df, "northing", "easting", crs="EPSG:3857"
        )

        self.assertEqual(result.height, 1)

    def test_rejects_non_polygon_boundary(self):
        for boundary in [
            shapely.Polygon([(0, 0), (1, 0), (1, 1)]),
            Boundary(geometry=shapely.Point(0, 0)),  # type: ignore[arg-type]
            "POLYGON ((0 0, 1 0, 1 1, 0 0))",
        ]:
            with self.subTest(boundary=boundary):
                with self.assertRaises(TypeMismatchError):
                    get_spatial_subset(boundary, self.points, "lat", "lon")

    def test_missing_columns(self):
        with self.assertRaises(ConfigurationError):
            get_spatial_subset(unit_square(), self.points, "latitude", "lon")


class TestReprojectBoundary(unittest.TestCase):
    def test_same_crs_is_unchanged(self):
        boundary = unit_square()
        self.assertIs(reproject_boundary(boundary, "EPSG:4326"), boundary)

    def test_round_trip(self):
        boundary = unit_square()
        back = reproject_boundary(reproject_boundary(boundary, 3035), 4326)

        self.assertEqual(back.crs, 4326)
        self.assertTrue(back.geometry.equals_exact(boundary.geometry, tolerance=1e-6))


class TestBoundaryToWkt(unittest.TestCase):
    def test_counterclockwise(self):
        clockwise = Boundary(
            geometry=shapely.Polygon([(0, 0), (0, 1), (1, 1), (1, 0)])
        )

        wkt = boundary_to_wkt(clockwise)

        self.assertTrue(shapely.from_wkt(wkt).exterior.is_ccw)

    def test_multipolygon_is_rejected(self):
        boundary = Boundary(
            geometry=shapely.MultiPolygon(
                [shapely.Polygon([(0, 0), (1, 0), (1, 1), (0, 1)])]
            )
        )
        with self.assertRaises(TypeMismatchError):
            boundary_to_wkt(boundary)


class TestLoadBoundary(unittest.TestCase):
    def test_union_of_features(self):
        feature_collection = {
            "type": "FeatureCollection",
            "features": [
                {
                    "type": "Feature",
                    "properties": {},
                    "geometry": shapely.geometry.mapping(
                        shapely.Polygon([(0, 0), (1, 0), (1, 1), (0, 1)])
                    ),
                },
                {
                    "type": "Feature",
                    "properties": {},
                    "geometry": shapely.geometry.mapping(
                        shapely.Polygon([(1, 0), (2, 0), (2, 1), (1, 1)])
                    ),
                },
            ],
        }
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "boundary.geojson")
            with open(path, "w") as f:
                json.dump(feature_collection, f)

            boundary = load_boundary(path)

        self.assertIsInstance(boundary.geometry, shapely.Polygon)
        self.assertAlmostEqual(boundary.geometry.area, 2.0)

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            load_boundary("does-not-exist.geojson")


class TestSpatialJoin(unittest.TestCase):
    def test_attaches_unit_ids(self):
        layer = BoundaryLayerSchema.build(
            ["west", "east"],
            [
                shapely.Polygon([(0, 0), (1, 0), (1, 1), (0, 1)]),
                shapely.Polygon([(1, 0), (2, 0), (2, 1), (1, 1)]),
            ],
        )
        df = pl.DataFrame(
            {
                "decimalLatitude": [0.5, 0.5, 5.0, None],
                "decimalLongitude": [1.5, 0.5, 5.0, 0.5],
            }
        )

        result = spatial_join(df, layer)

        self.assertEqual(result.columns, ["decimalLatitude", "decimalLongitude", "unit_id"])
        self.assertEqual(result["unit_id"].to_list(), ["east", "west", None, None])

    def test_clashing_attribute(self):
        layer = BoundaryLayerSchema.build(
            ["a"], [shapely.Polygon([(0, 0), (1, 0), (1, 1), (0, 1)])]
        )
        df = pl.DataFrame(
            {"decimalLatitude": [0.5], "decimalLongitude": [0.5], "unit_id": ["x"]}
        )
        with self.assertRaises(ConfigurationError):
            spatial_join(df, layer)


class TestFilterByBoundingBox(unittest.TestCase):
    def test_filter(self):
        df = pl.DataFrame(
            {
                "decimalLatitude": [45.0, 55.0, None],
                "decimalLongitude": [20.0, 20.0, 20.0],
            }
        )
        bbox = Bbox.from_coordinates(42.08333, 50.245, 8.1525, 29.73583)

        result = filter_by_bounding_box(df, bbox)

        self.assertEqual(result["decimalLatitude"].to_list(), [45.0])


if __name__ == "__main__":
    unittest.main()
