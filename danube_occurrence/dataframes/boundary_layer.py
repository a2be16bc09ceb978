import logging
from typing import Iterable

import dataframely as dy
import geojson
import polars as pl
import polars_st as pl_st
import shapely
from shapely.geometry import shape

from danube_occurrence.errors import TypeMismatchError

logger = logging.getLogger(__name__)


class BoundaryLayerSchema(dy.Schema):
    """Polygons of a reference layer, e.g. sub-catchments or administrative units."""

    unit_id = dy.String(primary_key=True)
    geometry = dy.Any()  # Binary

    @classmethod
    def build(
        cls,
        unit_ids: Iterable[str],
        geometries: Iterable[shapely.Geometry],
    ) -> dy.DataFrame["BoundaryLayerSchema"]:
        polygons = list(geometries)
        for polygon in polygons:
            if not isinstance(polygon, (shapely.Polygon, shapely.MultiPolygon)):
                raise TypeMismatchError(
                    f"Layer geometries must be polygons, got {polygon.geom_type}."
                )

        df = pl.DataFrame({"unit_id": pl.Series(list(unit_ids), dtype=pl.String)})
        df = df.with_columns(geometry=pl_st.from_shapely(pl.Series(polygons)))
        return cls.validate(df, cast=True)

    @classmethod
    def from_geojson(
        cls, path: str, id_property: str
    ) -> dy.DataFrame["BoundaryLayerSchema"]:
        """Load a layer from a GeoJSON file, one unit per feature.

        ``id_property`` names the feature property holding the unit identifier.
        """
        with open(path, "r") as f:
            data = geojson.load(f)

        unit_ids: list[str] = []
        polygons: list[shapely.Geometry] = []
        for feature in data.get("features", []):
            unit_ids.append(str(feature["properties"][id_property]))
            polygons.append(shape(feature["geometry"]))

        logger.info(f"Loaded {len(polygons)} layer polygons from {path}")
        return cls.build(unit_ids, polygons)
