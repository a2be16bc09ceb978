import logging
from typing import Optional

from danube_occurrence import cli, defaults, output
from danube_occurrence.clean import clean_gbif
from danube_occurrence.coordinates import check_coordinates, drop_invalid_coordinates
from danube_occurrence.dataframes.boundary_layer import BoundaryLayerSchema
from danube_occurrence.darwin_core_utils import read_occurrence_file
from danube_occurrence.dates import check_year_column
from danube_occurrence.dms import dms_to_decimal
from danube_occurrence.duplicates import check_duplicates
from danube_occurrence.geojson import build_points_feature_collection, write_geojson
from danube_occurrence.logging import log_action
from danube_occurrence.render import visualize_points, write_map
from danube_occurrence.spatial import (
    filter_by_bounding_box,
    get_spatial_subset,
    load_boundary,
    spatial_join,
)
from danube_occurrence.types import Bbox

logger = logging.getLogger(__name__)


def run(
    input_file: str,
    log_file: str,
    separator: str = defaults.INPUT_SEPARATOR,
    encoding: str = defaults.INPUT_ENCODING,
    lat_col: str = defaults.LATITUDE_COLUMN,
    lon_col: str = defaults.LONGITUDE_COLUMN,
    species_col: str = defaults.SPECIES_COLUMN,
    subcatchment_col: str = defaults.SUBCATCHMENT_COLUMN,
    year_col: str = defaults.YEAR_COLUMN,
    year_range: tuple[int, int] = defaults.YEAR_RANGE,
    dms: bool = False,
    gbif: bool = False,
    coordinate_precision: Optional[float] = defaults.GBIF_COORDINATE_PRECISION,
    coordinate_uncertainty_in_meters: Optional[float] = (
        defaults.GBIF_COORDINATE_UNCERTAINTY_IN_METERS
    ),
    bbox: Optional[Bbox] = None,
    boundary_path: Optional[str] = None,
    layer_path: Optional[str] = None,
    layer_id_property: str = "id",
    delete_duplicates: bool = defaults.DELETE_DUPLICATES,
    duplicate_precision: Optional[int] = defaults.DUPLICATE_COORDINATE_PRECISION,
) -> None:
    # Normalize log file path to ensure it's in the output directory
    log_file = output.normalize_path(log_file)

    # Ensure output directory exists
    output.ensure_output_dir()

    logging.basicConfig(filename=log_file, encoding="utf-8", level=logging.INFO)

    df = log_action(
        "Reading occurrences",
        lambda: read_occurrence_file(input_file, separator=separator, encoding=encoding),
    )

    if dms:
        df = log_action(
            "Converting DMS coordinates",
            lambda: dms_to_decimal(df, lat_col, lon_col, verbose=True),
        )
        lat_col, lon_col = defaults.DMS_LATITUDE_OUTPUT, defaults.DMS_LONGITUDE_OUTPUT

    coordinate_report = log_action(
        "Validating coordinates",
        lambda: check_coordinates(df, lat_col, lon_col, verbose=True),
    )
    df = drop_invalid_coordinates(coordinate_report)

    if gbif:
        df = log_action(
            "Cleaning GBIF records",
            lambda: clean_gbif(
                df,
                coordinate_precision=coordinate_precision,
                coordinate_uncertainty_in_meters=coordinate_uncertainty_in_meters,
                decimal_longitude=lon_col,
                decimal_latitude=lat_col,
                year=year_col,
                species=species_col,
            ),
        ).df

    year_check = log_action(
        "Validating years",
        lambda: check_year_column(df, year_col, year_range=year_range, verbose=True),
    )
    df = year_check.updated_df.drop("transformed_flag")

    if bbox is not None:
        df = log_action(
            "Filtering to bounding box",
            lambda: filter_by_bounding_box(df, bbox, lat_col, lon_col),
        )

    if boundary_path is not None:
        boundary = load_boundary(boundary_path)
        df = log_action(
            "Subsetting to boundary",
            lambda: get_spatial_subset(boundary, df, lat_col, lon_col, verbose=True),
        )

    if layer_path is not None:
        layer = BoundaryLayerSchema.from_geojson(layer_path, layer_id_property)
        df = log_action(
            "Joining spatial units",
            lambda: spatial_join(
                df.drop(subcatchment_col, strict=False),
                layer.rename({"unit_id": subcatchment_col}),
                lat_col=lat_col,
                lon_col=lon_col,
            ),
        )

    if subcatchment_col in df.columns and species_col in df.columns:
        df = log_action(
            "Checking duplicates",
            lambda: check_duplicates(
                df,
                lat_col,
                lon_col,
                subcatchment_col,
                species_col,
                year_col=year_col,
                delete_duplicates=delete_duplicates,
                coordinate_precision=duplicate_precision,
                verbose=True,
            ),
        )
    else:
        logger.warning(
            f"Skipping duplicate check: columns {subcatchment_col} and {species_col} are required"
        )

    csv_path = output.get_output_path(output.CSV_FILENAME)
    df.write_csv(csv_path)
    logger.info(f"Cleaned records written to {csv_path}")

    write_geojson(
        build_points_feature_collection(df, lat_col, lon_col),
        output.get_output_path(output.GEOJSON_FILENAME),
    )
    write_map(
        visualize_points(df, lat_col=lat_col, lon_col=lon_col, show_extra_columns=True),
        output.get_output_path(output.HTML_FILENAME),
    )
    logger.info(f"Outputs written to {output.OUTPUT_DIR}")


def main() -> None:
    args = cli.parse_args()

    run(
        input_file=args.input_file,
        log_file=args.log_file,
        separator=args.separator,
        encoding=args.encoding,
        lat_col=args.lat_col,
        lon_col=args.lon_col,
        species_col=args.species_col,
        subcatchment_col=args.subcatchment_col,
        year_col=args.year_col,
        year_range=(args.min_year, args.max_year),
        dms=args.dms,
        gbif=args.gbif,
        coordinate_precision=args.coordinate_precision,
        coordinate_uncertainty_in_meters=args.coordinate_uncertainty,
        bbox=defaults.DANUBE_BBOX if args.danube_bbox else None,
        boundary_path=args.boundary,
        layer_path=args.layer,
        layer_id_property=args.layer_id_property,
        delete_duplicates=not args.flag_duplicates,
        duplicate_precision=args.duplicate_precision,
    )


if __name__ == "__main__":
    main()
