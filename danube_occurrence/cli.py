"""Command-line argument parser for the occurrence-cleaning pipeline."""

import argparse
from typing import Any, Optional, Sequence

from danube_occurrence import defaults


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the CLI argument parser.

    Defaults come from :mod:`danube_occurrence.defaults`.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        description="Validate, subset and de-duplicate species occurrence records."
    )

    parser.add_argument(
        "--log-file",
        type=str,
        default=defaults.LOG_FILE,
        help="Path to the log file (bare names go to the output directory)",
    )
    parser.add_argument(
        "--separator",
        type=str,
        default=defaults.INPUT_SEPARATOR,
        help="Field separator of the input file",
    )
    parser.add_argument(
        "--encoding",
        type=str,
        default=defaults.INPUT_ENCODING,
        help="Text encoding of the input file",
    )

    # Column bindings
    parser.add_argument("--lat-col", type=str, default=defaults.LATITUDE_COLUMN)
    parser.add_argument("--lon-col", type=str, default=defaults.LONGITUDE_COLUMN)
    parser.add_argument("--species-col", type=str, default=defaults.SPECIES_COLUMN)
    parser.add_argument(
        "--subcatchment-col", type=str, default=defaults.SUBCATCHMENT_COLUMN
    )
    parser.add_argument("--year-col", type=str, default=defaults.YEAR_COLUMN)

    parser.add_argument(
        "--dms",
        action="store_true",
        help="Coordinates are written as degrees, minutes and seconds (e.g. 45°30'15\"N)",
    )
    parser.add_argument(
        "--min-year",
        type=int,
        default=defaults.YEAR_RANGE[0],
        help="Earliest valid year",
    )
    parser.add_argument(
        "--max-year",
        type=int,
        default=defaults.YEAR_RANGE[1],
        help="Latest valid year",
    )
    parser.add_argument(
        "--gbif",
        action="store_true",
        help="Apply the GBIF cleaning steps (needs speciesKey and datasetKey columns)",
    )
    parser.add_argument(
        "--coordinate-precision",
        type=float,
        default=defaults.GBIF_COORDINATE_PRECISION,
        help="With --gbif, drop records whose coordinatePrecision is at or below this",
    )
    parser.add_argument(
        "--coordinate-uncertainty",
        type=float,
        default=defaults.GBIF_COORDINATE_UNCERTAINTY_IN_METERS,
        help="With --gbif, drop placeholder uncertainties above this many meters",
    )
    parser.add_argument(
        "--danube-bbox",
        action="store_true",
        help="Keep only records inside the Danube River Basin bounding box",
    )
    parser.add_argument(
        "--boundary",
        type=str,
        default=None,
        help="GeoJSON file of the area to keep records from",
    )
    parser.add_argument(
        "--layer",
        type=str,
        default=None,
        help="GeoJSON file of spatial units (e.g. sub-catchments) to join onto records",
    )
    parser.add_argument(
        "--layer-id-property",
        type=str,
        default="id",
        help="Feature property holding the spatial unit identifier",
    )
    parser.add_argument(
        "--flag-duplicates",
        action="store_true",
        help="Flag duplicates in a duplicate_flag column instead of deleting them",
    )
    parser.add_argument(
        "--duplicate-precision",
        type=int,
        default=defaults.DUPLICATE_COORDINATE_PRECISION,
        help="Round coordinates to this many decimals when comparing records",
    )

    # Positional arguments
    parser.add_argument(
        "input_file",
        type=str,
        nargs="?",
        help="Path to the delimited occurrence file",
        default=defaults.INPUT_PATH,
    )

    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> Any:
    """
    Create argument parser and parse command-line arguments.

    Args:
        argv: Arguments to parse; ``sys.argv[1:]`` when None.

    Returns:
        Parsed command-line arguments
    """
    return create_argument_parser().parse_args(argv)
