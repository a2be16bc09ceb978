"""Centralized default configuration values for the occurrence-cleaning pipeline.

This module provides a single source of truth for all default parameter values.
These defaults are used by:
- the validator functions (as keyword defaults)
- CLI argument parsing (as fallbacks when args aren't provided)
"""

from danube_occurrence.constants import WGS84_EPSG
from danube_occurrence.types import Bbox

# Data source defaults
INPUT_PATH = "occurrences.csv"
INPUT_SEPARATOR = ","
INPUT_ENCODING = "utf-8"
LOG_FILE = "run.log"

# Column defaults (Darwin Core names)
LATITUDE_COLUMN = "decimalLatitude"
LONGITUDE_COLUMN = "decimalLongitude"
SPECIES_COLUMN = "species"
SUBCATCHMENT_COLUMN = "subcatchment_id"
YEAR_COLUMN = "year"

# Coordinate reference system of point records
POINT_CRS = WGS84_EPSG

# Decimal-degree columns written by the DMS converter
DMS_LATITUDE_OUTPUT = "lat_dd"
DMS_LONGITUDE_OUTPUT = "lon_dd"
DMS_MINUTES_SUFFIX = "_min"
DMS_SECONDS_SUFFIX = "_sec"

# Temporal defaults
YEAR_RANGE: tuple[int, int] = (1800, 2024)
DATE_STRING_FORMAT = "%d/%m/%Y"

# Danube River Basin bounding box
DANUBE_BBOX = Bbox.from_coordinates(
    min_lat=42.08333, max_lat=50.245, min_lng=8.1525, max_lng=29.73583
)

# Duplicate detection defaults
DELETE_DUPLICATES = True
DUPLICATE_COORDINATE_PRECISION: int | None = None

# GBIF cleaning thresholds, applied when the pipeline runs with --gbif
GBIF_COORDINATE_PRECISION = 0.01
GBIF_COORDINATE_UNCERTAINTY_IN_METERS = 1000.0

# Output defaults
OUTPUT_DIR = "output"
