"""
Output module for managing file paths and directory creation.

This module centralizes output directory management and path standardization
so that every file the pipeline writes ends up in a predictable place. It also
includes the writers for split CSV exports and metadata sidecar files.
"""

import datetime
import logging
import os
from typing import Any, Optional

import polars as pl

from danube_occurrence import defaults
from danube_occurrence.columns import require_columns

logger = logging.getLogger(__name__)

# Default output directory
OUTPUT_DIR = defaults.OUTPUT_DIR

# Fixed output filenames
CSV_FILENAME = "cleaned_occurrences.csv"
GEOJSON_FILENAME = "occurrences.geojson"
HTML_FILENAME = "occurrences.html"


def ensure_output_dir() -> None:
    """
    Create the output directory if it doesn't exist.
    """
    os.makedirs(OUTPUT_DIR, exist_ok=True)


def get_output_path(filename: str) -> str:
    """
    Gets the full path for an output file in the output directory.

    Args:
        filename: The filename to place in the output directory

    Returns:
        The full path to the file in the output directory
    """
    ensure_output_dir()
    return os.path.join(OUTPUT_DIR, filename)


def normalize_path(path: str) -> str:
    """
    Normalize a path so that a bare filename lands in the output directory.

    Args:
        path: The path to normalize

    Returns:
        The normalized path
    """
    if not path.startswith(f"{OUTPUT_DIR}/") and not os.path.dirname(path):
        return os.path.join(OUTPUT_DIR, path)
    return path


def prepare_file_path(path: str) -> str:
    """
    Prepare a file path for writing by ensuring its directory exists.

    Args:
        path: The path to prepare

    Returns:
        The same path after ensuring its directory exists
    """
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    return path


def split_and_save_csv(
    df: Any,
    split_col: str,
    output_dir: str = ".",
    separator: str = ",",
) -> list[str]:
    """
    Split a table by the distinct values of a column and save each part as CSV.

    Each file is named after its value, e.g. ``<output_dir>/<value>.csv``.
    Rows with a missing value in ``split_col`` are not written.

    Args:
        df: The table to split.
        split_col: The column to split by.
        output_dir: Directory for the CSV files, created if needed.
        separator: Field separator of the CSV files.

    Returns:
        Paths of the written files, in order of first appearance of each value.
    """
    df = require_columns(df, [split_col])
    os.makedirs(output_dir, exist_ok=True)

    missing = df[split_col].null_count()
    if missing:
        logger.info(f"Skipping {missing} rows with no value in {split_col}")

    paths: list[str] = []
    parts = df.filter(pl.col(split_col).is_not_null()).partition_by(
        split_col, maintain_order=True, as_dict=True
    )
    for (value,), part in parts.items():
        path = os.path.join(output_dir, f"{value}.csv")
        part.write_csv(path, separator=separator)
        paths.append(path)

    logger.info(f"CSV files have been saved to {os.path.abspath(output_dir)}")
    return paths


def create_metadata_file(
    file_path: str,
    description: str,
    author: str,
    author_email: Optional[str] = None,
    creation_date: Optional[datetime.date] = None,
    notes: Optional[str] = None,
    source: Optional[str] = None,
    metadata_folder: Optional[str] = None,
) -> str:
    """
    Write a ``<stem>_metadata.txt`` file describing an existing file.

    Args:
        file_path: The file to describe.
        description: A brief description of the file.
        author: The name of the author or creator of the file.
        author_email: Contact email of the author.
        creation_date: Defaults to today.
        notes: Any additional notes about the file.
        source: A URL or reference for the source of the data.
        metadata_folder: Where to write the metadata file; defaults to the
            folder of ``file_path``.

    Returns:
        The path of the created metadata file.

    Raises:
        FileNotFoundError: If ``file_path`` does not exist.
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"The specified file does not exist: {file_path}")

    name = os.path.basename(file_path)
    stem = os.path.splitext(name)[0]
    folder = metadata_folder if metadata_folder is not None else os.path.dirname(file_path)
    metadata_path = prepare_file_path(os.path.join(folder, f"{stem}_metadata.txt"))

    lines = [
        f"File Name: {name}",
        f"Description: {description}",
        f"Author: {author}",
        f"Author's email: {author_email or 'None'}",
        f"Creation Date: {(creation_date or datetime.date.today()).isoformat()}",
        f"Source: {source or 'None'}",
        f"Notes: {notes or 'None'}",
    ]
    with open(metadata_path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines) + "\n")

    logger.info(f"Metadata file for {name} created at {metadata_path}")
    return metadata_path
