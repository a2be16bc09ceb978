"""Reading occurrence records from delimited files and Darwin Core archives."""

import codecs
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import polars as pl
from contexttimer import Timer

from danube_occurrence import defaults

logger = logging.getLogger(__name__)

DWC_TEXT_NAMESPACE = "http://rs.tdwg.org/dwc/text/"

# Identifier-like columns that look numeric but must stay strings
SCHEMA_OVERRIDES: dict[str, type[pl.DataType] | pl.DataType] = {
    "catalogNumber": pl.Utf8,
    "occurrenceID": pl.Utf8,
    "recordNumber": pl.Utf8,
    "hasCoordinate": pl.Boolean,
    "hasGeospatialIssues": pl.Boolean,
}


@dataclass
class ArchiveCore:
    """How to read the core data file of a Darwin Core archive."""

    location: str
    columns: list[str]
    separator: str = ","
    quote_char: Optional[str] = '"'
    encoding: str = "utf-8"
    has_header: bool = False
    default_fields: dict[str, str] = field(default_factory=dict)


def _term_name(term_uri: str) -> str:
    return term_uri.rsplit("/", 1)[-1].rsplit("#", 1)[-1]


def _unescape(value: str) -> str:
    return {"\\t": "\t", "\\n": "\n"}.get(value, value)


def parse_meta(meta_path: Path) -> ArchiveCore:
    """Read the ``<core>`` description of a Darwin Core archive's meta.xml.

    Raises:
        ValueError: If meta.xml lacks a core element or a core file location.
    """
    root = ET.parse(meta_path).getroot()

    # Elements are namespaced in conforming archives, bare in some exports
    def find(elem: ET.Element, tag: str) -> Optional[ET.Element]:
        found = elem.find(f"{{{DWC_TEXT_NAMESPACE}}}{tag}")
        return found if found is not None else elem.find(tag)

    def find_all(elem: ET.Element, tag: str) -> list[ET.Element]:
        return elem.findall(f"{{{DWC_TEXT_NAMESPACE}}}{tag}") + elem.findall(tag)

    core = find(root, "core")
    if core is None:
        raise ValueError("meta.xml does not contain a <core> element")
    files = find(core, "files")
    location = find(files, "location") if files is not None else None
    if location is None or not (location.text or "").strip():
        raise ValueError("<core> does not name its data file location")

    columns: dict[int, str] = {}
    default_fields: dict[str, str] = {}
    for elem in find_all(core, "field"):
        term = elem.get("term")
        if term is None:
            continue
        index = elem.get("index")
        if index is not None and index.isdigit():
            columns[int(index)] = _term_name(term)
        elif elem.get("default") is not None:
            default_fields[_term_name(term)] = str(elem.get("default"))

    id_elem = find(core, "id")
    if id_elem is not None and (id_elem.get("index") or "").isdigit():
        columns.setdefault(int(str(id_elem.get("index"))), "id")

    width = max(columns) + 1 if columns else 0
    quote_char = core.get("fieldsEnclosedBy", '"')

    return ArchiveCore(
        location=(location.text or "").strip(),
        columns=[columns.get(i, f"col_{i}") for i in range(width)],
        separator=_unescape(core.get("fieldsTerminatedBy", ",")),
        quote_char=quote_char or None,
        encoding=core.get("encoding", "utf-8"),
        has_header=int(core.get("ignoreHeaderLines", "0")) >= 1,
        default_fields=default_fields,
    )


def _is_utf8(encoding: str) -> bool:
    return codecs.lookup(encoding).name == "utf-8"


def read_occurrence_file(
    path: Union[str, Path],
    separator: str = defaults.INPUT_SEPARATOR,
    encoding: str = defaults.INPUT_ENCODING,
    **read_csv_kwargs: Any,
) -> pl.DataFrame:
    """Read a delimited occurrence file into a DataFrame.

    Files in another encoding (e.g. ``"latin-1"`` or ``"cp1250"`` exports from
    national databases) are transcoded to UTF-8 before parsing.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        LookupError: If ``encoding`` is not a known codec.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Occurrence file not found: {path}")

    if _is_utf8(encoding):
        source: Union[Path, bytes] = path
    else:
        logger.info(f"Transcoding {path} from {encoding} to UTF-8")
        source = path.read_bytes().decode(encoding).encode("utf-8")

    with Timer(output=logger.info, prefix="Reading rows"):
        df = pl.read_csv(
            source, separator=separator, encoding="utf8", **read_csv_kwargs
        )
    logger.info(f"Read {df.height} records with {df.width} columns from {path}")
    return df


def scan_darwin_core_archive(
    path: Union[str, Path], **scan_csv_kwargs: Any
) -> pl.LazyFrame:
    """Scan an unpacked Darwin Core archive directory lazily.

    Args:
        path: Directory containing meta.xml and the core data file.
        **scan_csv_kwargs: Extra keyword arguments forwarded to pl.scan_csv.

    Raises:
        FileNotFoundError: If meta.xml is missing.
    """
    base_dir = Path(path)
    meta_path = base_dir / "meta.xml"
    if not meta_path.exists():
        raise FileNotFoundError("meta.xml not found in archive directory")

    core = parse_meta(meta_path)
    data_path = base_dir / core.location

    overrides = {c: SCHEMA_OVERRIDES[c] for c in core.columns if c in SCHEMA_OVERRIDES}
    scan_csv_kwargs.setdefault("schema_overrides", {}).update(overrides)
    new_columns = None if core.has_header else core.columns

    if _is_utf8(core.encoding):
        lf = pl.scan_csv(
            data_path,
            separator=core.separator,
            has_header=core.has_header,
            new_columns=new_columns,
            quote_char=core.quote_char,
            **scan_csv_kwargs,
        )
    else:
        lf = read_occurrence_file(
            data_path,
            separator=core.separator,
            encoding=core.encoding,
            has_header=core.has_header,
            new_columns=new_columns,
            quote_char=core.quote_char,
            **scan_csv_kwargs,
        ).lazy()

    for name, value in core.default_fields.items():
        lf = lf.with_columns(pl.lit(value).alias(name))
    return lf
