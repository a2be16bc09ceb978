"""Persistent global identifiers (UUIDs) for occurrence records."""

import logging
import uuid
from typing import Any, Optional, Union

import polars as pl

from danube_occurrence.columns import require_columns
from danube_occurrence.errors import ConfigurationError

logger = logging.getLogger(__name__)


def _namespace_uuid(namespace: Union[str, uuid.UUID]) -> uuid.UUID:
    """A UUID namespace; strings that are not UUIDs are hashed into one under the URL namespace."""
    if isinstance(namespace, uuid.UUID):
        return namespace
    try:
        return uuid.UUID(namespace)
    except ValueError:
        return uuid.uuid5(uuid.NAMESPACE_URL, namespace)


def generate_global_identifier(
    n: int = 1, namespace: Optional[Union[str, uuid.UUID]] = None
) -> list[str]:
    """Generate ``n`` UUIDs as strings.

    Without a namespace the identifiers are random (version 4). With one they
    are version 5 UUIDs of ``namespace`` and the position ``0..n-1``.
    """
    if isinstance(n, bool) or not isinstance(n, int) or n <= 0:
        raise ConfigurationError("'n' must be a positive integer.")
    if namespace is None:
        return [str(uuid.uuid4()) for _ in range(n)]
    ns = _namespace_uuid(namespace)
    return [str(uuid.uuid5(ns, str(i))) for i in range(n)]


def add_global_identifier(
    df: Any,
    column: str = "occurrenceID",
    namespace: Optional[Union[str, uuid.UUID]] = None,
    key_columns: Optional[list[str]] = None,
) -> pl.DataFrame:
    """Add (or replace) a column of persistent identifiers.

    With ``namespace`` and ``key_columns`` the identifier of each record is
    the UUID5 of its key values joined by ``"|"``, so re-running on the same
    data yields the same identifiers. Otherwise random UUID4 values are used.
    """
    if key_columns is not None and namespace is None:
        raise ConfigurationError("key_columns requires a namespace.")
    df = require_columns(df, key_columns or [])

    if key_columns:
        ns = _namespace_uuid(namespace)  # type: ignore[arg-type]
        keys = df.select(
            pl.concat_str(
                [pl.col(c).cast(pl.String).fill_null("") for c in key_columns],
                separator="|",
            )
        ).to_series()
        identifiers = [str(uuid.uuid5(ns, key)) for key in keys.to_list()]
    elif df.height:
        identifiers = generate_global_identifier(df.height, namespace)
    else:
        identifiers = []

    logger.debug(f"Assigned {len(identifiers)} identifiers to column {column}")
    return df.with_columns(pl.Series(column, identifiers, dtype=pl.String))
