"""Exceptions raised by the record-quality functions.

Structural problems (bad parameters, absent columns, wrong object types) and
unparseable values are raised. Values that parse but fall outside a valid
range are never raised; they are returned as row indices in the report
objects of each validator.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class OccurrenceError(Exception):
    """Base class for errors raised by this package.

    Parameters
    ----------
    code:
        Short machine readable error code.
    message:
        Human readable error message.
    """

    def __init__(self, code: str, message: str) -> None:
        super().__init__(code, message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class ConfigurationError(OccurrenceError):
    """Missing, ambiguous or contradictory parameters, or absent columns."""

    def __init__(self, message: str) -> None:
        super().__init__("configuration", message)

    def __reduce__(self):
        return (type(self), (self.message,))


class TypeMismatchError(OccurrenceError, TypeError):
    """An externally supplied object lacks the expected capability."""

    def __init__(self, message: str) -> None:
        super().__init__("type_mismatch", message)

    def __reduce__(self):
        return (type(self), (self.message,))


@dataclass(frozen=True)
class ParseFailure:
    """One value that could not be converted to its target type."""

    row: int
    column: str
    value: Any
    reason: str

    def __str__(self) -> str:
        return f"row {self.row}, column {self.column!r}: {self.value!r} ({self.reason})"


class ParseError(OccurrenceError):
    def __init__(
        self,
        code: str,
        message: str,
        failures: Optional[list[ParseFailure]] = None,
    ) -> None:
        super().__init__(code, message)
        self.failures = list(failures) if failures is not None else []

    def __reduce__(self):
        return (type(self), (self.code, self.message, self.failures))

    @classmethod
    def from_failures(cls, what: str, failures: list[ParseFailure]) -> "ParseError":
        shown = "; ".join(str(f) for f in failures[:10])
        if len(failures) > 10:
            shown += f"; ... ({len(failures) - 10} more)"
        return cls(
            code="parse",
            message=f"{len(failures)} {what} value(s) could not be parsed: {shown}",
            failures=failures,
        )


__all__ = [
    "ConfigurationError",
    "OccurrenceError",
    "ParseError",
    "ParseFailure",
    "TypeMismatchError",
]
