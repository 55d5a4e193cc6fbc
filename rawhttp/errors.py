"""Exceptions and parse diagnostics for rawhttp."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .request import Request


class RawHttpError(ValueError):
    """Base class for rawhttp failures surfaced to callers."""


class MethodError(RawHttpError):
    """Raised when a token is not one of the nine supported HTTP methods."""

    def __init__(self, token: str) -> None:
        super().__init__(f"Unsupported method: `{token}`")
        self.token = token


class DiagnosticKind(str, Enum):
    MALFORMED_REQUEST_LINE = "malformed_request_line"
    MALFORMED_HEADER_LINE = "malformed_header_line"
    MALFORMED_QUERY_PAIR = "malformed_query_pair"


@dataclass(frozen=True)
class ParseDiagnostic:
    """A recoverable problem found while parsing request text.

    ``line`` is the 0-based index of the offending line; query pairs report
    the request line (0).
    """

    kind: DiagnosticKind
    line: int
    text: str
    message: str

    def as_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind.value,
            "line": self.line,
            "text": self.text,
            "message": self.message,
        }


class RequestParseError(RawHttpError):
    """Raised by strict parsing when the input produced diagnostics."""

    def __init__(self, diagnostics: Sequence[ParseDiagnostic], request: "Request") -> None:
        self.diagnostics = tuple(diagnostics)
        self.request = request
        summary = "; ".join(diagnostic.message for diagnostic in self.diagnostics)
        super().__init__(f"Request text is malformed: {summary}")


__all__ = [
    "DiagnosticKind",
    "MethodError",
    "ParseDiagnostic",
    "RawHttpError",
    "RequestParseError",
]
