"""Best-effort request parsing with recoverable diagnostics."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .errors import DiagnosticKind, ParseDiagnostic, RequestParseError
from .request import Request

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParseResult:
    """The parsed request together with everything that was skipped."""

    request: Request
    diagnostics: tuple[ParseDiagnostic, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.diagnostics

    def of_kind(self, kind: DiagnosticKind) -> list[ParseDiagnostic]:
        return [diagnostic for diagnostic in self.diagnostics if diagnostic.kind is kind]


def parse_request(raw: str, *, strict: bool = False) -> ParseResult:
    """Parse raw request text.

    Malformed request lines, header lines and query pairs are skipped and
    reported in :attr:`ParseResult.diagnostics`. With ``strict`` set, any
    diagnostic raises :class:`RequestParseError` instead; the exception still
    carries the best-effort request.
    """

    request = Request()
    diagnostics = request.parse_from_str(raw)
    if diagnostics:
        LOGGER.debug(
            "parse.diagnostics",
            extra={"event": "parse.diagnostics", "count": len(diagnostics), "strict": strict},
        )
        if strict:
            raise RequestParseError(diagnostics, request)
    return ParseResult(request=request, diagnostics=tuple(diagnostics))


__all__ = ["ParseResult", "parse_request"]
