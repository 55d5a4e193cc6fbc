"""rawhttp package: a minimal HTTP/1.1 request model."""

from __future__ import annotations

# Semantic version for package consumers.
__version__ = "0.1.0"

from .errors import DiagnosticKind, MethodError, ParseDiagnostic, RawHttpError, RequestParseError
from .fields import Header, Query
from .method import Method
from .parser import ParseResult, parse_request
from .request import Request

__all__ = [
    "__version__",
    "DiagnosticKind",
    "Header",
    "Method",
    "MethodError",
    "ParseDiagnostic",
    "ParseResult",
    "Query",
    "RawHttpError",
    "Request",
    "RequestParseError",
    "parse_request",
]
