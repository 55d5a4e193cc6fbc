"""HTTP/1.1 request model: parsing raw text and building it back."""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Union

from .errors import DiagnosticKind, MethodError, ParseDiagnostic
from .fields import Header, Query
from .method import Method
from .render import describe_request

LOGGER = logging.getLogger(__name__)

DEFAULT_VERSION = "HTTP/1.1"
CRLF = "\r\n"
HEADER_SEPARATOR = ": "


def _split_lines(raw: str) -> list[str]:
    """Split on LF only, dropping one trailing CR per line.

    A final newline does not start an extra line. Empty input still yields a
    single empty request line.
    """

    lines = raw.split("\n")
    if len(lines) > 1 and not lines[-1]:
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


class Request:
    """A single HTTP request.

    A fresh instance holds defaults and is *uninitialized*; reading any field
    in that state logs a warning but still returns the default. Parsing or
    calling any ``set_*``/``add_*`` mutator latches the request as
    initialized for the rest of its life.

    Header names are unique case-insensitively and query names are unique
    case-sensitively. ``headers`` and ``query`` return tuple snapshots of
    the collections; the :class:`Header`/:class:`Query` objects inside are
    the live ones. ``full_path`` is the raw target captured at parse time
    and is never recomputed; :meth:`build` derives the target from ``path``
    and the live query list instead.
    """

    def __init__(self) -> None:
        self._method = Method.GET
        self._path = ""
        self._full_path = ""
        self._version = DEFAULT_VERSION
        self._headers: list[Header] = []
        self._query: list[Query] = []
        self._body = ""
        self._initialized = False

    def __repr__(self) -> str:
        return (
            f"Request(method={self._method}, path={self._path!r}, "
            f"version={self._version!r}, headers={len(self._headers)}, "
            f"query={len(self._query)}, initialized={self._initialized})"
        )

    def __str__(self) -> str:
        return describe_request(self)

    @property
    def initialized(self) -> bool:
        return self._initialized

    def _warn_uninitialized(self, field: str) -> None:
        if not self._initialized:
            LOGGER.warning("Request %s read not initialized", field)

    # Read accessors

    @property
    def headers(self) -> tuple[Header, ...]:
        self._warn_uninitialized("headers")
        return tuple(self._headers)

    @property
    def query(self) -> tuple[Query, ...]:
        self._warn_uninitialized("queries")
        return tuple(self._query)

    @property
    def body(self) -> str:
        self._warn_uninitialized("body")
        return self._body

    @property
    def method(self) -> Method:
        self._warn_uninitialized("method")
        return self._method

    @property
    def path(self) -> str:
        self._warn_uninitialized("path")
        return self._path

    @property
    def full_path(self) -> str:
        self._warn_uninitialized("full path")
        return self._full_path

    @property
    def version(self) -> str:
        self._warn_uninitialized("version")
        return self._version

    # Lookups

    def _header_index(self, name: str) -> Optional[int]:
        lowered = name.lower()
        for index, header in enumerate(self._headers):
            if header.name.lower() == lowered:
                return index
        return None

    def _query_index(self, name: str) -> Optional[int]:
        for index, query in enumerate(self._query):
            if query.name == name:
                return index
        return None

    def find_header(self, name: str) -> Optional[Header]:
        """Return the first header whose name matches ``name`` ignoring case."""

        self._warn_uninitialized("headers")
        index = self._header_index(name)
        return None if index is None else self._headers[index]

    def find_query(self, name: str) -> Optional[Query]:
        """Return the first query parameter named exactly ``name``."""

        self._warn_uninitialized("queries")
        index = self._query_index(name)
        return None if index is None else self._query[index]

    def content_type(self) -> Optional[str]:
        self._warn_uninitialized("content type")
        index = self._header_index("content-type")
        return None if index is None else self._headers[index].value

    def content_length(self) -> Optional[str]:
        self._warn_uninitialized("content length")
        index = self._header_index("content-length")
        return None if index is None else self._headers[index].value

    # Mutators

    def set_method(self, method: Union[Method, str]) -> None:
        """Set the method from a :class:`Method` or its exact token.

        An unknown token raises :class:`rawhttp.errors.MethodError` and leaves
        the request untouched.
        """

        if not isinstance(method, Method):
            method = Method.from_text(method)
        self._initialized = True
        self._method = method

    def set_path(self, path: str) -> None:
        self._initialized = True
        self._path = path

    def set_full_path(self, full_path: str) -> None:
        self._initialized = True
        self._full_path = full_path

    def set_version(self, version: str) -> None:
        self._initialized = True
        self._version = version

    def set_body(self, body: str) -> None:
        self._initialized = True
        self._body = body

    def set_header(self, name: str, value: str) -> None:
        """Overwrite the value of a matching header or append a new one.

        Matching ignores case; an existing header keeps its stored name and
        position.
        """

        self._initialized = True
        index = self._header_index(name)
        if index is None:
            self._headers.append(Header(name, value))
        else:
            self._headers[index].value = value

    def add_header(self, name: str, value: str) -> None:
        self._initialized = True
        if self._header_index(name) is not None:
            self.set_header(name, value)
            return
        self._headers.append(Header(name, value))

    def set_query(self, name: str, value: str) -> None:
        self._initialized = True
        index = self._query_index(name)
        if index is None:
            self._query.append(Query(name, value))
        else:
            self._query[index].value = value

    def add_query(self, name: str, value: str) -> None:
        self._initialized = True
        if self._query_index(name) is not None:
            self.set_query(name, value)
            return
        self._query.append(Query(name, value))

    # Text conversion

    @classmethod
    def parse(cls, raw: str) -> "Request":
        """Return a new request populated from raw request text."""

        request = cls()
        request.parse_from_str(raw)
        return request

    def parse_from_str(self, raw: str) -> list[ParseDiagnostic]:
        """Populate this request from raw text and return the diagnostics.

        Parsing never raises. Malformed pieces are logged, reported in the
        returned list and skipped; everything else is still applied. Headers
        and query parameters are merged into the ones already present.
        """

        diagnostics: list[ParseDiagnostic] = []
        body_lines: list[str] = []
        in_body = False

        for index, line in enumerate(_split_lines(raw)):
            if index == 0:
                self._parse_request_line(line, diagnostics)
            elif in_body:
                body_lines.append(line)
            elif not line:
                if self._method.carries_body:
                    in_body = True
            elif HEADER_SEPARATOR in line:
                self._parse_header_line(index, line, diagnostics)

        self._body = CRLF.join(body_lines)
        self._initialized = True
        return diagnostics

    def build(self) -> str:
        """Serialize the request to raw text.

        The target is recomputed from ``path`` and the current query list;
        the body is appended after the blank line without a terminator.
        """

        target = self._path
        for query in self._query:
            joiner = "&" if "?" in target else "?"
            target += f"{joiner}{query.name}={query.value}"

        lines = [f"{self._method} {target} {self._version}"]
        lines.extend(f"{header.name}{HEADER_SEPARATOR}{header.value}" for header in self._headers)
        return f"{CRLF.join(lines)}{CRLF}{CRLF}{self._body}"

    def _report(
        self,
        diagnostics: list[ParseDiagnostic],
        kind: DiagnosticKind,
        line: int,
        text: str,
        message: str,
    ) -> None:
        LOGGER.error(message)
        diagnostics.append(ParseDiagnostic(kind=kind, line=line, text=text, message=message))

    def _parse_request_line(self, line: str, diagnostics: list[ParseDiagnostic]) -> None:
        parts = line.split(" ")
        if len(parts) != 3:
            self._report(
                diagnostics,
                DiagnosticKind.MALFORMED_REQUEST_LINE,
                0,
                line,
                f"Invalid request line: `{line}`",
            )
            return

        token, target, version = parts
        try:
            self._method = Method.from_text(token)
        except MethodError as exc:
            self._report(diagnostics, DiagnosticKind.MALFORMED_REQUEST_LINE, 0, line, str(exc))
            return

        self._full_path = target
        self._version = version
        self._parse_target(target, diagnostics)

    def _parse_target(self, target: str, diagnostics: list[ParseDiagnostic]) -> None:
        parts = target.split("?")
        self._path = parts[0]
        if len(parts) != 2:
            return

        for pair in parts[1].split("&"):
            pieces = pair.split("=")
            if len(pieces) != 2:
                self._report(
                    diagnostics,
                    DiagnosticKind.MALFORMED_QUERY_PAIR,
                    0,
                    pair,
                    f"Invalid query: `{pair}`",
                )
                continue
            name, value = pieces
            index = self._query_index(name)
            if index is None:
                self._query.append(Query(name, value))
            else:
                self._query[index].value = value

    def _parse_header_line(self, index: int, line: str, diagnostics: list[ParseDiagnostic]) -> None:
        parts = line.split(HEADER_SEPARATOR)
        if len(parts) != 2:
            self._report(
                diagnostics,
                DiagnosticKind.MALFORMED_HEADER_LINE,
                index,
                line,
                f"Invalid header line: `{line}`",
            )
            return

        name, value = parts
        if self._header_index(name) is not None:
            return
        self._headers.append(Header(name, value))

    # Mapping conversion

    def to_dict(self) -> dict[str, object]:
        return {
            "method": self._method.to_text(),
            "path": self._path,
            "full_path": self._full_path,
            "version": self._version,
            "headers": [header.as_dict() for header in self._headers],
            "query": [query.as_dict() for query in self._query],
            "body": self._body,
            "initialized": self._initialized,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "Request":
        """Rebuild a request from the mapping produced by :meth:`to_dict`.

        Missing keys keep their defaults; ``initialized`` in the mapping is
        ignored since applying any field latches the request.
        """

        request = cls()
        if "method" in data:
            request.set_method(str(data["method"]))
        if "path" in data:
            request.set_path(str(data["path"]))
        if "full_path" in data:
            request.set_full_path(str(data["full_path"]))
        if "version" in data:
            request.set_version(str(data["version"]))
        for item in data.get("headers") or []:
            request.add_header(str(item["name"]), str(item["value"]))
        for item in data.get("query") or []:
            request.add_query(str(item["name"]), str(item["value"]))
        if "body" in data:
            request.set_body(str(data["body"]))
        return request


__all__ = ["CRLF", "DEFAULT_VERSION", "Request"]
