"""Human-readable and JSON renderings of a request."""

from __future__ import annotations

import json
from collections.abc import Iterator
from typing import TYPE_CHECKING

from rich.text import Text

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .request import Request

UNINITIALIZED_PLACEHOLDER = "Request read not initialized"
SECTION_STYLE = "bold"


def _sections(request: "Request") -> Iterator[tuple[str, list[str]]]:
    yield "Request:", [f"  {request.method} {request.path} {request.version}"]
    if request.headers:
        yield "Headers:", [f'  "{header.name}": "{header.value}"' for header in request.headers]
    if request.query:
        yield "Queries:", [f'  "{query.name}" = "{query.value}"' for query in request.query]
    if request.body:
        yield "Body:", [f'  "{request.body}"']


def describe_request(request: "Request") -> str:
    """Render a multi-line summary for diagnostics.

    Empty header, query and body sections are omitted. A request that was
    never initialized renders as a single placeholder line instead.
    """

    if not request.initialized:
        return UNINITIALIZED_PLACEHOLDER
    lines: list[str] = []
    for title, body in _sections(request):
        lines.append(title)
        lines.extend(body)
    return "\n".join(lines)


def rich_request(request: "Request") -> Text:
    """Return the :func:`describe_request` content with bold section titles."""

    if not request.initialized:
        return Text(UNINITIALIZED_PLACEHOLDER)
    text = Text()
    for index, (title, body) in enumerate(_sections(request)):
        if index:
            text.append("\n")
        text.append(title, style=SECTION_STYLE)
        for line in body:
            text.append("\n" + line)
    return text


def render_json(request: "Request") -> str:
    """Return a canonical JSON representation of the request."""

    return json.dumps(request.to_dict(), indent=2, sort_keys=True)


__all__ = ["UNINITIALIZED_PLACEHOLDER", "describe_request", "render_json", "rich_request"]
