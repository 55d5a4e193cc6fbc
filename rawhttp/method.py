"""HTTP request methods."""

from __future__ import annotations

from enum import Enum

from .errors import MethodError


class Method(Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    CONNECT = "CONNECT"
    TRACE = "TRACE"
    PATCH = "PATCH"

    def __str__(self) -> str:
        return self.value

    def to_text(self) -> str:
        """Return the canonical uppercase token."""

        return self.value

    @classmethod
    def from_text(cls, token: str) -> "Method":
        """Map an exact, case-sensitive token to its method.

        Raises :class:`MethodError` for anything else, including ``"get"``.
        """

        try:
            return cls(token)
        except ValueError as exc:
            raise MethodError(token) from exc

    @property
    def carries_body(self) -> bool:
        return self in (Method.POST, Method.PUT)


__all__ = ["Method"]
