"""Name/value containers owned by :class:`rawhttp.request.Request`."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Header:
    name: str
    value: str

    def as_dict(self) -> dict[str, str]:
        return {"name": self.name, "value": self.value}


@dataclass
class Query:
    name: str
    value: str

    def as_dict(self) -> dict[str, str]:
        return {"name": self.name, "value": self.value}


__all__ = ["Header", "Query"]
