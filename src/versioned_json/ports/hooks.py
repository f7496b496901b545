"""Optional capabilities a version shape may implement.

Presence is resolved once, when the live type is registered; the resolved
functions are stored in the compiled entry.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Upgradable(Protocol):
    """A version shape that finishes its own upgrade from the previous shape.

    Called during decoding after the mapped fields were copied from
    *previous* into ``self``. Raising aborts the decode.
    """

    def upgrade(self, previous: Any) -> None: ...


@runtime_checkable
class Packable(Protocol):
    """The latest shape building itself from a live value (replaces mapping)."""

    def pack(self, live: Any) -> None: ...


@runtime_checkable
class Unpackable(Protocol):
    """The latest shape writing itself into a live value (replaces mapping)."""

    def unpack(self, live: Any) -> None: ...
