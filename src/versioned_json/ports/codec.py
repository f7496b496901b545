"""IJsonCodec — protocol for the JSON codec applied to version shapes."""

from __future__ import annotations

from typing import Any, Protocol, TypeVar

from pydantic import BaseModel

ShapeT = TypeVar("ShapeT", bound=BaseModel)


class IJsonCodec(Protocol):
    """
    Encodes and decodes version shape instances using field names as keys.

    Codecs are never applied to live types directly; the engine converts
    between live values and shapes itself.
    """

    def deserialize(self, shape: type[ShapeT], data: Any) -> ShapeT:
        """
        Decode *data* into a new *shape* instance.

        Args:
            shape: The version shape class selected by the version tag.
            data: Raw JSON (``bytes``/``str``) or an already parsed ``dict``.

        Raises:
            Whatever the codec raises on invalid input; the engine
            propagates it unchanged.
        """
        ...

    def serialize(self, value: BaseModel) -> bytes:
        """Encode *value* as a compact JSON object."""
        ...

    def serialize_python(self, value: BaseModel) -> dict[str, Any]:
        """Encode *value* as JSON-compatible Python data."""
        ...
