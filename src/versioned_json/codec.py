"""PydanticJsonCodec — the default JSON codec for version shapes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from pydantic import BaseModel

ShapeT = TypeVar("ShapeT", bound="BaseModel")

#: Validation-context key marking a decode driven by the engine.  Nested
#: ``VersionedModel`` values treat it like JSON mode, so already-parsed
#: payloads are versioned at every depth.
ENGINE_CONTEXT_KEY = "versioned_json"


class PydanticJsonCodec:
    """Encode/decode version shapes with pydantic's own JSON support.

    Members are written under their aliases (``by_alias=True``) so that the
    output reads back through validation unchanged.  Validation errors are
    raised as ``pydantic.ValidationError`` and never wrapped.
    """

    def deserialize(self, shape: type[ShapeT], data: Any) -> ShapeT:
        context = {ENGINE_CONTEXT_KEY: True}
        if isinstance(data, (bytes, bytearray, str)):
            return shape.model_validate_json(data, context=context)
        return shape.model_validate(data, context=context)

    def serialize(self, value: BaseModel) -> bytes:
        return value.model_dump_json(by_alias=True).encode("utf-8")

    def serialize_python(self, value: BaseModel) -> dict[str, Any]:
        return value.model_dump(mode="json", by_alias=True)
