"""VersionedModel — live types that version themselves inside pydantic JSON.

A live type deriving from :class:`VersionedModel` encodes and decodes through
the process-wide registry whenever pydantic works in JSON mode, also when it
is nested in an ordinary model::

    class Child(VersionedModel):
        B: str = ""

    class Parent(BaseModel):
        Child: Child

    register(Child, ChildV1, ChildV2)
    Parent.model_validate_json('{"Child":{"Version":1,"A":"b"}}')

Python-mode construction, validation and ``model_dump()`` are unchanged,
except while the engine itself validates a parsed payload: nested values
are then decoded through the registry as well.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel, model_serializer, model_validator

from .codec import ENGINE_CONTEXT_KEY
from .decoder import Decoder
from .encoder import Encoder

if TYPE_CHECKING:
    from pydantic import (
        ModelWrapValidatorHandler,
        SerializationInfo,
        SerializerFunctionWrapHandler,
        ValidationInfo,
    )

_VersionedT = TypeVar("_VersionedT", bound="VersionedModel")


class VersionedModel(BaseModel):
    """Base class for live types registered with the default registry."""

    @model_serializer(mode="wrap")
    def _serialize_versioned(
        self, handler: SerializerFunctionWrapHandler, info: SerializationInfo
    ) -> Any:
        if not info.mode_is_json():
            return handler(self)
        return Encoder().to_python(self)

    @model_validator(mode="wrap")
    @classmethod
    def _validate_versioned(
        cls,
        data: Any,
        handler: ModelWrapValidatorHandler[Any],
        info: ValidationInfo,
    ) -> Any:
        if not isinstance(data, dict) or not _engine_decode(info):
            return handler(data)
        return Decoder().decode(data, cls)

    def to_json(self) -> bytes:
        """Encode this value as versioned JSON bytes."""
        return Encoder().marshal(self)

    @classmethod
    def from_json(cls: type[_VersionedT], data: Any) -> _VersionedT | None:
        """Decode versioned JSON into a new instance (``None`` for ``null``)."""
        return Decoder().decode(data, cls)


def _engine_decode(info: ValidationInfo) -> bool:
    if info.mode == "json":
        return True
    context = info.context
    return isinstance(context, dict) and bool(context.get(ENGINE_CONTEXT_KEY))
