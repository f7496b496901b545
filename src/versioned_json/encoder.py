"""Encoder — converts live values into the latest shape and stamps the version."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from .codec import PydanticJsonCodec
from .mapping import mapped_values, new_instance
from .registry import get_registry

if TYPE_CHECKING:
    from pydantic import BaseModel

    from .ports.codec import IJsonCodec
    from .registry import Entry, SchemaRegistry

NULL = b"null"


class Encoder:
    """Serialize registered live values as versioned JSON objects.

    Usage::

        encoder = Encoder(registry)
        data = encoder.marshal(user)  # b'{"Version":3,"ID":"002a",...}'

    The output always carries exactly one version member, equal to the
    latest registered version of the live type.
    """

    def __init__(
        self,
        registry: SchemaRegistry | None = None,
        codec: IJsonCodec | None = None,
    ) -> None:
        self._registry = registry if registry is not None else get_registry()
        self._codec: IJsonCodec = codec if codec is not None else PydanticJsonCodec()

    @property
    def registry(self) -> SchemaRegistry:
        return self._registry

    def marshal(self, live: BaseModel | None) -> bytes:
        """Encode *live* as JSON bytes; ``None`` encodes as ``null``.

        Raises:
            NotRegisteredError: the type of *live* was never registered.
        """
        if live is None:
            return NULL

        entry = self._registry.entry_for(type(live))
        latest = self._pack(entry, live)
        body = self._codec.serialize(latest)
        if entry.marshal.version_field is not None:
            return body

        key = json.dumps(self._registry.version_key)
        head = f"{{{key}:{entry.latest_version}".encode()
        if body[1:].lstrip().startswith(b"}"):
            return head + b"}"
        return head + b"," + body[1:]

    def to_python(self, live: BaseModel | None) -> dict[str, Any] | None:
        """Encode *live* as JSON-compatible Python data, version member first."""
        if live is None:
            return None

        entry = self._registry.entry_for(type(live))
        data = self._codec.serialize_python(self._pack(entry, live))
        if entry.marshal.version_field is not None:
            return data
        return {self._registry.version_key: entry.latest_version, **data}

    def _pack(self, entry: Entry, live: BaseModel) -> BaseModel:
        """Build the latest shape from *live*, version field already set."""
        plan = entry.marshal
        if plan.pack is None:
            values = mapped_values(live, plan.mappings)
            if plan.version_field is not None:
                values[plan.version_field] = entry.latest_version
            return new_instance(plan.shape, values)

        latest = new_instance(plan.shape)
        plan.pack(latest, live)
        if plan.version_field is not None:
            setattr(latest, plan.version_field, entry.latest_version)
        return latest
