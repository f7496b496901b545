"""Decoder — reads the version tag and upgrades stored data to the live type.

Decoding runs four steps:

1. detect the version member (absent or ``0`` means version 1),
2. decode the input into the shape registered for that version,
3. step the value forward one version at a time, copying mapped fields
   and calling each shape's ``upgrade`` hook,
4. convert the latest shape into the live value (``unpack`` or mapping).
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, create_model

from .codec import PydanticJsonCodec
from .exceptions import NegativeVersionError, UnsupportedVersionError
from .mapping import copy_fields, mapped_values, new_instance
from .registry import DEFAULT_VERSION_KEY, get_registry

if TYPE_CHECKING:
    from .ports.codec import IJsonCodec
    from .registry import Entry, SchemaRegistry

logger = logging.getLogger("versioned_json.decoder")

LiveT = TypeVar("LiveT", bound=BaseModel)


@lru_cache(maxsize=None)
def _version_probe(key: str) -> type[BaseModel]:
    return create_model(
        "VersionProbe",
        __config__=ConfigDict(extra="ignore"),
        version=(int | None, Field(default=None, alias=key)),
    )


def detect_version(data: Any, key: str = DEFAULT_VERSION_KEY) -> int:
    """Return the version number stored in *data*.

    Only the version member is validated, strictly: it must be a JSON
    integer or ``null``.  A missing member, ``null`` and ``0`` all mean
    version 1.

    Raises:
        NegativeVersionError: the stored version is below zero.
        pydantic.ValidationError: *data* is not an object or the member
            is not an integer.
    """
    probe = _version_probe(key)
    if isinstance(data, (bytes, bytearray, str)):
        parsed = probe.model_validate_json(data, strict=True)
    else:
        parsed = probe.model_validate(data, strict=True)

    version: int = parsed.version or 0  # type: ignore[attr-defined]
    if version < 0:
        raise NegativeVersionError(version)
    if version == 0:
        # Data written before versioning was introduced.
        return 1
    return version


def is_null(data: Any) -> bool:
    """Return *True* if *data* is the JSON literal ``null``."""
    if isinstance(data, str):
        return data.strip() == "null"
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).strip() == b"null"
    return data is None


class Decoder:
    """Decode versioned JSON into registered live types.

    Usage::

        decoder = Decoder(registry)

        user = User()
        decoder.unmarshal(b'{"ID":42,"Name":"dale_cooper"}', user)

        # or build a new instance
        user = decoder.decode(raw, User)

    Decoding never moves a value backwards: data newer than the latest
    registered version is rejected.
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

    def unmarshal(self, data: Any, target: BaseModel) -> None:
        """Decode *data* into the existing live value *target*.

        ``null`` leaves *target* untouched.  On error *target* may be
        partially written.

        Raises:
            NegativeVersionError: the stored version is below zero.
            NotRegisteredError: the type of *target* was never registered.
            UnsupportedVersionError: the stored version is above the latest.
            pydantic.ValidationError: the codec rejected *data*.
        """
        if is_null(data):
            return
        self._run(data, type(target), target)

    def decode(self, data: Any, live_type: type[LiveT]) -> LiveT | None:
        """Decode *data* into a new *live_type* instance (``None`` for ``null``)."""
        if is_null(data):
            return None
        return self._run(data, live_type, None)

    def _run(self, data: Any, live_type: type[LiveT], target: LiveT | None) -> LiveT:
        version = detect_version(data, self._registry.version_key)
        entry = self._registry.entry_for(live_type)

        context = entry.versions.get(version)
        if context is None:
            raise UnsupportedVersionError(live_type, version, entry.latest_version)

        current = self._codec.deserialize(context.shape, data)
        current = self._upgrade(entry, current, version)
        return self._finalize(entry, current, target)

    def _upgrade(self, entry: Entry, current: BaseModel, version: int) -> BaseModel:
        while version < entry.latest_version:
            version += 1
            context = entry.versions[version]
            upgraded = new_instance(
                context.shape, mapped_values(current, context.mappings)
            )
            if context.upgrade is not None:
                context.upgrade(upgraded, current)
            logger.debug(
                "Upgraded %s v%d → v%d",
                entry.live_type.__qualname__,
                version - 1,
                version,
            )
            current = upgraded
        return current

    def _finalize(self, entry: Entry, latest: BaseModel, target: Any) -> Any:
        plan = entry.unmarshal
        if target is None:
            if plan.unpack is None:
                return new_instance(
                    entry.live_type, mapped_values(latest, plan.mappings)
                )
            target = new_instance(entry.live_type)

        if plan.unpack is not None:
            plan.unpack(latest, target)
        else:
            copy_fields(latest, target, plan.mappings)
        return target
