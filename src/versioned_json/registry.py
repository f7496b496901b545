"""Schema registry — compiles and stores the version history of live types.

Registration is a start-up activity: every mapping, hook and version field
is resolved up front so that encoding and decoding only read immutable
entries.

Quick-start::

    class Post(BaseModel):
        Author: str = ""
        Likes: int = 0

    class PostV1(BaseModel):
        Author: str = ""
        NumberOfLikes: int = 0

    class PostV2(BaseModel):
        Author: str = ""
        Likes: Annotated[int, CopyFrom("NumberOfLikes")] = 0

    registry = SchemaRegistry()
    registry.register(Post, PostV1, PostV2)

``SchemaRegistry.register`` is not thread-safe.  Finish all registrations
before encoding or decoding from several threads.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from .exceptions import (
    AlreadyRegisteredError,
    HookPlacementError,
    InvalidPrototypeError,
    NotRegisteredError,
)
from .mapping import FieldMapping, compute_mappings
from .ports.hooks import Packable, Unpackable, Upgradable

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

logger = logging.getLogger("versioned_json.registry")

DEFAULT_VERSION_KEY = "Version"


# ── Compiled metadata ───────────────────────────────────────────────


@dataclass(frozen=True)
class VersionContext:
    """One historical shape with the copies that lead into it."""

    version: int
    shape: type[BaseModel]
    mappings: tuple[FieldMapping, ...] = ()
    upgrade: Callable[[Any, Any], Any] | None = None


@dataclass(frozen=True)
class MarshalPlan:
    """How a live value becomes the latest shape."""

    shape: type[BaseModel]
    mappings: tuple[FieldMapping, ...] = ()
    pack: Callable[[Any, Any], Any] | None = None
    version_field: str | None = None


@dataclass(frozen=True)
class UnmarshalPlan:
    """How the latest shape becomes a live value."""

    mappings: tuple[FieldMapping, ...] = ()
    unpack: Callable[[Any, Any], Any] | None = None


@dataclass(frozen=True)
class Entry:
    """Everything the encoder and decoder need for one live type."""

    live_type: type[BaseModel]
    latest_version: int
    versions: Mapping[int, VersionContext]
    marshal: MarshalPlan
    unmarshal: UnmarshalPlan

    @property
    def latest(self) -> VersionContext:
        return self.versions[self.latest_version]


# ── Registry ────────────────────────────────────────────────────────


class SchemaRegistry:
    """Maps live types to their compiled :class:`Entry`.

    Usage::

        registry = SchemaRegistry()
        registry.register(User, UserV1, UserV2, UserV3)

        entry = registry.entry_for(User)
        assert entry.latest_version == 3
    """

    def __init__(self, *, version_key: str = DEFAULT_VERSION_KEY) -> None:
        self._version_key = version_key
        self._entries: dict[type, Entry] = {}

    @property
    def version_key(self) -> str:
        """Name of the JSON member carrying the version number."""
        return self._version_key

    def register(
        self, live_type: type[BaseModel], *version_shapes: type[BaseModel]
    ) -> Entry:
        """Compile and store the version history of *live_type*.

        *version_shapes* are given oldest first and numbered from 1.  Either
        the whole entry is stored or, on error, the registry is unchanged.

        Raises:
            InvalidPrototypeError: bad prototype or reserved version field.
            AlreadyRegisteredError: *live_type* is already registered.
            FieldMappingError: incompatible fields between two models.
            HookPlacementError: ``pack``/``unpack`` on a non-latest shape.
        """
        entry = self._compile(live_type, version_shapes)
        self._entries[live_type] = entry
        logger.debug(
            "Registered %s with %d version(s)",
            live_type.__qualname__,
            entry.latest_version,
        )
        return entry

    def _compile(
        self, live_type: type[BaseModel], version_shapes: tuple[type[BaseModel], ...]
    ) -> Entry:
        _require_model(live_type)
        if not version_shapes:
            raise InvalidPrototypeError(
                f"{live_type.__qualname__}: at least one version prototype is required"
            )
        for shape in version_shapes:
            _require_model(shape)

        if _find_field(live_type, self._version_key) is not None:
            raise InvalidPrototypeError(
                f"{live_type.__qualname__}: field {self._version_key!r} is reserved "
                "for the version number"
            )
        if live_type in self._entries:
            raise AlreadyRegisteredError(live_type)

        latest_version = len(version_shapes)
        versions: dict[int, VersionContext] = {}
        previous: type[BaseModel] | None = None

        for version, shape in enumerate(version_shapes, start=1):
            if version < latest_version:
                _reject_latest_only_hooks(shape, version)

            upgrade = None
            if issubclass(shape, Upgradable):
                if previous is None:
                    logger.warning(
                        "%s.upgrade is never called: it is the first version",
                        shape.__qualname__,
                    )
                else:
                    upgrade = shape.upgrade

            mappings: tuple[FieldMapping, ...] = ()
            if previous is not None:
                mappings = tuple(compute_mappings(previous, shape))

            versions[version] = VersionContext(version, shape, mappings, upgrade)
            previous = shape

        latest = version_shapes[-1]
        return Entry(
            live_type=live_type,
            latest_version=latest_version,
            versions=MappingProxyType(versions),
            marshal=self._compile_marshal(live_type, latest),
            unmarshal=_compile_unmarshal(live_type, latest),
        )

    def _compile_marshal(
        self, live_type: type[BaseModel], latest: type[BaseModel]
    ) -> MarshalPlan:
        version_field = _serialized_field(latest, self._version_key)
        if (
            version_field is not None
            and latest.model_fields[version_field].annotation is not int
        ):
            raise InvalidPrototypeError(
                f"{latest.__qualname__}.{version_field} must be annotated as int "
                "to hold the version number"
            )

        if issubclass(latest, Packable):
            return MarshalPlan(latest, pack=latest.pack, version_field=version_field)

        mappings = compute_mappings(live_type, latest, honor_directives=False)
        return MarshalPlan(
            latest, mappings=tuple(mappings), version_field=version_field
        )

    # ── Lookup ──────────────────────────────────────────────────────

    def get(self, live_type: type) -> Entry | None:
        """Return the entry of *live_type*, or ``None``."""
        return self._entries.get(live_type)

    def entry_for(self, live_type: type) -> Entry:
        """Return the entry of *live_type*.

        Raises:
            NotRegisteredError: *live_type* was never registered.
        """
        entry = self._entries.get(live_type)
        if entry is None:
            raise NotRegisteredError(live_type)
        return entry

    def has(self, live_type: type) -> bool:
        """Return *True* if *live_type* is registered."""
        return live_type in self._entries

    def latest_version(self, live_type: type) -> int:
        """Return the latest version number of *live_type*."""
        return self.entry_for(live_type).latest_version

    def registered_types(self) -> list[type]:
        """Return all registered live types in registration order."""
        return list(self._entries.keys())

    def clear(self) -> None:
        """Remove all registrations (testing utility)."""
        self._entries.clear()
        logger.debug("Cleared schema registry")


def _compile_unmarshal(
    live_type: type[BaseModel], latest: type[BaseModel]
) -> UnmarshalPlan:
    if issubclass(latest, Unpackable):
        return UnmarshalPlan(unpack=latest.unpack)
    mappings = compute_mappings(latest, live_type, honor_directives=False)
    return UnmarshalPlan(mappings=tuple(mappings))


def _require_model(prototype: object) -> None:
    if not (isinstance(prototype, type) and issubclass(prototype, BaseModel)):
        raise InvalidPrototypeError(
            f"cannot register {prototype!r}: only pydantic models are allowed"
        )


def _reject_latest_only_hooks(shape: type[BaseModel], version: int) -> None:
    for name, capability in (("pack", Packable), ("unpack", Unpackable)):
        if issubclass(shape, capability):
            raise HookPlacementError(
                f"{shape.__qualname__} (version {version}) declares {name}, "
                "which is only allowed on the latest version"
            )


def _find_field(model: type[BaseModel], key: str) -> str | None:
    """Return the name of the field named or aliased *key*, if any."""
    for name, field in model.model_fields.items():
        if name == key or field.alias == key:
            return name
    return None


def _serialized_field(model: type[BaseModel], key: str) -> str | None:
    """Return the name of the field written to JSON as *key*, if any."""
    for name, field in model.model_fields.items():
        if (field.serialization_alias or field.alias or name) == key:
            return name
    return None


# ── Process-wide default ────────────────────────────────────────────

_default_registry = SchemaRegistry()


def get_registry() -> SchemaRegistry:
    """Return the process-wide registry used by the module-level helpers."""
    return _default_registry


def set_registry(registry: SchemaRegistry) -> None:
    """Replace the process-wide registry."""
    global _default_registry
    _default_registry = registry


def reset_registry() -> None:
    """Remove every registration from the process-wide registry (testing utility)."""
    _default_registry.clear()
