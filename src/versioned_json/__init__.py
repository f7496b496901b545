"""versioned-json — versioned JSON encoding with stepwise schema upgrades.

Register a live pydantic model together with the historical shapes it was
stored as, then encode and decode through the registry::

    register(Post, PostV1, PostV2)

    post = decode(b'{"Author":"Dolores","NumberOfLikes":99}', Post)
    marshal(post)  # b'{"Version":2,"Author":"Dolores","Likes":99}'
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from .codec import PydanticJsonCodec
from .decoder import Decoder, detect_version
from .directives import NO_COPY, CopyFrom
from .encoder import Encoder
from .exceptions import (
    AlreadyRegisteredError,
    FieldMappingError,
    FieldTypeMismatchError,
    HookPlacementError,
    InvalidPrototypeError,
    MissingRenameTargetError,
    NegativeVersionError,
    NotRegisteredError,
    RegistrationError,
    UnsupportedVersionError,
    VersionedJSONError,
    VersionError,
)
from .mapping import FieldMapping, compute_mappings
from .model import VersionedModel
from .ports import IJsonCodec, Packable, Unpackable, Upgradable
from .registry import (
    DEFAULT_VERSION_KEY,
    Entry,
    MarshalPlan,
    SchemaRegistry,
    UnmarshalPlan,
    VersionContext,
    get_registry,
    reset_registry,
    set_registry,
)

if TYPE_CHECKING:
    from pydantic import BaseModel

LiveT = TypeVar("LiveT", bound="BaseModel")


def register(live_type: type[BaseModel], *version_shapes: type[BaseModel]) -> Entry:
    """Register *live_type* with the process-wide registry."""
    return get_registry().register(live_type, *version_shapes)


def marshal(live: BaseModel | None) -> bytes:
    """Encode *live* with the process-wide registry."""
    return Encoder(get_registry()).marshal(live)


def unmarshal(data: Any, target: BaseModel) -> None:
    """Decode *data* into *target* with the process-wide registry."""
    Decoder(get_registry()).unmarshal(data, target)


def decode(data: Any, live_type: type[LiveT]) -> LiveT | None:
    """Decode *data* into a new *live_type* with the process-wide registry."""
    return Decoder(get_registry()).decode(data, live_type)


__all__ = [
    "DEFAULT_VERSION_KEY",
    "NO_COPY",
    "AlreadyRegisteredError",
    "CopyFrom",
    "Decoder",
    "Encoder",
    "Entry",
    "FieldMapping",
    "FieldMappingError",
    "FieldTypeMismatchError",
    "HookPlacementError",
    "IJsonCodec",
    "InvalidPrototypeError",
    "MarshalPlan",
    "MissingRenameTargetError",
    "NegativeVersionError",
    "NotRegisteredError",
    "Packable",
    "PydanticJsonCodec",
    "RegistrationError",
    "SchemaRegistry",
    "UnmarshalPlan",
    "Unpackable",
    "UnsupportedVersionError",
    "Upgradable",
    "VersionContext",
    "VersionError",
    "VersionedJSONError",
    "VersionedModel",
    "compute_mappings",
    "decode",
    "detect_version",
    "get_registry",
    "marshal",
    "register",
    "reset_registry",
    "set_registry",
    "unmarshal",
]
