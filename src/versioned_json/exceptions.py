"""Registration and runtime exceptions for versioned-json."""

from __future__ import annotations


class VersionedJSONError(Exception):
    """Root exception for the entire versioned-json package."""


class RegistrationError(VersionedJSONError):
    """Base class for all errors raised while registering a live type."""


class AlreadyRegisteredError(RegistrationError):
    """Raised when a live type is registered a second time."""

    def __init__(self, live_type: type) -> None:
        self.live_type = live_type
        super().__init__(f"type already registered: {live_type.__qualname__}")


class InvalidPrototypeError(RegistrationError):
    """Raised when a live type or version shape cannot be used as a prototype.

    Covers non-model prototypes, an empty version list and the reserved
    version field.
    """


class HookPlacementError(RegistrationError):
    """Raised when ``pack``/``unpack`` is declared on a non-latest shape."""


class FieldMappingError(RegistrationError):
    """Base class for errors computing the field copies between two models."""


class FieldTypeMismatchError(FieldMappingError):
    """Raised when two fields matched by name have different annotations."""

    def __init__(
        self,
        source_field: str,
        source_model: type,
        source_type: object,
        destination_field: str,
        destination_model: type,
        destination_type: object,
    ) -> None:
        self.source_field = source_field
        self.destination_field = destination_field
        self.source_type = source_type
        self.destination_type = destination_type

        src_model = source_model.__qualname__
        dst_model = destination_model.__qualname__
        if source_field != destination_field:
            msg = (
                f"cannot copy field {source_field} ({describe_type(source_type)}) "
                f"in {src_model} to field {destination_field} "
                f"({describe_type(destination_type)}) in {dst_model} "
                "because they have different types"
            )
        else:
            msg = (
                f"field {source_field} has different types in "
                f"{src_model} ({describe_type(source_type)}) and "
                f"{dst_model} ({describe_type(destination_type)})"
            )
        super().__init__(msg)


class MissingRenameTargetError(FieldMappingError):
    """Raised when a ``CopyFrom`` directive names a field the source lacks."""

    def __init__(
        self, source_field: str, source_model: type, destination_field: str
    ) -> None:
        self.source_field = source_field
        self.destination_field = destination_field
        super().__init__(
            f"cannot copy field {source_field} into {destination_field}: "
            f"{source_model.__qualname__} has no field {source_field}"
        )


class NotRegisteredError(VersionedJSONError):
    """Raised when encoding or decoding a type that was never registered."""

    def __init__(self, live_type: type) -> None:
        self.live_type = live_type
        super().__init__(f"type not registered: {live_type.__qualname__}")


class VersionError(VersionedJSONError):
    """Base class for version tags that cannot be decoded."""


class NegativeVersionError(VersionError):
    """Raised when the version tag of the input is below zero."""

    def __init__(self, version: int) -> None:
        self.version = version
        super().__init__(f"cannot unmarshal object: negative version number {version}")


class UnsupportedVersionError(VersionError):
    """Raised when the version tag is above the latest registered version."""

    def __init__(self, live_type: type, version: int, latest_version: int) -> None:
        self.live_type = live_type
        self.version = version
        self.latest_version = latest_version
        super().__init__(
            f"unsupported version for {live_type.__qualname__}: {version} "
            f"(latest is {latest_version})"
        )


def describe_type(annotation: object) -> str:
    """Human readable name of a field annotation for error messages."""
    if isinstance(annotation, type) and not hasattr(annotation, "__origin__"):
        return annotation.__qualname__
    return repr(annotation).replace("typing.", "")
