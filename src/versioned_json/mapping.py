"""Field mapper — compiles the attribute copies between two models.

Mappings are computed once at registration time.  A field of the
destination model is copied from the source field with the same name, or
from the field named by a :class:`~versioned_json.directives.CopyFrom`
directive.  Both fields must be annotated with the same type.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, NamedTuple, TypeVar, get_origin

from .directives import find_directive
from .exceptions import FieldTypeMismatchError, MissingRenameTargetError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from pydantic import BaseModel

ModelT = TypeVar("ModelT", bound="BaseModel")

_ZERO_FACTORIES: dict[Any, Any] = {
    int: int,
    float: float,
    str: str,
    bool: bool,
    bytes: bytes,
    list: list,
    dict: dict,
    set: set,
    frozenset: frozenset,
    tuple: tuple,
}


class FieldMapping(NamedTuple):
    """Copy attribute ``source`` into attribute ``destination``."""

    source: str
    destination: str
    source_index: int
    destination_index: int


def compute_mappings(
    source: type[BaseModel],
    destination: type[BaseModel],
    *,
    honor_directives: bool = True,
) -> list[FieldMapping]:
    """Return the field copies from *source* into *destination*.

    With *honor_directives* the ``CopyFrom`` metadata of destination fields
    is applied; an explicit directive naming a missing source field is an
    error, a plain name without a counterpart is skipped.

    Raises:
        FieldTypeMismatchError: matched fields have different annotations.
        MissingRenameTargetError: a directive names an unknown source field.
    """
    source_fields = source.model_fields
    source_index = {name: i for i, name in enumerate(source_fields)}
    mappings: list[FieldMapping] = []

    for dst_index, (dst_name, dst_field) in enumerate(
        destination.model_fields.items()
    ):
        src_name = dst_name
        explicit = False
        if honor_directives:
            directive = find_directive(dst_field)
            if directive is not None:
                if directive.disabled:
                    continue
                src_name = directive.name
                explicit = True

        src_field = source_fields.get(src_name)
        if src_field is None:
            if explicit:
                raise MissingRenameTargetError(src_name, source, dst_name)
            continue

        if src_field.annotation != dst_field.annotation:
            raise FieldTypeMismatchError(
                src_name,
                source,
                src_field.annotation,
                dst_name,
                destination,
                dst_field.annotation,
            )

        mappings.append(
            FieldMapping(src_name, dst_name, source_index[src_name], dst_index)
        )

    mappings.sort(key=lambda m: m.source_index)
    return mappings


def copy_fields(
    source: BaseModel, destination: BaseModel, mappings: Iterable[FieldMapping]
) -> None:
    """Assign the mapped attributes of *source* onto *destination*."""
    for mapping in mappings:
        setattr(destination, mapping.destination, getattr(source, mapping.source))


def mapped_values(
    source: BaseModel, mappings: Iterable[FieldMapping]
) -> dict[str, Any]:
    """Collect the mapped attributes of *source* keyed by destination name."""
    return {m.destination: getattr(source, m.source) for m in mappings}


def zero_value(annotation: Any) -> Any:
    """Return the empty value of *annotation*, or ``None`` if it has none."""
    factory = _ZERO_FACTORIES.get(get_origin(annotation) or annotation)
    return factory() if factory is not None else None


def new_instance(model: type[ModelT], values: dict[str, Any] | None = None) -> ModelT:
    """Build an unvalidated *model* instance from *values*.

    Fields missing from *values* take their declared default; required
    fields without one take :func:`zero_value` of their annotation.
    """
    values = dict(values or {})
    for name, field in model.model_fields.items():
        if name not in values and field.is_required():
            values[name] = zero_value(field.annotation)
    return model.model_construct(**values)
