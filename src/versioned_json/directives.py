"""Field directives attached to version shapes through ``Annotated`` metadata."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pydantic.fields import FieldInfo


@dataclass(frozen=True)
class CopyFrom:
    """Name the field of the *immediately preceding* version to copy from.

    Usage::

        class PostV2(BaseModel):
            Likes: Annotated[int, CopyFrom("NumberOfLikes")] = 0
            Score: Annotated[str, NO_COPY] = ""  # filled by ``upgrade``

    An empty name disables copying for the field entirely.
    """

    name: str

    @property
    def disabled(self) -> bool:
        return self.name == ""


NO_COPY = CopyFrom("")


def find_directive(field: FieldInfo) -> CopyFrom | None:
    """Return the ``CopyFrom`` directive of *field*, if it carries one."""
    for item in field.metadata:
        if isinstance(item, CopyFrom):
            return item
    return None
