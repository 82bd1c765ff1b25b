"""
Catalog record model.

Records arrive from the list endpoint in loosely defined shapes. This module
is the boundary normalization step: every payload is mapped into one
canonical `Record`, and the mapping never fails. Absent or malformed fields
become empty values; category references with no usable name become the
unknown placeholder.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pokegallery.config import UNKNOWN_CATEGORY

IdentityKey = int | str


def normalize_category(ref: Any) -> str:
    """
    Map a category reference to its canonical name.

    Accepted shapes (all equivalent):
        "fire"
        {"type": {"name": "fire"}}
        {"name": "fire"}

    Returns:
        The category name with surrounding whitespace removed, or
        UNKNOWN_CATEGORY when the reference carries no usable name.
    """
    if isinstance(ref, str):
        return ref.strip() or UNKNOWN_CATEGORY

    if isinstance(ref, Mapping):
        wrapped = ref.get("type")
        if isinstance(wrapped, Mapping):
            name = wrapped.get("name")
            if isinstance(name, str) and name.strip():
                return name.strip()
        name = ref.get("name")
        if isinstance(name, str) and name.strip():
            return name.strip()

    return UNKNOWN_CATEGORY


def _coerce_id(value: Any) -> int | None:
    # bool is an int subclass; a flag is never an id
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


@dataclass(frozen=True, slots=True)
class Record:
    """
    One catalog entry.

    Attributes:
        name: Display name, used for search (empty when absent)
        id: Numeric id when the payload carries one
        image: Image URL, None when absent
        categories: Canonical category names, in wire order
        payload: The original payload, passed through unmodified
                 (stats, abilities, moves and anything else)
    """

    name: str
    id: int | None = None
    image: str | None = None
    categories: tuple[str, ...] = ()
    payload: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def identity_key(self) -> IdentityKey:
        """Numeric id if present, else name. Used for deduplication."""
        return self.id if self.id is not None else self.name

    @classmethod
    def from_payload(cls, payload: Any) -> "Record":
        """
        Build a Record from a wire payload.

        A bare string is read as a record name. Anything that is neither a
        string nor a mapping yields a nameless record.
        """
        if isinstance(payload, str):
            return cls(name=payload.strip(), payload={"name": payload})
        if not isinstance(payload, Mapping):
            return cls(name="")

        name = payload.get("name")
        image = payload.get("image")
        types = payload.get("types")

        categories: tuple[str, ...] = ()
        if isinstance(types, list | tuple):
            categories = tuple(normalize_category(t) for t in types)

        return cls(
            name=name.strip() if isinstance(name, str) else "",
            id=_coerce_id(payload.get("id")),
            image=image if isinstance(image, str) and image else None,
            categories=categories,
            payload=payload,
        )
