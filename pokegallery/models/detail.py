"""
Detail view normalization.

The detail endpoint returns stats, abilities and moves in several shapes
depending on the upstream source. These helpers map each of them into one
canonical form. All of them are total: malformed entries become the
unknown placeholder instead of raising.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pokegallery.config import DEFAULT_PRIMARY_CATEGORY, UNKNOWN_CATEGORY
from pokegallery.models.record import Record


@dataclass(frozen=True, slots=True)
class StatEntry:
    name: str
    base_value: int


@dataclass(frozen=True, slots=True)
class AbilityEntry:
    name: str
    is_hidden: bool = False


def _named(entry: Any, wrapper_key: str) -> str:
    """Name of a `"x"`, `{wrapper_key: {"name": "x"}}` or `{"name": "x"}` entry."""
    if isinstance(entry, str):
        return entry.strip() or UNKNOWN_CATEGORY
    if isinstance(entry, Mapping):
        wrapped = entry.get(wrapper_key)
        if isinstance(wrapped, Mapping):
            name = wrapped.get("name")
            if isinstance(name, str) and name.strip():
                return name.strip()
        name = entry.get("name")
        if isinstance(name, str) and name.strip():
            return name.strip()
    return UNKNOWN_CATEGORY


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int | float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(float(value))
        except ValueError:
            return 0
    return 0


def normalize_stats(raw: Any) -> list[StatEntry]:
    """
    Normalize base stats.

    Accepts a list of `{"stat": {"name"}, "base_stat"}` / `{"name", "base_stat"}`
    entries, or a `{name: value}` mapping.
    """
    if isinstance(raw, Mapping):
        return [StatEntry(name=str(name), base_value=_as_int(value)) for name, value in raw.items()]
    if isinstance(raw, list):
        stats = []
        for entry in raw:
            value = entry.get("base_stat", 0) if isinstance(entry, Mapping) else 0
            stats.append(StatEntry(name=_named(entry, "stat"), base_value=_as_int(value)))
        return stats
    return []


def normalize_abilities(raw: Any) -> list[AbilityEntry]:
    """Normalize abilities, keeping the hidden-ability flag."""
    if not isinstance(raw, list):
        return []
    return [
        AbilityEntry(
            name=_named(entry, "ability"),
            is_hidden=isinstance(entry, Mapping) and bool(entry.get("is_hidden", False)),
        )
        for entry in raw
    ]


def normalize_moves(raw: Any) -> list[str]:
    """Normalize moves to a list of names."""
    if not isinstance(raw, list):
        return []
    return [_named(entry, "move") for entry in raw]


@dataclass(frozen=True, slots=True)
class RecordDetail:
    """
    A single record as rendered by the detail view.

    Attributes:
        record: The normalized catalog record
        stats: Base stats in wire order
        abilities: Abilities with their hidden flag
        moves: Move names in wire order
        height_m: Height in metres (wire value is decimetres)
        weight_kg: Weight in kilograms (wire value is hectograms)
    """

    record: Record
    stats: tuple[StatEntry, ...] = ()
    abilities: tuple[AbilityEntry, ...] = ()
    moves: tuple[str, ...] = ()
    height_m: float | None = None
    weight_kg: float | None = None

    @property
    def primary_category(self) -> str:
        """First category, used for theming. Falls back to "normal"."""
        if self.record.categories and self.record.categories[0] != UNKNOWN_CATEGORY:
            return self.record.categories[0]
        return DEFAULT_PRIMARY_CATEGORY

    @property
    def max_stat_value(self) -> int:
        """Scale for stat bars: the largest stat, never below 100."""
        return max([s.base_value for s in self.stats] + [100])

    @classmethod
    def from_payload(cls, payload: Any) -> "RecordDetail":
        record = Record.from_payload(payload)
        data: Mapping[str, Any] = payload if isinstance(payload, Mapping) else {}

        height = _as_int(data.get("height"))
        weight = _as_int(data.get("weight"))

        return cls(
            record=record,
            stats=tuple(normalize_stats(data.get("stats"))),
            abilities=tuple(normalize_abilities(data.get("abilities"))),
            moves=tuple(normalize_moves(data.get("moves"))),
            height_m=height / 10 if height else None,
            weight_kg=weight / 10 if weight else None,
        )
