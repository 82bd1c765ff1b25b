"""
Collection merger.

Folds a fetched page into the master collection. The master collection is
unique by identity key at all times; this module is the only place that
enforces it.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from pokegallery.models.record import IdentityKey, Record


@dataclass(frozen=True, slots=True)
class MergeResult:
    """Outcome of a merge: the new master collection and how many records it gained."""

    records: tuple[Record, ...]
    inserted_count: int


def merge(master: Sequence[Record], page: Iterable[Record]) -> MergeResult:
    """
    Append the page's unseen records to the master collection.

    A record is admitted only if no record in `master`, and no record
    already admitted from this page, shares its identity key. Admitted
    records keep the order they were received in.

    Neither argument is mutated, so merging the same page twice against
    the same master gives the same result, and merging a page into a
    master that already contains it inserts nothing.

    Args:
        master: Current master collection
        page: Records of the fetched page

    Returns:
        MergeResult with the new master collection and the inserted count
    """
    seen: set[IdentityKey] = {record.identity_key for record in master}
    admitted: list[Record] = []

    for record in page:
        key = record.identity_key
        if key in seen:
            continue
        seen.add(key)
        admitted.append(record)

    return MergeResult(records=(*master, *admitted), inserted_count=len(admitted))
