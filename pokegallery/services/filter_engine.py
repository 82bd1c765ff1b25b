"""
Filter engine.

Derives the displayed subset of the master collection from a search term
and a category selector. The filtered view has no state of its own: it is
recomputed from the current inputs every time, and nothing here mutates
its arguments.

Both predicates are ANDed. An empty search term or empty category matches
everything, so `filter_records(master, "", "")` is the whole collection.
"""

from collections.abc import Sequence

from pokegallery.config import UNKNOWN_CATEGORY
from pokegallery.models.record import Record


def _fold(text: str) -> str:
    return text.casefold()


def matches_name(record: Record, search_term: str) -> bool:
    """Case-insensitive substring match of the search term against the name."""
    term = _fold(search_term)
    if not term:
        return True
    return term in record.name.casefold()


def matches_category(record: Record, category: str) -> bool:
    """
    True if any of the record's categories equals `category`, ignoring case.

    Categories were normalized at the boundary, so a bare string,
    `{"type": {"name"}}` and `{"name"}` reference all compare the same.
    """
    wanted = _fold(category)
    if not wanted:
        return True
    return any(c.casefold() == wanted for c in record.categories)


def filter_records(
    master: Sequence[Record],
    search_term: str = "",
    category: str = "",
) -> list[Record]:
    """
    Compute the filtered view.

    Args:
        master: Master collection
        search_term: Name substring, case-insensitive ("" matches all)
        category: Category name, case-insensitive ("" matches all)

    Returns:
        Matching records in master order
    """
    if not _fold(search_term) and not _fold(category):
        return list(master)
    return [r for r in master if matches_name(r, search_term) and matches_category(r, category)]


def is_filter_active(search_term: str, category: str) -> bool:
    """Whether either filter narrows the view."""
    return bool(_fold(search_term) or _fold(category))


def available_categories(master: Sequence[Record]) -> list[str]:
    """
    Category names present in the master collection, for the category selector.

    Lower-cased, de-duplicated and sorted. The unknown placeholder is left out.
    """
    names = {c.casefold() for r in master for c in r.categories}
    names.discard(UNKNOWN_CATEGORY)
    return sorted(names)
