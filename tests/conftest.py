import asyncio
from collections import deque
from collections.abc import Callable, Sequence
from typing import Any

import pytest

from pokegallery.models.record import Record
from pokegallery.services.page_fetcher import PageResult


def make_record(n: int, *types: str, name: str | None = None) -> Record:
    """A record with id `n`, named mon-NNN unless a name is given."""
    return Record(name=name or f"mon-{n:03d}", id=n, categories=types or ("normal",))


def make_records(first: int, last: int) -> list[Record]:
    """Records with ids first..last inclusive."""
    return [make_record(n) for n in range(first, last + 1)]


class CatalogSource:
    """In-memory catalog answering slices, like a well-behaved list endpoint."""

    def __init__(self, records: Sequence[Record], report_total: bool = False) -> None:
        self.records = list(records)
        self.report_total = report_total
        self.calls: list[tuple[int, int]] = []

    async def fetch_page(self, limit: int, offset: int) -> PageResult:
        self.calls.append((limit, offset))
        await asyncio.sleep(0)
        return PageResult(
            records=tuple(self.records[offset : offset + limit]),
            total_count=len(self.records) if self.report_total else None,
        )


class ScriptedSource:
    """
    Replays queued outcomes in order.

    An outcome is a PageResult (returned) or an exception (raised). Gated
    outcomes wait for their event before completing. An empty script
    answers with empty pages.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[int, int]] = []
        self._script: deque[Any] = deque()

    def push(self, outcome: PageResult | BaseException) -> None:
        self._script.append((None, outcome))

    def push_page(self, records: Sequence[Record], total_count: int | None = None) -> None:
        self.push(PageResult(records=tuple(records), total_count=total_count))

    def push_gated(self, outcome: PageResult | BaseException) -> asyncio.Event:
        gate = asyncio.Event()
        self._script.append((gate, outcome))
        return gate

    async def fetch_page(self, limit: int, offset: int) -> PageResult:
        self.calls.append((limit, offset))
        gate, outcome = self._script.popleft() if self._script else (None, PageResult())
        if gate is not None:
            await gate.wait()
        else:
            await asyncio.sleep(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def record_factory() -> Callable[..., Record]:
    return make_record


@pytest.fixture
def records_factory() -> Callable[[int, int], list[Record]]:
    return make_records


@pytest.fixture
def catalog_factory() -> Callable[..., CatalogSource]:
    """Build a catalog of `size` records (ids 1..size)."""

    def _build(size: int, report_total: bool = False) -> CatalogSource:
        return CatalogSource(make_records(1, size), report_total=report_total)

    return _build


@pytest.fixture
def scripted_source() -> ScriptedSource:
    return ScriptedSource()


@pytest.fixture
def sample_pokemon_payload() -> dict:
    """Detail payload in the upstream API's nested shape."""
    return {
        "id": 6,
        "name": "charizard",
        "image": "https://img.test/6.png",
        "types": [{"type": {"name": "fire"}}, {"type": {"name": "flying"}}],
        "height": 17,
        "weight": 905,
        "stats": [
            {"stat": {"name": "hp"}, "base_stat": 78},
            {"stat": {"name": "attack"}, "base_stat": 84},
            {"stat": {"name": "special-attack"}, "base_stat": 109},
        ],
        "abilities": [
            {"ability": {"name": "blaze"}, "is_hidden": False},
            {"ability": {"name": "solar-power"}, "is_hidden": True},
        ],
        "moves": [{"move": {"name": "flamethrower"}}, {"move": {"name": "fly"}}],
    }


@pytest.fixture
def sample_list_payload() -> list[dict]:
    """List items mixing the three category reference shapes."""
    return [
        {"id": 1, "name": "bulbasaur", "image": "https://img.test/1.png", "types": ["grass"]},
        {"id": 4, "name": "charmander", "types": [{"type": {"name": "fire"}}]},
        {"id": 5, "name": "charmeleon", "types": [{"name": "Fire"}]},
        {"id": 7, "name": "squirtle", "types": ["water"]},
    ]
