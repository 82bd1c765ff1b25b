"""Tests for single-record detail fetching."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest
import respx

from pokegallery.models.failure import (
    HttpStatusError,
    RecordNotFoundError,
    ShapeError,
    TransportError,
)
from pokegallery.services.detail_fetcher import detail_url, fetch_record_detail

BASE_URL = "https://catalog.test"


class TestDetailUrl:
    def test_numeric_id(self) -> None:
        """Ids are appended to the list path."""
        assert detail_url(6, BASE_URL) == f"{BASE_URL}/pokemons/6"

    def test_name_is_escaped(self) -> None:
        """Names are path-escaped."""
        assert detail_url("mr mime/x", BASE_URL) == f"{BASE_URL}/pokemons/mr%20mime%2Fx"


class TestFetchRecordDetail:
    @respx.mock
    async def test_fetches_and_normalizes(self, sample_pokemon_payload: dict) -> None:
        """A successful fetch returns the normalized detail."""
        respx.get(f"{BASE_URL}/pokemons/charizard").mock(
            return_value=httpx.Response(200, json=sample_pokemon_payload)
        )

        async with httpx.AsyncClient() as client:
            detail = await fetch_record_detail(client, "charizard", base_url=BASE_URL)

        assert detail.record.id == 6
        assert detail.primary_category == "fire"
        assert [a.name for a in detail.abilities] == ["blaze", "solar-power"]

    @respx.mock
    async def test_retries_then_succeeds(self, sample_pokemon_payload: dict) -> None:
        """Transient failures are retried within the attempt budget."""
        route = respx.get(f"{BASE_URL}/pokemons/6").mock(
            side_effect=[
                httpx.Response(503),
                httpx.ConnectError("reset"),
                httpx.Response(200, json=sample_pokemon_payload),
            ]
        )

        async with httpx.AsyncClient() as client:
            detail = await fetch_record_detail(
                client, 6, base_url=BASE_URL, max_attempts=3, base_delay=0
            )

        assert route.call_count == 3
        assert detail.record.name == "charizard"

    @respx.mock
    async def test_gives_up_after_max_attempts(self) -> None:
        """The last failure is raised once attempts run out."""
        route = respx.get(f"{BASE_URL}/pokemons/6").mock(return_value=httpx.Response(500))

        async with httpx.AsyncClient() as client:
            with pytest.raises(HttpStatusError, match="status: 500"):
                await fetch_record_detail(
                    client, 6, base_url=BASE_URL, max_attempts=3, base_delay=0
                )

        assert route.call_count == 3

    @respx.mock
    async def test_zero_attempts_still_tries_once(self) -> None:
        """A non-positive attempt budget means a single try, whose failure is raised."""
        route = respx.get(f"{BASE_URL}/pokemons/6").mock(return_value=httpx.Response(503))

        async with httpx.AsyncClient() as client:
            with pytest.raises(HttpStatusError, match="status: 503"):
                await fetch_record_detail(
                    client, 6, base_url=BASE_URL, max_attempts=0, base_delay=0
                )

        assert route.call_count == 1

    @respx.mock
    async def test_backoff_grows_per_attempt(self) -> None:
        """The wait after attempt n is n times the delay unit."""
        respx.get(f"{BASE_URL}/pokemons/6").mock(return_value=httpx.Response(500))

        async with httpx.AsyncClient() as client:
            with (
                patch("pokegallery.services.detail_fetcher.asyncio.sleep", new_callable=AsyncMock) as mock_sleep,
                pytest.raises(HttpStatusError),
            ):
                await fetch_record_detail(
                    client, 6, base_url=BASE_URL, max_attempts=3, base_delay=0.5
                )

        assert [c.args[0] for c in mock_sleep.await_args_list] == [0.5, 1.0]

    @respx.mock
    async def test_not_found_is_not_retried(self) -> None:
        """A 404 is final."""
        route = respx.get(f"{BASE_URL}/pokemons/missingno").mock(
            return_value=httpx.Response(404)
        )

        async with httpx.AsyncClient() as client:
            with pytest.raises(RecordNotFoundError, match="missingno"):
                await fetch_record_detail(
                    client, "missingno", base_url=BASE_URL, max_attempts=3, base_delay=0
                )

        assert route.call_count == 1

    @respx.mock
    async def test_transport_failure(self) -> None:
        """Connection failures surface as transport errors."""
        respx.get(f"{BASE_URL}/pokemons/6").mock(side_effect=httpx.ConnectError("refused"))

        async with httpx.AsyncClient() as client:
            with pytest.raises(TransportError):
                await fetch_record_detail(
                    client, 6, base_url=BASE_URL, max_attempts=1, base_delay=0
                )

    @respx.mock
    async def test_list_body_is_a_shape_error(self) -> None:
        """A detail body must be an object."""
        respx.get(f"{BASE_URL}/pokemons/6").mock(return_value=httpx.Response(200, json=[1, 2]))

        async with httpx.AsyncClient() as client:
            with pytest.raises(ShapeError):
                await fetch_record_detail(
                    client, 6, base_url=BASE_URL, max_attempts=1, base_delay=0
                )
