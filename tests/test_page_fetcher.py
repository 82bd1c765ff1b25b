"""Tests for the paginated list fetcher."""

import httpx
import pytest
import respx

from pokegallery.models.failure import HttpStatusError, ShapeError, TransportError
from pokegallery.services.page_fetcher import PageFetcher, build_client, parse_page_body

BASE_URL = "https://catalog.test"
LIST_URL = f"{BASE_URL}/pokemons"


@pytest.fixture
async def fetcher():
    async with httpx.AsyncClient() as client:
        yield PageFetcher(client, base_url=BASE_URL, items_path="/pokemons")


class TestParsePageBody:
    def test_bare_list(self, sample_list_payload: list[dict]) -> None:
        """A bare list is a page without a total count."""
        page = parse_page_body(sample_list_payload)

        assert [r.name for r in page.records] == [
            "bulbasaur",
            "charmander",
            "charmeleon",
            "squirtle",
        ]
        assert page.total_count is None
        assert page.malformed is False

    @pytest.mark.parametrize("key", ["results", "pokemons", "data", "items"])
    def test_keyed_object(self, key: str, sample_list_payload: list[dict]) -> None:
        """Each known list key is accepted."""
        page = parse_page_body({key: sample_list_payload})

        assert len(page.records) == 4

    @pytest.mark.parametrize("key", ["count", "total", "totalCount", "total_count"])
    def test_total_count_keys(self, key: str) -> None:
        """Each known total key is read."""
        page = parse_page_body({"results": [], key: 1302})

        assert page.total_count == 1302

    @pytest.mark.parametrize("value", ["1302", -1, True, 12.5, None])
    def test_unusable_total_count_is_ignored(self, value: object) -> None:
        """Only non-negative integers count as totals."""
        assert parse_page_body({"results": [], "count": value}).total_count is None

    def test_category_shapes_normalized(self, sample_list_payload: list[dict]) -> None:
        """Records on a page carry canonical category names."""
        page = parse_page_body(sample_list_payload)

        assert page.records[1].categories == ("fire",)
        assert page.records[2].categories == ("Fire",)

    @pytest.mark.parametrize("body", [{"message": "ok"}, {"results": "nope"}, "text", 42, None])
    def test_unknown_shape_raises(self, body: object) -> None:
        """Bodies matching no known shape are rejected."""
        with pytest.raises(ShapeError):
            parse_page_body(body)


class TestPageFetcher:
    @respx.mock
    async def test_sends_limit_and_offset(self, fetcher: PageFetcher) -> None:
        """The request carries limit and offset query parameters."""
        route = respx.get(LIST_URL).mock(return_value=httpx.Response(200, json=[]))

        await fetcher.fetch_page(25, 50)

        params = route.calls.last.request.url.params
        assert params["limit"] == "25"
        assert params["offset"] == "50"

    @respx.mock
    async def test_fetches_bare_list(
        self, fetcher: PageFetcher, sample_list_payload: list[dict]
    ) -> None:
        """A bare list response becomes a page of records."""
        respx.get(LIST_URL).mock(return_value=httpx.Response(200, json=sample_list_payload))

        page = await fetcher.fetch_page(10, 0)

        assert [r.id for r in page.records] == [1, 4, 5, 7]
        assert page.total_count is None

    @respx.mock
    async def test_fetches_keyed_object_with_total(
        self, fetcher: PageFetcher, sample_list_payload: list[dict]
    ) -> None:
        """A keyed response carries its total count."""
        respx.get(LIST_URL).mock(
            return_value=httpx.Response(200, json={"count": 4, "results": sample_list_payload})
        )

        page = await fetcher.fetch_page(10, 0)

        assert len(page.records) == 4
        assert page.total_count == 4

    @respx.mock
    async def test_unrecognized_shape_is_empty_page(self, fetcher: PageFetcher) -> None:
        """An unknown body shape is an empty page, not an error."""
        respx.get(LIST_URL).mock(return_value=httpx.Response(200, json={"status": "ok"}))

        page = await fetcher.fetch_page(10, 0)

        assert page.records == ()
        assert page.malformed is True

    @respx.mock
    async def test_invalid_json_is_empty_page(self, fetcher: PageFetcher) -> None:
        """A non-JSON body is an empty page, not an error."""
        respx.get(LIST_URL).mock(return_value=httpx.Response(200, text="<html>oops</html>"))

        page = await fetcher.fetch_page(10, 0)

        assert page.records == ()
        assert page.malformed is True

    @respx.mock
    async def test_server_error_raises_status_error(self, fetcher: PageFetcher) -> None:
        """Non-success statuses raise with the status attached."""
        respx.get(LIST_URL).mock(return_value=httpx.Response(500, text="upstream down"))

        with pytest.raises(HttpStatusError, match=r"status: 500") as exc_info:
            await fetcher.fetch_page(10, 20)

        assert exc_info.value.status == 500

    @respx.mock
    async def test_connection_failure_raises_transport_error(self, fetcher: PageFetcher) -> None:
        """Transport failures are wrapped."""
        respx.get(LIST_URL).mock(side_effect=httpx.ConnectError("connection refused"))

        with pytest.raises(TransportError, match="connection refused") as exc_info:
            await fetcher.fetch_page(10, 0)

        assert exc_info.value.status is None

    async def test_url_joins_base_and_path(self) -> None:
        """Trailing slashes on the base URL are tolerated."""
        async with httpx.AsyncClient() as client:
            fetcher = PageFetcher(client, base_url="https://catalog.test/", items_path="/pokemons")

            assert fetcher.url == LIST_URL


class TestBuildClient:
    async def test_client_headers(self) -> None:
        """The shared client asks for JSON."""
        client = build_client(timeout=3.0)
        try:
            assert client.headers["Accept"] == "application/json"
            assert client.timeout.read == 3.0
        finally:
            await client.aclose()
