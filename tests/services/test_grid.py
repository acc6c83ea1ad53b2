"""
Tests for the listing grid: display states and latest-write-wins fetching.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest
import respx
from httpx import Response

from rentfinder.clients.property_api import UNEXPECTED_RESPONSE, PropertyApiClient
from rentfinder.config import settings
from rentfinder.errors import ApiError
from rentfinder.schemas.listing import FilterCriteria, Listing, ListingPage
from rentfinder.services.grid import (
    NONE_AVAILABLE_MESSAGE,
    NO_MATCHES_MESSAGE,
    GridState,
    ListingGrid,
)


def page_of(*ids: int) -> ListingPage:
    return ListingPage(results=[Listing(id=i, property_name=f"Home {i}") for i in ids])


class TestGridStates:
    """Tests for what the grid shows."""

    def test_initial_listings_show_content(self):
        """Server-rendered listings are shown straight away."""
        grid = ListingGrid(AsyncMock(), [Listing(id=1)])

        assert grid.state == GridState.CONTENT

    def test_no_initial_listings_without_filters(self):
        """An empty first page says nothing is available."""
        grid = ListingGrid(AsyncMock(), [])

        assert grid.state == GridState.EMPTY
        assert grid.empty_message == NONE_AVAILABLE_MESSAGE
        assert grid.show_clear_filters is False

    @pytest.mark.asyncio
    async def test_no_matches_with_filters(self):
        """Active filters with no results offer to clear them."""
        client = AsyncMock()
        client.get_properties.return_value = page_of()
        grid = ListingGrid(client, [Listing(id=1)])

        await grid.handle_filters_change(FilterCriteria(bhk_types=["4BHK"]))

        assert grid.state == GridState.EMPTY
        assert grid.empty_message == NO_MATCHES_MESSAGE
        assert grid.show_clear_filters is True

    @pytest.mark.asyncio
    async def test_fetch_requests_first_page(self):
        """Filtered fetches always ask for page one at the configured size."""
        client = AsyncMock()
        client.get_properties.return_value = page_of(5, 6)
        grid = ListingGrid(client, [], page_size=12)

        await grid.handle_filters_change(FilterCriteria(location="Madhapur", bhk_types=["2BHK"]))

        client.get_properties.assert_awaited_once_with(
            location="Madhapur", bhk_types=["2BHK"], page=1, limit=12
        )
        assert [listing.id for listing in grid.listings] == [5, 6]
        assert grid.state == GridState.CONTENT

    @pytest.mark.asyncio
    async def test_loading_is_notified_before_results(self):
        """Observers see the loading state, then the results."""
        states = []
        client = AsyncMock()
        client.get_properties.return_value = page_of(1)
        grid = ListingGrid(client, [])

        async def on_change():
            states.append(grid.state)

        grid.on_change = on_change
        await grid.handle_filters_change(FilterCriteria(location="Kondapur"))

        assert states == [GridState.LOADING, GridState.CONTENT]


class TestGridErrors:
    """Tests for failed fetches."""

    @pytest.mark.asyncio
    async def test_error_clears_listings(self):
        """A failed fetch shows the error instead of stale listings."""
        client = AsyncMock()
        client.get_properties.side_effect = ApiError("HTTP error! status: 500", 500)
        grid = ListingGrid(client, [Listing(id=1)])

        await grid.handle_filters_change(FilterCriteria(location="Madhapur"))

        assert grid.state == GridState.ERROR
        assert grid.error == "HTTP error! status: 500"
        assert grid.listings == []
        assert grid.loading is False

    @pytest.mark.asyncio
    async def test_retry_refetches_same_filters(self):
        """Retry repeats the last request and recovers on success."""
        client = AsyncMock()
        client.get_properties.side_effect = [ApiError("down"), page_of(3)]
        grid = ListingGrid(client, [])

        await grid.handle_filters_change(FilterCriteria(location="Madhapur"))
        await grid.retry()

        assert client.get_properties.await_count == 2
        assert client.get_properties.await_args.kwargs["location"] == "Madhapur"
        assert grid.state == GridState.CONTENT


    @pytest.mark.asyncio
    @respx.mock
    async def test_malformed_body_leaves_grid_recoverable(self):
        """A 2xx reply that cannot be parsed ends loading and offers retry."""
        respx.get(f"{settings.api_base_url}/properties").mock(
            side_effect=[
                Response(200, text="<html>gateway</html>"),
                Response(200, json={"results": [{"propertyName": "x"}]}),
            ]
        )

        client = PropertyApiClient()
        try:
            grid = ListingGrid(client, [Listing(id=1)])

            await grid.handle_filters_change(FilterCriteria(location="Madhapur"))
            assert grid.state == GridState.ERROR
            assert grid.loading is False
            assert grid.error == UNEXPECTED_RESPONSE

            await grid.retry()
            assert grid.state == GridState.ERROR
            assert grid.loading is False
        finally:
            await client.close()

class TestLatestWriteWins:
    """Only the newest request may change the grid."""

    @pytest.mark.asyncio
    async def test_slow_older_response_is_dropped(self):
        """An older response arriving last must not overwrite newer results."""
        first_started = asyncio.Event()
        release_first = asyncio.Event()

        async def get_properties(location, **kwargs):
            if location == "Madhapur":
                first_started.set()
                await release_first.wait()
                return page_of(1)
            return page_of(2)

        client = AsyncMock()
        client.get_properties.side_effect = get_properties
        grid = ListingGrid(client, [])

        slow = asyncio.create_task(grid.handle_filters_change(FilterCriteria(location="Madhapur")))
        await first_started.wait()
        await grid.handle_filters_change(FilterCriteria(location="Kondapur"))
        release_first.set()
        await slow

        assert [listing.id for listing in grid.listings] == [2]
        assert grid.loading is False

    @pytest.mark.asyncio
    async def test_stale_error_is_dropped(self):
        """An older failure arriving last must not replace newer results."""
        release_first = asyncio.Event()

        async def get_properties(location, **kwargs):
            if location == "Madhapur":
                await release_first.wait()
                raise ApiError("timeout")
            return page_of(9)

        client = AsyncMock()
        client.get_properties.side_effect = get_properties
        grid = ListingGrid(client, [])

        slow = asyncio.create_task(grid.handle_filters_change(FilterCriteria(location="Madhapur")))
        await asyncio.sleep(0)
        await grid.handle_filters_change(FilterCriteria(location="Kondapur"))
        release_first.set()
        await slow

        assert grid.error == ""
        assert [listing.id for listing in grid.listings] == [9]


class TestClearingFilters:
    """Inactive filters restore the first page without a request."""

    @pytest.mark.asyncio
    async def test_restores_initial_listings_without_network(self):
        """Clearing goes back to the server-rendered listings."""
        client = AsyncMock()
        client.get_properties.return_value = page_of(7)
        initial = [Listing(id=1), Listing(id=2)]
        grid = ListingGrid(client, initial)

        await grid.handle_filters_change(FilterCriteria(location="Madhapur"))
        await grid.clear_filters()

        assert client.get_properties.await_count == 1
        assert [listing.id for listing in grid.listings] == [1, 2]
        assert grid.show_clear_filters is False

    @pytest.mark.asyncio
    async def test_clearing_supersedes_in_flight_fetch(self):
        """A fetch still in flight when filters clear is ignored."""
        release = asyncio.Event()

        async def get_properties(**kwargs):
            await release.wait()
            return page_of(7)

        client = AsyncMock()
        client.get_properties.side_effect = get_properties
        grid = ListingGrid(client, [Listing(id=1)])

        slow = asyncio.create_task(grid.handle_filters_change(FilterCriteria(location="Madhapur")))
        await asyncio.sleep(0)
        await grid.clear_filters()
        release.set()
        await slow

        assert [listing.id for listing in grid.listings] == [1]
        assert grid.state == GridState.CONTENT
