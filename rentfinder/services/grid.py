import logging
from enum import Enum
from typing import Awaitable, Callable

from rentfinder.clients.property_api import PropertyApiClient
from rentfinder.config import settings
from rentfinder.errors import ApiError
from rentfinder.schemas.listing import FilterCriteria, Listing

logger = logging.getLogger(__name__)

NO_MATCHES_MESSAGE = "No properties found matching your criteria."
NONE_AVAILABLE_MESSAGE = "No properties available at the moment."


class GridState(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    EMPTY = "empty"
    CONTENT = "content"


class ListingGrid:
    """Listings shown under the search panel.

    Starts from the server-rendered first page. Active filters trigger a fetch;
    inactive filters restore the first page without touching the network.
    Only the latest request is allowed to update what is shown.
    """

    def __init__(
        self,
        client: PropertyApiClient,
        initial_listings: list[Listing],
        page_size: int | None = None,
        on_change: Callable[[], Awaitable[None]] | None = None,
    ):
        self.client = client
        self.initial_listings = list(initial_listings)
        self.page_size = page_size or settings.listings_page_size
        self.on_change = on_change

        self.listings: list[Listing] = list(initial_listings)
        self.filters = FilterCriteria()
        self.loading = False
        self.error = ""
        self._request_seq = 0

    @property
    def state(self) -> GridState:
        if self.loading:
            return GridState.LOADING
        if self.error:
            return GridState.ERROR
        if not self.listings:
            return GridState.EMPTY
        return GridState.CONTENT

    @property
    def empty_message(self) -> str:
        return NO_MATCHES_MESSAGE if self.filters.is_active else NONE_AVAILABLE_MESSAGE

    @property
    def show_clear_filters(self) -> bool:
        return self.filters.is_active

    async def _notify(self):
        if self.on_change is not None:
            await self.on_change()

    async def handle_filters_change(self, filters: FilterCriteria):
        self.filters = filters

        if filters.is_active:
            await self.fetch(filters)
            return

        # Supersede any fetch still in flight
        self._request_seq += 1
        self.listings = list(self.initial_listings)
        self.error = ""
        self.loading = False
        await self._notify()

    async def fetch(self, filters: FilterCriteria):
        self._request_seq += 1
        seq = self._request_seq

        self.loading = True
        self.error = ""
        await self._notify()

        try:
            page = await self.client.get_properties(
                location=filters.location,
                bhk_types=filters.bhk_types,
                page=1,
                limit=self.page_size,
            )
        except ApiError as e:
            if seq != self._request_seq:
                return
            logger.warning(f"Fetching listings for {filters.model_dump()} failed: {e}")
            self.error = e.message or "Failed to fetch properties"
            self.listings = []
            self.loading = False
            await self._notify()
            return

        if seq != self._request_seq:
            logger.debug(f"Dropping stale listing response #{seq}")
            return

        self.listings = page.results
        self.loading = False
        await self._notify()

    async def retry(self):
        await self.fetch(self.filters)

    async def clear_filters(self):
        await self.handle_filters_change(FilterCriteria())
