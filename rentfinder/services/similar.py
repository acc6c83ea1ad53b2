import logging

from rentfinder.clients.property_api import PropertyApiClient
from rentfinder.config import settings
from rentfinder.errors import ApiError
from rentfinder.schemas.listing import Listing

logger = logging.getLogger(__name__)

SIMILAR_ERROR_MESSAGE = "Failed to fetch similar properties"
FALLBACK_NOTICE = "Showing similar BHK type from other locations."


class SimilarListingsPanel:
    """Listings the API considers similar to the one being viewed."""

    def __init__(
        self,
        client: PropertyApiClient,
        listing: Listing,
        max_results: int | None = None,
    ):
        self.client = client
        self.listing = listing
        self.max_results = max_results or settings.similar_max_results

        self.listings: list[Listing] = []
        self.is_fallback = False
        self.loading = False
        self.error = ""

    async def load(self):
        self.loading = True
        self.error = ""
        try:
            result = await self.client.get_similar_properties(self.listing.id, self.max_results)
        except ApiError as e:
            logger.warning(f"Similar listings for {self.listing.id} failed: {e}")
            self.error = SIMILAR_ERROR_MESSAGE
            self.listings = []
            self.is_fallback = False
            return
        finally:
            self.loading = False

        self.is_fallback = result.is_fallback
        self.listings = [
            item
            for item in result.properties
            if item.id != self.listing.id and item.has_images
        ][: self.max_results]

    @property
    def fallback_notice(self) -> str | None:
        return FALLBACK_NOTICE if self.is_fallback and self.listings else None
