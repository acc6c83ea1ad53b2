from typing import Annotated
import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse

from rentfinder.api.deps import get_api_client
from rentfinder.api.templating import (
    BHK_FILTER_OPTIONS,
    grid_context,
    long_date,
    similar_context,
    templates,
)
from rentfinder.clients.property_api import PropertyApiClient
from rentfinder.config import settings
from rentfinder.errors import ApiError
from rentfinder.schemas.listing import FilterCriteria, Listing
from rentfinder.services.card import ListingCard, format_rupees
from rentfinder.services.grid import ListingGrid
from rentfinder.services.search import SearchPanel
from rentfinder.services.similar import SimilarListingsPanel

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"])


async def load_initial_listings(client: PropertyApiClient) -> list[Listing]:
    """First page for the home grid. An unreachable API yields an empty grid."""
    try:
        page = await client.get_properties(page=1, limit=settings.listings_page_size)
    except ApiError as e:
        logger.error(f"Error fetching initial properties: {e}")
        return []
    return page.results


async def load_listing(client: PropertyApiClient, property_id: str) -> Listing | None:
    try:
        listing_id = int(property_id)
    except ValueError:
        return None

    try:
        return await client.get_property(listing_id)
    except ApiError as e:
        logger.warning(f"Error fetching property {listing_id}: {e}")
        return None


def listing_metadata(listing: Listing) -> dict:
    card = ListingCard(listing)
    return {
        "title": f"{listing.property_name} - {listing.location}",
        "description": (
            f"{listing.property_name} for rent in {listing.location}. "
            f"{card.bhk_display} {card.furnishing_display} property "
            f"available from {long_date(listing.available_from)}. "
            f"Rent: {format_rupees(listing.rent)}/month."
        ),
        "image": listing.image_urls[0] if listing.image_urls else settings.placeholder_image_url,
    }


@router.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    client: Annotated[PropertyApiClient, Depends(get_api_client)],
):
    listings = await load_initial_listings(client)
    grid = ListingGrid(client, listings)
    panel = SearchPanel(grid.handle_filters_change, bhk_options=BHK_FILTER_OPTIONS)

    return templates.TemplateResponse(
        request,
        "home.html",
        {"panel": panel.snapshot(), "loading": False, **grid_context(grid)},
    )


@router.get("/listings", response_class=HTMLResponse)
async def listings_fragment(
    request: Request,
    client: Annotated[PropertyApiClient, Depends(get_api_client)],
    location: str = "",
    bhk_types: list[str] | None = Query(None, alias="bhkType"),
):
    """Grid fragment for the given filters (used without a live session)."""
    criteria = FilterCriteria(location=location.strip(), bhk_types=bhk_types or [])

    if criteria.is_active:
        grid = ListingGrid(client, [])
        await grid.handle_filters_change(criteria)
    else:
        grid = ListingGrid(client, await load_initial_listings(client))

    return templates.TemplateResponse(request, "partials/grid.html", grid_context(grid))


@router.get("/property/{property_id}", response_class=HTMLResponse)
async def property_detail(
    request: Request,
    property_id: str,
    client: Annotated[PropertyApiClient, Depends(get_api_client)],
):
    listing = await load_listing(client, property_id)
    if listing is None:
        return templates.TemplateResponse(
            request,
            "not_found.html",
            {
                "title": "Property Not Found",
                "description": "The requested property could not be found.",
            },
            status_code=404,
        )

    similar = SimilarListingsPanel(client, listing)
    await similar.load()

    return templates.TemplateResponse(
        request,
        "property.html",
        {
            "listing": listing,
            "listing_id": listing.id,
            "card": ListingCard(listing),
            "meta": listing_metadata(listing),
            **similar_context(similar),
        },
    )


@router.get("/property/{property_id}/similar", response_class=HTMLResponse)
async def similar_fragment(
    request: Request,
    property_id: int,
    client: Annotated[PropertyApiClient, Depends(get_api_client)],
):
    similar = SimilarListingsPanel(client, Listing(id=property_id))
    await similar.load()
    return templates.TemplateResponse(
        request,
        "partials/similar.html",
        {"listing_id": property_id, **similar_context(similar)},
    )
