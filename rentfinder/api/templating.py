from datetime import date, datetime
from pathlib import Path

from fastapi.templating import Jinja2Templates

from rentfinder.config import settings
from rentfinder.schemas.listing import BhkType
from rentfinder.services.card import ListingCard, format_rupees
from rentfinder.services.grid import ListingGrid
from rentfinder.services.similar import SimilarListingsPanel

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

# Chip labels double as the bhkType values sent to the API
BHK_FILTER_OPTIONS = [choice.label for choice in BhkType]


def long_date(value: datetime | date | None) -> str:
    """e.g. '18 October 2026'."""
    if value is None:
        return "Not specified"
    if isinstance(value, datetime) and value.tzinfo is not None:
        value = value.astimezone()
    return f"{value.day} {value:%B %Y}"


templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["rupees"] = format_rupees
templates.env.filters["long_date"] = long_date
templates.env.globals["placeholder_image_url"] = settings.placeholder_image_url
templates.env.globals["carousel_interval_ms"] = int(settings.carousel_interval_seconds * 1000)


def grid_context(grid: ListingGrid) -> dict:
    return {"grid": grid, "cards": [ListingCard(listing) for listing in grid.listings]}


def similar_context(panel: SimilarListingsPanel) -> dict:
    return {"similar": panel, "similar_cards": [ListingCard(listing) for listing in panel.listings]}


def render_grid(grid: ListingGrid) -> str:
    return templates.get_template("partials/grid.html").render(grid_context(grid))
