"""
Presentation logic for a listing card: the image carousel and the labels
derived from server data.
"""

import asyncio
from datetime import date, datetime

from rentfinder.config import settings
from rentfinder.schemas.listing import Listing


def _local_date(value: datetime | date) -> date:
    """Calendar day of ``value`` in local time, time-of-day discarded."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value


def is_ready_to_move(available_from: datetime | date | None, today: date | None = None) -> bool:
    """True when the listing is available today or earlier."""
    if available_from is None:
        return False
    today = today or date.today()
    return _local_date(available_from) <= today


def days_ago_label(updated_at: datetime | date | None, today: date | None = None) -> str:
    if updated_at is None:
        return ""
    today = today or date.today()
    days = max((today - _local_date(updated_at)).days, 0)
    if days == 0:
        return "Today"
    if days == 1:
        return "1 day ago"
    return f"{days} days ago"


def format_rupees(amount: int | float | None) -> str:
    if amount is None:
        return "-"
    if float(amount).is_integer():
        return f"₹{int(amount):,}"
    return f"₹{amount:,.2f}"


class Carousel:
    """Rotating index over a card's slides with optional auto-advance."""

    def __init__(self, slides: list[str], interval: float | None = None):
        self.slides = slides
        self.interval = settings.carousel_interval_seconds if interval is None else interval
        self.index = 0
        self._task: asyncio.Task | None = None

    def __len__(self) -> int:
        return len(self.slides)

    @property
    def current(self) -> str:
        return self.slides[self.index]

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _advance(self):
        self.index = 0 if self.index == len(self.slides) - 1 else self.index + 1

    def next(self):
        self._advance()
        self._restart()

    def prev(self):
        self.index = len(self.slides) - 1 if self.index == 0 else self.index - 1
        self._restart()

    def start(self):
        if self.running or len(self.slides) < 2:
            return
        self._task = asyncio.create_task(self._auto_advance())

    def stop(self):
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def _restart(self):
        # A manual move starts a fresh interval
        if self.running:
            self.stop()
            self.start()

    async def _auto_advance(self):
        while True:
            await asyncio.sleep(self.interval)
            self._advance()


class ListingCard:
    def __init__(self, listing: Listing, today: date | None = None):
        self.listing = listing
        self.today = today or date.today()
        self.slides = list(listing.image_urls) or [settings.placeholder_image_url]

    def carousel(self, interval: float | None = None) -> Carousel:
        return Carousel(self.slides, interval)

    @property
    def id(self) -> int:
        return self.listing.id

    @property
    def title(self) -> str:
        return self.listing.property_name

    @property
    def url(self) -> str:
        return f"/property/{self.listing.id}"

    @property
    def bhk_display(self) -> str:
        return self.listing.formatted_bhk_type or self.listing.bhk_type or ""

    @property
    def furnishing_display(self) -> str:
        return self.listing.formatted_furnishing or self.listing.furnishing or ""

    @property
    def ready_to_move(self) -> bool:
        return is_ready_to_move(self.listing.available_from, self.today)

    @property
    def availability_label(self) -> str:
        if self.ready_to_move:
            return "Ready to move"
        if self.listing.available_from is None:
            return "N/A"
        return f"Available from {_local_date(self.listing.available_from):%d/%m/%Y}"

    @property
    def updated_label(self) -> str:
        return days_ago_label(self.listing.updated_at, self.today)

    @property
    def price_label(self) -> str:
        return format_rupees(self.listing.rent)
