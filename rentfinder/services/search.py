"""
Filter state for the property search panel.

The panel owns three pieces of transient state: the free-text location box,
the popular-location chips and the BHK chips. Free text and location chips are
mutually exclusive. Chip changes reach the listing grid through a trailing
debounce; clearing the search box reaches it immediately.
"""

import inspect
import logging
import re
from typing import Any, Awaitable, Callable

from rentfinder.config import settings
from rentfinder.schemas.listing import FilterCriteria
from rentfinder.services.debounce import Debouncer

logger = logging.getLogger(__name__)

SEARCH_MIN_LENGTH = 2
SEARCH_MAX_LENGTH = 50
SEARCH_ALLOWED = re.compile(r"^[A-Za-z0-9 \-_,.]+$")

FiltersCallback = Callable[[FilterCriteria], Awaitable[Any] | Any]


def validate_search_term(term: str) -> str | None:
    """Return an error message for ``term``, or None when it is acceptable."""
    if len(term) < SEARCH_MIN_LENGTH:
        return f"Search term must be at least {SEARCH_MIN_LENGTH} characters long"
    if len(term) > SEARCH_MAX_LENGTH:
        return f"Search term is too long (max {SEARCH_MAX_LENGTH} characters)"
    if not SEARCH_ALLOWED.match(term):
        return "Search term contains invalid characters"
    return None


class SearchPanel:
    def __init__(
        self,
        on_filters_change: FiltersCallback,
        locations: list[str] | None = None,
        bhk_options: list[str] | None = None,
        debounce_seconds: float | None = None,
    ):
        self.on_filters_change = on_filters_change
        self.locations = list(locations if locations is not None else settings.popular_locations)
        self.bhk_options = list(bhk_options or [])

        self.search_text = ""
        self.selected_locations: list[str] = []
        self.selected_bhk_types: list[str] = []
        self.search_error = ""

        wait = settings.search_debounce_seconds if debounce_seconds is None else debounce_seconds
        self._debounced_emit = Debouncer(self._emit_current, wait)

    def criteria(self) -> FilterCriteria:
        """Reconcile the panel state into the filters the grid should apply."""
        location = self.search_text or ",".join(self.selected_locations)
        return FilterCriteria(location=location, bhk_types=list(self.selected_bhk_types))

    @property
    def pending(self) -> bool:
        return self._debounced_emit.pending

    async def _emit(self, criteria: FilterCriteria) -> None:
        result = self.on_filters_change(criteria)
        if inspect.isawaitable(result):
            await result

    async def _emit_current(self) -> None:
        await self._emit(self.criteria())

    def _schedule(self) -> None:
        self._debounced_emit()

    async def change_search(self, value: str) -> None:
        """Keystroke in the search box. Never fetches unless the box empties."""
        previous = self.search_text
        self.search_text = value
        if value:
            self.selected_locations = []
        self.search_error = ""

        if not value.strip() and previous.strip():
            self._debounced_emit.cancel()
            await self._emit(FilterCriteria(bhk_types=list(self.selected_bhk_types)))

    def submit_search(self) -> bool:
        """Validate the search box and schedule a fetch. Returns True if scheduled."""
        term = self.search_text.strip()
        if not term:
            return False

        error = validate_search_term(term)
        if error:
            self.search_error = error
            logger.debug(f"Rejected search term {term!r}: {error}")
            return False

        self.search_error = ""
        self.search_text = term
        self.selected_locations = []
        self._schedule()
        return True

    async def clear_search(self) -> None:
        """The clear control next to the search box."""
        self.search_error = ""
        self.search_text = ""
        self.selected_locations = []
        self._debounced_emit.cancel()
        await self._emit(FilterCriteria(bhk_types=list(self.selected_bhk_types)))

    def toggle_location(self, location: str) -> None:
        if location in self.selected_locations:
            self.selected_locations = [loc for loc in self.selected_locations if loc != location]
        else:
            self.selected_locations = [*self.selected_locations, location]

        if self.selected_locations:
            self.search_text = ""
            self.search_error = ""
        self._schedule()

    def remove_location(self, location: str) -> None:
        if location not in self.selected_locations:
            return
        self.selected_locations = [loc for loc in self.selected_locations if loc != location]
        self._schedule()

    def toggle_bhk(self, bhk: str) -> None:
        if bhk in self.selected_bhk_types:
            self.selected_bhk_types = [b for b in self.selected_bhk_types if b != bhk]
        else:
            self.selected_bhk_types = [*self.selected_bhk_types, bhk]
        self._schedule()

    def remove_bhk(self, bhk: str) -> None:
        if bhk not in self.selected_bhk_types:
            return
        self.selected_bhk_types = [b for b in self.selected_bhk_types if b != bhk]
        self._schedule()

    def reset(self) -> None:
        """Drop every filter without notifying the grid."""
        self._debounced_emit.cancel()
        self.search_text = ""
        self.search_error = ""
        self.selected_locations = []
        self.selected_bhk_types = []

    async def wait_idle(self) -> None:
        """Wait until the debounced fetch (if any) has fired and finished."""
        await self._debounced_emit.drain()

    def dispose(self) -> None:
        """Cancel the pending debounced fetch so nothing fires after teardown."""
        self._debounced_emit.cancel()

    def snapshot(self) -> dict:
        return {
            "search_text": self.search_text,
            "search_error": self.search_error,
            "locations": self.locations,
            "bhk_options": self.bhk_options,
            "selected_locations": list(self.selected_locations),
            "selected_bhk_types": list(self.selected_bhk_types),
        }
