"""A live search session: one search panel driving one listing grid."""

import logging
from typing import Awaitable, Callable

from rentfinder.clients.property_api import PropertyApiClient
from rentfinder.schemas.listing import Listing
from rentfinder.services.grid import ListingGrid
from rentfinder.services.search import SearchPanel

logger = logging.getLogger(__name__)

VALUE_ACTIONS = {
    "search_input",
    "toggle_location",
    "remove_location",
    "toggle_bhk",
    "remove_bhk",
}


class SearchSession:
    def __init__(
        self,
        client: PropertyApiClient,
        initial_listings: list[Listing],
        send: Callable[[dict], Awaitable[None]],
        render_grid: Callable[[ListingGrid], str],
        locations: list[str] | None = None,
        bhk_options: list[str] | None = None,
        debounce_seconds: float | None = None,
    ):
        self.send = send
        self.render_grid = render_grid
        self.closed = False
        self.grid = ListingGrid(client, initial_listings, on_change=self.push)
        self.panel = SearchPanel(
            self.grid.handle_filters_change,
            locations=locations,
            bhk_options=bhk_options,
            debounce_seconds=debounce_seconds,
        )

    def snapshot(self) -> dict:
        return {
            "type": "state",
            "loading": self.grid.loading,
            "panel": self.panel.snapshot(),
            "grid": {
                "state": self.grid.state.value,
                "count": len(self.grid.listings),
                "error": self.grid.error,
                "html": self.render_grid(self.grid),
            },
        }

    async def push(self):
        if self.closed:
            return
        await self.send(self.snapshot())

    async def handle(self, message: dict):
        action = message.get("action")
        value = message.get("value")

        if action in VALUE_ACTIONS and not isinstance(value, str):
            await self.send({"type": "error", "message": f"'{action}' needs a string value"})
            return

        if action == "search_input":
            await self.panel.change_search(value)
        elif action == "search_submit":
            self.panel.submit_search()
        elif action == "clear_search":
            await self.panel.clear_search()
        elif action == "toggle_location":
            self.panel.toggle_location(value)
        elif action == "remove_location":
            self.panel.remove_location(value)
        elif action == "toggle_bhk":
            self.panel.toggle_bhk(value)
        elif action == "remove_bhk":
            self.panel.remove_bhk(value)
        elif action == "retry":
            await self.grid.retry()
        elif action == "clear_filters":
            self.panel.reset()
            await self.grid.clear_filters()
        else:
            logger.debug(f"Ignoring unknown search action {action!r}")
            await self.send({"type": "error", "message": f"Unknown action: {action}"})
            return

        await self.push()

    def close(self):
        self.closed = True
        self.panel.dispose()
