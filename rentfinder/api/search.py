"""Live search: the panel's filter state runs server-side over a websocket."""

import json
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from rentfinder.api.deps import get_api_client
from rentfinder.api.pages import load_initial_listings
from rentfinder.api.templating import BHK_FILTER_OPTIONS, render_grid
from rentfinder.clients.property_api import PropertyApiClient
from rentfinder.config import settings
from rentfinder.services.session import SearchSession

logger = logging.getLogger(__name__)

router = APIRouter(tags=["search"])


@router.websocket("/ws/search")
async def search_socket(
    websocket: WebSocket,
    client: Annotated[PropertyApiClient, Depends(get_api_client)],
) -> None:
    await websocket.accept()

    initial = await load_initial_listings(client)
    session = SearchSession(
        client,
        initial,
        send=websocket.send_json,
        render_grid=render_grid,
        locations=settings.popular_locations,
        bhk_options=BHK_FILTER_OPTIONS,
    )
    await session.push()

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except ValueError:
                await websocket.send_json({"type": "error", "message": "Messages must be JSON"})
                continue
            if not isinstance(message, dict):
                await websocket.send_json({"type": "error", "message": "Messages must be objects"})
                continue
            await session.handle(message)
    except WebSocketDisconnect:
        logger.debug("Search session closed by client")
    finally:
        session.close()
