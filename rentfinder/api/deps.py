from starlette.requests import HTTPConnection

from rentfinder.clients.property_api import PropertyApiClient
from rentfinder.services.submission import DraftStore, PreviewStore


# HTTPConnection so the same dependencies serve routes and websockets
def get_api_client(connection: HTTPConnection) -> PropertyApiClient:
    return connection.app.state.api_client


def get_previews(connection: HTTPConnection) -> PreviewStore:
    return connection.app.state.previews


def get_drafts(connection: HTTPConnection) -> DraftStore:
    return connection.app.state.drafts
