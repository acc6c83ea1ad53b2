"""
Client for the external property listing API.

Wraps the three read endpoints, the listing create endpoint and the
two-step blob upload (upload credential, then a direct PUT to storage).
"""

import json
import logging

import httpx
from pydantic import BaseModel, ValidationError

from rentfinder.config import settings
from rentfinder.errors import ApiError, UploadError
from rentfinder.schemas.listing import (
    Listing,
    ListingPage,
    ListingSubmission,
    SimilarListings,
    UploadCredential,
)

logger = logging.getLogger(__name__)

MIN_LOCATION_LENGTH = 2
UNEXPECTED_RESPONSE = "Unexpected response from the property service"


def _error_message(response: httpx.Response, fallback: str) -> str:
    """Pull ``message`` (or ``errors``) out of an error body."""
    try:
        data = response.json()
    except ValueError:
        return fallback
    if not isinstance(data, dict):
        return fallback

    message = data.get("message") or data.get("errors")
    if not message:
        return fallback
    return message if isinstance(message, str) else json.dumps(message)


def build_location_param(location: str | None) -> str | None:
    """Normalise a location filter the way the API expects it.

    Single locations shorter than two characters are dropped; comma lists keep
    only the parts that are long enough.
    """
    if not location or not location.strip():
        return None

    trimmed = location.strip()
    if "," in trimmed:
        parts = [part.strip() for part in trimmed.split(",")]
        parts = [part for part in parts if len(part) >= MIN_LOCATION_LENGTH]
        return ",".join(parts) if parts else None

    return trimmed if len(trimmed) >= MIN_LOCATION_LENGTH else None


def build_search_params(
    location: str | None = None,
    bhk_types: list[str] | None = None,
    page: int | None = None,
    limit: int | None = None,
) -> list[tuple[str, str]]:
    params: list[tuple[str, str]] = []

    location_param = build_location_param(location)
    if location_param:
        params.append(("location", location_param))

    for bhk in bhk_types or []:
        if bhk and bhk.strip():
            params.append(("bhkType", bhk))

    if page:
        params.append(("page", str(page)))
    if limit:
        params.append(("limit", str(limit)))

    return params


class PropertyApiClient:
    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.client = httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.api_timeout_seconds,
            headers={"Content-Type": "application/json"},
        )

    async def close(self):
        await self.client.aclose()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return await self.client.request(method, self._url(path), **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ApiError(f"Could not reach the property service: {e}") from e

    def _parse(
        self,
        response: httpx.Response,
        model: type[BaseModel],
        error: type[ApiError] = ApiError,
    ):
        """Validate a 2xx body into ``model``; a malformed body raises ``error``."""
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.warning(f"Malformed {model.__name__} body ({response.status_code}): {e}")
            raise error(UNEXPECTED_RESPONSE, response.status_code) from e

    async def get_properties(
        self,
        location: str | None = None,
        bhk_types: list[str] | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> ListingPage:
        """Fetch a page of listings matching the given filters."""
        params = build_search_params(location, bhk_types, page, limit)
        response = await self._request("GET", "/properties", params=params)

        if not response.is_success:
            message = _error_message(
                response, f"HTTP error! status: {response.status_code}"
            )
            logger.warning(f"Listing search failed ({response.status_code}): {message}")
            raise ApiError(message, response.status_code)

        return self._parse(response, ListingPage)

    async def get_property(self, property_id: int) -> Listing:
        response = await self._request("GET", f"/properties/{property_id}")

        if not response.is_success:
            logger.warning(
                f"Fetching property {property_id} failed ({response.status_code})"
            )
            raise ApiError("Failed to fetch property", response.status_code)

        return self._parse(response, Listing)

    async def get_similar_properties(
        self, property_id: int, max_results: int | None = None
    ) -> SimilarListings:
        """Fetch listings similar to ``property_id``.

        The API flags ``isFallback`` when it had no close match on BHK type or
        location and substituted general recommendations.
        """
        max_results = max_results or settings.similar_max_results
        response = await self._request(
            "GET",
            f"/properties/similar-properties/{property_id}",
            params={"maxResults": max_results},
        )

        if not response.is_success:
            message = _error_message(
                response, f"HTTP error! status: {response.status_code}"
            )
            raise ApiError(message, response.status_code)

        return self._parse(response, SimilarListings)

    async def create_property(self, submission: ListingSubmission) -> dict:
        response = await self._request(
            "POST",
            "/properties",
            json=submission.model_dump(by_alias=True),
        )

        if not response.is_success:
            message = _error_message(response, "Failed to create property")
            logger.warning(f"Creating property failed ({response.status_code}): {message}")
            raise ApiError(message, response.status_code)

        if not response.content:
            return {}
        try:
            created = response.json()
        except ValueError:
            logger.warning("Property created but the response body was not JSON")
            return {}
        return created if isinstance(created, dict) else {}

    async def request_upload_url(self, filename: str, content_type: str) -> UploadCredential:
        """Ask the API for a short-lived pre-signed blob upload URL."""
        response = await self._request(
            "POST",
            "/azure/sas-url",
            json={"filename": filename, "contentType": content_type},
        )

        if not response.is_success:
            raise UploadError("Failed to get SAS URL", response.status_code)

        return self._parse(response, UploadCredential, UploadError)

    async def upload_blob(self, upload_url: str, content: bytes, content_type: str):
        try:
            response = await self.client.put(
                upload_url,
                content=content,
                headers={"x-ms-blob-type": "BlockBlob", "Content-Type": content_type},
                timeout=settings.upload_timeout_seconds,
            )
        except httpx.HTTPError as e:
            logger.error(f"Blob upload failed: {e}")
            raise UploadError(f"Failed to upload image to storage: {e}") from e

        if not response.is_success:
            raise UploadError("Failed to upload image to storage", response.status_code)

    async def upload_image(self, filename: str, content: bytes, content_type: str) -> str:
        """Upload one image and return the blob URL it will be served from."""
        credential = await self.request_upload_url(filename, content_type)
        await self.upload_blob(credential.upload_url, content, content_type)
        return credential.blob_url
