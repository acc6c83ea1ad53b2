"""
Pytest configuration and shared fixtures.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from rentfinder.api.deps import get_api_client
from rentfinder.main import app
from rentfinder.schemas.listing import ListingPage, SimilarListings


@pytest.fixture
def listing_standard() -> dict:
    """A listing as the API returns it in search results."""
    return {
        "id": 101,
        "propertyName": "Lake View Residency",
        "rent": 25000,
        "bhkType": "TwoBHK",
        "furnishing": "SemiFurnished",
        "availableFrom": "2026-10-01T00:00:00.000Z",
        "propertyType": "Apartment",
        "location": "Madhapur",
        "updatedAt": "2026-10-15T08:30:00.000Z",
        "imageUrls": [
            "https://blob.example.net/images/101-a.jpg",
            "https://blob.example.net/images/101-b.jpg",
        ],
        "formattedBhkType": "2BHK",
        "formattedFurnishing": "Semi-Furnished",
    }


@pytest.fixture
def listing_no_images() -> dict:
    """A listing whose owner never uploaded photos."""
    return {
        "id": 102,
        "propertyName": "Green Acres",
        "rent": 18000,
        "bhkType": "OneBHK",
        "furnishing": "Unfurnished",
        "availableFrom": "2027-01-01T00:00:00.000Z",
        "propertyType": "Individual",
        "location": "Kondapur",
        "updatedAt": "2026-10-18T06:00:00.000Z",
        "imageUrls": None,
        "formattedBhkType": "1BHK",
        "formattedFurnishing": "Unfurnished",
    }


@pytest.fixture
def listing_detail(listing_standard) -> dict:
    """A single-listing response, with the cost breakdown and owner fields."""
    return {
        **listing_standard,
        "securityDeposit": 50000,
        "maintenance": 2500,
        "preferredTenant": "Family",
        "ownerName": "Ravi Kumar",
        "contactNumber": "9876543210",
        "ownerType": "Landlord",
    }


@pytest.fixture
def similar_listings_response(listing_standard) -> dict:
    """Similar listings, including the viewed listing and one without images."""
    return {
        "properties": [
            {**listing_standard, "id": 201, "location": "Gachibowli"},
            {**listing_standard, "id": 101},
            {**listing_standard, "id": 202, "imageUrls": []},
            {**listing_standard, "id": 203, "location": "Hitech city"},
        ],
        "isFallback": False,
    }


@pytest.fixture
def sas_response() -> dict:
    """An upload credential from the SAS endpoint."""
    return {
        "uploadUrl": "https://blob.example.net/images/abc.jpg?sv=2024&sig=xyz",
        "blobUrl": "https://blob.example.net/images/abc.jpg",
        "expiresOn": "2026-10-18T10:00:00Z",
    }


@pytest.fixture
def api_client_mock(listing_standard) -> AsyncMock:
    """Stand-in for PropertyApiClient with a one-listing first page."""
    client = AsyncMock()
    client.get_properties.return_value = ListingPage.model_validate(
        {"results": [listing_standard]}
    )
    client.get_similar_properties.return_value = SimilarListings()
    return client


@pytest.fixture
def app_client(api_client_mock):
    """TestClient with the listing API replaced by ``api_client_mock``."""
    app.dependency_overrides[get_api_client] = lambda: api_client_mock
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def live_app_client():
    """TestClient using the real API client; mock the API with respx."""
    with TestClient(app) as client:
        yield client
