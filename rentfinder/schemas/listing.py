from datetime import datetime
from enum import Enum

from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel


class LabeledChoice(str, Enum):
    """A form option with a display label and the label the API expects."""

    @property
    def label(self) -> str:
        return DISPLAY_LABELS[self]

    @property
    def backend_label(self) -> str:
        return BACKEND_LABELS.get(self, self.label)

    @classmethod
    def parse(cls, code: str | None):
        """Return the member for ``code`` or None when it is blank or unknown."""
        if not code:
            return None
        try:
            return cls(code.strip())
        except ValueError:
            return None


class BhkType(LabeledChoice):
    ONE_RK = "ONE_RK"
    ONE_BHK = "ONE_BHK"
    TWO_BHK = "TWO_BHK"
    THREE_BHK = "THREE_BHK"
    FOUR_BHK = "FOUR_BHK"


class Furnishing(LabeledChoice):
    UNFURNISHED = "UNFURNISHED"
    SEMI_FURNISHED = "SEMI_FURNISHED"
    FULLY_FURNISHED = "FULLY_FURNISHED"


class PropertyType(LabeledChoice):
    INDIVIDUAL = "INDIVIDUAL"
    APARTMENT = "APARTMENT"
    VILLA = "VILLA"


class TenantType(LabeledChoice):
    ANY = "ANY"
    FAMILY = "FAMILY"
    BACHELOR = "BACHELOR"


class OwnerType(LabeledChoice):
    LANDLORD = "LANDLORD"
    OTHER = "OTHER"


DISPLAY_LABELS: dict[LabeledChoice, str] = {
    BhkType.ONE_RK: "1RK",
    BhkType.ONE_BHK: "1BHK",
    BhkType.TWO_BHK: "2BHK",
    BhkType.THREE_BHK: "3BHK",
    BhkType.FOUR_BHK: "4BHK",
    Furnishing.UNFURNISHED: "Unfurnished",
    Furnishing.SEMI_FURNISHED: "Semi-Furnished",
    Furnishing.FULLY_FURNISHED: "Full-Furnished",
    PropertyType.INDIVIDUAL: "Individual",
    PropertyType.APARTMENT: "Apartment",
    PropertyType.VILLA: "Villa",
    TenantType.ANY: "Any",
    TenantType.FAMILY: "Family",
    TenantType.BACHELOR: "Bachelor",
    OwnerType.LANDLORD: "Landlord",
    OwnerType.OTHER: "Other",
}

# Only entries that differ from the display label
BACKEND_LABELS: dict[LabeledChoice, str] = {
    BhkType.ONE_RK: "OneRK",
    BhkType.ONE_BHK: "OneBHK",
    BhkType.TWO_BHK: "TwoBHK",
    BhkType.THREE_BHK: "ThreeBHK",
    BhkType.FOUR_BHK: "FourBHK",
    Furnishing.SEMI_FURNISHED: "SemiFurnished",
    Furnishing.FULLY_FURNISHED: "FullFurnished",
}


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class Listing(CamelModel):
    """A listing as returned by the property API.

    ``bhk_type``, ``furnishing`` and ``property_type`` hold the backend's raw
    labels; ``formatted_*`` carry the display strings the API precomputes.
    Detail responses also include the cost breakdown and owner fields.
    """

    id: int
    property_name: str = ""
    rent: int | float = 0
    bhk_type: str | None = None
    furnishing: str | None = None
    available_from: datetime | None = None
    property_type: str | None = None
    location: str = ""
    updated_at: datetime | None = None
    image_urls: list[str] = []
    formatted_bhk_type: str | None = None
    formatted_furnishing: str | None = None

    security_deposit: int | float | None = None
    maintenance: int | float | None = None
    preferred_tenant: str | None = None
    owner_name: str | None = None
    contact_number: str | None = None
    owner_type: str | None = None

    @field_validator("image_urls", mode="before")
    @classmethod
    def _null_images(cls, value):
        return value or []

    @property
    def has_images(self) -> bool:
        return len(self.image_urls) > 0


class ListingPage(CamelModel):
    results: list[Listing] = []

    @field_validator("results", mode="before")
    @classmethod
    def _null_results(cls, value):
        return value or []


class SimilarListings(CamelModel):
    properties: list[Listing] = []
    is_fallback: bool = False

    @field_validator("properties", mode="before")
    @classmethod
    def _null_properties(cls, value):
        return value or []


class UploadCredential(CamelModel):
    upload_url: str
    blob_url: str
    expires_on: str | None = None


class ListingSubmission(CamelModel):
    property_name: str
    rent: int | float
    security_deposit: int | float
    maintenance: int | float
    location: str
    available_from: str
    property_type: str
    bhk_type: str
    furnishing: str
    preferred_tenant: str
    owner_type: str
    owner_name: str
    contact_number: str
    image_urls: list[str] = []


class FilterCriteria(BaseModel):
    """The filters the search panel hands to the listing grid."""

    location: str = ""
    bhk_types: list[str] = []

    @property
    def is_active(self) -> bool:
        return bool(self.location) or len(self.bhk_types) > 0
