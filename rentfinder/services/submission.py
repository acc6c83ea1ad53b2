"""
The "post a property" form.

Submission runs in two phases: every selected image is uploaded to blob
storage through a pre-signed URL, then the listing is posted with the
resulting blob URLs. Nothing reaches the API until the form validates, and a
failed upload stops the listing from being created.
"""

import asyncio
import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date, datetime, time, timezone

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from rentfinder.clients.property_api import PropertyApiClient
from rentfinder.config import settings
from rentfinder.errors import ApiError, UploadError
from rentfinder.schemas.listing import (
    BhkType,
    Furnishing,
    ListingSubmission,
    OwnerType,
    PropertyType,
    TenantType,
)
from rentfinder.services.notices import Notice

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Property posted successfully!"
DEFAULT_CONTENT_TYPE = "application/octet-stream"

REQUIRED_FIELDS = {
    "property_name": "Property Name",
    "property_rent": "Rent",
    "security_deposit": "Security Deposit",
    "property_location": "Location",
    "property_type": "Property Type",
    "bhk_type": "BHK Type",
    "furnished_info": "Furnishing",
    "tenant_type": "Preferred Tenant",
    "owner_type": "Owner Type",
    "owner_name": "Owner Name",
    "contact_number": "Contact Number",
}

CHOICE_FIELDS = {
    "property_type": PropertyType,
    "bhk_type": BhkType,
    "furnished_info": Furnishing,
    "tenant_type": TenantType,
    "owner_type": OwnerType,
}

AMOUNT_FIELDS = {
    "property_rent": "Rent",
    "security_deposit": "Security Deposit",
    "maintenance": "Maintenance",
}


class ListingFormData(BaseModel):
    """Form values exactly as the user typed them."""

    property_name: str = ""
    property_rent: str = ""
    security_deposit: str = ""
    maintenance: str = ""
    property_location: str = ""
    available_from: str = ""
    property_type: str = ""
    bhk_type: str = ""
    furnished_info: str = ""
    tenant_type: str = ""
    owner_name: str = ""
    contact_number: str = ""
    owner_type: str = ""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


def parse_amount(value: str) -> int | float | None:
    """Parse a currency amount; blank counts as zero, garbage as None."""
    value = value.strip().replace(",", "")
    if not value:
        return 0
    try:
        amount = float(value)
    except ValueError:
        return None
    if amount != amount or amount in (float("inf"), float("-inf")):
        return None
    return int(amount) if amount.is_integer() else amount


def to_iso_utc(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def availability_instant(value: str, now: datetime | None = None) -> str:
    """Local midnight of the chosen day, or the current instant when blank."""
    if not value.strip():
        return to_iso_utc(now or datetime.now(timezone.utc))
    day = date.fromisoformat(value.strip())
    # A naive datetime is taken as local time by astimezone()
    return to_iso_utc(datetime.combine(day, time.min).astimezone())


@dataclass
class ImageUpload:
    filename: str
    content_type: str
    content: bytes
    preview_token: str


class PreviewStore:
    """In-memory image previews served back while a form is being filled."""

    def __init__(self):
        self._previews: dict[str, tuple[str, bytes]] = {}

    def __len__(self) -> int:
        return len(self._previews)

    def __contains__(self, token: str) -> bool:
        return token in self._previews

    def add(self, content_type: str, content: bytes) -> str:
        token = uuid.uuid4().hex
        self._previews[token] = (content_type, content)
        return token

    def get(self, token: str) -> tuple[str, bytes] | None:
        return self._previews.get(token)

    def release(self, token: str):
        self._previews.pop(token, None)


class ListingForm:
    def __init__(self, previews: PreviewStore, draft_id: str | None = None):
        self.previews = previews
        self.draft_id = draft_id or uuid.uuid4().hex
        self.data = ListingFormData()
        self.images: list[ImageUpload] = []
        self.notice: Notice | None = None
        self.uploading = False
        # "validation", "upload" or "api" after an unsuccessful submit
        self.failed_stage: str | None = None

    @property
    def active_notice(self) -> Notice | None:
        if self.notice is not None and self.notice.expired():
            self.notice = None
        return self.notice

    def update(self, **fields: str):
        for name, value in fields.items():
            if name not in ListingFormData.model_fields:
                raise ValueError(f"Unknown form field: {name}")
            setattr(self.data, name, value if value is not None else "")

    def set_available_now(self, today: date | None = None):
        self.data.available_from = (today or date.today()).isoformat()

    def add_image(self, filename: str, content_type: str | None, content: bytes) -> ImageUpload:
        content_type = content_type or DEFAULT_CONTENT_TYPE
        image = ImageUpload(
            filename=filename,
            content_type=content_type,
            content=content,
            preview_token=self.previews.add(content_type, content),
        )
        self.images.append(image)
        return image

    def remove_image(self, index: int):
        if not 0 <= index < len(self.images):
            raise IndexError(f"No image at position {index}")
        image = self.images.pop(index)
        self.previews.release(image.preview_token)

    def release_previews(self):
        for image in self.images:
            self.previews.release(image.preview_token)
        self.images = []

    def reset(self):
        self.data = ListingFormData()
        self.release_previews()

    def validate(self) -> list[str]:
        """Collect every problem with the form rather than stopping at the first."""
        missing = []
        for name, label in REQUIRED_FIELDS.items():
            value = getattr(self.data, name)
            if not value or not value.strip():
                missing.append(label)
            elif name in CHOICE_FIELDS and CHOICE_FIELDS[name].parse(value) is None:
                missing.append(label)

        invalid = [
            label
            for name, label in AMOUNT_FIELDS.items()
            if getattr(self.data, name).strip() and parse_amount(getattr(self.data, name)) is None
        ]

        errors = []
        if missing:
            errors.append(f"Please fill in all required fields: {', '.join(missing)}")
        if invalid:
            errors.append(f"Please enter valid numbers for: {', '.join(invalid)}")
        if self.data.available_from.strip():
            try:
                date.fromisoformat(self.data.available_from.strip())
            except ValueError:
                errors.append("Please choose a valid available-from date")
        return errors

    def build_submission(self, image_urls: list[str], now: datetime | None = None) -> ListingSubmission:
        data = self.data
        return ListingSubmission(
            property_name=data.property_name.strip(),
            rent=parse_amount(data.property_rent),
            security_deposit=parse_amount(data.security_deposit),
            maintenance=parse_amount(data.maintenance) or 0,
            location=data.property_location.strip(),
            available_from=availability_instant(data.available_from, now),
            property_type=PropertyType.parse(data.property_type).backend_label,
            bhk_type=BhkType.parse(data.bhk_type).backend_label,
            furnishing=Furnishing.parse(data.furnished_info).backend_label,
            preferred_tenant=TenantType.parse(data.tenant_type).backend_label,
            owner_type=OwnerType.parse(data.owner_type).backend_label,
            owner_name=data.owner_name.strip(),
            contact_number=data.contact_number.strip(),
            image_urls=image_urls,
        )

    async def upload_images(self, client: PropertyApiClient) -> list[str]:
        """Upload every image concurrently; fail the batch if any one fails."""
        if not self.images:
            return []

        self.uploading = True
        try:
            results = await asyncio.gather(
                *(
                    client.upload_image(image.filename, image.content, image.content_type)
                    for image in self.images
                ),
                return_exceptions=True,
            )
        finally:
            self.uploading = False

        failures = [result for result in results if isinstance(result, BaseException)]
        for failure in failures:
            if not isinstance(failure, ApiError):
                raise failure
        if failures:
            messages = list(dict.fromkeys(failure.message for failure in failures))
            raise UploadError("; ".join(messages))

        return list(results)

    async def submit(self, client: PropertyApiClient) -> dict | None:
        """Validate, upload, then create the listing.

        Returns the created listing, or None when the form stays on screen with
        an error notice.
        """
        self.failed_stage = None
        errors = self.validate()
        if errors:
            self.failed_stage = "validation"
            self.notice = Notice(" ".join(errors), "error", settings.notice_seconds)
            return None

        try:
            image_urls = await self.upload_images(client)
        except UploadError as e:
            self.failed_stage = "upload"
            logger.warning(f"Image upload failed for draft {self.draft_id}: {e}")
            self.notice = Notice(
                f"Image upload failed: {e.message}", "error", settings.error_notice_seconds
            )
            return None

        try:
            created = await client.create_property(self.build_submission(image_urls))
        except ApiError as e:
            self.failed_stage = "api"
            logger.error(f"Failed to save property for draft {self.draft_id}: {e}")
            self.notice = Notice(
                e.message or "Failed to save property", "error", settings.error_notice_seconds
            )
            return None

        created_id = created.get("id", "?") if isinstance(created, dict) else "?"
        logger.info(f"Posted property {created_id} with {len(image_urls)} images")
        self.reset()
        self.notice = Notice(SUCCESS_MESSAGE, "success", settings.notice_seconds)
        return created


class DraftStore:
    """Forms in progress, keyed by draft id. The oldest draft goes first."""

    def __init__(self, previews: PreviewStore, max_drafts: int | None = None):
        self.previews = previews
        self.max_drafts = max_drafts or settings.max_form_drafts
        self._drafts: OrderedDict[str, ListingForm] = OrderedDict()

    def __len__(self) -> int:
        return len(self._drafts)

    def create(self) -> ListingForm:
        form = ListingForm(self.previews)
        self._drafts[form.draft_id] = form
        while len(self._drafts) > self.max_drafts:
            _, oldest = self._drafts.popitem(last=False)
            oldest.release_previews()
        return form

    def get(self, draft_id: str | None) -> ListingForm | None:
        if not draft_id or draft_id not in self._drafts:
            return None
        self._drafts.move_to_end(draft_id)
        return self._drafts[draft_id]

    def get_or_create(self, draft_id: str | None) -> ListingForm:
        return self.get(draft_id) or self.create()

    def discard(self, draft_id: str):
        form = self._drafts.pop(draft_id, None)
        if form is not None:
            form.release_previews()
