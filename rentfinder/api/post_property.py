from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from pydantic.alias_generators import to_camel
from starlette.datastructures import UploadFile

from rentfinder.api.deps import get_api_client, get_drafts, get_previews
from rentfinder.api.templating import templates
from rentfinder.clients.property_api import PropertyApiClient
from rentfinder.schemas.listing import (
    BhkType,
    Furnishing,
    OwnerType,
    PropertyType,
    TenantType,
)
from rentfinder.services.submission import (
    DraftStore,
    ListingForm,
    ListingFormData,
    PreviewStore,
)

router = APIRouter(prefix="/post-property", tags=["post-property"])

FORM_OPTIONS = {
    "property_type": list(PropertyType),
    "bhk_type": list(BhkType),
    "furnished_info": list(Furnishing),
    "tenant_type": list(TenantType),
    "owner_type": list(OwnerType),
}

FAILURE_STATUS = {"validation": 422, "upload": 502, "api": 502}


def render_form(request: Request, form: ListingForm, status_code: int = 200):
    return templates.TemplateResponse(
        request,
        "post_property.html",
        {"form": form, "notice": form.active_notice, "options": FORM_OPTIONS},
        status_code=status_code,
    )


@router.get("", response_class=HTMLResponse)
async def new_property_form(
    request: Request,
    drafts: Annotated[DraftStore, Depends(get_drafts)],
    draft: str | None = None,
):
    return render_form(request, drafts.get_or_create(draft))


@router.post("", response_class=HTMLResponse)
async def submit_property(
    request: Request,
    client: Annotated[PropertyApiClient, Depends(get_api_client)],
    drafts: Annotated[DraftStore, Depends(get_drafts)],
):
    data = await request.form()
    draft_id = data.get("draft")
    form = drafts.get_or_create(draft_id if isinstance(draft_id, str) else None)

    fields = {}
    for name in ListingFormData.model_fields:
        value = data.get(to_camel(name))
        if isinstance(value, str):
            fields[name] = value
    form.update(**fields)

    if data.get("availableNow"):
        form.set_available_now()

    for upload in data.getlist("images"):
        if not isinstance(upload, UploadFile) or not upload.filename:
            continue
        content = await upload.read()
        if content:
            form.add_image(upload.filename, upload.content_type, content)

    created = await form.submit(client)
    if created is None:
        return render_form(request, form, status_code=FAILURE_STATUS[form.failed_stage])

    drafts.discard(form.draft_id)
    fresh = drafts.create()
    fresh.notice = form.notice
    return render_form(request, fresh, status_code=201)


@router.post("/drafts/{draft_id}/images/{index}/remove")
async def remove_draft_image(
    draft_id: str,
    index: int,
    drafts: Annotated[DraftStore, Depends(get_drafts)],
):
    form = drafts.get(draft_id)
    if form is None:
        raise HTTPException(status_code=404, detail="Draft not found")
    try:
        form.remove_image(index)
    except IndexError:
        raise HTTPException(status_code=404, detail="Image not found")

    return RedirectResponse(f"/post-property?draft={draft_id}", status_code=303)


@router.get("/previews/{token}")
async def image_preview(
    token: str,
    previews: Annotated[PreviewStore, Depends(get_previews)],
):
    preview = previews.get(token)
    if preview is None:
        raise HTTPException(status_code=404, detail="Preview not found")

    content_type, content = preview
    return Response(content=content, media_type=content_type, headers={"Cache-Control": "no-store"})
