"""Review form routes (HTMX partials): lookup, edit/preview, photo, submit, cancel."""

import logging
from typing import Optional

from fastapi import APIRouter, File, Form, Query, Request, UploadFile
from fastapi.responses import HTMLResponse, Response

from paperreview.forms.review_form import ImageUploadDisabledError, ViewMode
from paperreview.gui.state import close_form, get_form, open_form, templates

logger = logging.getLogger(__name__)

router = APIRouter()


def _form_ctx(form_id: str, **extra) -> dict:
    form = get_form(form_id)
    ctx = {"form_id": form_id, "form": form, "errors": {}}
    ctx.update(extra)
    return ctx


# ============================================================================
# Form Page
# ============================================================================


@router.get("/reviews/new", response_class=HTMLResponse)
async def new_review(
    request: Request,
    image: bool = Query(False, description="Show the photo field"),
):
    """Open a new review form."""
    form_id, _ = open_form(has_image_upload=image)
    return templates.TemplateResponse(request, "review_form.html", _form_ctx(form_id))


# ============================================================================
# DOI Lookup
# ============================================================================


@router.post("/reviews/form/{form_id}/lookup", response_class=HTMLResponse)
async def lookup_paper(request: Request, form_id: str, doi: str = Form("")):
    """Debounced DOI lookup; answers 204 when a newer keystroke took over."""
    form = get_form(form_id)
    applied = await form.input_title(doi)
    if not applied:
        return Response(status_code=204)
    return templates.TemplateResponse(request, "partials/title.html", _form_ctx(form_id))


# ============================================================================
# Edit / Preview
# ============================================================================


@router.post("/reviews/form/{form_id}/mode/{mode}", response_class=HTMLResponse)
async def switch_mode(
    request: Request,
    form_id: str,
    mode: ViewMode,
    contents: Optional[str] = Form(None, alias="ReviewContents"),
):
    """Toggle the review body between the editor and the rendered preview."""
    form = get_form(form_id)
    form.update(contents=contents)
    if mode is ViewMode.PREVIEW:
        form.show_preview()
    else:
        form.show_edit()
    return templates.TemplateResponse(
        request,
        "partials/contents.html",
        _form_ctx(form_id, preview_html=form.preview_html() if form.is_preview else ""),
    )


# ============================================================================
# Photo
# ============================================================================


@router.post("/reviews/form/{form_id}/image", response_class=HTMLResponse)
async def attach_image(request: Request, form_id: str, photo: UploadFile = File(...)):
    """Read the selected photo for preview; upload happens on submit."""
    form = get_form(form_id)
    content = await photo.read()
    try:
        form.attach_image(photo.filename or "image", content, photo.content_type or "")
    except (ImageUploadDisabledError, ValueError) as e:
        return templates.TemplateResponse(
            request,
            "partials/photo.html",
            _form_ctx(form_id, errors={"photoUrl": str(e)}),
            status_code=400,
        )
    return templates.TemplateResponse(request, "partials/photo.html", _form_ctx(form_id))


# ============================================================================
# Submit / Cancel
# ============================================================================


@router.post("/reviews/form/{form_id}/submit", response_class=HTMLResponse)
async def submit_review(
    request: Request,
    form_id: str,
    contents: Optional[str] = Form(None, alias="ReviewContents"),
    tags: Optional[str] = Form(None, alias="Tags"),
):
    """Validate and store the review."""
    form = get_form(form_id)
    form.update(contents=contents, tags=tags)
    result = await form.submit()

    if result.ok:
        close_form(form_id)
        response = Response(status_code=204)
        response.headers["HX-Redirect"] = f"/reviews/{result.record.id}"
        return response

    return templates.TemplateResponse(
        request,
        "partials/submit_result.html",
        _form_ctx(form_id, result=result, errors=result.errors),
    )


@router.post("/reviews/form/{form_id}/cancel")
async def cancel_review(form_id: str):
    """Abandon the form and go back to the review list."""
    get_form(form_id)
    close_form(form_id)
    response = Response(status_code=204)
    response.headers["HX-Redirect"] = "/"
    return response
