"""Common routes: review list, review detail, JSON API, uploaded photos."""

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse

from paperreview.gui.state import state, templates
from paperreview.services.image_service import safe_filename

router = APIRouter()


# ============================================================================
# Pages
# ============================================================================


@router.get("/", response_class=HTMLResponse)
async def index(request: Request):
    """Recent reviews."""
    reviews = state.repo.find_recent(limit=50)
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "reviews": reviews,
            "total": state.repo.count(),
            "reviewer_name": state.settings.reviewer_name,
        },
    )


@router.get("/reviews/{review_id}", response_class=HTMLResponse)
async def review_detail(request: Request, review_id: str):
    """Single review with its contents rendered from Markdown."""
    review = state.repo.get(review_id)
    if review is None:
        raise HTTPException(status_code=404, detail="Review not found")
    return templates.TemplateResponse(request, "review.html", {"review": review})


# ============================================================================
# JSON API
# ============================================================================


@router.get("/api/reviews")
async def list_reviews(
    user: str = Query("", description="Only reviews created by this user id"),
    tag: str = Query("", description="Only reviews carrying this tag"),
    limit: int = Query(50, ge=1, le=500),
):
    """Stored reviews as wire payloads, newest first."""
    if user:
        reviews = state.repo.find_by_user(user, limit=limit)
        if tag:
            reviews = [r for r in reviews if tag in r.tags]
    elif tag:
        reviews = state.repo.find_by_tag(tag, limit=limit)
    else:
        reviews = state.repo.find_recent(limit=limit)
    return JSONResponse([r.to_payload() for r in reviews])


# ============================================================================
# Uploaded photos
# ============================================================================


@router.get("/uploads/{record_id}/{filename}")
async def uploaded_image(record_id: str, filename: str):
    """Serve a stored review photo."""
    path = state.images.upload_dir / safe_filename(record_id) / safe_filename(filename)
    if not path.is_file():
        raise HTTPException(status_code=404, detail="Image not found")
    return FileResponse(path)
