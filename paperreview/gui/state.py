"""Application state, templates, and form session helpers."""

import logging
import os
import time
import uuid
from typing import Optional

import httpx
from fastapi import HTTPException
from fastapi.templating import Jinja2Templates

from paperreview import __version__
from paperreview.config import Settings
from paperreview.database.repository import ReviewRepository
from paperreview.forms.review_form import ReviewForm
from paperreview.services.image_service import ImageStore
from paperreview.services.markdown_service import MarkdownRenderer
from paperreview.services.paper_service import PaperService

logger = logging.getLogger(__name__)


# ============================================================================
# Global State
# ============================================================================


class AppState:
    """Mutable singleton holding runtime services and open form sessions."""

    settings: Settings
    repo: ReviewRepository
    papers: PaperService
    images: ImageStore
    renderer: MarkdownRenderer
    forms: dict[str, ReviewForm] = {}
    form_touched: dict[str, float] = {}  # form id → last request (monotonic)
    clock = staticmethod(time.monotonic)


state = AppState()


def init_state(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> None:
    """(Re)build all services from *settings* and drop open forms."""
    state.settings = settings
    state.repo = ReviewRepository(settings.db_path)
    state.papers = PaperService(
        api_key=settings.api_key,
        timeout=settings.lookup_timeout,
        transport=transport,
    )
    state.images = ImageStore(settings.upload_dir)
    state.renderer = MarkdownRenderer()
    state.forms = {}
    state.form_touched = {}


# ============================================================================
# Form Sessions
# ============================================================================


def open_form(has_image_upload: bool = False) -> tuple[str, ReviewForm]:
    """Create a form for the signed-in reviewer and register it."""
    prune_forms()
    form = ReviewForm(
        state.settings.reviewer_id,
        state.settings.reviewer_name,
        papers=state.papers,
        reviews=state.repo,
        images=state.images,
        has_image_upload=has_image_upload,
        debounce_wait=state.settings.debounce_wait,
        renderer=state.renderer,
    )
    form_id = uuid.uuid4().hex
    state.forms[form_id] = form
    state.form_touched[form_id] = state.clock()
    return form_id, form


def get_form(form_id: str) -> ReviewForm:
    """Look up an open form or answer 404."""
    form = state.forms.get(form_id)
    if form is None:
        raise HTTPException(status_code=404, detail="Form not found or already closed")
    state.form_touched[form_id] = state.clock()
    return form


def close_form(form_id: str) -> None:
    """Discard a form session (cancel or successful submit)."""
    state.form_touched.pop(form_id, None)
    form = state.forms.pop(form_id, None)
    if form is not None:
        form.close()


def prune_forms() -> int:
    """Close forms idle for longer than ``form_ttl``; returns how many."""
    cutoff = state.clock() - state.settings.form_ttl
    expired = [
        form_id
        for form_id in state.forms
        if state.form_touched.get(form_id, cutoff) <= cutoff
    ]
    for form_id in expired:
        close_form(form_id)
    if expired:
        logger.info("Dropped %d idle review form(s)", len(expired))
    return len(expired)


# ============================================================================
# Templates & Filters
# ============================================================================

base_dir = os.path.dirname(__file__)
templates = Jinja2Templates(directory=os.path.join(base_dir, "templates"))
templates.env.globals["version"] = __version__


def format_created_at(date_str: Optional[str]) -> str:
    """Format an ISO timestamp to 'Feb 11, 2026' style."""
    if not date_str:
        return ""
    try:
        from datetime import datetime

        dt = datetime.fromisoformat(date_str.replace("Z", "+00:00"))
        return dt.strftime("%b %d, %Y")
    except ValueError:
        return date_str[:10]


templates.env.filters["format_created_at"] = format_created_at
templates.env.filters["markdown"] = lambda s: state.renderer.render(s or "")
