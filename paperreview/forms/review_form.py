"""Review submission form: DOI lookup, edit/preview, tags, photo, submit.

One ``ReviewForm`` backs one open form page.  The image-upload variant is
the same class built with ``has_image_upload=True``.

Submission lifecycle::

    Idle ──submit──▶ Submitting ──▶ Submitted
                         │
                         └──▶ Failed(reason) ──submit──▶ Submitting

Submits blocked by validation or by a missing/failed DOI lookup never
leave the current state and never touch the network.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Literal, Optional, Protocol, Union

from paperreview.forms.debounce import Debouncer
from paperreview.forms.schema import validate_form
from paperreview.models.paper import PaperMetadata
from paperreview.models.review import ReviewRecord
from paperreview.services.image_service import to_data_url
from paperreview.services.markdown_service import MarkdownRenderer
from paperreview.utils.text import split_tags

logger = logging.getLogger(__name__)

INVALID_DOI = "Invalid DOI"
SUBMIT_FAILED = "Could not submit the review"
DEFAULT_DEBOUNCE_WAIT = 0.3


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------

class PaperLookup(Protocol):
    async def fetch_paper_by_doi(self, query: str) -> PaperMetadata: ...


class ImageUploader(Protocol):
    def upload_image(self, filename: str, content: bytes, record_id: str) -> str: ...


class ReviewStore(Protocol):
    def set_review(self, user_id: str, record: ReviewRecord) -> object: ...


class ImageUploadDisabledError(RuntimeError):
    """Raised when attaching an image to a form built without uploads."""


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------

class ViewMode(str, Enum):
    EDIT = "edit"
    PREVIEW = "preview"


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Submitting:
    record_id: str


@dataclass(frozen=True)
class Submitted:
    record_id: str


@dataclass(frozen=True)
class Failed:
    reason: str


SubmissionState = Union[Idle, Submitting, Submitted, Failed]


@dataclass
class FormState:
    """Raw field values as the user entered them."""

    title: str = ""
    review_contents: str = ""
    tags: str = ""
    photo_url: Optional[str] = None

    def as_form_data(self) -> dict[str, Optional[str]]:
        return {
            "title": self.title,
            "ReviewContents": self.review_contents,
            "Tags": self.tags,
            "photoUrl": self.photo_url,
        }


@dataclass(frozen=True)
class PendingImage:
    """A selected photo waiting to be uploaded at submit time."""

    filename: str
    content: bytes
    content_type: str
    data_url: str


@dataclass
class SubmitResult:
    """What a submit attempt ended in.

    ``invalid``: field errors; ``blocked``: invalid DOI alert;
    ``rejected``: a submit is running or already done;
    ``failed``: upload/persistence raised; ``submitted``: stored.
    """

    status: Literal["invalid", "blocked", "rejected", "failed", "submitted"]
    errors: dict[str, str] = field(default_factory=dict)
    alert: Optional[str] = None
    record: Optional[ReviewRecord] = None

    @property
    def ok(self) -> bool:
        return self.status == "submitted"


# ---------------------------------------------------------------------------
# Form
# ---------------------------------------------------------------------------

class ReviewForm:
    """Server-side state and behavior of one review form."""

    def __init__(
        self,
        user_id: str,
        user_name: str,
        *,
        papers: PaperLookup,
        reviews: ReviewStore,
        images: Optional[ImageUploader] = None,
        has_image_upload: bool = False,
        debounce_wait: float = DEFAULT_DEBOUNCE_WAIT,
        renderer: Optional[MarkdownRenderer] = None,
        clock: Callable[[], float] = time.time,
    ):
        if has_image_upload and images is None:
            raise ValueError("has_image_upload requires an image uploader")
        self.user_id = user_id
        self.user_name = user_name
        self.has_image_upload = has_image_upload
        self._papers = papers
        self._reviews = reviews
        self._images = images
        self._renderer = renderer or MarkdownRenderer()
        self._clock = clock

        self.state = FormState()
        self.paper: Optional[PaperMetadata] = None
        self.view_mode = ViewMode.EDIT
        self.pending_files: list[PendingImage] = []
        self.submission: SubmissionState = Idle()

        self._lookup_token = 0
        self._last_record_ms = 0
        self._debounced_lookup = Debouncer(self.lookup, debounce_wait)

    # ── DOI lookup ────────────────────────────────────────────────────

    async def input_title(self, text: str) -> bool:
        """Handle a keystroke in the DOI field.

        The keystroke takes the lookup token right away, so a lookup still
        running for earlier input can no longer apply its response, and the
        previously looked-up paper no longer matches the field.  Returns
        False when a newer keystroke superseded this one or its response was
        stale, True when the lookup result was applied.
        """
        token = self._next_lookup_token()
        self.paper = None
        task = self._debounced_lookup(text, token)
        await asyncio.wait({task})
        if task.cancelled():
            return False
        return task.result()

    async def lookup(self, text: str, token: Optional[int] = None) -> bool:
        """Fetch metadata for *text* and apply it unless a newer lookup started."""
        if token is None:
            token = self._next_lookup_token()
        paper = await self._papers.fetch_paper_by_doi(text)
        if token != self._lookup_token:
            logger.debug("Discarding stale lookup response for %r", text)
            return False
        self.paper = paper
        self.state.title = paper.title if paper.ok else ""
        if not paper.ok:
            logger.info("Lookup for %r failed: %s", text, paper.error)
        return True

    def _next_lookup_token(self) -> int:
        self._lookup_token += 1
        return self._lookup_token

    # ── Edit / preview ────────────────────────────────────────────────

    def show_edit(self) -> None:
        self.view_mode = ViewMode.EDIT

    def show_preview(self) -> None:
        self.view_mode = ViewMode.PREVIEW

    @property
    def is_preview(self) -> bool:
        return self.view_mode is ViewMode.PREVIEW

    def preview_html(self) -> str:
        """Review contents rendered from Markdown."""
        return self._renderer.render(self.state.review_contents)

    # ── Field input ───────────────────────────────────────────────────

    def update(self, contents: Optional[str] = None, tags: Optional[str] = None) -> None:
        """Store typed field values; None leaves a field unchanged."""
        if contents is not None:
            self.state.review_contents = contents
        if tags is not None:
            self.state.tags = tags

    def attach_image(self, filename: str, content: bytes, content_type: str) -> PendingImage:
        """Select a photo; it is uploaded when the review is submitted.

        Raises:
            ImageUploadDisabledError: If the form has no image field
            ValueError: If the file is not an image
        """
        if not self.has_image_upload:
            raise ImageUploadDisabledError("This form does not accept images")
        if not content_type or not content_type.startswith("image/"):
            raise ValueError(f"Not an image: {content_type or 'unknown type'}")

        pending = PendingImage(
            filename=filename,
            content=content,
            content_type=content_type,
            data_url=to_data_url(content, content_type),
        )
        # Single file input: a new selection replaces the previous one
        self.pending_files = [pending]
        self.state.photo_url = pending.data_url
        return pending

    def validate(self) -> dict[str, str]:
        """Field name → error message; empty when the form is valid."""
        data = self.state.as_form_data()
        if not self.has_image_upload:
            data.pop("photoUrl")
        _, errors = validate_form(data)
        return errors

    # ── Submit ────────────────────────────────────────────────────────

    @property
    def is_loading(self) -> bool:
        return isinstance(self.submission, Submitting)

    async def submit(self) -> SubmitResult:
        """Validate, check the looked-up paper, upload the photo and store the review."""
        if isinstance(self.submission, Submitting):
            return SubmitResult("rejected", alert="Submission already in progress")
        if isinstance(self.submission, Submitted):
            return SubmitResult("rejected", alert="Review already submitted")

        errors = self.validate()
        if errors:
            return SubmitResult("invalid", errors=errors)

        paper = self.paper
        if paper is None or not paper.ok:
            return SubmitResult("blocked", alert=INVALID_DOI)

        # Requests handled while the upload runs must not change what is stored
        fields = replace(self.state)
        pending = list(self.pending_files)
        record_id = self._new_record_id()
        self.submission = Submitting(record_id)
        try:
            image_url = await self._upload_pending(record_id, pending)
            record = self.build_record(record_id, paper, image_url, fields)
            await asyncio.to_thread(self._reviews.set_review, self.user_id, record)
        except Exception as e:
            logger.exception("Submitting review %s failed", record_id)
            reason = str(e) or e.__class__.__name__
            self.submission = Failed(reason)
            return SubmitResult("failed", alert=f"{SUBMIT_FAILED}: {reason}")

        self.submission = Submitted(record_id)
        self._discard()
        logger.info("Review %s stored for %s", record_id, self.user_id)
        return SubmitResult("submitted", record=record)

    async def _upload_pending(self, record_id: str, pending: list[PendingImage]) -> Optional[str]:
        """Upload the selected photo; "" when none, None without the image field."""
        if not self.has_image_upload:
            return None
        if not pending:
            return ""
        image = pending[0]
        return await asyncio.to_thread(
            self._images.upload_image, image.filename, image.content, record_id
        )

    def build_record(
        self,
        record_id: str,
        paper: PaperMetadata,
        image_url: Optional[str] = None,
        fields: Optional[FormState] = None,
    ) -> ReviewRecord:
        """Assemble the review from form fields and the paper snapshot.

        *fields* defaults to the current form state.
        """
        if not paper.ok:
            raise ValueError(f"Cannot build a review from a failed lookup: {paper.error}")
        fields = fields or self.state
        return ReviewRecord(
            id=record_id,
            contents=fields.review_contents,
            paper_title=paper.title,
            venue=paper.venue,
            year=paper.year,
            journal_name=paper.journal.name,
            journal_pages=paper.journal.pages,
            journal_vol=paper.journal.volume,
            authors=paper.first_author,
            doi=paper.doi,
            link=paper.url,
            reviewer_name=self.user_name,
            created_by=self.user_id,
            tags=split_tags(fields.tags),
            image_url=image_url,
        )

    def _new_record_id(self) -> str:
        """Millisecond timestamp id, strictly increasing within this form."""
        now_ms = int(self._clock() * 1000)
        if now_ms <= self._last_record_ms:
            now_ms = self._last_record_ms + 1
        self._last_record_ms = now_ms
        return str(now_ms)

    def _discard(self) -> None:
        """Drop everything the user entered."""
        self._debounced_lookup.cancel()
        self.state = FormState()
        self.paper = None
        self.pending_files = []
        self.view_mode = ViewMode.EDIT

    def close(self) -> None:
        """Abandon the form (cancel); pending lookups are dropped."""
        self._discard()
