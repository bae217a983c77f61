"""Review form."""

from paperreview.forms.debounce import Debouncer
from paperreview.forms.review_form import (
    Failed,
    Idle,
    ImageUploadDisabledError,
    ReviewForm,
    SubmitResult,
    Submitted,
    Submitting,
    ViewMode,
)
from paperreview.forms.schema import ReviewFormSchema, validate_form

__all__ = [
    "Debouncer",
    "Failed",
    "Idle",
    "ImageUploadDisabledError",
    "ReviewForm",
    "ReviewFormSchema",
    "SubmitResult",
    "Submitted",
    "Submitting",
    "ViewMode",
    "validate_form",
]
