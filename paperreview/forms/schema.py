"""Validation schema for the review form."""

from typing import Any, Optional

from pydantic import AnyUrl, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator
from pydantic_core import PydanticCustomError

TITLE_REQUIRED = "Title Required"
CONTENTS_TOO_SHORT = "ReviewContents must be at least 2 characters."
INVALID_URL = "Invalid URL"

CONTENTS_MIN_LENGTH = 2

_url_adapter = TypeAdapter(AnyUrl)

# Error locations → form field names (pydantic may report either spelling)
_FIELD_NAMES = {
    "title": "title",
    "review_contents": "ReviewContents",
    "ReviewContents": "ReviewContents",
    "tags": "Tags",
    "Tags": "Tags",
    "photo_url": "photoUrl",
    "photoUrl": "photoUrl",
}


class ReviewFormSchema(BaseModel):
    """Review form input, keyed by the form's field names."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    review_contents: str = Field(alias="ReviewContents")
    tags: str = Field(default="", alias="Tags")
    photo_url: Optional[str] = Field(default=None, alias="photoUrl")

    @field_validator("title")
    @classmethod
    def _title_required(cls, value: str) -> str:
        if len(value) < 1:
            raise PydanticCustomError("title_required", TITLE_REQUIRED)
        return value

    @field_validator("review_contents")
    @classmethod
    def _contents_min_length(cls, value: str) -> str:
        if len(value) < CONTENTS_MIN_LENGTH:
            raise PydanticCustomError("contents_too_short", CONTENTS_TOO_SHORT)
        return value

    @field_validator("photo_url")
    @classmethod
    def _photo_url_is_url(cls, value: Optional[str]) -> Optional[str]:
        # Unset until an image is attached
        if not value:
            return None
        try:
            _url_adapter.validate_python(value)
        except ValidationError:
            raise PydanticCustomError("invalid_url", INVALID_URL) from None
        return value


def validate_form(data: dict[str, Any]) -> tuple[Optional[ReviewFormSchema], dict[str, str]]:
    """Validate raw form data.

    Returns:
        Tuple of (parsed form or None, field name → first error message)
    """
    try:
        return ReviewFormSchema.model_validate(data), {}
    except ValidationError as e:
        errors: dict[str, str] = {}
        for err in e.errors():
            loc = str(err["loc"][0]) if err["loc"] else "__root__"
            errors.setdefault(_FIELD_NAMES.get(loc, loc), err["msg"])
        return None, errors
