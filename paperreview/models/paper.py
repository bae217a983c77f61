"""Paper metadata model."""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class Journal:
    """Journal block of a paper lookup."""

    name: str = ""
    pages: str = ""
    volume: str = ""


@dataclass(frozen=True)
class Author:
    """A single author entry (ordered as the service returns them)."""

    name: str


@dataclass(frozen=True)
class PaperMetadata:
    """Metadata of a paper fetched from the lookup service.

    Lookup failures are represented by ``error`` instead of an exception,
    so callers always get a value back.
    """

    title: str = ""
    venue: str = ""
    year: Optional[int] = None
    journal: Journal = field(default_factory=Journal)
    authors: tuple[Author, ...] = ()
    external_ids: dict[str, Any] = field(default_factory=dict)
    url: str = ""
    error: Optional[str] = None

    @classmethod
    def failed(cls, message: str) -> "PaperMetadata":
        """Build an error-flagged result."""
        return cls(error=message)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def doi(self) -> str:
        return str(self.external_ids.get("DOI") or "")

    @property
    def first_author(self) -> str:
        return self.authors[0].name if self.authors else ""
