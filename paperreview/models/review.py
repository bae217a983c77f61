"""Review record model."""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class ReviewRecord:
    """A user-authored review plus a snapshot of the paper's metadata."""

    id: str
    contents: str
    paper_title: str
    venue: str
    year: Optional[int]
    journal_name: str
    journal_pages: str
    journal_vol: str
    authors: str  # first author only
    doi: str
    link: str
    reviewer_name: str
    created_by: str
    tags: list[str] = field(default_factory=list)
    image_url: Optional[str] = None

    # Database field (set after persistence)
    created_at: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        """Return the record with the wire payload's camelCase keys."""
        payload: dict[str, Any] = {
            "id": self.id,
            "contents": self.contents,
            "paperTitle": self.paper_title,
            "venue": self.venue,
            "year": self.year,
            "journal_name": self.journal_name,
            "journal_pages": self.journal_pages,
            "journal_vol": self.journal_vol,
            "authors": self.authors,
            "doi": self.doi,
            "link": self.link,
            "reviewerName": self.reviewer_name,
            "createdBy": self.created_by,
            "tags": list(self.tags),
        }
        if self.image_url is not None:
            payload["imageUrl"] = self.image_url
        if self.created_at is not None:
            payload["createdAt"] = self.created_at
        return payload
