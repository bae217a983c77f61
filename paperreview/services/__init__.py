"""Service layer."""

from paperreview.services.image_service import ImageStore
from paperreview.services.markdown_service import MarkdownRenderer
from paperreview.services.paper_service import PaperService

__all__ = [
    "ImageStore",
    "MarkdownRenderer",
    "PaperService",
]
