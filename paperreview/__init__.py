"""PaperReview - write reviews of academic papers looked up by DOI.

A small local web app that fetches paper metadata from Semantic Scholar,
lets a reviewer compose a Markdown review with tags and an optional
photo, and stores it in SQLite.
"""

__version__ = "1.0.0"

from paperreview.config import Settings
from paperreview.models.paper import PaperMetadata
from paperreview.models.review import ReviewRecord

__all__ = ["PaperMetadata", "ReviewRecord", "Settings", "__version__"]
