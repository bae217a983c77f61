"""Text processing utilities for DOI handling, title cleaning and tags."""

import html
import re
from typing import Optional

# DOI regex pattern: 10.XXXX/... format
DOI_RE = re.compile(r"\b10\.\d{4,9}/[-._;()/:A-Z0-9]+\b", re.IGNORECASE)

# Semantic Scholar id prefixes accepted verbatim (e.g. "arXiv:2106.01234")
_PAPER_ID_PREFIXES = ("doi:", "arxiv:", "corpusid:", "pmid:", "pmcid:", "acl:", "mag:", "url:")


def normalize_doi(doi: str) -> str:
    """Normalize DOI by removing URL prefixes and converting to lowercase."""
    doi = doi.strip()
    doi = doi.replace("https://doi.org/", "").replace("http://doi.org/", "")
    doi = doi.replace("https://dx.doi.org/", "").replace("http://dx.doi.org/", "")
    return doi.strip().lower()


def extract_doi(text: str) -> Optional[str]:
    """Extract the first DOI found in free text (bare DOI, DOI URL, citation).

    Args:
        text: Raw user input

    Returns:
        Normalized DOI string if found, None otherwise
    """
    if not text or not isinstance(text, str):
        return None
    match = DOI_RE.search(text)
    if match:
        return normalize_doi(match.group(0))
    return None


def to_paper_id(query: str) -> Optional[str]:
    """Turn lookup input into a Semantic Scholar paper identifier.

    DOIs (bare or as URL) become ``DOI:<doi>``.  Inputs that already carry
    a known id prefix pass through unchanged.  Anything else yields None.
    """
    query = (query or "").strip()
    if not query:
        return None
    if query.lower().startswith(_PAPER_ID_PREFIXES) and not query.lower().startswith("doi:"):
        return query
    doi = extract_doi(query)
    if doi:
        return f"DOI:{doi}"
    return None


_TAG_RE = re.compile(r"<[^>]+>")


def clean_title(text: str) -> str:
    """Strip inline markup (``<i>``, ``<sub>``) and entities from a paper title."""
    if not text or not isinstance(text, str):
        return ""
    text = html.unescape(_TAG_RE.sub("", text))
    return " ".join(text.split())


def split_tags(raw: Optional[str]) -> list[str]:
    """Split a comma-delimited tag string, dropping blank entries.

    Entries are stripped of surrounding whitespace, so ``"a,,b, ,c"``
    gives ``["a", "b", "c"]``.  Duplicates and order are kept.
    """
    if not raw:
        return []
    return [t.strip() for t in raw.split(",") if t.strip()]
