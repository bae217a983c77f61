"""Semantic Scholar client for looking up paper metadata by DOI."""

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from paperreview.models.paper import Author, Journal, PaperMetadata
from paperreview.utils.text import clean_title, to_paper_id

logger = logging.getLogger(__name__)

SEMANTIC_SCHOLAR_PAPER_URL = "https://api.semanticscholar.org/graph/v1/paper/{paper_id}"
FIELDS = "title,venue,year,journal,authors,externalIds,url"
TIMEOUT = 10.0


class PaperService:
    """Looks papers up by DOI (or another Semantic Scholar id).

    Errors never raise: they come back as ``PaperMetadata(error=...)``.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the lookup service.

        Args:
            api_key: Optional Semantic Scholar API key (sent as ``x-api-key``)
            timeout: Request timeout in seconds
            transport: Custom httpx transport (tests use ``httpx.MockTransport``)
        """
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    def _build_headers(self) -> dict[str, str]:
        if self.api_key:
            return {"x-api-key": self.api_key}
        return {}

    async def fetch_paper_by_doi(self, query: str) -> PaperMetadata:
        """Fetch paper metadata for raw lookup input.

        Args:
            query: DOI, DOI URL, or prefixed Semantic Scholar id.

        Returns:
            PaperMetadata; ``error`` is set when the lookup failed.
        """
        paper_id = to_paper_id(query)
        if paper_id is None:
            return PaperMetadata.failed("DOI is empty" if not (query or "").strip() else "Not a DOI")

        url = SEMANTIC_SCHOLAR_PAPER_URL.format(paper_id=quote(paper_id, safe=":/"))
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                headers=self._build_headers(),
                transport=self._transport,
            ) as client:
                response = await client.get(url, params={"fields": FIELDS})
                if response.status_code == 404:
                    return PaperMetadata.failed("Paper not found")
                if response.status_code != 200:
                    logger.warning("Lookup for %s returned %s", paper_id, response.status_code)
                    return PaperMetadata.failed(f"Semantic Scholar returned {response.status_code}")
                return parse_paper(response.json())
        except httpx.TimeoutException:
            logger.warning("Lookup for %s timed out", paper_id)
            return PaperMetadata.failed("Semantic Scholar request timed out")
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Lookup for %s failed: %s", paper_id, e)
            return PaperMetadata.failed(str(e))


def parse_paper(data: dict[str, Any]) -> PaperMetadata:
    """Build PaperMetadata from a Semantic Scholar paper object."""
    if not isinstance(data, dict):
        return PaperMetadata.failed("Malformed response")

    # Journal may be null or missing any of its keys
    journal_data = data.get("journal") or {}
    journal = Journal(
        name=str(journal_data.get("name") or ""),
        pages=str(journal_data.get("pages") or "").strip(),
        volume=str(journal_data.get("volume") or "").strip(),
    )

    authors = tuple(
        Author(name=str(a["name"]))
        for a in data.get("authors") or []
        if isinstance(a, dict) and a.get("name")
    )

    year = data.get("year")
    return PaperMetadata(
        title=clean_title(data.get("title") or ""),
        venue=str(data.get("venue") or ""),
        year=int(year) if isinstance(year, (int, str)) and str(year).isdigit() else None,
        journal=journal,
        authors=authors,
        external_ids=dict(data.get("externalIds") or {}),
        url=str(data.get("url") or ""),
    )
