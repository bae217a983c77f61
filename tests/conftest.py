import asyncio
from typing import Optional

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from paperreview.config import Settings
from paperreview.gui.app import app
from paperreview.gui.state import init_state, state
from paperreview.models.paper import PaperMetadata
from paperreview.services.paper_service import parse_paper

DOI = "10.1038/nature14539"

SAMPLE_PAPER = {
    "paperId": "0c908739fbff75f03469d13d4a1a07de3414ee19",
    "externalIds": {"DOI": DOI, "MAG": "2919115771", "PubMed": "26017442"},
    "url": "https://www.semanticscholar.org/paper/0c908739fbff75f03469d13d4a1a07de3414ee19",
    "title": "Deep Learning",
    "venue": "Nature",
    "year": 2015,
    "journal": {"name": "Nature", "pages": "436-444", "volume": "521"},
    "authors": [
        {"authorId": "1688882", "name": "Yann LeCun"},
        {"authorId": "1751762", "name": "Yoshua Bengio"},
        {"authorId": "1695689", "name": "Geoffrey E. Hinton"},
    ],
}


# === Collaborator fakes ===

class FakePapers:
    """Lookup stub: canned results per query, optional per-query delay."""

    def __init__(self, results: Optional[dict] = None, delays: Optional[dict] = None):
        self.results = results or {}
        self.delays = delays or {}
        self.calls: list[str] = []

    async def fetch_paper_by_doi(self, query: str) -> PaperMetadata:
        self.calls.append(query)
        await asyncio.sleep(self.delays.get(query, 0))
        return self.results.get(query, PaperMetadata.failed("Paper not found"))


class FakeReviews:
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.saved: list = []

    def set_review(self, user_id, record):
        if self.error is not None:
            raise self.error
        self.saved.append((user_id, record))
        return record


class FakeImages:
    def __init__(self, url: str = "https://x/img.png"):
        self.url = url
        self.uploads: list = []

    def upload_image(self, filename, content, record_id):
        self.uploads.append((filename, content, record_id))
        return self.url


# === Fixtures ===

@pytest.fixture(autouse=True)
def reset_settings():
    Settings.reset()
    yield
    Settings.reset()


@pytest.fixture
def paper() -> PaperMetadata:
    return parse_paper(SAMPLE_PAPER)


@pytest.fixture
def fake_papers(paper) -> FakePapers:
    return FakePapers(results={DOI: paper})


@pytest.fixture
def settings(tmp_path) -> Settings:
    settings = Settings.load(tmp_path)
    settings.update(debounce_ms=0, reviewer_id="user-1", reviewer_name="Ada")
    return settings


def semantic_scholar_handler(request: httpx.Request) -> httpx.Response:
    if "nature14539" in str(request.url):
        return httpx.Response(200, json=SAMPLE_PAPER)
    return httpx.Response(404, json={"error": "Paper with id not found"})


@pytest_asyncio.fixture
async def client(settings):
    """Async client against the app with a mocked Semantic Scholar."""
    init_state(settings, transport=httpx.MockTransport(semantic_scholar_handler))
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as ac:
        yield ac
    state.forms = {}
    state.form_touched = {}
