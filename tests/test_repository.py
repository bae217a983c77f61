import sqlite3

import pytest

from paperreview.database.repository import ReviewRepository
from paperreview.models.review import ReviewRecord


def make_record(record_id: str, created_by: str = "user-1", tags=None, **kwargs) -> ReviewRecord:
    fields = dict(
        id=record_id,
        contents="Clear and convincing.",
        paper_title="Deep Learning",
        venue="Nature",
        year=2015,
        journal_name="Nature",
        journal_pages="436-444",
        journal_vol="521",
        authors="Yann LeCun",
        doi="10.1038/nature14539",
        link="https://www.semanticscholar.org/paper/abc",
        reviewer_name="Ada",
        created_by=created_by,
        tags=list(tags or []),
    )
    fields.update(kwargs)
    return ReviewRecord(**fields)


@pytest.fixture
def repo(tmp_path) -> ReviewRepository:
    return ReviewRepository(tmp_path / "reviews.db")


def test_set_review_round_trip(repo):
    stored = repo.set_review("user-1", make_record("1", tags=["ml", "vision", "ml"], image_url=""))

    assert stored.created_at is not None
    loaded = repo.get("1")
    assert loaded == stored
    assert loaded.tags == ["ml", "vision", "ml"]
    assert loaded.image_url == ""


def test_optional_image_url_stays_none(repo):
    repo.set_review("user-1", make_record("1"))

    assert repo.get("1").image_url is None


def test_set_review_rejects_foreign_owner(repo):
    with pytest.raises(ValueError):
        repo.set_review("user-2", make_record("1", created_by="user-1"))

    assert repo.count() == 0


def test_duplicate_id_is_rejected(repo):
    repo.set_review("user-1", make_record("1", tags=["a"]))

    with pytest.raises(sqlite3.IntegrityError):
        repo.set_review("user-1", make_record("1", tags=["b"]))

    assert repo.count() == 1
    assert repo.get("1").tags == ["a"]


def test_get_missing_returns_none(repo):
    assert repo.get("nope") is None


def test_find_by_user_and_tag(repo):
    repo.set_review("user-1", make_record("1", tags=["ml"]))
    repo.set_review("user-2", make_record("2", created_by="user-2", tags=["ml", "bio"]))
    repo.set_review("user-1", make_record("3", tags=["bio"]))

    assert {r.id for r in repo.find_by_user("user-1")} == {"1", "3"}
    assert {r.id for r in repo.find_by_tag("ml")} == {"1", "2"}
    assert repo.find_by_tag("physics") == []
    assert len(repo.find_recent(limit=2)) == 2
    assert repo.count() == 3
