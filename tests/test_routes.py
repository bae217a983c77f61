import pytest

from paperreview.gui.state import state

from conftest import DOI

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


async def open_form(client, image: bool = False) -> str:
    before = set(state.forms)
    response = await client.get("/reviews/new", params={"image": "1"} if image else {})
    assert response.status_code == 200
    (form_id,) = set(state.forms) - before
    return form_id


async def test_index_lists_nothing_yet(client):
    response = await client.get("/")

    assert response.status_code == 200
    assert "No reviews yet" in response.text
    assert "Ada" in response.text


async def test_new_form_page(client):
    form_id = await open_form(client)

    form = state.forms[form_id]
    assert form.user_id == "user-1"
    assert form.user_name == "Ada"
    assert not form.has_image_upload


async def test_lookup_fills_title(client):
    form_id = await open_form(client)

    response = await client.post(f"/reviews/form/{form_id}/lookup", data={"doi": DOI})

    assert response.status_code == 200
    assert "Deep Learning" in response.text
    assert "Yann LeCun" in response.text


async def test_lookup_error_is_shown(client):
    form_id = await open_form(client)

    response = await client.post(f"/reviews/form/{form_id}/lookup", data={"doi": "10.9999/missing"})

    assert response.status_code == 200
    assert "Paper not found" in response.text


async def test_unknown_form_is_404(client):
    response = await client.post("/reviews/form/nope/lookup", data={"doi": DOI})

    assert response.status_code == 404


async def test_preview_round_trip_keeps_contents(client):
    form_id = await open_form(client)
    text = "**Bold** claim & <b>raw</b>"

    preview = await client.post(f"/reviews/form/{form_id}/mode/preview", data={"ReviewContents": text})
    assert preview.status_code == 200
    assert "<strong>Bold</strong>" in preview.text
    assert "<b>raw</b>" not in preview.text

    # The preview has no textarea, so nothing is posted back
    edit = await client.post(f"/reviews/form/{form_id}/mode/edit")
    assert edit.status_code == 200
    assert "&lt;b&gt;raw&lt;/b&gt;" in edit.text
    assert state.forms[form_id].state.review_contents == text


async def test_submit_without_lookup_shows_errors(client):
    form_id = await open_form(client)

    response = await client.post(
        f"/reviews/form/{form_id}/submit",
        data={"ReviewContents": "x", "Tags": ""},
    )

    assert response.status_code == 200
    assert "Title Required" in response.text
    assert "ReviewContents must be at least 2 characters." in response.text
    assert state.repo.count() == 0


async def test_full_submission(client):
    form_id = await open_form(client)
    await client.post(f"/reviews/form/{form_id}/lookup", data={"doi": DOI})

    response = await client.post(
        f"/reviews/form/{form_id}/submit",
        data={"ReviewContents": "A *landmark* survey.", "Tags": "a,,b, ,c"},
    )

    assert response.status_code == 204
    location = response.headers["HX-Redirect"]
    assert location.startswith("/reviews/")
    assert form_id not in state.forms

    payloads = (await client.get("/api/reviews")).json()
    assert len(payloads) == 1
    payload = payloads[0]
    assert payload["paperTitle"] == "Deep Learning"
    assert payload["authors"] == "Yann LeCun"
    assert payload["doi"] == DOI
    assert payload["tags"] == ["a", "b", "c"]
    assert payload["createdBy"] == "user-1"
    assert payload["reviewerName"] == "Ada"
    assert "imageUrl" not in payload

    detail = await client.get(location)
    assert detail.status_code == 200
    assert "<em>landmark</em>" in detail.text


async def test_submit_with_photo(client):
    form_id = await open_form(client, image=True)
    assert state.forms[form_id].has_image_upload
    await client.post(f"/reviews/form/{form_id}/lookup", data={"doi": DOI})

    attached = await client.post(
        f"/reviews/form/{form_id}/image",
        files={"photo": ("figure.png", PNG_BYTES, "image/png")},
    )
    assert attached.status_code == 200
    assert "data:image/png;base64," in attached.text

    response = await client.post(
        f"/reviews/form/{form_id}/submit",
        data={"ReviewContents": "Nice figures.", "Tags": "viz"},
    )
    assert response.status_code == 204

    (payload,) = (await client.get("/api/reviews")).json()
    assert payload["imageUrl"] == f"/uploads/{payload['id']}/figure.png"

    image = await client.get(payload["imageUrl"])
    assert image.status_code == 200
    assert image.content == PNG_BYTES


async def test_photo_rejected_on_plain_form(client):
    form_id = await open_form(client)

    response = await client.post(
        f"/reviews/form/{form_id}/image",
        files={"photo": ("figure.png", PNG_BYTES, "image/png")},
    )

    assert response.status_code == 400


async def test_non_image_rejected(client):
    form_id = await open_form(client, image=True)

    response = await client.post(
        f"/reviews/form/{form_id}/image",
        files={"photo": ("notes.txt", b"hello", "text/plain")},
    )

    assert response.status_code == 400
    assert "Not an image" in response.text


async def test_persistence_failure_is_reported(client, monkeypatch):
    form_id = await open_form(client)
    await client.post(f"/reviews/form/{form_id}/lookup", data={"doi": DOI})

    def broken(user_id, record):
        raise RuntimeError("database is locked")

    monkeypatch.setattr(state.repo, "set_review", broken)
    response = await client.post(
        f"/reviews/form/{form_id}/submit",
        data={"ReviewContents": "Solid work.", "Tags": ""},
    )

    assert response.status_code == 200
    assert "database is locked" in response.text
    assert "You can submit again." in response.text
    assert form_id in state.forms


async def test_cancel_discards_form(client):
    form_id = await open_form(client)

    response = await client.post(f"/reviews/form/{form_id}/cancel")

    assert response.status_code == 204
    assert response.headers["HX-Redirect"] == "/"
    assert form_id not in state.forms


async def test_idle_forms_are_dropped(client, monkeypatch):
    now = [1000.0]
    monkeypatch.setattr(state, "clock", lambda: now[0])
    idle = await open_form(client, image=True)
    active = await open_form(client)

    now[0] += state.settings.form_ttl - 1
    await client.post(f"/reviews/form/{active}/mode/edit", data={"ReviewContents": "draft"})
    now[0] += 2
    fresh = await open_form(client)

    assert idle not in state.forms
    assert idle not in state.form_touched
    assert active in state.forms
    assert fresh in state.forms
    response = await client.post(f"/reviews/form/{idle}/lookup", data={"doi": DOI})
    assert response.status_code == 404


async def test_page_reloads_do_not_pile_up(client, monkeypatch):
    now = [0.0]
    monkeypatch.setattr(state, "clock", lambda: now[0])

    for _ in range(20):
        await open_form(client)
        now[0] += state.settings.form_ttl + 1

    assert len(state.forms) == 1


@pytest.mark.parametrize("path", ["/reviews/does-not-exist", "/uploads/1/missing.png"])
async def test_missing_resources_are_404(client, path):
    response = await client.get(path)

    assert response.status_code == 404
