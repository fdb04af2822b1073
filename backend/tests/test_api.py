"""API tests using FastAPI TestClient."""
import logging
import os

from starlette.datastructures import UploadFile

from ciit.core.config import MAX_IMAGE_BYTES
from ciit.domain.session.service import parse_timestamp


# ------------------------------------------------------------------
# Health
# ------------------------------------------------------------------
def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


# ------------------------------------------------------------------
# Catalog reads
# ------------------------------------------------------------------
def test_list_topics_in_file_order(client):
    resp = client.get("/api/topics")
    assert resp.status_code == 200
    assert [t["id"] for t in resp.json()] == ["energy", "nature"]
    assert resp.json()[0]["color"] == "amber"


def test_list_barriers(client):
    resp = client.get("/api/barriers")
    assert resp.status_code == 200
    data = resp.json()
    assert [b["id"] for b in data] == ["risk", "access"]
    assert data[0]["shortDescription"] == "Too risky"


def test_list_concepts(client):
    resp = client.get("/api/concepts")
    assert resp.status_code == 200
    concepts = {c["id"]: c for c in resp.json()}
    assert set(concepts) == {"acme-fund", "green-bond"}
    assert concepts["acme-fund"]["barrierSolutions"] == [{"barrierId": "risk", "explanation": "Diversified"}]
    assert "barrierSolutions" not in concepts["green-bond"]


# ------------------------------------------------------------------
# Concept edits
# ------------------------------------------------------------------
def test_patch_topics_clears_list_and_keeps_other_fields(client, read_concept):
    before = read_concept("acme-fund")
    resp = client.patch("/api/concepts/acme-fund/topics", json={"topics": []})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["concept"]["topics"] == []

    after = read_concept("acme-fund")
    assert after["topics"] == []
    for key in before:
        if key != "topics":
            assert after[key] == before[key]


def test_patch_topics_allows_duplicates(client):
    resp = client.patch("/api/concepts/green-bond/topics", json={"topics": ["energy", "energy"]})
    assert resp.json()["concept"]["topics"] == ["energy", "energy"]


def test_patch_topics_unknown_concept_is_404(client, data_dir):
    before = sorted(os.listdir(data_dir / "concepts"))
    resp = client.patch("/api/concepts/nope/topics", json={"topics": ["energy"]})
    assert resp.status_code == 404
    assert resp.json() == {"error": "Concept not found"}
    assert sorted(os.listdir(data_dir / "concepts")) == before


def test_patch_topics_refreshes_listing(client):
    client.patch("/api/concepts/acme-fund/topics", json={"topics": ["nature"]})
    concepts = {c["id"]: c for c in client.get("/api/concepts").json()}
    assert concepts["acme-fund"]["topics"] == ["nature"]


def test_put_concept_forces_path_id(client, read_concept):
    payload = {
        "id": "something-else",
        "name": "Acme Fund II",
        "tagline": "Now with more",
        "category": "Funds",
        "layer": "product",
        "image": "",
        "topics": ["nature"],
        "details": [],
    }
    resp = client.put("/api/concepts/acme-fund", json=payload)
    assert resp.status_code == 200
    assert resp.json()["concept"]["id"] == "acme-fund"
    stored = read_concept("acme-fund")
    assert stored["id"] == "acme-fund"
    assert stored["name"] == "Acme Fund II"
    # full replace: fields missing from the payload are gone
    assert "barrierSolutions" not in stored


def test_put_concept_unknown_is_404(client):
    resp = client.put("/api/concepts/missing", json={"name": "Ghost"})
    assert resp.status_code == 404


def test_create_concept_derives_id_from_name(client, read_concept):
    resp = client.post(
        "/api/concepts",
        json={"name": "Solar Co-op (Local)!", "tagline": "Rooftops", "topics": ["energy"], "details": []},
    )
    assert resp.status_code == 201
    concept = resp.json()["concept"]
    assert concept["id"] == "solar-co-op-local"
    assert concept["image"] == ""
    assert read_concept("solar-co-op-local")["tagline"] == "Rooftops"
    ids = [c["id"] for c in client.get("/api/concepts").json()]
    assert "solar-co-op-local" in ids


def test_create_concept_duplicate_id_is_conflict(client):
    resp = client.post("/api/concepts", json={"id": "acme-fund", "name": "Acme Fund"})
    assert resp.status_code == 409


def test_create_concept_requires_name(client):
    resp = client.post("/api/concepts", json={"tagline": "No name"})
    assert resp.status_code == 400


# ------------------------------------------------------------------
# Image upload
# ------------------------------------------------------------------
def test_upload_png_stores_file_named_after_concept(client, data_dir, read_concept):
    payload = b"\x89PNG\r\n\x1a\n" + bytes(1024 * 1024 - 8)
    resp = client.post(
        "/api/concepts/acme-fund/image",
        files={"image": ("photo.png", payload, "image/png")},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["image"] == "acme-fund.png"
    assert body["concept"]["image"] == "acme-fund.png"
    assert (data_dir / "images" / "acme-fund.png").read_bytes() == payload
    assert read_concept("acme-fund")["image"] == "acme-fund.png"


def test_upload_oversize_jpeg_is_rejected(client, data_dir, read_concept):
    payload = bytes(6 * 1024 * 1024)
    resp = client.post(
        "/api/concepts/green-bond/image",
        files={"image": ("big.jpg", payload, "image/jpeg")},
    )
    assert resp.status_code == 400
    assert read_concept("green-bond")["image"] == "green-bond.jpg"
    assert not (data_dir / "images" / "green-bond.jpg").exists()


def test_upload_at_size_limit_is_accepted(client, data_dir):
    payload = bytes(MAX_IMAGE_BYTES)
    resp = client.post(
        "/api/concepts/acme-fund/image",
        files={"image": ("edge.webp", payload, "image/webp")},
    )
    assert resp.status_code == 200
    assert (data_dir / "images" / "acme-fund.webp").stat().st_size == MAX_IMAGE_BYTES


def test_upload_reads_at_most_one_byte_past_limit(client, monkeypatch):
    sizes = []
    original_read = UploadFile.read

    async def recording_read(self, size=-1):
        sizes.append(size)
        return await original_read(self, size)

    monkeypatch.setattr(UploadFile, "read", recording_read)
    resp = client.post(
        "/api/concepts/green-bond/image",
        files={"image": ("big.jpg", bytes(MAX_IMAGE_BYTES + 4096), "image/jpeg")},
    )
    assert resp.status_code == 400
    assert "too large" in resp.json()["error"]
    assert sizes == [MAX_IMAGE_BYTES + 1]


def test_upload_bad_type_is_rejected(client, read_concept):
    resp = client.post(
        "/api/concepts/acme-fund/image",
        files={"image": ("notes.txt", b"hello", "text/plain")},
    )
    assert resp.status_code == 400
    assert "Invalid file type" in resp.json()["error"]
    assert read_concept("acme-fund")["image"] == ""


def test_upload_without_file_is_400(client):
    resp = client.post("/api/concepts/acme-fund/image")
    assert resp.status_code == 400
    assert resp.json() == {"error": "No image file provided"}


def test_upload_for_unknown_concept_is_404(client):
    resp = client.post(
        "/api/concepts/missing/image",
        files={"image": ("a.png", b"png", "image/png")},
    )
    assert resp.status_code == 404


# ------------------------------------------------------------------
# Sessions
# ------------------------------------------------------------------
def test_create_empty_session_assigns_id_and_start_time(client):
    resp = client.post("/api/sessions", json={})
    assert resp.status_code == 201
    created = resp.json()
    assert created["id"]
    assert parse_timestamp(created["startTime"]) is not None

    fetched = client.get(f"/api/sessions/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == created


def test_create_session_keeps_client_values(client):
    payload = {"id": "session-1", "startTime": "2024-03-01T10:00:00.000Z", "participantId": "P-7"}
    resp = client.post("/api/sessions", json=payload)
    assert resp.json() == payload


def test_put_then_get_round_trips_with_path_id(client):
    payload = {
        "id": "wrong-id",
        "participantId": "P-1",
        "participantRole": "Saver",
        "organizationType": "Individual",
        "consentGiven": True,
        "startTime": "2024-05-01T09:00:00.000Z",
        "hasInvestedInClimate": False,
        "selectedTopics": [],
        "customTopics": [],
        "selectedBarriers": ["risk"],
        "customBarriers": ["Too much jargon"],
        "conceptFeedback": {"acme-fund": {"rating": 4, "notes": "", "modifications": "", "timestamp": "t"}},
        "newIdeas": [],
        "notes": "",
        "dashboardColor": "teal",
    }
    put = client.put("/api/sessions/session-42", json=payload)
    assert put.status_code == 200
    expected = {**payload, "id": "session-42"}
    assert put.json() == expected
    assert client.get("/api/sessions/session-42").json() == expected


def test_list_sessions_newest_first(client):
    for sid, start in [
        ("session-a", "2024-01-01T00:00:00.000Z"),
        ("session-b", "2024-06-01T00:00:00.000Z"),
        ("session-c", "2024-03-01T00:00:00.000Z"),
    ]:
        client.put(f"/api/sessions/{sid}", json={"startTime": start})
    sessions = client.get("/api/sessions").json()
    assert [s["id"] for s in sessions] == ["session-b", "session-c", "session-a"]
    starts = [parse_timestamp(s["startTime"]) for s in sessions]
    assert starts == sorted(starts, reverse=True)


def test_list_sessions_status_filter(client):
    client.put("/api/sessions/s-done", json={"startTime": "2024-01-01T00:00:00Z", "endTime": "2024-01-01T01:00:00Z"})
    client.put("/api/sessions/s-open", json={"startTime": "2024-01-02T00:00:00Z"})
    done = client.get("/api/sessions", params={"status": "completed"}).json()
    open_ = client.get("/api/sessions", params={"status": "in-progress"}).json()
    assert [s["id"] for s in done] == ["s-done"]
    assert [s["id"] for s in open_] == ["s-open"]
    assert client.get("/api/sessions", params={"status": "archived"}).status_code == 400


def test_list_sessions_equal_start_times_keep_file_order(client):
    same = "2024-02-01T00:00:00.000Z"
    client.put("/api/sessions/s-2", json={"startTime": same})
    client.put("/api/sessions/s-1", json={"startTime": same})
    client.put("/api/sessions/s-0", json={"startTime": "2024-01-01T00:00:00.000Z"})
    client.put("/api/sessions/s-3", json={"startTime": "2024-03-01T00:00:00.000Z"})
    sessions = client.get("/api/sessions").json()
    assert [s["id"] for s in sessions] == ["s-3", "s-1", "s-2", "s-0"]


def test_put_creating_session_logs_warning(client, caplog):
    caplog.set_level(logging.WARNING, logger="ciit.application.session_app_service")
    client.put("/api/sessions/s-new", json={"startTime": "2024-01-01T00:00:00Z"})
    created = [r for r in caplog.records if "s-new" in r.getMessage()]
    assert len(created) == 1
    assert created[0].levelno == logging.WARNING
    assert "did not exist" in created[0].getMessage()

    caplog.clear()
    client.put("/api/sessions/s-new", json={"startTime": "2024-01-01T00:00:00Z", "notes": "again"})
    assert not [r for r in caplog.records if r.levelno >= logging.WARNING]


def test_status_filter_tolerates_malformed_session(client):
    client.put(
        "/api/sessions/s-odd",
        json={
            "startTime": "2024-01-01T00:00:00Z",
            "conceptFeedback": {"acme-fund": "great"},
            "newIdeas": ["loose text"],
            "selectedTopics": 7,
        },
    )
    client.put("/api/sessions/s-done", json={"startTime": "2024-01-02T00:00:00Z", "endTime": "2024-01-02T01:00:00Z"})
    open_ = client.get("/api/sessions", params={"status": "in-progress"})
    done = client.get("/api/sessions", params={"status": "completed"})
    assert open_.status_code == 200
    assert [s["id"] for s in open_.json()] == ["s-odd"]
    assert [s["id"] for s in done.json()] == ["s-done"]


def test_get_missing_session_is_404(client):
    resp = client.get("/api/sessions/session-0")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Session not found"}


def test_delete_session(client):
    created = client.post("/api/sessions", json={}).json()
    resp = client.delete(f"/api/sessions/{created['id']}")
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert client.get(f"/api/sessions/{created['id']}").status_code == 404
    assert client.delete(f"/api/sessions/{created['id']}").status_code == 404


def test_session_summary_drops_unknown_concepts(client):
    client.put(
        "/api/sessions/s-sum",
        json={
            "startTime": "2024-01-01T00:00:00Z",
            "selectedTopics": ["energy"],
            "customTopics": ["Housing"],
            "conceptFeedback": {
                "acme-fund": {"rating": 5, "notes": "Love it", "modifications": "", "timestamp": "t1"},
                "retired-concept": {"rating": 2, "notes": "", "modifications": "", "timestamp": "t2"},
            },
            "newIdeas": [{"id": "idea-1", "title": "Round-ups", "description": "", "timestamp": "t3"}],
        },
    )
    summary = client.get("/api/sessions/s-sum/summary").json()
    assert summary["reviewedCount"] == 2
    assert summary["topicCount"] == 2
    assert summary["ideaCount"] == 1
    assert summary["status"] == "in-progress"
    assert [r["concept"]["id"] for r in summary["reviewed"]] == ["acme-fund"]


def test_session_export_is_attachment(client):
    client.put("/api/sessions/s-exp", json={"startTime": "2024-01-01T00:00:00Z", "participantId": "P-9"})
    resp = client.get("/api/sessions/s-exp/export")
    assert resp.status_code == 200
    assert 'filename="session-P-9.json"' in resp.headers["content-disposition"]
    assert resp.json()["id"] == "s-exp"


def test_summary_skips_malformed_feedback_entries(client):
    client.put(
        "/api/sessions/s-odd",
        json={
            "startTime": "2024-01-01T00:00:00Z",
            "conceptFeedback": {
                "acme-fund": "great",
                "green-bond": {"rating": 4, "notes": "", "modifications": "", "timestamp": "t"},
            },
        },
    )
    resp = client.get("/api/sessions/s-odd/summary")
    assert resp.status_code == 200
    assert resp.json()["reviewedCount"] == 1
    assert [r["concept"]["id"] for r in resp.json()["reviewed"]] == ["green-bond"]
    assert client.get("/api/sessions/s-odd/export").status_code == 200


def test_non_object_session_file_is_json_500(client, data_dir):
    (data_dir / "sessions" / "listy.json").write_text('["not", "a", "session"]', encoding="utf-8")
    resp = client.get("/api/sessions/listy/summary")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}


def test_corrupt_session_file_is_500(client, data_dir):
    (data_dir / "sessions" / "broken.json").write_text("{not json", encoding="utf-8")
    resp = client.get("/api/sessions/broken")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}


def test_created_session_ids_are_unique(client):
    first = client.post("/api/sessions", json={}).json()["id"]
    second = client.post("/api/sessions", json={}).json()["id"]
    assert first != second
