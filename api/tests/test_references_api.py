# api/tests/test_references_api.py
"""
Tests for the /api/references endpoints.
"""

import os
import sys

# Add api directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from conftest import make_records
from routes import references_api
from server import create_app
from services.references import ReferenceService, StoreQueryError


@pytest.fixture
def client(verse_store, scheme, monkeypatch):
    verse_store.insert_verses(make_records(scheme, "John", 3, [16, 17]))
    service = ReferenceService(store=verse_store, scheme=scheme, translation="kjv")
    monkeypatch.setattr(references_api, "_service", service)

    app = create_app()
    app.config["TESTING"] = True
    return app.test_client()


def test_lookup(client):
    resp = client.get("/api/references/lookup", query_string={"ref": "John 3:16-17"})

    assert resp.status_code == 200
    data = resp.get_json()
    assert data["text"] == "[16] John 3:16 [17] John 3:17"
    assert data["segments"] == ["John 3:16-17"]
    assert data["complete"] is True


def test_lookup_requires_ref(client):
    resp = client.get("/api/references/lookup")

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "ref_required"


def test_lookup_invalid_reference(client):
    resp = client.get("/api/references/lookup", query_string={"ref": "Genesis 1:"})

    assert resp.status_code == 400
    data = resp.get_json()
    assert data["error"] == "invalid_reference"
    assert data["ref"] == "Genesis 1:"
    assert "missing verse number" in data["detail"]


def test_lookup_not_found(client):
    resp = client.get("/api/references/lookup", query_string={"ref": "Jude 1:1"})

    assert resp.status_code == 404
    assert resp.get_json()["error"] == "not_found"


class _FailingService:
    def lookup(self, reference):
        raise StoreQueryError("disk I/O error")

    def get_verses_by_references(self, references):
        raise StoreQueryError("disk I/O error")


def test_store_failure_is_500(client, monkeypatch):
    monkeypatch.setattr(references_api, "_service", _FailingService())

    resp = client.get("/api/references/lookup", query_string={"ref": "John 3:16"})
    assert resp.status_code == 500
    assert resp.get_json()["error"] == "lookup_failed"

    resp = client.post("/api/references/batch", json={"references": ["John 3:16"]})
    assert resp.status_code == 500


def test_batch(client):
    resp = client.post(
        "/api/references/batch",
        json={"references": ["John 3:16", "NoSuchBook 1:1"]},
    )

    assert resp.status_code == 200
    assert resp.get_json() == {
        "results": {"John 3:16": "John 3:16"},
        "missing": ["NoSuchBook 1:1"],
    }


def test_batch_validates_body(client):
    resp = client.post("/api/references/batch", json={})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "references_required"

    resp = client.post("/api/references/batch", json={"references": "John 3:16"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "invalid_references"


def test_validate(client):
    resp = client.get("/api/references/validate", query_string={"ref": "John 11:35-30"})

    assert resp.status_code == 200
    data = resp.get_json()
    assert data["valid"] is False
    assert "greater than end verse" in data["reason"]

    resp = client.get("/api/references/validate", query_string={"ref": "John 3:16"})
    assert resp.get_json() == {"ref": "John 3:16", "valid": True, "reason": None}


def test_split(client):
    resp = client.get("/api/references/split", query_string={"ref": "1 John 5:18-2 John 1:3"})

    assert resp.status_code == 200
    assert resp.get_json()["segments"] == ["1 John 5:18-176", "2 John 1:1-3"]


def test_create_app_rejects_unknown_scheme(monkeypatch):
    import server

    monkeypatch.setattr(server, "VERSE_ID_SCHEME", "bogus")

    with pytest.raises(ValueError, match="Unknown verse id scheme 'bogus'"):
        server.create_app()


def test_create_app_records_scheme():
    app = create_app()
    assert app.config["VERSE_ID_SCHEME"] in ("genesis_special", "digit_packed")


def test_parsing_endpoints_do_not_need_the_store(client, monkeypatch):
    def unavailable():
        raise StoreQueryError("verse database unavailable")

    monkeypatch.setattr(references_api, "get_service", unavailable)

    resp = client.get("/api/references/validate", query_string={"ref": "John 3:16"})
    assert resp.status_code == 200
    assert resp.get_json()["valid"] is True

    resp = client.get("/api/references/split", query_string={"ref": "John 3"})
    assert resp.status_code == 200
    assert resp.get_json()["segments"] == ["John 3:1-176"]
