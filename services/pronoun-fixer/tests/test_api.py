"""Tests for the HTTP surface."""

import httpx
import pytest
from fastapi.testclient import TestClient

from pronoun_fixer import main
from pronoun_fixer.glossary import GlossaryLoader


@pytest.fixture
def client():
    return TestClient(main.app)


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_fix_with_inline_glossary(client, glossary_doc):
    resp = client.post("/fix", json={
        "blocks": ["Mary lifted his blade. He smiled."],
        "glossary": glossary_doc,
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["blocks"] == ["Mary lifted her blade. She smiled."]
    assert body["changed"] == 1
    assert body["glossary_ok"] is True
    assert body["characters"] == [{"name": "Mary", "gender": "female"}]
    assert body["report"]["nodes"]


def test_invalid_inline_glossary_reports_unusable(client):
    resp = client.post("/fix", json={"blocks": ["He left."], "glossary": {"site": {}}})
    assert resp.status_code == 200
    body = resp.json()
    assert body["glossary_ok"] is False
    assert body["blocks"] == ["He left."]
    assert body["changed"] == 0


def test_fetched_glossary_failure_reports_unusable(client, monkeypatch):
    transport = httpx.MockTransport(lambda request: httpx.Response(404))
    loader = GlossaryLoader("https://example.org/g.json",
                            client=httpx.AsyncClient(transport=transport))
    monkeypatch.setattr(main, "loader", loader)

    resp = client.post("/fix", json={"blocks": ["He left."]})
    assert resp.status_code == 200
    assert resp.json()["glossary_ok"] is False


def test_fetched_glossary_is_used(client, monkeypatch, glossary_doc):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=glossary_doc))
    loader = GlossaryLoader("https://example.org/g.json",
                            client=httpx.AsyncClient(transport=transport))
    monkeypatch.setattr(main, "loader", loader)

    resp = client.post("/fix", json={
        "blocks": ["Elder Wu raised her cup."],
        "url": "https://site/novel/123/7",
    })
    assert resp.json()["blocks"] == ["Elder Wu raised his cup."]


def test_validation_error_returns_422(client):
    resp = client.post("/fix", json={"blocks": "not a list"})
    assert resp.status_code == 422
    assert "body_preview" in resp.json()
