import base64
import time
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from components.pastestore.app import create_app
from components.pastestore.config import EXPIRY_SECONDS, MAX_ENCRYPTED_SIZE, PasteSettings
from components.pastestore.store import InMemoryPasteStore

WEB_DIR = Path(__file__).resolve().parent.parent / "web"


def b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def make_client(store=None, web_dir=WEB_DIR, **overrides):
    settings = PasteSettings(PASTE_WEB_DIR=str(web_dir), **overrides)
    app = create_app(settings=settings, store=store, run_reaper=False)
    return TestClient(app)


def test_create_and_fetch_round_trip():
    c = make_client()
    r = c.post("/create", json={"ciphertext_b64": b64(b"\x01\x02\x03"), "nonce_b64": b64(bytes(12))})
    assert r.status_code == 200, r.text
    paste_id = r.json()["paste_id"]
    assert len(paste_id) == 22
    assert "x-request-id" in r.headers

    r2 = c.get(f"/api/paste/{paste_id}")
    assert r2.status_code == 200
    body = r2.json()
    assert base64.b64decode(body["ciphertext_b64"]) == b"\x01\x02\x03"
    assert base64.b64decode(body["nonce_b64"]) == bytes(12)


def test_create_accepts_legacy_field_name():
    c = make_client()
    r = c.post("/create", json={"encrypted_data_b64": b64(b"legacy"), "nonce_b64": b64(bytes(12))})
    assert r.status_code == 200, r.text


@pytest.mark.parametrize("payload,code", [
    ({"ciphertext_b64": "not base64!!", "nonce_b64": b64(bytes(12))}, "invalid_encoding"),
    ({"ciphertext_b64": b64(b"x"), "nonce_b64": "%%%"}, "invalid_encoding"),
    ({"ciphertext_b64": b64(b"x"), "nonce_b64": b64(bytes(8))}, "invalid_nonce"),
    ({"ciphertext_b64": "", "nonce_b64": b64(bytes(12))}, "invalid_payload"),
])
def test_create_validation_errors(payload, code):
    store = InMemoryPasteStore()
    c = make_client(store=store)
    r = c.post("/create", json=payload)
    assert r.status_code == 400
    assert r.json()["code"] == code
    assert store.count() == 0

    # a valid request lands in the same store the rejected one left untouched
    ok = c.post("/create", json={"ciphertext_b64": b64(b"ok"), "nonce_b64": b64(bytes(12))})
    assert ok.status_code == 200
    assert store.count() == 1
    assert store.fetch(ok.json()["paste_id"]).ciphertext == b"ok"


def test_create_app_keeps_supplied_empty_store():
    store = InMemoryPasteStore(max_entries=5)
    assert len(store) == 0
    app = create_app(settings=PasteSettings(PASTE_WEB_DIR=str(WEB_DIR)), store=store, run_reaper=False)
    assert app.state.store is store
    assert app.state.reaper.store is store


def test_package_exports_template_error():
    import components.pastestore as pastestore
    from components.pastestore.errors import TemplateUnavailable

    assert pastestore.TemplateUnavailable is TemplateUnavailable
    assert "TemplateUnavailable" in pastestore.__all__


def test_create_oversized_payload():
    c = make_client()
    too_big = bytes(MAX_ENCRYPTED_SIZE - 12 + 1)
    r = c.post("/create", json={"ciphertext_b64": b64(too_big), "nonce_b64": b64(bytes(12))})
    assert r.status_code == 400
    assert r.json()["code"] == "invalid_payload"


def test_create_collision_is_server_error():
    store = InMemoryPasteStore(id_factory=lambda: "C" * 22)
    c = make_client(store=store)
    body = {"ciphertext_b64": b64(b"one"), "nonce_b64": b64(bytes(12))}
    assert c.post("/create", json=body).status_code == 200
    r = c.post("/create", json=body)
    assert r.status_code == 500
    assert r.json()["code"] == "storage_conflict"


def test_create_when_full_is_unavailable():
    c = make_client(PASTE_MAX_ENTRIES=1)
    body = {"ciphertext_b64": b64(b"one"), "nonce_b64": b64(bytes(12))}
    assert c.post("/create", json=body).status_code == 200
    r = c.post("/create", json=body)
    assert r.status_code == 503
    assert r.json()["code"] == "store_full"


def test_fetch_unknown_and_malformed_ids():
    c = make_client()
    r = c.get("/api/paste/" + "A" * 22)
    assert r.status_code == 404
    assert r.json()["code"] == "not_found"

    r2 = c.get("/api/paste/" + "A" * 51)
    assert r2.status_code == 400
    assert r2.json()["code"] == "invalid_id"


def test_fetch_after_expiry_and_reap(clock):
    now, advance = clock
    store = InMemoryPasteStore(now=now)
    c = make_client(store=store)
    r = c.post("/create", json={"ciphertext_b64": b64(b"bye"), "nonce_b64": b64(bytes(12))})
    paste_id = r.json()["paste_id"]

    advance(EXPIRY_SECONDS + 1)
    store.reap_expired()
    assert c.get(f"/api/paste/{paste_id}").status_code == 404


def test_healthz_reports_count():
    c = make_client()
    assert c.get("/healthz").json()["pastes"] == 0
    c.post("/create", json={"ciphertext_b64": b64(b"h"), "nonce_b64": b64(bytes(12))})
    body = c.get("/healthz").json()
    assert body["ok"] is True
    assert body["pastes"] == 1


def test_pages_served_from_web_dir():
    c = make_client()
    r = c.get("/")
    assert r.status_code == 200
    assert "text/html" in r.headers["content-type"]
    r2 = c.get("/p/SomePasteId")
    assert r2.status_code == 200
    assert "/api/paste/" in r2.text


def test_pages_missing_template_is_500(tmp_path):
    c = make_client(web_dir=tmp_path)
    r = c.get("/")
    assert r.status_code == 500
    assert r.json()["code"] == "template_unavailable"
    assert c.get("/p/abc").status_code == 500


def test_lifespan_runs_reaper(clock):
    now, advance = clock
    store = InMemoryPasteStore(now=now)
    store.admit(b"expired", bytes(12))
    advance(EXPIRY_SECONDS + 1)

    settings = PasteSettings(PASTE_WEB_DIR=str(WEB_DIR), PASTE_CLEANUP_INTERVAL_SECONDS=0.01)
    app = create_app(settings=settings, store=store)
    with TestClient(app) as c:
        assert app.state.reaper.running
        deadline = time.monotonic() + 2
        while store.count() and time.monotonic() < deadline:
            time.sleep(0.01)
        assert c.get("/healthz").json()["pastes"] == 0
    assert not app.state.reaper.running
