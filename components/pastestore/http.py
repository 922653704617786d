from __future__ import annotations

import base64
import binascii
import logging
from pathlib import Path

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse

from .contracts import CreatePasteRequest, CreatePasteResponse, GetPasteResponse, HealthResult
from .errors import InvalidEncoding, PasteError, TemplateUnavailable
from .store import PasteStore

log = logging.getLogger("pastestore.http")


def _b64decode(value: str, field: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        log.warning("paste.create bad_base64 field=%s error=%s", field, e)
        raise InvalidEncoding(f"Invalid {field} encoding")


def _b64encode(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def get_router(store: PasteStore) -> APIRouter:
    r = APIRouter(tags=["pastes"])

    @r.post("/create", response_model=CreatePasteResponse)
    def create_paste(req: CreatePasteRequest):
        nonce = _b64decode(req.nonce_b64, "nonce")
        ciphertext = _b64decode(req.ciphertext_b64, "ciphertext")
        paste_id = store.admit(ciphertext, nonce)
        return CreatePasteResponse(paste_id=paste_id)

    @r.get("/api/paste/{paste_id}", response_model=GetPasteResponse)
    def get_paste(paste_id: str):
        log.info("paste.fetch attempt id=%s", paste_id)
        record = store.fetch(paste_id)
        return GetPasteResponse(
            ciphertext_b64=_b64encode(record.ciphertext),
            nonce_b64=_b64encode(record.nonce),
        )

    @r.get("/healthz", response_model=HealthResult)
    def health():
        return HealthResult(pastes=store.count(), max_entries=getattr(store, "max_entries", None))

    return r


def read_html_file(web_dir: Path, filename: str) -> str:
    path = web_dir / filename
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        log.error("page.read failed path=%s error=%s", path, e)
        raise TemplateUnavailable()


def get_pages_router(web_dir: str) -> APIRouter:
    r = APIRouter(tags=["pages"])
    root = Path(web_dir)

    @r.get("/", response_class=HTMLResponse)
    def index():
        return HTMLResponse(read_html_file(root, "index.html"))

    # the page script reads the id from the path; the key never leaves the fragment
    @r.get("/p/{path:path}", response_class=HTMLResponse)
    def retrieve_page(path: str):
        return HTMLResponse(read_html_file(root, "retrieve.html"))

    return r


async def paste_error_handler(request: Request, exc: PasteError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PasteError, paste_error_handler)
