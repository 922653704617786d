from .contracts import PasteRecord, CreatePasteRequest, CreatePasteResponse, GetPasteResponse
from .errors import (
    PasteError,
    InvalidNonce,
    PayloadInvalid,
    InvalidEncoding,
    InvalidId,
    PasteNotFound,
    StorageConflict,
    StoreFull,
    TemplateUnavailable,
)
from .config import PasteSettings
from .store import PasteStore, InMemoryPasteStore, generate_id
from .reaper import ExpiryReaper
from .app import create_app

__all__ = [
    "PasteRecord",
    "CreatePasteRequest",
    "CreatePasteResponse",
    "GetPasteResponse",
    "PasteError",
    "InvalidNonce",
    "PayloadInvalid",
    "InvalidEncoding",
    "InvalidId",
    "PasteNotFound",
    "StorageConflict",
    "StoreFull",
    "TemplateUnavailable",
    "PasteSettings",
    "PasteStore",
    "InMemoryPasteStore",
    "generate_id",
    "ExpiryReaper",
    "create_app",
]
