from __future__ import annotations
from typing import Dict, Optional


class PasteError(Exception):
    """Base error for the paste store. Carries its own HTTP mapping."""

    code: str = "internal_error"
    message: str = "Internal server error"
    status_code: int = 500

    def __init__(self, message: Optional[str] = None, details: Optional[Dict] = None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details or {}

    def to_payload(self) -> Dict:
        return {"detail": self.message, "code": self.code}


# ---- validation (client-caused, 4xx) ----

class InvalidNonce(PasteError):
    code = "invalid_nonce"
    message = "Invalid nonce length"
    status_code = 400


class PayloadInvalid(PasteError):
    """Ciphertext empty, or ciphertext + nonce above the size limit."""

    code = "invalid_payload"
    message = "Encrypted content exceeds maximum size limit or is empty"
    status_code = 400


class InvalidEncoding(PasteError):
    code = "invalid_encoding"
    message = "Invalid base64 encoding"
    status_code = 400


class InvalidId(PasteError):
    code = "invalid_id"
    message = "Invalid paste id"
    status_code = 400


class PasteNotFound(PasteError):
    code = "not_found"
    message = "Paste not found"
    status_code = 404


# ---- server-side ----

class StorageConflict(PasteError):
    """Freshly generated id already present. Safe to retry."""

    code = "storage_conflict"
    message = "Could not save paste, please try again."
    status_code = 500


class StoreFull(PasteError):
    code = "store_full"
    message = "Paste store is at capacity, please try again later."
    status_code = 503


class TemplateUnavailable(PasteError):
    code = "template_unavailable"
    message = "Internal error: Could not load page template."
    status_code = 500
