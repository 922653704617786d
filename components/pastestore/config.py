from __future__ import annotations
from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Optional

MAX_ENCRYPTED_SIZE = 10 * 1024 * 1024  # encrypted data + nonce
PASTE_ID_LENGTH = 22
NONCE_LENGTH = 12  # AES-GCM
MAX_ID_LENGTH = 50
EXPIRY_SECONDS = 24 * 60 * 60
CLEANUP_INTERVAL_SECONDS = 60 * 60


class PasteSettings(BaseSettings):
    # Store limits
    PASTE_MAX_ENCRYPTED_SIZE: int = Field(default=MAX_ENCRYPTED_SIZE, gt=0)
    PASTE_ID_LENGTH: int = Field(default=PASTE_ID_LENGTH, gt=0)
    PASTE_NONCE_LENGTH: int = Field(default=NONCE_LENGTH, gt=0)
    PASTE_MAX_ID_LENGTH: int = Field(default=MAX_ID_LENGTH, gt=0)
    PASTE_MAX_ENTRIES: Optional[int] = Field(default=None, gt=0)  # None = unbounded
    # Expiry
    PASTE_EXPIRY_SECONDS: float = Field(default=EXPIRY_SECONDS, gt=0)
    PASTE_CLEANUP_INTERVAL_SECONDS: float = Field(default=CLEANUP_INTERVAL_SECONDS, gt=0)
    # Serving
    PASTE_WEB_DIR: str = Field(default="./web")
    PASTE_ADDR: str = Field(default="0.0.0.0:8080")
    PASTE_TLS_CERT: Optional[str] = None
    PASTE_TLS_KEY: Optional[str] = None
    PASTE_LOG_LEVEL: str = Field(default="INFO")

    class Config:
        env_file = ".env"
        case_sensitive = False
