from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


@dataclass(frozen=True)
class PasteRecord:
    id: str
    ciphertext: bytes
    nonce: bytes
    created_at: float  # monotonic seconds

    def age(self, now: float) -> float:
        return now - self.created_at


# ---------- Wire models (base64 on the boundary, raw bytes inside) ----------

class CreatePasteRequest(BaseModel):
    ciphertext_b64: str = Field(
        ...,
        validation_alias=AliasChoices("ciphertext_b64", "encrypted_data_b64"),
        description="Base64 (standard alphabet) client-side ciphertext",
    )
    nonce_b64: str = Field(..., description="Base64 nonce, 12 bytes once decoded")


class CreatePasteResponse(BaseModel):
    paste_id: str


class GetPasteResponse(BaseModel):
    ciphertext_b64: str
    nonce_b64: str


class HealthResult(BaseModel):
    ok: bool = True
    pastes: int
    max_entries: Optional[int] = None
