from __future__ import annotations

import logging
import math
import secrets
import string
import time
from typing import Callable, Dict, Optional

from .config import (
    EXPIRY_SECONDS,
    MAX_ENCRYPTED_SIZE,
    MAX_ID_LENGTH,
    NONCE_LENGTH,
    PASTE_ID_LENGTH,
    PasteSettings,
)
from .contracts import PasteRecord
from .errors import InvalidId, InvalidNonce, PasteNotFound, PayloadInvalid, StorageConflict, StoreFull
from .locks import ReadWriteLock

log = logging.getLogger("pastestore.store")

TimeFn = Callable[[], float]
IdFactory = Callable[[], str]

ID_ALPHABET = string.ascii_letters + string.digits


def generate_id(length: int = PASTE_ID_LENGTH) -> str:
    """Uniform sample of `length` characters from [A-Za-z0-9]."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


class PasteStore:
    """Port interface for the paste blob store."""

    def generate_id(self) -> str:
        raise NotImplementedError

    def admit(self, ciphertext: bytes, nonce: bytes) -> str:
        """Validate and insert a new record, returning its id."""
        raise NotImplementedError

    def fetch(self, paste_id: str) -> PasteRecord:
        raise NotImplementedError

    def reap_expired(self, now: Optional[float] = None) -> int:
        """Remove records older than the TTL and return how many went."""
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def __len__(self) -> int:
        return self.count()


class InMemoryPasteStore(PasteStore):
    """Process-local paste store guarded by a readers-writer lock.

    Nothing survives a restart. Expiry is only enforced by `reap_expired`,
    so a record may outlive its TTL until the next sweep.
    """

    def __init__(
        self,
        now: Optional[TimeFn] = None,
        id_factory: Optional[IdFactory] = None,
        *,
        max_encrypted_size: int = MAX_ENCRYPTED_SIZE,
        nonce_length: int = NONCE_LENGTH,
        id_length: int = PASTE_ID_LENGTH,
        max_id_length: int = MAX_ID_LENGTH,
        expiry_seconds: float = EXPIRY_SECONDS,
        max_entries: Optional[int] = None,
    ):
        self._data: Dict[str, PasteRecord] = {}
        self._lock = ReadWriteLock()
        self._now = now or time.monotonic
        self._id_factory = id_factory
        self.max_encrypted_size = max_encrypted_size
        self.nonce_length = nonce_length
        self.id_length = id_length
        self.max_id_length = max_id_length
        self.expiry_seconds = expiry_seconds
        self.max_entries = max_entries

    @classmethod
    def from_settings(
        cls,
        settings: PasteSettings,
        now: Optional[TimeFn] = None,
        id_factory: Optional[IdFactory] = None,
    ) -> "InMemoryPasteStore":
        return cls(
            now=now,
            id_factory=id_factory,
            max_encrypted_size=settings.PASTE_MAX_ENCRYPTED_SIZE,
            nonce_length=settings.PASTE_NONCE_LENGTH,
            id_length=settings.PASTE_ID_LENGTH,
            max_id_length=settings.PASTE_MAX_ID_LENGTH,
            expiry_seconds=settings.PASTE_EXPIRY_SECONDS,
            max_entries=settings.PASTE_MAX_ENTRIES,
        )

    # ---------- Public API ----------
    def generate_id(self) -> str:
        if self._id_factory is not None:
            return self._id_factory()
        return generate_id(self.id_length)

    def admit(self, ciphertext: bytes, nonce: bytes) -> str:
        if len(nonce) != self.nonce_length:
            log.warning("paste.admit invalid_nonce len=%s expected=%s", len(nonce), self.nonce_length)
            raise InvalidNonce(f"Invalid nonce length. Expected {self.nonce_length}")
        if not ciphertext or len(ciphertext) + len(nonce) > self.max_encrypted_size:
            log.warning("paste.admit invalid_payload size=%s limit=%s", len(ciphertext), self.max_encrypted_size)
            raise PayloadInvalid()

        paste_id = self.generate_id()
        record = PasteRecord(id=paste_id, ciphertext=bytes(ciphertext), nonce=bytes(nonce), created_at=self._now())
        rejected = None
        with self._lock.write_locked():
            if paste_id in self._data:
                rejected = StorageConflict()
            elif self.max_entries is not None and len(self._data) >= self.max_entries:
                rejected = StoreFull()
            else:
                self._data[paste_id] = record

        if isinstance(rejected, StorageConflict):
            log.error("paste.admit collision id=%s", paste_id)
            raise rejected
        if rejected is not None:
            log.error("paste.admit store_full max_entries=%s", self.max_entries)
            raise rejected
        log.info("paste.admit ok id=%s size=%s", paste_id, len(ciphertext))
        return paste_id

    def fetch(self, paste_id: str) -> PasteRecord:
        if not paste_id or len(paste_id) > self.max_id_length:
            log.warning("paste.fetch invalid_id len=%s", len(paste_id or ""))
            raise InvalidId()

        with self._lock.read_locked():
            record = self._data.get(paste_id)
        if record is None:
            log.warning("paste.fetch not_found id=%s", paste_id)
            raise PasteNotFound()
        return record

    def reap_expired(self, now: Optional[float] = None) -> int:
        malformed = []
        with self._lock.write_locked():
            now = self._now() if now is None else now
            expired = []
            for pid, rec in self._data.items():
                if not self._has_valid_timestamp(rec):
                    malformed.append(rec)
                    expired.append(pid)
                elif now - rec.created_at > self.expiry_seconds:
                    expired.append(pid)
            for pid in expired:
                del self._data[pid]
            remaining = len(self._data)

        # logging stays outside the write section
        for rec in malformed:
            log.error("paste.reap malformed_record id=%s created_at=%r", rec.id, rec.created_at)
        for pid in expired:
            log.info("paste.reap deleted id=%s", pid)
        log.info("paste.reap finished removed=%s remaining=%s", len(expired), remaining)
        return len(expired)

    def count(self) -> int:
        with self._lock.read_locked():
            return len(self._data)

    # ---------- Internals ----------
    @staticmethod
    def _has_valid_timestamp(record: PasteRecord) -> bool:
        created = record.created_at
        return isinstance(created, (int, float)) and math.isfinite(created)
