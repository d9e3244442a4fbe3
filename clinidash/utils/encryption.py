import base64
import hashlib
import json
import logging
import os
from typing import Any

from cryptography.fernet import Fernet, InvalidToken
from sqlalchemy.types import TypeDecorator, Text

logger = logging.getLogger("clinidash")


def _build_cipher() -> Fernet:
    """Derive a stable Fernet key from ENCRYPTION_SECRET (or fallback dev secret)."""
    secret = os.getenv("ENCRYPTION_SECRET", "dev-secret-key-change-me").encode("utf-8")
    key = base64.urlsafe_b64encode(hashlib.sha256(secret).digest())
    return Fernet(key)


_CIPHER = _build_cipher()


class _FernetColumn(TypeDecorator):
    """Base for columns stored as Fernet tokens in a TEXT column."""

    impl = Text
    cache_ok = True

    def _dump(self, value: Any) -> str:
        raise NotImplementedError

    def _load(self, raw: str) -> Any:
        raise NotImplementedError

    def process_bind_param(self, value: Any, dialect) -> Any:  # type: ignore[override]
        if value is None:
            return None
        token = _CIPHER.encrypt(self._dump(value).encode("utf-8"))
        return token.decode("utf-8")

    def process_result_value(self, value: Any, dialect) -> Any:  # type: ignore[override]
        if value is None:
            return None
        try:
            raw = _CIPHER.decrypt(value.encode("utf-8")).decode("utf-8")
        except InvalidToken:
            # Rows written under a different ENCRYPTION_SECRET
            logger.warning({"function": "decrypt_column", "status": "invalid_token"})
            return None
        return self._load(raw)


class EncryptedText(_FernetColumn):
    """Clinical narrative text (notes, imaging reports) encrypted at rest."""

    def _dump(self, value: Any) -> str:
        return value if isinstance(value, str) else str(value)

    def _load(self, raw: str) -> Any:
        return raw


class EncryptedJSON(_FernetColumn):
    """JSON documents such as saved AI summaries, encrypted at rest."""

    def _dump(self, value: Any) -> str:
        return json.dumps(value, ensure_ascii=False)

    def _load(self, raw: str) -> Any:
        return json.loads(raw)
