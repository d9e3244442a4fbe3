"""App-wide helpers shared by the FastAPI app and its routers: env, logging, rate limiting."""
import json
import logging
import os
from datetime import datetime, timezone
from typing import List

from slowapi import Limiter
from slowapi.util import get_remote_address

from clinidash.middleware.tracing import TRACE_ID_CTX_VAR


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (ValueError, TypeError):
        return default


def env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name) or default
    return [item.strip() for item in raw.split(",") if item.strip()]


# ---------------- Logging ----------------
class JsonFormatter(logging.Formatter):
    def format(self, record):  # type: ignore[override]
        msg = record.msg if isinstance(record.msg, dict) else record.getMessage()
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "function": record.funcName,
            "message": msg,
            "trace_id": TRACE_ID_CTX_VAR.get() or None,
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging() -> logging.Logger:
    logger = logging.getLogger("clinidash")
    logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    return logger


# ---------------- Rate limiting ----------------
# Only the generative-language endpoints are limited; they cost money per call.
AI_RATE_LIMIT = os.getenv("AI_RATE_LIMIT", "20/minute")

limiter = Limiter(key_func=get_remote_address, default_limits=[])
