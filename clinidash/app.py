# --- imports (top of clinidash/app.py) ---
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Resolve paths early so env vars are available before importing the app modules
BASE_DIR = Path(__file__).resolve().parent
ROOT_DIR = BASE_DIR.parent
ENV_PATH = BASE_DIR / ".env"

if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

load_dotenv(ENV_PATH, override=False)

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from clinidash.models import init_db
from clinidash.middleware.tracing import TracingMiddleware
from clinidash.routes import ai_routes, analytics_routes, intake_routes, patient_routes, reference_routes
from clinidash.utils.app import configure_logging, env_list, limiter
from clinidash.utils.exceptions import (
    GeminiError,
    RecordNotFound,
    handle_gemini_exception,
    handle_http_exception,
    handle_rate_limit_exceeded,
    handle_record_not_found,
    handle_unhandled_exception,
    handle_validation_exception,
)

logger = configure_logging()

app = FastAPI(title="Clinical Dashboard Backend", version="0.1.0")

# ---- middleware ----
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(TracingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=env_list("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173"),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["x-trace-id", "Content-Disposition"],
)

# ---- error envelope ----
app.add_exception_handler(StarletteHTTPException, handle_http_exception)
app.add_exception_handler(HTTPException, handle_http_exception)
app.add_exception_handler(RequestValidationError, handle_validation_exception)
app.add_exception_handler(RecordNotFound, handle_record_not_found)
app.add_exception_handler(GeminiError, handle_gemini_exception)
app.add_exception_handler(RateLimitExceeded, handle_rate_limit_exceeded)
app.add_exception_handler(Exception, handle_unhandled_exception)


@app.on_event("startup")
def _init_db():
    if (os.getenv("SKIP_INIT_DB", "") or "").lower() in ("1", "true", "yes"):
        return
    init_db()
    logger.info({"function": "startup", "stage": "db_ready"})


# ---- routers ----
app.include_router(reference_routes.router)
app.include_router(patient_routes.router)
app.include_router(intake_routes.router)
app.include_router(analytics_routes.router)
app.include_router(ai_routes.router)


@app.get("/api/health")
def health():
    return {"status": "ok", "ai_configured": bool((os.getenv("GEMINI_API_KEY") or "").strip())}
