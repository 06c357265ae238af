import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from afk_waitlist.api.deps import get_rules, get_settings
from afk_waitlist.app_shell.config import validate_ops_rules
from afk_waitlist.rules.loader import load_rules

logger = logging.getLogger(__name__)

DEFAULT_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules and validate on startup (fail-fast)
    try:
        rules = get_rules()
    except (FileNotFoundError, ValueError) as e:
        print(f"CRITICAL: Rules load failed: {e}", file=sys.stderr)
        sys.exit(1)

    validate_ops_rules(rules, settings)
    logger.info("Rules loaded from %s", settings.rules_path)

    yield


def _cors_origins() -> list[str]:
    # Origins come from rules when readable; the lifespan reports load errors
    try:
        origins = load_rules(get_settings().rules_path).ops.cors_origins
    except (FileNotFoundError, ValueError):
        return DEFAULT_ORIGINS
    return origins or DEFAULT_ORIGINS


app = FastAPI(
    title="AFK Friends Waitlist API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from afk_waitlist.api.routes import public_waitlist  # noqa: E402

app.include_router(public_waitlist.router, prefix="/api/public", tags=["Waitlist"])


# CORS (Allow landing page)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    return {"status": "ok"}
