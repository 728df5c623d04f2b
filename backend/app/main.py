import logging
import os
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from . import db
from .routers import matches, players, streams, teams
from .exceptions import DomainException, ProblemDetail
from .config import API_PREFIX, FINALIZE_MAX_ATTEMPTS, RATING_K_FACTOR
from .rate_limit import limiter, rate_limit_handler
from .services.handicap import HANDICAP_CHARTS
from .utils.sentry import init_sentry

logger = logging.getLogger(__name__)

init_sentry()


def _parse_allowed_origins(raw: str) -> list[str]:
    """Split ``ALLOWED_ORIGINS``; an empty list or a wildcard is rejected."""
    raw = raw.strip()
    if not raw:
        raise ValueError(
            "ALLOWED_ORIGINS environment variable must be set to a comma-separated "
            "list of trusted origins."
        )
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    if not origins:
        raise ValueError("ALLOWED_ORIGINS must contain at least one non-empty origin.")
    if "*" in origins:
        raise ValueError(
            "ALLOWED_ORIGINS cannot include '*' (wildcard). Specify explicit, trusted origins."
        )
    return origins


ALLOWED_ORIGINS = _parse_allowed_origins(os.getenv("ALLOWED_ORIGINS", ""))
ALLOW_CREDENTIALS = os.getenv("ALLOW_CREDENTIALS", "true").lower() == "true"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Pool league API starting: prefix=%r k=%d finalize_attempts=%d disciplines=%s",
        API_PREFIX,
        RATING_K_FACTOR,
        FINALIZE_MAX_ATTEMPTS,
        ", ".join(sorted(d.value for d in HANDICAP_CHARTS)),
    )
    yield
    if db.engine is not None:
        await db.engine.dispose()


app = FastAPI(
    title="Pool League API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/healthz", tags=["health"])  # Unprefixed for reverse proxy / uptime checks
def root_healthz():
    return {"status": "ok"}


# -----------------------------------------------------------------------------
# Error handling
# -----------------------------------------------------------------------------
def _problem_response(problem: ProblemDetail) -> JSONResponse:
    return JSONResponse(
        status_code=problem.status,
        content=problem.model_dump(),
        media_type="application/problem+json",
    )


@app.exception_handler(DomainException)
async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    return _problem_response(
        ProblemDetail(
            type=exc.type,
            title=exc.title,
            detail=exc.detail,
            status=exc.status_code,
            code=exc.code,
        )
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _problem_response(
        ProblemDetail(
            title=detail,
            detail=detail,
            status=exc.status_code,
            code=getattr(exc, "code", f"http_{exc.status_code}"),
        )
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled exception", exc_info=(type(exc), exc, exc.__traceback__))
    return _problem_response(
        ProblemDetail(
            title="Internal Server Error",
            status=500,
            detail=str(exc),
            code="internal_server_error",
        )
    )


# -----------------------------------------------------------------------------
# Routers
# -----------------------------------------------------------------------------
api_router = APIRouter(prefix=API_PREFIX, tags=["meta"])


@api_router.get("/healthz", tags=["health"])
async def api_healthz():
    """Liveness plus a round trip to the record store."""
    try:
        async with db.get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, RuntimeError) as exc:
        logger.warning("Database health check failed: %s", exc)
        return JSONResponse(
            status_code=503, content={"status": "degraded", "database": "unavailable"}
        )
    return {"status": "ok", "database": "ok"}


@api_router.get("")
def api_root():
    return {"message": "Pool League API. See /docs."}


v0_router = APIRouter(prefix="/v0")
v0_router.include_router(teams.router)
v0_router.include_router(players.router)
v0_router.include_router(matches.router)
v0_router.include_router(streams.router)

api_router.include_router(v0_router)
app.include_router(api_router)
