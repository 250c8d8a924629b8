from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from content_agent import __version__
from content_agent.config import settings, limiter
from content_agent.db.session import Base, dispose_engine, get_engine
from content_agent.api.agent import router as agent_router
from content_agent.api.deps import build_driver, build_session_store
from content_agent.services.errors import StoreError
import logging

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


def parse_cors_origins(value: str) -> list[str]:
    """Comma-separated origins; an empty value allows none."""
    return [origin.strip() for origin in value.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the session store and workflow driver; release connections on shutdown"""
    logger.info(f"Starting Content Agent API (session store: {settings.session_store})...")

    # Development convenience; deployed databases are migrated with Alembic
    if settings.session_store == "sql" and settings.environment == "development":
        async with get_engine().begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created/verified")

    app.state.store = build_session_store()
    app.state.driver = build_driver(app.state.store)

    yield

    logger.info("Shutting down Content Agent API...")
    checkpoint_conn = getattr(app.state.driver.graph.checkpointer, "conn", None)
    if checkpoint_conn is not None:
        await checkpoint_conn.close()
    await dispose_engine()


app = FastAPI(
    title="Content Agent API",
    description="Streaming AI content generation with web research and human approval",
    version=__version__,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"Session store failure on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Session store unavailable"},
    )


@app.middleware("http")
async def limit_request_size(request: Request, call_next):
    """Answer 413 before the body is read when Content-Length is over the limit."""
    content_length = request.headers.get("content-length")
    max_size_bytes = settings.max_request_size_mb * 1024 * 1024
    if content_length and content_length.isdigit() and int(content_length) > max_size_bytes:
        return JSONResponse(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            content={"detail": f"Request body too large. Maximum size is {settings.max_request_size_mb}MB"},
        )
    return await call_next(request)


cors_origins = parse_cors_origins(settings.cors_origins)
allow_all_origins = cors_origins == ["*"]
if allow_all_origins and settings.environment == "production":
    logger.warning("CORS is set to allow all origins in production. This is a security risk!")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    # Browsers refuse credentials together with a wildcard origin
    allow_credentials=not allow_all_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
    expose_headers=["X-Session-Id"],
)

app.include_router(agent_router, prefix="/api/v1")


@app.get("/")
async def root():
    return {
        "message": "Content Agent API",
        "version": __version__,
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    """Liveness probe; does not touch the session store"""
    return {"status": "healthy", "session_store": settings.session_store}
