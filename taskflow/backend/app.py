from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskflow import __version__
from taskflow.backend.db.engine import create_engine, create_session_factory
from taskflow.backend.errors import TaskflowError
from taskflow.backend.log import setup_logging
from taskflow.backend.managers.auth import AuthManager
from taskflow.backend.oauth import GoogleOAuthClient
from taskflow.backend.settings import TaskflowSettings, get_settings
from taskflow.backend.tokens.base import TokenStore
from taskflow.backend.tokens.memory import InMemoryTokenStore
from taskflow.backend.tokens.redis import RedisTokenStore


def _create_token_store(settings: TaskflowSettings, redis_client: aioredis.Redis | None) -> TokenStore:
    """Pick the refresh-token registry backend based on configuration."""
    if redis_client is not None:
        return RedisTokenStore(redis_client, prefix=settings.redis_key_prefix)
    return InMemoryTokenStore()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    # -- Startup ---------------------------------------------------------------
    settings = get_settings()
    setup_logging(settings.log_level, json_logs=settings.log_json)

    logger.info("Taskflow API starting (host={}, port={})", settings.host, settings.port)

    # -- Initialise state fields (always present, possibly None) ----------------
    _app.state.db_engine = None
    _app.state.db_session_factory = None
    _app.state.redis = None
    _app.state.auth_manager = None
    _app.state.google_oauth = None

    # -- Database --------------------------------------------------------------
    if settings.database_url:
        engine = create_engine(settings.database_url)
        _app.state.db_engine = engine
        _app.state.db_session_factory = create_session_factory(engine)
        logger.info("PostgreSQL: connected (pool_size=5, max_overflow=10)")
    else:
        logger.warning("TASKFLOW_DATABASE_URL not set -- database features disabled")

    # -- Redis -----------------------------------------------------------------
    if settings.redis_url:
        _app.state.redis = aioredis.from_url(
            settings.redis_url,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
        )
        logger.info("Redis: connected (refresh tokens shared across instances)")
    else:
        logger.warning("TASKFLOW_REDIS_URL not set -- refresh tokens held in process memory")

    # -- Auth ------------------------------------------------------------------
    if not settings.access_token_secret or not settings.refresh_token_secret:
        logger.warning("Token secrets not configured -- generated per process; tokens will not survive a restart")
    store = _create_token_store(settings, _app.state.redis)
    _app.state.auth_manager = AuthManager.from_settings(settings, store)
    logger.info("AuthManager: initialised (store={})", type(store).__name__)

    if settings.google_enabled:
        _app.state.google_oauth = GoogleOAuthClient(
            client_id=settings.google_client_id or "",
            client_secret=settings.google_client_secret.get_secret_value() if settings.google_client_secret else "",
            redirect_uri=settings.google_redirect_uri,
        )
        logger.info("Google OAuth: enabled (redirect={})", settings.google_redirect_uri)
    else:
        logger.info("Google OAuth: disabled (no client credentials)")

    yield

    # -- Shutdown --------------------------------------------------------------
    logger.info("Taskflow API shutting down")

    if _app.state.google_oauth is not None:
        await _app.state.google_oauth.aclose()

    if _app.state.redis is not None:
        await _app.state.redis.aclose()
        logger.info("Redis: closed")

    if _app.state.db_engine is not None:
        await _app.state.db_engine.dispose()
        logger.info("PostgreSQL: disposed")


app = FastAPI(title="Taskflow API", version=__version__, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error envelope -- every failure leaves as {"success": false, "error": ...}
# ---------------------------------------------------------------------------


def _fail(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(TaskflowError)
async def taskflow_error_handler(_request: Request, exc: TaskflowError) -> JSONResponse:
    return _fail(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path"))
        messages.append(f"{field}: {err['msg']}" if field else err["msg"])
    return _fail(status.HTTP_400_BAD_REQUEST, ", ".join(messages) or "Validation error")


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        return _fail(exc.status_code, f"Route {request.method} {request.url.path} not found")
    return _fail(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error("Unhandled error on {} {}", request.method, request.url.path)
    return _fail(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from taskflow.backend.routers.auth import router as auth_router  # noqa: E402
from taskflow.backend.routers.boards import router as boards_router  # noqa: E402
from taskflow.backend.routers.health import router as health_router  # noqa: E402
from taskflow.backend.routers.projects import router as projects_router  # noqa: E402
from taskflow.backend.routers.users import router as users_router  # noqa: E402
from taskflow.backend.routers.workspaces import router as workspaces_router  # noqa: E402

app.include_router(health_router)
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(workspaces_router)
app.include_router(projects_router)
app.include_router(boards_router)
