import logging
import socket
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Settings, get_settings as load_settings
from database import DocumentStore, utcnow
from logging_config import setup_logging
from routes import build_resource_router, get_settings, respond, users_router
from services import RESOURCES

logger = logging.getLogger(__name__)

PROCESS_STARTED = time.monotonic()


def format_uptime(seconds: float) -> str:
    seconds = int(seconds)
    days, seconds = divmod(seconds, 86400)
    hours, seconds = divmod(seconds, 3600)
    minutes, seconds = divmod(seconds, 60)
    return f"{days}d {hours}h {minutes}m {seconds}s"


def validation_messages(exc: RequestValidationError) -> list:
    """Turn pydantic errors into ``"<field>: <message>"`` strings."""
    messages = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "body"
        messages.append(f"{field}: {error.get('msg', 'Invalid value')}")
    return messages


def normalize_route_path(path: str) -> str:
    """Lower-case the fixed segments of a path so routes match in any case.

    ``/api/FavMusic/User/U1`` becomes ``/api/favmusic/user/U1``. Record ids
    and owner ids keep their case.
    """
    parts = path.split("/")
    if len(parts) > 1:
        parts[1] = parts[1].lower()
    if len(parts) > 2 and parts[1] == "api":
        parts[2] = parts[2].lower()
    if len(parts) == 5 and parts[1] == "api" and parts[3].lower() == "user":
        parts[3] = "user"
    return "/".join(parts)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    owns_store = app.state.store is None
    if owns_store:
        app.state.store = DocumentStore.connect(settings.database_url, settings.database_name)
        try:
            elapsed = app.state.store.ping()
            logger.info("MongoDB connection successful (%.1fms)", elapsed)
        except Exception as e:
            logger.error("MongoDB connection failed: %s", e)
    yield
    if owns_store:
        app.state.store.close()
        app.state.store = None


def create_app(settings: Optional[Settings] = None, store: Optional[DocumentStore] = None) -> FastAPI:
    """Build the application.

    Args:
        settings: Configuration; read from the environment when omitted.
        store: An already connected store. When omitted the app connects on
            startup and closes the connection on shutdown.
    """
    settings = settings or load_settings()
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version, lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store

    # Registered before CORS so that CORS wraps them and 500s carry its headers
    @app.middleware("http")
    async def catch_unexpected_errors(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            detail = f"{type(exc).__name__}: {exc}" if settings.debug else "Unexpected server error"
            return respond(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", errors=[detail])

    @app.middleware("http")
    async def case_insensitive_routes(request: Request, call_next):
        request.scope["path"] = normalize_route_path(request.scope["path"])
        return await call_next(request)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return respond(status.HTTP_400_BAD_REQUEST, "Validation failed", errors=validation_messages(exc))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        return respond(exc.status_code, str(exc.detail), errors=[str(exc.detail)])

    @app.get("/")
    def read_root():
        return respond(status.HTTP_200_OK, f"Hello from {settings.project_name}!", data={
            "name": settings.project_name,
            "version": settings.api_version,
        })

    @app.get("/ping")
    def ping(settings: Settings = Depends(get_settings)):
        return respond(status.HTTP_200_OK, "pong", data={
            "status": "pong",
            "timestamp": utcnow(),
            "server": socket.gethostname(),
            "version": settings.api_version,
        })

    @app.get("/health")
    def health(request: Request, settings: Settings = Depends(get_settings)):
        """Report process uptime and whether the database answers."""
        database = {"status": "Not Connected", "lastChecked": utcnow()}
        store: Optional[DocumentStore] = request.app.state.store
        if store is not None:
            try:
                elapsed = store.ping()
                database.update({
                    "status": "Connected",
                    "name": store.name,
                    "responseTime": f"{elapsed:.0f}ms",
                    "collections": store.list_collections(),
                })
            except Exception as e:
                logger.warning("Health check could not reach MongoDB: %s", e)
                database["status"] = "Disconnected"
                database["error"] = str(e)[:100] if settings.debug else "Database unreachable"

        healthy = database["status"] == "Connected"
        return respond(status.HTTP_200_OK, "Health check completed successfully", data={
            "status": "Healthy" if healthy else "Degraded",
            "timestamp": utcnow(),
            "version": settings.api_version,
            "uptime": format_uptime(time.monotonic() - PROCESS_STARTED),
            "database": database,
        })

    for definition in RESOURCES:
        app.include_router(build_resource_router(definition))
    app.include_router(users_router)

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    port = app.state.settings.port
    uvicorn.run(app, host="0.0.0.0", port=port)
