"""
FastAPI app entrypoint.

Serves the shared roster (/api/users) and per-week slot tables (/api/calendar). Clients poll these;
there is no push channel.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from whentomeet.api.routes import calendar, users
from whentomeet.config import settings
from whentomeet.core.errors import STATUS_BAD_REQUEST
from whentomeet.services.roster_store import RosterStore
from whentomeet.services.slot_store import SlotStore
from whentomeet.storage.base import BlobStore
from whentomeet.storage.registry import build_blob_store

logger = logging.getLogger(__name__)

# CORS: dev origins + optional CORS_ORIGINS env (comma-separated) for a deployed frontend
_DEV_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]


def _wire_stores(app: FastAPI, blobs: BlobStore) -> None:
    slots = SlotStore(blobs)
    app.state.blob_store = blobs
    app.state.slot_store = slots
    app.state.roster_store = RosterStore(blobs, slots)


def create_app(blob_store: BlobStore | None = None) -> FastAPI:
    """
    Build the app. With blob_store=None the backend is chosen from STORAGE_BACKEND at startup;
    tests pass their own store.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if blob_store is None:
            # ConfigurationError here aborts startup: a misconfigured backend is not retried
            _wire_stores(app, build_blob_store(settings))
        logger.info("Backend ready (storage=%s)", app.state.blob_store.backend_id)
        yield
        dispose = getattr(app.state.blob_store, "dispose", None)
        if dispose is not None:
            dispose()

    app = FastAPI(title="When To Meet", version="0.1.0", lifespan=lifespan)
    if blob_store is not None:
        _wire_stores(app, blob_store)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_DEV_ORIGINS + settings.cors_origin_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Errors go out as {"error": "..."} like every other JSON body the API returns
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        missing = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("type") == "missing"})
        if missing:
            message = f"Missing required fields: {', '.join(missing)}"
        else:
            first = exc.errors()[0] if exc.errors() else {}
            message = f"Invalid {first.get('loc', ['request'])[-1]}: {first.get('msg', 'invalid value')}"
        return JSONResponse({"error": message}, status_code=STATUS_BAD_REQUEST)

    app.include_router(users.router, prefix="/api", tags=["users"])
    app.include_router(calendar.router, prefix="/api", tags=["calendar"])

    @app.get("/", include_in_schema=False)
    def root():
        """Root: point to API docs and health."""
        return {"message": "When To Meet API", "docs": "/docs", "health": "/health"}

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "storage": app.state.blob_store.backend_id}

    return app


app = create_app()
