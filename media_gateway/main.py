from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, PlainTextResponse

from media_gateway.config import CORS_ORIGINS
from media_gateway.routers import storage as storage_router
from media_gateway.storage import InvalidKeyError, StorageBackend, create_storage_backend
from media_gateway.storage.local_storage import LocalStorage

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the active storage backend once and release it on shutdown."""
    if getattr(app.state, "storage", None) is None:
        # ConfigurationError here stops startup.
        app.state.storage = create_storage_backend()
    yield
    await app.state.storage.close()


def create_app(storage: StorageBackend | None = None) -> FastAPI:
    """
    Composition root. Pass storage to pin the backend (tests, scripts);
    otherwise it is created from STORAGE_BACKEND at startup.
    """
    app = FastAPI(
        title="Catalogue Media Gateway",
        description="Design image/video storage: upload negotiation, signed reads, cascade deletes",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.storage = storage

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(storage_router.router)

    def service_info(request: Request) -> dict:
        backend = request.app.state.storage
        return {
            "message": "Catalogue Media Gateway",
            "version": VERSION,
            "backend": backend.name if backend else None,
        }

    @app.get("/")
    async def root(request: Request):
        return service_info(request)

    @app.get("/health")
    async def health(request: Request):
        return {"status": "ok", **service_info(request)}

    # Serve local uploads when the local backend is active (publicUrl is /uploads/...)
    @app.get("/uploads/{path:path}")
    async def serve_upload(path: str, request: Request):
        """Serve files written by the local backend. Path must be a storage key."""
        backend = request.app.state.storage
        if not isinstance(backend, LocalStorage):
            return PlainTextResponse("Not Found", status_code=404)
        try:
            full_path = backend.resolve_path(path)
        except InvalidKeyError:
            return PlainTextResponse("Forbidden", status_code=403)
        if not full_path.is_file():
            return PlainTextResponse("Not Found", status_code=404)
        return FileResponse(full_path)

    return app


app = create_app()
