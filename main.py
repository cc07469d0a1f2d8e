"""HTTP entry point for the media collections service.

Routes map one-to-one onto the core in :mod:`gallery`. Blocking work
(directory scans, file reads and writes, image resizing) runs in the
thread pool so one slow request does not stall the others. Errors raised
by the core are rendered by :func:`handle_gallery_error`; anything else
is logged and answered with a 500 by :func:`handle_broad_exceptions`.
"""

import logging
import mimetypes
import sys
import time
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.datastructures import UploadFile as StarletteUploadFile

from gallery import image_ops, storage
from gallery.conditions import resolve_condition
from gallery.config import Settings
from gallery.errors import GalleryError, InternalError, UploadError
from gallery.models import (
    CollectionsResponse,
    ConditionEntriesResponse,
    EntriesResponse,
    HealthResponse,
    UploadResponse,
)
from gallery.uploads import UploadedFile, ingest, normalize_files

logger = logging.getLogger(__name__)

UPLOAD_FIELD = "files"


def configure_logging(level: str = "INFO") -> None:
    """Send log records to stderr with timestamps."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)


# --- Error handling ---
async def handle_gallery_error(request: Request, exc: GalleryError) -> JSONResponse:
    logger.warning(
        "%s %s failed: %s: %s", request.method, request.url.path, type(exc).__name__, exc.message
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def handle_broad_exceptions(request: Request, call_next):
    """Log and convert unexpected exceptions into a 500 response."""
    try:
        return await call_next(request)
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=InternalError("Internal server error").to_dict())


async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    client = request.client.host if request.client else "-"
    logger.info(
        "%s %s %s %.1fms client=%s",
        request.method, request.url.path, response.status_code, elapsed_ms, client,
    )
    return response


# --- Shared handlers ---
async def _list_collections(root: Path) -> CollectionsResponse:
    dirs = await run_in_threadpool(storage.list_collections, root)
    return CollectionsResponse(dirs=dirs)


async def _list_entries(root: Path, collection_id: str) -> EntriesResponse:
    entries = await run_in_threadpool(storage.list_entries, root, collection_id)
    return EntriesResponse(result=entries)


async def _fetch_file(
    root: Path,
    collection_id: str,
    file_id: str,
    width: Optional[str] = None,
    height: Optional[str] = None,
) -> Response:
    # validate dimensions before touching the disk
    spec = image_ops.parse_dimensions(width, height)
    data = await run_in_threadpool(storage.read_file, root, collection_id, file_id)
    if spec is None:
        media_type = mimetypes.guess_type(file_id)[0] or "application/octet-stream"
        return Response(content=data, media_type=media_type)
    resized = await run_in_threadpool(image_ops.resize_image, data, spec.width, spec.height)
    return Response(content=resized, media_type=image_ops.image_mimetype(resized))


async def _read_upload(item: StarletteUploadFile) -> UploadedFile:
    data = await item.read()
    return UploadedFile.from_bytes(item.filename or "", data, item.content_type)


async def _upload(request: Request, root: Path, collection_id: str) -> UploadResponse:
    form = await request.form()
    items = [v for v in form.getlist(UPLOAD_FIELD) if isinstance(v, StarletteUploadFile)]
    if not items:
        raise UploadError("No file uploaded")
    files = [await _read_upload(item) for item in items]
    # one file arrives as a single object, several as a list
    batch = normalize_files(files[0] if len(files) == 1 else files)
    logger.info("Uploading %d file(s) to %s", len(files), collection_id)
    data = await run_in_threadpool(ingest, root, collection_id, batch)
    failed = [item.name for item in data if not item.ok]
    if failed:
        logger.warning("Upload to %s skipped %d file(s): %s", collection_id, len(failed), ", ".join(failed))
        message = f"Uploaded {len(data) - len(failed)} of {len(data)} files"
    else:
        message = "Files are uploaded"
    return UploadResponse(status=True, message=message, data=data)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create the FastAPI application for the given settings."""
    settings = settings or Settings.from_env()

    app = FastAPI(title="Media Collections API", version="1.0.0")
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(GalleryError, handle_gallery_error)
    app.middleware("http")(handle_broad_exceptions)
    app.middleware("http")(log_requests)

    photos = settings.storage_path
    music = settings.music_storage_path

    # --- Photo collections ---
    @app.get("/collections", response_model=CollectionsResponse)
    async def get_collections():
        return await _list_collections(photos)

    @app.get("/collections/{collection_id}", response_model=EntriesResponse)
    async def get_collection(collection_id: str):
        return await _list_entries(photos, collection_id)

    @app.get("/collections/{collection_id}/{file_id}")
    async def get_file(
        collection_id: str,
        file_id: str,
        width: Optional[str] = Query(None, description="Maximum width of the returned image"),
        height: Optional[str] = Query(None, description="Maximum height of the returned image"),
    ):
        return await _fetch_file(photos, collection_id, file_id, width, height)

    @app.get("/weathercollections", response_model=ConditionEntriesResponse)
    async def get_weather_collection(condition: Optional[str] = None):
        collection = resolve_condition(condition)
        entries = await run_in_threadpool(storage.list_entries, photos, collection)
        return ConditionEntriesResponse(result=entries, collection=collection)

    @app.post("/upload-photos/{collection_id}", response_model=UploadResponse)
    async def upload_photos(request: Request, collection_id: str):
        return await _upload(request, photos, collection_id)

    # --- Music collections ---
    @app.get("/collections-music", response_model=CollectionsResponse)
    async def get_music_collections():
        return await _list_collections(music)

    @app.get("/collections-music/{collection_id}", response_model=EntriesResponse)
    async def get_music_collection(collection_id: str):
        return await _list_entries(music, collection_id)

    @app.get("/collections-music/{collection_id}/{file_id}")
    async def get_music_file(collection_id: str, file_id: str):
        return await _fetch_file(music, collection_id, file_id)

    @app.post("/upload-music/{collection_id}", response_model=UploadResponse)
    async def upload_music(request: Request, collection_id: str):
        return await _upload(request, music, collection_id)

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(
            status="ok",
            roots={"photos": photos.is_dir(), "music": music.is_dir()},
        )

    logger.info("Serving photos from %s and music from %s", photos, music)
    return app


def main() -> None:
    import uvicorn

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    app = create_app(settings)
    logger.info("Application starting on port %s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
