from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from kiosk.config import Settings, settings as default_settings
from kiosk.library import LibraryStore
from kiosk.logging_setup import configure_logging
from kiosk.models import (FramesResponse, ImageResponse, ReloadResponse,
                          SlideshowResponse)
from kiosk.pipeline import build_frames
from kiosk.resolver import SlideResolver

logger = logging.getLogger(__name__)


class OptionalStaticFiles(StaticFiles):
    """StaticFiles over a directory that may not exist yet.

    Requests get a 404 until the directory appears; it is then served
    without restarting the app.
    """

    def __init__(self, *, directory: str, html: bool = False) -> None:
        super().__init__(directory=directory, html=html, check_dir=False)

    async def check_config(self) -> None:
        if self.directory is not None and not os.path.isdir(self.directory):
            return
        await super().check_config()


def _mount_static(app: FastAPI, path: str, directory: str, name: str,
                  html: bool = False) -> None:
    if not os.path.isdir(directory):
        logger.warning("%s does not exist yet; %s answers 404 until it does",
                       directory, path)
    app.mount(path, OptionalStaticFiles(directory=directory, html=html), name=name)


def create_app(settings: Settings | None = None,
               store: LibraryStore | None = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings)

    os.makedirs(settings.cache_dir, exist_ok=True)
    store = store or LibraryStore(settings.config_path)
    frames = build_frames(settings)

    app = FastAPI(title="Photo Kiosk")
    app.state.settings = settings
    app.state.library = store

    @app.get("/health")
    def health() -> dict:
        return {"ok": True}

    @app.get("/api/slideshow", response_model=SlideshowResponse,
             response_model_exclude_none=True)
    def slideshow(client: str | None = None):
        client_id = client or settings.client_id
        try:
            resolver = SlideResolver(library=store.current, frames=frames)
            slides = resolver.resolve(client_id)
        except Exception:
            logger.exception("Error building slideshow for %s", client_id)
            return JSONResponse(status_code=500,
                                content={"error": "Error building slideshow"})
        return SlideshowResponse(slides=slides)

    @app.get("/api/frames", response_model=FramesResponse)
    def api_frames(pattern: str | None = None):
        if not pattern:
            return FramesResponse(frames=[])
        try:
            return FramesResponse(frames=frames.prepare_frames(pattern))
        except Exception as e:
            logger.exception("Error preparing frames for %s", pattern)
            return JSONResponse(status_code=500, content={"error": str(e)})

    @app.get("/api/image", response_model=ImageResponse)
    def api_image(file: str | None = None):
        if not file:
            return JSONResponse(status_code=400, content={"error": "Missing file"})
        try:
            url = frames.resolve_image(file)
        except Exception as e:
            logger.exception("Error resolving image %s", file)
            return JSONResponse(status_code=500, content={"error": str(e)})
        if url is None:
            return JSONResponse(status_code=404, content={"error": "Not found"})
        return ImageResponse(url=url)

    @app.post("/api/reload", response_model=ReloadResponse)
    def reload_library() -> ReloadResponse:
        library = store.reload()
        return ReloadResponse(ok=True, slides=len(library.slides))

    _mount_static(app, "/photos", settings.photos_dir, "photos")
    _mount_static(app, "/cache", settings.cache_dir, "cache")
    _mount_static(app, "/pages", settings.pages_dir, "pages")
    # Catch-all; must stay last.
    _mount_static(app, "/", settings.public_dir, "public", html=True)

    logger.info("Photo kiosk ready (client=%s, cache=%s)",
                settings.client_id, settings.cache_dir)
    return app


def __getattr__(name: str):
    # `uvicorn kiosk.main:app` builds the app from the environment on first use.
    if name == "app":
        application = create_app()
        globals()["app"] = application
        return application
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def main() -> None:
    import uvicorn

    uvicorn.run("kiosk.main:app", host=default_settings.host,
                port=default_settings.port)


if __name__ == "__main__":
    main()
