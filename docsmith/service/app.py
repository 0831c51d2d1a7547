"""FastAPI application serving the generated documentation folder."""

from __future__ import annotations

import threading
import webbrowser
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from ..logging import get_logger


class HealthResponse(BaseModel):
    status: str
    root: str


@dataclass(frozen=True)
class ServeOptions:
    host: str = "127.0.0.1"
    port: int = 8080
    open: bool = False


def create_app(root_dir: Path) -> FastAPI:
    """Create the FastAPI application exposing ``root_dir`` as a static site."""
    root = Path(root_dir).resolve()
    app = FastAPI(title="docsmith", version="1.0.0")

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", root=str(root))

    # check_dir=False: the folder may be (re)created by a build after startup.
    app.mount("/", StaticFiles(directory=str(root), html=True, check_dir=False), name="docs")
    return app


class StaticServer:
    """Runs uvicorn on a daemon thread so rebuilds write underneath it."""

    def __init__(self) -> None:
        self.logger = get_logger("service")
        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self, root_dir: Path, options: ServeOptions | None = None) -> None:
        if self._thread is not None:
            self.logger.debug("Static server already started; leaving it running")
            return
        options = options or ServeOptions()
        config = uvicorn.Config(
            create_app(root_dir),
            host=options.host,
            port=options.port,
            log_level="warning",
        )
        server = uvicorn.Server(config)
        thread = threading.Thread(target=server.run, name="docsmith-serve", daemon=True)
        self._server = server
        self._thread = thread
        thread.start()

        url = f"http://{options.host}:{options.port}"
        self.logger.info("Serving documentation from %s at %s", root_dir, url)
        if options.open:
            webbrowser.open(url)

    def stop(self) -> None:
        if self._server is not None:
            self._server.should_exit = True
        if self._thread is not None:
            self._thread.join(timeout=5)
        self._server = None
        self._thread = None


__all__ = ["HealthResponse", "ServeOptions", "StaticServer", "create_app"]
