"""Status page listing the uploads a client has in flight."""

from __future__ import annotations

import threading
from dataclasses import asdict

import fastapi
import uvicorn

from .registry import WriterRegistry


def create_status_app(registry: WriterRegistry) -> fastapi.FastAPI:
    app = fastapi.FastAPI(title="blazer", docs_url=None, redoc_url=None)

    @app.get("/")
    def index() -> dict:
        writers = sorted(registry.snapshot(), key=lambda s: (s.bucket, s.name))
        return {"writers": [asdict(status) for status in writers]}

    @app.get("/writers/{bucket}/{name:path}")
    def writer(bucket: str, name: str) -> dict:
        found = registry.get(f"{bucket}/{name}")
        if found is None:
            raise fastapi.HTTPException(status_code=404, detail="no such writer")
        return asdict(found.status())

    return app


def serve(app: fastapi.FastAPI, host: str, port: int) -> uvicorn.Server:
    """Serve ``app`` from a daemon thread; set ``should_exit`` to stop it."""
    server = uvicorn.Server(uvicorn.Config(app, host=host, port=port, log_level="warning"))
    thread = threading.Thread(target=server.run, name="blazer-stats", daemon=True)
    thread.start()
    return server
