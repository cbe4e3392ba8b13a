"""FastAPI application with the Socket.IO signaling server mounted alongside it."""
from __future__ import annotations

import logging

import socketio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from .core.config import settings
from .core.logging import configure_logging
from .db.session import SessionLocal
from .routers import streams
from .routers.signaling import register_signaling_handlers
from .services.authorization import DatabaseCreatorCheck
from .services.connections import ConnectionRegistry
from .services.rooms import RoomStore
from .services.signaling import SignalingCoordinator

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Streamhub Signaling API", version="0.1.0")

if settings.cors_allow_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins=settings.socketio_cors_origins)
coordinator = SignalingCoordinator(
    transport=sio,
    rooms=RoomStore(),
    connections=ConnectionRegistry(),
    creator_check=DatabaseCreatorCheck(SessionLocal),
)
app.state.coordinator = coordinator
register_signaling_handlers(sio, coordinator)

app.include_router(streams.router, prefix="/api/streams", tags=["streams"])


@app.get("/", tags=["meta"])
async def index() -> dict[str, str]:
    """Identify the service for anyone probing the root path."""

    return {"message": "Streaming Server API is running"}


@app.get("/api/health", tags=["meta"])
async def health() -> dict[str, str]:
    """Simple liveness probe."""

    return {"status": "ok"}


@app.head("/api/health", tags=["meta"])
async def health_head() -> Response:
    """Allow HEAD for uptime monitors that only need the status code."""

    return Response(status_code=200)


# Engine.IO traffic under /socket.io goes to ``sio``; everything else falls through to FastAPI.
asgi_app = socketio.ASGIApp(sio, other_asgi_app=app, socketio_path=settings.socketio_path)


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting signaling server on %s:%s (%s)", settings.host, settings.port, settings.app_env)
    uvicorn.run(
        "streamhub.main:asgi_app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
