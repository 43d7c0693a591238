"""FastAPI application exposing the agent over a WebSocket."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect

from ..agent.loop import AgentLoop
from ..agent.router import Router
from ..config import ServerConfig
from ..events import EventChannel
from ..factory import build_browser_factory, build_llm
from ..llm.base import ChatLLM
from ..session.manager import BrowserFactory, SessionManager
from .connection import ConnectionHandler

LOGGER = logging.getLogger(__name__)


class AgentRuntime:
    """Shared services used by every connection of one application."""

    def __init__(
        self,
        config: ServerConfig,
        llm: ChatLLM,
        browser_factory: BrowserFactory,
    ) -> None:
        self.config = config
        self.llm = llm
        self.sessions = SessionManager(browser_factory, config.frames)
        self.router = Router(llm, transcript_limit=config.agent.transcript_limit)
        self.agent = AgentLoop(llm, config.agent)
        self.connections: Dict[str, ConnectionHandler] = {}

    def open_connection(self) -> ConnectionHandler:
        handler = ConnectionHandler(
            router=self.router,
            agent=self.agent,
            sessions=self.sessions,
            channel=EventChannel(self.config.channel_capacity),
        )
        self.connections[handler.connection_id] = handler
        return handler

    async def close_connection(self, handler: ConnectionHandler) -> None:
        self.connections.pop(handler.connection_id, None)
        await handler.close()

    async def shutdown(self) -> None:
        for handler in list(self.connections.values()):
            await self.close_connection(handler)
        await self.sessions.destroy_all()
        await self.llm.aclose()


def create_app(
    config: Optional[ServerConfig] = None,
    *,
    llm: Optional[ChatLLM] = None,
    browser_factory: Optional[BrowserFactory] = None,
) -> FastAPI:
    """Build the application; ``llm`` and ``browser_factory`` default to the configured ones."""

    config = config or ServerConfig()
    runtime = AgentRuntime(
        config,
        llm or build_llm(config.llm),
        browser_factory or build_browser_factory(config.browser),
    )

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        await runtime.shutdown()

    app = FastAPI(title="Live Browser Agent", lifespan=lifespan)
    app.state.runtime = runtime

    @app.get("/health")
    def get_health() -> Dict[str, Any]:
        return {
            "status": "ok",
            "connections": len(runtime.connections),
            "sessions": len(runtime.sessions),
        }

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket) -> None:
        await websocket.accept()
        handler = runtime.open_connection()
        LOGGER.info("Client connected: %s", handler.connection_id)
        writer = asyncio.create_task(_forward_events(websocket, handler.channel))
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                raw = message.get("text")
                if raw is None:
                    raw = message.get("bytes") or b""
                handler.submit(raw)
        finally:
            LOGGER.info("Client disconnected: %s", handler.connection_id)
            # The writer closes the channel on exit, which releases blocked producers.
            writer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await writer
            await runtime.close_connection(handler)

    return app


async def _forward_events(websocket: WebSocket, channel: EventChannel) -> None:
    try:
        while (event := await channel.get()) is not None:
            await websocket.send_text(event.model_dump_json())
    except (WebSocketDisconnect, RuntimeError) as exc:
        LOGGER.info("Stopped forwarding events: %s", exc)
    finally:
        channel.close()
