"""
FastAPI front door for End of Line.
Plain HTTP for health and session listings; one WebSocket per player carries
the game protocol into the message router.
"""

import asyncio
import logging

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from endofline.config import APP_NAME, CORS_ORIGINS, HOST, PORT, VERSION
from endofline.engine.handlers import HandlerContext, MessageRouter
from endofline.engine.sessions import SessionRegistry
from endofline.engine.utils import generate_player_id

logger = logging.getLogger(__name__)

app = FastAPI(
    title=APP_NAME,
    description="Authoritative session server for End of Line",
    version=VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# One registry per process; all sessions live in memory
registry = SessionRegistry()
router = MessageRouter(registry)


@app.middleware("http")
async def log_requests(request, call_next):
    """Log method and path so 500s can be traced to the failing endpoint."""
    method = request.method
    path = request.url.path
    try:
        response = await call_next(request)
        if response.status_code >= 500:
            logger.error("[%s] %s %s", response.status_code, method, path)
        return response
    except Exception:
        logger.exception("[500] %s %s (exception)", method, path)
        raise


@app.exception_handler(Exception)
async def unhandled_exception_handler(request, exc):
    logger.error("Unhandled error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


class WebSocketConnection:
    """
    Adapts a WebSocket to the synchronous send() the registry expects.
    Frames are queued and written by pump(), so handlers never await.
    """

    def __init__(self, websocket: WebSocket, player_id: str = "?") -> None:
        self.websocket = websocket
        self.player_id = player_id
        self.outbox: asyncio.Queue[str | None] = asyncio.Queue()
        self.closed = False

    def send(self, data: str) -> None:
        # Frames for a dead writer are dropped
        if self.closed:
            return
        self.outbox.put_nowait(data)

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self.outbox.put_nowait(None)

    async def pump(self) -> None:
        while True:
            data = await self.outbox.get()
            if data is None:
                return
            try:
                await self.websocket.send_text(data)
            except Exception:
                logger.warning("Writer for %s stopped", self.player_id, exc_info=True)
                self.closed = True
                return


# ===== API Endpoints =====

@app.get("/")
def root():
    return {"name": APP_NAME, "version": VERSION}


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/games")
def list_games():
    return {"games": [s.summary() for s in registry.list_sessions()]}


@app.websocket("/ws")
async def game_socket(websocket: WebSocket):
    await websocket.accept()
    player_id = generate_player_id()
    connection = WebSocketConnection(websocket, player_id)
    writer = asyncio.create_task(connection.pump())
    ctx = HandlerContext(player_id=player_id, connection=connection)
    logger.info("Player connected: %s", player_id)

    try:
        while True:
            # Text and binary frames both carry JSON; the router rejects anything unparseable
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes") or b""
            router.handle_raw(ctx, raw)
    except WebSocketDisconnect:
        logger.info("Player disconnected: %s", player_id)
    finally:
        router.handle_disconnect(player_id)
        connection.close()
        writer.cancel()
        await asyncio.gather(writer, return_exceptions=True)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=HOST, port=PORT)
