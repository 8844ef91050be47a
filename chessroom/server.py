from fastapi import APIRouter, FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
import json
import logging

import uvicorn

from chessroom.config import Settings
from chessroom.messages import MOVE
from chessroom.session import GameSession

logger = logging.getLogger(__name__)

router = APIRouter()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app and the one GameSession it serves."""
    settings = settings or Settings.from_env()

    app = FastAPI(title="chessroom")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.session = GameSession(settings)

    app.include_router(router)
    return app


# ---- HTTP ----
@router.get("/state")
async def game_state(request: Request) -> dict:
    session: GameSession = request.app.state.session
    return await session.snapshot()


# ---- WebSocket endpoint ----
@router.websocket("/ws")
async def ws_game(websocket: WebSocket) -> None:
    await websocket.accept()

    session: GameSession = websocket.app.state.session
    connection = await session.connect(websocket)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))

            data = message.get("text")
            if data is None:
                logger.warning("Ignoring binary frame from %s", connection.id)
                continue

            try:
                msg = json.loads(data)
            except json.JSONDecodeError:
                logger.warning("Ignoring non-JSON frame from %s", connection.id)
                continue

            if not isinstance(msg, dict):
                logger.warning("Ignoring non-object frame from %s", connection.id)
                continue

            if msg.get("event") == MOVE:
                await session.try_move(connection.id, msg.get("data"))
                continue

            # Unknown event: nothing to do
            logger.debug("Ignoring event %r from %s", msg.get("event"), connection.id)

    except WebSocketDisconnect:
        pass
    finally:
        await session.disconnect(connection.id)


app = create_app()


def main() -> None:
    settings: Settings = app.state.settings
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Serving chessroom on %s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
