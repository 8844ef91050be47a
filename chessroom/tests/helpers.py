"""Shared test doubles and socket helpers."""

import asyncio
import json
import time

from fastapi.testclient import TestClient

START_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
AFTER_E4_FEN = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"
AFTER_E4_E5_FEN = "rnbqkbnr/pppp1ppp/8/4p3/4P3/8/PPPP1PPP/RNBQKBNR w KQkq - 0 2"


class FakeSender:
    """Stands in for a WebSocket: records every frame the session sends."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[dict] = []

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise ConnectionResetError("peer went away")
        self.sent.append(json.loads(data))

    def events(self) -> list[str]:
        return [message["event"] for message in self.sent]

    def clear(self) -> None:
        self.sent.clear()


class HungSender(FakeSender):
    """A peer that stops reading: once `hang` is set, sends never complete."""

    def __init__(self) -> None:
        super().__init__()
        self.hang = False

    async def send_text(self, data: str) -> None:
        if self.hang:
            await asyncio.Event().wait()
        await super().send_text(data)


def join(stack, client: TestClient):
    """Open a socket and consume its role event, so connections are seated in call order."""
    ws = stack.enter_context(client.websocket_connect("/ws"))
    role = ws.receive_json()
    return ws, role


def move(from_square: str, to_square: str, promotion: str | None = None) -> dict:
    data = {"from": from_square, "to": to_square}
    if promotion is not None:
        data["promotion"] = promotion
    return {"event": "move", "data": data}


def wait_until_seat_free(client: TestClient, color: str, timeout: float = 2.0) -> None:
    deadline = time.monotonic() + timeout
    while client.get("/state").json()["seats"][color]:
        if time.monotonic() > deadline:
            raise AssertionError(f"seat {color} still held")
        time.sleep(0.01)
