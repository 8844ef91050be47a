"""
The single game session: seats connections, gates moves by turn and relays results.

Every handler that reads or mutates the position or the seats runs under one
asyncio.Lock, so the turn check and the move it guards cannot interleave with
another connection's request. Outbound events for one request are delivered
before the lock is released, which keeps `move`/`boardState` pairs ordered
across clients.
"""

import asyncio
import json
import logging
import uuid
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Iterable, Protocol

from chessroom.config import Settings
from chessroom.game_state import ChessGame
from chessroom.messages import (
    BOARD_STATE,
    INVALID_MOVE,
    MOVE,
    PLAYER_ROLE,
    SPECTATOR_ROLE,
    MoveRequest,
    event,
)
from chessroom.registry import Color, ConnectionId, ConnectionRegistry, Role

logger = logging.getLogger(__name__)


class Sender(Protocol):
    async def send_text(self, data: str) -> None: ...


@dataclass
class Connection:
    id: ConnectionId
    sender: Sender
    # Fixed at connect time, never migrates while connected
    role: Role


class MoveOutcome(StrEnum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    DROPPED = "dropped"


class GameSession:
    """Owns the position, the seats and the set of live connections for one game."""

    def __init__(self, settings: Settings | None = None, game: ChessGame | None = None) -> None:
        self.settings = settings or Settings()
        self.game = game or ChessGame()
        self.registry = ConnectionRegistry()
        self.connections: dict[ConnectionId, Connection] = {}
        self._lock = asyncio.Lock()

    # -- Lifecycle --
    async def connect(self, sender: Sender) -> Connection:
        """Register a new connection, seat it white, black or as spectator and tell it which."""
        async with self._lock:
            connection_id = uuid.uuid4().hex
            role = self._assign_role(connection_id)
            connection = Connection(id=connection_id, sender=sender, role=role)
            self.connections[connection_id] = connection
            logger.info("Connection %s established as %s", connection_id, role.value)

            if role is Role.SPECTATOR:
                messages = [event(SPECTATOR_ROLE)]
            else:
                messages = [event(PLAYER_ROLE, role.value)]
            if self.settings.send_state_on_connect:
                messages.append(event(BOARD_STATE, self.game.fen()))
            await self._fan_out([connection], messages)
            return connection

    async def disconnect(self, connection_id: ConnectionId) -> None:
        """Forget the connection and free its seat. Spectators are not promoted."""
        async with self._lock:
            connection = self.connections.pop(connection_id, None)
            released = self.registry.release(connection_id)
            if connection is not None:
                logger.info(
                    "Connection %s closed (%s)",
                    connection_id,
                    f"released {released.value}" if released else "no seat",
                )

    def _assign_role(self, connection_id: ConnectionId) -> Role:
        for color in (Color.WHITE, Color.BLACK):
            if self.registry.assign_if_free(color, connection_id):
                return Role.for_color(color)
        return Role.SPECTATOR

    # -- Moves --
    async def try_move(self, connection_id: ConnectionId, payload: Any) -> MoveOutcome:
        """
        Attempt a move on behalf of a connection.

        Requests from anyone but the holder of the seat to move are dropped
        without a reply. A legal move is broadcast to every connection as
        `move` then `boardState`; anything the rules engine refuses or chokes
        on is answered with `invalidMove` to the requester only.
        """
        async with self._lock:
            turn = self.game.turn
            if self.registry.holder_of(turn) != connection_id:
                logger.debug("Dropped move %r from %s: %s to move", payload, connection_id, turn.value)
                return MoveOutcome.DROPPED

            connection = self.connections[connection_id]
            if self._apply(payload):
                logger.info("Accepted move %r from %s, position %s", payload, connection_id, self.game.fen())
                await self._fan_out(
                    list(self.connections.values()),
                    [event(MOVE, payload), event(BOARD_STATE, self.game.fen())],
                )
                return MoveOutcome.ACCEPTED

            logger.info("Invalid move %r from %s", payload, connection_id)
            await self._fan_out([connection], [event(INVALID_MOVE, payload)])
            return MoveOutcome.REJECTED

    def _apply(self, payload: Any) -> bool:
        if self.settings.enforce_game_over and self.game.is_game_over():
            return False
        try:
            request = MoveRequest.model_validate(payload)
            return self.game.make_move(request.from_square, request.to_square, request.promotion)
        except ValueError as exc:
            logger.debug("Malformed move %r: %s", payload, exc)
            return False
        except Exception:
            logger.exception("Rules engine failed on move %r", payload)
            return False

    # -- Queries --
    async def snapshot(self) -> dict:
        async with self._lock:
            state = self.game.state_payload()
            state["seats"] = self.registry.occupancy()
            state["connections"] = len(self.connections)
            return state

    # -- Delivery --
    async def _deliver(self, connection: Connection, messages: list[dict]) -> None:
        for message in messages:
            send = connection.sender.send_text(json.dumps(message))
            if self.settings.send_timeout is None:
                await send
            else:
                await asyncio.wait_for(send, self.settings.send_timeout)

    async def _fan_out(self, connections: Iterable[Connection], messages: list[dict]) -> None:
        """Send `messages` in order to each connection; a failing connection does not hold up the rest."""
        targets = list(connections)
        results = await asyncio.gather(
            *[self._deliver(connection, messages) for connection in targets],
            return_exceptions=True,
        )
        for connection, result in zip(targets, results):
            if isinstance(result, BaseException):
                logger.warning("Send to %s failed: %r", connection.id, result)
