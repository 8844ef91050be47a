"""
Seat bookkeeping for the single game: which connection holds white, which holds black.
"""

from enum import StrEnum

ConnectionId = str


class Color(StrEnum):
    WHITE = "w"
    BLACK = "b"


class Role(StrEnum):
    WHITE = "w"
    BLACK = "b"
    SPECTATOR = "spectator"

    @classmethod
    def for_color(cls, color: Color) -> "Role":
        return cls(color.value)


class ConnectionRegistry:
    """Two seats, each empty or held by exactly one connection.

    Not locked itself: callers serialize access through the owning GameSession.
    None of the methods await, so each call is atomic on the event loop.
    """

    def __init__(self) -> None:
        self._seats: dict[Color, ConnectionId | None] = {Color.WHITE: None, Color.BLACK: None}

    def assign_if_free(self, color: Color, connection_id: ConnectionId) -> bool:
        """Seat `connection_id` at `color` if nobody holds it and it is not seated elsewhere."""
        if self._seats[color] is not None:
            return False
        if self.seat_of(connection_id) is not None:
            return False
        self._seats[color] = connection_id
        return True

    def release(self, connection_id: ConnectionId) -> Color | None:
        """Free whichever seat the connection holds; returns it, or None if it held none."""
        color = self.seat_of(connection_id)
        if color is not None:
            self._seats[color] = None
        return color

    def holder_of(self, color: Color) -> ConnectionId | None:
        return self._seats[color]

    def seat_of(self, connection_id: ConnectionId) -> Color | None:
        for color, holder in self._seats.items():
            if holder == connection_id:
                return color
        return None

    def occupancy(self) -> dict[str, bool]:
        return {color.value: holder is not None for color, holder in self._seats.items()}
