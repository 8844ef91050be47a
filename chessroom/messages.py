"""Wire messages exchanged over the game WebSocket."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# --- EVENT NAMES ---
PLAYER_ROLE = "playerRole"
SPECTATOR_ROLE = "spectatorRole"
MOVE = "move"
BOARD_STATE = "boardState"
INVALID_MOVE = "invalidMove"


def event(name: str, data: Any = None) -> dict:
    """Envelope for one outbound event."""
    return {"event": name, "data": data}


# --- REQUEST MODELS ---
class MoveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_square: str = Field(alias="from")
    to_square: str = Field(alias="to")
    promotion: str | None = None

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        if len(value) != 2 or not (value[0].isalpha() and value[1].isdigit()):
            raise ValueError(f"Cannot interpret {value!r} as a square name.")
        return value

    @field_validator("promotion")
    @classmethod
    def validate_promotion(cls, value: str | None) -> str | None:
        if value is None:
            return value
        if len(value) != 1 or not value.isalpha():
            raise ValueError(f"Cannot interpret {value!r} as a promotion piece.")
        return value
