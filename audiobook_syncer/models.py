from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional

class SyncFragment(BaseModel):
    """One transcript unit placed on the audiobook's global timeline (ms)."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source_text: str = Field(alias="src")
    target_text: str = Field(alias="tgt")
    begin: int
    end: int

    @model_validator(mode="after")
    def check_interval(self):
        if self.begin > self.end:
            raise ValueError(f"begin ({self.begin}) is after end ({self.end})")
        return self

    def contains(self, position: int) -> bool:
        return self.begin <= position <= self.end

class PlayerState(str, Enum):
    NONE = "NONE"
    STOPPED = "STOPPED"
    PAUSED = "PAUSED"
    PLAYING = "PLAYING"
    FAST_FORWARDING = "FAST_FORWARDING"
    REWINDING = "REWINDING"
    BUFFERING = "BUFFERING"
    ERROR = "ERROR"

# Media session state codes as reported by the player's notification
PLAYER_STATE_CODES = {
    0: PlayerState.NONE,
    1: PlayerState.STOPPED,
    2: PlayerState.PAUSED,
    3: PlayerState.PLAYING,
    4: PlayerState.FAST_FORWARDING,
    5: PlayerState.REWINDING,
    6: PlayerState.BUFFERING,
    7: PlayerState.ERROR,
}

class PlaybackObservation(BaseModel):
    model_config = ConfigDict(frozen=True)

    folder: str
    file: str
    in_file_offset: int = Field(ge=0)
    player_state: PlayerState = PlayerState.NONE

    @field_validator("player_state", mode="before")
    @classmethod
    def coerce_state_code(cls, value):
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            if value not in PLAYER_STATE_CODES:
                raise ValueError(f"Unknown player state code: {value}")
            return PLAYER_STATE_CODES[value]
        if isinstance(value, str):
            return value.upper()
        return value

class SessionStatus(str, Enum):
    UNLOADED = "UNLOADED"
    LOADING = "LOADING"
    READY = "READY"

class SessionSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    folder: Optional[str] = None
    status: SessionStatus = SessionStatus.UNLOADED
    player_state: PlayerState = PlayerState.NONE
    current_fragment_index: Optional[int] = None
    fragment_count: int = 0
    last_global_offset: Optional[int] = None

class SeekDirection(str, Enum):
    FORWARD = "FORWARD"
    BACKWARD = "BACKWARD"

class SeekAmount(str, Enum):
    SMALL = "SMALL"
    LARGE = "LARGE"
