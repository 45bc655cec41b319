from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from datetime import datetime, timezone
from typing import Optional

# "Current" value of a video that was never played
ZERO_TIME = "0001-01-01T00:00:00Z"


class VideoState(BaseModel):
    """Persisted viewing state of one video, keyed by its file name."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(..., alias="Name")
    viewed: bool = Field(False, alias="Viewed")
    last_played_at: Optional[datetime] = Field(None, alias="Current")
    progress: float = Field(0.0, alias="Progress", allow_inf_nan=False)

    @field_validator("last_played_at")
    @classmethod
    def _zero_time_is_never(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.replace(tzinfo=None) == datetime.min:
            return None
        return value


class VideoEntry(BaseModel):
    """
    A video file discovered in the library root.

    Serialized with the aliases used by the state file; `order_key` only
    lives in memory and is derived again on every scan.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., alias="Name")
    path: str = Field(..., alias="Path")
    viewed: bool = Field(False, alias="Viewed")
    last_played_at: Optional[datetime] = Field(None, alias="Current")
    progress: float = Field(0.0, alias="Progress")  # in seconds
    order_key: int = Field(..., exclude=True)

    @field_serializer("last_played_at", when_used="json")
    def _serialize_last_played_at(self, value: Optional[datetime]) -> str:
        if value is None:
            return ZERO_TIME
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()

    def apply_state(self, state: VideoState) -> None:
        self.viewed = state.viewed
        self.last_played_at = state.last_played_at
        self.progress = state.progress
