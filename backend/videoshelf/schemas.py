from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional


class Video(BaseModel):
    name: str
    viewed: bool
    last_played_at: Optional[datetime] = None
    progress: float
    order_key: int

    model_config = ConfigDict(from_attributes=True)


class ProgressUpdate(BaseModel):
    name: str
    progress: float
    viewed: bool


class RescanResponse(BaseModel):
    status: str
    videos_found: int
    videos_added: int
    videos_removed: int
