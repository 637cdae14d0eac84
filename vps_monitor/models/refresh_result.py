"""Models for background refresh system"""

from datetime import datetime

from pydantic import BaseModel, Field


class RefreshResult(BaseModel):
    """Result of a refresh-all batch"""

    success: bool = Field(description="Whether the batch ran to completion")
    start_time: datetime = Field(description="When the batch started")
    end_time: datetime = Field(description="When the batch ended")
    duration_seconds: float = Field(description="Duration in seconds")
    refreshed_count: int = Field(default=0, ge=0, description="Accounts refreshed in the batch")
    error: str | None = Field(default=None, description="Error message if failed")
