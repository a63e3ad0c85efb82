"""Goal data model."""

from datetime import date as date_type
from typing import Any, Optional

from pydantic import BaseModel, Field, computed_field, field_validator


class Goal(BaseModel):
    """Represents a personal trading goal with progress tracking."""

    id: Optional[int] = Field(default=None, description="Database ID")
    user_id: Optional[str] = Field(default=None, description="Owning user ID")
    title: str = Field(..., min_length=1, description="Goal title")
    description: Optional[str] = Field(default=None, description="Goal details")
    progress: int = Field(default=0, ge=0, le=100, description="Progress percentage")
    deadline: Optional[date_type] = Field(default=None, description="Target date")

    model_config = {"frozen": True}

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value: Any) -> str:
        return str(value or "").strip()

    @field_validator("progress", mode="before")
    @classmethod
    def _clamp_progress(cls, value: Any) -> int:
        return clamp_progress(value)

    @computed_field
    @property
    def completed(self) -> bool:
        """Whether progress reached 100%."""
        return self.progress >= 100


def clamp_progress(value: Any) -> int:
    """Clamp a progress value to an integer in 0..100."""
    try:
        progress = int(round(float(value)))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(0, min(100, progress))
