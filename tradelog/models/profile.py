"""Profile and subscription data model."""

from datetime import date as date_type
from typing import Optional

from pydantic import BaseModel, Field


SUBSCRIPTION_STATUSES = ("active", "inactive", "cancelled")


class Profile(BaseModel):
    """Represents a user's profile and subscription state."""

    user_id: str = Field(..., min_length=1, description="Opaque user ID")
    email: Optional[str] = Field(default=None, description="Contact email")
    subscription_status: str = Field(default="inactive", description="active/inactive/cancelled")
    subscription_id: Optional[str] = Field(default=None, description="Billing subscription ID")
    current_period_end: Optional[date_type] = Field(
        default=None, description="Last day covered by the current billing period"
    )

    model_config = {"frozen": True}

    def is_active(self, today: Optional[date_type] = None) -> bool:
        """Check whether the subscription grants access on ``today``."""
        if self.subscription_status != "active":
            return False
        if self.current_period_end is None:
            return True
        return self.current_period_end >= (today or date_type.today())
