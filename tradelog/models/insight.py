"""Insight data model returned by the coach agent."""

from typing import Any

from pydantic import BaseModel, Field


class Insight(BaseModel):
    """Structured coaching feedback."""

    summary: str = Field(default="", description="Short narrative summary")
    metrics: dict[str, Any] = Field(default_factory=dict, description="Metrics echoed by the model")
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    next_actions: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}
