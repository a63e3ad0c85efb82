"""AI agents for tradelog.

- CoachAgent: structured insights and free-form mentoring over the journal
"""

from tradelog.agents.base import (
    create_agent,
    run_agent_sync,
    get_model,
)
from tradelog.agents.coach import CoachAgent, build_insight_prompt, parse_insight

__all__ = [
    # Base utilities
    "create_agent",
    "run_agent_sync",
    "get_model",
    # Agents
    "CoachAgent",
    # Utility functions
    "build_insight_prompt",
    "parse_insight",
]
