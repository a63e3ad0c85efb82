"""Configuration for tradelog.

Settings live in ``~/.config/tradelog/config.toml``. Set ``TRADELOG_HOME``
to use another directory (the database defaults to the same place).
"""

import os
from pathlib import Path
from typing import Optional

import toml


CONFIG_FILENAME = "config.toml"
DB_FILENAME = "tradelog.db"

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_INSIGHT_WINDOW = 30


def get_config_dir() -> Path:
    """Get the configuration directory."""
    override = os.environ.get("TRADELOG_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "tradelog"


def get_config_path() -> Path:
    """Get the configuration file path."""
    return get_config_dir() / CONFIG_FILENAME


def get_config() -> Optional[dict]:
    """Load configuration.

    Returns:
        Config dict, or None when the file is missing or unreadable.
    """
    config_path = get_config_path()

    if not config_path.exists():
        return None

    try:
        return toml.load(config_path)
    except (OSError, toml.TomlDecodeError):
        return None


def get_db_path(config: Optional[dict] = None) -> Path:
    """Get the database path, honouring ``[storage] db_path``."""
    configured = (config or {}).get("storage", {}).get("db_path")
    if configured:
        return Path(configured).expanduser()
    return get_config_dir() / DB_FILENAME


def get_user(config: dict) -> tuple[Optional[str], Optional[str]]:
    """Get the signed-in user.

    Returns:
        Tuple of (user_id, email). A missing user ID means no valid session.
    """
    user = config.get("user", {})
    user_id = str(user.get("id") or "").strip() or None
    email = str(user.get("email") or "").strip() or None
    return user_id, email


def create_template_config(user_id: str = "", email: str = "") -> Path:
    """Create a template configuration file.

    Args:
        user_id: Optional user ID to pre-fill.
        email: Optional email to pre-fill.

    Returns:
        Path of the written file.
    """
    config_dir = get_config_dir()
    config_path = config_dir / CONFIG_FILENAME

    config_dir.mkdir(parents=True, exist_ok=True)

    template = {
        "user": {
            "id": user_id,
            "email": email,
        },
        "openai": {
            "api_key": "",  # Leave empty to use OPENAI_API_KEY env var
            "model": DEFAULT_MODEL,
        },
        "analytics": {
            "rr_policy": "defined_only",  # defined_only or missing_as_zero
            "insight_window": DEFAULT_INSIGHT_WINDOW,
        },
        "subscription": {
            "enforce": False,
        },
    }

    with open(config_path, "w") as f:
        toml.dump(template, f)

    return config_path


def validate_config(config: dict) -> list[str]:
    """Validate configuration and return list of problems.

    Args:
        config: Configuration dictionary.

    Returns:
        List of missing or invalid keys.
    """
    problems = []

    user_id, _ = get_user(config)
    if not user_id:
        problems.append("user.id")

    policy = config.get("analytics", {}).get("rr_policy", "defined_only")
    if policy not in ("defined_only", "missing_as_zero"):
        problems.append("analytics.rr_policy (defined_only or missing_as_zero)")

    window = config.get("analytics", {}).get("insight_window", DEFAULT_INSIGHT_WINDOW)
    if not isinstance(window, int) or window < 1:
        problems.append("analytics.insight_window (positive integer)")

    return problems


def get_openai_key(config: dict) -> Optional[str]:
    """OpenAI key from config, falling back to OPENAI_API_KEY."""
    key = config.get("openai", {}).get("api_key", "")
    if key and key != "your-openai-api-key":
        return key
    return os.environ.get("OPENAI_API_KEY")
