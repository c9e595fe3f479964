from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env once, before any settings are read.
load_dotenv()

# Project root (independent of current working directory).
PROJECT_ROOT = Path(__file__).resolve().parents[3]


def resolve_dir(env_key: str, default: str, *, create: bool = True) -> Path:
    """
    Resolve a directory path from ENV.
    Relative paths are resolved against PROJECT_ROOT.
    """
    path = Path(os.getenv(env_key, default))
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    if create:
        path.mkdir(parents=True, exist_ok=True)
    return path


SECRETS_DIR = resolve_dir("DAY_PLANNER_SECRETS_DIR", "secrets")
STATE_DIR = resolve_dir("DAY_PLANNER_STATE_DIR", ".state")
LOGS_DIR = resolve_dir("DAY_PLANNER_LOGS_DIR", "logs")

TASKS_DIR = STATE_DIR / "tasks"


def _env_number(key: str, default: float, cast=float):
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return cast(default)
    try:
        value = cast(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{key} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{key} must be positive, got {raw!r}")
    return value


@dataclass(frozen=True)
class PlannerSettings:
    model: str = "gpt-4o-mini"
    max_emails: int = 20
    # Seconds; applied to each provider fetch and to the model call.
    fetch_timeout: float = 20.0
    model_timeout: float = 60.0
    calendar_days: int = 30
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "PlannerSettings":
        return cls(
            model=os.getenv("DAY_PLANNER_MODEL", cls.model),
            max_emails=_env_number("DAY_PLANNER_MAX_EMAILS", cls.max_emails, int),
            fetch_timeout=_env_number("DAY_PLANNER_FETCH_TIMEOUT", cls.fetch_timeout),
            model_timeout=_env_number("DAY_PLANNER_MODEL_TIMEOUT", cls.model_timeout),
            calendar_days=_env_number("DAY_PLANNER_CALENDAR_DAYS", cls.calendar_days, int),
            log_level=os.getenv("DAY_PLANNER_LOG_LEVEL", cls.log_level).upper(),
        )


def load_openai_api_key(secrets_dir: Optional[Path] = None) -> Optional[str]:
    """Return the OpenAI key from OPENAI_API_KEY or the secrets directory."""
    env_key = (os.getenv("OPENAI_API_KEY") or "").strip()
    if env_key:
        return env_key

    base = secrets_dir or SECRETS_DIR
    txt_path = base / "openai_token.txt"
    if txt_path.exists():
        try:
            token = txt_path.read_text(encoding="utf-8").strip()
        except UnicodeDecodeError:
            return None
        return token or None

    json_path = base / "openai_token.json"
    if json_path.exists():
        try:
            payload = json.loads(json_path.read_text(encoding="utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return None
        # Prefer explicit key names, then generic token key.
        for candidate in (
            payload.get("api_key"),
            payload.get("openai_api_key"),
            payload.get("token"),
        ):
            if isinstance(candidate, str) and candidate.strip():
                return candidate.strip()
    return None
