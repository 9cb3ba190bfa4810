"""Runtime configuration for the app (toggleable during tests/runtime)."""
import os
from typing import NamedTuple


class ConfigState(NamedTuple):
    session_secret: str
    session_idle_minutes: int
    log_level: str


def load_from_env() -> ConfigState:
    return ConfigState(
        session_secret=os.getenv("SESSION_SECRET", "dev-session-secret"),
        session_idle_minutes=int(os.getenv("SESSION_IDLE_MINUTES", "30")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


state = load_from_env()


def set_state(**changes):
    global state
    state = state._replace(**changes)


def session_max_age() -> int:
    """Idle lifetime of the session cookie, in seconds."""
    return state.session_idle_minutes * 60
