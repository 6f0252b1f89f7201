from datetime import UTC, datetime
from pathlib import Path

from pydantic_settings import BaseSettings


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime.

    Keeps datetimes naive so they stay compatible with SQLite
    (which doesn't store tz info).
    """
    return datetime.now(UTC).replace(tzinfo=None)


class Settings(BaseSettings):
    app_name: str = "flashdeck"
    database_url: str = f"sqlite+aiosqlite:///{Path(__file__).resolve().parent.parent / 'data' / 'flashdeck.db'}"
    debounce_seconds: float = 1.0
    max_wait_seconds: float = 3.0
    known_streak: int = 3
    choice_count: int = 4
    debug: bool = False

    model_config = {"env_prefix": "FLASHDECK_", "env_file": ".env"}


settings = Settings()
