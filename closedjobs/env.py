import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

BACKENDS = ("sqlite", "supabase")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load_env(env_path: Optional[Path] = None) -> None:
    """Load .env from project root if present. Existing variables win."""
    env_path = env_path or Path.cwd() / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path, override=False)


@dataclass
class Settings:
    """Runtime configuration, read from the environment."""

    backend: str = "sqlite"
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    table: str = "jobs_closed"
    db_path: Path = Path("data/jobs.db")
    batch_size: int = 100
    retries: int = 0
    timeout: float = 15.0
    log_level: str = "INFO"


def _int_env(name: str, default: int, minimum: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def get_settings() -> Settings:
    """
    Build Settings from environment variables.

    Raises:
        ValueError: On an unknown backend or a malformed number
    """
    backend = os.getenv("CLOSEDJOBS_BACKEND", "sqlite").strip().lower()
    if backend not in BACKENDS:
        raise ValueError(f"CLOSEDJOBS_BACKEND must be one of {', '.join(BACKENDS)}, got {backend!r}")

    timeout_raw = os.getenv("CLOSEDJOBS_TIMEOUT", "15")
    try:
        timeout = float(timeout_raw)
    except ValueError:
        raise ValueError(f"CLOSEDJOBS_TIMEOUT must be a number, got {timeout_raw!r}")

    log_level = os.getenv("CLOSEDJOBS_LOG_LEVEL", "INFO").strip().upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"CLOSEDJOBS_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}")

    return Settings(
        backend=backend,
        supabase_url=os.getenv("SUPABASE_URL") or None,
        supabase_key=os.getenv("SUPABASE_KEY") or None,
        table=os.getenv("CLOSEDJOBS_TABLE", "jobs_closed"),
        db_path=Path(os.getenv("CLOSEDJOBS_DB", "data/jobs.db")),
        batch_size=_int_env("CLOSEDJOBS_BATCH_SIZE", 100, minimum=1),
        retries=_int_env("CLOSEDJOBS_RETRIES", 0, minimum=0),
        timeout=timeout,
        log_level=log_level,
    )
