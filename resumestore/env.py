import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


def load_env() -> None:
    """Load .env from the working directory if present."""
    env_path = Path.cwd() / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path)


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    db_path: Path = Path("data/resumes.db")
    log_level: str = "INFO"
    log_dir: Path = Path("logs")
    strict_translation: bool = False
    reconcile_strategy: str = "aggregate"


def get_settings() -> Settings:
    """Read settings from the environment (call load_env first to pick up .env)."""
    return Settings(
        db_path=Path(os.getenv("RESUMESTORE_DB_PATH", "data/resumes.db")),
        log_level=os.getenv("RESUMESTORE_LOG_LEVEL", "INFO"),
        log_dir=Path(os.getenv("RESUMESTORE_LOG_DIR", "logs")),
        strict_translation=_env_flag("RESUMESTORE_STRICT_TRANSLATION"),
        reconcile_strategy=os.getenv("RESUMESTORE_RECONCILE_STRATEGY", "aggregate"),
    )
