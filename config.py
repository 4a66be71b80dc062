import os
from dataclasses import dataclass
from functools import lru_cache
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DEFAULT_TABLE = "tasks"
DEFAULT_REGION = "us-east-1"
OFFLINE_REGION = "localhost"
OFFLINE_DATABASE_URL = "sqlite:///./tasks.db"


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Store wiring and service options read from the environment"""
    table_name: str
    database_url: str
    region: str
    offline: bool
    echo: bool
    cors_origins: tuple
    log_level: str


def load_settings() -> Settings:
    """
    Build settings from environment variables

    Raises:
        ValueError: If DATABASE_URL is missing outside offline mode
    """
    offline = _flag("IS_OFFLINE")

    if offline:
        database_url = os.getenv("LOCAL_DATABASE_URL", OFFLINE_DATABASE_URL)
        region = OFFLINE_REGION
    else:
        database_url = os.getenv("DATABASE_URL")
        region = os.getenv("REGION", DEFAULT_REGION)

    if not database_url:
        raise ValueError("DATABASE_URL environment variable is not set")

    cors_origins = tuple(
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
        if origin.strip()
    )

    return Settings(
        table_name=table_name(),
        database_url=database_url,
        region=region,
        offline=offline,
        echo=_flag("DATABASE_ECHO"),
        cors_origins=cors_origins,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache
def get_settings() -> Settings:
    """Settings for this process, loaded once"""
    return load_settings()


def table_name() -> str:
    """Table name, readable without a configured store endpoint"""
    return os.getenv("TASKS_TABLE", DEFAULT_TABLE)
