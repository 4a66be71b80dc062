import logging
from sqlalchemy.engine import Engine, make_url
from sqlmodel import create_engine, SQLModel
from config import Settings

log = logging.getLogger(__name__)


def _mask(url: str) -> str:
    """Database URL with the password hidden, for logging"""
    return make_url(url).render_as_string(hide_password=True)


def build_engine(settings: Settings) -> Engine:
    """Create the store engine selected by the settings"""
    connect_args = {}
    if settings.database_url.startswith("sqlite"):
        # Requests may be served from worker threads
        connect_args["check_same_thread"] = False

    log.info(
        "Task store: table=%s region=%s offline=%s url=%s",
        settings.table_name,
        settings.region,
        settings.offline,
        _mask(settings.database_url),
    )
    return create_engine(settings.database_url, echo=settings.echo, connect_args=connect_args)


def create_db_and_tables(engine: Engine) -> None:
    """Create all tables in the database"""
    SQLModel.metadata.create_all(engine)
