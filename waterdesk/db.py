import logging
import os

from alembic.config import Config
from sqlalchemy import Connection, create_engine
from sqlalchemy.engine import Engine, make_url

from alembic import command
from waterdesk.settings import settings

logger = logging.getLogger(__name__)

_engine: Engine | None = None
_connection: Connection | None = None


def _engine_options(db_url: str) -> dict:
    """Pool tuning for server databases; SQLite files need none."""
    if make_url(db_url).get_backend_name() == "sqlite":
        return {}
    return {"pool_pre_ping": True, "pool_recycle": 1800}


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        url = make_url(settings.db_url)
        _engine = create_engine(url, **_engine_options(settings.db_url))
        logger.info("Database engine created for %s", url.render_as_string(hide_password=True))
    return _engine


def get_connection() -> Connection:
    """Return the connection shared by every repository in a CLI session."""
    global _connection
    if _connection is None:
        _connection = get_engine().connect()
        logger.debug("Session DB connection opened")
    return _connection


def close_connection() -> None:
    global _connection
    if _connection is not None:
        _connection.close()
        _connection = None
        logger.debug("Session DB connection closed")


def _get_alembic_config(db_url: str | None = None) -> Config:
    """Alembic config from the project root alembic.ini, pointed at ``db_url``."""
    project_root = os.path.dirname(os.path.dirname(__file__))
    ini_path = os.path.join(project_root, "alembic.ini")
    if not os.path.exists(ini_path):
        ini_path = os.path.join(os.getcwd(), "alembic.ini")
    cfg = Config(ini_path)
    # ConfigParser interpolates '%', which can appear in URL-encoded passwords.
    cfg.set_main_option("sqlalchemy.url", (db_url or settings.db_url).replace("%", "%%"))
    return cfg


def initialize_db(db_url: str | None = None) -> None:
    """Upgrade the schema (customers, bills, support_tickets) to head."""
    logger.info("Running Alembic migrations")
    command.upgrade(_get_alembic_config(db_url), "head")
    logger.info("Migrations complete")
