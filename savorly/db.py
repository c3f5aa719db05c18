import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import settings

logger = logging.getLogger(__name__)


def make_engine(url: str) -> Engine:
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(url, connect_args=connect_args)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # Only SQLite connections understand this pragma
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()


engine = make_engine(settings.database_url)
SessionLocal = sessionmaker(
    autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
)
Base = declarative_base()


@contextmanager
def session_scope(factory=None):
    """Yield a short-lived session and always close it."""
    db = (factory or SessionLocal)()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind: Engine = None, reset: bool = None, seed: bool = True):
    """Create the schema and load the sample catalog if it is empty.

    With ``reset`` (defaults to ``settings.reset_db_on_start``) every table
    is dropped first, so all previous data is lost.
    """
    from . import models  # noqa: F401  register tables on Base.metadata
    from .seed import seed_if_empty

    bind = bind or engine
    if reset is None:
        reset = settings.reset_db_on_start
    if reset:
        logger.info("Dropping all tables on %s", bind.url)
        Base.metadata.drop_all(bind=bind)
    Base.metadata.create_all(bind=bind)

    if seed:
        factory = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=bind
        )
        with session_scope(factory) as db:
            seed_if_empty(db, settings.seed_file)
