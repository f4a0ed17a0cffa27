from contextlib import contextmanager

from fastapi import HTTPException
from loguru import logger
from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from mobileshop.config import settings
from mobileshop.errors import PersistenceError

Base = declarative_base()


def enable_sqlite_foreign_keys(engine):
    """SQLite ignores FOREIGN KEY clauses unless asked on every connection."""
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(database_url: str):
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    new_engine = create_engine(database_url, connect_args=connect_args)
    enable_sqlite_foreign_keys(new_engine)
    return new_engine


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session):
    """
    Transaction scope for multi-step writes.
    Commits when the block finishes, rolls back every prior step otherwise.
    Storage failures come out as PersistenceError.
    """
    try:
        yield db
        db.commit()
    except HTTPException as exc:
        db.rollback()
        logger.info(f"Transaction rolled back: {exc.detail}")
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Transaction rolled back after a storage error")
        raise PersistenceError(f"Database error: {exc.__class__.__name__}") from exc
    except Exception:
        db.rollback()
        logger.exception("Transaction rolled back after an unexpected error")
        raise
