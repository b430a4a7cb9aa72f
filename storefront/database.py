# storefront/database.py
from __future__ import annotations

import logging
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, event, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import Settings

logger = logging.getLogger(__name__)

Base = declarative_base()

ORDER_SEQUENCE_NAME = "orders"


def _sqlite_fk_pragma(dbapi_conn, _record):
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA foreign_keys=ON")
    cur.close()


class Database:
    """Engine + session factory for one running application.

    Built at startup and disposed at shutdown; routes reach it through
    ``app.state.database`` instead of a module global.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        url = settings.database_url
        kwargs = {"echo": settings.sql_echo, "pool_pre_ping": True}
        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
        else:
            kwargs["pool_size"] = settings.db_pool_size
            kwargs["pool_timeout"] = settings.db_pool_timeout
        self.engine: Engine = create_engine(url, **kwargs)
        if url.startswith("sqlite"):
            event.listen(self.engine, "connect", _sqlite_fk_pragma)
        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

    def create_all(self) -> None:
        from .models import OrderSequence

        Base.metadata.create_all(bind=self.engine)
        with self.SessionLocal() as db:
            exists = db.scalar(select(OrderSequence).where(OrderSequence.name == ORDER_SEQUENCE_NAME))
            if exists is None:
                db.add(OrderSequence(name=ORDER_SEQUENCE_NAME, last_value=0))
                db.commit()

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self) -> None:
        logger.info("Closing database pool")
        self.engine.dispose()


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
