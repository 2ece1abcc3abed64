from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session, DeclarativeBase
from sqlalchemy.pool import StaticPool

from .settings import settings

class Base(DeclarativeBase):
    pass

_engine = None
_SessionLocal = None

def _sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores REFERENCES clauses unless asked per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()

def init_db(url: str | None = None) -> None:
    global _engine, _SessionLocal
    if _engine is not None:
        return
    url = url or settings.ATHLETICS_DB_URL
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    engine_kwargs = {}
    if url in ("sqlite://", "sqlite:///:memory:"):
        # one shared connection, otherwise every checkout sees an empty database
        engine_kwargs["poolclass"] = StaticPool
    _engine = create_engine(url, future=True, echo=False, connect_args=connect_args, **engine_kwargs)
    if url.startswith("sqlite"):
        event.listen(_engine, "connect", _sqlite_foreign_keys)
    _SessionLocal = sessionmaker(bind=_engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)
    from . import models  # noqa
    Base.metadata.create_all(bind=_engine)

def reset_db() -> None:
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None

def new_session() -> Session:
    if _SessionLocal is None:
        init_db()
    return _SessionLocal()

def get_session() -> Session:
    db = new_session()
    try:
        yield db
    finally:
        db.close()
