# shopapi/database.py
from fastapi import Depends
from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

from shopapi.config import settings


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE RESTRICT/CASCADE unless asked per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str):
    if url.startswith("sqlite"):
        engine = create_engine(url, connect_args={"check_same_thread": False})
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    return create_engine(url, pool_pre_ping=True)


engine = make_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


# Overridden in tests to point the whole app at another database
def get_session_factory():
    return SessionLocal


def get_db(session_factory=Depends(get_session_factory)):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    # Models must be imported so their tables are registered on Base.metadata
    import shopapi.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
