
from contextlib import contextmanager
from pathlib import Path
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from ..models.base import Base


class Database:
    """Engine plus a transactional session scope for one database URL."""

    def __init__(self, database_url: str):
        self.database_url = database_url
        connect_args = {}
        if database_url.startswith("sqlite"):
            _ensure_sqlite_parent(database_url)
            # request threads share pooled connections; wait on the write lock instead of failing
            connect_args = {"check_same_thread": False, "timeout": 30}
        self.engine = create_engine(database_url, future=True, connect_args=connect_args)
        self._session_maker = sessionmaker(
            bind=self.engine, autoflush=False, expire_on_commit=False, future=True
        )

    def create_all(self) -> None:
        from .. import models  # noqa: F401

        Base.metadata.create_all(self.engine)

    @contextmanager
    def session(self):
        session = self._session_maker()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()


def _ensure_sqlite_parent(database_url: str) -> None:
    # Ensure sqlite file parent directory exists to avoid 'unable to open database file'
    if not database_url.startswith("sqlite:///") or ":memory:" in database_url:
        return
    db_path = database_url.split("sqlite:///")[-1]
    Path(db_path).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)
