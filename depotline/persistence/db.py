from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from .models import Base


@dataclass(frozen=True)
class Database:
    """Engine plus session factory.

    ``isolation_level`` is handed to the driver as-is, e.g. ``"READ COMMITTED"``
    or ``"SERIALIZABLE"`` on PostgreSQL. Submissions stay safe under READ
    COMMITTED because stock is re-read and decremented with a guarded UPDATE.
    """

    url: str
    echo: bool = False
    isolation_level: Optional[str] = None
    engine: Engine = field(init=False)
    session_factory: sessionmaker[Session] = field(init=False)

    def __post_init__(self) -> None:
        options: Dict[str, Any] = {"echo": self.echo, "future": True, "pool_pre_ping": True}
        if self.url.startswith("sqlite"):
            options["connect_args"] = {"check_same_thread": False}
        if self.isolation_level:
            options["isolation_level"] = self.isolation_level
        engine = create_engine(self.url, **options)
        session_factory = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
        object.__setattr__(self, "engine", engine)
        object.__setattr__(self, "session_factory", session_factory)

    def create_tables(self) -> None:
        Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()

    @contextmanager
    def session(self) -> Iterator[Session]:
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
