from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

class Base(DeclarativeBase): pass


class Database:
    """Owns the engine and session factory for one storefront deployment.

    Nothing connects until ``init()``; ``close()`` disposes the pool. An
    in-memory SQLite DSN (``sqlite://``) shares one connection across threads
    so a test app sees a single database.
    """

    def __init__(self, dsn: str):
        self.dsn = dsn
        self.engine: Engine | None = None
        self._sessionmaker: sessionmaker | None = None

    def init(self, create_schema: bool = True) -> None:
        if self.engine is not None:
            return
        if self.dsn.startswith('sqlite'):
            self.engine = create_engine(self.dsn, connect_args={'check_same_thread': False}, poolclass=StaticPool)
        else:
            self.engine = create_engine(self.dsn, pool_pre_ping=True)
        self._sessionmaker = sessionmaker(bind=self.engine, autoflush=False, autocommit=False, expire_on_commit=False)
        if create_schema:
            import storefront.db.models  # noqa: F401
            Base.metadata.create_all(self.engine)

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self._sessionmaker = None

    def session(self) -> Session:
        if self._sessionmaker is None:
            raise RuntimeError('Database.init() has not been called')
        return self._sessionmaker()
