from typing import Iterator, Optional
from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from app.utils.logger import get_logger

logger = get_logger(__name__)

# Database connection pooling configuration
POOL_SIZE = 5          # Base connections per worker
MAX_OVERFLOW = 10      # Additional connections when needed
POOL_TIMEOUT = 30      # Seconds to wait for connection
POOL_RECYCLE = 1800    # Recycle connections every 30 minutes
POOL_PRE_PING = True   # Validate connections before use

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Owns the SQLAlchemy engine and session factory for one process.

    Constructed once at application startup (see ``app.context``) and
    disposed at shutdown; request handlers reach it through ``get_db``
    instead of a module-level engine.
    """

    def __init__(self, url: str, echo: bool = False, engine: Optional[Engine] = None):
        self.url = url
        self.engine = engine or self._create_engine(url, echo)
        self.session_factory = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine
        )

    @staticmethod
    def _create_engine(url: str, echo: bool) -> Engine:
        if url.startswith("sqlite"):
            engine = create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool if ":memory:" in url or url == "sqlite://" else None,
                echo=echo,
            )
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
            return engine

        engine = create_engine(
            url,
            pool_size=POOL_SIZE,
            max_overflow=MAX_OVERFLOW,
            pool_timeout=POOL_TIMEOUT,
            pool_recycle=POOL_RECYCLE,
            pool_pre_ping=POOL_PRE_PING,
            echo=echo,
        )
        logger.info(f"Database pool configured: size={POOL_SIZE}, max_overflow={MAX_OVERFLOW}, timeout={POOL_TIMEOUT}s")
        return engine

    def create_all(self) -> None:
        """Create any missing tables (schema changes themselves go through Alembic)."""
        import app.models  # noqa: F401  registers every model on Base.metadata
        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.session_factory()

    def get_pool_status(self) -> dict:
        """Current connection pool status, for the health endpoint."""
        try:
            pool = self.engine.pool
            status = {"pool_type": type(pool).__name__}
            for name in ("size", "checkedin", "checkedout", "overflow"):
                probe = getattr(pool, name, None)
                if callable(probe):
                    status[name] = probe()
            return status
        except Exception as e:
            return {
                "error": f"Could not get pool status: {str(e)}",
                "pool_type": "unknown"
            }

    def dispose(self) -> None:
        logger.info("Disposing database engine")
        self.engine.dispose()


def get_db(request: Request) -> Iterator[Session]:
    """
    Database dependency for FastAPI.
    Provides a session from the application's Database with automatic cleanup.
    """
    database: Database = request.app.state.context.database
    db = database.session()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database session error: {e}")
        try:
            db.rollback()
        except Exception as rollback_error:
            logger.error(f"Error during rollback: {rollback_error}")
        raise
    finally:
        try:
            db.close()
        except Exception as close_error:
            logger.error(f"Error closing database session: {close_error}")
