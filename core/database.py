"""
RecipeShare Database Configuration
SQLAlchemy 2.0 engine lifecycle, session management and schema operations
"""

from sqlalchemy import create_engine, event, inspect, select, text, MetaData
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool
from contextlib import contextmanager
import structlog
import time
from typing import Generator, List, Optional

from core.config import settings

logger = structlog.get_logger()

# Database engine
engine: Optional[Engine] = None
SessionLocal: Optional[sessionmaker] = None


class Base(DeclarativeBase):
    """Base class for all database models"""

    metadata = MetaData(
        naming_convention={
            "ix": "ix_%(column_0_label)s",
            "uq": "uq_%(table_name)s_%(column_0_name)s",
            "ck": "ck_%(table_name)s_%(constraint_name)s",
            "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
            "pk": "pk_%(table_name)s"
        }
    )


def _build_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}, "echo": settings.DEBUG}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every checkout sees an empty database
            options["poolclass"] = StaticPool
        sqlite_engine = create_engine(database_url, **options)

        @event.listens_for(sqlite_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return sqlite_engine

    return create_engine(
        database_url,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_timeout=settings.DATABASE_POOL_TIMEOUT,
        pool_pre_ping=True,
        pool_recycle=3600,  # 1 hour
        echo=settings.DEBUG,
    )


def init_db(database_url: Optional[str] = None) -> Engine:
    """Initialize the engine and session factory, creating the schema when configured"""
    global engine, SessionLocal

    if engine is not None:
        return engine

    try:
        engine = _build_engine(database_url or settings.DATABASE_URL)
        SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        if settings.DATABASE_AUTO_INIT:
            create_tables()

        logger.info("Database connection initialized", dialect=engine.dialect.name)
        return engine

    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        engine = None
        SessionLocal = None
        raise


def close_db() -> None:
    """Close database connections"""
    global engine, SessionLocal

    if engine is not None:
        engine.dispose()
        logger.info("Database connections closed")
    engine = None
    SessionLocal = None


def get_engine() -> Engine:
    if engine is None:
        return init_db()
    return engine


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Context manager for database sessions
    Commits on success, rolls back on error and always closes
    """
    get_engine()
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error("Database session error", error=str(e))
        raise
    finally:
        session.close()


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for FastAPI to get database session
    Endpoints commit their own writes
    """
    get_engine()
    session = SessionLocal()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def _load_models() -> None:
    # Registers every table on Base.metadata
    import models  # noqa: F401


def create_tables() -> List[str]:
    """Create all tables and seed the default categories"""
    _load_models()
    from models.categories import Category, DEFAULT_CATEGORIES

    bind = get_engine()
    Base.metadata.create_all(bind=bind)

    with Session(bind) as session:
        existing = set(session.scalars(select(Category.name)).all())
        missing = [c for c in DEFAULT_CATEGORIES if c["name"] not in existing]
        for category in missing:
            session.add(Category(**category))
        session.commit()

    if missing:
        logger.info("Seeded categories", count=len(missing))
    return check_tables_exist()


def drop_tables() -> None:
    """Drop every application table"""
    _load_models()
    Base.metadata.drop_all(bind=get_engine())
    logger.warning("Application tables dropped")


def force_drop_everything() -> None:
    """Drop every table present in the database, including ones this service did not create"""
    bind = get_engine()
    reflected = MetaData()
    reflected.reflect(bind=bind)
    reflected.drop_all(bind=bind)
    _load_models()
    Base.metadata.drop_all(bind=bind)
    logger.warning("All database tables dropped", tables=len(reflected.tables))


def check_tables_exist() -> List[str]:
    """Names of application tables currently present"""
    _load_models()
    present = set(inspect(get_engine()).get_table_names())
    return sorted(name for name in Base.metadata.tables if name in present)


class DatabaseHealthCheck:
    """Database health check utilities"""

    @staticmethod
    def check_connection() -> dict:
        """Run a trivial query and report latency"""
        started = time.perf_counter()
        try:
            with get_engine().connect() as conn:
                healthy = conn.execute(text("SELECT 1")).scalar() == 1
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            healthy = False
        elapsed_ms = round((time.perf_counter() - started) * 1000)
        return {
            "status": "connected" if healthy else "disconnected",
            "responseTime": f"{elapsed_ms}ms",
        }

    @staticmethod
    def get_connection_info() -> dict:
        """Get database connection pool information"""
        if engine is None:
            return {"status": "not_initialized"}

        pool = engine.pool
        info = {"status": "healthy", "dialect": engine.dialect.name, "pool": pool.status()}
        return info


# Export commonly used items
__all__ = [
    "Base",
    "init_db",
    "close_db",
    "get_engine",
    "get_db_session",
    "get_db",
    "create_tables",
    "drop_tables",
    "force_drop_everything",
    "check_tables_exist",
    "DatabaseHealthCheck"
]
