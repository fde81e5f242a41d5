"""
Database setup with SQLAlchemy 2.0.
Provides connection pooling, session management, transactions and base model.
"""
from typing import Generator
from contextlib import contextmanager
from pathlib import Path
from sqlalchemy import create_engine, MetaData, DateTime, Engine, Uuid, func, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool, QueuePool
import uuid
from datetime import datetime, timezone

from almoxarifado.core.config import settings
from almoxarifado.error_handlers import AppException, TransactionFailureError
from almoxarifado.logging_config import get_logger

logger = get_logger("database")


# Naming convention for constraints
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all database models."""
    metadata = metadata

    # Common columns for all tables
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False
    )


# Global engine and session factory
engine: Engine | None = None
SessionLocal: sessionmaker[Session] | None = None


def get_engine() -> Engine:
    """Get or create the database engine."""
    global engine

    if engine is None:
        if settings.database_url.startswith("sqlite"):
            if ":memory:" in settings.database_url:
                engine = create_engine(
                    settings.database_url,
                    echo=settings.db_echo,
                    poolclass=StaticPool,
                    connect_args={"check_same_thread": False}
                )
            else:
                Path("data").mkdir(exist_ok=True)
                engine = create_engine(
                    settings.database_url,
                    echo=settings.db_echo,
                    connect_args={"check_same_thread": False}
                )
        else:
            # PostgreSQL with connection pooling
            engine = create_engine(
                settings.database_url,
                echo=settings.db_echo,
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                poolclass=QueuePool,
                pool_pre_ping=True,  # Verify connections before using
                pool_recycle=3600,   # Recycle connections after 1 hour
            )

    return engine


def get_session_factory() -> sessionmaker[Session]:
    """Get or create the session factory."""
    global SessionLocal

    if SessionLocal is None:
        SessionLocal = sessionmaker(
            bind=get_engine(),
            expire_on_commit=False,
            autoflush=False
        )

    return SessionLocal


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for FastAPI endpoints.
    Provides a database session and ensures proper cleanup.

    Usage:
        @router.get("/items")
        def list_items(db: Session = Depends(get_db)):
            return db.scalars(select(StockItem)).all()
    """
    session_factory = get_session_factory()
    with session_factory() as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise


@contextmanager
def get_db_context():
    """
    Context manager for database sessions outside of a request.

    Usage:
        with get_db_context() as db:
            sweep_overdue_loans(db)
    """
    session_factory = get_session_factory()
    with session_factory() as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise


@contextmanager
def transaction(db: Session, operation: str):
    """
    Run a unit of work atomically.

    Commits when the block finishes; on any error rolls back everything the
    block wrote. Store errors are re-raised as TransactionFailureError.
    """
    try:
        yield db
        db.commit()
    except AppException:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"[TX] {operation} failed, rolled back: {exc}", exc_info=True)
        raise TransactionFailureError(operation, str(exc)) from exc
    except Exception:
        db.rollback()
        raise


def init_db() -> None:
    """Initialize database tables. Use Alembic in production."""
    # Import all models to ensure they're registered
    from almoxarifado import models  # noqa: F401

    Base.metadata.create_all(bind=get_engine())


def close_db() -> None:
    """Close database connections."""
    global engine, SessionLocal

    if engine is not None:
        engine.dispose()
        engine = None

    SessionLocal = None


def check_db_connection() -> bool:
    """Health check for database connection."""
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        return False
