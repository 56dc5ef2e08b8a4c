"""
Travel Cover - Database Configuration
SQLAlchemy engine and session factory
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from .config import get_settings


def build_engine(database_url: str):
    """Create an engine; SQLite connections are shared across request threads."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, echo=False, connect_args=connect_args)


# Create engine
engine = build_engine(get_settings().database_url)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for ORM models
Base = declarative_base()


def get_db():
    """Dependency for FastAPI - yields database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Initialize database - create all tables."""
    # Models must be imported so their tables are registered on Base
    from .models import db_models  # noqa: F401
    Base.metadata.create_all(bind=engine)
