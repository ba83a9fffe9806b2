"""
Database schema and connection management for the local job cache.

SQLite via SQLAlchemy. The cache mirrors the store between CLI runs; the
backend remains the store of record.
"""

from pathlib import Path

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, Text, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()

class JobRecord(Base):
    """Cached job posting."""

    __tablename__ = "jobs"

    job_id = Column(String, primary_key=True)  # local:<n> | remote:<id>
    position = Column(Integer, nullable=False)  # 0 = newest
    title = Column(String, nullable=False)
    company = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    location = Column(String, nullable=False, default="")
    experience = Column(String, nullable=False, default="")
    job_type = Column(String, nullable=False)
    salary = Column(String, nullable=False)
    salary_value = Column(Float, nullable=False, default=0.0)
    status = Column(String, nullable=False)
    posted_time = Column(String, nullable=False)
    created_at = Column(DateTime)
    logo = Column(String)
    requirements = Column(Text)
    responsibilities = Column(Text)
    application_deadline = Column(DateTime)
    is_liked = Column(Boolean, nullable=False, default=False)
    likes_count = Column(Integer, nullable=False, default=0)
    revision = Column(Integer, nullable=False, default=0)

def _engine(db_path: Path):
    return create_engine(f"sqlite:///{db_path}")

def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = _engine(db_path)
    Base.metadata.create_all(engine)
    engine.dispose()

def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    Session = sessionmaker(bind=_engine(Path(db_path)))
    return Session()
