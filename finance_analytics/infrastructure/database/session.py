"""Database engine and session factory for the transaction store"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker


def create_session_factory(database_url: str) -> sessionmaker:
    """
    Build a pooled engine and a session factory bound to it.

    Called once at application start; sessions are opened per read and
    never written through.
    """
    if database_url.startswith("sqlite"):
        engine = create_engine(database_url, connect_args={"check_same_thread": False})
    else:
        # Connection pool: max 20 connections, recycle after 1 hour to avoid stale connections
        engine = create_engine(
            database_url,
            pool_pre_ping=True,  # Verify connections before using
            pool_size=10,
            max_overflow=10,
            pool_recycle=3600,
        )
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
