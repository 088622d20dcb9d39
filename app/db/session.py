"""
Database session management - SQLAlchemy engine and session factory.
This module provides the database connection and session dependency for FastAPI.

The engine and session factory belong to the application: create_app()
builds them from its Settings and keeps them on app.state.
"""

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker


def build_engine(database_url: str, statement_timeout_ms: int = 0) -> Engine:
    """
    Create the connection pool.

    - pool_pre_ping=True: check a pooled connection with "SELECT 1" before
      use, so a database restart does not surface as request errors.
    - On PostgreSQL every connection gets a statement_timeout, so one slow
      query cannot hold a request open indefinitely.
    - SQLite connections are shared with the threadpool that runs sync routes.

    create_engine does not connect until first use, so building an app
    without a reachable database is fine.
    """
    connect_args = {}
    if statement_timeout_ms and database_url.startswith("postgresql"):
        connect_args["options"] = f"-c statement_timeout={int(statement_timeout_ms)}"
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    return create_engine(
        database_url,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    # - autocommit=False: you must call db.commit()
    # - autoflush=False: you control when flushes happen
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    """
    FastAPI dependency that provides a database session.

    Usage in a route:
        @router.get("/items")
        def get_items(db: Session = Depends(get_db)):
            ...

    One session per request; close() always runs, returning the connection
    to the pool even if the route raised.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
