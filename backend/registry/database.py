"""
Engine, session factory and declarative base for the course registry.

PostgreSQL is the production store (schema from the Alembic migration);
SQLite is used for local runs and tests, with tables created from the
models. Deleting a course unlinks its students and deleting an identity
removes its role, profile and student rows through foreign key rules,
so SQLite must run with foreign keys switched on.

Nothing in this module (or in registry.services) knows about the
authorization layer; registry.authz sits on top of it.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from registry.config import DATABASE_URL

# SQLite does not support pool_size, max_overflow, or pool_pre_ping
engine_kwargs = {"echo": False}

if DATABASE_URL.startswith("postgresql"):
    engine_kwargs.update({
        "pool_size": 10,
        "max_overflow": 20,
        "pool_pre_ping": True,
    })
elif DATABASE_URL.startswith("sqlite"):
    # SQLite needs check_same_thread=False for FastAPI (multi-threaded)
    engine_kwargs["connect_args"] = {"check_same_thread": False}

engine = create_engine(DATABASE_URL, **engine_kwargs)

# Per connection: without foreign_keys=ON SQLite ignores the
# students.course_id SET NULL and identities CASCADE rules.
if DATABASE_URL.startswith("sqlite"):
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


def get_db():
    """
    Request-scoped session for the routes and the policy enforcer.

    Each request commits at most once, so every policy check and the write
    it guards share one transaction.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables():
    """
    Create the registry tables from the models (SQLite runs and tests).
    PostgreSQL deployments run migrations/versions/001_initial.py instead.
    """
    Base.metadata.create_all(bind=engine)


def drop_tables():
    """Drop the registry tables; tests use it to start from empty storage."""
    Base.metadata.drop_all(bind=engine)
