from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from kpi_dashboard.core.config import settings

DATABASE_URL = settings.database_url


def build_engine(url: str) -> Engine:
    """Create an engine for PostgreSQL or SQLite (file or in-memory)."""
    if url.startswith("postgresql"):
        return create_engine(url)

    kwargs = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in url:
        # One shared connection, otherwise every checkout sees an empty database
        kwargs["poolclass"] = StaticPool
    sqlite_engine = create_engine(url, **kwargs)

    @event.listens_for(sqlite_engine, "connect")
    def _enable_sqlite_pragmas(dbapi_connection, connection_record):
        # pysqlite's own BEGIN handling breaks SAVEPOINT, SQLAlchemy emits it below
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        if ":memory:" not in url:
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(sqlite_engine, "begin")
    def _do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return sqlite_engine


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    """
    Session Provider: Provides a database session per request.
    Transaction management is handled explicitly in the Service Layer.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db():
    """
    Registers all domain models and initializes the database schema.
    This should be called during the application startup lifespan.
    """
    # Import all models to ensure they are registered with Base.metadata before create_all
    from kpi_dashboard.models import user, employee, weekly_kpi, upload_log  # noqa: F401
    Base.metadata.create_all(bind=engine)
