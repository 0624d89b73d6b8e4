import pathlib

from sqlalchemy import Engine, create_engine, event
from sqlmodel import Session, SQLModel
import structlog

from app.internal.env_settings import Settings

logger = structlog.stdlib.get_logger()


def build_engine(settings: Settings) -> Engine:
    db = settings.db
    if db.use_postgres:
        return create_engine(
            f"postgresql://{db.postgres_user}:{db.postgres_password}@{db.postgres_host}:{db.postgres_port}/{db.postgres_db}?sslmode={db.postgres_ssl_mode}",
            pool_size=db.pool_size,
            max_overflow=db.max_overflow,
            pool_timeout=db.pool_timeout,
            pool_pre_ping=db.pool_pre_ping,
        )

    sqlite_path = settings.get_sqlite_path()
    pathlib.Path(sqlite_path).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(
        f"sqlite+pysqlite:///{sqlite_path}",
        connect_args={"check_same_thread": False},
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_pre_ping=db.pool_pre_ping,
    )


engine = build_engine(Settings())

logger.info(
    "Database connection pool configured",
    database_type="PostgreSQL" if Settings().db.use_postgres else "SQLite",
    pool_size=Settings().db.pool_size,
    max_overflow=Settings().db.max_overflow,
    pool_pre_ping=Settings().db.pool_pre_ping,
)


@event.listens_for(engine, "connect")
def receive_connect(dbapi_conn, connection_record):
    """Log when a new connection is established"""
    if Settings().app.debug:
        logger.debug("Database connection established")


def init_db():
    SQLModel.metadata.create_all(engine)


def get_session():
    with Session(engine) as session:
        yield session
