from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from dockerdemo.config.settings import Settings
from dockerdemo.utils.log import app_logger

# round trip used to prove the database is alive and its clock is moving
PROBE_QUERY = "SELECT NOW() AS server_time"


def connect_args_for(settings: Settings) -> dict:
    """psycopg2 connect arguments: connect timeout plus the server-side statement_timeout."""
    connect_args = {"connect_timeout": settings.DB_CONNECT_TIMEOUT}
    if settings.check_timeout is not None:
        # server-side guard so a probe abandoned by the caller still ends;
        # at least 1ms, statement_timeout=0 is "no limit"
        connect_args["options"] = f"-c statement_timeout={max(1, int(settings.check_timeout * 1000))}"
    return connect_args


class Database:
    """Owned handle around one SQLAlchemy engine and its connection pool.

    The engine opens connections lazily, on the first checkout. Callers share
    one instance; the pool takes care of checkout, reuse and recycling.
    """

    def __init__(self, engine: Engine, name: str, probe_query: str = PROBE_QUERY):
        self.engine = engine
        self.name = name
        self.probe_query = text(probe_query)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        # create engine for postgresql database
        engine = create_engine(
            settings.database_url,
            pool_pre_ping=True,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            connect_args=connect_args_for(settings),
            echo=False,
        )
        app_logger.info(
            "database.engine.created",
            host=settings.DB_HOST,
            port=settings.DB_PORT,
            database=settings.DB_NAME,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
        )
        return cls(engine, settings.DB_NAME)

    def fetch_server_time(self) -> Any:
        """Run the probe query on a pooled connection and return its single value.

        Blocking; raises whatever the driver or pool raises.
        """
        with self.engine.connect() as conn:
            return conn.execute(self.probe_query).scalar_one()

    def dispose(self) -> None:
        """Close every pooled connection."""
        self.engine.dispose()
        app_logger.info("database.engine.disposed", database=self.name)
