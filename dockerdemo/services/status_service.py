import asyncio
import re
import time
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.exc import (
    DBAPIError,
    MultipleResultsFound,
    NoResultFound,
    TimeoutError as PoolTimeoutError,
)

from dockerdemo.core.exceptions.exceptions import (
    DatabaseAuthenticationError,
    DatabaseConnectionError,
    InfrastructureError,
    MalformedProbeResponseError,
    ProbeTimeoutError,
)
from dockerdemo.schemas.status import ProbeResult
from dockerdemo.services.database import Database
from dockerdemo.utils.log import app_logger

# driver messages, lowercased, that point at a specific failure kind
_TIMEOUT_MARKERS = ("timeout expired", "timed out", "statement timeout")
_AUTH_MARKERS = (
    "password authentication failed",
    "authentication failed",
    "no password supplied",
    "no pg_hba.conf entry",
)
_MISSING_IDENTITY = re.compile(r'(role|database) "[^"]*" does not exist')


def _sanitize(raw: str) -> str:
    # drop memory addresses like <connection object at 0x7f...> and collapse whitespace
    cleaned = re.sub(r'0x[0-9a-fA-F]+', '<ptr>', raw)
    return " ".join(cleaned.split())


def _driver_message(exc: BaseException) -> str:
    # SQLAlchemy wraps DBAPI errors; the driver's own text is the useful part
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return _sanitize(str(exc.orig))
    return _sanitize(str(exc))


def classify_probe_error(
    exc: BaseException, db_name: str, timeout: Optional[float] = None
) -> InfrastructureError:
    """Map a raw probe failure onto the application error hierarchy."""
    if isinstance(exc, InfrastructureError):
        return exc

    detail = _driver_message(exc) or type(exc).__name__
    lowered = detail.lower()

    if isinstance(exc, PoolTimeoutError):
        # waited on pool checkout (DB_POOL_TIMEOUT), not on the probe deadline
        return ProbeTimeoutError(db_name, detail=detail)
    # asyncio.TimeoutError is TimeoutError from 3.11 on, and TimeoutError is an OSError
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return ProbeTimeoutError(db_name, timeout)
    if isinstance(exc, (NoResultFound, MultipleResultsFound)):
        return MalformedProbeResponseError(db_name, detail)
    if isinstance(exc, (DBAPIError, OSError)):
        if any(marker in lowered for marker in _TIMEOUT_MARKERS):
            return ProbeTimeoutError(db_name, detail=detail)
        if any(marker in lowered for marker in _AUTH_MARKERS) or _MISSING_IDENTITY.search(lowered):
            return DatabaseAuthenticationError(db_name, detail)
        return DatabaseConnectionError(db_name, detail)
    return InfrastructureError(f"Database '{db_name}' check failed: {detail}")


def coerce_server_time(value: Any, db_name: str) -> datetime:
    """Turn the probe's raw value into a datetime or raise MalformedProbeResponseError."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            pass
    raise MalformedProbeResponseError(db_name, f"not a timestamp: {value!r}")


class StatusService:
    """Answers "is the database reachable and responsive right now?".

    Every call issues exactly one probe through the shared ``Database``
    handle and returns a fresh ``ProbeResult``. Nothing is cached between
    calls and nothing is retried. The blocking driver call runs in a worker
    thread; when ``timeout`` is set the caller stops waiting after that many
    seconds and gets a timeout envelope.
    """

    def __init__(self, database: Database, timeout: Optional[float] = None):
        self.database = database
        self.timeout = timeout

    async def check(self) -> ProbeResult:
        started = time.monotonic()
        db_name = self.database.name
        try:
            call = asyncio.to_thread(self.database.fetch_server_time)
            if self.timeout is not None:
                raw = await asyncio.wait_for(call, timeout=self.timeout)
            else:
                raw = await call
            server_time = coerce_server_time(raw, db_name)
        except Exception as e:
            error = classify_probe_error(e, db_name, self.timeout)
            app_logger.error(
                "status.db_check.failed",
                database=db_name,
                kind=error.kind.value,
                exc_type=type(e).__name__,
                error=error.message,
                elapsed_ms=round((time.monotonic() - started) * 1000, 1),
                exc_info=e,
            )
            return ProbeResult.error(error.message, error.kind)

        app_logger.debug(
            "status.db_check.ok",
            database=db_name,
            server_time=server_time.isoformat(),
            elapsed_ms=round((time.monotonic() - started) * 1000, 1),
        )
        return ProbeResult.ok(db_name, server_time)
