from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, model_validator


class ProbeOutcome(str, Enum):
    OK = "ok"
    ERROR = "error"


class ProbeErrorKind(str, Enum):
    UNREACHABLE = "unreachable"
    AUTHENTICATION = "authentication"
    TIMEOUT = "timeout"
    MALFORMED = "malformed"
    UNKNOWN = "unknown"


# error kind -> HTTP status of the /db-check reply
STATUS_CODE_BY_KIND: Dict[ProbeErrorKind, int] = {
    ProbeErrorKind.UNREACHABLE: 500,
    ProbeErrorKind.AUTHENTICATION: 500,
    ProbeErrorKind.MALFORMED: 500,
    ProbeErrorKind.UNKNOWN: 500,
    ProbeErrorKind.TIMEOUT: 504,
}


def to_iso8601(value: datetime) -> str:
    """Render a timestamp as ISO 8601 in UTC with a trailing ``Z``.

    Naive datetimes are taken to already be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class ProbeResult(BaseModel):
    """Outcome of one database probe.

    Exactly one of ``server_time`` (success detail) or ``message`` (failure
    cause) is set. Built fresh for every request.
    """
    outcome: ProbeOutcome
    database: Optional[str] = None
    server_time: Optional[datetime] = None
    message: Optional[str] = None
    error_kind: Optional[ProbeErrorKind] = None

    @model_validator(mode="after")
    def _check_detail_xor_message(self) -> "ProbeResult":
        if self.outcome is ProbeOutcome.OK:
            if self.server_time is None:
                raise ValueError("ok probe result requires server_time")
            if not self.database:
                raise ValueError("ok probe result requires the database name")
            if self.message is not None or self.error_kind is not None:
                raise ValueError("ok probe result cannot carry an error")
        else:
            if not self.message:
                raise ValueError("error probe result requires a message")
            if self.server_time is not None:
                raise ValueError("error probe result cannot carry server_time")
            if self.error_kind is None:
                self.error_kind = ProbeErrorKind.UNKNOWN
        return self

    @classmethod
    def ok(cls, database: str, server_time: datetime) -> "ProbeResult":
        return cls(outcome=ProbeOutcome.OK, database=database, server_time=server_time)

    @classmethod
    def error(cls, message: str, kind: ProbeErrorKind = ProbeErrorKind.UNKNOWN) -> "ProbeResult":
        return cls(outcome=ProbeOutcome.ERROR, message=message, error_kind=kind)

    @property
    def is_ok(self) -> bool:
        return self.outcome is ProbeOutcome.OK

    @property
    def http_status(self) -> int:
        if self.is_ok:
            return 200
        return STATUS_CODE_BY_KIND[self.error_kind]

    def envelope(self) -> Dict[str, Any]:
        if self.is_ok:
            return {
                "status": self.outcome.value,
                "database": self.database,
                "serverTime": to_iso8601(self.server_time),
            }
        return {
            "status": self.outcome.value,
            "message": self.message,
            "kind": self.error_kind.value,
        }


class StatusOkResponse(BaseModel):
    """Response model for a healthy /db-check."""
    status: str = Field("ok", description="Always 'ok'")
    database: str = Field(..., description="Name of the probed database")
    serverTime: str = Field(..., description="Database clock, ISO 8601 UTC")


class StatusErrorResponse(BaseModel):
    """Response model for a failed /db-check."""
    status: str = Field("error", description="Always 'error'")
    message: str = Field(..., description="Human-readable failure cause")
    kind: ProbeErrorKind = Field(..., description="Failure classification")
