from typing import Optional

from dockerdemo.schemas.status import ProbeErrorKind


class AppError(Exception):
    """Base class for all application-level errors."""
    pass


class InfrastructureError(AppError):
    """Base for infrastructure-related errors (DB, API, etc)."""
    kind = ProbeErrorKind.UNKNOWN

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class DatabaseConnectionError(InfrastructureError):
    kind = ProbeErrorKind.UNREACHABLE

    def __init__(self, db_name: str, detail: str = ""):
        self.db_name = db_name
        message = f"Could not connect to database '{db_name}'"
        super().__init__(f"{message}: {detail}" if detail else message)


class DatabaseAuthenticationError(InfrastructureError):
    kind = ProbeErrorKind.AUTHENTICATION

    def __init__(self, db_name: str, detail: str = ""):
        self.db_name = db_name
        message = f"Database '{db_name}' rejected the credentials"
        super().__init__(f"{message}: {detail}" if detail else message)


class ProbeTimeoutError(InfrastructureError):
    kind = ProbeErrorKind.TIMEOUT

    def __init__(self, db_name: str, timeout: Optional[float] = None, detail: str = ""):
        self.db_name = db_name
        self.timeout = timeout
        if timeout is not None:
            message = f"Database '{db_name}' did not answer within {timeout:g}s"
        else:
            message = f"Database '{db_name}' timed out"
        super().__init__(f"{message}: {detail}" if detail else message)


class MalformedProbeResponseError(InfrastructureError):
    kind = ProbeErrorKind.MALFORMED

    def __init__(self, db_name: str, detail: str = ""):
        self.db_name = db_name
        message = f"Unexpected probe response from database '{db_name}'"
        super().__init__(f"{message}: {detail}" if detail else message)


class ExternalAPIError(InfrastructureError):
    def __init__(self, service: str, detail: str = ""):
        self.service = service
        self.detail = detail
        super().__init__(f"Error with external service '{service}': {detail}")
