"""
Domain exceptions for the Punch service.

HTTP status codes are attached here so the API layer can render any of them
with one handler (see punch.core.errors).
"""
from fastapi import status


class PunchError(Exception):
    """Base class for all Punch domain errors"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class StoreUnavailable(PunchError):
    """The event store could not supply events (database unreachable, broken schema)"""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class ConfigurationError(PunchError, ValueError):
    """Invalid report configuration: negative overhead, unknown time zone, empty window"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ProjectNotFound(PunchError):
    """No user or project has been set up yet"""

    status_code = status.HTTP_404_NOT_FOUND


class PunchStateError(PunchError):
    """A punch that contradicts the last punch (e.g. punching in while already in)"""

    status_code = status.HTTP_409_CONFLICT


class MalformedSessionError(PunchError):
    """A work session whose end precedes its start"""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class AlreadySetUp(PunchError):
    """`punch init` on a database that already has an admin user"""

    status_code = status.HTTP_409_CONFLICT
