"""Error taxonomy shared by the services and translated at the API boundary."""

from __future__ import annotations


class ParlayLeagueError(Exception):
    """Base class for failures that map onto an HTTP status code."""

    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class Unauthorized(ParlayLeagueError):
    """Missing or invalid credential on a route that needs identity."""

    status_code = 401


class Forbidden(ParlayLeagueError):
    """Authenticated, but not permitted to perform the operation."""

    status_code = 403


class InvalidInput(ParlayLeagueError):
    """Malformed or missing field, or a failed enumerated-value check."""

    status_code = 400


class NotFound(ParlayLeagueError):
    status_code = 404


class Conflict(ParlayLeagueError):
    """Duplicate unique resource, e.g. a league name that is already taken."""

    status_code = 409


class Internal(ParlayLeagueError):
    status_code = 500
