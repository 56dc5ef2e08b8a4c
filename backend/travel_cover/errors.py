"""
Domain errors raised by services and translated to HTTP by the routers.
"""


class TravelCoverError(Exception):
    """Base class for all domain errors."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TravelCoverError):
    """A required field is missing or malformed."""
    status_code = 400


class NotFoundError(TravelCoverError):
    """A lookup missed (unknown session, unknown policy)."""
    status_code = 404


class ConflictError(TravelCoverError):
    """The target record is in a terminal state."""
    status_code = 409


class DownstreamError(TravelCoverError):
    """The data store or the proof-verification service failed."""
    status_code = 500
