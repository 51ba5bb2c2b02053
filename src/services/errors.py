"""Error taxonomy of the acts service.

Every error carries a stable ``code``; the HTTP boundary maps codes to
status codes (see src.api.errors).
"""


class ActsError(Exception):
    """Base exception for acts service errors."""

    code = "acts_error"

    def __init__(self, message: str = ""):
        self.message = message or self.__class__.__doc__ or self.code
        super().__init__(self.message)


class NotFoundError(ActsError):
    """Referenced contract, act, organization or polygon does not exist."""

    code = "not_found"


class PermissionDeniedError(ActsError):
    """Role or ownership check failed."""

    code = "permission_denied"


class InvalidInputError(ActsError):
    """Malformed or out-of-range request."""

    code = "invalid_input"


class NoBillableTripsError(ActsError):
    """No trips for selected period."""

    code = "no_trips"


class ActConflictError(ActsError):
    """Act could not be persisted because of a uniqueness conflict."""

    code = "act_conflict"


__all__ = [
    "ActsError",
    "NotFoundError",
    "PermissionDeniedError",
    "InvalidInputError",
    "NoBillableTripsError",
    "ActConflictError",
]
