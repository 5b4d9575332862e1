"""Domain errors raised by the friendship core.

Every error carries a stable ``kind`` and a human-readable message; the HTTP
layer maps ``kind`` to a status code in ``friendships.main``.
"""


class FriendshipError(Exception):
    kind = "friendship_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(FriendshipError):
    """Referenced user or required edge does not exist."""

    kind = "not_found"


class InvalidTransition(FriendshipError):
    """Action not permitted for the current edge status."""

    kind = "invalid_transition"


class ConstraintViolation(FriendshipError):
    """Storage-level uniqueness race. Never leaves the service layer."""

    kind = "constraint_violation"


class StorageUnavailable(FriendshipError):
    """Transaction or connection failure; the whole action can be retried."""

    kind = "storage_unavailable"
