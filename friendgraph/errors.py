"""
Exceptions raised by the friendship core and its storage adapters.
"""


class FriendGraphError(Exception):
    """Base class for all friend graph errors."""


class InvalidOperation(FriendGraphError):
    """Malformed request, e.g. befriending yourself. Raised before any write."""


class NotAuthorized(FriendGraphError):
    """The requester may not read or change the requested friendship data."""


class TransientStoreFailure(FriendGraphError):
    """Network or backend error while reading or writing; never retried here."""


class MutationInProgress(FriendGraphError):
    """Another add/remove for the same target is still in flight."""

    def __init__(self, target_id: str) -> None:
        super().__init__(f"A friendship change for {target_id} is already in progress")
        self.target_id = target_id


class UserNotFound(FriendGraphError):
    """No profile exists for the given user id."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id
