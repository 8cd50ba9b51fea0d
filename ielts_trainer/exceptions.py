"""Custom exceptions for the practice service."""


class IeltsTrainerError(Exception):
    """Base exception for application errors."""
    pass


class AuthenticationError(IeltsTrainerError):
    """Invalid, expired or rejected credentials."""
    pass


class AuthProviderError(IeltsTrainerError):
    """Auth provider unreachable or answered with a server error."""
    pass


class NotAuthenticatedError(IeltsTrainerError):
    """Request needs a signed-in user and has none."""
    pass


class StoreError(IeltsTrainerError):
    """A read or write against the backing store failed."""
    pass


class QuestionSourceError(IeltsTrainerError):
    """The random question procedure could not be called."""
    pass


class RecordValidationError(IeltsTrainerError):
    """A row from the store does not have the expected shape."""
    pass


class RoundStateError(IeltsTrainerError):
    """Operation not valid in the round's current state."""
    pass


class StaleRoundError(RoundStateError):
    """Round token is no longer the current one."""
    pass


class EmptyAnswerError(IeltsTrainerError):
    """Submitted answer is blank after trimming."""
    pass


class CollectionRemovalError(IeltsTrainerError):
    """Removing an entry from Favorites or the Wrong-Book failed."""
    pass


class RateLimitExceeded(IeltsTrainerError):
    """Too many email links requested."""

    def __init__(self, message: str, retry_after: int):
        super().__init__(message)
        self.retry_after = retry_after
