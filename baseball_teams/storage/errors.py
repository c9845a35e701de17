from typing import Optional


class TeamRepositoryError(Exception):
    """Base exception for team repository failures.

    Carries the repository operation and the item key so a failure can be
    diagnosed from the message alone.
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        key: Optional[str] = None,
    ):
        self.operation = operation
        self.key = key
        context = ", ".join(
            f"{label}={value!r}"
            for label, value in (("operation", operation), ("key", key))
            if value is not None
        )
        super().__init__(f"{message} ({context})" if context else message)


class EncodingError(TeamRepositoryError):
    """A domain value could not be converted to a DynamoDB attribute value."""

    pass


class UpdateExpressionError(TeamRepositoryError):
    """An update expression could not be built. Indicates a programming error."""

    pass


class DecodingError(TeamRepositoryError):
    """A stored item could not be mapped back to a BaseballTeam."""

    pass


class StoreError(TeamRepositoryError):
    """The store or the transport to it failed (network, throttling, validation)."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        key: Optional[str] = None,
        code: Optional[str] = None,
    ):
        self.code = code
        super().__init__(message, operation=operation, key=key)


TransportError = StoreError


class CancellationError(TeamRepositoryError):
    """The operation deadline expired before the store answered.

    The mutation may or may not have been applied remotely.
    """

    pass
