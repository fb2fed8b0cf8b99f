"""Domain layer errors."""

from discuss.domain.model.challenge import Challenge


class DomainError(Exception):
    """Base domain error."""

    pass


class BusinessRuleViolationError(DomainError):
    """Business rule violation error."""

    pass


class InvalidTransitionError(BusinessRuleViolationError):
    """Raised when a composition attempt is driven through an illegal transition."""

    def __init__(self, state: str, action: str):
        self.state = state
        self.action = action
        super().__init__(f"Cannot {action} while {state}")


class CommentError(DomainError):
    """Base class for failures of a comment read or write."""

    pass


class ValidationError(CommentError):
    """Content or request rejected as invalid.

    Raised client-side before any network call, or mapped from a server
    validation response.
    """

    pass


class NetworkError(CommentError):
    """Transport failure or timeout talking to the comment store."""

    pass


class AuthRequiredError(CommentError):
    """A write was attempted without credentials."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class ChallengeRequiredError(CommentError):
    """The write was gated by an anti-abuse challenge."""

    def __init__(self, challenge: Challenge, message: str = "Challenge required"):
        self.challenge = challenge
        super().__init__(message)


class ChallengeFailedError(CommentError):
    """The answer to a challenge was rejected.

    Carries the replacement challenge issued with the rejection.
    """

    def __init__(self, challenge: Challenge, message: str = "Challenge answer rejected"):
        self.challenge = challenge
        super().__init__(message)


class NotFoundError(CommentError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class NotAuthorizedError(CommentError):
    """Raised when the viewer may not edit or delete a comment."""

    def __init__(self, action: str, comment_id: str):
        self.action = action
        self.comment_id = comment_id
        super().__init__(f"Not authorized to {action} comment {comment_id}")


class UnknownServerError(CommentError):
    """Any other non-2xx response, or a body that could not be understood."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
