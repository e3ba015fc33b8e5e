"""
Business-rule errors raised by the marketplace core.

Every error carries a stable ``kind`` string and a human-readable message.
Services raise them before any write, and the unit of work rolls the
transaction back, so a failed operation leaves no partial mutation.
Store outages are not wrapped: SQLAlchemy's own exceptions propagate.
"""


class MarketplaceError(Exception):
    """Base exception for business-rule failures."""
    kind = "MarketplaceError"
    default_message = "Operation not permitted"

    def __init__(self, message: str = ""):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(MarketplaceError):
    kind = "NotFound"
    default_message = "Resource not found"


class ProfileMissing(MarketplaceError):
    kind = "ProfileMissing"
    default_message = "A roaster profile is required"


class RoleMismatch(MarketplaceError):
    kind = "RoleMismatch"
    default_message = "Your current role does not allow this operation"


class SelfApplication(MarketplaceError):
    kind = "SelfApplication"
    default_message = "You cannot apply to your own request"


class SelfFeedback(MarketplaceError):
    kind = "SelfFeedback"
    default_message = "You cannot give feedback on your own request"


class DuplicateApplication(MarketplaceError):
    kind = "DuplicateApplication"
    default_message = "You have already applied to this request"


class DuplicateFeedback(MarketplaceError):
    kind = "DuplicateFeedback"
    default_message = "You have already submitted feedback for this request"


class RequestClosed(MarketplaceError):
    kind = "RequestClosed"
    default_message = "This request no longer accepts this operation"


class InvalidTransition(RequestClosed):
    """Raised when a status change is not an edge of the request state machine."""
    kind = "InvalidTransition"
    default_message = "Status transition not allowed"


class FeedbackLocked(RequestClosed):
    kind = "FeedbackLocked"
    default_message = "Only pending feedback can be deleted"


class CapacityExceeded(MarketplaceError):
    kind = "CapacityExceeded"
    default_message = "All feedback slots have already been filled"


class Unauthorized(MarketplaceError):
    kind = "Unauthorized"
    default_message = "Only the request creator can do this"


class NotSelected(MarketplaceError):
    kind = "NotSelected"
    default_message = "You need an accepted application to submit feedback"


class PriceExceedsBudget(MarketplaceError):
    kind = "PriceExceedsBudget"
    default_message = "Price exceeds the request budget"


class InvalidInput(MarketplaceError):
    kind = "InvalidInput"
    default_message = "Invalid input"
