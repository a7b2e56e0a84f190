from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.pagerduty.events_v2.schemas import EventsV2Failure


class EventsV2Exception(Exception):
    """Base exception class for Events API v2 client errors."""

    message = "An error occurred in the Events API v2 client."

    def __init__(self, message: str = "An error occurred in the Events API v2 client."):
        self.message = message or self.message
        super().__init__(self.message)


class ConstructionException(EventsV2Exception):
    """Invalid client configuration, raised when the client is created."""

    message = "Invalid Events API v2 client configuration."


class EmptyRoutingKeyException(ConstructionException):
    def __init__(self):
        super().__init__("Routing key must be a non-empty string")


class InvalidEndpointException(ConstructionException):
    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid Events API endpoint URL '{url}': {reason}")


class InvalidUserAgentException(ConstructionException):
    def __init__(self, user_agent: object):
        self.user_agent = user_agent
        super().__init__(
            f"Invalid User-Agent {user_agent!r}: must be printable ASCII "
            f"without line breaks"
        )


class SubmissionException(EventsV2Exception):
    """Base class for errors raised while submitting an event."""

    message = "Failed to submit event to the Events API."


class EventEncodeException(SubmissionException):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Failed to encode event: {reason}")


class TransportException(SubmissionException):
    """Network, TLS or timeout failure. Safe for the caller to retry."""

    def __init__(self, url: str, details: str):
        self.url = url
        self.details = details
        super().__init__(f"Failed to reach Events API at '{url}': {details}")


class DecodeException(SubmissionException):
    """Response body did not match the expected shape for its status class."""

    def __init__(self, status_code: int, body: str, reason: str = ""):
        self.status_code = status_code
        self.body = body
        self.reason = reason
        message = f"Unexpected Events API response (HTTP {status_code}): {body!r}"
        if reason:
            message += f" Details: {reason}"
        super().__init__(message)


class RejectedException(SubmissionException):
    """The Events API rejected the request with a structured error body."""

    def __init__(self, status_code: int, failure: "EventsV2Failure"):
        self.status_code = status_code
        self.failure = failure
        message = f"Event rejected (HTTP {status_code}): {failure.message}"
        if failure.errors:
            message += f" Errors: {'; '.join(failure.errors)}"
        super().__init__(message)

    @property
    def errors(self) -> list[str]:
        return list(self.failure.errors)
