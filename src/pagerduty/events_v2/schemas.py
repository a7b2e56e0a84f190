from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    SerializerFunctionWrapHandler,
    model_serializer,
)


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be empty or whitespace")
    return value


def _to_rfc3339(value: datetime) -> str:
    """
    Format a datetime as an RFC 3339 UTC instant, e.g. 2021-05-30T00:00:00Z.
    Naive datetimes are taken to be UTC already.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.isoformat().replace("+00:00", "Z")


NonBlankStr = Annotated[str, Field(min_length=1), AfterValidator(_not_blank)]
Summary = Annotated[NonBlankStr, Field(max_length=1024)]
DedupKey = Annotated[NonBlankStr, Field(max_length=255)]
Timestamp = Annotated[datetime, PlainSerializer(_to_rfc3339, return_type=str)]


class Severity(str, Enum):
    """Perceived severity of the status the event describes."""

    CRITICAL = "critical"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class Action(str, Enum):
    """Lifecycle action an alert event requests on an incident."""

    # Opens a new alert, or adds a trigger log entry to an open alert with the
    # same dedup_key.
    TRIGGER = "trigger"
    # The incident stops generating notifications while someone works on it.
    ACKNOWLEDGE = "acknowledge"
    # Closes the incident. A later trigger with the same dedup_key opens a new one.
    RESOLVE = "resolve"


class WireModel(BaseModel):
    """
    Base for everything sent to the Events API.

    Fields left as None are dropped from the serialized object rather than
    sent as null. Only model fields are affected: None values inside
    custom_details are passed through untouched.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @model_serializer(mode="wrap")
    def omit_absent_fields(
        self, handler: SerializerFunctionWrapHandler
    ) -> dict[str, Any]:
        data = handler(self)
        return {key: value for key, value in data.items() if value is not None}


class Link(WireModel):
    """Link attached to an alert or change event."""

    href: NonBlankStr
    text: Optional[str] = None


class Image(WireModel):
    """Image attached to an alert. The vendor only renders images served via HTTPS."""

    src: NonBlankStr
    href: Optional[str] = None
    alt: Optional[str] = None


class AlertTriggerPayload(WireModel):
    """
    Describes the problem being alerted on.

    `class_` is sent as "class" and may be populated under either name.
    """

    severity: Severity
    summary: Summary
    source: NonBlankStr
    timestamp: Optional[Timestamp] = None
    component: Optional[str] = None
    group: Optional[str] = None
    class_: Optional[str] = Field(default=None, alias="class")
    custom_details: Optional[Any] = None


class AlertTrigger(WireModel):
    """Opens (or re-triggers) an alert."""

    payload: AlertTriggerPayload
    dedup_key: Optional[DedupKey] = None
    images: Optional[list[Image]] = None
    links: Optional[list[Link]] = None
    client: Optional[str] = None
    client_url: Optional[str] = None


class AlertAcknowledge(WireModel):
    dedup_key: DedupKey


class AlertResolve(WireModel):
    dedup_key: DedupKey


class ChangePayload(WireModel):
    summary: Summary
    source: NonBlankStr
    timestamp: Optional[Timestamp] = None
    custom_details: Optional[Any] = None


class Change(WireModel):
    """Non-alerting notification of an operational change (deploy, config push...)."""

    payload: ChangePayload
    links: Optional[list[Link]] = None


Event = Union[AlertTrigger, AlertAcknowledge, AlertResolve, Change]


# Wire shapes: what is actually posted, with the client's routing key filled in.


class SendableAlertTrigger(WireModel):
    routing_key: str
    payload: AlertTriggerPayload
    dedup_key: Optional[str] = None
    images: Optional[list[Image]] = None
    links: Optional[list[Link]] = None
    event_action: Literal[Action.TRIGGER] = Action.TRIGGER
    client: Optional[str] = None
    client_url: Optional[str] = None

    @classmethod
    def from_alert_trigger(
        cls, alert_trigger: AlertTrigger, routing_key: str
    ) -> "SendableAlertTrigger":
        return cls(
            routing_key=routing_key,
            payload=alert_trigger.payload,
            dedup_key=alert_trigger.dedup_key,
            images=alert_trigger.images,
            links=alert_trigger.links,
            client=alert_trigger.client,
            client_url=alert_trigger.client_url,
        )


class SendableAlertFollowup(WireModel):
    routing_key: str
    dedup_key: str
    event_action: Literal[Action.ACKNOWLEDGE, Action.RESOLVE]


class SendableChange(WireModel):
    routing_key: str
    payload: ChangePayload
    links: Optional[list[Link]] = None

    @classmethod
    def from_change(cls, change: Change, routing_key: str) -> "SendableChange":
        return cls(routing_key=routing_key, payload=change.payload, links=change.links)


# Responses


class EventsV2Success(BaseModel):
    """Body of a 2xx response. The change endpoint does not return a dedup_key."""

    status: str
    message: str
    dedup_key: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class EventsV2Failure(BaseModel):
    """Structured error body returned when the API rejects an event."""

    status: str
    message: str
    errors: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)
