"""
Request building and response parsing shared by the blocking and the
non-blocking clients. Neither client validates or serializes anything on its
own, so both reject the same input at the same point and post the same bytes.
"""

import logging
import math
from typing import Any, Optional

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, TypeAdapter, ValidationError

from src.pagerduty.config import Settings, get_settings
from src.pagerduty.events_v2.exceptions import (
    DecodeException,
    EmptyRoutingKeyException,
    EventEncodeException,
    InvalidEndpointException,
    InvalidUserAgentException,
    RejectedException,
)
from src.pagerduty.events_v2.schemas import (
    Action,
    AlertAcknowledge,
    AlertResolve,
    AlertTrigger,
    Change,
    Event,
    EventsV2Failure,
    EventsV2Success,
    SendableAlertFollowup,
    SendableAlertTrigger,
    SendableChange,
    WireModel,
)

logger = logging.getLogger(__name__)

CONTENT_TYPE_JSON = "application/json"
CONTENT_ENCODING_IDENTITY = "identity"

_http_url = TypeAdapter(AnyHttpUrl)


class EventsV2Config(BaseModel):
    """Everything a client needs per call, built once at construction."""

    routing_key: str
    user_agent: Optional[str] = None
    events_url: str
    change_events_url: str
    headers: dict[str, str]
    timeout_seconds: float

    model_config = ConfigDict(frozen=True)


def validate_endpoint(url: str) -> str:
    try:
        _http_url.validate_python(url)
    except ValidationError as e:
        raise InvalidEndpointException(url, str(e.errors()[0]["msg"]))
    return url


def validate_user_agent(user_agent: object) -> str:
    # Header values go on the wire as-is: printable ASCII only, so no CR/LF.
    if not isinstance(user_agent, str) or not user_agent.strip():
        raise InvalidUserAgentException(user_agent)
    if any(not (0x20 <= ord(char) <= 0x7E) for char in user_agent):
        raise InvalidUserAgentException(user_agent)
    return user_agent


def build_headers(user_agent: str) -> dict[str, str]:
    return {
        "Content-Type": CONTENT_TYPE_JSON,
        "Content-Encoding": CONTENT_ENCODING_IDENTITY,
        "Accept": CONTENT_TYPE_JSON,
        "User-Agent": user_agent,
    }


def build_config(
    routing_key: str,
    user_agent: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> EventsV2Config:
    """
    Validate client options and precompute endpoint URLs and headers.

    This is the only place a client can fail to be configured; nothing here is
    re-checked per call.
    """
    if not isinstance(routing_key, str) or not routing_key.strip():
        raise EmptyRoutingKeyException()

    # An empty override means "use the default"; anything else must be valid.
    if user_agent is not None and user_agent != "":
        user_agent = validate_user_agent(user_agent)
    else:
        user_agent = None

    settings = settings or get_settings()
    events_url = validate_endpoint(settings.PAGERDUTY_EVENTS_URL)
    change_events_url = validate_endpoint(settings.PAGERDUTY_CHANGE_EVENTS_URL)

    return EventsV2Config(
        routing_key=routing_key,
        user_agent=user_agent,
        events_url=events_url,
        change_events_url=change_events_url,
        headers=build_headers(
            user_agent or validate_user_agent(settings.PAGERDUTY_USER_AGENT)
        ),
        timeout_seconds=settings.PAGERDUTY_TIMEOUT_SECONDS,
    )


def to_sendable(config: EventsV2Config, event: Event) -> tuple[str, WireModel]:
    """Pick the endpoint for an event and wrap it with the routing key."""
    if isinstance(event, AlertTrigger):
        return config.events_url, SendableAlertTrigger.from_alert_trigger(
            event, config.routing_key
        )
    if isinstance(event, AlertAcknowledge):
        return config.events_url, SendableAlertFollowup(
            routing_key=config.routing_key,
            dedup_key=event.dedup_key,
            event_action=Action.ACKNOWLEDGE,
        )
    if isinstance(event, AlertResolve):
        return config.events_url, SendableAlertFollowup(
            routing_key=config.routing_key,
            dedup_key=event.dedup_key,
            event_action=Action.RESOLVE,
        )
    if isinstance(event, Change):
        return config.change_events_url, SendableChange.from_change(
            event, config.routing_key
        )
    raise EventEncodeException(f"unsupported event type '{type(event).__name__}'")


def find_non_finite(value: Any, path: str = "") -> Optional[str]:
    """Location of the first NaN/Infinity float in a nested structure, if any."""
    if isinstance(value, float) and not math.isfinite(value):
        return path or "<root>"
    if isinstance(value, dict):
        for key, item in value.items():
            found = find_non_finite(item, f"{path}.{key}" if path else str(key))
            if found:
                return found
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            found = find_non_finite(item, f"{path}[{index}]")
            if found:
                return found
    return None


def build_request(config: EventsV2Config, event: Event) -> tuple[str, bytes]:
    """
    Returns the target URL and the JSON body for an event.
    """
    url, sendable = to_sendable(config, event)
    try:
        body = sendable.model_dump_json(by_alias=True).encode("utf-8")
    except (TypeError, ValueError) as e:
        # custom_details holding something JSON can't represent
        raise EventEncodeException(str(e))

    # JSON has no NaN/Infinity; pydantic would quietly send them as null
    non_finite = find_non_finite(sendable.model_dump(by_alias=True))
    if non_finite:
        raise EventEncodeException(f"non-finite number at '{non_finite}'")

    logger.debug(f"Built {type(event).__name__} request for {url} ({len(body)} bytes)")
    return url, body


def parse_response(status_code: int, body: bytes) -> EventsV2Success:
    """
    Map an HTTP response onto the response model.

    The status class alone decides which shape is expected: 2xx must carry a
    success body, anything else must carry a structured failure body.
    """
    text = body.decode("utf-8", errors="replace")

    if 200 <= status_code < 300:
        try:
            success = EventsV2Success.model_validate_json(body)
        except ValidationError as e:
            raise DecodeException(status_code, text, str(e))
        logger.debug(f"Events API accepted event (dedup_key={success.dedup_key})")
        return success

    try:
        failure = EventsV2Failure.model_validate_json(body)
    except ValidationError as e:
        raise DecodeException(status_code, text, str(e))
    raise RejectedException(status_code, failure)
