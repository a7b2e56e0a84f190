import logging
from typing import Optional

import httpx

from src.pagerduty.config import Settings
from src.pagerduty.events_v2.exceptions import TransportException
from src.pagerduty.events_v2.schemas import Event, EventsV2Success
from src.pagerduty.events_v2.utils import (
    EventsV2Config,
    build_config,
    build_request,
    parse_response,
)

logger = logging.getLogger(__name__)


class EventsV2:
    """
    Blocking Events API v2 client.

    Each call to `event` holds the calling thread for one full POST round
    trip. Pass an `httpx.Client` to reuse its connection pool across calls;
    the client is borrowed and never closed here. Without one, a client is
    opened and closed per call.
    """

    def __init__(
        self,
        routing_key: str,
        user_agent: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
        settings: Optional[Settings] = None,
    ):
        self._config = build_config(routing_key, user_agent, settings)
        self._http_client = http_client

    @property
    def config(self) -> EventsV2Config:
        return self._config

    @property
    def routing_key(self) -> str:
        return self._config.routing_key

    @property
    def user_agent(self) -> Optional[str]:
        return self._config.user_agent

    def event(self, event: Event) -> EventsV2Success:
        """
        Send one event and return the API's success body.

        Raises
        ------
        EventEncodeException
            The event could not be serialized.
        TransportException
            The request never got a response (DNS, TLS, refused, timeout).
        RejectedException
            The API answered with a structured error body.
        DecodeException
            The response body did not match what its status code implies.
        """
        url, body = build_request(self._config, event)
        logger.info(f"Posting {type(event).__name__} to {url}")

        if self._http_client is not None:
            status_code, content = self._post(self._http_client, url, body)
        else:
            with httpx.Client(timeout=self._config.timeout_seconds) as client:
                status_code, content = self._post(client, url, body)

        logger.debug(f"Events API responded with HTTP {status_code}")
        return parse_response(status_code, content)

    def _post(self, client: httpx.Client, url: str, body: bytes) -> tuple[int, bytes]:
        try:
            response = client.post(url, content=body, headers=self._config.headers)
        except httpx.RequestError as e:
            raise TransportException(url, f"{type(e).__name__}: {e}")
        return response.status_code, response.content
