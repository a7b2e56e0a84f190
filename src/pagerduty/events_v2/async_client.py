import asyncio
import logging
from typing import Optional

import aiohttp

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


class AsyncEventsV2:
    """
    Non-blocking Events API v2 client, same surface as `EventsV2`.

    `event` is a coroutine whose only suspension point is the HTTP exchange.
    Any number of calls may run concurrently on one instance; they are not
    ordered relative to each other. A passed-in `aiohttp.ClientSession` is
    borrowed and never closed here.
    """

    def __init__(
        self,
        routing_key: str,
        user_agent: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        settings: Optional[Settings] = None,
    ):
        self._config = build_config(routing_key, user_agent, settings)
        self._session = session

    @property
    def config(self) -> EventsV2Config:
        return self._config

    @property
    def routing_key(self) -> str:
        return self._config.routing_key

    @property
    def user_agent(self) -> Optional[str]:
        return self._config.user_agent

    async def event(self, event: Event) -> EventsV2Success:
        """
        Send one event and return the API's success body.

        Raises the same exceptions as `EventsV2.event`.
        """
        url, body = build_request(self._config, event)
        logger.info(f"Posting {type(event).__name__} to {url}")

        if self._session is not None:
            status_code, content = await self._post(self._session, url, body)
        else:
            timeout = aiohttp.ClientTimeout(total=self._config.timeout_seconds)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                status_code, content = await self._post(session, url, body)

        logger.debug(f"Events API responded with HTTP {status_code}")
        return parse_response(status_code, content)

    async def _post(
        self, session: aiohttp.ClientSession, url: str, body: bytes
    ) -> tuple[int, bytes]:
        try:
            async with session.post(
                url, data=body, headers=self._config.headers
            ) as response:
                content = await response.read()
                return response.status, content
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportException(url, f"{type(e).__name__}: {e}")
