import asyncio
import inspect
import json
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from src.pagerduty.events_v2.async_client import AsyncEventsV2
from src.pagerduty.events_v2.exceptions import (
    DecodeException,
    EmptyRoutingKeyException,
    InvalidUserAgentException,
    RejectedException,
    TransportException,
)
from src.pagerduty.events_v2.schemas import EventsV2Success
from tests.mocks.config_mocks import CHANGE_EVENTS_URL, DEFAULT_USER_AGENT, EVENTS_URL
from tests.mocks.response_mocks import (
    CHANGE_SUCCESS_BODY,
    FAILURE_BODY,
    NON_JSON_BODY,
    ROUTING_KEY,
    SUCCESS_BODY,
)


def mock_response(mock_post: MagicMock, status: int, body: bytes) -> AsyncMock:
    response = AsyncMock()
    response.status = status
    response.read.return_value = body
    mock_post.return_value.__aenter__.return_value = response
    return response


@pytest.mark.parametrize("routing_key", ["", "   "])
def test_new_client_rejects_empty_routing_key(routing_key):
    with pytest.raises(EmptyRoutingKeyException):
        AsyncEventsV2(routing_key)


@pytest.mark.parametrize("user_agent", ["café-monitor/1.0", "monitor/1.0\r\nX-Injected: 1"])
def test_new_client_rejects_bad_user_agent(user_agent):
    session = MagicMock()

    with pytest.raises(InvalidUserAgentException):
        AsyncEventsV2(ROUTING_KEY, user_agent=user_agent, session=session)

    session.post.assert_not_called()


def test_new_client_needs_no_event_loop():
    client = AsyncEventsV2(ROUTING_KEY, user_agent="my-monitor/2.0")

    assert client.routing_key == ROUTING_KEY
    assert client.user_agent == "my-monitor/2.0"


@pytest.mark.asyncio
@patch("aiohttp.ClientSession.post")
async def test_event_trigger_success(mock_post, minimal_trigger):
    mock_response(mock_post, 202, SUCCESS_BODY)
    client = AsyncEventsV2(ROUTING_KEY)

    result = await client.event(minimal_trigger)

    assert result == EventsV2Success(
        status="success", message="Event processed", dedup_key="abc123"
    )
    mock_post.assert_called_once()
    args, kwargs = mock_post.call_args
    assert args[0] == EVENTS_URL
    assert kwargs["headers"]["User-Agent"] == DEFAULT_USER_AGENT
    assert kwargs["headers"]["Content-Type"] == "application/json"
    body = json.loads(kwargs["data"])
    assert body["routing_key"] == ROUTING_KEY
    assert body["event_action"] == "trigger"


@pytest.mark.asyncio
@patch("aiohttp.ClientSession.post")
async def test_event_change_posts_to_change_endpoint(mock_post, change):
    mock_response(mock_post, 202, CHANGE_SUCCESS_BODY)
    client = AsyncEventsV2(ROUTING_KEY)

    result = await client.event(change)

    assert result.dedup_key is None
    assert mock_post.call_args.args[0] == CHANGE_EVENTS_URL


@pytest.mark.asyncio
@patch("aiohttp.ClientSession.post")
async def test_event_followup(mock_post, resolve):
    mock_response(mock_post, 202, SUCCESS_BODY)
    client = AsyncEventsV2(ROUTING_KEY)

    await client.event(resolve)

    assert json.loads(mock_post.call_args.kwargs["data"]) == {
        "routing_key": ROUTING_KEY,
        "dedup_key": "dedupkey1",
        "event_action": "resolve",
    }


@pytest.mark.asyncio
@patch("aiohttp.ClientSession.post")
async def test_event_rejected(mock_post, minimal_trigger):
    mock_response(mock_post, 400, FAILURE_BODY)
    client = AsyncEventsV2(ROUTING_KEY)

    with pytest.raises(RejectedException) as exc_info:
        await client.event(minimal_trigger)

    assert exc_info.value.errors == ["severity is required"]
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
@patch("aiohttp.ClientSession.post")
async def test_event_success_status_with_non_json_body(mock_post, minimal_trigger):
    mock_response(mock_post, 200, NON_JSON_BODY)
    client = AsyncEventsV2(ROUTING_KEY)

    with pytest.raises(DecodeException) as exc_info:
        await client.event(minimal_trigger)

    assert exc_info.value.status_code == 200


@pytest.mark.asyncio
@patch("aiohttp.ClientSession.post")
async def test_event_connection_error_is_not_retried(mock_post, minimal_trigger):
    mock_post.side_effect = aiohttp.ClientConnectionError("Connection refused")
    client = AsyncEventsV2(ROUTING_KEY)

    with pytest.raises(TransportException) as exc_info:
        await client.event(minimal_trigger)

    mock_post.assert_called_once()
    assert "Connection refused" in exc_info.value.details


@pytest.mark.asyncio
@patch("aiohttp.ClientSession.post")
async def test_event_timeout_is_transport_error(mock_post, minimal_trigger):
    mock_post.side_effect = asyncio.TimeoutError()
    client = AsyncEventsV2(ROUTING_KEY)

    with pytest.raises(TransportException) as exc_info:
        await client.event(minimal_trigger)

    assert "TimeoutError" in exc_info.value.details


@pytest.mark.asyncio
async def test_event_with_borrowed_session(minimal_trigger):
    session = MagicMock()
    mock_response(session.post, 202, SUCCESS_BODY)
    client = AsyncEventsV2(ROUTING_KEY, session=session)

    result = await client.event(minimal_trigger)

    assert result.dedup_key == "abc123"
    session.post.assert_called_once()
    session.close.assert_not_called()


@pytest.mark.asyncio
async def test_event_returns_pending_coroutine(minimal_trigger):
    session = MagicMock()
    mock_response(session.post, 202, SUCCESS_BODY)
    client = AsyncEventsV2(ROUTING_KEY, session=session)

    pending = client.event(minimal_trigger)

    assert inspect.iscoroutine(pending)
    session.post.assert_not_called()
    assert (await pending).dedup_key == "abc123"


@pytest.mark.asyncio
async def test_concurrent_events_share_one_client(minimal_trigger, acknowledge, change):
    session = MagicMock()
    mock_response(session.post, 202, SUCCESS_BODY)
    client = AsyncEventsV2(ROUTING_KEY, session=session)

    results = await asyncio.gather(
        client.event(minimal_trigger),
        client.event(acknowledge),
        client.event(change),
    )

    assert [result.status for result in results] == ["success"] * 3
    assert session.post.call_count == 3
