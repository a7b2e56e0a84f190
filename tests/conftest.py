from datetime import datetime, timezone

import pytest

from src.pagerduty.events_v2.schemas import (
    AlertAcknowledge,
    AlertResolve,
    AlertTrigger,
    AlertTriggerPayload,
    Change,
    ChangePayload,
    Image,
    Link,
    Severity,
)
from tests.mocks.config_mocks import mock_get_settings  # noqa: F401

# -----------------------------------------------------------------------------
# EVENTS
# -----------------------------------------------------------------------------


@pytest.fixture
def minimal_trigger():
    return AlertTrigger(
        payload=AlertTriggerPayload(
            summary="CPU high", source="host1", severity=Severity.CRITICAL
        )
    )


@pytest.fixture
def full_trigger():
    return AlertTrigger(
        payload=AlertTriggerPayload(
            severity=Severity.INFO,
            summary="Hello",
            source="hostname",
            timestamp=datetime(2033, 5, 18, 23, 30, 4, 323000, tzinfo=timezone.utc),
            component="postgres",
            group="prod-datapipe",
            class_="deploy",
            custom_details={"some_field": "Serialize this!", "another_field": 34},
        ),
        dedup_key="dedupkey1",
        images=[
            Image(
                src="https://example.com/static/img/logo.png",
                href="https://example.com",
                alt="The Example Logo",
            )
        ],
        links=[Link(href="https://example.com", text="Example homepage")],
        client="Zerotect",
        client_url="https://github.com/example/zerotect",
    )


@pytest.fixture
def acknowledge():
    return AlertAcknowledge(dedup_key="dedupkey1")


@pytest.fixture
def resolve():
    return AlertResolve(dedup_key="dedupkey1")


@pytest.fixture
def change():
    return Change(
        payload=ChangePayload(
            summary="Hello",
            source="hostname",
            timestamp=datetime(2033, 5, 18, 23, 30, 4, 323000, tzinfo=timezone.utc),
            custom_details={"some_field": "Serialize this!", "another_field": 34},
        ),
        links=[Link(href="https://example.com", text="Example homepage")],
    )
