"""Shared fixtures for relay tests."""

import random
import string
import time
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketState

from app import app


def random_meeting_id() -> str:
    return "meeting-" + "".join(random.choices(string.ascii_lowercase + string.digits, k=8))


def create_mock_websocket(open_: bool = True):
    """Fake accepted WebSocket: records every send_text call."""
    state = WebSocketState.CONNECTED if open_ else WebSocketState.DISCONNECTED
    ws = MagicMock()
    ws.client_state = state
    ws.application_state = state
    ws.send_text = AsyncMock()
    return ws


def sent_texts(ws) -> list:
    return [call.args[0] for call in ws.send_text.await_args_list]


def wait_until(predicate, timeout: float = 2.0, interval: float = 0.01):
    """Poll until predicate() is true; joins are never acknowledged to the client."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return
        time.sleep(interval)
    raise AssertionError("condition not met before timeout")


@pytest.fixture
def meeting_id():
    return random_meeting_id()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def registry(client):
    return client.app.state.signaling_relay.registry
