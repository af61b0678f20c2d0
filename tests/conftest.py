"""Pytest configuration and shared fixtures"""
import copy
import pytest
from datetime import datetime, timedelta
from unittest.mock import Mock

from aquamon.controller import PollController
from aquamon.http_client import AquariumHttpClient
from aquamon.schemas import CommandResponse, StatusResponse
from aquamon.state import DashboardState


# Real-world payload captured from the controller's GET /api
SAMPLE_STATUS = {
    "success": True,
    "data": {
        "current_ph": 7.2,
        "fish_detected": True,
        "motor_initialized": False,
        "current_ph_voltage": 2.51,
        "feed_count": 4,
        "auto_feed_count": 2,
        "last_feed_time": "2024-11-02 18:04:11",
        "auto_last_feed_time": "Never",
        "ph_sensor_initialized": True
    }
}


class StepClock:
    """Deterministic clock: each call returns a time one second later."""

    def __init__(self, start: datetime = datetime(2024, 11, 2, 18, 0, 0)):
        self.current = start
        self.calls = 0

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(seconds=1)
        self.calls += 1
        return self.current


@pytest.fixture
def sample_status():
    return copy.deepcopy(SAMPLE_STATUS)


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def http_client():
    """Mocked backend client that answers every call successfully"""
    client = Mock(spec=AquariumHttpClient)
    client.base_url = "http://aquarium.test"
    client.request_ph_read.return_value = {"success": True}
    client.get_status.return_value = StatusResponse.model_validate(SAMPLE_STATUS)
    client.feed_fish.return_value = CommandResponse(success=True, message="Fed")
    client.set_auto_mode.return_value = CommandResponse(success=True)
    return client


@pytest.fixture
def state():
    return DashboardState()


@pytest.fixture
def controller(http_client, state, clock):
    """Controller with no settle delay; retries far enough out that they never fire on their own"""
    return PollController(
        http_client,
        state,
        interval=60.0,
        settle_delay=0,
        retry_delay=30.0,
        clock=clock,
    )
