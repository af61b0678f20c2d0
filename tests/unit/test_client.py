"""Unit tests for the aquamon entry point wiring"""
import asyncio
import json

from aquamon.client import build_controller, run_once
from aquamon.config import DashboardConfig


class TestBuildController:

    def test_wiring_follows_config(self):
        config = DashboardConfig(backend="http://raspberrypi:8080/", interval=2.5, retry_delay=1.0,
                                 max_retries=5, history_size=10, timeout=4)

        controller, commands = build_controller(config)

        assert controller.http_client.base_url == "http://raspberrypi:8080"
        assert controller.http_client.timeout == 4
        assert controller.interval == 2.5
        assert controller.retry_delay == 1.0
        assert controller.max_retries == 5
        assert controller.state.history_size == 10
        assert commands.controller is controller
        assert commands.state is controller.state


class TestRunOnce:

    def test_prints_state(self, controller, capsys):
        assert asyncio.run(run_once(controller)) is True

        data = json.loads(capsys.readouterr().out)
        assert data["sensors"]["ph"] == 7.2
        assert data["connection"]["is_connected"] is True
