"""Unit tests for operator commands"""
import asyncio
from http.client import IncompleteRead
from urllib.error import URLError

from aquamon.commands import CommandIssuer
from aquamon.http_client import BackendError


class TestFeedFish:
    """Test the manual feed command"""

    def test_success_refreshes_sensors(self, controller, http_client, state):
        commands = CommandIssuer(http_client, state, controller)
        state.error = "Failed to connect: timed out"

        assert asyncio.run(commands.feed_fish()) is True
        http_client.feed_fish.assert_called_once_with()
        http_client.get_status.assert_called_once_with()
        assert state.error is None
        assert state.connection.is_connected is True

    def test_without_controller(self, http_client, state):
        commands = CommandIssuer(http_client, state)

        assert asyncio.run(commands.feed_fish()) is True
        http_client.get_status.assert_not_called()

    def test_failure_sets_error(self, controller, http_client, state):
        http_client.feed_fish.side_effect = BackendError("Motor not initialized")
        state.connection.is_connected = True
        commands = CommandIssuer(http_client, state, controller)

        assert asyncio.run(commands.feed_fish()) is False
        assert state.error == "Failed to control motor"
        http_client.get_status.assert_not_called()
        # Connection status belongs to the poller
        assert state.connection.is_connected is True

    def test_network_failure(self, http_client, state):
        http_client.feed_fish.side_effect = URLError("connection refused")
        commands = CommandIssuer(http_client, state)

        assert asyncio.run(commands.feed_fish()) is False
        assert state.error == "Failed to control motor"

    def test_truncated_response(self, http_client, state):
        http_client.feed_fish.side_effect = IncompleteRead(b"")
        commands = CommandIssuer(http_client, state)

        assert asyncio.run(commands.feed_fish()) is False
        assert state.error == "Failed to control motor"


class TestAutoMode:
    """Test the auto-feed mode toggle"""

    def test_set_auto_mode(self, http_client, state):
        commands = CommandIssuer(http_client, state)

        assert asyncio.run(commands.set_auto_mode(False)) is True
        http_client.set_auto_mode.assert_called_once_with(False)
        assert state.auto_mode is False

    def test_toggle(self, http_client, state):
        commands = CommandIssuer(http_client, state)
        assert state.auto_mode is True

        asyncio.run(commands.toggle_auto_mode())
        assert state.auto_mode is False
        asyncio.run(commands.toggle_auto_mode())
        assert state.auto_mode is True
        assert [c.args for c in http_client.set_auto_mode.call_args_list] == [(False,), (True,)]

    def test_failure_keeps_local_flag(self, http_client, state):
        http_client.set_auto_mode.side_effect = URLError("connection refused")
        commands = CommandIssuer(http_client, state)

        assert asyncio.run(commands.toggle_auto_mode()) is False
        assert state.auto_mode is False
        assert state.error == "Failed to update auto mode"
