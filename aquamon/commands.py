#!/usr/bin/env python3
"""
Operator commands for aquamon

Manual feed and auto-feed mode toggle. Each command is a single backend
call; failures are logged and surfaced through the dashboard error message,
never raised to the caller.
"""

import asyncio
import logging
from typing import Optional

from .controller import PollController, TRANSPORT_ERRORS, describe_error
from .http_client import AquariumHttpClient
from .state import DashboardState

logger = logging.getLogger(__name__)


class CommandIssuer:
    """Sends operator commands to the backend."""

    def __init__(self, http_client: AquariumHttpClient, state: DashboardState,
                 controller: Optional[PollController] = None):
        self.http_client = http_client
        self.state = state
        self.controller = controller

    async def feed_fish(self) -> bool:
        """Trigger one feed; on success refresh the sensor view right away."""
        self.state.clear_error()
        loop = asyncio.get_running_loop()
        try:
            result = await loop.run_in_executor(None, self.http_client.feed_fish)
        except TRANSPORT_ERRORS as e:
            logger.error("manual feed failed: %s", describe_error(e))
            self.state.set_error("Failed to control motor")
            return False

        logger.info("manual feed accepted: %s", result.message or "ok")
        if self.controller is not None:
            await self.controller.poll()
        return True

    async def set_auto_mode(self, enabled: bool) -> bool:
        # Local flag flips first so the toggle feels immediate; it is not
        # rolled back if the backend rejects the change.
        self.state.auto_mode = enabled
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self.http_client.set_auto_mode, enabled)
        except TRANSPORT_ERRORS as e:
            logger.error("setting auto mode to %s failed: %s", enabled, describe_error(e))
            self.state.set_error("Failed to update auto mode")
            return False

        logger.info("auto mode %s", "enabled" if enabled else "disabled")
        return True

    async def toggle_auto_mode(self) -> bool:
        return await self.set_auto_mode(not self.state.auto_mode)
