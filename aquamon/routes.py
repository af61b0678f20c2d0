#!/usr/bin/env python3
"""
Dashboard Routes - JSON state and operator actions for the display layer
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Request

from .audit import audit_logger
from .commands import CommandIssuer
from .controller import PollController
from .schemas import AutoModeRequest

logger = logging.getLogger(__name__)


def create_dashboard_routes(controller: PollController, commands: CommandIssuer) -> APIRouter:
    """Create dashboard state and command routes."""
    router = APIRouter()
    state = controller.state

    @router.get("/state")
    def get_state() -> Dict[str, Any]:
        """Current sensors, connection status, pH history and last error."""
        return state.to_dict()

    @router.post("/feed")
    async def feed(request: Request) -> Dict[str, Any]:
        success = await commands.feed_fish()
        audit_logger.operator_action("feed_fish", success, request=request)
        return {"success": success, "error": state.error}

    @router.post("/auto_mode")
    async def auto_mode(body: AutoModeRequest, request: Request) -> Dict[str, Any]:
        success = await commands.set_auto_mode(body.enabled)
        audit_logger.operator_action("set_auto_mode", success, {"enabled": body.enabled}, request=request)
        return {"success": success, "auto_mode": state.auto_mode, "error": state.error}

    @router.post("/retry")
    async def retry(request: Request) -> Dict[str, Any]:
        success = await controller.manual_retry()
        audit_logger.operator_action("manual_retry", success, request=request)
        return state.to_dict()

    return router
