#!/usr/bin/env python3
"""
aquamon Operator Audit Logger

Structured log of operator actions issued through the dashboard API.
"""

import json
import logging
import time
from typing import Dict, Any, Optional
from fastapi import Request


class AuditLogger:
    """Centralized audit logging for operator actions."""

    def __init__(self):
        self.logger = logging.getLogger("aquamon.audit")

    def _log_event(self, event_type: str, details: Dict[str, Any], request: Optional[Request] = None):
        """Log a structured audit event."""
        audit_record = {
            "timestamp": int(time.time()),
            "event_type": event_type,
            "details": details
        }

        # Add request context if available
        if request:
            audit_record.update({
                "client_ip": request.client.host if request.client else "unknown",
                "method": request.method,
                "url": str(request.url)
            })

        # Log as JSON for structured parsing
        self.logger.info(json.dumps(audit_record))

    def operator_action(self, action: str, success: bool, details: Optional[Dict[str, Any]] = None,
                        request: Optional[Request] = None):
        """Log an operator action ("feed_fish", "set_auto_mode", "manual_retry")."""
        self._log_event(
            event_type="operator_action",
            details={"action": action, "success": success, **(details or {})},
            request=request
        )


# Global audit logger instance
audit_logger = AuditLogger()
