"""
HTTP client utilities for aquamon.

Provides a clean interface for talking to the aquarium controller backend,
including SSL context handling and JSON serialization. All calls are
blocking; async callers run them in an executor.
"""

import json
import ssl
from typing import Any, Dict, Optional
from urllib.request import Request, urlopen

from .schemas import CommandResponse, StatusResponse


class BackendError(Exception):
    """The backend answered but reported ``success: false``."""


class AquariumHttpClient:
    """HTTP client for communicating with the aquarium controller backend."""

    def __init__(self, base_url: str, timeout: int = 10):
        """
        Initialize HTTP client.

        Args:
            base_url: Base URL of the backend (e.g., http://raspberrypi:80)
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._ssl_context = self._create_ssl_context()

    def _create_ssl_context(self) -> ssl.SSLContext:
        """Create SSL context for HTTPS that auto-trusts the controller's self-signed certificate."""
        ssl_context = ssl.create_default_context()
        ssl_context.check_hostname = False
        ssl_context.verify_mode = ssl.CERT_NONE
        return ssl_context

    def _open(self, req: Request) -> Dict[str, Any]:
        # Use SSL context for HTTPS URLs
        ssl_context = self._ssl_context if req.full_url.startswith("https://") else None

        with urlopen(req, timeout=self.timeout, context=ssl_context) as resp:
            raw = resp.read().decode("utf-8")
            return json.loads(raw) if raw else {}

    def post_json(self, endpoint: str, data: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """
        Make a POST request with JSON data.

        Args:
            endpoint: API endpoint path (e.g., /api/feed_fish)
            data: Dictionary to send as JSON
            headers: Optional additional headers

        Returns:
            Response data as dictionary

        Raises:
            HTTPError: On HTTP errors
            URLError: On connection errors
        """
        url = f"{self.base_url}{endpoint}"
        body = json.dumps(data).encode("utf-8")
        hdrs = {"Content-Type": "application/json"}
        hdrs.update(headers or {})
        return self._open(Request(url, data=body, headers=hdrs, method="POST"))

    def get_json(self, endpoint: str, headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """
        Make a GET request.

        Args:
            endpoint: API endpoint path
            headers: Optional request headers

        Returns:
            Response data as dictionary

        Raises:
            HTTPError: On HTTP errors
            URLError: On connection errors
        """
        url = f"{self.base_url}{endpoint}"
        return self._open(Request(url, headers=headers or {}, method="GET"))

    def request_ph_read(self) -> Dict[str, Any]:
        """Ask the backend to sample the pH probe. The response carries nothing we use."""
        return self.post_json("/api", {"command": "read_ph"})

    def get_status(self) -> StatusResponse:
        """
        Fetch the full sensor status.

        Raises:
            BackendError: If the backend reports failure
            ValidationError: If the payload does not match the status schema
        """
        data = self.get_json("/api", {"Accept": "application/json"})
        status = StatusResponse.model_validate(data)
        if not status.success:
            raise BackendError("Backend reported failure")
        return status

    def feed_fish(self) -> CommandResponse:
        """Run the feeder once, overriding the fish-presence check."""
        return self._command("/api/feed_fish", {"command": "feed_fish", "override": True}, "Motor control failed")

    def set_auto_mode(self, enabled: bool) -> CommandResponse:
        return self._command("/api", {"command": "set_auto_mode", "enabled": enabled}, "Failed to set auto mode")

    def _command(self, endpoint: str, data: Dict[str, Any], default_error: str) -> CommandResponse:
        result = CommandResponse.model_validate(self.post_json(endpoint, data))
        if not result.success:
            raise BackendError(result.message or default_error)
        return result
