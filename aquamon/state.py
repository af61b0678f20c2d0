"""
Dashboard state container.

Holds everything the display layer renders: the latest sensor snapshot,
the backend connection status, the rolling pH history and the last error
message. The poll controller and the command issuers mutate it only through
the methods below, so the history cap and the retry ceiling are enforced in
one place.
"""

from collections import deque
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Any, Deque, Dict, List, Optional

from .schemas import SensorData

DEFAULT_PH = 7.0
HISTORY_SIZE = 20

# Backend marker for "no feed has happened yet"
NEVER = "Never"


@dataclass
class SensorSnapshot:
    """Latest sensor readings. None means the backend did not report it."""
    ph: float = DEFAULT_PH
    fish_detected: bool = False
    motor_status: bool = False
    ph_voltage: Optional[float] = None
    feed_count: Optional[int] = None
    auto_feed_count: Optional[int] = None
    last_feed_time: Optional[str] = None
    auto_last_feed_time: Optional[str] = None
    ph_sensor_initialized: Optional[bool] = None


@dataclass
class ConnectionStatus:
    is_connected: bool = False
    last_attempt: Optional[datetime] = None
    retry_count: int = 0


@dataclass(frozen=True)
class HistoryEntry:
    time: datetime
    value: float


def _feed_time(value: Optional[str]) -> Optional[str]:
    return None if value == NEVER else value


def snapshot_from_data(data: SensorData) -> SensorSnapshot:
    """Build a fresh snapshot from a decoded status payload."""
    return SensorSnapshot(
        ph=data.current_ph if data.current_ph is not None else DEFAULT_PH,
        fish_detected=bool(data.fish_detected),
        motor_status=bool(data.motor_initialized),
        ph_voltage=data.current_ph_voltage,
        feed_count=data.feed_count,
        auto_feed_count=data.auto_feed_count,
        last_feed_time=_feed_time(data.last_feed_time),
        auto_last_feed_time=_feed_time(data.auto_last_feed_time),
        ph_sensor_initialized=data.ph_sensor_initialized,
    )


class DashboardState:
    """Single owner of the snapshot, connection status and pH history."""

    def __init__(self, history_size: int = HISTORY_SIZE, auto_mode: bool = True):
        self.snapshot = SensorSnapshot()
        self.connection = ConnectionStatus()
        self.error: Optional[str] = None
        self.auto_mode = auto_mode
        self._history: Deque[HistoryEntry] = deque(maxlen=history_size)

    @property
    def history(self) -> List[HistoryEntry]:
        return list(self._history)

    @property
    def history_size(self) -> int:
        return self._history.maxlen

    # ---- reconciler ----

    def apply_update(self, data: SensorData, now: datetime) -> SensorSnapshot:
        """
        Replace the snapshot with one built from *data* and append a
        history point. The deque drops the oldest point once full.
        """
        self.snapshot = snapshot_from_data(data)
        value = data.current_ph if data.current_ph is not None else DEFAULT_PH
        self._history.append(HistoryEntry(time=now, value=value))
        return self.snapshot

    # ---- connection status ----

    def record_success(self, data: SensorData, now: datetime) -> None:
        self.error = None
        self.connection.is_connected = True
        self.connection.retry_count = 0
        self.connection.last_attempt = now
        self.apply_update(data, now)

    def record_failure(self, message: str, now: datetime) -> None:
        self.error = message
        self.connection.is_connected = False
        self.connection.last_attempt = now

    def bump_retry_count(self, ceiling: int) -> int:
        """Increment the retry counter without letting it pass *ceiling*."""
        self.connection.retry_count = min(self.connection.retry_count + 1, ceiling)
        return self.connection.retry_count

    # ---- errors raised by operator commands ----

    def set_error(self, message: str) -> None:
        self.error = message

    def clear_error(self) -> None:
        self.error = None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view for the dashboard API."""
        last_attempt = self.connection.last_attempt
        return {
            "sensors": asdict(self.snapshot),
            "connection": {
                "is_connected": self.connection.is_connected,
                "last_attempt": last_attempt.isoformat() if last_attempt else None,
                "retry_count": self.connection.retry_count,
            },
            "history": [
                {"time": entry.time.isoformat(), "value": entry.value}
                for entry in self._history
            ],
            "error": self.error,
            "auto_mode": self.auto_mode,
        }
