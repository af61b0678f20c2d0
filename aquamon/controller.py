"""
Poll controller for the aquarium backend.

Every tick asks the backend to sample the pH probe, waits for the reading
to settle, then fetches the full status. Failures mark the link down and
schedule a bounded number of retries; successes reset the retry counter and
feed the payload to the dashboard state.

Flow of one poll:
- POST /api {"command": "read_ph"}   (errors ignored)
- sleep settle_delay
- GET /api
- success -> DashboardState.record_success
- failure -> DashboardState.record_failure, maybe one retry after retry_delay
"""

import asyncio
import http.client
import logging
from datetime import datetime
from typing import Callable, Optional, Set
from urllib.error import HTTPError

from .http_client import AquariumHttpClient, BackendError
from .schemas import StatusResponse
from .state import DashboardState

logger = logging.getLogger(__name__)

POLL_INTERVAL = 5.0
SETTLE_DELAY = 1.0
RETRY_DELAY = 2.0
MAX_RETRIES = 3

# URLError and socket timeouts are OSError; malformed status lines and
# truncated bodies are HTTPException; bad JSON and schema mismatches are
# ValueError.
TRANSPORT_ERRORS = (OSError, http.client.HTTPException, ValueError, BackendError)


def describe_error(exc: Exception) -> str:
    if isinstance(exc, HTTPError):
        return f"HTTP error! status: {exc.code}"
    return str(exc) or exc.__class__.__name__


class PollController:
    """
    Drives the poll/retry cycle against the backend.

    Each poll gets a sequence number; a poll that finishes after a newer one
    has already been applied is discarded so a slow response never overwrites
    fresher state. Polls that merely overlap still land, so a backend slower
    than the interval is reported.
    Retry timers and in-flight polls are tracked and cancelled by ``stop()``.
    """

    def __init__(
        self,
        http_client: AquariumHttpClient,
        state: DashboardState,
        interval: float = POLL_INTERVAL,
        settle_delay: float = SETTLE_DELAY,
        retry_delay: float = RETRY_DELAY,
        max_retries: int = MAX_RETRIES,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.http_client = http_client
        self.state = state
        self.interval = interval
        self.settle_delay = settle_delay
        self.retry_delay = retry_delay
        self.max_retries = max_retries
        self.clock = clock

        self._loop_task: Optional[asyncio.Task] = None
        self._poll_tasks: Set[asyncio.Task] = set()
        self._retry_timers: Set[asyncio.TimerHandle] = set()
        self._poll_seq = 0
        self._applied_seq = 0
        self._stopped = False

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    @property
    def pending_retries(self) -> int:
        return len(self._retry_timers)

    # ---------------- lifecycle ----------------

    def start(self) -> None:
        """Poll now, then every ``interval`` seconds. Must be called from a running loop."""
        if self.running:
            raise RuntimeError("poll controller already started")
        self._stopped = False
        self._loop_task = asyncio.get_running_loop().create_task(self._poll_loop())
        logger.info("polling %s every %ss", self.http_client.base_url, self.interval)

    def stop(self) -> None:
        """Cancel the poll loop, pending retries and in-flight polls. Safe to call twice."""
        self._stopped = True
        if self._loop_task is not None:
            self._loop_task.cancel()
            self._loop_task = None
        for handle in self._retry_timers:
            handle.cancel()
        self._retry_timers.clear()
        for task in list(self._poll_tasks):
            task.cancel()
        logger.debug("poll controller stopped")

    async def _poll_loop(self) -> None:
        while True:
            # Ticks do not wait for the previous poll to finish
            self._spawn_poll()
            await asyncio.sleep(self.interval)

    def _spawn_poll(self) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self.poll())
        self._poll_tasks.add(task)
        task.add_done_callback(self._on_poll_done)
        return task

    def _on_poll_done(self, task: asyncio.Task) -> None:
        self._poll_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("unexpected error during poll", exc_info=task.exception())

    # ---------------- polling ----------------

    async def poll(self) -> bool:
        """
        Run one read-then-fetch cycle.

        Returns:
            True if the backend answered and its data was applied.
        """
        self._poll_seq += 1
        seq = self._poll_seq
        pre_attempt = self.state.connection.retry_count
        loop = asyncio.get_running_loop()

        try:
            await loop.run_in_executor(None, self.http_client.request_ph_read)
        except TRANSPORT_ERRORS as e:
            logger.debug("read_ph request failed (ignored): %s", e)

        await asyncio.sleep(self.settle_delay)

        try:
            status = await loop.run_in_executor(None, self.http_client.get_status)
        except TRANSPORT_ERRORS as e:
            return self._handle_failure(seq, pre_attempt, e)
        return self._handle_success(seq, status)

    def _superseded(self, seq: int) -> bool:
        if self._stopped:
            logger.debug("poll #%d finished after stop, ignoring", seq)
            return True
        if seq < self._applied_seq:
            logger.debug("poll #%d superseded by #%d, discarding result", seq, self._applied_seq)
            return True
        self._applied_seq = seq
        return False

    def _handle_success(self, seq: int, status: StatusResponse) -> bool:
        if self._superseded(seq):
            return False
        if not self.state.connection.is_connected:
            logger.info("connected to backend: %s", self.http_client.base_url)
        self.state.record_success(status.data, self.clock())
        logger.debug("pH %.2f fish=%s motor=%s", self.state.snapshot.ph,
                     self.state.snapshot.fish_detected, self.state.snapshot.motor_status)
        return True

    def _handle_failure(self, seq: int, pre_attempt: int, exc: Exception) -> bool:
        if self._superseded(seq):
            return False
        message = f"Failed to connect: {describe_error(exc)}"
        self.state.record_failure(message, self.clock())

        if pre_attempt < self.max_retries:
            attempt = self.state.bump_retry_count(self.max_retries)
            logger.warning("%s; retry %d/%d in %ss", message, attempt, self.max_retries, self.retry_delay)
            self._schedule_retry()
        else:
            logger.error("%s; giving up until next poll", message)
        return False

    def _schedule_retry(self) -> None:
        loop = asyncio.get_running_loop()
        handle: Optional[asyncio.TimerHandle] = None

        def fire() -> None:
            self._retry_timers.discard(handle)
            if not self._stopped:
                self._spawn_poll()

        handle = loop.call_later(self.retry_delay, fire)
        self._retry_timers.add(handle)

    async def manual_retry(self) -> bool:
        """Operator-initiated poll; runs even when the retry ceiling is reached."""
        self.state.bump_retry_count(self.max_retries)
        logger.info("manual retry requested (retry count %d)", self.state.connection.retry_count)
        return await self.poll()
