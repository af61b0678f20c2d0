#!/usr/bin/env python3
"""
aquamon dashboard client

Flow:
- Load config: YAML file, then AQUAMON_BACKEND_URL, then CLI flags
- --once:  run a single poll, print the dashboard state as JSON and exit
- --serve: run the dashboard API (uvicorn); polling lives inside the app
- default: poll the backend every --interval seconds and log what it reports
"""

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Tuple

from .commands import CommandIssuer
from .config import DashboardConfig, load_config
from .controller import PollController
from .http_client import AquariumHttpClient
from .server import create_app, serve
from .state import DashboardState

logger = logging.getLogger(__name__)


def build_controller(config: DashboardConfig) -> Tuple[PollController, CommandIssuer]:
    """Wire the HTTP client, state, poll controller and command issuer together."""
    http_client = AquariumHttpClient(config.backend, timeout=config.timeout)
    state = DashboardState(history_size=config.history_size)
    controller = PollController(
        http_client,
        state,
        interval=config.interval,
        settle_delay=config.settle_delay,
        retry_delay=config.retry_delay,
        max_retries=config.max_retries,
    )
    return controller, CommandIssuer(http_client, state, controller)


async def run_once(controller: PollController) -> bool:
    ok = await controller.poll()
    print(json.dumps(controller.state.to_dict(), indent=2))
    return ok


async def monitor_loop(controller: PollController) -> None:
    """Poll in the background and log a status line every interval."""
    controller.start()
    state = controller.state
    try:
        while True:
            await asyncio.sleep(controller.interval)
            if state.connection.is_connected:
                logger.info("pH %.2f | fish %s | motor %s | feeds %s/%s",
                            state.snapshot.ph,
                            "yes" if state.snapshot.fish_detected else "no",
                            "ready" if state.snapshot.motor_status else "off",
                            state.snapshot.feed_count, state.snapshot.auto_feed_count)
            else:
                logger.warning("disconnected (retry %d/%d): %s",
                               state.connection.retry_count, controller.max_retries, state.error)
    finally:
        controller.stop()


def main():
    parser = argparse.ArgumentParser(description="aquamon dashboard client")
    parser.add_argument("--config", "-c", type=Path, default=Path("config.yml"),
                        help="YAML configuration file (default: config.yml)")
    parser.add_argument("--backend",
                        help="aquarium backend base URL (e.g., http://raspberrypi:80)")
    parser.add_argument("--interval", type=float,
                        help="seconds between polls")
    parser.add_argument("--once", action="store_true",
                        help="poll once, print state as JSON and exit")
    parser.add_argument("--serve", action="store_true",
                        help="run the dashboard API")
    parser.add_argument("--host", help="dashboard API bind address")
    parser.add_argument("--port", type=int, help="dashboard API port")
    parser.add_argument("--log-level",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="logging level")
    args = parser.parse_args()

    config = load_config(args.config, args)

    # Configure logging
    logging.basicConfig(level=getattr(logging, config.log_level))
    logger.info(f"aquamon starting with config: backend={config.backend}, interval={config.interval}s")

    controller, commands = build_controller(config)

    if config.once:
        ok = asyncio.run(run_once(controller))
        raise SystemExit(0 if ok else 1)

    if config.serve:
        serve(create_app(controller, commands), config)
        return

    try:
        asyncio.run(monitor_loop(controller))
    except KeyboardInterrupt:
        print("\nInterrupted. Bye!")


if __name__ == "__main__":
    main()
