import argparse
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

BACKEND_ENV = "AQUAMON_BACKEND_URL"


@dataclass
class DashboardConfig:
    """Dashboard configuration with defaults"""
    backend: str = "http://localhost:80"
    interval: float = 5.0
    settle_delay: float = 1.0
    retry_delay: float = 2.0
    max_retries: int = 3
    history_size: int = 20
    timeout: int = 10
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000
    serve: bool = False
    once: bool = False

    @property
    def video_feed_url(self) -> str:
        # Consumed by the display layer only
        return f"{self.backend.rstrip('/')}/video_feed"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DashboardConfig":
        """Create config from dictionary, using defaults for missing values"""
        # Filter only known fields to avoid dataclass errors
        known_fields = {f.name for f in fields(cls)}
        unknown = set(data) - known_fields
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {sorted(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known_fields})

    @classmethod
    def from_file(cls, config_path: Path) -> "DashboardConfig":
        """Load configuration from YAML file"""
        if not config_path.exists():
            logger.debug(f"Config file not found: {config_path}, using defaults")
            return cls()

        try:
            with open(config_path, "r") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise TypeError(f"expected a mapping, got {type(data).__name__}")
            logger.debug(f"Loaded config from {config_path}: {data}")
            return cls.from_dict(data)
        except (OSError, yaml.YAMLError, TypeError) as e:
            logger.warning(f"Failed to load config from {config_path}: {e}, using defaults")
            return cls()

    def override_with_env(self, env: Optional[Dict[str, str]] = None) -> "DashboardConfig":
        """Apply the backend URL override from the environment (or a .env file)"""
        if env is None:
            load_dotenv()
            env = os.environ
        backend = env.get(BACKEND_ENV)
        if backend:
            logger.debug(f"Backend URL from {BACKEND_ENV}: {backend}")
            self.backend = backend
        return self

    def override_with_args(self, args: argparse.Namespace) -> "DashboardConfig":
        """Override config with command line arguments if provided"""
        # Only override if explicitly provided - preserves config file values
        self.backend = args.backend if args.backend is not None else self.backend
        self.interval = args.interval if args.interval is not None else self.interval
        self.log_level = args.log_level if args.log_level is not None else self.log_level
        self.host = args.host if args.host is not None else self.host
        self.port = args.port if args.port is not None else self.port
        self.once = args.once or self.once
        self.serve = args.serve or self.serve
        return self


def load_config(config_path: Path, args: Optional[argparse.Namespace] = None) -> DashboardConfig:
    """
    Load configuration

    Priority (highest first):
    1. Command line arguments
    2. AQUAMON_BACKEND_URL (environment or .env), backend URL only
    3. YAML config file
    4. Defaults
    """
    config = DashboardConfig.from_file(config_path).override_with_env()
    if args is not None:
        config.override_with_args(args)
    return config
