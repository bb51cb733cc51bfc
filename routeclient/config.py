#Purpose: client configuration read from the environment.
#Values come from os.environ, optionally populated from a .env file.
#Example .env:
#ROUTING_SERVICE_URL=https://graphhopper.com/api/1/route
#ROUTING_API_KEY=your-key
#ROUTING_POST_REQUEST=true
#ROUTING_TIMEOUT_MS=5000

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

DEFAULT_SERVICE_URL = "https://graphhopper.com/api/1/route"
DEFAULT_TIMEOUT_MS = 5000


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() == "true"


@dataclass
class ClientSettings:
    """
    Settings consumed by RoutingWebClient.from_settings().
    Defaults are evaluated when the object is created, not at import time.
    """
    service_url: str = field(default_factory=lambda: os.getenv("ROUTING_SERVICE_URL", DEFAULT_SERVICE_URL))
    # None means "no key": the service may still accept anonymous calls
    api_key: Optional[str] = field(default_factory=lambda: os.getenv("ROUTING_API_KEY") or None)
    post_request: bool = field(default_factory=lambda: _env_bool("ROUTING_POST_REQUEST", "true"))
    timeout_ms: int = field(default_factory=lambda: int(os.getenv("ROUTING_TIMEOUT_MS", str(DEFAULT_TIMEOUT_MS))))
    log_level: str = field(default_factory=lambda: os.getenv("ROUTING_LOG_LEVEL", "INFO"))

    def __post_init__(self):
        if not self.service_url:
            raise ValueError("Routing service URL not set. Please set ROUTING_SERVICE_URL in the .env file.")
        if self.timeout_ms <= 0:
            raise ValueError(f"ROUTING_TIMEOUT_MS must be positive, got {self.timeout_ms}")


def load_settings(dotenv_path: Optional[str] = None) -> ClientSettings:
    """Loads .env (without overriding variables already set) and reads the settings."""
    load_dotenv(dotenv_path)
    return ClientSettings()


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
