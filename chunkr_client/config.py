"""Runtime configuration for the Chunkr API client."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

LOGGER = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.chunkr.ai/api/v1"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0
DEFAULT_USER_AGENT = "chunkr-client/1.0"


@dataclass(frozen=True)
class ClientConfig:
    """Connection settings shared by every request issued by the client."""

    api_key: Optional[str] = None
    api_url: str = DEFAULT_API_URL
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClientConfig":
        """Build a configuration from ``CHUNKR_*`` environment variables.

        A missing API key is not an error here; the transport warns about it
        and the service rejects the first unauthenticated call.
        """

        env = os.environ if environ is None else environ
        LOGGER.debug("Loading Chunkr client configuration from environment")
        return cls(
            api_key=env.get("CHUNKR_API_KEY") or None,
            api_url=env.get("CHUNKR_API_URL") or DEFAULT_API_URL,
            request_timeout_seconds=_parse_float(
                env, "CHUNKR_REQUEST_TIMEOUT_SECONDS", DEFAULT_REQUEST_TIMEOUT_SECONDS
            ),
        )


def _parse_float(env: Mapping[str, str], name: str, default: float) -> float:
    value = env.get(name)
    if not value:
        return default
    try:
        parsed = float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {value!r}") from exc
    if parsed <= 0:
        raise ValueError(f"{name} must be positive, got {value!r}")
    return parsed
