"""DataDog statsd agent settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gmu.common.config import Settings

# Environment variable holding the DataDog agent host name.
DD_AGENT_HOST_ENV = "DD_AGENT_HOST"
# Default port of the DataDog statsd listener.
DD_STATSD_PORT = 8125

# Counter sample rate in [0, 1.0]; 1.0 sends every value instead of subsampling.
# https://statsd.readthedocs.io/en/v3.2.1/types.html#counters
DD_ALWAYS_SAMPLE = 1.0


def statsd_address(settings: "Settings") -> tuple[str, int] | None:
    """Return the ``(host, port)`` of the statsd agent, or None when unset."""
    if not settings.DD_AGENT_HOST:
        return None
    return settings.DD_AGENT_HOST, DD_STATSD_PORT
