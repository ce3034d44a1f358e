"""Polling cadence and timeout floor used by condition waits."""

from __future__ import annotations

from dataclasses import dataclass

_NS_PER_SECOND = 1_000_000_000
_NS_PER_MINUTE = 60 * _NS_PER_SECOND
_NS_PER_HOUR = 60 * _NS_PER_MINUTE


@dataclass(frozen=True)
class RetryProfile:
    """Poll interval and minimum accepted timeout, in seconds.

    Profiles are always replaced as a whole so interval and floor stay coherent.
    """

    poll_interval: float
    minimum_timeout: float


PRODUCTION_PROFILE = RetryProfile(poll_interval=2.0, minimum_timeout=10.0)
TEST_PROFILE = RetryProfile(poll_interval=0.05, minimum_timeout=0.1)


def _trim(value: float) -> str:
    return f"{value:.9f}".rstrip("0").rstrip(".")


def format_duration(seconds: float) -> str:
    """Render a duration the way Go prints time.Duration values.

    Examples: ``0s``, ``500ms``, ``1.5s``, ``10s``, ``1m0s``, ``1h30m0s``.
    """
    if seconds == 0:
        return "0s"

    sign = "-" if seconds < 0 else ""
    total_ns = round(abs(seconds) * _NS_PER_SECOND)

    if total_ns < _NS_PER_SECOND:
        if total_ns < 1_000:
            return f"{sign}{total_ns}ns"
        if total_ns < 1_000_000:
            return f"{sign}{_trim(total_ns / 1_000)}µs"
        return f"{sign}{_trim(total_ns / 1_000_000)}ms"

    hours, rem = divmod(total_ns, _NS_PER_HOUR)
    minutes, rem = divmod(rem, _NS_PER_MINUTE)

    out = ""
    if hours:
        out += f"{hours}h"
    if hours or minutes:
        out += f"{minutes}m"
    return f"{sign}{out}{_trim(rem / _NS_PER_SECOND)}s"
