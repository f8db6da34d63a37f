from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when a caller passes an unusable option (dialect, strategy, limit)."""


class RateLimiterError(RuntimeError):
    """Delivered to pending calls when a limiter's drain loop fails on its own."""
