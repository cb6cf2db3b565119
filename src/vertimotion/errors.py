"""Exceptions raised by the session engine.

Only lifecycle and configuration problems are raised. Bad samples and
out-of-state samples/ticks are dropped and counted instead.
"""


class SessionConfigError(ValueError):
    """Session configuration was rejected at start()."""


class SessionStateError(RuntimeError):
    """A lifecycle operation is not allowed in the current state."""


__all__ = ["SessionConfigError", "SessionStateError"]
