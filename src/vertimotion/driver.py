"""Scheduled-tick driver for a SessionController.

The driver keeps two deadlines on the session's nanosecond timeline, the
next 1 Hz tick and the next target change, and fires whatever is due when
advanced. It can be advanced explicitly (replay, tests) or from a
background thread against the monotonic clock.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Optional

from vertimotion.config import SessionConfig
from vertimotion.errors import SessionStateError
from vertimotion.session import SessionController
from vertimotion.types import NS_PER_SECOND, SessionState, TargetStep

logger = logging.getLogger(__name__)


class SessionDriver:
    """Calls on_tick()/on_target_timer() on a controller as deadlines pass.

    Args:
        controller: The controller to drive.

    Example:
        >>> driver = SessionDriver(controller)
        >>> driver.start(SessionConfig(duration_sec=30), t_ns=0)
        >>> for sample in samples:
        ...     driver.advance(sample.t_ns)
        ...     controller.on_sample(sample)
        >>> driver.advance(30 * NS_PER_SECOND)
    """

    def __init__(self, controller: SessionController):
        self._controller = controller
        self._lock = threading.RLock()
        self._next_tick_ns: Optional[int] = None
        self._next_target_ns: Optional[int] = None
        self._paused_seen_ns = 0

        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @property
    def controller(self) -> SessionController:
        return self._controller

    @property
    def next_tick_ns(self) -> Optional[int]:
        return self._next_tick_ns

    @property
    def next_target_ns(self) -> Optional[int]:
        return self._next_target_ns

    def start(self, config: SessionConfig, t_ns: Optional[int] = None) -> TargetStep:
        """Start the session and schedule the first tick and target change."""
        with self._lock:
            t_ns = time.monotonic_ns() if t_ns is None else int(t_ns)
            step = self._controller.start(config, t_ns=t_ns)
            self._next_tick_ns = t_ns + NS_PER_SECOND
            self._next_target_ns = t_ns + step.dwell_ns
            self._paused_seen_ns = self._controller.paused_total_ns
            return step

    def advance(self, now_ns: int) -> int:
        """Fire every deadline at or before ``now_ns``.

        Deadlines fire in chronological order, ticks before target changes
        on ties, each with the deadline as its event time. Stops as soon as
        the controller leaves RUNNING. Pauses taken on the controller
        directly push the deadlines back like driver pauses do.

        Returns:
            Number of callbacks fired.
        """
        fired = 0
        with self._lock:
            if self._next_tick_ns is None:
                return 0
            while self._controller.state is SessionState.RUNNING:
                self._sync_pauses()
                if self._next_tick_ns <= self._next_target_ns:
                    due = self._next_tick_ns
                    if due > now_ns:
                        break
                    self._next_tick_ns += NS_PER_SECOND
                    self._controller.on_tick(due)
                else:
                    due = self._next_target_ns
                    if due > now_ns:
                        break
                    step = self._controller.on_target_timer(due)
                    if step is None:
                        break
                    self._next_target_ns = due + step.dwell_ns
                fired += 1
        return fired

    def pause(self, t_ns: Optional[int] = None) -> None:
        with self._lock:
            t_ns = time.monotonic_ns() if t_ns is None else int(t_ns)
            self._controller.pause(t_ns)

    def resume(self, t_ns: Optional[int] = None) -> None:
        """Resume and push pending deadlines back by the paused interval."""
        with self._lock:
            t_ns = time.monotonic_ns() if t_ns is None else int(t_ns)
            self._controller.resume(t_ns)
            self._sync_pauses()

    def _sync_pauses(self) -> None:
        paused_total_ns = self._controller.paused_total_ns
        shift = paused_total_ns - self._paused_seen_ns
        self._paused_seen_ns = paused_total_ns
        if shift > 0 and self._next_tick_ns is not None:
            self._next_tick_ns += shift
            self._next_target_ns += shift
            logger.debug("Deadlines shifted by %.3fs after pause", shift / 1e9)

    # ------------------------------------------------------------------
    # Background thread
    # ------------------------------------------------------------------

    def start_background(self, poll_interval_sec: float = 0.05) -> None:
        """Advance against the monotonic clock on a daemon thread.

        The session must have been started with monotonic timestamps
        (the default when ``t_ns`` is omitted).
        """
        if self._thread is not None and self._thread.is_alive():
            raise SessionStateError("Driver thread already running")
        if poll_interval_sec <= 0:
            raise ValueError("poll_interval_sec must be > 0")

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            args=(poll_interval_sec,),
            name="vertimotion-driver",
            daemon=True,
        )
        self._thread.start()
        logger.debug("Driver thread started (poll=%.3fs)", poll_interval_sec)

    def _run(self, poll_interval_sec: float) -> None:
        while not self._stop_event.is_set():
            self.advance(time.monotonic_ns())
            if self._controller.state is SessionState.FINISHED:
                break
            self._stop_event.wait(poll_interval_sec)
        logger.debug("Driver thread exiting")

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the driver thread.

        Returns:
            True if the thread has exited.
        """
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def shutdown(self, stop_session: bool = True) -> None:
        """Stop the driver thread, and the session if it is still active."""
        self._stop_event.set()
        self.join()
        self._thread = None
        if stop_session and self._controller.state in (SessionState.RUNNING, SessionState.PAUSED):
            try:
                self._controller.stop()
            except SessionStateError:
                # Finished by a tick between the check and stop()
                logger.debug("Session already finished at shutdown")


__all__ = ["SessionDriver"]
