# File: supervisor.py
"""
supervisor.py

Supervisor runs the watch loop on a background thread:

  STREAMING: open a log stream, scan it for the trigger pattern and, on a
             match, run the restart before doing anything else.
  COOLDOWN:  wait RetryPolicy.delay() seconds, then stream again.

Nothing inside the loop ends it; stream errors, stream ends and failed
restarts all lead to COOLDOWN. Only cancel() stops it. cancel() cuts the
cooldown wait short and closes the open log stream so a blocked read
returns; a restart already in progress is allowed to finish.
"""
import logging
import math
import random
import threading
from dataclasses import dataclass
from enum import Enum

from error_scan import scan
from errors import StreamError

log = logging.getLogger(__name__)


class SupervisorState(Enum):
    IDLE = 'idle'
    STREAMING = 'streaming'
    COOLDOWN = 'cooldown'
    STOPPED = 'stopped'


@dataclass(frozen=True)
class RetryPolicy:
    interval: float = 2.0
    jitter: float = 0.0

    def __post_init__(self):
        for value in (self.interval, self.jitter):
            if not math.isfinite(value) or value < 0:
                raise ValueError("retry interval and jitter must be finite and not negative")
        if self.interval + self.jitter > threading.TIMEOUT_MAX:
            raise ValueError("retry interval plus jitter exceeds the longest supported wait")

    def delay(self) -> float:
        if not self.jitter:
            return self.interval
        return self.interval + random.uniform(0, self.jitter)


class Supervisor:
    def __init__(self, gateway, ref, pattern, restarter, policy=None, tail=1):
        if not pattern:
            raise ValueError("trigger pattern must not be empty")
        self.gateway = gateway
        self.ref = ref
        self.pattern = pattern
        self.restarter = restarter
        self.policy = policy or RetryPolicy()
        self.tail = tail
        self.state = SupervisorState.IDLE
        self.sessions = 0
        self._cancel = threading.Event()
        self._feed_lock = threading.Lock()
        self._feed = None
        self._thread = None

    @property
    def cancelled(self):
        return self._cancel.is_set()

    def start(self):
        """Begin the watch loop on a daemon thread."""
        if self._thread is not None:
            raise RuntimeError("supervisor already started")
        self._thread = threading.Thread(target=self.run, name='supervisor', daemon=True)
        self._thread.start()

    def cancel(self):
        """Ask the loop to stop and unblock any pending wait or read."""
        self._cancel.set()
        with self._feed_lock:
            feed = self._feed
        if feed is not None:
            feed.close()

    def join(self, timeout=None) -> bool:
        """Wait for the loop thread; returns True once it has exited."""
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def run(self):
        log.info(f"[{self.ref.name}] Watching container {self.ref.short_id} for '{self.pattern}'")
        while not self.cancelled:
            self.state = SupervisorState.STREAMING
            self.sessions += 1
            try:
                self._session()
            except Exception:
                log.exception(f"[{self.ref.name}] Unexpected error in log session")
            if self.cancelled:
                break
            self.state = SupervisorState.COOLDOWN
            self._cancel.wait(self.policy.delay())
        self.state = SupervisorState.STOPPED
        log.info(f"[{self.ref.name}] Supervisor stopped")

    def _session(self):
        try:
            feed = self.gateway.open_log_stream(self.ref.id, tail=self.tail)
        except StreamError as e:
            log.warning(f"[{self.ref.name}] {e}")
            return

        with self._feed_lock:
            self._feed = feed
        # cancel() may have run before the feed was published
        if self.cancelled:
            feed.close()
        try:
            result = scan(feed, self.pattern)
        finally:
            with self._feed_lock:
                self._feed = None
            feed.close()

        if self.cancelled or not result.matched:
            log.debug(f"[{self.ref.name}] Log session over ({result.outcome.value})")
            return

        log.info(f"[{self.ref.name}] ⚠ Criteria '{self.pattern}' found! Restarting container {self.ref.id}...")
        self.restarter.restart(self.ref)
