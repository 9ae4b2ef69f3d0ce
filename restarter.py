# File: restarter.py
"""
restarter.py

Contains Restarter, which performs one stop -> settle -> start cycle on the
watched container and logs how it went. It never retries on its own.

The settle delay is a fixed wait, not a check that the container actually
reached the stopped state: a stop slower than the delay can still overlap
the start request.
"""
import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Optional

from errors import StartError, StopError

log = logging.getLogger(__name__)


@dataclass
class RestartOutcome:
    stopped: bool = False
    started: bool = False
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.stopped and self.started


class Restarter:
    def __init__(self, gateway, settle_delay=10.0, stop_timeout=None, sleep=time.sleep):
        if not math.isfinite(settle_delay) or settle_delay < 0 or settle_delay > threading.TIMEOUT_MAX:
            raise ValueError("settle_delay must be a finite, non-negative number of seconds")
        self.gateway = gateway
        self.settle_delay = settle_delay
        self.stop_timeout = stop_timeout
        self._sleep = sleep

    def restart(self, ref) -> RestartOutcome:
        outcome = RestartOutcome()
        try:
            self.gateway.stop(ref.id, timeout=self.stop_timeout)
        except StopError as e:
            log.error(f"[{ref.name}] ✘ Error stopping container {ref.id}: {e.__cause__ or e}")
            outcome.error = e
            return outcome
        outcome.stopped = True
        log.info(f"[{ref.name}] Stopped container {ref.short_id}, waiting {self.settle_delay:g}s before start")

        self._sleep(self.settle_delay)

        try:
            self.gateway.start(ref.id)
        except StartError as e:
            log.error(f"[{ref.name}] ✘ Error starting container {ref.id}: {e.__cause__ or e}")
            outcome.error = e
            return outcome
        outcome.started = True
        log.info(f"[{ref.name}] ✔ Container {ref.short_id} restarted successfully")
        return outcome
