# File: error_scan.py
"""
error_scan.py

Scans one log session for the trigger pattern:
- line_matches: case-sensitive substring test for a single line
- scan: consumes a line iterator until the first match, the end of the
  stream, or a read failure, and reports which of the three happened
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from errors import StreamError

log = logging.getLogger(__name__)


class ScanOutcome(Enum):
    MATCHED = 'matched'
    STREAM_ENDED = 'stream_ended'
    STREAM_FAILED = 'stream_failed'


@dataclass
class ScanResult:
    outcome: ScanOutcome
    line: Optional[str] = None
    error: Optional[BaseException] = None

    @property
    def matched(self) -> bool:
        return self.outcome is ScanOutcome.MATCHED


def line_matches(line: str, pattern: str) -> bool:
    """Returns True if `pattern` occurs anywhere in `line`."""
    return pattern in line


def scan(lines: Iterable[str], pattern: str) -> ScanResult:
    """
    Pull lines one at a time and stop at the first one containing `pattern`.
    Nothing after the matching line is read from `lines`.
    """
    if not pattern:
        raise ValueError("trigger pattern must not be empty")
    try:
        for line in lines:
            if line_matches(line, pattern):
                return ScanResult(ScanOutcome.MATCHED, line=line)
    except (StreamError, OSError) as e:
        log.warning(f"Log stream failed: {e}")
        return ScanResult(ScanOutcome.STREAM_FAILED, error=e)
    return ScanResult(ScanOutcome.STREAM_ENDED)
