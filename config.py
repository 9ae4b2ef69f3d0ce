# File: config.py
"""
config.py

Loads the watcher settings once at startup.

An optional .env file is read first (python-dotenv) without overriding
variables already present in the process environment; a missing or broken
.env only produces a warning. CONTAINER_NAME and ERROR_MSG are required,
every other key falls back to a default.
"""
import logging
import math
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

log = logging.getLogger(__name__)

DEFAULT_RESTART_DELAY = 10.0
DEFAULT_RETRY_INTERVAL = 2.0
DEFAULT_RETRY_JITTER = 0.0
DEFAULT_LOG_TAIL = 1
DEFAULT_SHUTDOWN_TIMEOUT = 15.0
DEFAULT_LOG_LEVEL = 'INFO'


class ConfigError(Exception):
    """Raised when required settings are missing or malformed."""


@dataclass(frozen=True)
class WatchConfig:
    container_name: str
    error_msg: str
    restart_delay: float = DEFAULT_RESTART_DELAY
    retry_interval: float = DEFAULT_RETRY_INTERVAL
    retry_jitter: float = DEFAULT_RETRY_JITTER
    log_tail: int = DEFAULT_LOG_TAIL
    stop_timeout: Optional[int] = None
    shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL


def load_env_file(path='.env') -> bool:
    """
    Populate os.environ from an .env file. Returns False (after logging a
    warning) when the file is absent or unreadable.
    """
    p = Path(path)
    if not p.is_file():
        log.warning(f"Error loading {path} file, using system environment instead")
        return False
    try:
        load_dotenv(p, override=False)
    except (OSError, UnicodeDecodeError) as e:
        log.warning(f"Error loading {path} file ({e}), using system environment instead")
        return False
    return True


def _required(env, key):
    value = env.get(key, '')
    if not value:
        raise ConfigError(f"Environment variable {key} not set.")
    return value


def _number(env, key, default, cast=float):
    raw = env.get(key, '').strip()
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ConfigError(f"Environment variable {key} must be a number, got {raw!r}") from None
    if not math.isfinite(value) or value < 0 or value > threading.TIMEOUT_MAX:
        raise ConfigError(f"Environment variable {key} must be a finite, non-negative number, got {raw!r}")
    return value


def load_config(env_file='.env', environ=None) -> WatchConfig:
    """
    Build a WatchConfig from the environment.

    When `environ` is given it is used as-is and no .env file is read, which
    keeps callers (and tests) away from the real process environment.
    """
    if environ is None:
        if env_file:
            load_env_file(env_file)
        environ = os.environ

    container_name = _required(environ, 'CONTAINER_NAME')
    error_msg = _required(environ, 'ERROR_MSG')

    level = environ.get('LOG_LEVEL', '').strip().upper() or DEFAULT_LOG_LEVEL
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"Unknown LOG_LEVEL {level!r}")

    return WatchConfig(
        container_name=container_name,
        error_msg=error_msg,
        restart_delay=_number(environ, 'RESTART_DELAY', DEFAULT_RESTART_DELAY),
        retry_interval=_number(environ, 'RETRY_INTERVAL', DEFAULT_RETRY_INTERVAL),
        retry_jitter=_number(environ, 'RETRY_JITTER', DEFAULT_RETRY_JITTER),
        log_tail=_number(environ, 'LOG_TAIL', DEFAULT_LOG_TAIL, cast=int),
        stop_timeout=_number(environ, 'STOP_TIMEOUT', None, cast=int),
        shutdown_timeout=_number(environ, 'SHUTDOWN_TIMEOUT', DEFAULT_SHUTDOWN_TIMEOUT),
        log_level=level,
    )
