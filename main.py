# File: main.py
"""
main.py

Entry point. Loads the settings, resolves the watched container once,
starts the Supervisor thread and then waits for SIGINT/SIGTERM. On a
signal the supervisor is cancelled and given SHUTDOWN_TIMEOUT seconds to
wind down before the process exits.

Exit status is 0 after a signal-driven shutdown and 1 for any startup
failure (bad settings, no Docker daemon, container not found).
"""
import logging
import signal
import sys
import threading

from config import ConfigError, load_config
from errors import GatewayError, NotFound
from gateway import DockerGateway
from restarter import Restarter
from supervisor import RetryPolicy, Supervisor

log = logging.getLogger('container_log_watch')

LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s"
SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def setup_logging(level='INFO'):
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)


def install_signal_handlers(shutdown):
    """Route SIGINT/SIGTERM to `shutdown`; returns the previous handlers."""
    def _handler(signum, frame):
        log.debug(f"Received signal {signal.Signals(signum).name}")
        shutdown.set()

    previous = {}
    for sig in SHUTDOWN_SIGNALS:
        previous[sig] = signal.signal(sig, _handler)
    return previous


def restore_signal_handlers(previous):
    for sig, handler in previous.items():
        signal.signal(sig, handler)


def main(environ=None, env_file='.env', gateway_factory=DockerGateway, shutdown=None):
    setup_logging()
    try:
        cfg = load_config(env_file=env_file, environ=environ)
    except ConfigError as e:
        log.critical(f"Configuration error: {e}")
        return 1
    setup_logging(cfg.log_level)

    if shutdown is None:
        shutdown = threading.Event()
    # SIGINT/SIGTERM reach `shutdown` from before the first Docker call
    previous = install_signal_handlers(shutdown)
    try:
        return _watch(cfg, gateway_factory, shutdown)
    finally:
        restore_signal_handlers(previous)


def _watch(cfg, gateway_factory, shutdown):
    try:
        gateway = gateway_factory()
        ref = gateway.resolve(cfg.container_name)
    except NotFound as e:
        log.critical(f"Error resolving container name: {e}")
        return 1
    except GatewayError as e:
        log.critical(str(e))
        return 1

    if shutdown.is_set():
        log.info("Shutting down gracefully...")
        return 0

    try:
        restarter = Restarter(gateway, settle_delay=cfg.restart_delay, stop_timeout=cfg.stop_timeout)
        policy = RetryPolicy(interval=cfg.retry_interval, jitter=cfg.retry_jitter)
    except ValueError as e:
        log.critical(f"Configuration error: {e}")
        return 1
    supervisor = Supervisor(gateway, ref, cfg.error_msg, restarter, policy=policy, tail=cfg.log_tail)
    supervisor.start()
    # short waits keep the main thread responsive to signals
    while not shutdown.wait(1.0):
        pass
    log.info("Shutting down gracefully...")
    supervisor.cancel()
    if not supervisor.join(cfg.shutdown_timeout):
        log.warning(f"[{ref.name}] Supervisor still busy after {cfg.shutdown_timeout:g}s, exiting anyway")
    return 0


def run():
    sys.exit(main())


if __name__ == '__main__':
    run()
