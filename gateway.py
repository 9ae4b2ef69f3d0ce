# File: gateway.py
"""
gateway.py

DockerGateway is the only place that talks to the Docker daemon. It exposes
exactly four operations (resolve, open_log_stream, stop, start) and maps
docker/requests failures onto the exceptions in errors.py.
"""
import logging
from dataclasses import dataclass

import docker
import docker.errors
import requests

from errors import GatewayError, NotFound, StartError, StopError, StreamError
from log_feed import LogFeed

log = logging.getLogger(__name__)

CLIENT_ERRORS = (docker.errors.DockerException, requests.exceptions.RequestException)


@dataclass(frozen=True)
class ContainerRef:
    """Operator-given name plus the id Docker assigned to it."""
    name: str
    id: str

    @property
    def short_id(self) -> str:
        return self.id[:12]


def _not_modified(err) -> bool:
    """304 or 'is not running'/'already started' replies mean nothing had to change."""
    if isinstance(err, docker.errors.APIError):
        if err.status_code == 304:
            return True
        text = str(err.explanation or err).lower()
        return 'is not running' in text or 'already started' in text
    return False


class DockerGateway:
    def __init__(self, client=None):
        if client is None:
            try:
                client = docker.from_env()
            except CLIENT_ERRORS as e:
                raise GatewayError(f"Error initializing Docker client: {e}") from e
        self.client = client

    def _get(self, container_id):
        return self.client.containers.get(container_id)

    def resolve(self, name) -> ContainerRef:
        """Look up a running container by name or id."""
        try:
            container = self._get(name)
        except docker.errors.NotFound as e:
            raise NotFound(f"container {name} not found or not running") from e
        except CLIENT_ERRORS as e:
            raise GatewayError(f"Error inspecting container {name}: {e}") from e
        if container.status != 'running':
            raise NotFound(f"container {name} not found or not running (status: {container.status})")
        return ContainerRef(name=name, id=container.id)

    def open_log_stream(self, container_id, tail=1) -> LogFeed:
        """
        Follow stdout and stderr of the container, starting from the last
        `tail` lines already logged. The returned feed never rewinds; open a
        new one to resume after it ends.
        """
        try:
            container = self._get(container_id)
            raw = container.logs(stream=True, follow=True, stdout=True, stderr=True,
                                 timestamps=False, tail=tail)
        except CLIENT_ERRORS as e:
            raise StreamError(f"Error fetching logs for container {container_id}: {e}") from e
        return LogFeed(raw, container_id)

    def stop(self, container_id, timeout=None):
        kwargs = {} if timeout is None else {'timeout': timeout}
        try:
            self._get(container_id).stop(**kwargs)
        except CLIENT_ERRORS as e:
            if _not_modified(e):
                log.info(f"[{container_id[:12]}] Container already stopped")
                return
            raise StopError(f"Error stopping container {container_id}: {e}") from e

    def start(self, container_id):
        try:
            self._get(container_id).start()
        except CLIENT_ERRORS as e:
            if _not_modified(e):
                log.info(f"[{container_id[:12]}] Container already running")
                return
            raise StartError(f"Error starting container {container_id}: {e}") from e
