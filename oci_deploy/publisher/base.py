"""Base publisher and push request types."""

from abc import ABC, abstractmethod
import asyncio
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
import logging

from oci_deploy.artifact import ArtifactRecord
from oci_deploy.config import DEFAULT_TIMEOUT
from oci_deploy.context import trace_context
from oci_deploy.destination import Destination
from oci_deploy.exceptions import PublishError

__all__ = [
    "Publisher",
    "PublishResult",
    "PushRequest",
]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class PushRequest:
    """The grouped set of artifacts destined for one destination."""

    destination: Destination
    """Where the artifacts are published."""

    artifacts: tuple[ArtifactRecord, ...] = ()
    """Artifacts in the order they were added."""

    units: tuple[str, ...] = ()
    """Coordinates of the build units contributing artifacts."""

    def extend(self, unit: str, artifacts: Iterable[ArtifactRecord]) -> "PushRequest":
        """Return a new request with the artifacts of another unit appended."""
        return replace(
            self,
            artifacts=self.artifacts + tuple(artifacts),
            units=self.units + (unit,),
        )


@dataclass(frozen=True)
class PublishResult:
    """Result of publishing a push request."""

    destination: Destination
    """Destination of the request."""

    location: str
    """Directory, URL or image reference the artifacts were published to."""

    files: list[str] = field(default_factory=list)
    """Relative repository paths of the published files."""

    digest: str | None = None
    """Content digest, for publishers that produce one."""

    units: tuple[str, ...] = ()
    """Coordinates of the build units that were published."""


class Publisher(ABC):
    """Publishes push requests to a destination.

    Publishing is blocking I/O that runs in a worker thread. Each attempt is
    bounded by the timeout and failed attempts are retried up to the
    configured count. An attempt that times out fails, but the next attempt
    starts only once its worker thread has returned, so staged files are
    never shared by two attempts. Cancellation aborts the wait for the
    current attempt and leaves any staged files in place.
    """

    name: str = "publisher"

    resolves_destination: bool = True
    """False for publishers that ignore the destination of a build unit."""

    def __init__(self, retries: int = 1, timeout: float = DEFAULT_TIMEOUT) -> None:
        """Initialize Publisher."""
        self._retries = max(1, retries)
        self._timeout = timeout

    @property
    def default_destination(self) -> Destination | None:
        """Destination used when none is configured for a build unit."""
        return None

    def target(self, destination: Destination) -> Destination:
        """Return the destination a resolved destination is published to."""
        return destination

    @abstractmethod
    def publish_sync(self, request: PushRequest) -> PublishResult:
        """Publish the request, blocking until complete."""

    async def _attempt(self, request: PushRequest) -> PublishResult:
        worker = asyncio.ensure_future(asyncio.to_thread(self.publish_sync, request))
        try:
            return await asyncio.wait_for(asyncio.shield(worker), self._timeout)
        except asyncio.TimeoutError as err:
            # The thread can't be interrupted; staging stays owned by it until done.
            _LOGGER.warning(
                "Publishing to %s timed out after %ss, waiting for the attempt to stop",
                request.destination,
                self._timeout,
            )
            try:
                await worker
            except Exception as worker_err:  # pylint: disable=broad-except
                _LOGGER.debug("Timed out attempt failed: %s", worker_err)
            raise PublishError(
                f"Publishing to {request.destination} timed out after {self._timeout}s"
            ) from err

    async def publish(self, request: PushRequest) -> PublishResult:
        """Publish the request, retrying failed attempts."""
        _LOGGER.info(
            "Publishing %d artifacts to %s with %s",
            len(request.artifacts),
            request.destination,
            self.name,
        )
        attempt = 1
        while True:
            try:
                with trace_context(f"Publish {request.destination.id}"):
                    result = await self._attempt(request)
                return replace(result, units=request.units)
            except PublishError as err:
                if attempt >= self._retries:
                    raise
                _LOGGER.warning(
                    "Publish attempt %d of %d failed: %s", attempt, self._retries, err
                )
                attempt += 1
