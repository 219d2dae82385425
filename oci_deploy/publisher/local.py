"""Publisher that deploys to a local directory as if it were a remote repository."""

from collections.abc import Iterable
import logging
from pathlib import Path

from oci_deploy.config import DEFAULT_TIMEOUT
from oci_deploy.destination import Destination
from oci_deploy.layout import DEFAULT_ALGORITHMS
from oci_deploy.staging import StagingRepository

from .base import Publisher, PublishResult, PushRequest

__all__ = ["LocalDirectoryPublisher"]

_LOGGER = logging.getLogger(__name__)

DEPLOY_LOCAL_ID = "deploy-local"


class LocalDirectoryPublisher(Publisher):
    """Writes artifacts into a local repository directory."""

    name = "local"
    resolves_destination = False

    def __init__(
        self,
        directory: Path,
        algorithms: Iterable[str] = DEFAULT_ALGORITHMS,
        retries: int = 1,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize LocalDirectoryPublisher."""
        super().__init__(retries, timeout)
        self._repository = StagingRepository(directory, algorithms)

    @property
    def repository(self) -> StagingRepository:
        return self._repository

    @property
    def default_destination(self) -> Destination:
        return Destination(
            id=DEPLOY_LOCAL_ID, url=self._repository.root.resolve().as_uri()
        )

    def publish_sync(self, request: PushRequest) -> PublishResult:
        root = self._repository.root
        written = self._repository.stage(request.artifacts)
        _LOGGER.info("Successfully deployed to local directory: %s", root.resolve())
        return PublishResult(
            destination=request.destination,
            location=str(root),
            files=[path.relative_to(root).as_posix() for path in written],
        )
