"""Publisher that pushes artifacts to an OCI registry.

The artifacts of a push request are staged into a fresh repository layout,
then the staging directory is pushed as a single OCI artifact. The staging
directory is cleared before every push so that each pushed artifact holds
exactly the files of one request, and is left in place afterwards for
inspection.
"""

from collections.abc import Iterable
import logging
from pathlib import Path

from oci_deploy.config import DEFAULT_TIMEOUT
from oci_deploy.destination import Destination
from oci_deploy.exceptions import ConfigError
from oci_deploy.layout import DEFAULT_ALGORITHMS
from oci_deploy.oci import OCIPackager
from oci_deploy.staging import StagingRepository

from .base import Publisher, PublishResult, PushRequest

__all__ = ["OCIRegistryPublisher"]

_LOGGER = logging.getLogger(__name__)

OCI_SCHEME = "oci"
OCI_DESTINATION_ID = "oci"


class OCIRegistryPublisher(Publisher):
    """Pushes staged repository layouts to an OCI registry."""

    name = "oci"

    def __init__(
        self,
        staging_dir: Path,
        packager: OCIPackager,
        image_repo: str | None = None,
        image_tag: str = "latest",
        algorithms: Iterable[str] = DEFAULT_ALGORITHMS,
        retries: int = 1,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize OCIRegistryPublisher."""
        super().__init__(retries, timeout)
        self._staging = StagingRepository(staging_dir, algorithms)
        self._packager = packager
        self._image_repo = image_repo
        self._image_tag = image_tag

    @property
    def staging(self) -> StagingRepository:
        return self._staging

    @property
    def default_destination(self) -> Destination | None:
        if not self._image_repo:
            return None
        return Destination(
            id=OCI_DESTINATION_ID, url=f"{OCI_SCHEME}://{self._image_repo}"
        )

    def target(self, destination: Destination) -> Destination:
        """Return the registry destination for a resolved destination.

        An `oci://` destination names the image repository directly. Any
        other destination is published to the configured image repository.
        """
        if destination.scheme == OCI_SCHEME:
            return destination
        if (default := self.default_destination) is None:
            raise ConfigError(
                f"Destination {destination} is not an oci:// reference and no "
                "imageRepo is configured"
            )
        return default

    def publish_sync(self, request: PushRequest) -> PublishResult:
        destination = self.target(request.destination)
        image_repo = destination.url.removeprefix(f"{OCI_SCHEME}://")
        self._staging.clear()
        written = self._staging.stage(request.artifacts)
        result = self._packager.push(self._staging.root, image_repo, self._image_tag)
        return PublishResult(
            destination=request.destination,
            location=result.reference,
            files=[path.relative_to(self._staging.root).as_posix() for path in written],
            digest=result.digest,
        )
