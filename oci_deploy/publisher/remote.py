"""Publisher that deploys to a classic repository.

A `file://` repository is written in place. For an `http(s)://` repository
the artifacts are staged locally first, then each staged file is uploaded
with an HTTP PUT to the same relative path under the repository URL. Any
existing repository metadata is downloaded before staging so that version
listings accumulate.
"""

from collections.abc import Iterable
import logging
from pathlib import Path

import requests

from oci_deploy.artifact import ArtifactRecord
from oci_deploy.config import DEFAULT_TIMEOUT
from oci_deploy.destination import Destination
from oci_deploy.exceptions import PublishError, StagingIOError
from oci_deploy.layout import DEFAULT_ALGORITHMS, METADATA_FILENAME
from oci_deploy.staging import StagingRepository

from .base import Publisher, PublishResult, PushRequest

__all__ = ["RemoteRepositoryPublisher"]

_LOGGER = logging.getLogger(__name__)

HTTP_SCHEMES = {"http", "https"}


class RemoteRepositoryPublisher(Publisher):
    """Deploys artifacts to a repository addressed by URL."""

    name = "remote"

    def __init__(
        self,
        staging_dir: Path,
        username: str | None = None,
        password: str | None = None,
        algorithms: Iterable[str] = DEFAULT_ALGORITHMS,
        retries: int = 1,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize RemoteRepositoryPublisher."""
        super().__init__(retries, timeout)
        self._staging_dir = staging_dir
        self._algorithms = tuple(algorithms)
        self._auth = (username, password) if username and password else None

    def publish_sync(self, request: PushRequest) -> PublishResult:
        destination = request.destination
        if destination.is_file:
            return self._publish_directory(request, destination.local_path)
        if destination.scheme in HTTP_SCHEMES:
            return self._publish_http(request)
        raise PublishError(
            f"Unsupported repository URL scheme '{destination.scheme}' "
            f"for {destination}"
        )

    def _publish_directory(self, request: PushRequest, path: Path) -> PublishResult:
        repository = StagingRepository(path, self._algorithms)
        written = repository.stage(request.artifacts)
        return PublishResult(
            destination=request.destination,
            location=str(path),
            files=[p.relative_to(path).as_posix() for p in written],
        )

    def _publish_http(self, request: PushRequest) -> PublishResult:
        destination = request.destination
        staging = StagingRepository.for_destination(
            self._staging_dir, destination.id, self._algorithms
        )
        staging.clear()
        self._fetch_metadata(destination, staging, request.artifacts)
        written = staging.stage(request.artifacts)

        files = []
        with requests.Session() as session:
            session.auth = self._auth
            for path in written:
                relative = path.relative_to(staging.root).as_posix()
                self._upload(session, destination, relative, path)
                files.append(relative)
        return PublishResult(
            destination=destination, location=destination.url, files=files
        )

    def _url(self, destination: Destination, relative: str) -> str:
        return f"{destination.url.rstrip('/')}/{relative}"

    def _fetch_metadata(
        self,
        destination: Destination,
        staging: StagingRepository,
        artifacts: Iterable[ArtifactRecord],
    ) -> None:
        seen: set[str] = set()
        for artifact in artifacts:
            relative = "/".join(
                [*artifact.group_id.split("."), artifact.artifact_id, METADATA_FILENAME]
            )
            if relative in seen:
                continue
            seen.add(relative)
            url = self._url(destination, relative)
            try:
                response = requests.get(url, auth=self._auth, timeout=self._timeout)
            except requests.exceptions.RequestException as err:
                raise PublishError(f"Failed to download {url}: {err}") from err
            if response.status_code == 404:
                continue
            if not response.ok:
                raise PublishError(
                    f"Failed to download {url}: "
                    f"{response.status_code} {response.reason}"
                )
            target = staging.root / relative
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(response.content)
            except OSError as err:
                raise StagingIOError(str(target), str(err)) from err
            _LOGGER.debug("Downloaded existing metadata %s", url)

    def _upload(
        self,
        session: requests.Session,
        destination: Destination,
        relative: str,
        path: Path,
    ) -> None:
        url = self._url(destination, relative)
        _LOGGER.debug("Uploading %s to %s", path, url)
        try:
            with path.open("rb") as fd:
                response = session.put(url, data=fd, timeout=self._timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as err:
            raise PublishError(f"Failed to upload {url}: {err}") from err
