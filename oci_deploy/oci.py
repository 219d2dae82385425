"""Packages a staging repository as an OCI artifact.

The whole directory is pushed as the single layer of one OCI artifact. The
ORAS client bundles a directory into one gzipped tarball layer, so there is
no per-artifact granularity within the pushed artifact.
"""

from dataclasses import dataclass
import logging
from pathlib import Path

import requests
from oras.client import OrasClient
from oras.container import Container

from .exceptions import RegistryPushError

__all__ = [
    "OCIPackager",
    "PushResult",
]

_LOGGER = logging.getLogger(__name__)

DIGEST_HEADER = "Docker-Content-Digest"


@dataclass(frozen=True)
class PushResult:
    """Result of pushing an OCI artifact."""

    reference: str
    """The `repository:tag` that was pushed."""

    digest: str | None
    """Content digest reported by the registry."""

    files: int
    """Number of files contained in the pushed layer."""


class OCIPackager:
    """Pushes a directory tree to a registry as a single layer OCI artifact."""

    def __init__(
        self,
        username: str | None = None,
        password: str | None = None,
        insecure: bool = False,
        annotations: dict[str, str] | None = None,
    ) -> None:
        """Initialize OCIPackager.

        When both username and password are given they are used for basic
        authentication, otherwise the locally configured registry credentials
        are used.
        """
        self._username = username
        self._password = password
        self._insecure = insecure
        self._annotations = annotations or {}

    @property
    def has_credentials(self) -> bool:
        return bool(self._username) and bool(self._password)

    def push(
        self, root: Path, image_repo: str, image_tag: str = "latest"
    ) -> PushResult:
        """Push the contents of root to `image_repo:image_tag`."""
        reference = f"{image_repo}:{image_tag}"
        files = []
        if root.is_dir():
            files = [path for path in root.rglob("*") if path.is_file()]
        if not files:
            raise RegistryPushError(reference, f"No files to push in {root}")

        _LOGGER.info("Pushing artifact to registry: %s", reference)
        try:
            client = OrasClient(tls_verify=not self._insecure)
            if self.has_credentials:
                hostname = Container(reference).registry
                _LOGGER.info("Using authentication for registry %s", hostname)
                client.login(
                    hostname=hostname,
                    username=self._username,
                    password=self._password,
                    tls_verify=not self._insecure,
                )
            response = client.push(
                target=reference,
                files=[str(root)],
                disable_path_validation=True,
                manifest_annotations=self._annotations or None,
            )
        except (requests.exceptions.RequestException, ValueError, OSError) as err:
            raise RegistryPushError(reference, str(err)) from err

        digest = response.headers.get(DIGEST_HEADER) if response is not None else None
        _LOGGER.info("Pushed digest: %s", digest)
        return PushResult(reference=reference, digest=digest, files=len(files))
