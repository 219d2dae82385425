"""Configuration objects for oci-deploy.

Option names follow the deploy plugin parameters they replace, so a build
plan `config:` section may use e.g. `deployAtEnd` or `altDeploymentRepository`.
"""

from dataclasses import dataclass, field, fields
from enum import StrEnum
import logging
from pathlib import Path
from typing import Any

from mashumaro import DataClassDictMixin, field_options
from mashumaro.config import BaseConfig

from .artifact import is_snapshot
from .layout import DEFAULT_ALGORITHMS

__all__ = [
    "DeployConfig",
    "PublisherType",
    "SkipPolicy",
]

_LOGGER = logging.getLogger(__name__)

MIN_RETRIES = 1
MAX_RETRIES = 10
DEFAULT_TIMEOUT = 60.0


class SkipPolicy(StrEnum):
    """Which versions to skip deploying."""

    NEVER = "false"
    ALWAYS = "true"
    RELEASES = "releases"
    SNAPSHOTS = "snapshots"

    @classmethod
    def parse(cls, value: str | bool | None) -> "SkipPolicy":
        """Parse a skip value, anything unrecognized means do not skip."""
        if isinstance(value, bool):
            return cls.ALWAYS if value else cls.NEVER
        if value is None:
            return cls.NEVER
        value = value.strip().lower()
        if value == "true":
            return cls.ALWAYS
        if value in (cls.RELEASES.value, cls.SNAPSHOTS.value):
            return cls(value)
        return cls.NEVER

    def matches(self, version: str) -> bool:
        """Return true if a unit with this version should be skipped."""
        if self is SkipPolicy.ALWAYS:
            return True
        if self is SkipPolicy.RELEASES:
            return not is_snapshot(version)
        if self is SkipPolicy.SNAPSHOTS:
            return is_snapshot(version)
        return False


class PublisherType(StrEnum):
    """Where artifacts are published."""

    OCI = "oci"
    LOCAL = "local"
    REMOTE = "remote"


def _alias(name: str) -> dict[str, Any]:
    return field_options(alias=name)


@dataclass
class DeployConfig(DataClassDictMixin):
    """Configuration for a deploy run."""

    skip: str | bool = "false"
    """`true`, `releases`, `snapshots` or anything else to not skip."""

    deploy_at_end: bool = field(default=False, metadata=_alias("deployAtEnd"))
    """Defer deploying until every unit of the build has been processed."""

    allow_incomplete_projects: bool = field(
        default=False, metadata=_alias("allowIncompleteProjects")
    )
    """Warn instead of failing for units with attachments but no main file."""

    alt_deployment_repository: str | None = field(
        default=None, metadata=_alias("altDeploymentRepository")
    )
    alt_snapshot_deployment_repository: str | None = field(
        default=None, metadata=_alias("altSnapshotDeploymentRepository")
    )
    alt_release_deployment_repository: str | None = field(
        default=None, metadata=_alias("altReleaseDeploymentRepository")
    )

    image_repo: str | None = field(default=None, metadata=_alias("imageRepo"))
    """Fully qualified image repository, e.g. ghcr.io/example/artifacts."""

    image_tag: str = field(default="latest", metadata=_alias("imageTag"))

    registry_username: str | None = field(
        default=None, metadata=_alias("registryUsername")
    )
    registry_password: str | None = field(
        default=None, metadata=_alias("registryPassword")
    )
    insecure_tls_no_verify: bool = field(
        default=False, metadata=_alias("insecureTLSNoVerify")
    )

    retry_failed_deployment_count: int = field(
        default=1, metadata=_alias("retryFailedDeploymentCount")
    )
    """Attempts for each publish, pulled into the range 1-10."""

    timeout: float = DEFAULT_TIMEOUT
    """Seconds allowed for each publish attempt."""

    publisher: PublisherType = PublisherType.OCI

    staging_dir: Path = field(
        default=Path("target/oci-artifacts"), metadata=_alias("stagingDir")
    )
    """Staging repository pushed to the registry by the oci publisher."""

    deploy_local_directory: Path = field(
        default=Path("target/deploy-local"), metadata=_alias("deployLocalDirectory")
    )
    """Directory written by the local publisher."""

    checksum_algorithms: list[str] = field(
        default_factory=lambda: list(DEFAULT_ALGORITHMS),
        metadata=_alias("checksumAlgorithms"),
    )

    offline: bool = False
    """Fail instead of deploying."""

    class Config(BaseConfig):
        omit_none = True
        serialize_by_alias = True

    @property
    def skip_policy(self) -> SkipPolicy:
        return SkipPolicy.parse(self.skip)

    def __post_init__(self) -> None:
        count = self.retry_failed_deployment_count
        clamped = max(MIN_RETRIES, min(MAX_RETRIES, count))
        if clamped != count:
            _LOGGER.warning(
                "retryFailedDeploymentCount %d is outside the range %d-%d, using %d",
                count,
                MIN_RETRIES,
                MAX_RETRIES,
                clamped,
            )
            self.retry_failed_deployment_count = clamped

    @property
    def retries(self) -> int:
        """Return the number of attempts for each publish."""
        return self.retry_failed_deployment_count

    def merge(self, overrides: dict[str, Any]) -> "DeployConfig":
        """Return a new config with the non-None overrides applied.

        Override keys are the python attribute names.
        """
        names = {f.name for f in fields(self)}
        values = {k: v for k, v in overrides.items() if k in names and v is not None}
        current = {f.name: getattr(self, f.name) for f in fields(self)}
        return DeployConfig(**{**current, **values})
