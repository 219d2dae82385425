"""Artifact representation.

An artifact record is a single file to publish, addressed by Maven style
coordinates. Records are created from a build unit once its packaging step
has completed and are not mutated afterwards.
"""

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
import re

__all__ = [
    "ArtifactRecord",
    "extension_for_packaging",
    "is_snapshot",
]


SNAPSHOT = "SNAPSHOT"
# Timestamped snapshot versions e.g. 1.0-20240101.120000-3
TIMESTAMP_VERSION_PATTERN = re.compile(r"^(.*)-(\d{8}\.\d{6})-(\d+)$")

# Packaging types that only carry the project descriptor.
METADATA_PACKAGING = {"pom", "bom"}

PACKAGING_EXTENSIONS = {
    "pom": "pom",
    "bom": "pom",
    "jar": "jar",
    "maven-plugin": "jar",
    "ejb": "jar",
    "ejb-client": "jar",
    "bundle": "jar",
    "test-jar": "jar",
    "java-source": "jar",
    "javadoc": "jar",
}


def is_snapshot(version: str) -> bool:
    """Return true if the version is a snapshot version."""
    return version.endswith(SNAPSHOT) or bool(TIMESTAMP_VERSION_PATTERN.match(version))


def extension_for_packaging(packaging: str) -> str:
    """Return the file extension of the main artifact for a packaging type."""
    return PACKAGING_EXTENSIONS.get(packaging, packaging)


@dataclass(frozen=True, kw_only=True)
class ArtifactRecord:
    """A file to publish and its repository coordinates."""

    group_id: str
    """Group of the artifact, with dots."""

    artifact_id: str
    """Name of the artifact."""

    version: str
    """Version of the artifact."""

    extension: str
    """File extension of the artifact."""

    classifier: str | None = None
    """Optional classifier distinguishing attached artifacts."""

    file: Path | None = None
    """Local path of the file to publish."""

    checksum: bool = True
    """False for descriptors that are explicitly published without checksums."""

    @property
    def id(self) -> str:
        """Return the coordinates as a single string, excluding the file."""
        parts = [self.group_id, self.artifact_id, self.extension]
        if self.classifier:
            parts.append(self.classifier)
        parts.append(self.version)
        return ":".join(parts)

    @property
    def gav(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"

    @property
    def is_snapshot(self) -> bool:
        return is_snapshot(self.version)

    @property
    def has_file(self) -> bool:
        """Return true if the record is backed by a regular file."""
        return self.file is not None and self.file.is_file()

    def same_id(self, other: "ArtifactRecord") -> bool:
        """Compare coordinates only, since either record may not have a file."""
        return self.id == other.id

    @property
    def filename(self) -> str:
        name = f"{self.artifact_id}-{self.version}"
        if self.classifier:
            name += f"-{self.classifier}"
        return f"{name}.{self.extension}"

    @property
    def path(self) -> PurePosixPath:
        """Relative path of the artifact in a repository layout."""
        return (
            PurePosixPath(*self.group_id.split("."))
            / self.artifact_id
            / self.version
            / self.filename
        )

    def __str__(self) -> str:
        return self.id
