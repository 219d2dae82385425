"""Writes artifacts into a Maven repository directory layout.

Each artifact is copied to `group/path/artifactId/version/<file>` next to a
checksum file for each configured digest. Repository level metadata listing
the staged versions of each artifact is merged into `maven-metadata.xml` so
that repeated deploys into the same directory accumulate versions.
"""

from collections.abc import Iterable
import datetime
import hashlib
import logging
from pathlib import Path, PurePosixPath
import shutil
import xml.etree.ElementTree as ET

from .artifact import ArtifactRecord, is_snapshot
from .exceptions import ConfigError, StagingIOError

__all__ = [
    "LayoutWriter",
    "checksum_file",
    "DEFAULT_ALGORITHMS",
    "METADATA_FILENAME",
]

_LOGGER = logging.getLogger(__name__)

DEFAULT_ALGORITHMS = ("md5", "sha1")
SUPPORTED_ALGORITHMS = ("md5", "sha1", "sha256", "sha512")
REQUIRED_ALGORITHM = "sha1"
METADATA_FILENAME = "maven-metadata.xml"

_CHUNK_SIZE = 64 * 1024


def checksum_file(path: Path, algorithm: str) -> str:
    """Return the lowercase hex digest of the file contents."""
    digest = hashlib.new(algorithm)
    with path.open("rb") as fd:
        while chunk := fd.read(_CHUNK_SIZE):
            digest.update(chunk)
    return digest.hexdigest()


def checksum_algorithms(algorithms: Iterable[str]) -> tuple[str, ...]:
    """Validate the digests to write, always including sha1."""
    result: list[str] = []
    for algorithm in algorithms:
        algorithm = algorithm.lower().replace("-", "")
        if algorithm not in SUPPORTED_ALGORITHMS:
            raise ConfigError(
                f"Unsupported checksum algorithm '{algorithm}', expected one of "
                f"{', '.join(SUPPORTED_ALGORITHMS)}"
            )
        if algorithm not in result:
            result.append(algorithm)
    if REQUIRED_ALGORITHM not in result:
        result.append(REQUIRED_ALGORITHM)
    return tuple(result)


def _timestamp() -> str:
    return datetime.datetime.now(datetime.timezone.utc).strftime("%Y%m%d%H%M%S")


class LayoutWriter:
    """Writes artifact records into a repository layout rooted at a directory."""

    def __init__(
        self,
        root: Path,
        algorithms: Iterable[str] = DEFAULT_ALGORITHMS,
        update_metadata: bool = True,
    ) -> None:
        """Initialize LayoutWriter."""
        self._root = root
        self._algorithms = checksum_algorithms(algorithms)
        self._update_metadata = update_metadata

    @property
    def root(self) -> Path:
        return self._root

    @property
    def algorithms(self) -> tuple[str, ...]:
        return self._algorithms

    def target(self, relative_path: PurePosixPath) -> Path:
        return self._root.joinpath(*relative_path.parts)

    def write(self, artifacts: Iterable[ArtifactRecord]) -> list[Path]:
        """Write the artifacts and return every file that was written.

        Files written before a failure are left in place.
        """
        written: list[Path] = []
        versions: dict[tuple[str, str], list[str]] = {}
        for artifact in artifacts:
            written.extend(self._write_artifact(artifact))
            key = (artifact.group_id, artifact.artifact_id)
            if artifact.version not in versions.setdefault(key, []):
                versions[key].append(artifact.version)
        if self._update_metadata:
            for (group_id, artifact_id), new_versions in versions.items():
                written.extend(
                    self._write_metadata(group_id, artifact_id, new_versions)
                )
        return written

    def _write_artifact(self, artifact: ArtifactRecord) -> list[Path]:
        if artifact.file is None:
            raise StagingIOError(artifact.id, "Artifact has no file")
        target = self.target(artifact.path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(artifact.file, target)
        except OSError as err:
            raise StagingIOError(str(target), str(err)) from err
        _LOGGER.debug("Staged artifact %s to %s", artifact, target)
        written = [target]
        if artifact.checksum:
            written.extend(self._write_checksums(target))
        return written

    def _write_checksums(self, target: Path) -> list[Path]:
        written = []
        for algorithm in self._algorithms:
            checksum_path = target.with_name(f"{target.name}.{algorithm}")
            try:
                checksum_path.write_text(checksum_file(target, algorithm))
            except OSError as err:
                raise StagingIOError(str(checksum_path), str(err)) from err
            written.append(checksum_path)
        return written

    def _write_metadata(
        self, group_id: str, artifact_id: str, new_versions: list[str]
    ) -> list[Path]:
        path = self._root.joinpath(*group_id.split("."), artifact_id, METADATA_FILENAME)
        versions: list[str] = []
        if path.exists():
            try:
                existing = ET.parse(path).getroot()
            except (ET.ParseError, OSError) as err:
                raise StagingIOError(str(path), f"Invalid metadata: {err}") from err
            versions.extend(
                v.text
                for v in existing.iterfind("versioning/versions/version")
                if v.text
            )
        for version in new_versions:
            if version not in versions:
                versions.append(version)

        root = ET.Element("metadata")
        ET.SubElement(root, "groupId").text = group_id
        ET.SubElement(root, "artifactId").text = artifact_id
        versioning = ET.SubElement(root, "versioning")
        ET.SubElement(versioning, "latest").text = versions[-1]
        releases = [v for v in versions if not is_snapshot(v)]
        if releases:
            ET.SubElement(versioning, "release").text = releases[-1]
        versions_elem = ET.SubElement(versioning, "versions")
        for version in versions:
            ET.SubElement(versions_elem, "version").text = version
        ET.SubElement(versioning, "lastUpdated").text = _timestamp()
        ET.indent(root)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            ET.ElementTree(root).write(path, encoding="UTF-8", xml_declaration=True)
        except OSError as err:
            raise StagingIOError(str(path), str(err)) from err
        _LOGGER.debug("Updated repository metadata %s", path)
        return [path, *self._write_checksums(path)]
