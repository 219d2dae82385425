"""Representation of the build units to deploy.

A build plan is the ordered list of build units produced by a build, each
with its project descriptor, main artifact and attachments already on disk.
The plan may be serialized as YAML and handed to the command line tool, e.g.

    units:
    - groupId: org.example
      artifactId: app
      version: 1.0-SNAPSHOT
      packaging: jar
      pomFile: pom.xml
      file: target/app-1.0-SNAPSHOT.jar
      attached:
      - classifier: sources
        file: target/app-1.0-SNAPSHOT-sources.jar
"""

from dataclasses import dataclass, field, replace
import logging
from pathlib import Path
from typing import Any, cast

import aiofiles
from mashumaro import DataClassDictMixin, field_options
from mashumaro.codecs.yaml import yaml_decode, yaml_encode
from mashumaro.config import BaseConfig
from mashumaro.exceptions import InvalidFieldValue, MissingField
import yaml

from .artifact import (
    ArtifactRecord,
    METADATA_PACKAGING,
    extension_for_packaging,
    is_snapshot,
)
from .exceptions import InputException

__all__ = [
    "read_build_plan",
    "write_build_plan",
    "BuildPlan",
    "BuildUnit",
    "AttachedArtifact",
]

_LOGGER = logging.getLogger(__name__)


@dataclass
class BaseManifest(DataClassDictMixin):
    """Base class for all manifest objects."""

    def compact_dict(self) -> dict[str, Any]:
        """Return a compact dictionary representation of the object."""
        return self.to_dict()

    @classmethod
    def parse_yaml(cls, content: str) -> "BaseManifest":
        """Parse a serialized manifest."""
        return yaml_decode(content, cls)

    def yaml(self) -> str:
        """Return a YAML string representation of the object."""
        return yaml_encode(self, self.__class__)  # type: ignore[return-value]

    class Config(BaseConfig):
        omit_none = True
        serialize_by_alias = True


def _resolve(base: Path, path: Path | None) -> Path | None:
    if path is None or path.is_absolute():
        return path
    return base / path


@dataclass
class AttachedArtifact(BaseManifest):
    """An artifact attached to a build unit, e.g. sources or javadoc."""

    file: Path | None = None
    """Local path of the attached file."""

    classifier: str | None = None
    """Classifier of the attachment."""

    extension: str = "jar"
    """File extension of the attachment."""

    artifact_id: str | None = field(
        default=None, metadata=field_options(alias="artifactId")
    )
    """Overrides the artifactId of the owning unit."""

    group_id: str | None = field(default=None, metadata=field_options(alias="groupId"))
    """Overrides the groupId of the owning unit."""

    version: str | None = None
    """Overrides the version of the owning unit."""


@dataclass
class BuildUnit(BaseManifest):
    """One module's set of deployable artifacts."""

    group_id: str = field(metadata=field_options(alias="groupId"))
    """The groupId of the unit."""

    artifact_id: str = field(metadata=field_options(alias="artifactId"))
    """The artifactId of the unit."""

    version: str
    """The version of the unit."""

    packaging: str = "jar"
    """The packaging type, which determines the main artifact extension."""

    pom_file: Path | None = field(default=None, metadata=field_options(alias="pomFile"))
    """Path to the project descriptor."""

    file: Path | None = None
    """Path to the main artifact, unset when the packaging step assigned none."""

    attached: list[AttachedArtifact] = field(default_factory=list)
    """Attached artifacts in declaration order."""

    distribution: str | None = None
    """Default destination declared by the unit in `id::url` form."""

    deploy: bool = True
    """Whether this unit participates in deployment."""

    skip: str | bool | None = None
    """Per-unit override of the skip policy."""

    @property
    def coordinates(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"

    @property
    def is_snapshot(self) -> bool:
        return is_snapshot(self.version)

    @property
    def is_metadata_only(self) -> bool:
        """Return true for units whose packaging carries only the descriptor."""
        return self.packaging in METADATA_PACKAGING

    def pom_artifact(self) -> ArtifactRecord:
        """Return the record for the project descriptor."""
        return ArtifactRecord(
            group_id=self.group_id,
            artifact_id=self.artifact_id,
            version=self.version,
            extension="pom",
            file=self.pom_file,
        )

    def primary_artifact(self) -> ArtifactRecord:
        """Return the record for the main artifact.

        For metadata only packaging this has the same coordinates as the
        project descriptor.
        """
        return ArtifactRecord(
            group_id=self.group_id,
            artifact_id=self.artifact_id,
            version=self.version,
            extension=extension_for_packaging(self.packaging),
            file=self.file,
        )

    def attached_artifacts(self) -> list[ArtifactRecord]:
        """Return records for the attached artifacts in declaration order."""
        return [
            ArtifactRecord(
                group_id=attached.group_id or self.group_id,
                artifact_id=attached.artifact_id or self.artifact_id,
                version=attached.version or self.version,
                classifier=attached.classifier,
                extension=attached.extension,
                file=attached.file,
            )
            for attached in self.attached
        ]

    def relative_to(self, base: Path) -> "BuildUnit":
        """Return a copy with relative file paths resolved against base."""
        return replace(
            self,
            pom_file=_resolve(base, self.pom_file),
            file=_resolve(base, self.file),
            attached=[
                replace(attached, file=_resolve(base, attached.file))
                for attached in self.attached
            ],
        )

    def __str__(self) -> str:
        return self.coordinates


@dataclass
class BuildPlan(BaseManifest):
    """The ordered build units of a build and optional deploy configuration."""

    units: list[BuildUnit] = field(default_factory=list)
    """Build units in build order."""

    config: dict[str, Any] | None = None
    """Deploy configuration values, see `oci_deploy.config.DeployConfig`."""


async def read_build_plan(plan_path: Path) -> BuildPlan:
    """Return the contents of a serialized build plan file.

    Relative file paths in the plan are resolved against the directory that
    contains the plan.
    """
    async with aiofiles.open(str(plan_path)) as plan_file:
        content = await plan_file.read()
    if not content:
        raise InputException(f"Build plan file {plan_path} is empty")
    try:
        plan = cast(BuildPlan, BuildPlan.parse_yaml(content))
    except (InvalidFieldValue, MissingField, TypeError, yaml.YAMLError) as err:
        raise InputException(f"Invalid build plan file {plan_path}: {err}") from err
    base = plan_path.parent.resolve()
    plan.units = [unit.relative_to(base) for unit in plan.units]
    _LOGGER.debug("Read %d build units from %s", len(plan.units), plan_path)
    return plan


async def write_build_plan(plan_path: Path, plan: BuildPlan) -> None:
    """Write the specified build plan content to disk."""
    content = plan.yaml()
    async with aiofiles.open(str(plan_path), mode="w") as plan_file:
        await plan_file.write(content)
