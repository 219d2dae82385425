"""Collects the artifacts of a build unit to publish.

The project descriptor and the main artifact share coordinates for metadata
only units (e.g. aggregators with `pom` packaging) and collapse into a single
record. A unit that declares a packaging with a main file but was not
assigned one is "incomplete".
"""

import logging

from .artifact import ArtifactRecord
from .exceptions import IncompleteProjectError, MissingPomError, NoArtifactFileError
from .manifest import BuildUnit

__all__ = ["collect_artifacts"]

_LOGGER = logging.getLogger(__name__)


def collect_artifacts(
    unit: BuildUnit, allow_incomplete: bool = False
) -> list[ArtifactRecord]:
    """Return the ordered artifact records to publish for a build unit."""
    pom_artifact = unit.pom_artifact()
    primary: ArtifactRecord | None = unit.primary_artifact()

    if primary is not None and pom_artifact.same_id(primary):
        if primary.has_file:
            pom_artifact = primary
        primary = None

    if not pom_artifact.has_file:
        raise MissingPomError(unit.artifact_id)

    result = [pom_artifact]
    attached = unit.attached_artifacts()

    if primary is not None:
        if primary.has_file:
            result.append(primary)
        elif attached:
            if not allow_incomplete:
                raise IncompleteProjectError(unit.artifact_id)
            _LOGGER.warning(
                "The packaging plugin for project %s did not assign a main file "
                "to the project but it has attachments. Change packaging to 'pom'.",
                unit.artifact_id,
            )
            _LOGGER.warning(
                "Incomplete projects like this will fail in future Maven versions!"
            )
        else:
            raise NoArtifactFileError(unit.artifact_id)

    for artifact in attached:
        if not artifact.has_file:
            _LOGGER.warning("Skipping attached artifact with no file: %s", artifact)
            continue
        _LOGGER.debug("Attaching for deploy: %s", artifact)
        result.append(artifact)
    return result
