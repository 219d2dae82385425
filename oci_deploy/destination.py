"""Resolution of the destination a build unit is deployed to.

Destinations are configured as strings in `id::url` form, or the legacy
`id::layout::url` form where only the `default` layout is accepted. The
strings are parsed into a `Destination` at the boundary and the parsed value
is used everywhere else, including as the key for grouping deferred deploys.
"""

from dataclasses import dataclass
import logging
from pathlib import Path
import re
from urllib.parse import unquote, urlparse

from .exceptions import InvalidDestinationSyntaxError, MissingDestinationError
from .manifest import BuildUnit

__all__ = [
    "Destination",
    "parse_destination",
    "resolve_destination",
]

_LOGGER = logging.getLogger(__name__)

ALT_LEGACY_REPO_SYNTAX_PATTERN = re.compile(r"(.+?)::(.+?)::(.+)")
ALT_REPO_SYNTAX_PATTERN = re.compile(r"(.+?)::(.+)")
DEFAULT_LAYOUT = "default"

MISSING_DESTINATION_MESSAGE = (
    "Deployment failed: repository element was not specified in the POM inside"
    " distributionManagement element or in -DaltDeploymentRepository=id::url parameter"
)


@dataclass(frozen=True, order=True)
class Destination:
    """A named repository to deploy to."""

    id: str
    """Identifier, used to look up credentials."""

    url: str
    """Location of the repository."""

    layout: str = DEFAULT_LAYOUT
    """Repository layout, only the default layout is supported."""

    @property
    def scheme(self) -> str:
        return urlparse(self.url).scheme

    @property
    def is_file(self) -> bool:
        """Return true if the destination is a directory on the local filesystem."""
        return self.scheme == "file"

    @property
    def local_path(self) -> Path:
        """Return the local directory for a `file://` destination."""
        if not self.is_file:
            raise ValueError(f"Destination {self} is not a local directory")
        return Path(unquote(urlparse(self.url).path))

    def __str__(self) -> str:
        return f"{self.id}::{self.url}"


def parse_destination(value: str, label: str = "alternative repository") -> Destination:
    """Parse a destination string in `id::url` or `id::layout::url` form."""
    if match := ALT_LEGACY_REPO_SYNTAX_PATTERN.fullmatch(value):
        repo_id = match.group(1).strip()
        layout = match.group(2).strip()
        url = match.group(3).strip()
        if layout != DEFAULT_LAYOUT:
            raise InvalidDestinationSyntaxError(
                f'Invalid legacy syntax and layout for {label}: "{value}". '
                f'Use "{repo_id}::{url}" instead, and only default layout is supported.'
            )
        _LOGGER.warning(
            'Using legacy syntax for %s. Use "%s::%s" instead.', label, repo_id, url
        )
        return Destination(id=repo_id, url=url)

    if not (match := ALT_REPO_SYNTAX_PATTERN.fullmatch(value)):
        raise InvalidDestinationSyntaxError(
            f'Invalid syntax for {label}: "{value}". Use "id::url".'
        )
    return Destination(id=match.group(1).strip(), url=match.group(2).strip())


def resolve_destination(
    unit: BuildUnit,
    alt_snapshot: str | None = None,
    alt_release: str | None = None,
    alt: str | None = None,
) -> Destination:
    """Return the destination for a unit considering the override strings.

    A snapshot or release specific override wins over the generic override,
    which in turn wins over the default declared by the unit.
    """
    if unit.is_snapshot and alt_snapshot:
        override = alt_snapshot
    elif not unit.is_snapshot and alt_release:
        override = alt_release
    else:
        override = alt

    if override:
        _LOGGER.info("Using alternate deployment repository %s", override)
        return parse_destination(override)

    if unit.distribution:
        return parse_destination(unit.distribution, label="distribution repository")

    raise MissingDestinationError(
        f"{MISSING_DESTINATION_MESSAGE} (project {unit.coordinates})"
    )
