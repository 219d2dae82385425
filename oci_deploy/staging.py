"""Staging repository management.

A staging repository is a local directory in the standard repository layout
that holds artifacts before they are published. It is disposable: it may be
cleared and rebuilt between publish cycles, or reused so that repository
metadata accumulates across deploys to the same destination. There is no
locking, callers are expected to sequence access.
"""

from collections.abc import Iterable
import logging
from pathlib import Path
from shutil import rmtree

from slugify import slugify

from .artifact import ArtifactRecord
from .exceptions import StagingIOError
from .layout import DEFAULT_ALGORITHMS, LayoutWriter

__all__ = ["StagingRepository"]

_LOGGER = logging.getLogger(__name__)


class StagingRepository:
    """A local directory materializing the repository layout."""

    def __init__(
        self,
        root: Path,
        algorithms: Iterable[str] = DEFAULT_ALGORITHMS,
        update_metadata: bool = True,
    ) -> None:
        """Initialize the staging repository."""
        self._root = root
        self._writer = LayoutWriter(root, algorithms, update_metadata=update_metadata)

    @classmethod
    def for_destination(
        cls,
        parent: Path,
        destination_id: str,
        algorithms: Iterable[str] = DEFAULT_ALGORITHMS,
    ) -> "StagingRepository":
        """Return a staging repository in a readable subdirectory of parent.

        e.g. /target/staging/my-releases for a destination `my-releases::...`
        """
        slug = slugify(destination_id, max_length=50, lowercase=True, separator="-")
        return cls(parent / (slug or "default"), algorithms)

    @property
    def root(self) -> Path:
        return self._root

    def exists(self) -> bool:
        return self._root.is_dir()

    def ensure(self) -> Path:
        """Create the root directory if it does not exist."""
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as err:
            raise StagingIOError(str(self._root), str(err)) from err
        return self._root

    def clear(self) -> None:
        """Delete all contents of the staging repository."""
        if self._root.exists():
            _LOGGER.info("Cleaning up staging repository: %s", self._root)
            try:
                rmtree(self._root)
            except OSError as err:
                raise StagingIOError(str(self._root), str(err)) from err
        self.ensure()

    def stage(self, artifacts: Iterable[ArtifactRecord]) -> list[Path]:
        """Write the artifacts into the repository, returning the written files."""
        self.ensure()
        written = self._writer.write(artifacts)
        _LOGGER.info("Staged %d files in %s", len(written), self._root)
        return written

    def list_files(self) -> list[str]:
        """Return the sorted relative paths of every regular file."""
        if not self.exists():
            return []
        return sorted(
            path.relative_to(self._root).as_posix()
            for path in self._root.rglob("*")
            if path.is_file()
        )
