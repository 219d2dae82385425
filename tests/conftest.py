"""Shared fixtures for oci-deploy tests."""

from collections.abc import Callable, Generator
import logging
from pathlib import Path
from typing import Any

import pytest

from oci_deploy import context
from oci_deploy.manifest import AttachedArtifact, BuildUnit

_LOGGER = logging.getLogger(__name__)

# Global collector for the whole session
SESSION_COLLECTOR = context.TraceCollector()

UnitFactory = Callable[..., BuildUnit]


@pytest.fixture(autouse=True)
def trace_capture() -> Generator[None, None, None]:
    """Capture traces for each test and add them to the session collector."""
    with context.get_trace_collector() as collector:
        yield
        for name, duration in collector.timings.items():
            SESSION_COLLECTOR.add(name, duration)


def pytest_sessionfinish(session: pytest.Session, exitstatus: int) -> None:
    """Print the trace summary at the end of the session."""
    if not SESSION_COLLECTOR.timings:
        return

    print("\n\n" + "=" * 20 + " PUBLISH TRACE SUMMARY " + "=" * 20)
    for name, duration in sorted(
        SESSION_COLLECTOR.timings.items(), key=lambda x: x[1], reverse=True
    ):
        count = SESSION_COLLECTOR.counts[name]
        print(f" - {name:<40}: {duration:>6.2f}s (count: {count:>3})")
    print("=" * 63 + "\n")


@pytest.fixture(name="build_dir")
def build_dir_fixture(tmp_path: Path) -> Path:
    """Directory holding the outputs of a fake build."""
    build_dir = tmp_path / "build"
    build_dir.mkdir()
    return build_dir


@pytest.fixture(name="make_unit")
def make_unit_fixture(build_dir: Path) -> UnitFactory:
    """Return a factory for build units with their files written to disk.

    Attachments are given as keyword dicts for `AttachedArtifact`, with an
    extra `missing` key to leave the attachment without a file.
    """

    def _make_unit(
        artifact_id: str = "a",
        group_id: str = "g",
        version: str = "1.0-SNAPSHOT",
        packaging: str = "jar",
        with_pom: bool = True,
        with_file: bool = True,
        attached: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> BuildUnit:
        unit_dir = build_dir / group_id / artifact_id / version
        unit_dir.mkdir(parents=True, exist_ok=True)

        pom_file: Path | None = None
        if with_pom:
            pom_file = unit_dir / "pom.xml"
            pom_file.write_text(
                f"<project><artifactId>{artifact_id}</artifactId></project>\n"
            )

        main_file: Path | None = None
        if with_file:
            main_file = unit_dir / f"{artifact_id}-{version}.{packaging}"
            main_file.write_bytes(f"{artifact_id} {version} main".encode())

        attachments = []
        for index, values in enumerate(attached or []):
            values = dict(values)
            missing = values.pop("missing", False)
            extension = values.get("extension", "jar")
            attachment_file = unit_dir / f"attached-{index}.{extension}"
            if not missing:
                attachment_file.write_bytes(f"{artifact_id} attached {index}".encode())
            attachments.append(AttachedArtifact(file=attachment_file, **values))

        return BuildUnit(
            group_id=group_id,
            artifact_id=artifact_id,
            version=version,
            packaging=packaging,
            pom_file=pom_file,
            file=main_file,
            attached=attachments,
            **kwargs,
        )

    return _make_unit
