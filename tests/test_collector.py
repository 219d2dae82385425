"""Tests for collecting the artifacts of a build unit."""

from collections.abc import Callable
import logging

import pytest

from oci_deploy.collector import collect_artifacts
from oci_deploy.exceptions import (
    IncompleteProjectError,
    MissingPomError,
    NoArtifactFileError,
)
from oci_deploy.manifest import BuildUnit

UnitFactory = Callable[..., BuildUnit]


def test_collect_jar(make_unit: UnitFactory) -> None:
    """Test a unit with a main file yields the POM then the main artifact."""
    unit = make_unit()
    artifacts = collect_artifacts(unit)
    assert [str(a) for a in artifacts] == [
        "g:a:pom:1.0-SNAPSHOT",
        "g:a:jar:1.0-SNAPSHOT",
    ]
    assert artifacts[0].file == unit.pom_file
    assert artifacts[1].file == unit.file


def test_collect_attachments_in_order(make_unit: UnitFactory) -> None:
    """Test attachments follow the main artifact in declaration order."""
    unit = make_unit(
        attached=[
            {"classifier": "sources"},
            {"classifier": "javadoc"},
            {"artifact_id": "a-0"},
        ]
    )
    assert [str(a) for a in collect_artifacts(unit)] == [
        "g:a:pom:1.0-SNAPSHOT",
        "g:a:jar:1.0-SNAPSHOT",
        "g:a:jar:sources:1.0-SNAPSHOT",
        "g:a:jar:javadoc:1.0-SNAPSHOT",
        "g:a-0:jar:1.0-SNAPSHOT",
    ]


@pytest.mark.parametrize("packaging", ["pom", "bom"])
def test_collect_metadata_only(make_unit: UnitFactory, packaging: str) -> None:
    """Test the POM and the main artifact collapse for metadata only packaging."""
    unit = make_unit(packaging=packaging, with_file=False)
    artifacts = collect_artifacts(unit)
    assert [str(a) for a in artifacts] == ["g:a:pom:1.0-SNAPSHOT"]
    assert artifacts[0].file == unit.pom_file


def test_collect_metadata_only_prefers_main_file(make_unit: UnitFactory) -> None:
    """Test the collapsed record uses the main file when one was assigned."""
    unit = make_unit(packaging="pom", with_pom=False)
    artifacts = collect_artifacts(unit)
    assert len(artifacts) == 1
    assert artifacts[0].file == unit.file


def test_collect_metadata_only_with_attachments(make_unit: UnitFactory) -> None:
    """Test attachments of a metadata only unit are collected."""
    unit = make_unit(
        packaging="pom", with_file=False, attached=[{"classifier": "cyclonedx"}]
    )
    assert [str(a) for a in collect_artifacts(unit)] == [
        "g:a:pom:1.0-SNAPSHOT",
        "g:a:jar:cyclonedx:1.0-SNAPSHOT",
    ]


def test_missing_pom(make_unit: UnitFactory) -> None:
    """Test a unit without a POM file fails."""
    unit = make_unit(with_pom=False)
    with pytest.raises(
        MissingPomError, match="^The POM for project a could not be attached$"
    ):
        collect_artifacts(unit)


def test_no_artifact_file(make_unit: UnitFactory) -> None:
    """Test a unit without a main file or attachments fails."""
    unit = make_unit(artifact_id="app", with_file=False)
    with pytest.raises(NoArtifactFileError) as exc_info:
        collect_artifacts(unit)
    assert str(exc_info.value) == (
        "The packaging plugin for project app did not assign a file to the "
        "build artifact"
    )


def test_incomplete_project(make_unit: UnitFactory) -> None:
    """Test a unit with attachments but no main file fails by default."""
    unit = make_unit(with_file=False, attached=[{"classifier": "sources"}])
    with pytest.raises(IncompleteProjectError) as exc_info:
        collect_artifacts(unit)
    assert str(exc_info.value) == (
        "The packaging plugin for project a did not assign a main file to the "
        "project but it has attachments. Change packaging to 'pom'."
    )


def test_allow_incomplete_project(
    make_unit: UnitFactory, caplog: pytest.LogCaptureFixture
) -> None:
    """Test incomplete units are collected with a warning when allowed."""
    unit = make_unit(with_file=False, attached=[{"classifier": "sources"}])
    with caplog.at_level(logging.WARNING):
        artifacts = collect_artifacts(unit, allow_incomplete=True)
    assert [str(a) for a in artifacts] == [
        "g:a:pom:1.0-SNAPSHOT",
        "g:a:jar:sources:1.0-SNAPSHOT",
    ]
    assert "did not assign a main file" in caplog.text
    assert "will fail in future Maven versions" in caplog.text


def test_attachment_without_file(
    make_unit: UnitFactory, caplog: pytest.LogCaptureFixture
) -> None:
    """Test attachments whose file does not exist are skipped."""
    unit = make_unit(
        attached=[{"classifier": "sources", "missing": True}, {"classifier": "docs"}]
    )
    with caplog.at_level(logging.WARNING):
        artifacts = collect_artifacts(unit)
    assert [str(a) for a in artifacts] == [
        "g:a:pom:1.0-SNAPSHOT",
        "g:a:jar:1.0-SNAPSHOT",
        "g:a:jar:docs:1.0-SNAPSHOT",
    ]
    assert "Skipping attached artifact with no file: g:a:jar:sources" in caplog.text
