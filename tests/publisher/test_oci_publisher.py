"""Tests for the OCI registry publisher."""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock, create_autospec

import pytest

from oci_deploy.collector import collect_artifacts
from oci_deploy.config import DeployConfig, PublisherType
from oci_deploy.destination import Destination
from oci_deploy.exceptions import ConfigError, RegistryPushError
from oci_deploy.manifest import BuildUnit
from oci_deploy.oci import OCIPackager, PushResult
from oci_deploy.orchestrator import Orchestrator
from oci_deploy.publisher import (
    LocalDirectoryPublisher,
    OCIRegistryPublisher,
    PushRequest,
    RemoteRepositoryPublisher,
    create_publisher,
)

UnitFactory = Callable[..., BuildUnit]

IMAGE_REPO = "registry.example.com/org/artifacts"


@pytest.fixture(name="packager")
def packager_fixture() -> MagicMock:
    """Fixture for a packager that records pushes without a registry."""
    packager = create_autospec(OCIPackager, instance=True)
    packager.push.side_effect = lambda root, repo, tag: PushResult(
        reference=f"{repo}:{tag}", digest="sha256:abcd", files=6
    )
    return packager


def test_target(tmp_path: Path, packager: MagicMock) -> None:
    """Test classic destinations are published to the configured image repo."""
    publisher = OCIRegistryPublisher(tmp_path, packager, image_repo=IMAGE_REPO)
    default = Destination("oci", f"oci://{IMAGE_REPO}")
    assert publisher.default_destination == default
    assert publisher.target(Destination("releases", "https://localhost")) == default

    direct = Destination("other", "oci://ghcr.io/example/other")
    assert publisher.target(direct) == direct


def test_target_without_image_repo(tmp_path: Path, packager: MagicMock) -> None:
    """Test classic destinations can't be published without an image repo."""
    publisher = OCIRegistryPublisher(tmp_path, packager)
    assert publisher.default_destination is None
    with pytest.raises(ConfigError, match="no imageRepo is configured"):
        publisher.target(Destination("releases", "https://localhost"))


async def test_publish(
    tmp_path: Path, packager: MagicMock, make_unit: UnitFactory
) -> None:
    """Test a request is staged into a clean directory and pushed."""
    staging_dir = tmp_path / "staging"
    stale = staging_dir / "g/old/1.0/old-1.0.jar"
    stale.parent.mkdir(parents=True)
    stale.write_bytes(b"stale")

    publisher = OCIRegistryPublisher(
        staging_dir, packager, image_repo=IMAGE_REPO, image_tag="v1"
    )
    unit = make_unit(version="1.0")
    request = PushRequest(publisher.default_destination).extend(
        unit.coordinates, collect_artifacts(unit)
    )
    result = await publisher.publish(request)

    packager.push.assert_called_once_with(staging_dir, IMAGE_REPO, "v1")
    assert result.location == f"{IMAGE_REPO}:v1"
    assert result.digest == "sha256:abcd"
    assert result.units == ("g:a:1.0",)
    assert not stale.exists()
    assert publisher.staging.list_files() == sorted(result.files)


async def test_publish_oci_destination(
    tmp_path: Path, packager: MagicMock, make_unit: UnitFactory
) -> None:
    """Test an oci:// destination names the image repository."""
    publisher = OCIRegistryPublisher(tmp_path / "staging", packager)
    unit = make_unit(version="1.0")
    destination = Destination("ghcr", "oci://ghcr.io/example/other")
    await publisher.publish(PushRequest(destination, tuple(collect_artifacts(unit))))
    packager.push.assert_called_once_with(
        tmp_path / "staging", "ghcr.io/example/other", "latest"
    )


async def test_publish_retry(
    tmp_path: Path, packager: MagicMock, make_unit: UnitFactory
) -> None:
    """Test a failed push is retried with freshly staged files."""
    packager.push.side_effect = [
        RegistryPushError(f"{IMAGE_REPO}:latest", "connection reset"),
        PushResult(reference=f"{IMAGE_REPO}:latest", digest=None, files=6),
    ]
    publisher = OCIRegistryPublisher(
        tmp_path / "staging", packager, image_repo=IMAGE_REPO, retries=2
    )
    unit = make_unit(version="1.0")
    result = await publisher.publish(
        PushRequest(publisher.default_destination, tuple(collect_artifacts(unit)))
    )
    assert packager.push.call_count == 2
    assert result.digest is None


def test_create_publisher(tmp_path: Path) -> None:
    """Test the publisher is selected by the configuration."""
    config = DeployConfig(
        image_repo=IMAGE_REPO, staging_dir=tmp_path, retry_failed_deployment_count=3
    )
    publisher = create_publisher(config)
    assert isinstance(publisher, OCIRegistryPublisher)
    assert publisher.default_destination == Destination("oci", f"oci://{IMAGE_REPO}")

    publisher = create_publisher(config.merge({"publisher": PublisherType.LOCAL}))
    assert isinstance(publisher, LocalDirectoryPublisher)

    publisher = create_publisher(config.merge({"publisher": PublisherType.REMOTE}))
    assert isinstance(publisher, RemoteRepositoryPublisher)


async def test_deploy_immediately_pushes_each_unit(
    tmp_path: Path, packager: MagicMock, make_unit: UnitFactory
) -> None:
    """Test each unit replaces the tag when not deploying at the end."""
    staging_dir = tmp_path / "staging"
    pushed: list[list[str]] = []

    def _push(root: Path, repo: str, tag: str) -> PushResult:
        pushed.append(
            sorted(p.relative_to(root).as_posix() for p in root.rglob("*.jar"))
        )
        return PushResult(reference=f"{repo}:{tag}", digest="sha256:abcd", files=6)

    packager.push.side_effect = _push
    publisher = OCIRegistryPublisher(staging_dir, packager, image_repo=IMAGE_REPO)
    units = [
        make_unit(artifact_id="a", version="1.0"),
        make_unit(artifact_id="b", version="1.0"),
    ]

    await Orchestrator(publisher).run(units)
    assert [call.args[1:] for call in packager.push.call_args_list] == [
        (IMAGE_REPO, "latest"),
        (IMAGE_REPO, "latest"),
    ]
    assert pushed == [["g/a/1.0/a-1.0.jar"], ["g/b/1.0/b-1.0.jar"]]

    packager.push.reset_mock()
    pushed.clear()
    await Orchestrator(publisher, DeployConfig(deploy_at_end=True)).run(units)
    assert packager.push.call_count == 1
    assert pushed == [["g/a/1.0/a-1.0.jar", "g/b/1.0/b-1.0.jar"]]
