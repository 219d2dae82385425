"""Tests for pushing a staging repository as an OCI artifact."""

from pathlib import Path
from unittest.mock import Mock, patch

import pytest
import requests

from oci_deploy.exceptions import RegistryPushError
from oci_deploy.oci import OCIPackager, PushResult


@pytest.fixture(name="staging_dir")
def staging_dir_fixture(tmp_path: Path) -> Path:
    """Staging repository with a single artifact."""
    root = tmp_path / "staging"
    artifact_dir = root / "g" / "a" / "1.0"
    artifact_dir.mkdir(parents=True)
    (artifact_dir / "a-1.0.jar").write_bytes(b"jar")
    (artifact_dir / "a-1.0.jar.sha1").write_text("abc")
    return root


def test_push(staging_dir: Path) -> None:
    """Test pushing uses local credentials when none are configured."""
    packager = OCIPackager()
    with patch("oci_deploy.oci.OrasClient") as mock_client:
        mock_client.return_value.push.return_value = Mock(
            headers={"Docker-Content-Digest": "sha256:1234"}
        )
        result = packager.push(staging_dir, "registry.example.com/org/repo", "v1")

    assert result == PushResult(
        reference="registry.example.com/org/repo:v1", digest="sha256:1234", files=2
    )
    mock_client.assert_called_once_with(tls_verify=True)
    client = mock_client.return_value
    client.login.assert_not_called()
    client.push.assert_called_once_with(
        target="registry.example.com/org/repo:v1",
        files=[str(staging_dir)],
        disable_path_validation=True,
        manifest_annotations=None,
    )


def test_push_with_credentials(staging_dir: Path) -> None:
    """Test pushing logs in to the registry with the configured credentials."""
    packager = OCIPackager(
        username="user",
        password="secret",
        insecure=True,
        annotations={"org.opencontainers.image.source": "https://example.com"},
    )
    assert packager.has_credentials
    with (
        patch("oci_deploy.oci.OrasClient") as mock_client,
        patch("oci_deploy.oci.Container") as mock_container,
    ):
        mock_container.return_value.registry = "registry.example.com"
        packager.push(staging_dir, "registry.example.com/org/repo")

    mock_client.assert_called_once_with(tls_verify=False)
    mock_container.assert_called_once_with("registry.example.com/org/repo:latest")
    client = mock_client.return_value
    client.login.assert_called_once_with(
        hostname="registry.example.com",
        username="user",
        password="secret",
        tls_verify=False,
    )
    assert client.push.call_args.kwargs["manifest_annotations"] == {
        "org.opencontainers.image.source": "https://example.com"
    }


def test_username_without_password() -> None:
    """Test a username alone does not count as credentials."""
    assert not OCIPackager(username="user").has_credentials


def test_push_failure(staging_dir: Path) -> None:
    """Test registry failures are raised as push errors."""
    packager = OCIPackager()
    with patch("oci_deploy.oci.OrasClient") as mock_client:
        mock_client.return_value.push.side_effect = (
            requests.exceptions.ConnectionError("connection refused")
        )
        with pytest.raises(RegistryPushError) as exc_info:
            packager.push(staging_dir, "registry.example.com/org/repo")

    assert str(exc_info.value) == (
        "Failed to push registry.example.com/org/repo:latest: connection refused"
    )
    assert exc_info.value.reference == "registry.example.com/org/repo:latest"


def test_push_empty(tmp_path: Path) -> None:
    """Test there is nothing to push from an empty directory."""
    packager = OCIPackager()
    with patch("oci_deploy.oci.OrasClient") as mock_client:
        with pytest.raises(RegistryPushError, match="No files to push"):
            packager.push(tmp_path, "registry.example.com/org/repo")
    mock_client.assert_not_called()
