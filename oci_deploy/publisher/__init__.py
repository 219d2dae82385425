"""Publishers that deploy push requests to a destination."""

from oci_deploy.config import DeployConfig, PublisherType
from oci_deploy.oci import OCIPackager

from .base import Publisher, PublishResult, PushRequest
from .local import LocalDirectoryPublisher
from .oci import OCIRegistryPublisher
from .remote import RemoteRepositoryPublisher

__all__ = [
    "Publisher",
    "PublishResult",
    "PushRequest",
    "LocalDirectoryPublisher",
    "OCIRegistryPublisher",
    "RemoteRepositoryPublisher",
    "create_publisher",
]


def create_publisher(config: DeployConfig) -> Publisher:
    """Return the publisher selected by the configuration."""
    retries = config.retries
    if config.publisher == PublisherType.LOCAL:
        return LocalDirectoryPublisher(
            config.deploy_local_directory,
            algorithms=config.checksum_algorithms,
            retries=retries,
            timeout=config.timeout,
        )
    if config.publisher == PublisherType.REMOTE:
        return RemoteRepositoryPublisher(
            config.staging_dir,
            username=config.registry_username,
            password=config.registry_password,
            algorithms=config.checksum_algorithms,
            retries=retries,
            timeout=config.timeout,
        )
    return OCIRegistryPublisher(
        config.staging_dir,
        OCIPackager(
            username=config.registry_username,
            password=config.registry_password,
            insecure=config.insecure_tls_no_verify,
        ),
        image_repo=config.image_repo,
        image_tag=config.image_tag,
        algorithms=config.checksum_algorithms,
        retries=retries,
        timeout=config.timeout,
    )
