"""Exceptions related to oci-deploy."""

__all__ = [
    "DeployException",
    "InputException",
    "ConfigError",
    "MissingPomError",
    "NoArtifactFileError",
    "IncompleteProjectError",
    "MissingDestinationError",
    "InvalidDestinationSyntaxError",
    "OfflineError",
    "StagingIOError",
    "PublishError",
    "RegistryPushError",
]


class DeployException(Exception):
    """Generic base exception used for this library."""


class InputException(DeployException):
    """Raised when a build unit does not have the files expected for deploy."""


class ConfigError(DeployException):
    """Raised when the deploy configuration is invalid."""


class MissingPomError(InputException):
    """Raised when the POM for a build unit has no backing file."""

    def __init__(self, artifact_id: str) -> None:
        super().__init__(f"The POM for project {artifact_id} could not be attached")
        self.artifact_id = artifact_id


class NoArtifactFileError(InputException):
    """Raised when a build unit has no main artifact file and no attachments."""

    def __init__(self, artifact_id: str) -> None:
        super().__init__(
            f"The packaging plugin for project {artifact_id} did not assign a "
            "file to the build artifact"
        )
        self.artifact_id = artifact_id


class IncompleteProjectError(InputException):
    """Raised when the main artifact file is missing but attachments exist."""

    def __init__(self, artifact_id: str) -> None:
        super().__init__(
            f"The packaging plugin for project {artifact_id} did not assign a "
            "main file to the project but it has attachments. Change packaging "
            "to 'pom'."
        )
        self.artifact_id = artifact_id


class MissingDestinationError(ConfigError):
    """Raised when no deployment destination could be resolved."""


class InvalidDestinationSyntaxError(ConfigError):
    """Raised for a destination override string that can't be parsed."""


class OfflineError(ConfigError):
    """Raised when asked to deploy while in offline mode."""


class StagingIOError(DeployException):
    """Raised when writing to the staging repository fails."""

    def __init__(self, path: str, message: str | None = None) -> None:
        super().__init__(
            f"Failed to stage {path}: {message or 'Unknown error'}"
        )
        self.path = path


class PublishError(DeployException):
    """Raised when a publisher fails to upload to a repository."""


class RegistryPushError(PublishError):
    """Raised when pushing an OCI artifact to a registry fails."""

    def __init__(self, reference: str, message: str | None = None) -> None:
        super().__init__(
            f"Failed to push {reference}: {message or 'Unknown error'}"
        )
        self.reference = reference
