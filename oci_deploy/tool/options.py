"""Command line flags shared by the deploy actions."""

from argparse import ArgumentParser, BooleanOptionalAction
import pathlib
from typing import Any

from mashumaro.exceptions import InvalidFieldValue, MissingField

from oci_deploy.config import DeployConfig, PublisherType
from oci_deploy.exceptions import ConfigError
from oci_deploy.manifest import BuildPlan

OUTPUT_CHOICES = ["table", "yaml", "json"]


def add_output_flags(args: ArgumentParser) -> None:
    """Add flags for the output format."""
    args.add_argument(
        "--output",
        "-o",
        choices=OUTPUT_CHOICES,
        default="table",
        help="Output format of the command",
    )


def add_deploy_flags(args: ArgumentParser) -> None:
    """Add flags that control how build units are deployed."""
    args.add_argument(
        "--skip",
        type=str,
        default=None,
        help="Skip deploy: 'true', 'releases', 'snapshots' or anything else to deploy",
    )
    args.add_argument(
        "--deploy-at-end",
        type=bool,
        action=BooleanOptionalAction,
        default=None,
        help="Deploy all units together once every unit has been processed",
    )
    args.add_argument(
        "--allow-incomplete-projects",
        type=bool,
        action=BooleanOptionalAction,
        default=None,
        help="Warn instead of failing for units with attachments but no main file",
    )
    args.add_argument(
        "--retry-failed-deployment-count",
        type=int,
        default=None,
        help="Number of attempts for each publish (1-10)",
    )
    args.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds allowed for each publish attempt",
    )
    args.add_argument(
        "--checksum-algorithm",
        dest="checksum_algorithms",
        action="append",
        default=None,
        help="Checksum file to write next to each artifact (sha1 is always written)",
    )
    args.add_argument(
        "--offline",
        type=bool,
        action=BooleanOptionalAction,
        default=None,
        help="Fail instead of deploying",
    )


def add_destination_flags(args: ArgumentParser) -> None:
    """Add flags for choosing the deploy destination."""
    args.add_argument(
        "--publisher",
        type=PublisherType,
        choices=list(PublisherType),
        default=None,
        help="Where to publish artifacts",
    )
    args.add_argument(
        "--alt-deployment-repository",
        type=str,
        default=None,
        help="Repository to deploy to in id::url format",
    )
    args.add_argument(
        "--alt-snapshot-deployment-repository",
        type=str,
        default=None,
        help="Repository to deploy snapshot versions to in id::url format",
    )
    args.add_argument(
        "--alt-release-deployment-repository",
        type=str,
        default=None,
        help="Repository to deploy release versions to in id::url format",
    )
    args.add_argument(
        "--staging-dir",
        type=pathlib.Path,
        default=None,
        help="Directory used to stage artifacts before publishing",
    )
    args.add_argument(
        "--deploy-local-directory",
        type=pathlib.Path,
        default=None,
        help="Directory written by the local publisher",
    )


def add_registry_flags(args: ArgumentParser, required: bool = False) -> None:
    """Add flags for pushing to an OCI registry."""
    args.add_argument(
        "--image-repo",
        type=str,
        default=None,
        required=required,
        help="Image repository to push to e.g. ghcr.io/example/artifacts",
    )
    args.add_argument(
        "--image-tag",
        type=str,
        default=None,
        help="Tag of the pushed artifact (default latest)",
    )
    args.add_argument(
        "--registry-username",
        type=str,
        default=None,
        help="Username for the registry, otherwise local credentials are used",
    )
    args.add_argument(
        "--registry-password",
        type=str,
        default=None,
        help="Password for the registry",
    )
    args.add_argument(
        "--insecure-tls-no-verify",
        type=bool,
        action=BooleanOptionalAction,
        default=None,
        help="Disable TLS verification when pushing to the registry",
    )


def build_config(plan: BuildPlan | None = None, **kwargs: Any) -> DeployConfig:
    """Return the config from the build plan overridden by command line flags."""
    config = DeployConfig()
    if plan is not None and plan.config:
        try:
            config = DeployConfig.from_dict(plan.config)
        except (InvalidFieldValue, MissingField) as err:
            raise ConfigError(f"Invalid deploy configuration: {err}") from err
    return config.merge(kwargs)
