"""oci-deploy push action."""

from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
import asyncio
import logging
import pathlib
from typing import cast

from oci_deploy.config import DEFAULT_TIMEOUT
from oci_deploy.exceptions import RegistryPushError
from oci_deploy.oci import OCIPackager

from . import options
from .format import formatter

_LOGGER = logging.getLogger(__name__)


class PushAction:
    """oci-deploy push action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "push",
                help="Push a staging repository to an OCI registry",
                description="""Push an existing staging repository directory to
                    an OCI registry as a single artifact layer.""",
            ),
        )
        args.add_argument(
            "path", type=pathlib.Path, help="Path to the staging repository"
        )
        options.add_registry_flags(args, required=True)
        args.add_argument(
            "--timeout",
            type=float,
            default=DEFAULT_TIMEOUT,
            help="Seconds allowed for the push",
        )
        options.add_output_flags(args)
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        path: pathlib.Path,
        image_repo: str,
        image_tag: str | None,
        registry_username: str | None,
        registry_password: str | None,
        insecure_tls_no_verify: bool | None,
        timeout: float,
        output: str,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        packager = OCIPackager(
            username=registry_username,
            password=registry_password,
            insecure=bool(insecure_tls_no_verify),
        )
        reference = f"{image_repo}:{image_tag or 'latest'}"
        try:
            result = await asyncio.wait_for(
                asyncio.to_thread(
                    packager.push, path, image_repo, image_tag or "latest"
                ),
                timeout,
            )
        except asyncio.TimeoutError as err:
            raise RegistryPushError(reference, f"Timed out after {timeout}s") from err
        formatter(output, ["reference", "digest", "files"]).print(
            [
                {
                    "reference": result.reference,
                    "digest": result.digest,
                    "files": result.files,
                }
            ]
        )
