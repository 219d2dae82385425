"""oci-deploy stage action."""

from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
import logging
import pathlib
from typing import cast

from oci_deploy.config import PublisherType
from oci_deploy.manifest import read_build_plan
from oci_deploy.orchestrator import Orchestrator
from oci_deploy.publisher import create_publisher
from oci_deploy.staging import StagingRepository

from . import options
from .ls import file_rows
from .format import formatter

_LOGGER = logging.getLogger(__name__)


class StageAction:
    """oci-deploy stage action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "stage",
                help="Deploy the build units to a local directory",
                description="""Deploy the build units of a build plan to a
                    local directory as if it were a remote repository, then
                    print the files in the directory.""",
            ),
        )
        args.add_argument("plan", type=pathlib.Path, help="Path to the build plan")
        args.add_argument(
            "--output-dir",
            dest="deploy_local_directory",
            type=pathlib.Path,
            required=True,
            help="Directory to deploy the repository layout to",
        )
        options.add_deploy_flags(args)
        options.add_output_flags(args)
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        plan: pathlib.Path,
        output: str,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        build_plan = await read_build_plan(plan)
        config = options.build_config(
            build_plan, **{**kwargs, "publisher": PublisherType.LOCAL}
        )
        orchestrator = Orchestrator(create_publisher(config), config)
        await orchestrator.run(build_plan.units)
        repository = StagingRepository(config.deploy_local_directory)
        formatter(output, ["path", "size"]).print(file_rows(repository))
