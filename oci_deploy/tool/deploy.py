"""oci-deploy deploy action."""

from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
import logging
import pathlib
from typing import Any, cast

from oci_deploy.manifest import read_build_plan
from oci_deploy.orchestrator import DeployReport, Orchestrator
from oci_deploy.publisher import create_publisher

from . import options
from .format import formatter

_LOGGER = logging.getLogger(__name__)


def report_rows(report: DeployReport) -> list[dict[str, Any]]:
    """Return one row per unit with the location it was published to."""
    locations: dict[str, Any] = {}
    for result in report.results:
        for unit in result.units:
            locations[unit] = result
    rows = []
    for unit, status in report.states.items():
        row: dict[str, Any] = {"unit": unit, "state": str(status.state)}
        if (result := locations.get(unit)) is not None:
            row["location"] = result.location
            if result.digest:
                row["digest"] = result.digest
        rows.append(row)
    return rows


class DeployAction:
    """oci-deploy deploy action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "deploy",
                help="Deploy the build units of a build plan",
                description="""Collect the artifacts of every build unit in the
                    build plan, stage them in a repository layout and publish
                    them to a repository, local directory or OCI registry.""",
            ),
        )
        args.add_argument("plan", type=pathlib.Path, help="Path to the build plan")
        options.add_deploy_flags(args)
        options.add_destination_flags(args)
        options.add_registry_flags(args)
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
        config = options.build_config(build_plan, **kwargs)
        orchestrator = Orchestrator(create_publisher(config), config)
        report = await orchestrator.run(build_plan.units)
        formatter(output, ["unit", "state", "location", "digest"]).print(
            report_rows(report)
        )
