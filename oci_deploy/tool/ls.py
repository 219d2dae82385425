"""oci-deploy ls action."""

from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
import pathlib
from typing import Any, cast

from oci_deploy.staging import StagingRepository

from . import options
from .format import formatter


def file_rows(repository: StagingRepository) -> list[dict[str, Any]]:
    """Return one row per file in the repository."""
    return [
        {"path": path, "size": (repository.root / path).stat().st_size}
        for path in repository.list_files()
    ]


class ListAction:
    """oci-deploy ls action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "ls",
                help="List the files in a staging repository",
                description="Print the files of a local repository directory.",
            ),
        )
        args.add_argument(
            "path", type=pathlib.Path, help="Path to the staging repository"
        )
        options.add_output_flags(args)
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        path: pathlib.Path,
        output: str,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        repository = StagingRepository(path)
        rows = file_rows(repository)
        if not rows:
            print(f"No files found in {path}")
            return
        formatter(output, ["path", "size"]).print(rows)
