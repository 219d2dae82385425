"""Command line tool for staging and publishing build artifacts."""

import argparse
import asyncio
import logging
import sys
import traceback

from oci_deploy.exceptions import DeployException
from . import deploy, ls, push, stage

_LOGGER = logging.getLogger(__name__)


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Command line utility for deploying build artifacts to a "
        "repository or an OCI registry.",
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    )

    subparsers = parser.add_subparsers(dest="command", help="Command", required=True)

    deploy.DeployAction.register(subparsers)
    stage.StageAction.register(subparsers)
    push.PushAction.register(subparsers)
    ls.ListAction.register(subparsers)
    return parser


def main(argv: list[str] | None = None) -> None:
    """oci-deploy command line tool main entry point."""
    parser = _make_parser()
    args = parser.parse_args(argv)

    if args.log_level:
        logging.basicConfig(level=args.log_level)

    action = args.cls()
    try:
        asyncio.run(action.run(**vars(args)))
    except DeployException as err:
        if args.log_level == "DEBUG":
            traceback.print_exc(file=sys.stderr)
        print("oci-deploy error: ", err, file=sys.stderr)
        for note in getattr(err, "__notes__", []):
            print(note, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
