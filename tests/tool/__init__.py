"""Test helpers for oci-deploy tools."""

from pathlib import Path
from typing import Any

from oci_deploy.manifest import BuildPlan, BuildUnit


def write_plan(
    path: Path, units: list[BuildUnit], config: dict[str, Any] | None = None
) -> Path:
    """Write a build plan file for the command line tool."""
    path.write_text(BuildPlan(units=units, config=config).yaml())
    return path
