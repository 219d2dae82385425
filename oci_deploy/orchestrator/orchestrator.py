"""Orchestrator for oci-deploy.

This module decides, for every build unit in build order, whether to skip
it, deploy it immediately, or defer it to a batched deploy at the end of the
build. Deferred units are grouped into one push request per destination,
and all push requests are published once every participating unit has been
processed.

The orchestrator owns the per-unit state map and the grouping map for the
duration of one build. Units are processed strictly one at a time.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
import logging

from oci_deploy.collector import collect_artifacts
from oci_deploy.config import DeployConfig, SkipPolicy
from oci_deploy.context import trace_context
from oci_deploy.destination import Destination, resolve_destination
from oci_deploy.exceptions import DeployException, MissingDestinationError, OfflineError
from oci_deploy.manifest import BuildUnit
from oci_deploy.publisher import Publisher, PublishResult, PushRequest

from .state import UnitState, UnitStatus

__all__ = [
    "Orchestrator",
    "DeployReport",
]

_LOGGER = logging.getLogger(__name__)


@dataclass
class DeployReport:
    """Outcome of deploying a build."""

    states: dict[str, UnitStatus] = field(default_factory=dict)
    """Final status keyed by unit coordinates."""

    results: list[PublishResult] = field(default_factory=list)
    """Results of every publish, in publish order."""


class Orchestrator:
    """Coordinates collecting, staging and publishing build units."""

    def __init__(
        self, publisher: Publisher, config: DeployConfig | None = None
    ) -> None:
        """Initialize the orchestrator."""
        self._publisher = publisher
        self._config = config or DeployConfig()
        self._states: dict[str, UnitStatus] = {}
        self._requests: dict[Destination, PushRequest] = {}
        self._results: list[PublishResult] = []

    @property
    def states(self) -> dict[str, UnitStatus]:
        return dict(self._states)

    @property
    def pending_requests(self) -> list[PushRequest]:
        """Push requests that have been deferred and not yet published."""
        return list(self._requests.values())

    @property
    def results(self) -> list[PublishResult]:
        return list(self._results)

    def state(self, unit: BuildUnit) -> UnitState:
        if (status := self._states.get(unit.coordinates)) is None:
            return UnitState.PENDING
        return status.state

    def _set_state(
        self, unit: BuildUnit | str, state: UnitState, error: str | None = None
    ) -> None:
        key = unit if isinstance(unit, str) else unit.coordinates
        self._states[key] = UnitStatus(state=state, error=error)

    def _skip_policy(self, unit: BuildUnit) -> SkipPolicy:
        if unit.skip is not None:
            return SkipPolicy.parse(unit.skip)
        return self._config.skip_policy

    def destination(self, unit: BuildUnit) -> Destination:
        """Resolve the destination a unit is published to."""
        publisher = self._publisher
        if not publisher.resolves_destination:
            if (default := publisher.default_destination) is None:
                raise MissingDestinationError(
                    f"Publisher {publisher.name} has no destination"
                )
            return default
        try:
            resolved = resolve_destination(
                unit,
                alt_snapshot=self._config.alt_snapshot_deployment_repository,
                alt_release=self._config.alt_release_deployment_repository,
                alt=self._config.alt_deployment_repository,
            )
        except MissingDestinationError:
            if (resolved := publisher.default_destination) is None:
                raise
        return publisher.target(resolved)

    def _ready(self, participants: Sequence[BuildUnit]) -> bool:
        """Return true once every participant is processed and none failed."""
        for unit in participants:
            state = self.state(unit)
            if not state.is_processed or state == UnitState.FAILED:
                return False
        return True

    async def process(
        self, unit: BuildUnit, participants: Sequence[BuildUnit] | None = None
    ) -> UnitState:
        """Process a single build unit.

        The participants are all units of the build that take part in the
        deploy. Once all of them have been processed any deferred push
        requests are published.
        """
        with trace_context(f"Unit {unit.coordinates}"):
            try:
                state = await self._process(unit)
            except DeployException as err:
                _LOGGER.error("Deploy failed for %s: %s", unit.coordinates, err)
                err.add_note(f"Affected project: {unit.coordinates}")
                self._set_state(unit, UnitState.FAILED, str(err))
                raise

        if self._ready(participants if participants is not None else [unit]):
            if self._requests:
                await self.flush()
        elif state == UnitState.DEFERRED:
            _LOGGER.info("Deferring deploy for %s at end", unit.coordinates)
        return self.state(unit)

    async def _process(self, unit: BuildUnit) -> UnitState:
        if self._skip_policy(unit).matches(unit.version):
            _LOGGER.info("Skipping artifact deployment for %s", unit.coordinates)
            self._set_state(unit, UnitState.SKIPPED)
            return UnitState.SKIPPED

        if self._config.offline:
            raise OfflineError("Cannot deploy artifacts when offline")

        destination = self.destination(unit)
        artifacts = collect_artifacts(
            unit, allow_incomplete=self._config.allow_incomplete_projects
        )

        if self._config.deploy_at_end:
            request = self._requests.get(destination, PushRequest(destination))
            self._requests[destination] = request.extend(unit.coordinates, artifacts)
            self._set_state(unit, UnitState.DEFERRED)
            return UnitState.DEFERRED

        request = PushRequest(destination).extend(unit.coordinates, artifacts)
        self._results.append(await self._publisher.publish(request))
        self._set_state(unit, UnitState.DEPLOYED)
        return UnitState.DEPLOYED

    async def flush(self) -> list[PublishResult]:
        """Publish all deferred push requests, one per destination.

        A failed push fails only the units of its own request. The remaining
        requests are still published and the first failure is raised once
        every request has been tried.
        """
        results = []
        errors: list[DeployException] = []
        for destination, request in list(self._requests.items()):
            try:
                result = await self._publisher.publish(request)
            except DeployException as err:
                _LOGGER.error("Deploy failed for %s: %s", request.destination, err)
                err.add_note(f"Affected projects: {', '.join(request.units)}")
                for unit in request.units:
                    self._set_state(unit, UnitState.FAILED, str(err))
                errors.append(err)
            else:
                for unit in request.units:
                    self._set_state(unit, UnitState.DEPLOYED)
                self._results.append(result)
                results.append(result)
            del self._requests[destination]
        if errors:
            raise _combine_errors(errors)
        return results

    async def run(self, units: Sequence[BuildUnit]) -> DeployReport:
        """Process every unit in build order.

        Units with `deploy` disabled do not take part and are left pending.
        A failed unit does not stop the units after it from being processed,
        though it does block the deploy at the end of the build. The first
        failure is raised after the last unit.
        """
        participants = [unit for unit in units if unit.deploy]
        errors: list[DeployException] = []
        for unit in units:
            if not unit.deploy:
                _LOGGER.debug("Unit %s does not deploy", unit.coordinates)
                continue
            try:
                await self.process(unit, participants)
            except DeployException as err:
                errors.append(err)
        if errors:
            raise _combine_errors(errors)
        return DeployReport(states=self.states, results=self.results)


def _combine_errors(errors: Sequence[DeployException]) -> DeployException:
    """Return the first error with the others attached as notes."""
    first = errors[0]
    for err in errors[1:]:
        first.add_note(f"Also failed: {err}")
    return first
