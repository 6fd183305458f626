"""
Runner - executes plans against the device and keeps the state in sync
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from junos_provider.engine.manifest import Manifest
from junos_provider.engine.planner import (
    CREATE,
    DELETE,
    NOOP,
    REPLACE,
    UPDATE,
    PlannedChange,
    build_plan,
    state_data,
)
from junos_provider.engine.state import StateStore
from junos_provider.resources.base import ResourceData, data_to_dict
from junos_provider.resources.registry import get_resource
from junos_provider.utils.error_handling import ValidationError
from junos_provider.utils.logging import get_logger


@dataclass
class ApplyResult:
    applied: List[PlannedChange] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    failed: Optional[PlannedChange] = None
    error: Optional[Exception] = None

    @property
    def success(self) -> bool:
        return self.failed is None


class Runner:
    """
    Drives resource operations for a manifest and a state store

    Args:
        client: Client opening device sessions
        store: Loaded (and locked) StateStore
    """

    def __init__(self, client, store: StateStore):
        self.logger = get_logger(__name__)
        self.client = client
        self.store = store

    def _record(self, address: str, type_name: str, data: ResourceData):
        self.store.put(address, type_name, data.id, data_to_dict(data))
        self.store.save()

    def refresh(self) -> Dict[str, Optional[ResourceData]]:
        """
        Read every state entry back from the device

        Entries whose object is gone are dropped from the state.

        Returns:
            Current model per address (None when gone)
        """
        refreshed: Dict[str, Optional[ResourceData]] = {}
        gone = []
        with self.logger.timed(f"refresh of {len(self.store.addresses())} resources"):
            for address in self.store.addresses():
                entry = self.store.get(address)
                resource = get_resource(entry["type"])
                data = resource.read_state(self.client, state_data(resource, entry))
                refreshed[address] = data
                if data is None:
                    gone.append(address)
                else:
                    self.store.put(address, entry["type"], data.id, data_to_dict(data))

        for address in gone:
            self.logger.warning(f"{address} is no longer on the device, removed from state")
            self.store.remove(address)
        if self.store.addresses() or gone:
            self.store.save()
        return refreshed

    def plan(self, manifest: Manifest, refresh: bool = True) -> List[PlannedChange]:
        refreshed = self.refresh() if refresh else {}
        return build_plan(manifest, self.store, refreshed)

    def _execute(self, change: PlannedChange) -> List[str]:
        resource = get_resource(change.type_name)
        label = change.address.split(".", 1)[1]
        warnings: List[str] = []

        if change.action in (DELETE, REPLACE):
            result = resource.delete(self.client, change.before)
            warnings += result.warnings
            self.store.remove(change.address)
            self.store.save()
            if change.action == DELETE:
                return warnings

        if change.action in (CREATE, REPLACE):
            result = resource.create(self.client, change.after)
        elif change.action == UPDATE:
            result = resource.update(self.client, change.before, change.after)
        else:
            return warnings
        warnings += result.warnings
        self._record(change.address, change.type_name, result.data)
        self.logger.debug(f"{change.action} of {resource.type_name} {label} recorded")
        return warnings

    def apply(self, plan: List[PlannedChange]) -> ApplyResult:
        """
        Execute a plan in order, stopping at the first failure

        State is saved after every successful change.
        """
        result = ApplyResult()
        for change in plan:
            if change.action == NOOP:
                continue
            self.logger.info(f"{change.symbol} {change.address}: {change.action}")
            try:
                result.warnings += self._execute(change)
            except Exception as e:
                self.logger.error(f"{change.action} of {change.address} failed: {e}")
                result.failed = change
                result.error = e
                break
            result.applied.append(change)
        return result

    def destroy(self) -> ApplyResult:
        """Delete every state entry, newest first"""
        plan = []
        for address in reversed(self.store.addresses()):
            entry = self.store.get(address)
            resource = get_resource(entry["type"])
            plan.append(PlannedChange(DELETE, address, entry["type"], before=state_data(resource, entry)))
        return self.apply(plan)

    def import_resource(self, type_name: str, label: str, import_id: str) -> ResourceData:
        """
        Read an existing object and record it in the state

        Raises:
            ValidationError: The address is already in the state
        """
        address = f"{type_name}.{label}"
        if self.store.get(address) is not None:
            raise ValidationError(
                f"{address} is already managed",
                guidance="Remove it from the state before importing again",
            )
        resource = get_resource(type_name)
        result = resource.import_state(self.client, import_id)
        self._record(address, type_name, result.data)
        return result.data
