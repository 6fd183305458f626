"""
Planner - compare the manifest with the (refreshed) state

Produces the ordered list of changes an apply executes: deletes first, then
replacements, then creates and updates in manifest order.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from junos_provider.engine.manifest import Manifest
from junos_provider.engine.state import StateStore
from junos_provider.resources.base import Resource, ResourceData, data_to_dict
from junos_provider.resources.registry import get_resource

CREATE = "create"
UPDATE = "update"
REPLACE = "replace"
DELETE = "delete"
NOOP = "noop"

SYMBOLS = {CREATE: "+", UPDATE: "~", REPLACE: "-/+", DELETE: "-", NOOP: " "}


@dataclass
class PlannedChange:
    action: str
    address: str
    type_name: str
    before: Optional[ResourceData] = None
    after: Optional[ResourceData] = None
    changed: List[str] = field(default_factory=list)

    @property
    def symbol(self) -> str:
        return SYMBOLS[self.action]

    def describe(self) -> str:
        line = f"{self.symbol} {self.address}"
        if self.action == REPLACE:
            line += " (forces replacement)"
        if self.changed and self.action in (UPDATE, REPLACE):
            line += ": " + ", ".join(self.changed)
        return line


def normalize(resource: Resource, data: ResourceData) -> Dict[str, Any]:
    """
    Comparable form of a model (id dropped, unordered lists sorted)

    Unordered fields inside blocks are named with dotted paths
    ("ike_traceoptions.flag").
    """
    values = data_to_dict(data)
    values.pop("id", None)
    for name in resource.unordered_fields:
        *parents, leaf = name.split(".")
        container = values
        for parent in parents:
            container = container.get(parent) if isinstance(container, dict) else None
        if isinstance(container, dict) and isinstance(container.get(leaf), list):
            container[leaf] = sorted(container[leaf], key=str)
    return values


def diff_paths(before: Any, after: Any, path: str = "") -> List[str]:
    """Attribute paths whose values differ"""
    if isinstance(before, dict) and isinstance(after, dict):
        paths = []
        for key in list(before) + [k for k in after if k not in before]:
            sub = f"{path}.{key}" if path else key
            paths += diff_paths(before.get(key), after.get(key), sub)
        return paths
    if before != after:
        return [path]
    return []


def state_data(resource: Resource, entry: Dict[str, Any]) -> ResourceData:
    data = resource.new_data(entry.get("attributes") or {})
    data.id = entry.get("id")
    return data


def build_plan(
    manifest: Manifest,
    state: StateStore,
    refreshed: Optional[Dict[str, Optional[ResourceData]]] = None,
) -> List[PlannedChange]:
    """
    Ordered changes bringing the device from state to manifest

    Args:
        manifest: Desired resources
        state: Recorded resources
        refreshed: Current device models per address (None when the object
            is gone); addresses missing here are compared with the state

    Returns:
        List of PlannedChange, noop entries included
    """
    refreshed = refreshed or {}
    deletes: List[PlannedChange] = []
    replaces: List[PlannedChange] = []
    others: List[PlannedChange] = []

    wanted = set(manifest.addresses())
    for address in reversed(state.addresses()):
        if address in wanted:
            continue
        entry = state.get(address)
        if address in refreshed and refreshed[address] is None:
            continue
        resource = get_resource(entry["type"])
        before = refreshed.get(address) or state_data(resource, entry)
        deletes.append(PlannedChange(DELETE, address, entry["type"], before=before))

    for item in manifest.entries:
        resource = get_resource(item.type_name)
        entry = state.get(item.address)
        if entry is None:
            others.append(PlannedChange(CREATE, item.address, item.type_name, after=item.data))
            continue
        if item.address in refreshed:
            before = refreshed[item.address]
            if before is None:
                others.append(PlannedChange(CREATE, item.address, item.type_name, after=item.data))
                continue
        else:
            before = state_data(resource, entry)

        changed = diff_paths(normalize(resource, before), normalize(resource, item.data))
        if not changed:
            others.append(PlannedChange(NOOP, item.address, item.type_name, before, item.data))
            continue
        identity_changed = [
            name for name in resource.identity_fields
            if getattr(before, name, None) != getattr(item.data, name, None)
        ]
        if identity_changed:
            replaces.append(PlannedChange(REPLACE, item.address, item.type_name, before, item.data, changed))
        else:
            others.append(PlannedChange(UPDATE, item.address, item.type_name, before, item.data, changed))

    return deletes + replaces + others


def has_changes(plan: List[PlannedChange]) -> bool:
    return any(change.action != NOOP for change in plan)


def summarize(plan: List[PlannedChange]) -> str:
    counts = {action: 0 for action in (CREATE, UPDATE, REPLACE, DELETE)}
    for change in plan:
        if change.action in counts:
            counts[change.action] += 1
    return (
        f"Plan: {counts[CREATE]} to create, {counts[UPDATE]} to update, "
        f"{counts[REPLACE]} to replace, {counts[DELETE]} to delete"
    )
