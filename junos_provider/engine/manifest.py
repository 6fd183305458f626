"""
Manifest loading - desired resources declared in YAML

    resources:
      - type: junos_firewall_policer
        name: policer1
        config:
          name: policer1
          if_exceeding:
            burst_size_limit: 50k
            bandwidth_limit: 32k
          then:
            discard: true
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Union

import yaml

from junos_provider.resources.base import ResourceData
from junos_provider.resources.registry import get_resource
from junos_provider.utils.error_handling import ValidationError

logger = logging.getLogger(__name__)


@dataclass
class ManifestEntry:
    """One declared resource"""

    type_name: str
    label: str
    data: ResourceData

    @property
    def address(self) -> str:
        return f"{self.type_name}.{self.label}"


@dataclass
class Manifest:
    entries: List[ManifestEntry]

    def get(self, address: str):
        for entry in self.entries:
            if entry.address == address:
                return entry
        return None

    def addresses(self) -> List[str]:
        return [entry.address for entry in self.entries]


def parse_manifest(document: Dict, source: str = "manifest") -> Manifest:
    """
    Build and validate a Manifest from a parsed YAML document

    Every entry is checked before raising so all problems are reported at once.

    Raises:
        ValidationError: Malformed document, unknown type or invalid resource
    """
    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise ValidationError(f"{source}: top level must be a mapping with a 'resources' list")
    items = document.get("resources") or []
    if not isinstance(items, list):
        raise ValidationError(f"{source}: 'resources' must be a list")

    entries: List[ManifestEntry] = []
    issues: List[str] = []
    seen = set()
    for index, item in enumerate(items):
        where = f"{source}: resources[{index}]"
        if not isinstance(item, dict):
            issues.append(f"{where} must be a mapping")
            continue
        type_name = item.get("type")
        label = item.get("name")
        if not type_name or not label:
            issues.append(f"{where} needs 'type' and 'name'")
            continue
        address = f"{type_name}.{label}"
        if address in seen:
            issues.append(f"{where}: duplicate resource {address}")
            continue
        seen.add(address)

        try:
            resource = get_resource(type_name)
            data = resource.new_data(item.get("config") or {})
        except ValidationError as e:
            issues.append(f"{where} ({address}): {e.message}")
            continue

        for issue in resource.validate(data):
            issues.append(f"{address}: {issue}")
        entries.append(ManifestEntry(type_name, str(label), data))

    if issues:
        raise ValidationError(
            f"{len(issues)} problem(s) in {source}:\n  " + "\n  ".join(issues),
            guidance="Fix the manifest and run validate again",
        )

    logger.debug(f"Loaded {len(entries)} resources from {source}")
    return Manifest(entries)


def load_manifest(path: Union[str, Path]) -> Manifest:
    """
    Read a YAML manifest file

    Args:
        path: Manifest file path

    Returns:
        Validated Manifest
    """
    path = Path(path)
    try:
        with open(path, "r") as f:
            document = yaml.safe_load(f)
    except FileNotFoundError:
        raise ValidationError(f"Manifest not found: {path}", "manifest")
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid YAML in {path}: {e}", "manifest")

    return parse_manifest(document, str(path))
