"""
Attribute validation helpers for resource models

Every helper returns a list of issue strings (empty when valid) so a
resource can report all problems of a model at once.
"""

import ipaddress
import re
from dataclasses import fields
from typing import Any, Iterable, List, Optional, Sequence

from junos_provider.resources.base import is_set

# Letters, digits, dash, underscore and dot
DEFAULT_NAME_FORMAT = re.compile(r"^[a-zA-Z0-9._-]+$")
ADDRESS_NAME_FORMAT = re.compile(r"^[a-zA-Z0-9._:/-]+$")


def _where(context: str) -> str:
    return f" in {context}" if context else ""


def validate_name(value: Optional[str], attr: str, max_length: int = 64,
                  pattern: re.Pattern = DEFAULT_NAME_FORMAT) -> List[str]:
    """Non-empty name within max_length made of allowed characters"""
    if not value:
        return [f"{attr} must be set"]
    issues = []
    if len(value) > max_length:
        issues.append(f"{attr} \"{value}\" is longer than {max_length} characters")
    if not pattern.match(value):
        issues.append(f"{attr} \"{value}\" contains characters outside {pattern.pattern}")
    return issues


def validate_int_range(value: Optional[int], attr: str, low: int, high: int) -> List[str]:
    if value is None:
        return []
    if not low <= value <= high:
        return [f"{attr} must be between {low} and {high}, got {value}"]
    return []


def validate_one_of(value: Optional[str], attr: str, choices: Sequence[str]) -> List[str]:
    if value is None or value == "":
        return []
    if value not in choices:
        return [f"{attr} must be one of {', '.join(choices)}, got \"{value}\""]
    return []


def validate_address(value: Optional[str], attr: str, with_prefix: bool = False) -> List[str]:
    """IPv4/IPv6 address, or network with a prefix length when with_prefix"""
    if not value:
        return []
    try:
        if with_prefix:
            if "/" not in value:
                return [f"{attr} \"{value}\" must be in CIDR format"]
            ipaddress.ip_network(value, strict=False)
        else:
            ipaddress.ip_address(value)
    except ValueError:
        kind = "network" if with_prefix else "address"
        return [f"{attr} \"{value}\" is not a valid IP {kind}"]
    return []


def conflicts(obj: Any, attr: str, others: Iterable[str], context: str = "") -> List[str]:
    """attr cannot be set with any of others"""
    if not is_set(getattr(obj, attr, None)):
        return []
    return [
        f"{attr} and {other} cannot be configured together{_where(context)}"
        for other in others
        if is_set(getattr(obj, other, None))
    ]


def at_most_one_of(obj: Any, attrs: Sequence[str], context: str = "") -> List[str]:
    present = [a for a in attrs if is_set(getattr(obj, a, None))]
    if len(present) > 1:
        return [f"only one of {', '.join(attrs)} can be set{_where(context)}"]
    return []


def exactly_one_of(obj: Any, attrs: Sequence[str], context: str = "") -> List[str]:
    present = [a for a in attrs if is_set(getattr(obj, a, None))]
    if not present:
        return [f"one of {', '.join(attrs)} must be specified{_where(context)}"]
    if len(present) > 1:
        return [f"only one of {', '.join(attrs)} can be set{_where(context)}"]
    return []


def required_together(obj: Any, attrs: Sequence[str], context: str = "") -> List[str]:
    present = [a for a in attrs if is_set(getattr(obj, a, None))]
    if present and len(present) != len(attrs):
        return [f"{' and '.join(attrs)} must be set together{_where(context)}"]
    return []


def block_is_empty(block: Any, exclude: Sequence[str] = ()) -> bool:
    """True when no attribute of a block (other than exclude) is set"""
    return not any(
        is_set(getattr(block, f.name)) for f in fields(block) if f.name not in exclude
    )


def duplicates(values: Iterable[Any]) -> List[Any]:
    seen, repeated = set(), []
    for value in values:
        if value in seen and value not in repeated:
            repeated.append(value)
        seen.add(value)
    return repeated
