"""Resource type registry"""

from typing import Dict, List, Type

from junos_provider.resources.base import Resource
from junos_provider.resources.firewall_filter import FirewallFilter
from junos_provider.resources.firewall_policer import FirewallPolicer
from junos_provider.resources.forwardingoptions_sampling_instance import ForwardingoptionsSamplingInstance
from junos_provider.resources.policyoptions_prefix_list import PolicyoptionsPrefixList
from junos_provider.resources.rip_group import RipGroup
from junos_provider.resources.security import Security
from junos_provider.resources.system_login_class import SystemLoginClass
from junos_provider.resources.system_syslog_host import SystemSyslogHost
from junos_provider.resources.system_syslog_user import SystemSyslogUser
from junos_provider.utils.error_handling import ValidationError

RESOURCE_CLASSES: Dict[str, Type[Resource]] = {
    cls.type_name: cls
    for cls in (
        FirewallFilter,
        FirewallPolicer,
        ForwardingoptionsSamplingInstance,
        PolicyoptionsPrefixList,
        RipGroup,
        Security,
        SystemLoginClass,
        SystemSyslogHost,
        SystemSyslogUser,
    )
}

_instances: Dict[str, Resource] = {}


def list_resource_types() -> List[str]:
    return sorted(RESOURCE_CLASSES)


def get_resource(type_name: str) -> Resource:
    """
    Resource handler for a type name

    Raises:
        ValidationError: Unknown resource type
    """
    if type_name not in RESOURCE_CLASSES:
        raise ValidationError(
            f"unknown resource type \"{type_name}\"",
            "type",
            f"Known types: {', '.join(list_resource_types())}",
        )
    if type_name not in _instances:
        _instances[type_name] = RESOURCE_CLASSES[type_name]()
    return _instances[type_name]
