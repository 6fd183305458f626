"""System login class (`system login class NAME`)"""

import re
from dataclasses import dataclass, field
from typing import List, Optional

from junos_provider.junos.constants import CMD_SHOW_CONFIG, DELETE_LS, EMPTY_W, PIPE_DISPLAY_SET, PIPE_DISPLAY_SET_RELATIVE
from junos_provider.junos.session import Session
from junos_provider.resources import validators
from junos_provider.resources.base import (
    ConfigLine,
    ConfigSetError,
    Resource,
    ResourceData,
    iter_config_lines,
)

ACCESS_TIME_FORMAT = re.compile(r"^([0-1]\d|2[0-3]):([0-5]\d):([0-5]\d)$")
DAYS = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")
PERMISSIONS = (
    "access", "access-control",
    "admin", "admin-control",
    "all",
    "clear",
    "configure",
    "control",
    "field",
    "firewall", "firewall-control",
    "floppy",
    "flow-tap", "flow-tap-control", "flow-tap-operation",
    "idp-profiler-operation",
    "interface", "interface-control",
    "maintenance",
    "network",
    "pgcp-session-mirroring", "pgcp-session-mirroring-control",
    "reset",
    "rollback",
    "routing", "routing-control",
    "secret", "secret-control",
    "security", "security-control",
    "shell",
    "snmp", "snmp-control",
    "storage", "storage-control",
    "system", "system-control",
    "trace", "trace-control",
    "unified-edge", "unified-edge-control",
    "view", "view-configuration",
)
SECURITY_ROLES = (
    "audit-administrator",
    "crypto-administrator",
    "ids-administrator",
    "security-administrator",
)

_REGEXP_OPTIONS = ("allow_commands", "allow_configuration", "deny_commands", "deny_configuration")


@dataclass
class SystemLoginClassData(ResourceData):
    name: str = ""
    access_end: str = ""
    access_start: str = ""
    allow_commands: str = ""
    allow_commands_regexps: List[str] = field(default_factory=list)
    allow_configuration: str = ""
    allow_configuration_regexps: List[str] = field(default_factory=list)
    allow_hidden_commands: bool = False
    allowed_days: List[str] = field(default_factory=list)
    cli_prompt: str = ""
    configuration_breadcrumbs: bool = False
    confirm_commands: List[str] = field(default_factory=list)
    deny_commands: str = ""
    deny_commands_regexps: List[str] = field(default_factory=list)
    deny_configuration: str = ""
    deny_configuration_regexps: List[str] = field(default_factory=list)
    idle_timeout: Optional[int] = None
    logical_system: str = ""
    login_alarms: bool = False
    login_script: str = ""
    login_tip: bool = False
    no_hidden_commands_except: List[str] = field(default_factory=list)
    permissions: List[str] = field(default_factory=list)
    security_role: str = ""
    tenant: str = ""


class SystemLoginClass(Resource):
    type_name = "junos_system_login_class"
    junos_name = "system login class"
    data_class = SystemLoginClassData
    unordered_fields = ("permissions",)

    def validate(self, data: SystemLoginClassData) -> List[str]:
        issues = validators.validate_name(data.name, "name", max_length=250)
        if validators.block_is_empty(data, exclude=("id", "name")):
            issues.append("at least one of arguments need to be set (in addition to `name`)")

        if data.access_end and not data.access_start:
            issues.append("access_start must be specified with access_end")
        if data.access_start and not data.access_end:
            issues.append("access_end must be specified with access_start")
        for attr in ("access_end", "access_start"):
            value = getattr(data, attr)
            if value and not ACCESS_TIME_FORMAT.match(value):
                issues.append(f"{attr} \"{value}\" must be in the format 'HH:MM:SS'")

        for attr in _REGEXP_OPTIONS:
            issues += validators.conflicts(data, attr, (f"{attr}_regexps",))
        issues += validators.conflicts(data, "allow_hidden_commands", ("no_hidden_commands_except",))

        for day in data.allowed_days:
            issues += validators.validate_one_of(day, "allowed_days", DAYS)
        for permission in data.permissions:
            issues += validators.validate_one_of(permission, "permissions", PERMISSIONS)
        for permission in validators.duplicates(data.permissions):
            issues.append(f"permission {permission} is set more than once")
        issues += validators.validate_one_of(data.security_role, "security_role", SECURITY_ROLES)
        issues += validators.validate_int_range(data.idle_timeout, "idle_timeout", 1, 4294967295)
        if '"' in data.cli_prompt:
            issues.append("cli_prompt must not contain double quotes")
        return issues

    def _path(self, name: str) -> str:
        return f"system login class {name}"

    def exists(self, session: Session, data: SystemLoginClassData) -> bool:
        output = session.command(CMD_SHOW_CONFIG + self._path(data.name) + PIPE_DISPLAY_SET)
        return output != EMPTY_W

    def set(self, session: Session, data: SystemLoginClassData):
        if validators.block_is_empty(data, exclude=("id", "name")):
            raise ConfigSetError("at least one of arguments need to be set (in addition to `name`)", "name")

        set_prefix = f"set {self._path(data.name)} "
        config_set = []

        def quoted(keyword: str, value: str):
            config_set.append(set_prefix + f"{keyword} \"{value}\"")

        if data.access_end:
            quoted("access-end", data.access_end)
        if data.access_start:
            quoted("access-start", data.access_start)
        if data.allow_commands:
            quoted("allow-commands", data.allow_commands)
        for value in data.allow_commands_regexps:
            quoted("allow-commands-regexps", value)
        if data.allow_configuration:
            quoted("allow-configuration", data.allow_configuration)
        for value in data.allow_configuration_regexps:
            quoted("allow-configuration-regexps", value)
        if data.allow_hidden_commands:
            config_set.append(set_prefix + "allow-hidden-commands")
        for day in data.allowed_days:
            config_set.append(set_prefix + "allowed-days " + day)
        if data.configuration_breadcrumbs:
            config_set.append(set_prefix + "configuration-breadcrumbs")
        if data.cli_prompt:
            quoted("cli prompt", data.cli_prompt)
        for value in data.confirm_commands:
            quoted("confirm-commands", value)
        if data.deny_commands:
            quoted("deny-commands", data.deny_commands)
        for value in data.deny_commands_regexps:
            quoted("deny-commands-regexps", value)
        if data.deny_configuration:
            quoted("deny-configuration", data.deny_configuration)
        for value in data.deny_configuration_regexps:
            quoted("deny-configuration-regexps", value)
        if data.idle_timeout is not None:
            config_set.append(set_prefix + f"idle-timeout {data.idle_timeout}")
        if data.logical_system:
            quoted("logical-system", data.logical_system)
        if data.login_alarms:
            config_set.append(set_prefix + "login-alarms")
        if data.login_script:
            quoted("login-script", data.login_script)
        if data.login_tip:
            config_set.append(set_prefix + "login-tip")
        for value in data.no_hidden_commands_except:
            quoted("no-hidden-commands except", value)
        for permission in data.permissions:
            config_set.append(set_prefix + "permissions " + permission)
        if data.security_role:
            config_set.append(set_prefix + "security-role " + data.security_role)
        if data.tenant:
            quoted("tenant", data.tenant)

        session.config_set(config_set)

    def read(self, session: Session, name: str) -> SystemLoginClassData:
        data = SystemLoginClassData()
        output = session.command(CMD_SHOW_CONFIG + self._path(name) + PIPE_DISPLAY_SET_RELATIVE)
        if output == EMPTY_W:
            return data

        data.name = name
        self.fill_id(data)
        for item in iter_config_lines(output):
            line = ConfigLine(item)
            # The device appends the timezone to access times
            if line.cut("access-end "):
                data.access_end = line.value.split(" ")[0]
            elif line.cut("access-start "):
                data.access_start = line.value.split(" ")[0]
            elif line.cut("allow-commands "):
                data.allow_commands = line.value
            elif line.cut("allow-commands-regexps "):
                data.allow_commands_regexps.append(line.value)
            elif line.cut("allow-configuration "):
                data.allow_configuration = line.value
            elif line.cut("allow-configuration-regexps "):
                data.allow_configuration_regexps.append(line.value)
            elif item == "allow-hidden-commands":
                data.allow_hidden_commands = True
            elif line.cut("allowed-days "):
                data.allowed_days.append(line.rest)
            elif item == "configuration-breadcrumbs":
                data.configuration_breadcrumbs = True
            elif line.cut("cli prompt "):
                data.cli_prompt = line.value
            elif line.cut("confirm-commands "):
                data.confirm_commands.append(line.value)
            elif line.cut("deny-commands "):
                data.deny_commands = line.value
            elif line.cut("deny-commands-regexps "):
                data.deny_commands_regexps.append(line.value)
            elif line.cut("deny-configuration "):
                data.deny_configuration = line.value
            elif line.cut("deny-configuration-regexps "):
                data.deny_configuration_regexps.append(line.value)
            elif line.cut("idle-timeout "):
                data.idle_timeout = line.as_int()
            elif line.cut("logical-system "):
                data.logical_system = line.value
            elif item == "login-alarms":
                data.login_alarms = True
            elif line.cut("login-script "):
                data.login_script = line.value
            elif item == "login-tip":
                data.login_tip = True
            elif line.cut("no-hidden-commands except "):
                data.no_hidden_commands_except.append(line.value)
            elif line.cut("permissions "):
                data.permissions.append(line.rest)
            elif line.cut("security-role "):
                data.security_role = line.rest
            elif line.cut("tenant "):
                data.tenant = line.value

        return data

    def delete_config(self, session: Session, data: SystemLoginClassData):
        session.config_set([DELETE_LS + self._path(data.name)])
