"""System syslog host (`system syslog host HOST`)"""

import re
from dataclasses import dataclass, field
from typing import List, Optional

from junos_provider.junos.constants import (
    CMD_SHOW_CONFIG,
    DELETE_LS,
    EMPTY_W,
    PIPE_DISPLAY_SET,
    PIPE_DISPLAY_SET_RELATIVE,
    SYSLOG_FACILITIES,
    SYSLOG_SEVERITIES,
)
from junos_provider.junos.session import Session
from junos_provider.resources import validators
from junos_provider.resources.base import ConfigLine, Resource, ResourceData, iter_config_lines

HOST_FORMAT = re.compile(r"^[a-zA-Z0-9._:-]+$")

# (model attribute, junos facility keyword) in set order
FACILITY_SEVERITIES = (
    ("any_severity", "any"),
    ("authorization_severity", "authorization"),
    ("changelog_severity", "change-log"),
    ("conflictlog_severity", "conflict-log"),
    ("daemon_severity", "daemon"),
    ("dfc_severity", "dfc"),
    ("external_severity", "external"),
    ("firewall_severity", "firewall"),
    ("ftp_severity", "ftp"),
    ("interactivecommands_severity", "interactive-commands"),
    ("kernel_severity", "kernel"),
    ("ntp_severity", "ntp"),
    ("pfe_severity", "pfe"),
    ("security_severity", "security"),
    ("user_severity", "user"),
)


@dataclass
class FacilitySeverities:
    """Severity level per syslog facility"""

    any_severity: str = ""
    authorization_severity: str = ""
    changelog_severity: str = ""
    conflictlog_severity: str = ""
    daemon_severity: str = ""
    dfc_severity: str = ""
    external_severity: str = ""
    firewall_severity: str = ""
    ftp_severity: str = ""
    interactivecommands_severity: str = ""
    kernel_severity: str = ""
    ntp_severity: str = ""
    pfe_severity: str = ""
    security_severity: str = ""
    user_severity: str = ""


def severity_issues(data) -> List[str]:
    issues = []
    for attr, _ in FACILITY_SEVERITIES:
        issues += validators.validate_one_of(getattr(data, attr), attr, SYSLOG_SEVERITIES)
    return issues


def severity_lines(data, set_prefix: str) -> List[str]:
    return [
        set_prefix + f"{keyword} {getattr(data, attr)}"
        for attr, keyword in FACILITY_SEVERITIES
        if getattr(data, attr)
    ]


def read_severity(data, line: ConfigLine) -> bool:
    """Fill the facility severity carried by line, False when it is not one"""
    for attr, keyword in FACILITY_SEVERITIES:
        if line.cut(keyword + " "):
            setattr(data, attr, line.rest)
            return True
    return False


@dataclass
class StructuredData:
    brief: bool = False


@dataclass
class SystemSyslogHostData(FacilitySeverities, ResourceData):
    host: str = ""
    allow_duplicates: bool = False
    exclude_hostname: bool = False
    explicit_priority: bool = False
    facility_override: str = ""
    log_prefix: str = ""
    match: str = ""
    match_strings: List[str] = field(default_factory=list)
    port: Optional[int] = None
    source_address: str = ""
    structured_data: Optional[StructuredData] = None


class SystemSyslogHost(Resource):
    type_name = "junos_system_syslog_host"
    junos_name = "system syslog host"
    data_class = SystemSyslogHostData
    identity_fields = ("host",)
    import_id_format = "<host>"

    def validate(self, data: SystemSyslogHostData) -> List[str]:
        issues = validators.validate_name(data.host, "host", max_length=250, pattern=HOST_FORMAT)
        issues += validators.validate_one_of(data.facility_override, "facility_override", SYSLOG_FACILITIES)
        issues += validators.validate_int_range(data.port, "port", 1, 65535)
        issues += validators.validate_address(data.source_address, "source_address")
        issues += severity_issues(data)
        return issues

    def label(self, data: SystemSyslogHostData) -> str:
        return data.host

    def read_args(self, data: SystemSyslogHostData) -> tuple:
        return (data.host,)

    def _path(self, host: str) -> str:
        return f"system syslog host {host}"

    def exists(self, session: Session, data: SystemSyslogHostData) -> bool:
        output = session.command(CMD_SHOW_CONFIG + self._path(data.host) + PIPE_DISPLAY_SET)
        return output != EMPTY_W

    def set(self, session: Session, data: SystemSyslogHostData):
        set_prefix = f"set {self._path(data.host)} "
        config_set = [set_prefix.rstrip()]

        if data.allow_duplicates:
            config_set.append(set_prefix + "allow-duplicates")
        if data.exclude_hostname:
            config_set.append(set_prefix + "exclude-hostname")
        if data.explicit_priority:
            config_set.append(set_prefix + "explicit-priority")
        if data.facility_override:
            config_set.append(set_prefix + "facility-override " + data.facility_override)
        if data.log_prefix:
            config_set.append(set_prefix + f"log-prefix \"{data.log_prefix}\"")
        if data.match:
            config_set.append(set_prefix + f"match \"{data.match}\"")
        for value in data.match_strings:
            config_set.append(set_prefix + f"match-strings \"{value}\"")
        if data.port is not None:
            config_set.append(set_prefix + f"port {data.port}")
        if data.source_address:
            config_set.append(set_prefix + "source-address " + data.source_address)
        config_set.extend(severity_lines(data, set_prefix))
        if data.structured_data is not None:
            config_set.append(set_prefix + "structured-data")
            if data.structured_data.brief:
                config_set.append(set_prefix + "structured-data brief")

        session.config_set(config_set)

    def read(self, session: Session, host: str) -> SystemSyslogHostData:
        data = SystemSyslogHostData()
        output = session.command(CMD_SHOW_CONFIG + self._path(host) + PIPE_DISPLAY_SET_RELATIVE)
        if output == EMPTY_W:
            return data

        data.host = host
        self.fill_id(data)
        for item in iter_config_lines(output):
            line = ConfigLine(item)
            if item in ("allow-duplicates", "exclude-hostname", "explicit-priority"):
                setattr(data, item.replace("-", "_"), True)
            elif line.cut("facility-override "):
                data.facility_override = line.rest
            elif line.cut("log-prefix "):
                data.log_prefix = line.value
            elif line.cut("match "):
                data.match = line.value
            elif line.cut("match-strings "):
                data.match_strings.append(line.value)
            elif line.cut("port "):
                data.port = line.as_int()
            elif line.cut("source-address "):
                data.source_address = line.rest
            elif line.cut("structured-data"):
                if data.structured_data is None:
                    data.structured_data = StructuredData()
                if line.rest == " brief":
                    data.structured_data.brief = True
            else:
                read_severity(data, line)

        return data

    def delete_config(self, session: Session, data: SystemSyslogHostData):
        session.config_set([DELETE_LS + self._path(data.host)])
