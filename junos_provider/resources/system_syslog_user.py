"""System syslog user (`system syslog user USERNAME`)"""

import re
from dataclasses import dataclass, field
from typing import List

from junos_provider.junos.constants import CMD_SHOW_CONFIG, DELETE_LS, EMPTY_W, PIPE_DISPLAY_SET, PIPE_DISPLAY_SET_RELATIVE
from junos_provider.junos.session import Session
from junos_provider.resources import validators
from junos_provider.resources.base import ConfigLine, Resource, ResourceData, iter_config_lines
from junos_provider.resources.system_syslog_host import (
    FacilitySeverities,
    read_severity,
    severity_issues,
    severity_lines,
)

# Login name, or * for every logged-in user
USERNAME_FORMAT = re.compile(r"^(\*|[a-zA-Z0-9._-]+)$")


@dataclass
class SystemSyslogUserData(FacilitySeverities, ResourceData):
    username: str = ""
    allow_duplicates: bool = False
    match: str = ""
    match_strings: List[str] = field(default_factory=list)


class SystemSyslogUser(Resource):
    type_name = "junos_system_syslog_user"
    junos_name = "system syslog user"
    data_class = SystemSyslogUserData
    identity_fields = ("username",)
    import_id_format = "<username>"

    def validate(self, data: SystemSyslogUserData) -> List[str]:
        issues = validators.validate_name(data.username, "username", max_length=250, pattern=USERNAME_FORMAT)
        issues += severity_issues(data)
        return issues

    def label(self, data: SystemSyslogUserData) -> str:
        return data.username

    def read_args(self, data: SystemSyslogUserData) -> tuple:
        return (data.username,)

    def _path(self, username: str) -> str:
        return f"system syslog user {username}"

    def exists(self, session: Session, data: SystemSyslogUserData) -> bool:
        output = session.command(CMD_SHOW_CONFIG + self._path(data.username) + PIPE_DISPLAY_SET)
        return output != EMPTY_W

    def set(self, session: Session, data: SystemSyslogUserData):
        set_prefix = f"set {self._path(data.username)} "
        config_set = [set_prefix.rstrip()]

        if data.allow_duplicates:
            config_set.append(set_prefix + "allow-duplicates")
        if data.match:
            config_set.append(set_prefix + f"match \"{data.match}\"")
        for value in data.match_strings:
            config_set.append(set_prefix + f"match-strings \"{value}\"")
        config_set.extend(severity_lines(data, set_prefix))

        session.config_set(config_set)

    def read(self, session: Session, username: str) -> SystemSyslogUserData:
        data = SystemSyslogUserData()
        output = session.command(CMD_SHOW_CONFIG + self._path(username) + PIPE_DISPLAY_SET_RELATIVE)
        if output == EMPTY_W:
            return data

        data.username = username
        self.fill_id(data)
        for item in iter_config_lines(output):
            line = ConfigLine(item)
            if item == "allow-duplicates":
                data.allow_duplicates = True
            elif line.cut("match "):
                data.match = line.value
            elif line.cut("match-strings "):
                data.match_strings.append(line.value)
            else:
                read_severity(data, line)

        return data

    def delete_config(self, session: Session, data: SystemSyslogUserData):
        session.config_set([DELETE_LS + self._path(data.username)])
