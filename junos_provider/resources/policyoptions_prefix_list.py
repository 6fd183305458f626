"""Policy-options prefix list (`policy-options prefix-list NAME`)"""

import html
import re
from dataclasses import dataclass, field
from typing import List

from junos_provider.junos.constants import CMD_SHOW_CONFIG, DELETE_LS, EMPTY_W, PIPE_DISPLAY_SET, PIPE_DISPLAY_SET_RELATIVE
from junos_provider.junos.session import Session
from junos_provider.resources import validators
from junos_provider.resources.base import ConfigLine, Resource, ResourceData, iter_config_lines

NO_DOUBLE_QUOTE = re.compile(r"^[^\"]+$")


@dataclass
class PolicyoptionsPrefixListData(ResourceData):
    name: str = ""
    apply_path: str = ""
    dynamic_db: bool = False
    prefix: List[str] = field(default_factory=list)


class PolicyoptionsPrefixList(Resource):
    type_name = "junos_policyoptions_prefix_list"
    junos_name = "policy-options prefix-list"
    data_class = PolicyoptionsPrefixListData
    unordered_fields = ("prefix",)

    def validate(self, data: PolicyoptionsPrefixListData) -> List[str]:
        issues = validators.validate_name(data.name, "name", max_length=250, pattern=NO_DOUBLE_QUOTE)
        if data.apply_path and '"' in data.apply_path:
            issues.append("apply_path must not contain double quotes")
        for prefix in data.prefix:
            issues += validators.validate_address(prefix, "prefix", with_prefix=True)
        for prefix in validators.duplicates(data.prefix):
            issues.append(f"prefix {prefix} is set more than once")
        return issues

    def _path(self, name: str) -> str:
        return f"policy-options prefix-list \"{name}\""

    def exists(self, session: Session, data: PolicyoptionsPrefixListData) -> bool:
        output = session.command(CMD_SHOW_CONFIG + self._path(data.name) + PIPE_DISPLAY_SET)
        return output != EMPTY_W

    def set(self, session: Session, data: PolicyoptionsPrefixListData):
        set_prefix = f"set {self._path(data.name)} "
        # Declares the list even when it carries no option
        config_set = [set_prefix.rstrip()]

        if data.apply_path:
            config_set.append(set_prefix + f"apply-path \"{data.apply_path}\"")
        if data.dynamic_db:
            config_set.append(set_prefix + "dynamic-db")
        for prefix in data.prefix:
            config_set.append(set_prefix + prefix)

        session.config_set(config_set)

    def read(self, session: Session, name: str) -> PolicyoptionsPrefixListData:
        data = PolicyoptionsPrefixListData()
        output = session.command(CMD_SHOW_CONFIG + self._path(name) + PIPE_DISPLAY_SET_RELATIVE)
        if output == EMPTY_W:
            return data

        data.name = name
        self.fill_id(data)
        for item in iter_config_lines(output):
            line = ConfigLine(item)
            if line.cut("apply-path "):
                data.apply_path = html.unescape(line.value)
            elif item == "dynamic-db":
                data.dynamic_db = True
            elif "/" in item:
                data.prefix.append(item)

        return data

    def delete_config(self, session: Session, data: PolicyoptionsPrefixListData):
        session.config_set([DELETE_LS + self._path(data.name)])
