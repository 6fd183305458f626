"""Firewall policer (`firewall policer NAME`)"""

import re
from dataclasses import dataclass
from typing import List, Optional

from junos_provider.junos.constants import CMD_SHOW_CONFIG, DELETE_LS, EMPTY_W, PIPE_DISPLAY_SET, PIPE_DISPLAY_SET_RELATIVE
from junos_provider.junos.session import Session
from junos_provider.resources import validators
from junos_provider.resources.base import ConfigLine, Resource, ResourceData, iter_config_lines

BANDWIDTH_FORMAT = re.compile(r"^(\d)+(m|k|g)?$")
LOSS_PRIORITIES = ("high", "low", "medium-high", "medium-low")


@dataclass
class PolicerIfExceeding:
    burst_size_limit: str = ""
    bandwidth_limit: str = ""
    bandwidth_percent: Optional[int] = None


@dataclass
class PolicerIfExceedingPPS:
    packet_burst: str = ""
    pps_limit: str = ""


@dataclass
class PolicerThen:
    discard: bool = False
    forwarding_class: str = ""
    loss_priority: str = ""
    out_of_profile: bool = False


@dataclass
class FirewallPolicerData(ResourceData):
    name: str = ""
    filter_specific: bool = False
    logical_bandwidth_policer: bool = False
    logical_interface_policer: bool = False
    physical_interface_policer: bool = False
    shared_bandwidth_policer: bool = False
    if_exceeding: Optional[PolicerIfExceeding] = None
    if_exceeding_pps: Optional[PolicerIfExceedingPPS] = None
    then: Optional[PolicerThen] = None


def _rate_issues(value: str, attr: str) -> List[str]:
    if value and not BANDWIDTH_FORMAT.match(value):
        return [f"{attr} \"{value}\" must be a number with an optional m, k or g suffix"]
    return []


class FirewallPolicer(Resource):
    type_name = "junos_firewall_policer"
    junos_name = "firewall policer"
    data_class = FirewallPolicerData

    def validate(self, data: FirewallPolicerData) -> List[str]:
        issues = validators.validate_name(data.name, "name", max_length=250,
                                          pattern=re.compile(r"^[^\"]+$"))
        issues += validators.conflicts(
            data, "physical_interface_policer",
            ("filter_specific", "logical_bandwidth_policer", "logical_interface_policer"),
        )

        if data.if_exceeding is None and data.if_exceeding_pps is None:
            issues.append("one of if_exceeding or if_exceeding_pps block must be specified")
        elif data.if_exceeding is not None and data.if_exceeding_pps is not None:
            issues.append("only one of if_exceeding or if_exceeding_pps block can be specified")

        if data.if_exceeding is not None:
            block = data.if_exceeding
            if not block.burst_size_limit:
                issues.append("burst_size_limit must be specified in if_exceeding block")
            issues += _rate_issues(block.burst_size_limit, "burst_size_limit")
            issues += _rate_issues(block.bandwidth_limit, "bandwidth_limit")
            issues += validators.validate_int_range(block.bandwidth_percent, "bandwidth_percent", 1, 100)
            issues += validators.conflicts(block, "bandwidth_percent", ("bandwidth_limit",),
                                           "if_exceeding block")

        if data.if_exceeding_pps is not None:
            block = data.if_exceeding_pps
            if not block.packet_burst:
                issues.append("packet_burst must be specified in if_exceeding_pps block")
            if not block.pps_limit:
                issues.append("pps_limit must be specified in if_exceeding_pps block")
            issues += _rate_issues(block.packet_burst, "packet_burst")
            issues += _rate_issues(block.pps_limit, "pps_limit")

        if data.then is None:
            issues.append("then block must be specified")
        elif validators.block_is_empty(data.then):
            issues.append("then block is empty")
        else:
            issues += validators.conflicts(
                data.then, "discard", ("forwarding_class", "loss_priority", "out_of_profile"),
                "then block",
            )
            issues += validators.validate_one_of(data.then.loss_priority, "loss_priority", LOSS_PRIORITIES)

        return issues

    def _path(self, name: str) -> str:
        return f"firewall policer \"{name}\""

    def exists(self, session: Session, data: FirewallPolicerData) -> bool:
        output = session.command(CMD_SHOW_CONFIG + self._path(data.name) + PIPE_DISPLAY_SET)
        return output != EMPTY_W

    def set(self, session: Session, data: FirewallPolicerData):
        set_prefix = f"set {self._path(data.name)} "
        config_set = []

        for flag in ("filter_specific", "logical_bandwidth_policer", "logical_interface_policer",
                     "physical_interface_policer", "shared_bandwidth_policer"):
            if getattr(data, flag):
                config_set.append(set_prefix + flag.replace("_", "-"))

        if data.if_exceeding is not None:
            block = data.if_exceeding
            config_set.append(set_prefix + "if-exceeding burst-size-limit " + block.burst_size_limit)
            if block.bandwidth_percent is not None:
                config_set.append(set_prefix + f"if-exceeding bandwidth-percent {block.bandwidth_percent}")
            if block.bandwidth_limit:
                config_set.append(set_prefix + "if-exceeding bandwidth-limit " + block.bandwidth_limit)

        if data.if_exceeding_pps is not None:
            config_set.append(set_prefix + "if-exceeding-pps packet-burst " + data.if_exceeding_pps.packet_burst)
            config_set.append(set_prefix + "if-exceeding-pps pps-limit " + data.if_exceeding_pps.pps_limit)

        if data.then is not None:
            if data.then.discard:
                config_set.append(set_prefix + "then discard")
            if data.then.forwarding_class:
                config_set.append(set_prefix + "then forwarding-class " + data.then.forwarding_class)
            if data.then.loss_priority:
                config_set.append(set_prefix + "then loss-priority " + data.then.loss_priority)
            if data.then.out_of_profile:
                config_set.append(set_prefix + "then out-of-profile")

        session.config_set(config_set)

    def read(self, session: Session, name: str) -> FirewallPolicerData:
        data = FirewallPolicerData()
        output = session.command(CMD_SHOW_CONFIG + self._path(name) + PIPE_DISPLAY_SET_RELATIVE)
        if output == EMPTY_W:
            return data

        data.name = name
        self.fill_id(data)
        for item in iter_config_lines(output):
            line = ConfigLine(item)
            if item in ("filter-specific", "logical-bandwidth-policer", "logical-interface-policer",
                        "physical-interface-policer", "shared-bandwidth-policer"):
                setattr(data, item.replace("-", "_"), True)
            elif line.cut("if-exceeding "):
                if data.if_exceeding is None:
                    data.if_exceeding = PolicerIfExceeding()
                if line.cut("burst-size-limit "):
                    data.if_exceeding.burst_size_limit = line.rest
                elif line.cut("bandwidth-percent "):
                    data.if_exceeding.bandwidth_percent = line.as_int()
                elif line.cut("bandwidth-limit "):
                    data.if_exceeding.bandwidth_limit = line.rest
            elif line.cut("if-exceeding-pps "):
                if data.if_exceeding_pps is None:
                    data.if_exceeding_pps = PolicerIfExceedingPPS()
                if line.cut("packet-burst "):
                    data.if_exceeding_pps.packet_burst = line.rest
                elif line.cut("pps-limit "):
                    data.if_exceeding_pps.pps_limit = line.rest
            elif line.cut("then "):
                if data.then is None:
                    data.then = PolicerThen()
                if line.rest == "discard":
                    data.then.discard = True
                elif line.cut("forwarding-class "):
                    data.then.forwarding_class = line.rest
                elif line.cut("loss-priority "):
                    data.then.loss_priority = line.rest
                elif line.rest == "out-of-profile":
                    data.then.out_of_profile = True

        return data

    def delete_config(self, session: Session, data: FirewallPolicerData):
        session.config_set([DELETE_LS + self._path(data.name)])
