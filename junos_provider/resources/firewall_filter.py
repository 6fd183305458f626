"""
Firewall filter (`firewall family FAMILY filter NAME`)

Terms are kept in configuration order. Match conditions of the from block are
driven by FROM_LISTS, which also records the families accepting each one.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional

from junos_provider.junos.constants import (
    CMD_SHOW_CONFIG,
    DELETE_LS,
    DISCARD_W,
    EMPTY_W,
    PIPE_DISPLAY_SET,
    PIPE_DISPLAY_SET_RELATIVE,
)
from junos_provider.junos.session import Session
from junos_provider.resources import validators
from junos_provider.resources.base import (
    ConfigLine,
    ConfigSetError,
    Resource,
    ResourceData,
    extract_block,
    iter_config_lines,
)

FAMILIES = ("inet", "inet6", "any", "ccc", "mpls", "vpls", "ethernet-switching")
THEN_ACTIONS = ("accept", "reject", DISCARD_W, "next term")
LOSS_PRIORITIES = ("high", "low", "medium-high", "medium-low")
NO_DOUBLE_QUOTE = re.compile(r"^[^\"]+$")

_IP = ("inet", "inet6")
_IP_ES = ("inet", "inet6", "ethernet-switching")
_IP_VPLS = ("inet", "inet6", "vpls")
_IP_VPLS_ES = ("inet", "inet6", "vpls", "ethernet-switching")
_MAC = ("vpls", "ethernet-switching")
_QOS = ("inet", "inet6", "any", "ccc", "mpls", "vpls")

# Negated form of a match condition
EXCEPT_SUFFIX = "suffix"  # `keyword VALUE except`
EXCEPT_KEYWORD = "keyword"  # `keyword-except VALUE`


@dataclass(frozen=True)
class FromList:
    attr: str
    keyword: str
    families: tuple
    except_style: Optional[str] = None
    quoted: bool = False


FROM_LISTS = (
    FromList("address", "address", _IP_ES, EXCEPT_SUFFIX),
    FromList("destination_address", "destination-address", _IP, EXCEPT_SUFFIX),
    FromList("destination_mac_address", "destination-mac-address", _MAC, EXCEPT_SUFFIX),
    FromList("destination_port", "destination-port", _IP_VPLS_ES, EXCEPT_KEYWORD),
    FromList("destination_prefix_list", "destination-prefix-list", _IP_VPLS_ES, EXCEPT_SUFFIX, quoted=True),
    FromList("forwarding_class", "forwarding-class", FAMILIES, EXCEPT_KEYWORD),
    FromList("icmp_code", "icmp-code", _IP_VPLS_ES, EXCEPT_KEYWORD),
    FromList("icmp_type", "icmp-type", _IP_VPLS_ES, EXCEPT_KEYWORD),
    FromList("interface", "interface", ("inet", "inet6", "any", "mpls", "vpls", "ethernet-switching")),
    FromList("loss_priority", "loss-priority", _QOS, EXCEPT_KEYWORD),
    FromList("next_header", "next-header", ("inet6",), EXCEPT_KEYWORD),
    FromList("packet_length", "packet-length", ("inet", "inet6", "any"), EXCEPT_KEYWORD),
    FromList("policy_map", "policy-map", _QOS, EXCEPT_KEYWORD),
    FromList("port", "port", _IP_VPLS_ES, EXCEPT_KEYWORD),
    FromList("prefix_list", "prefix-list", _IP_VPLS, EXCEPT_SUFFIX, quoted=True),
    FromList("protocol", "protocol", ("inet", "ethernet-switching"), EXCEPT_KEYWORD),
    FromList("source_address", "source-address", _IP, EXCEPT_SUFFIX),
    FromList("source_mac_address", "source-mac-address", _MAC, EXCEPT_SUFFIX),
    FromList("source_port", "source-port", _IP_VPLS_ES, EXCEPT_KEYWORD),
    FromList("source_prefix_list", "source-prefix-list", _IP_VPLS_ES, EXCEPT_SUFFIX, quoted=True),
)

FROM_FLAG_FAMILIES = {
    "is_fragment": _IP_ES,
    "tcp_established": _IP_ES,
    "tcp_flags": _IP_VPLS_ES,
    "tcp_initial": _IP_ES,
}


@dataclass
class FirewallFilterFrom:
    address: List[str] = field(default_factory=list)
    address_except: List[str] = field(default_factory=list)
    destination_address: List[str] = field(default_factory=list)
    destination_address_except: List[str] = field(default_factory=list)
    destination_mac_address: List[str] = field(default_factory=list)
    destination_mac_address_except: List[str] = field(default_factory=list)
    destination_port: List[str] = field(default_factory=list)
    destination_port_except: List[str] = field(default_factory=list)
    destination_prefix_list: List[str] = field(default_factory=list)
    destination_prefix_list_except: List[str] = field(default_factory=list)
    forwarding_class: List[str] = field(default_factory=list)
    forwarding_class_except: List[str] = field(default_factory=list)
    icmp_code: List[str] = field(default_factory=list)
    icmp_code_except: List[str] = field(default_factory=list)
    icmp_type: List[str] = field(default_factory=list)
    icmp_type_except: List[str] = field(default_factory=list)
    interface: List[str] = field(default_factory=list)
    is_fragment: bool = False
    loss_priority: List[str] = field(default_factory=list)
    loss_priority_except: List[str] = field(default_factory=list)
    next_header: List[str] = field(default_factory=list)
    next_header_except: List[str] = field(default_factory=list)
    packet_length: List[str] = field(default_factory=list)
    packet_length_except: List[str] = field(default_factory=list)
    policy_map: List[str] = field(default_factory=list)
    policy_map_except: List[str] = field(default_factory=list)
    port: List[str] = field(default_factory=list)
    port_except: List[str] = field(default_factory=list)
    prefix_list: List[str] = field(default_factory=list)
    prefix_list_except: List[str] = field(default_factory=list)
    protocol: List[str] = field(default_factory=list)
    protocol_except: List[str] = field(default_factory=list)
    source_address: List[str] = field(default_factory=list)
    source_address_except: List[str] = field(default_factory=list)
    source_mac_address: List[str] = field(default_factory=list)
    source_mac_address_except: List[str] = field(default_factory=list)
    source_port: List[str] = field(default_factory=list)
    source_port_except: List[str] = field(default_factory=list)
    source_prefix_list: List[str] = field(default_factory=list)
    source_prefix_list_except: List[str] = field(default_factory=list)
    tcp_established: bool = False
    tcp_flags: str = ""
    tcp_initial: bool = False

    def conflict_issues(self, context: str) -> List[str]:
        issues = []
        for option in FROM_LISTS:
            if option.except_style == EXCEPT_KEYWORD:
                issues += validators.conflicts(self, option.attr, (option.attr + "_except",), context)
        issues += validators.conflicts(self, "tcp_established", ("tcp_flags", "tcp_initial"), context)
        return issues

    def family_issues(self, family: str) -> List[str]:
        suffix = f" in from block cannot be configured with family \"{family}\""
        issues = []
        for option in FROM_LISTS:
            if family in option.families:
                continue
            names = [option.attr] + ([option.attr + "_except"] if option.except_style else [])
            issues += [name + suffix for name in names if getattr(self, name)]
        for attr, families in FROM_FLAG_FAMILIES.items():
            if getattr(self, attr) and family not in families:
                issues.append(attr + suffix)
        return issues

    def config_set(self, set_prefix: str) -> List[str]:
        set_prefix += "from "
        config_set = []
        for option in FROM_LISTS:
            def render(value: str) -> str:
                return f"\"{value}\"" if option.quoted else value

            for value in getattr(self, option.attr):
                config_set.append(set_prefix + f"{option.keyword} {render(value)}")
            if option.except_style == EXCEPT_SUFFIX:
                for value in getattr(self, option.attr + "_except"):
                    config_set.append(set_prefix + f"{option.keyword} {render(value)} except")
            elif option.except_style == EXCEPT_KEYWORD:
                for value in getattr(self, option.attr + "_except"):
                    config_set.append(set_prefix + f"{option.keyword}-except {render(value)}")
            # is-fragment sits between interface and loss-priority
            if option.attr == "interface" and self.is_fragment:
                config_set.append(set_prefix + "is-fragment")
        if self.tcp_established:
            config_set.append(set_prefix + "tcp-established")
        if self.tcp_flags:
            config_set.append(set_prefix + f"tcp-flags \"{self.tcp_flags}\"")
        if self.tcp_initial:
            config_set.append(set_prefix + "tcp-initial")
        return config_set

    def read(self, line: ConfigLine):
        if line.rest in ("is-fragment", "tcp-established", "tcp-initial"):
            setattr(self, line.rest.replace("-", "_"), True)
            return
        if line.cut("tcp-flags "):
            self.tcp_flags = line.value
            return
        for option in FROM_LISTS:
            if option.except_style == EXCEPT_KEYWORD and line.cut(option.keyword + "-except "):
                getattr(self, option.attr + "_except").append(line.value)
                return
            if line.cut(option.keyword + " "):
                if option.except_style == EXCEPT_SUFFIX and line.rest.endswith(" except"):
                    value = line.rest[:-len(" except")]
                    getattr(self, option.attr + "_except").append(value.strip('"'))
                else:
                    getattr(self, option.attr).append(line.value)
                return


@dataclass
class FirewallFilterThen:
    action: str = ""
    count: str = ""
    forwarding_class: str = ""
    log: bool = False
    loss_priority: str = ""
    packet_mode: bool = False
    policer: str = ""
    port_mirror: bool = False
    routing_instance: str = ""
    sample: bool = False
    service_accounting: bool = False
    syslog: bool = False

    def config_set(self, set_prefix: str) -> List[str]:
        set_prefix += "then "
        config_set = []
        if self.action:
            config_set.append(set_prefix + self.action)
        if self.count:
            config_set.append(set_prefix + f"count \"{self.count}\"")
        if self.forwarding_class:
            config_set.append(set_prefix + f"forwarding-class \"{self.forwarding_class}\"")
        if self.log:
            config_set.append(set_prefix + "log")
        if self.loss_priority:
            config_set.append(set_prefix + "loss-priority " + self.loss_priority)
        if self.packet_mode:
            config_set.append(set_prefix + "packet-mode")
        if self.policer:
            config_set.append(set_prefix + f"policer \"{self.policer}\"")
        if self.port_mirror:
            config_set.append(set_prefix + "port-mirror")
        if self.routing_instance:
            config_set.append(set_prefix + "routing-instance " + self.routing_instance)
        if self.sample:
            config_set.append(set_prefix + "sample")
        if self.service_accounting:
            config_set.append(set_prefix + "service-accounting")
        if self.syslog:
            config_set.append(set_prefix + "syslog")
        return config_set

    def read(self, line: ConfigLine):
        if line.rest in THEN_ACTIONS:
            self.action = line.rest
        elif line.cut("count "):
            self.count = line.value
        elif line.cut("forwarding-class "):
            self.forwarding_class = line.value
        elif line.cut("loss-priority "):
            self.loss_priority = line.rest
        elif line.cut("policer "):
            self.policer = line.value
        elif line.cut("routing-instance "):
            self.routing_instance = line.rest
        elif line.rest in ("log", "packet-mode", "port-mirror", "sample", "service-accounting", "syslog"):
            setattr(self, line.rest.replace("-", "_"), True)


@dataclass
class FirewallFilterTerm:
    name: str = ""
    filter: str = ""
    from_: Optional[FirewallFilterFrom] = field(default=None, metadata={"key": "from"})
    then: Optional[FirewallFilterThen] = None


@dataclass
class FirewallFilterData(ResourceData):
    name: str = ""
    family: str = ""
    interface_specific: bool = False
    term: List[FirewallFilterTerm] = field(default_factory=list)


class FirewallFilter(Resource):
    type_name = "junos_firewall_filter"
    junos_name = "firewall filter"
    data_class = FirewallFilterData
    identity_fields = ("name", "family")
    import_id_parts = 2
    import_id_format = "<name>_-_<family>"

    def validate(self, data: FirewallFilterData) -> List[str]:
        issues = validators.validate_name(data.name, "name", pattern=NO_DOUBLE_QUOTE)
        if not data.family:
            issues.append("family must be set")
        issues += validators.validate_one_of(data.family, "family", FAMILIES)
        if not data.term:
            issues.append("term block must be specified")

        for name in validators.duplicates(term.name for term in data.term):
            issues.append(f"multiple term blocks with the same name \"{name}\"")
        for term in data.term:
            context = f"term block \"{term.name}\""
            issues += validators.validate_name(term.name, "term name", pattern=NO_DOUBLE_QUOTE)
            if validators.block_is_empty(term, exclude=("name",)):
                issues.append(f"{context} is empty")
            if term.from_ is not None:
                if validators.block_is_empty(term.from_):
                    issues.append(f"from block in {context} is empty")
                issues += term.from_.conflict_issues(f"from block in {context}")
                if data.family in FAMILIES:
                    issues += term.from_.family_issues(data.family)
                for priority in term.from_.loss_priority + term.from_.loss_priority_except:
                    issues += validators.validate_one_of(priority, "loss_priority", LOSS_PRIORITIES)
            if term.then is not None:
                if validators.block_is_empty(term.then):
                    issues.append(f"then block in {context} is empty")
                issues += validators.validate_one_of(term.then.action, "action", THEN_ACTIONS)
                issues += validators.validate_one_of(term.then.loss_priority, "loss_priority", LOSS_PRIORITIES)
        return issues

    def _path(self, name: str, family: str) -> str:
        return f"firewall family {family} filter \"{name}\""

    def read_args(self, data: FirewallFilterData) -> tuple:
        return (data.name, data.family)

    def exists(self, session: Session, data: FirewallFilterData) -> bool:
        output = session.command(CMD_SHOW_CONFIG + self._path(data.name, data.family) + PIPE_DISPLAY_SET)
        return output != EMPTY_W

    def set(self, session: Session, data: FirewallFilterData):
        set_prefix = f"set {self._path(data.name, data.family)} "
        config_set = []

        if data.interface_specific:
            config_set.append(set_prefix + "interface-specific")
        seen = set()
        for index, term in enumerate(data.term):
            if term.name in seen:
                raise ConfigSetError(
                    f"multiple term blocks with the same name \"{term.name}\"", f"term[{index}].name"
                )
            seen.add(term.name)

            term_prefix = set_prefix + f"term \"{term.name}\" "
            if term.filter:
                config_set.append(term_prefix + f"filter \"{term.filter}\"")
            if term.from_ is not None:
                conflicts = term.from_.conflict_issues("from block")
                if conflicts:
                    raise ConfigSetError(conflicts[0], f"term[{index}].from")
                config_set.extend(term.from_.config_set(term_prefix))
            if term.then is not None:
                config_set.extend(term.then.config_set(term_prefix))

        session.config_set(config_set)

    def read(self, session: Session, name: str, family: str) -> FirewallFilterData:
        data = FirewallFilterData()
        output = session.command(CMD_SHOW_CONFIG + self._path(name, family) + PIPE_DISPLAY_SET_RELATIVE)
        if output == EMPTY_W:
            return data

        data.name = name
        data.family = family
        self.fill_id(data)
        for item in iter_config_lines(output):
            line = ConfigLine(item)
            if item == "interface-specific":
                data.interface_specific = True
            elif line.cut("term "):
                term_name = line.cut_word().strip('"')
                term = extract_block(data.term, "name", term_name, lambda: FirewallFilterTerm(name=term_name))
                if line.cut("filter "):
                    term.filter = line.value
                elif line.cut("from "):
                    if term.from_ is None:
                        term.from_ = FirewallFilterFrom()
                    term.from_.read(line)
                elif line.cut("then "):
                    if term.then is None:
                        term.then = FirewallFilterThen()
                    term.then.read(line)
                data.term.append(term)

        return data

    def delete_config(self, session: Session, data: FirewallFilterData):
        session.config_set([DELETE_LS + self._path(data.name, data.family)])
