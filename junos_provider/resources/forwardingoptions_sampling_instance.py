"""Sampling instance (`forwarding-options sampling instance NAME`)"""

from dataclasses import dataclass, field
from typing import List, Optional

from junos_provider.junos.constants import (
    CMD_SHOW_CONFIG,
    DEFAULT_W,
    DELETE_LS,
    DISABLE_W,
    EMPTY_W,
    PIPE_DISPLAY_SET,
    PIPE_DISPLAY_SET_RELATIVE,
    SET_LS,
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
    routing_instance_prefix,
)

AUTONOMOUS_SYSTEM_TYPES = ("origin", "peer")
FLOW_SERVER_VERSIONS = (5, 8)
FAMILIES = ("inet", "inet6", "mpls")


@dataclass
class SamplingInput:
    max_packets_per_second: Optional[int] = None
    maximum_packet_length: Optional[int] = None
    rate: Optional[int] = None
    run_length: Optional[int] = None

    def validate(self) -> List[str]:
        issues = validators.validate_int_range(self.max_packets_per_second, "max_packets_per_second", 0, 65535)
        issues += validators.validate_int_range(self.maximum_packet_length, "maximum_packet_length", 0, 9192)
        issues += validators.validate_int_range(self.rate, "rate", 1, 16000000)
        issues += validators.validate_int_range(self.run_length, "run_length", 0, 20)
        return issues

    def config_set(self, set_prefix: str) -> List[str]:
        config_set = []
        if self.max_packets_per_second is not None:
            config_set.append(set_prefix + f"max-packets-per-second {self.max_packets_per_second}")
        if self.maximum_packet_length is not None:
            config_set.append(set_prefix + f"maximum-packet-length {self.maximum_packet_length}")
        if self.rate is not None:
            config_set.append(set_prefix + f"rate {self.rate}")
        if self.run_length is not None:
            config_set.append(set_prefix + f"run-length {self.run_length}")
        return config_set

    def read(self, line: ConfigLine):
        if line.cut("max-packets-per-second "):
            self.max_packets_per_second = line.as_int()
        elif line.cut("maximum-packet-length "):
            self.maximum_packet_length = line.as_int()
        elif line.cut("rate "):
            self.rate = line.as_int()
        elif line.cut("run-length "):
            self.run_length = line.as_int()


@dataclass
class FlowServer:
    hostname: str = ""
    port: Optional[int] = None
    aggregation_autonomous_system: bool = False
    aggregation_destination_prefix: bool = False
    aggregation_protocol_port: bool = False
    aggregation_source_destination_prefix: bool = False
    aggregation_source_destination_prefix_caida_compliant: bool = False
    aggregation_source_prefix: bool = False
    autonomous_system_type: str = ""
    dscp: Optional[int] = None
    forwarding_class: str = ""
    local_dump: bool = False
    no_local_dump: bool = False
    routing_instance: str = ""
    source_address: str = ""
    version_ipfix_template: str = ""
    version9_template: str = ""

    def caida_issue(self) -> List[str]:
        if self.aggregation_source_destination_prefix_caida_compliant and \
                not self.aggregation_source_destination_prefix:
            return [
                "aggregation_source_destination_prefix_caida_compliant = true "
                f"without aggregation_source_destination_prefix on flow-server \"{self.hostname}\""
            ]
        return []

    def validate(self, context: str) -> List[str]:
        issues = validators.validate_name(self.hostname, "hostname", max_length=250,
                                          pattern=validators.ADDRESS_NAME_FORMAT)
        if self.port is None:
            issues.append(f"port must be specified on flow-server \"{self.hostname}\"{context}")
        issues += validators.validate_int_range(self.port, "port", 1, 65535)
        issues += validators.validate_int_range(self.dscp, "dscp", 0, 63)
        issues += validators.validate_one_of(
            self.autonomous_system_type, "autonomous_system_type", AUTONOMOUS_SYSTEM_TYPES
        )
        issues += validators.validate_address(self.source_address, "source_address")
        issues += validators.conflicts(
            self, "local_dump", ("no_local_dump",), f"flow-server \"{self.hostname}\"{context}"
        )
        issues += self.caida_issue()
        return issues

    def config_set(self, set_prefix: str) -> List[str]:
        set_prefix += f"flow-server {self.hostname} "
        issues = self.caida_issue()
        if issues:
            raise ConfigSetError(issues[0], "flow_server")

        config_set = [set_prefix + f"port {self.port}"]
        if self.aggregation_autonomous_system:
            config_set.append(set_prefix + "aggregation autonomous-system")
        if self.aggregation_destination_prefix:
            config_set.append(set_prefix + "aggregation destination-prefix")
        if self.aggregation_protocol_port:
            config_set.append(set_prefix + "aggregation protocol-port")
        if self.aggregation_source_destination_prefix:
            config_set.append(set_prefix + "aggregation source-destination-prefix")
            if self.aggregation_source_destination_prefix_caida_compliant:
                config_set.append(set_prefix + "aggregation source-destination-prefix caida-compliant")
        if self.aggregation_source_prefix:
            config_set.append(set_prefix + "aggregation source-prefix")
        if self.autonomous_system_type:
            config_set.append(set_prefix + "autonomous-system-type " + self.autonomous_system_type)
        if self.dscp is not None:
            config_set.append(set_prefix + f"dscp {self.dscp}")
        if self.forwarding_class:
            config_set.append(set_prefix + f"forwarding-class \"{self.forwarding_class}\"")
        if self.local_dump:
            config_set.append(set_prefix + "local-dump")
        if self.no_local_dump:
            config_set.append(set_prefix + "no-local-dump")
        if self.routing_instance:
            config_set.append(set_prefix + "routing-instance " + self.routing_instance)
        if self.source_address:
            config_set.append(set_prefix + "source-address " + self.source_address)
        config_set.extend(self.version_lines(set_prefix))
        if self.version_ipfix_template:
            config_set.append(set_prefix + f"version-ipfix template \"{self.version_ipfix_template}\"")
        if self.version9_template:
            config_set.append(set_prefix + f"version9 template \"{self.version9_template}\"")
        return config_set

    def version_lines(self, set_prefix: str) -> List[str]:
        return []

    def read(self, line: ConfigLine):
        if line.cut("port "):
            self.port = line.as_int()
        elif line.rest == "aggregation autonomous-system":
            self.aggregation_autonomous_system = True
        elif line.rest == "aggregation destination-prefix":
            self.aggregation_destination_prefix = True
        elif line.rest == "aggregation protocol-port":
            self.aggregation_protocol_port = True
        elif line.cut("aggregation source-destination-prefix"):
            self.aggregation_source_destination_prefix = True
            if line.rest == " caida-compliant":
                self.aggregation_source_destination_prefix_caida_compliant = True
        elif line.rest == "aggregation source-prefix":
            self.aggregation_source_prefix = True
        elif line.cut("autonomous-system-type "):
            self.autonomous_system_type = line.rest
        elif line.cut("dscp "):
            self.dscp = line.as_int()
        elif line.cut("forwarding-class "):
            self.forwarding_class = line.value
        elif line.rest == "local-dump":
            self.local_dump = True
        elif line.rest == "no-local-dump":
            self.no_local_dump = True
        elif line.cut("routing-instance "):
            self.routing_instance = line.rest
        elif line.cut("source-address "):
            self.source_address = line.rest
        elif line.cut("version-ipfix template "):
            self.version_ipfix_template = line.value
        elif line.cut("version9 template "):
            self.version9_template = line.value
        else:
            self.read_version(line)

    def read_version(self, line: ConfigLine):
        pass


@dataclass
class InetFlowServer(FlowServer):
    """Flow server of family inet, the only family with cflowd versions"""

    version: Optional[int] = None

    def validate(self, context: str) -> List[str]:
        issues = super().validate(context)
        if self.version is not None and self.version not in FLOW_SERVER_VERSIONS:
            issues.append(f"version must be one of 5, 8, got {self.version}")
        return issues

    def version_lines(self, set_prefix: str) -> List[str]:
        if self.version is not None:
            return [set_prefix + f"version {self.version}"]
        return []

    def read_version(self, line: ConfigLine):
        if line.cut("version "):
            self.version = line.as_int()


@dataclass
class OutputInterface:
    name: str = ""
    engine_id: Optional[int] = None
    engine_type: Optional[int] = None
    source_address: str = ""

    def validate(self) -> List[str]:
        issues = validators.validate_name(self.name, "interface name", max_length=250,
                                          pattern=validators.ADDRESS_NAME_FORMAT)
        issues += validators.validate_int_range(self.engine_id, "engine_id", 0, 255)
        issues += validators.validate_int_range(self.engine_type, "engine_type", 0, 255)
        issues += validators.validate_address(self.source_address, "source_address")
        return issues

    def config_set(self, set_prefix: str) -> List[str]:
        set_prefix += f"interface {self.name} "
        config_set = [set_prefix.rstrip()]
        if self.engine_id is not None:
            config_set.append(set_prefix + f"engine-id {self.engine_id}")
        if self.engine_type is not None:
            config_set.append(set_prefix + f"engine-type {self.engine_type}")
        if self.source_address:
            config_set.append(set_prefix + "source-address " + self.source_address)
        return config_set

    def read(self, line: ConfigLine):
        if line.cut("engine-id "):
            self.engine_id = line.as_int()
        elif line.cut("engine-type "):
            self.engine_type = line.as_int()
        elif line.cut("source-address "):
            self.source_address = line.rest


@dataclass
class MplsOutput:
    aggregate_export_interval: Optional[int] = None
    flow_active_timeout: Optional[int] = None
    flow_inactive_timeout: Optional[int] = None
    flow_server: List[FlowServer] = field(default_factory=list)
    inline_jflow_export_rate: Optional[int] = None
    inline_jflow_source_address: str = ""
    interface: List[OutputInterface] = field(default_factory=list)

    flow_server_class = FlowServer

    def validate(self, attr: str) -> List[str]:
        context = f" in {attr} block"
        issues = validators.validate_int_range(
            self.aggregate_export_interval, "aggregate_export_interval", 90, 1800
        )
        issues += validators.validate_int_range(self.flow_active_timeout, "flow_active_timeout", 60, 1800)
        issues += validators.validate_int_range(self.flow_inactive_timeout, "flow_inactive_timeout", 15, 1800)
        issues += validators.validate_int_range(
            self.inline_jflow_export_rate, "inline_jflow_export_rate", 1, 3200
        )
        issues += validators.validate_address(self.inline_jflow_source_address, "inline_jflow_source_address")
        if self.inline_jflow_export_rate is not None and not self.inline_jflow_source_address:
            issues.append(f"inline_jflow_source_address must be specified with inline_jflow_export_rate{context}")
        if self.inline_jflow_source_address and not self.flow_server:
            issues.append(f"flow_server must be specified with inline_jflow_source_address{context}")
        for server in self.flow_server:
            issues += server.validate(context)
        for hostname in validators.duplicates(s.hostname for s in self.flow_server):
            issues.append(f"multiple blocks flow_server with the same hostname \"{hostname}\"")
        for iface in self.interface:
            issues += iface.validate()
        for name in validators.duplicates(i.name for i in self.interface):
            issues.append(f"multiple blocks interface with the same name \"{name}\"")
        return issues

    def extension_lines(self, set_prefix: str) -> List[str]:
        return []

    def config_set(self, set_prefix: str) -> List[str]:
        for hostname in validators.duplicates(s.hostname for s in self.flow_server):
            raise ConfigSetError(f"multiple blocks flow_server with the same hostname \"{hostname}\"",
                                 "flow_server")
        for name in validators.duplicates(i.name for i in self.interface):
            raise ConfigSetError(f"multiple blocks interface with the same name \"{name}\"", "interface")

        config_set = []
        if self.aggregate_export_interval is not None:
            config_set.append(set_prefix + f"aggregate-export-interval {self.aggregate_export_interval}")
        config_set.extend(self.extension_lines(set_prefix))
        if self.flow_active_timeout is not None:
            config_set.append(set_prefix + f"flow-active-timeout {self.flow_active_timeout}")
        if self.flow_inactive_timeout is not None:
            config_set.append(set_prefix + f"flow-inactive-timeout {self.flow_inactive_timeout}")
        for server in self.flow_server:
            config_set.extend(server.config_set(set_prefix))
        if self.inline_jflow_export_rate is not None:
            config_set.append(set_prefix + f"inline-jflow flow-export-rate {self.inline_jflow_export_rate}")
        if self.inline_jflow_source_address:
            config_set.append(set_prefix + "inline-jflow source-address " + self.inline_jflow_source_address)
        for iface in self.interface:
            config_set.extend(iface.config_set(set_prefix))
        return config_set

    def read(self, line: ConfigLine):
        if line.cut("aggregate-export-interval "):
            self.aggregate_export_interval = line.as_int()
        elif line.cut("flow-active-timeout "):
            self.flow_active_timeout = line.as_int()
        elif line.cut("flow-inactive-timeout "):
            self.flow_inactive_timeout = line.as_int()
        elif line.cut("flow-server "):
            hostname = line.cut_word()
            server = extract_block(
                self.flow_server, "hostname", hostname, lambda: self.flow_server_class(hostname=hostname)
            )
            server.read(line)
            self.flow_server.append(server)
        elif line.cut("inline-jflow flow-export-rate "):
            self.inline_jflow_export_rate = line.as_int()
        elif line.cut("inline-jflow source-address "):
            self.inline_jflow_source_address = line.rest
        elif line.cut("interface "):
            name = line.cut_word()
            iface = extract_block(self.interface, "name", name, lambda: OutputInterface(name=name))
            iface.read(line)
            self.interface.append(iface)
        else:
            self.read_extension(line)

    def read_extension(self, line: ConfigLine):
        pass


@dataclass
class Inet6Output(MplsOutput):
    extension_service: List[str] = field(default_factory=list)

    def extension_lines(self, set_prefix: str) -> List[str]:
        return [set_prefix + f"extension-service \"{service}\"" for service in self.extension_service]

    def read_extension(self, line: ConfigLine):
        if line.cut("extension-service "):
            self.extension_service.append(line.value)


@dataclass
class InetOutput(Inet6Output):
    flow_server: List[InetFlowServer] = field(default_factory=list)

    flow_server_class = InetFlowServer


@dataclass
class SamplingInstanceData(ResourceData):
    name: str = ""
    routing_instance: str = DEFAULT_W
    disable: bool = False
    family_inet_input: Optional[SamplingInput] = None
    family_inet_output: Optional[InetOutput] = None
    family_inet6_input: Optional[SamplingInput] = None
    family_inet6_output: Optional[Inet6Output] = None
    family_mpls_input: Optional[SamplingInput] = None
    family_mpls_output: Optional[MplsOutput] = None
    input: Optional[SamplingInput] = None


_OUTPUT_CLASSES = {"inet": InetOutput, "inet6": Inet6Output, "mpls": MplsOutput}


def _instance_path(name: str, routing_instance: str) -> str:
    return f"{routing_instance_prefix(routing_instance)}forwarding-options sampling instance \"{name}\""


class ForwardingoptionsSamplingInstance(Resource):
    type_name = "junos_forwardingoptions_sampling_instance"
    junos_name = "forwarding-options sampling instance"
    data_class = SamplingInstanceData
    identity_fields = ("name", "routing_instance")
    import_id_parts = 2
    import_id_format = "<name>_-_<routing_instance>"
    has_routing_instance = True

    def validate(self, data: SamplingInstanceData) -> List[str]:
        issues = validators.validate_name(data.name, "name", max_length=250,
                                          pattern=validators.ADDRESS_NAME_FORMAT)
        issues += validators.validate_name(data.routing_instance, "routing_instance", max_length=63)

        if data.input is not None:
            if validators.block_is_empty(data.input):
                issues.append("input block is empty")
            for family in FAMILIES:
                if getattr(data, f"family_{family}_input") is not None:
                    issues.append(f"cannot set family_{family}_input block if input block is used")
        inputs = [getattr(data, f"family_{family}_input") for family in FAMILIES] + [data.input]
        if all(block is None for block in inputs):
            issues.append(
                "one of input, family_inet_input, family_inet6_input or family_mpls_input must be specified"
            )
        if data.input is not None:
            issues += data.input.validate()

        outputs = [getattr(data, f"family_{family}_output") for family in FAMILIES]
        if all(block is None for block in outputs):
            issues.append(
                "one of family_inet_output, family_inet6_output or family_mpls_output must be specified"
            )

        for family in FAMILIES:
            attr = f"family_{family}_input"
            block = getattr(data, attr)
            if block is not None:
                if validators.block_is_empty(block):
                    issues.append(f"{attr} block is empty")
                issues += block.validate()
            attr = f"family_{family}_output"
            block = getattr(data, attr)
            if block is not None:
                if validators.block_is_empty(block):
                    issues.append(f"{attr} block is empty")
                issues += block.validate(attr)
        return issues

    def read_args(self, data: SamplingInstanceData) -> tuple:
        return (data.name, data.routing_instance)

    def exists(self, session: Session, data: SamplingInstanceData) -> bool:
        output = session.command(
            CMD_SHOW_CONFIG + _instance_path(data.name, data.routing_instance) + PIPE_DISPLAY_SET
        )
        return output != EMPTY_W

    def set(self, session: Session, data: SamplingInstanceData):
        set_prefix = SET_LS + _instance_path(data.name, data.routing_instance) + " "
        config_set = []

        if data.disable:
            config_set.append(set_prefix + DISABLE_W)
        for family in FAMILIES:
            for direction in ("input", "output"):
                attr = f"family_{family}_{direction}"
                block = getattr(data, attr)
                if block is None:
                    continue
                if validators.block_is_empty(block):
                    raise ConfigSetError(f"{attr} block is empty", attr)
                config_set.extend(block.config_set(set_prefix + f"family {family} {direction} "))
        if data.input is not None:
            if validators.block_is_empty(data.input):
                raise ConfigSetError("input block is empty", "input")
            config_set.extend(data.input.config_set(set_prefix + "input "))

        session.config_set(config_set)

    def read(self, session: Session, name: str, routing_instance: str) -> SamplingInstanceData:
        data = SamplingInstanceData()
        output = session.command(
            CMD_SHOW_CONFIG + _instance_path(name, routing_instance) + PIPE_DISPLAY_SET_RELATIVE
        )
        if output == EMPTY_W:
            return data

        data.name = name
        data.routing_instance = routing_instance or DEFAULT_W
        self.fill_id(data)
        for item in iter_config_lines(output):
            line = ConfigLine(item)
            if item == DISABLE_W:
                data.disable = True
                continue
            for family in FAMILIES:
                if line.cut(f"family {family} input "):
                    attr = f"family_{family}_input"
                    if getattr(data, attr) is None:
                        setattr(data, attr, SamplingInput())
                    getattr(data, attr).read(line)
                    break
                if line.cut(f"family {family} output "):
                    attr = f"family_{family}_output"
                    if getattr(data, attr) is None:
                        setattr(data, attr, _OUTPUT_CLASSES[family]())
                    getattr(data, attr).read(line)
                    break
            else:
                if line.cut("input "):
                    if data.input is None:
                        data.input = SamplingInput()
                    data.input.read(line)

        return data

    def delete_config(self, session: Session, data: SamplingInstanceData):
        session.config_set([DELETE_LS + _instance_path(data.name, data.routing_instance)])
