"""RIP / RIPng group (`protocols rip|ripng group NAME`)"""

from dataclasses import dataclass, field
from typing import List, Optional

from junos_provider.junos.constants import (
    CMD_SHOW_CONFIG,
    DEFAULT_W,
    DELETE_LS,
    EMPTY_W,
    ID_SEPARATOR,
    PIPE_DISPLAY_SET,
    PIPE_DISPLAY_SET_RELATIVE,
    SET_LS,
)
from junos_provider.junos.session import Session
from junos_provider.resources import validators
from junos_provider.resources.base import (
    BadIDFormatError,
    ConfigLine,
    ConfigSetError,
    Resource,
    ResourceData,
    iter_config_lines,
    routing_instance_prefix,
)

BFD_AUTHENTICATION_ALGORITHMS = (
    "keyed-md5",
    "keyed-sha-1",
    "meticulous-keyed-md5",
    "meticulous-keyed-sha-1",
    "simple-password",
)
BFD_VERSIONS = ("0", "1", "automatic")


@dataclass
class BfdLivenessDetection:
    authentication_algorithm: str = ""
    authentication_key_chain: str = ""
    authentication_loose_check: bool = False
    detection_time_threshold: Optional[int] = None
    minimum_interval: Optional[int] = None
    minimum_receive_interval: Optional[int] = None
    multiplier: Optional[int] = None
    no_adaptation: bool = False
    transmit_interval_minimum_interval: Optional[int] = None
    transmit_interval_threshold: Optional[int] = None
    version: str = ""

    def validate(self) -> List[str]:
        issues = []
        issues += validators.validate_one_of(
            self.authentication_algorithm, "authentication_algorithm", BFD_AUTHENTICATION_ALGORITHMS
        )
        issues += validators.validate_int_range(
            self.detection_time_threshold, "detection_time_threshold", 1, 4294967295
        )
        issues += validators.validate_int_range(self.minimum_interval, "minimum_interval", 1, 255000)
        issues += validators.validate_int_range(
            self.minimum_receive_interval, "minimum_receive_interval", 1, 255000
        )
        issues += validators.validate_int_range(self.multiplier, "multiplier", 1, 255)
        issues += validators.validate_int_range(
            self.transmit_interval_minimum_interval, "transmit_interval_minimum_interval", 1, 255000
        )
        issues += validators.validate_int_range(
            self.transmit_interval_threshold, "transmit_interval_threshold", 1, 4294967295
        )
        issues += validators.validate_one_of(self.version, "version", BFD_VERSIONS)
        return issues

    def config_set(self, set_prefix: str) -> List[str]:
        set_prefix += "bfd-liveness-detection "
        config_set = []
        if self.authentication_algorithm:
            config_set.append(set_prefix + "authentication algorithm " + self.authentication_algorithm)
        if self.authentication_key_chain:
            config_set.append(set_prefix + f"authentication key-chain \"{self.authentication_key_chain}\"")
        if self.authentication_loose_check:
            config_set.append(set_prefix + "authentication loose-check")
        if self.detection_time_threshold is not None:
            config_set.append(set_prefix + f"detection-time threshold {self.detection_time_threshold}")
        if self.minimum_interval is not None:
            config_set.append(set_prefix + f"minimum-interval {self.minimum_interval}")
        if self.minimum_receive_interval is not None:
            config_set.append(set_prefix + f"minimum-receive-interval {self.minimum_receive_interval}")
        if self.multiplier is not None:
            config_set.append(set_prefix + f"multiplier {self.multiplier}")
        if self.no_adaptation:
            config_set.append(set_prefix + "no-adaptation")
        if self.transmit_interval_minimum_interval is not None:
            config_set.append(
                set_prefix + f"transmit-interval minimum-interval {self.transmit_interval_minimum_interval}"
            )
        if self.transmit_interval_threshold is not None:
            config_set.append(set_prefix + f"transmit-interval threshold {self.transmit_interval_threshold}")
        if self.version:
            config_set.append(set_prefix + "version " + self.version)
        return config_set

    def read(self, line: ConfigLine):
        if line.cut("authentication algorithm "):
            self.authentication_algorithm = line.rest
        elif line.cut("authentication key-chain "):
            self.authentication_key_chain = line.value
        elif line.rest == "authentication loose-check":
            self.authentication_loose_check = True
        elif line.cut("detection-time threshold "):
            self.detection_time_threshold = line.as_int()
        elif line.cut("minimum-interval "):
            self.minimum_interval = line.as_int()
        elif line.cut("minimum-receive-interval "):
            self.minimum_receive_interval = line.as_int()
        elif line.cut("multiplier "):
            self.multiplier = line.as_int()
        elif line.rest == "no-adaptation":
            self.no_adaptation = True
        elif line.cut("transmit-interval minimum-interval "):
            self.transmit_interval_minimum_interval = line.as_int()
        elif line.cut("transmit-interval threshold "):
            self.transmit_interval_threshold = line.as_int()
        elif line.cut("version "):
            self.version = line.rest


@dataclass
class RipGroupData(ResourceData):
    name: str = ""
    ng: bool = False
    routing_instance: str = DEFAULT_W
    demand_circuit: bool = False
    export: List[str] = field(default_factory=list)
    import_: List[str] = field(default_factory=list, metadata={"key": "import"})
    max_retrans_time: Optional[int] = None
    metric_out: Optional[int] = None
    preference: Optional[int] = None
    route_timeout: Optional[int] = None
    update_interval: Optional[int] = None
    bfd_liveness_detection: Optional[BfdLivenessDetection] = None


def _group_path(name: str, ng: bool, routing_instance: str) -> str:
    protocol = "ripng" if ng else "rip"
    return f"{routing_instance_prefix(routing_instance)}protocols {protocol} group \"{name}\""


class RipGroup(Resource):
    type_name = "junos_rip_group"
    junos_name = "protocols rip group"
    data_class = RipGroupData
    identity_fields = ("name", "ng", "routing_instance")
    import_id_format = "<name>_-_<routing_instance> or <name>_-_ng_-_<routing_instance>"
    has_routing_instance = True

    def validate(self, data: RipGroupData) -> List[str]:
        issues = validators.validate_name(data.name, "name", max_length=48)
        issues += validators.validate_name(data.routing_instance, "routing_instance", max_length=63)
        issues += validators.conflicts(
            data, "ng", ("demand_circuit", "max_retrans_time", "bfd_liveness_detection")
        )
        for attr in ("export", "import_"):
            for policy in getattr(data, attr):
                issues += validators.validate_name(policy, attr.rstrip("_"), max_length=63)
        issues += validators.validate_int_range(data.max_retrans_time, "max_retrans_time", 5, 180)
        issues += validators.validate_int_range(data.metric_out, "metric_out", 1, 15)
        issues += validators.validate_int_range(data.preference, "preference", 0, 4294967295)
        issues += validators.validate_int_range(data.route_timeout, "route_timeout", 30, 360)
        issues += validators.validate_int_range(data.update_interval, "update_interval", 10, 60)
        if data.bfd_liveness_detection is not None:
            if validators.block_is_empty(data.bfd_liveness_detection):
                issues.append("bfd_liveness_detection block is empty")
            else:
                issues += data.bfd_liveness_detection.validate()
        return issues

    def label(self, data: RipGroupData) -> str:
        return data.name

    def exists(self, session: Session, data: RipGroupData) -> bool:
        output = session.command(
            CMD_SHOW_CONFIG + _group_path(data.name, data.ng, data.routing_instance) + PIPE_DISPLAY_SET
        )
        return output != EMPTY_W

    def set(self, session: Session, data: RipGroupData):
        set_prefix = SET_LS + _group_path(data.name, data.ng, data.routing_instance) + " "
        config_set = [set_prefix.rstrip()]

        if data.demand_circuit:
            config_set.append(set_prefix + "demand-circuit")
        for policy in data.export:
            config_set.append(set_prefix + "export " + policy)
        for policy in data.import_:
            config_set.append(set_prefix + "import " + policy)
        for attr in ("max_retrans_time", "metric_out", "preference", "route_timeout", "update_interval"):
            value = getattr(data, attr)
            if value is not None:
                config_set.append(set_prefix + f"{attr.replace('_', '-')} {value}")
        if data.bfd_liveness_detection is not None:
            if validators.block_is_empty(data.bfd_liveness_detection):
                raise ConfigSetError("bfd_liveness_detection block is empty", "bfd_liveness_detection")
            config_set.extend(data.bfd_liveness_detection.config_set(set_prefix))

        session.config_set(config_set)

    def read_args(self, data: RipGroupData) -> tuple:
        return (data.name, data.ng, data.routing_instance)

    def fill_id(self, data: RipGroupData):
        parts = [data.name]
        if data.ng:
            parts.append("ng")
        parts.append(data.routing_instance or DEFAULT_W)
        data.id = ID_SEPARATOR.join(parts)

    def parse_import_id(self, import_id: str) -> tuple:
        parts = import_id.split(ID_SEPARATOR)
        if len(parts) < 2:
            raise BadIDFormatError(f"missing element(s) in id with separator \"{ID_SEPARATOR}\"")
        if len(parts) > 3 or (len(parts) == 3 and parts[1] != "ng"):
            raise BadIDFormatError(f"id must be {self.import_id_format}")
        if len(parts) == 3:
            return (parts[0], True, parts[2])
        return (parts[0], False, parts[1])

    def read(self, session: Session, name: str, ng: bool, routing_instance: str) -> RipGroupData:
        data = RipGroupData()
        output = session.command(
            CMD_SHOW_CONFIG + _group_path(name, ng, routing_instance) + PIPE_DISPLAY_SET_RELATIVE
        )
        if output == EMPTY_W:
            return data

        data.name = name
        data.ng = ng
        data.routing_instance = routing_instance
        self.fill_id(data)
        for item in iter_config_lines(output):
            line = ConfigLine(item)
            if item == "demand-circuit":
                data.demand_circuit = True
            elif line.cut("export "):
                data.export.append(line.rest)
            elif line.cut("import "):
                data.import_.append(line.rest)
            elif line.cut("max-retrans-time "):
                data.max_retrans_time = line.as_int()
            elif line.cut("metric-out "):
                data.metric_out = line.as_int()
            elif line.cut("preference "):
                data.preference = line.as_int()
            elif line.cut("route-timeout "):
                data.route_timeout = line.as_int()
            elif line.cut("update-interval "):
                data.update_interval = line.as_int()
            elif line.cut("bfd-liveness-detection "):
                if data.bfd_liveness_detection is None:
                    data.bfd_liveness_detection = BfdLivenessDetection()
                data.bfd_liveness_detection.read(line)

        return data

    def delete_opts(self, session: Session, data: RipGroupData):
        del_prefix = DELETE_LS + _group_path(data.name, data.ng, data.routing_instance) + " "
        session.config_set([
            del_prefix + keyword
            for keyword in (
                "bfd-liveness-detection",
                "demand-circuit",
                "export",
                "import",
                "max-retrans-time",
                "metric-out",
                "preference",
                "route-timeout",
                "update-interval",
            )
        ])

    def delete_config(self, session: Session, data: RipGroupData):
        session.config_set([DELETE_LS + _group_path(data.name, data.ng, data.routing_instance)])
