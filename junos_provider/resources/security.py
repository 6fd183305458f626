"""
Security singleton (`security` stanza of SRX devices)

Unlike the other resources, the object always exists: create only adds the
managed statements, read collects the statements matching the managed
prefixes, and destroy removes them only when clean_on_destroy is set.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from junos_provider.junos.constants import (
    CMD_SHOW_CONFIG,
    DELETE_LS,
    DISABLE_W,
    PIPE_DISPLAY_SET_RELATIVE,
    SYSLOG_FACILITIES,
)
from junos_provider.junos.session import Session
from junos_provider.resources import validators
from junos_provider.resources.base import (
    CompatibilityError,
    ConfigLine,
    ConfigSetError,
    OperationResult,
    Resource,
    ResourceData,
    iter_config_lines,
    to_int,
)

SECURITY_ID = "security"
SET_PREFIX = "set security "

ALGS = (
    "dns", "ftp", "h323", "mgcp", "msrpc", "pptp", "rsh",
    "rtsp", "sccp", "sip", "sql", "sunrpc", "talk", "tftp",
)


@dataclass
class SecurityAlg:
    """Application layer gateways to disable"""

    dns_disable: bool = False
    ftp_disable: bool = False
    h323_disable: bool = False
    mgcp_disable: bool = False
    msrpc_disable: bool = False
    pptp_disable: bool = False
    rsh_disable: bool = False
    rtsp_disable: bool = False
    sccp_disable: bool = False
    sip_disable: bool = False
    sql_disable: bool = False
    sunrpc_disable: bool = False
    talk_disable: bool = False
    tftp_disable: bool = False

    @staticmethod
    def junos_lines() -> List[str]:
        return [f"alg {alg} disable" for alg in ALGS]

    def config_set(self) -> List[str]:
        return [
            SET_PREFIX + f"alg {alg} disable"
            for alg in ALGS
            if getattr(self, f"{alg}_disable")
        ]

    def read(self, line: ConfigLine):
        line.cut("alg ")
        for alg in ALGS:
            if line.rest == f"{alg} disable":
                setattr(self, f"{alg}_disable", True)


@dataclass
class SecurityFlowAdvancedOptions:
    drop_matching_link_local_address: bool = False
    drop_matching_reserved_ip_address: bool = False
    reverse_route_packet_mode_vr: bool = False


@dataclass
class SecurityFlowAging:
    early_ageout: Optional[int] = None
    high_watermark: Optional[int] = None
    low_watermark: Optional[int] = None


@dataclass
class SecurityFlowNoPacketFlooding:
    no_trace_route: bool = False


@dataclass
class SecurityFlowEthernetSwitching:
    block_non_ip_all: bool = False
    bpdu_vlan_flooding: bool = False
    bypass_non_ip_unicast: bool = False
    no_packet_flooding: Optional[SecurityFlowNoPacketFlooding] = None


@dataclass
class SecurityFlowTcpMssTunnel:
    mss: Optional[int] = None


@dataclass
class SecurityFlowTcpMss:
    all_tcp_mss: Optional[int] = None
    gre_in: Optional[SecurityFlowTcpMssTunnel] = None
    gre_out: Optional[SecurityFlowTcpMssTunnel] = None
    ipsec_vpn: Optional[SecurityFlowTcpMssTunnel] = None


@dataclass
class SecurityFlowTimeWaitState:
    apply_to_half_close_state: bool = False
    session_ageout: bool = False
    session_timeout: Optional[int] = None


@dataclass
class SecurityFlowTcpSession:
    fin_invalidate_session: bool = False
    maximum_window: str = ""
    no_sequence_check: bool = False
    no_syn_check: bool = False
    no_syn_check_in_tunnel: bool = False
    rst_invalidate_session: bool = False
    rst_sequence_check: bool = False
    strict_syn_check: bool = False
    tcp_initial_timeout: Optional[int] = None
    time_wait_state: Optional[SecurityFlowTimeWaitState] = None


# keyword of each tcp-mss tunnel block
TCP_MSS_TUNNELS = (("gre_in", "gre-in"), ("gre_out", "gre-out"), ("ipsec_vpn", "ipsec-vpn"))


@dataclass
class SecurityFlow:
    """Flow-based packet processing (`security flow`)"""

    advanced_options: Optional[SecurityFlowAdvancedOptions] = None
    aging: Optional[SecurityFlowAging] = None
    allow_dns_reply: bool = False
    allow_embedded_icmp: bool = False
    allow_reverse_ecmp: bool = False
    enable_reroute_uniform_link_check_nat: bool = False
    ethernet_switching: Optional[SecurityFlowEthernetSwitching] = None
    force_ip_reassembly: bool = False
    ipsec_performance_acceleration: bool = False
    mcast_buffer_enhance: bool = False
    pending_sess_queue_length: str = ""
    preserve_incoming_fragment_size: bool = False
    route_change_timeout: Optional[int] = None
    syn_flood_protection_mode: str = ""
    sync_icmp_session: bool = False
    tcp_mss: Optional[SecurityFlowTcpMss] = None
    tcp_session: Optional[SecurityFlowTcpSession] = None

    @staticmethod
    def junos_lines() -> List[str]:
        return [
            "flow advanced-options",
            "flow aging",
            "flow allow-dns-reply",
            "flow allow-embedded-icmp",
            "flow allow-reverse-ecmp",
            "flow enable-reroute-uniform-link-check",
            "flow ethernet-switching",
            "flow force-ip-reassembly",
            "flow ipsec-performance-acceleration",
            "flow mcast-buffer-enhance",
            "flow pending-sess-queue-length",
            "flow preserve-incoming-fragment-size",
            "flow route-change-timeout",
            "flow syn-flood-protection-mode",
            "flow sync-icmp-session",
            "flow tcp-mss",
            "flow tcp-session",
        ]

    def empty_blocks(self) -> List[str]:
        return [
            f"{attr} block is empty in flow block"
            for attr in ("advanced_options", "aging", "ethernet_switching", "tcp_mss", "tcp_session")
            if getattr(self, attr) is not None and validators.block_is_empty(getattr(self, attr))
        ]

    def validate(self) -> List[str]:
        issues = self.empty_blocks()
        issues += validators.validate_one_of(
            self.pending_sess_queue_length, "pending_sess_queue_length", ("high", "moderate", "normal"),
        )
        issues += validators.validate_int_range(self.route_change_timeout, "route_change_timeout", 6, 1800)
        issues += validators.validate_one_of(
            self.syn_flood_protection_mode, "syn_flood_protection_mode", ("syn-cookie", "syn-proxy"),
        )
        if self.aging is not None:
            issues += validators.validate_int_range(self.aging.early_ageout, "early_ageout", 1, 65535)
            issues += validators.validate_int_range(self.aging.high_watermark, "high_watermark", 0, 100)
            issues += validators.validate_int_range(self.aging.low_watermark, "low_watermark", 0, 100)
        if self.ethernet_switching is not None:
            issues += validators.conflicts(
                self.ethernet_switching, "block_non_ip_all", ("bypass_non_ip_unicast",),
                "ethernet_switching block in flow block",
            )
        if self.tcp_mss is not None:
            issues += validators.validate_int_range(self.tcp_mss.all_tcp_mss, "all_tcp_mss", 64, 65535)
            for attr, _ in TCP_MSS_TUNNELS:
                tunnel = getattr(self.tcp_mss, attr)
                if tunnel is not None:
                    issues += validators.validate_int_range(tunnel.mss, f"{attr}.mss", 64, 65535)
        if self.tcp_session is not None:
            tcp_session = self.tcp_session
            issues += validators.validate_one_of(
                tcp_session.maximum_window, "maximum_window", ("64K", "128K", "256K", "512K", "1M"),
            )
            issues += validators.conflicts(
                tcp_session, "strict_syn_check", ("no_syn_check", "no_syn_check_in_tunnel"),
                "tcp_session block in flow block",
            )
            issues += validators.validate_int_range(tcp_session.tcp_initial_timeout, "tcp_initial_timeout", 4, 300)
            if tcp_session.time_wait_state is not None:
                issues += validators.conflicts(
                    tcp_session.time_wait_state, "session_ageout", ("session_timeout",),
                    "time_wait_state block in tcp_session block in flow block",
                )
                issues += validators.validate_int_range(
                    tcp_session.time_wait_state.session_timeout, "session_timeout", 2, 600,
                )
        return issues

    def config_set(self) -> List[str]:
        set_prefix = SET_PREFIX + "flow "
        config_set = []
        empty = self.empty_blocks()
        if empty:
            raise ConfigSetError(empty[0], "flow." + empty[0].split(" ", 1)[0])

        if self.advanced_options is not None:
            for attr in ("drop_matching_link_local_address", "drop_matching_reserved_ip_address",
                         "reverse_route_packet_mode_vr"):
                if getattr(self.advanced_options, attr):
                    config_set.append(set_prefix + "advanced-options " + attr.replace("_", "-"))
        if self.aging is not None:
            for attr in ("early_ageout", "high_watermark", "low_watermark"):
                value = getattr(self.aging, attr)
                if value is not None:
                    config_set.append(set_prefix + f"aging {attr.replace('_', '-')} {value}")
        if self.allow_dns_reply:
            config_set.append(set_prefix + "allow-dns-reply")
        if self.allow_embedded_icmp:
            config_set.append(set_prefix + "allow-embedded-icmp")
        if self.allow_reverse_ecmp:
            config_set.append(set_prefix + "allow-reverse-ecmp")
        if self.enable_reroute_uniform_link_check_nat:
            config_set.append(set_prefix + "enable-reroute-uniform-link-check nat")
        if self.ethernet_switching is not None:
            switching = self.ethernet_switching
            if switching.block_non_ip_all:
                config_set.append(set_prefix + "ethernet-switching block-non-ip-all")
            if switching.bypass_non_ip_unicast:
                config_set.append(set_prefix + "ethernet-switching bypass-non-ip-unicast")
            if switching.bpdu_vlan_flooding:
                config_set.append(set_prefix + "ethernet-switching bpdu-vlan-flooding")
            if switching.no_packet_flooding is not None:
                config_set.append(set_prefix + "ethernet-switching no-packet-flooding")
                if switching.no_packet_flooding.no_trace_route:
                    config_set.append(set_prefix + "ethernet-switching no-packet-flooding no-trace-route")
        if self.force_ip_reassembly:
            config_set.append(set_prefix + "force-ip-reassembly")
        if self.ipsec_performance_acceleration:
            config_set.append(set_prefix + "ipsec-performance-acceleration")
        if self.mcast_buffer_enhance:
            config_set.append(set_prefix + "mcast-buffer-enhance")
        if self.pending_sess_queue_length:
            config_set.append(set_prefix + "pending-sess-queue-length " + self.pending_sess_queue_length)
        if self.preserve_incoming_fragment_size:
            config_set.append(set_prefix + "preserve-incoming-fragment-size")
        if self.route_change_timeout is not None:
            config_set.append(set_prefix + f"route-change-timeout {self.route_change_timeout}")
        if self.syn_flood_protection_mode:
            config_set.append(set_prefix + "syn-flood-protection-mode " + self.syn_flood_protection_mode)
        if self.sync_icmp_session:
            config_set.append(set_prefix + "sync-icmp-session")
        if self.tcp_mss is not None:
            if self.tcp_mss.all_tcp_mss is not None:
                config_set.append(set_prefix + f"tcp-mss all-tcp mss {self.tcp_mss.all_tcp_mss}")
            for attr, keyword in TCP_MSS_TUNNELS:
                tunnel = getattr(self.tcp_mss, attr)
                if tunnel is not None:
                    config_set.append(set_prefix + "tcp-mss " + keyword)
                    if tunnel.mss is not None:
                        config_set.append(set_prefix + f"tcp-mss {keyword} mss {tunnel.mss}")
        if self.tcp_session is not None:
            config_set.extend(self._tcp_session_set(set_prefix + "tcp-session "))
        return config_set

    def _tcp_session_set(self, set_prefix: str) -> List[str]:
        tcp_session = self.tcp_session
        config_set = []
        if tcp_session.fin_invalidate_session:
            config_set.append(set_prefix + "fin-invalidate-session")
        if tcp_session.maximum_window:
            config_set.append(set_prefix + "maximum-window " + tcp_session.maximum_window)
        for attr in ("no_sequence_check", "no_syn_check", "no_syn_check_in_tunnel",
                     "rst_invalidate_session", "rst_sequence_check", "strict_syn_check"):
            if getattr(tcp_session, attr):
                config_set.append(set_prefix + attr.replace("_", "-"))
        if tcp_session.tcp_initial_timeout is not None:
            config_set.append(set_prefix + f"tcp-initial-timeout {tcp_session.tcp_initial_timeout}")
        time_wait_state = tcp_session.time_wait_state
        if time_wait_state is not None:
            config_set.append(set_prefix + "time-wait-state")
            if time_wait_state.apply_to_half_close_state:
                config_set.append(set_prefix + "time-wait-state apply-to-half-close-state")
            if time_wait_state.session_ageout:
                config_set.append(set_prefix + "time-wait-state session-ageout")
            if time_wait_state.session_timeout is not None:
                config_set.append(set_prefix + f"time-wait-state session-timeout {time_wait_state.session_timeout}")
        return config_set

    def read(self, line: ConfigLine):
        line.cut("flow ")
        if line.cut("advanced-options"):
            if self.advanced_options is None:
                self.advanced_options = SecurityFlowAdvancedOptions()
            if line.cut(" "):
                attr = line.rest.replace("-", "_")
                if hasattr(self.advanced_options, attr):
                    setattr(self.advanced_options, attr, True)
        elif line.cut("aging"):
            if self.aging is None:
                self.aging = SecurityFlowAging()
            if line.cut(" early-ageout "):
                self.aging.early_ageout = line.as_int()
            elif line.cut(" high-watermark "):
                self.aging.high_watermark = line.as_int()
            elif line.cut(" low-watermark "):
                self.aging.low_watermark = line.as_int()
        elif line.rest == "allow-dns-reply":
            self.allow_dns_reply = True
        elif line.rest == "allow-embedded-icmp":
            self.allow_embedded_icmp = True
        elif line.rest == "allow-reverse-ecmp":
            self.allow_reverse_ecmp = True
        elif line.rest == "enable-reroute-uniform-link-check nat":
            self.enable_reroute_uniform_link_check_nat = True
        elif line.cut("ethernet-switching"):
            if self.ethernet_switching is None:
                self.ethernet_switching = SecurityFlowEthernetSwitching()
            switching = self.ethernet_switching
            if line.rest == " block-non-ip-all":
                switching.block_non_ip_all = True
            elif line.rest == " bypass-non-ip-unicast":
                switching.bypass_non_ip_unicast = True
            elif line.rest == " bpdu-vlan-flooding":
                switching.bpdu_vlan_flooding = True
            elif line.cut(" no-packet-flooding"):
                if switching.no_packet_flooding is None:
                    switching.no_packet_flooding = SecurityFlowNoPacketFlooding()
                if line.rest == " no-trace-route":
                    switching.no_packet_flooding.no_trace_route = True
        elif line.rest == "force-ip-reassembly":
            self.force_ip_reassembly = True
        elif line.rest == "ipsec-performance-acceleration":
            self.ipsec_performance_acceleration = True
        elif line.rest == "mcast-buffer-enhance":
            self.mcast_buffer_enhance = True
        elif line.cut("pending-sess-queue-length "):
            self.pending_sess_queue_length = line.rest
        elif line.rest == "preserve-incoming-fragment-size":
            self.preserve_incoming_fragment_size = True
        elif line.cut("route-change-timeout "):
            self.route_change_timeout = line.as_int()
        elif line.cut("syn-flood-protection-mode "):
            self.syn_flood_protection_mode = line.rest
        elif line.rest == "sync-icmp-session":
            self.sync_icmp_session = True
        elif line.cut("tcp-mss "):
            if self.tcp_mss is None:
                self.tcp_mss = SecurityFlowTcpMss()
            self._read_tcp_mss(line)
        elif line.cut("tcp-session "):
            if self.tcp_session is None:
                self.tcp_session = SecurityFlowTcpSession()
            self._read_tcp_session(line)

    def _read_tcp_mss(self, line: ConfigLine):
        if line.cut("all-tcp mss "):
            self.tcp_mss.all_tcp_mss = line.as_int()
            return
        for attr, keyword in TCP_MSS_TUNNELS:
            if line.cut(keyword):
                if getattr(self.tcp_mss, attr) is None:
                    setattr(self.tcp_mss, attr, SecurityFlowTcpMssTunnel())
                if line.cut(" mss "):
                    getattr(self.tcp_mss, attr).mss = line.as_int()
                return

    def _read_tcp_session(self, line: ConfigLine):
        tcp_session = self.tcp_session
        if line.cut("maximum-window "):
            tcp_session.maximum_window = line.rest
        elif line.cut("tcp-initial-timeout "):
            tcp_session.tcp_initial_timeout = line.as_int()
        elif line.cut("time-wait-state"):
            if tcp_session.time_wait_state is None:
                tcp_session.time_wait_state = SecurityFlowTimeWaitState()
            if line.rest == " apply-to-half-close-state":
                tcp_session.time_wait_state.apply_to_half_close_state = True
            elif line.rest == " session-ageout":
                tcp_session.time_wait_state.session_ageout = True
            elif line.cut(" session-timeout "):
                tcp_session.time_wait_state.session_timeout = line.as_int()
        elif line.rest in ("fin-invalidate-session", "no-sequence-check", "no-syn-check", "no-syn-check-in-tunnel",
                           "rst-invalidate-session", "rst-sequence-check", "strict-syn-check"):
            setattr(tcp_session, line.rest.replace("-", "_"), True)


@dataclass
class SecurityForwardingOptions:
    inet6_mode: str = ""
    iso_mode_packet_based: bool = False
    mpls_mode: str = ""

    @staticmethod
    def junos_lines() -> List[str]:
        return [
            "forwarding-options family mpls mode",
            "forwarding-options family inet6 mode",
            "forwarding-options family iso mode",
        ]

    def validate(self) -> List[str]:
        issues = validators.validate_one_of(self.inet6_mode, "inet6_mode", ("drop", "flow-based", "packet-based"))
        issues += validators.validate_one_of(self.mpls_mode, "mpls_mode", ("flow-based", "packet-based"))
        return issues

    def config_set(self) -> List[str]:
        set_prefix = SET_PREFIX + "forwarding-options "
        config_set = []
        if self.inet6_mode:
            config_set.append(set_prefix + "family inet6 mode " + self.inet6_mode)
        if self.iso_mode_packet_based:
            config_set.append(set_prefix + "family iso mode packet-based")
        if self.mpls_mode:
            config_set.append(set_prefix + "family mpls mode " + self.mpls_mode)
        return config_set

    def read(self, line: ConfigLine):
        line.cut("forwarding-options ")
        if line.cut("family inet6 mode "):
            self.inet6_mode = line.rest
        elif line.rest == "family iso mode packet-based":
            self.iso_mode_packet_based = True
        elif line.cut("family mpls mode "):
            self.mpls_mode = line.rest


@dataclass
class SecurityForwardingProcess:
    enhanced_services_mode: bool = False

    @staticmethod
    def junos_lines() -> List[str]:
        return ["forwarding-process enhanced-services-mode"]


@dataclass
class SecurityIkeTraceoptionsFile:
    files: Optional[int] = None
    match: str = ""
    name: str = ""
    no_world_readable: bool = False
    size: Optional[int] = None
    world_readable: bool = False


# multiplier of the k/m/g suffixes Junos prints on trace file sizes
SIZE_SUFFIXES = {"k": 1024, "m": 1024 * 1024, "g": 1024 * 1024 * 1024}


def _size_in_bytes(value: str) -> int:
    multiplier = SIZE_SUFFIXES.get(value[-1:], 1)
    if multiplier != 1:
        value = value[:-1]
    return to_int(value) * multiplier


@dataclass
class SecurityIkeTraceoptions:
    """Tracing of the IKE daemon (`security ike traceoptions`)"""

    file: Optional[SecurityIkeTraceoptionsFile] = None
    flag: List[str] = field(default_factory=list)
    no_remote_trace: bool = False
    rate_limit: Optional[int] = None

    @staticmethod
    def junos_lines() -> List[str]:
        return ["ike traceoptions"]

    def validate(self) -> List[str]:
        issues = []
        if self.file is not None:
            if validators.block_is_empty(self.file):
                issues.append("file block is empty in ike_traceoptions block")
            issues += validators.validate_int_range(self.file.files, "files", 2, 1000)
            issues += validators.validate_int_range(self.file.size, "size", 10240, 1073741824)
            issues += validators.conflicts(
                self.file, "world_readable", ("no_world_readable",), "file block in ike_traceoptions block",
            )
        for flag in validators.duplicates(self.flag):
            issues.append(f"duplicate flag \"{flag}\" in ike_traceoptions block")
        issues += validators.validate_int_range(self.rate_limit, "rate_limit", 0, 4294967295)
        return issues

    def config_set(self) -> List[str]:
        set_prefix = SET_PREFIX + "ike traceoptions "
        config_set = []

        if self.file is not None:
            if validators.block_is_empty(self.file):
                raise ConfigSetError("file block is empty in ike_traceoptions block", "ike_traceoptions.file")
            if self.file.name:
                config_set.append(set_prefix + f"file \"{self.file.name}\"")
            if self.file.files is not None:
                config_set.append(set_prefix + f"file files {self.file.files}")
            if self.file.match:
                config_set.append(set_prefix + f"file match \"{self.file.match}\"")
            if self.file.size is not None:
                config_set.append(set_prefix + f"file size {self.file.size}")
            if self.file.world_readable:
                config_set.append(set_prefix + "file world-readable")
            if self.file.no_world_readable:
                config_set.append(set_prefix + "file no-world-readable")
        for flag in self.flag:
            config_set.append(set_prefix + "flag " + flag)
        if self.no_remote_trace:
            config_set.append(set_prefix + "no-remote-trace")
        if self.rate_limit is not None:
            config_set.append(set_prefix + f"rate-limit {self.rate_limit}")
        return config_set

    def read(self, line: ConfigLine):
        line.cut("ike traceoptions ")
        if line.cut("file"):
            if self.file is None:
                self.file = SecurityIkeTraceoptionsFile()
            if line.cut(" files "):
                self.file.files = line.as_int()
            elif line.cut(" match "):
                self.file.match = line.value
            elif line.cut(" size "):
                self.file.size = _size_in_bytes(line.rest)
            elif line.rest == " world-readable":
                self.file.world_readable = True
            elif line.rest == " no-world-readable":
                self.file.no_world_readable = True
            elif line.cut(" "):
                self.file.name = line.value
        elif line.cut("flag "):
            self.flag.append(line.rest)
        elif line.rest == "no-remote-trace":
            self.no_remote_trace = True
        elif line.cut("rate-limit "):
            self.rate_limit = line.as_int()


@dataclass
class SecurityLogFile:
    files: Optional[int] = None
    name: str = ""
    path: str = ""
    size: Optional[int] = None


@dataclass
class SecurityLogTransport:
    protocol: str = ""
    tcp_connections: Optional[int] = None
    tls_profile: str = ""


@dataclass
class SecurityLog:
    disable: bool = False
    event_rate: Optional[int] = None
    facility_override: str = ""
    file: Optional[SecurityLogFile] = None
    format: str = ""
    max_database_record: Optional[int] = None
    mode: str = ""
    rate_cap: Optional[int] = None
    report: bool = False
    source_address: str = ""
    source_interface: str = ""
    transport: Optional[SecurityLogTransport] = None
    utc_timestamp: bool = False

    @staticmethod
    def junos_lines() -> List[str]:
        return [
            "log disable",
            "log event-rate",
            "log facility-override",
            "log file",
            "log format",
            "log max-database-record",
            "log mode",
            "log rate-cap",
            "log report",
            "log source-address",
            "log source-interface",
            "log transport",
            "log utc-timestamp",
        ]

    def validate(self) -> List[str]:
        issues = validators.validate_int_range(self.event_rate, "event_rate", 0, 1500)
        issues += validators.validate_one_of(self.facility_override, "facility_override", SYSLOG_FACILITIES)
        issues += validators.validate_one_of(self.format, "format", ("binary", "sd-syslog", "syslog"))
        issues += validators.validate_int_range(self.max_database_record, "max_database_record", 0, 1000000)
        issues += validators.validate_one_of(self.mode, "mode", ("event", "stream"))
        issues += validators.validate_int_range(self.rate_cap, "rate_cap", 0, 5000)
        issues += validators.validate_address(self.source_address, "source_address")
        issues += validators.conflicts(self, "source_address", ("source_interface",), "log block")
        if self.file is not None:
            if validators.block_is_empty(self.file):
                issues.append("file block is empty in log block")
            issues += validators.validate_int_range(self.file.files, "files", 2, 10)
            issues += validators.validate_int_range(self.file.size, "size", 1, 10)
        if self.transport is not None:
            issues += validators.validate_one_of(self.transport.protocol, "protocol", ("tcp", "tls", "udp"))
            issues += validators.validate_int_range(self.transport.tcp_connections, "tcp_connections", 1, 5)
        return issues

    def config_set(self) -> List[str]:
        set_prefix = SET_PREFIX + "log "
        config_set = []

        if self.disable:
            config_set.append(set_prefix + DISABLE_W)
        if self.event_rate is not None:
            config_set.append(set_prefix + f"event-rate {self.event_rate}")
        if self.facility_override:
            config_set.append(set_prefix + "facility-override " + self.facility_override)
        if self.file is not None:
            if validators.block_is_empty(self.file):
                raise ConfigSetError("file block is empty in log block", "log.file")
            if self.file.files is not None:
                config_set.append(set_prefix + f"file files {self.file.files}")
            if self.file.name:
                config_set.append(set_prefix + f"file name \"{self.file.name}\"")
            if self.file.path:
                config_set.append(set_prefix + f"file path \"{self.file.path}\"")
            if self.file.size is not None:
                config_set.append(set_prefix + f"file size {self.file.size}")
        if self.format:
            config_set.append(set_prefix + "format " + self.format)
        if self.max_database_record is not None:
            config_set.append(set_prefix + f"max-database-record {self.max_database_record}")
        if self.mode:
            config_set.append(set_prefix + "mode " + self.mode)
        if self.rate_cap is not None:
            config_set.append(set_prefix + f"rate-cap {self.rate_cap}")
        if self.report:
            config_set.append(set_prefix + "report")
        if self.source_address:
            config_set.append(set_prefix + "source-address " + self.source_address)
        if self.source_interface:
            config_set.append(set_prefix + "source-interface " + self.source_interface)
        if self.transport is not None:
            config_set.append(set_prefix + "transport")
            if self.transport.protocol:
                config_set.append(set_prefix + "transport protocol " + self.transport.protocol)
            if self.transport.tcp_connections is not None:
                config_set.append(set_prefix + f"transport tcp-connections {self.transport.tcp_connections}")
            if self.transport.tls_profile:
                config_set.append(set_prefix + f"transport tls-profile \"{self.transport.tls_profile}\"")
        if self.utc_timestamp:
            config_set.append(set_prefix + "utc-timestamp")
        return config_set

    def read(self, line: ConfigLine):
        line.cut("log ")
        if line.rest == DISABLE_W:
            self.disable = True
        elif line.cut("event-rate "):
            self.event_rate = line.as_int()
        elif line.cut("facility-override "):
            self.facility_override = line.rest
        elif line.cut("file"):
            if self.file is None:
                self.file = SecurityLogFile()
            if line.cut(" files "):
                self.file.files = line.as_int()
            elif line.cut(" name "):
                self.file.name = line.value
            elif line.cut(" path "):
                self.file.path = line.value
            elif line.cut(" size "):
                self.file.size = line.as_int()
        elif line.cut("format "):
            self.format = line.rest
        elif line.cut("max-database-record "):
            self.max_database_record = line.as_int()
        elif line.cut("mode "):
            self.mode = line.rest
        elif line.cut("rate-cap "):
            self.rate_cap = line.as_int()
        elif line.rest == "report":
            self.report = True
        elif line.cut("source-address "):
            self.source_address = line.rest
        elif line.cut("source-interface "):
            self.source_interface = line.rest
        elif line.cut("transport"):
            if self.transport is None:
                self.transport = SecurityLogTransport()
            if line.cut(" protocol "):
                self.transport.protocol = line.rest
            elif line.cut(" tcp-connections "):
                self.transport.tcp_connections = line.as_int()
            elif line.cut(" tls-profile "):
                self.transport.tls_profile = line.value
        elif line.rest == "utc-timestamp":
            self.utc_timestamp = True


@dataclass
class SecurityNatSource:
    """Global source NAT options (`security nat source`)"""

    address_persistent: bool = False
    interface_port_overloading_factor: Optional[int] = None
    interface_port_overloading_off: bool = False
    pool_default_port_range: Optional[int] = None
    pool_default_port_range_to: Optional[int] = None
    pool_default_twin_port_range: Optional[int] = None
    pool_default_twin_port_range_to: Optional[int] = None
    pool_utilization_alarm_clear_threshold: Optional[int] = None
    pool_utilization_alarm_raise_threshold: Optional[int] = None
    port_randomization_disable: bool = False
    session_drop_hold_down: Optional[int] = None
    session_persistence_scan: bool = False

    @staticmethod
    def junos_lines() -> List[str]:
        return [
            "nat source address-persistent",
            "nat source interface port-overloading",
            "nat source interface port-overloading-factor",
            "nat source pool-default-port-range",
            "nat source pool-default-twin-port-range",
            "nat source pool-utilization-alarm",
            "nat source port-randomization",
            "nat source session-drop-hold-down",
            "nat source session-persistence-scan",
        ]

    def validate(self) -> List[str]:
        issues = validators.validate_int_range(
            self.interface_port_overloading_factor, "interface_port_overloading_factor", 0, 65535,
        )
        issues += validators.conflicts(
            self, "interface_port_overloading_off", ("interface_port_overloading_factor",), "nat_source block",
        )
        for attr in ("pool_default_port_range", "pool_default_port_range_to"):
            issues += validators.validate_int_range(getattr(self, attr), attr, 1024, 63487)
        for attr in ("pool_default_twin_port_range", "pool_default_twin_port_range_to"):
            issues += validators.validate_int_range(getattr(self, attr), attr, 63488, 65535)
        issues += validators.required_together(
            self, ("pool_default_port_range", "pool_default_port_range_to"), "nat_source block",
        )
        issues += validators.required_together(
            self, ("pool_default_twin_port_range", "pool_default_twin_port_range_to"), "nat_source block",
        )
        clear = self.pool_utilization_alarm_clear_threshold
        raise_threshold = self.pool_utilization_alarm_raise_threshold
        issues += validators.validate_int_range(clear, "pool_utilization_alarm_clear_threshold", 40, 100)
        issues += validators.validate_int_range(raise_threshold, "pool_utilization_alarm_raise_threshold", 50, 100)
        if clear is not None:
            if raise_threshold is None:
                issues.append("pool_utilization_alarm_raise_threshold must be specified with "
                              "pool_utilization_alarm_clear_threshold in nat_source block")
            elif clear > raise_threshold:
                issues.append("pool_utilization_alarm_clear_threshold must not be larger than "
                              "pool_utilization_alarm_raise_threshold in nat_source block")
        issues += validators.validate_int_range(self.session_drop_hold_down, "session_drop_hold_down", 30, 28800)
        return issues

    def config_set(self) -> List[str]:
        set_prefix = SET_PREFIX + "nat source "
        config_set = []
        if self.address_persistent:
            config_set.append(set_prefix + "address-persistent")
        if self.interface_port_overloading_factor is not None:
            config_set.append(set_prefix + f"interface port-overloading-factor {self.interface_port_overloading_factor}")
        if self.interface_port_overloading_off:
            config_set.append(set_prefix + "interface port-overloading off")
        if self.pool_default_port_range is not None:
            config_set.append(set_prefix + f"pool-default-port-range {self.pool_default_port_range}")
        if self.pool_default_port_range_to is not None:
            config_set.append(set_prefix + f"pool-default-port-range to {self.pool_default_port_range_to}")
        if self.pool_default_twin_port_range is not None:
            config_set.append(set_prefix + f"pool-default-twin-port-range {self.pool_default_twin_port_range}")
        if self.pool_default_twin_port_range_to is not None:
            config_set.append(set_prefix + f"pool-default-twin-port-range to {self.pool_default_twin_port_range_to}")
        if self.pool_utilization_alarm_clear_threshold is not None:
            config_set.append(
                set_prefix + f"pool-utilization-alarm clear-threshold {self.pool_utilization_alarm_clear_threshold}"
            )
        if self.pool_utilization_alarm_raise_threshold is not None:
            config_set.append(
                set_prefix + f"pool-utilization-alarm raise-threshold {self.pool_utilization_alarm_raise_threshold}"
            )
        if self.port_randomization_disable:
            config_set.append(set_prefix + "port-randomization disable")
        if self.session_drop_hold_down is not None:
            config_set.append(set_prefix + f"session-drop-hold-down {self.session_drop_hold_down}")
        if self.session_persistence_scan:
            config_set.append(set_prefix + "session-persistence-scan")
        return config_set

    def read(self, line: ConfigLine):
        line.cut("nat source ")
        if line.rest == "address-persistent":
            self.address_persistent = True
        elif line.cut("interface port-overloading-factor "):
            self.interface_port_overloading_factor = line.as_int()
        elif line.rest == "interface port-overloading off":
            self.interface_port_overloading_off = True
        elif line.cut("pool-default-port-range to "):
            self.pool_default_port_range_to = line.as_int()
        elif line.cut("pool-default-port-range "):
            self.pool_default_port_range = line.as_int()
        elif line.cut("pool-default-twin-port-range to "):
            self.pool_default_twin_port_range_to = line.as_int()
        elif line.cut("pool-default-twin-port-range "):
            self.pool_default_twin_port_range = line.as_int()
        elif line.cut("pool-utilization-alarm clear-threshold "):
            self.pool_utilization_alarm_clear_threshold = line.as_int()
        elif line.cut("pool-utilization-alarm raise-threshold "):
            self.pool_utilization_alarm_raise_threshold = line.as_int()
        elif line.rest == "port-randomization disable":
            self.port_randomization_disable = True
        elif line.cut("session-drop-hold-down "):
            self.session_drop_hold_down = line.as_int()
        elif line.rest == "session-persistence-scan":
            self.session_persistence_scan = True


@dataclass
class SecurityPolicies:
    policy_rematch: bool = False
    policy_rematch_extensive: bool = False

    @staticmethod
    def junos_lines() -> List[str]:
        return ["policies policy-rematch"]


# (attribute, keyword) of each user-identification authentication source
AUTH_SOURCES = (
    ("ad_auth_priority", "active-directory-authentication-table"),
    ("aruba_clearpass_priority", "aruba-clearpass"),
    ("firewall_auth_priority", "firewall-authentication"),
    ("local_auth_priority", "local-authentication-table"),
    ("unified_access_control_priority", "unified-access-control"),
)


@dataclass
class SecurityUserIdentificationAuthSource:
    ad_auth_priority: Optional[int] = None
    aruba_clearpass_priority: Optional[int] = None
    firewall_auth_priority: Optional[int] = None
    local_auth_priority: Optional[int] = None
    unified_access_control_priority: Optional[int] = None

    @staticmethod
    def junos_lines() -> List[str]:
        return [f"user-identification authentication-source {keyword}" for _, keyword in AUTH_SOURCES]

    def validate(self) -> List[str]:
        issues = []
        for attr, _ in AUTH_SOURCES:
            issues += validators.validate_int_range(getattr(self, attr), attr, 0, 65535)
        return issues

    def config_set(self) -> List[str]:
        set_prefix = SET_PREFIX + "user-identification authentication-source "
        return [
            set_prefix + f"{keyword} priority {getattr(self, attr)}"
            for attr, keyword in AUTH_SOURCES
            if getattr(self, attr) is not None
        ]

    def read(self, line: ConfigLine):
        line.cut("user-identification authentication-source ")
        for attr, keyword in AUTH_SOURCES:
            if line.cut(f"{keyword} priority "):
                setattr(self, attr, line.as_int())
                return


@dataclass
class SecurityUtmJuniperEnhancedServer:
    host: str = ""
    port: Optional[int] = None
    proxy_profile: str = ""
    routing_instance: str = ""


@dataclass
class SecurityUtm:
    feature_profile_web_filtering_type: str = ""
    feature_profile_web_filtering_juniper_enhanced_server: Optional[SecurityUtmJuniperEnhancedServer] = None

    @staticmethod
    def junos_lines() -> List[str]:
        return [
            "utm feature-profile web-filtering type",
            "utm feature-profile web-filtering juniper-enhanced server",
        ]

    def validate(self) -> List[str]:
        issues = validators.validate_one_of(
            self.feature_profile_web_filtering_type, "feature_profile_web_filtering_type",
            ("juniper-enhanced", "juniper-local", "web-filtering-none", "websense-redirect"),
        )
        server = self.feature_profile_web_filtering_juniper_enhanced_server
        if server is not None:
            issues += validators.validate_int_range(server.port, "port", 1, 65535)
            if server.routing_instance:
                issues += validators.validate_name(server.routing_instance, "routing_instance", max_length=63)
        return issues

    def config_set(self) -> List[str]:
        set_prefix = SET_PREFIX + "utm feature-profile web-filtering "
        config_set = []
        if self.feature_profile_web_filtering_type:
            config_set.append(set_prefix + "type " + self.feature_profile_web_filtering_type)
        server = self.feature_profile_web_filtering_juniper_enhanced_server
        if server is not None:
            server_prefix = set_prefix + "juniper-enhanced server"
            config_set.append(server_prefix)
            if server.host:
                config_set.append(server_prefix + f" host \"{server.host}\"")
            if server.port is not None:
                config_set.append(server_prefix + f" port {server.port}")
            if server.proxy_profile:
                config_set.append(server_prefix + f" proxy-profile \"{server.proxy_profile}\"")
            if server.routing_instance:
                config_set.append(server_prefix + " routing-instance " + server.routing_instance)
        return config_set

    def read(self, line: ConfigLine):
        line.cut("utm feature-profile web-filtering ")
        if line.cut("type "):
            self.feature_profile_web_filtering_type = line.rest
        elif line.cut("juniper-enhanced server"):
            if self.feature_profile_web_filtering_juniper_enhanced_server is None:
                self.feature_profile_web_filtering_juniper_enhanced_server = SecurityUtmJuniperEnhancedServer()
            server = self.feature_profile_web_filtering_juniper_enhanced_server
            if line.cut(" host "):
                server.host = line.value
            elif line.cut(" port "):
                server.port = line.as_int()
            elif line.cut(" proxy-profile "):
                server.proxy_profile = line.value
            elif line.cut(" routing-instance "):
                server.routing_instance = line.rest


@dataclass
class SecurityData(ResourceData):
    clean_on_destroy: bool = False
    alg: Optional[SecurityAlg] = None
    flow: Optional[SecurityFlow] = None
    forwarding_options: Optional[SecurityForwardingOptions] = None
    forwarding_process: Optional[SecurityForwardingProcess] = None
    ike_traceoptions: Optional[SecurityIkeTraceoptions] = None
    log: Optional[SecurityLog] = None
    nat_source: Optional[SecurityNatSource] = None
    policies: Optional[SecurityPolicies] = None
    user_identification_auth_source: Optional[SecurityUserIdentificationAuthSource] = None
    utm: Optional[SecurityUtm] = None


# Block attributes in statement order
BLOCKS = (
    "alg", "flow", "forwarding_options", "forwarding_process",
    "ike_traceoptions", "log", "nat_source", "policies",
    "user_identification_auth_source", "utm",
)


def _has_one_of_prefixes(item: str, prefixes: List[str]) -> bool:
    return any(item.startswith(prefix) for prefix in prefixes)


class Security(Resource):
    type_name = "junos_security"
    junos_name = "security"
    data_class = SecurityData
    identity_fields = ()
    unordered_fields = ("ike_traceoptions.flag",)
    import_id_format = "security"

    def validate(self, data: SecurityData) -> List[str]:
        issues = []
        for attr in BLOCKS:
            block = getattr(data, attr)
            if block is not None and validators.block_is_empty(block):
                issues.append(f"{attr} block is empty")
        for attr in ("flow", "forwarding_options", "ike_traceoptions", "log", "nat_source",
                     "user_identification_auth_source", "utm"):
            block = getattr(data, attr)
            if block is not None:
                issues += block.validate()
        if data.policies is not None:
            if data.policies.policy_rematch_extensive and not data.policies.policy_rematch:
                issues.append("policy_rematch must be specified with policy_rematch_extensive")
        return issues

    def label(self, data: SecurityData) -> str:
        return SECURITY_ID

    def read_args(self, data: SecurityData) -> tuple:
        return ()

    def fill_id(self, data: SecurityData):
        data.id = SECURITY_ID

    def check_compatibility(self, session: Session):
        if not session.system_information.check_compatibility_security():
            raise CompatibilityError(self.junos_name + session.system_information.not_compatible_msg())

    def pre_check(self, session: Session, data: SecurityData):
        self.check_compatibility(session)

    def post_check(self, session: Session, data: SecurityData):
        pass

    def exists(self, session: Session, data: SecurityData) -> bool:
        return True

    def set(self, session: Session, data: SecurityData):
        config_set = []

        for attr in ("alg", "flow", "ike_traceoptions", "log", "nat_source", "policies",
                     "user_identification_auth_source", "utm"):
            block = getattr(data, attr)
            if block is not None and validators.block_is_empty(block):
                raise ConfigSetError(f"{attr} block is empty", attr)
        if data.alg is not None:
            config_set.extend(data.alg.config_set())
        if data.flow is not None:
            config_set.extend(data.flow.config_set())
        if data.forwarding_options is not None:
            config_set.extend(data.forwarding_options.config_set())
        if data.forwarding_process is not None and data.forwarding_process.enhanced_services_mode:
            config_set.append(SET_PREFIX + "forwarding-process enhanced-services-mode")
        if data.ike_traceoptions is not None:
            config_set.extend(data.ike_traceoptions.config_set())
        if data.log is not None:
            config_set.extend(data.log.config_set())
        if data.nat_source is not None:
            config_set.extend(data.nat_source.config_set())
        if data.policies is not None:
            if data.policies.policy_rematch:
                config_set.append(SET_PREFIX + "policies policy-rematch")
            if data.policies.policy_rematch_extensive:
                config_set.append(SET_PREFIX + "policies policy-rematch extensive")
        if data.user_identification_auth_source is not None:
            config_set.extend(data.user_identification_auth_source.config_set())
        if data.utm is not None:
            config_set.extend(data.utm.config_set())

        session.config_set(config_set)

    def read(self, session: Session, *args) -> SecurityData:
        data = SecurityData()
        output = session.command(CMD_SHOW_CONFIG + "security" + PIPE_DISPLAY_SET_RELATIVE)
        self.fill_id(data)

        for item in iter_config_lines(output):
            line = ConfigLine(item)
            if _has_one_of_prefixes(item, SecurityAlg.junos_lines()):
                if data.alg is None:
                    data.alg = SecurityAlg()
                data.alg.read(line)
            elif _has_one_of_prefixes(item, SecurityFlow.junos_lines()):
                if data.flow is None:
                    data.flow = SecurityFlow()
                data.flow.read(line)
            elif _has_one_of_prefixes(item, SecurityForwardingOptions.junos_lines()):
                if data.forwarding_options is None:
                    data.forwarding_options = SecurityForwardingOptions()
                data.forwarding_options.read(line)
            elif _has_one_of_prefixes(item, SecurityForwardingProcess.junos_lines()):
                if data.forwarding_process is None:
                    data.forwarding_process = SecurityForwardingProcess()
                if item == "forwarding-process enhanced-services-mode":
                    data.forwarding_process.enhanced_services_mode = True
            elif item.startswith("ike traceoptions "):
                if data.ike_traceoptions is None:
                    data.ike_traceoptions = SecurityIkeTraceoptions()
                data.ike_traceoptions.read(line)
            elif _has_one_of_prefixes(item, SecurityLog.junos_lines()):
                if data.log is None:
                    data.log = SecurityLog()
                data.log.read(line)
            elif _has_one_of_prefixes(item, SecurityNatSource.junos_lines()):
                if data.nat_source is None:
                    data.nat_source = SecurityNatSource()
                data.nat_source.read(line)
            elif _has_one_of_prefixes(item, SecurityPolicies.junos_lines()):
                if data.policies is None:
                    data.policies = SecurityPolicies()
                if item == "policies policy-rematch":
                    data.policies.policy_rematch = True
                elif item == "policies policy-rematch extensive":
                    data.policies.policy_rematch = True
                    data.policies.policy_rematch_extensive = True
            elif _has_one_of_prefixes(item, SecurityUserIdentificationAuthSource.junos_lines()):
                if data.user_identification_auth_source is None:
                    data.user_identification_auth_source = SecurityUserIdentificationAuthSource()
                data.user_identification_auth_source.read(line)
            elif _has_one_of_prefixes(item, SecurityUtm.junos_lines()):
                if data.utm is None:
                    data.utm = SecurityUtm()
                data.utm.read(line)

        return data

    def after_read(self, state: SecurityData, data: SecurityData):
        data.clean_on_destroy = state.clean_on_destroy

    def delete_config(self, session: Session, data: SecurityData):
        lines = (
            SecurityAlg.junos_lines()
            + SecurityFlow.junos_lines()
            + SecurityForwardingOptions.junos_lines()
            + SecurityForwardingProcess.junos_lines()
            + SecurityIkeTraceoptions.junos_lines()
            + SecurityLog.junos_lines()
            + SecurityNatSource.junos_lines()
            + SecurityPolicies.junos_lines()
            + SecurityUserIdentificationAuthSource.junos_lines()
            + SecurityUtm.junos_lines()
        )
        session.config_set([DELETE_LS + "security " + line for line in lines])

    def delete(self, client, state: SecurityData) -> OperationResult:
        if not state.clean_on_destroy:
            self.logger.info("security removed from state only (clean_on_destroy is false)")
            return OperationResult(None)
        return super().delete(client, state)

    def parse_import_id(self, import_id: str) -> tuple:
        return ()
