"""
Resource framework - lifecycle shared by every Junos resource type

Each resource type provides a dataclass model and the hooks that turn it into
set/delete lines (set, delete_config) and back (read). The Resource base class
drives those hooks through a device session: candidate lock, pre-check, load,
commit, post-check, and always discard/unlock at the end.
"""

import dataclasses
import typing
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Type

from junos_provider.junos.constants import (
    CMD_SHOW_CONFIG,
    DEFAULT_W,
    EMPTY_W,
    ID_SEPARATOR,
    PIPE_DISPLAY_SET,
    ROUTING_INSTANCES_WS,
    SET_LS,
    XML_END_TAG_CONFIG_OUT,
    XML_START_TAG_CONFIG_OUT,
)
from junos_provider.junos.session import Session, mutex_lock, mutex_unlock
from junos_provider.utils.error_handling import ProviderError, ValidationError
from junos_provider.utils.logging import get_logger


class ResourceError(ProviderError):
    """Base error for resource lifecycle failures"""


class ConfigSetError(ResourceError):
    """Raised when a model cannot be turned into set lines"""

    exit_code = 21

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


class AlreadyExistsError(ResourceError):
    """Raised when creating an object that is already configured"""

    exit_code = 8


class NotFoundError(ResourceError):
    """Raised when an object or its routing instance is missing"""

    exit_code = 7


class CompatibilityError(ResourceError):
    """Raised when the device model does not support the resource"""


class BadIDFormatError(ResourceError):
    """Raised when an import id does not have the expected parts"""

    exit_code = 21


@dataclass
class ResourceData:
    """Base model; id stays None until the object exists on the device"""

    id: Optional[str] = None


@dataclass
class OperationResult:
    """Outcome of a lifecycle operation"""

    data: Optional[ResourceData]
    warnings: List[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Config text helpers
# ---------------------------------------------------------------------------


def iter_config_lines(output: str) -> Iterator[str]:
    """
    Yield the statements of a `display set` output without the `set ` prefix

    Lines before the configuration-output start tag are skipped and reading
    stops at the end tag.
    """
    for item in output.split("\n"):
        if XML_START_TAG_CONFIG_OUT in item:
            continue
        if XML_END_TAG_CONFIG_OUT in item:
            break
        item = item.rstrip()
        if not item:
            continue
        if item.startswith(SET_LS):
            item = item[len(SET_LS):]
        yield item


def trim_quotes(value: str) -> str:
    return value.strip('"')


def to_int(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"failed to convert value from '{value}' to integer")


def first_element_of_line(value: str) -> str:
    """First word of a statement, or the first quoted string when it starts with a quote"""
    if value.startswith('"'):
        end = value.find('"', 1)
        if end != -1:
            return value[:end + 1]
    return value.split(" ", 1)[0]


class ConfigLine:
    """A statement consumed from the left, one keyword prefix at a time"""

    def __init__(self, text: str):
        self.rest = text

    def cut(self, prefix: str) -> bool:
        """Remove prefix when the statement starts with it"""
        if self.rest.startswith(prefix):
            self.rest = self.rest[len(prefix):]
            return True
        return False

    def cut_word(self) -> str:
        """Remove and return the first element (quotes kept)"""
        word = first_element_of_line(self.rest)
        self.rest = self.rest[len(word):].lstrip(" ")
        return word

    @property
    def value(self) -> str:
        return trim_quotes(self.rest)

    def as_int(self) -> int:
        return to_int(self.rest)


def extract_block(blocks: list, key: str, value: Any, factory: Callable[[], Any]):
    """
    Pop the block whose key attribute equals value, or build a new one

    The caller appends the block back, so successive statements of the same
    block fold into one entry.
    """
    for index, block in enumerate(blocks):
        if getattr(block, key) == value:
            return blocks.pop(index)
    return factory()


def routing_instance_prefix(routing_instance: str) -> str:
    """`routing-instances RI ` or nothing for the default instance"""
    if routing_instance and routing_instance != DEFAULT_W:
        return ROUTING_INSTANCES_WS + routing_instance + " "
    return ""


def check_routing_instance_exists(session: Session, routing_instance: str) -> bool:
    output = session.command(CMD_SHOW_CONFIG + ROUTING_INSTANCES_WS + routing_instance + PIPE_DISPLAY_SET)
    return output != EMPTY_W


# ---------------------------------------------------------------------------
# Model conversion
# ---------------------------------------------------------------------------


def _unwrap_optional(tp):
    if typing.get_origin(tp) is typing.Union:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def _convert(tp, value, path: str):
    tp = _unwrap_optional(tp)
    if value is None:
        return None
    if dataclasses.is_dataclass(tp):
        if not isinstance(value, dict):
            raise ValidationError(f"{path} must be a block (mapping)", path)
        return data_from_dict(tp, value, path + ".")
    if typing.get_origin(tp) in (list, List):
        if not isinstance(value, list):
            raise ValidationError(f"{path} must be a list", path)
        (item_type,) = typing.get_args(tp)
        return [_convert(item_type, v, f"{path}[{i}]") for i, v in enumerate(value)]
    if tp is bool:
        if not isinstance(value, bool):
            raise ValidationError(f"{path} must be a boolean", path)
        return value
    if tp is int:
        if isinstance(value, bool):
            raise ValidationError(f"{path} must be an integer", path)
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{path} must be an integer, got {value!r}", path)
    if tp is str:
        if isinstance(value, (dict, list)):
            raise ValidationError(f"{path} must be a string", path)
        return str(value)
    return value


def field_key(f: dataclasses.Field) -> str:
    """Manifest/state key of a model field (differs for Python keywords)"""
    return f.metadata.get("key", f.name)


def data_from_dict(cls: Type, mapping: Dict[str, Any], path: str = ""):
    """
    Build a model (nested dataclasses included) from a plain mapping

    Raises:
        ValidationError: Unknown attribute or wrong value type
    """
    hints = typing.get_type_hints(cls)
    by_key = {field_key(f): f.name for f in dataclasses.fields(cls)}
    unknown = sorted(set(mapping) - set(by_key))
    if unknown:
        raise ValidationError(f"unknown attribute {path}{unknown[0]}", f"{path}{unknown[0]}")

    kwargs = {}
    for key, value in mapping.items():
        converted = _convert(hints[by_key[key]], value, f"{path}{key}")
        if converted is not None:
            kwargs[by_key[key]] = converted
    return cls(**kwargs)


def _to_plain(value):
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {field_key(f): _to_plain(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, list):
        return [_to_plain(v) for v in value]
    return value


def _prune(value):
    if isinstance(value, dict):
        pruned = {k: _prune(v) for k, v in value.items()}
        return {k: v for k, v in pruned.items() if is_set(v)}
    if isinstance(value, list):
        return [_prune(v) for v in value]
    return value


def data_to_dict(data, prune: bool = True) -> Dict[str, Any]:
    """Plain mapping of a model; unset values dropped when prune is True"""
    result = _to_plain(data)
    return _prune(result) if prune else result


def is_set(value) -> bool:
    """False for None, False, empty string and empty list (0 is a value)"""
    return not (value is None or value is False or value == "" or value == [])


# ---------------------------------------------------------------------------
# Resource lifecycle
# ---------------------------------------------------------------------------


class Resource:
    """
    Base class of a Junos resource type

    Subclasses set type_name, junos_name and data_class, and implement
    exists/set/read/delete_config. Optional hooks: validate, delete_opts,
    check_compatibility, pre_check/post_check, read_args, parse_import_id.
    """

    type_name = ""
    junos_name = ""
    data_class: Type[ResourceData] = ResourceData
    # Changing one of these fields replaces the object
    identity_fields: Tuple[str, ...] = ("name",)
    # List fields compared without order, dotted paths for lists inside blocks
    unordered_fields: Tuple[str, ...] = ()
    import_id_parts = 1
    import_id_format = "<name>"
    has_routing_instance = False

    def __init__(self):
        self.logger = get_logger(f"junos_provider.resources.{self.type_name}")

    # -- hooks ---------------------------------------------------------------

    def validate(self, data: ResourceData) -> List[str]:
        """Configuration issues, empty when the model is valid"""
        return []

    def label(self, data: ResourceData) -> str:
        """Name used in messages"""
        return getattr(data, "name", "")

    def exists(self, session: Session, data: ResourceData) -> bool:
        raise NotImplementedError

    def set(self, session: Session, data: ResourceData):
        raise NotImplementedError

    def read(self, session: Session, *args) -> ResourceData:
        raise NotImplementedError

    def read_args(self, data: ResourceData) -> tuple:
        return (data.name,)

    def delete_config(self, session: Session, data: ResourceData):
        raise NotImplementedError

    def delete_opts(self, session: Session, data: ResourceData):
        """Delete what update replaces; the whole object unless overridden"""
        self.delete_config(session, data)

    def fill_id(self, data: ResourceData):
        data.id = ID_SEPARATOR.join(str(arg) for arg in self.read_args(data))

    def check_compatibility(self, session: Session):
        """Raise CompatibilityError when the device cannot carry this resource"""

    def routing_instance_of(self, data: ResourceData) -> str:
        return getattr(data, "routing_instance", "") if self.has_routing_instance else ""

    def pre_check(self, session: Session, data: ResourceData):
        """Checks run under the candidate lock before loading the set lines"""
        self.check_compatibility(session)
        routing_instance = self.routing_instance_of(data)
        if routing_instance and routing_instance != DEFAULT_W:
            if not check_routing_instance_exists(session, routing_instance):
                raise NotFoundError(f"routing instance \"{routing_instance}\" doesn't exist")
        if self.exists(session, data):
            if routing_instance and routing_instance != DEFAULT_W:
                raise AlreadyExistsError(
                    f"{self.junos_name} \"{self.label(data)}\" already exists "
                    f"in routing-instance \"{routing_instance}\""
                )
            raise AlreadyExistsError(f"{self.junos_name} \"{self.label(data)}\" already exists")

    def post_check(self, session: Session, data: ResourceData):
        """Checks run after commit"""
        if not self.exists(session, data):
            raise NotFoundError(
                f"{self.junos_name} \"{self.label(data)}\" does not exists after commit "
                f"=> check your config"
            )

    def parse_import_id(self, import_id: str) -> tuple:
        if self.import_id_parts == 1:
            return (import_id,)
        parts = import_id.split(ID_SEPARATOR)
        if len(parts) < self.import_id_parts:
            raise BadIDFormatError(f"missing element(s) in id with separator \"{ID_SEPARATOR}\"")
        return tuple(parts[:self.import_id_parts])

    # -- lifecycle -----------------------------------------------------------

    def check_valid(self, data: ResourceData):
        issues = self.validate(data)
        if issues:
            raise ValidationError(
                f"invalid {self.type_name}: " + "; ".join(issues),
                guidance="Fix the resource configuration and retry",
            )

    def create(self, client, data: ResourceData) -> OperationResult:
        """
        Configure a new object on the device

        Args:
            client: Client opening device sessions
            data: Desired model

        Returns:
            OperationResult with the model (id filled) and device warnings
        """
        self.check_valid(data)

        if client.fake_create_setfile():
            session = client.new_session_without_netconf()
            self.set(session, data)
            self.fill_id(data)
            self.logger.info(f"create {self.type_name} {data.id} written to {session.fake_setfile}")
            return OperationResult(data)

        warnings = []
        timer = self.logger.timed(f"create {self.type_name} {self.label(data)}")
        with timer, client.start_new_session() as session:
            session.config_lock()
            try:
                self.pre_check(session, data)
                self.set(session, data)
                warnings.extend(session.commit_conf(f"create resource {self.type_name}"))
                self.post_check(session, data)
            finally:
                warnings.extend(session.config_clear())

        self.fill_id(data)
        self.logger.log_warnings(f"create {self.type_name}", warnings)
        self.logger.log_resource_action("create", self.type_name, data.id, timer.duration)
        return OperationResult(data, warnings)

    def read_with_session(self, session: Session, args: tuple) -> Optional[ResourceData]:
        mutex_lock()
        try:
            data = self.read(session, *args)
        finally:
            mutex_unlock()
        if data.id is None:
            return None
        return data

    def read_state(self, client, state: ResourceData) -> Optional[ResourceData]:
        """
        Read the object back from the device

        Returns:
            The current model, or None when the object is gone
        """
        with client.start_new_session() as session:
            data = self.read_with_session(session, self.read_args(state))
        if data is None:
            self.logger.info(f"{self.type_name} {state.id} no longer exists on the device")
            return None
        self.after_read(state, data)
        return data

    def after_read(self, state: ResourceData, data: ResourceData):
        """Copy attributes that only live in state (not on the device)"""

    def update(self, client, state: ResourceData, plan: ResourceData) -> OperationResult:
        """Replace the configuration of an existing object"""
        self.check_valid(plan)
        plan.id = state.id

        if client.fake_update_also():
            session = client.new_session_without_netconf()
            self.delete_opts(session, state)
            self.set(session, plan)
            return OperationResult(plan)

        warnings = []
        timer = self.logger.timed(f"update {self.type_name} {plan.id}")
        with timer, client.start_new_session() as session:
            session.config_lock()
            try:
                self.delete_opts(session, state)
                self.set(session, plan)
                warnings.extend(session.commit_conf(f"update resource {self.type_name}"))
            finally:
                warnings.extend(session.config_clear())

        self.logger.log_warnings(f"update {self.type_name}", warnings)
        self.logger.log_resource_action("update", self.type_name, plan.id, timer.duration)
        return OperationResult(plan, warnings)

    def delete(self, client, state: ResourceData) -> OperationResult:
        """Remove the object from the device"""
        if client.fake_delete_also():
            session = client.new_session_without_netconf()
            self.delete_config(session, state)
            return OperationResult(None)

        warnings = []
        timer = self.logger.timed(f"delete {self.type_name} {state.id}")
        with timer, client.start_new_session() as session:
            session.config_lock()
            try:
                self.delete_config(session, state)
                warnings.extend(session.commit_conf(f"delete resource {self.type_name}"))
            finally:
                warnings.extend(session.config_clear())

        self.logger.log_warnings(f"delete {self.type_name}", warnings)
        self.logger.log_resource_action("delete", self.type_name, state.id, timer.duration)
        return OperationResult(None, warnings)

    def import_state(self, client, import_id: str) -> OperationResult:
        """
        Read an existing object from its id

        Raises:
            BadIDFormatError: id without the expected parts
            NotFoundError: nothing configured for the id
        """
        args = self.parse_import_id(import_id)
        with client.start_new_session() as session:
            data = self.read(session, *args)
        if data.id is None:
            raise NotFoundError(
                f"don't find {self.junos_name} with id '{import_id}' "
                f"(id must be {self.import_id_format})"
            )
        self.logger.info(f"imported {self.type_name} {data.id}")
        return OperationResult(data)

    def new_data(self, mapping: Dict[str, Any]) -> ResourceData:
        return data_from_dict(self.data_class, mapping)
