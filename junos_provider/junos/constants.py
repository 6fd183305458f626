"""Words and command fragments shared by the session layer and resources"""

# Separator between the parts of a composite resource id
ID_SEPARATOR = "_-_"

# Output of a command that returned nothing
EMPTY_W = "empty"
DEFAULT_W = "default"
DISABLE_W = "disable"
DISCARD_W = "discard"

SET_LS = "set "
DELETE_LS = "delete "
CMD_SHOW_CONFIG = "show configuration "
PIPE_DISPLAY_SET = " | display set"
PIPE_DISPLAY_SET_RELATIVE = " | display set relative"
ROUTING_INSTANCES_WS = "routing-instances "

XML_START_TAG_CONFIG_OUT = "<configuration-output>"
XML_END_TAG_CONFIG_OUT = "</configuration-output>"

SYSLOG_SEVERITIES = (
    "alert", "any", "critical", "emergency", "error", "info", "none", "notice", "warning",
)
SYSLOG_FACILITIES = (
    "authorization", "daemon", "ftp", "kernel", "user",
    "local0", "local1", "local2", "local3", "local4", "local5", "local6", "local7",
)
