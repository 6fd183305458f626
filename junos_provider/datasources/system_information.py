"""Data source `junos_system_information` - facts of the managed device"""

from dataclasses import asdict
from typing import Any, Dict

from junos_provider.utils.logging import get_logger

TYPE_NAME = "junos_system_information"

logger = get_logger(__name__)


def read_system_information(client) -> Dict[str, Any]:
    """
    Open a session and return the gathered facts

    Args:
        client: Client opening device sessions

    Returns:
        Mapping with id (the hardware model), hardware_model, os_name,
        os_version, serial_number, host_name and cluster_node
    """
    with client.start_new_session() as session:
        info = session.system_information

    facts = asdict(info)
    facts["id"] = info.hardware_model
    logger.info(f"{TYPE_NAME}: read facts of {info.host_name or 'device'} ({info.hardware_model})")
    return facts
