"""Tests for the system information data source"""

import unittest

from junos_provider.datasources.system_information import read_system_information
from junos_provider.junos.session import SystemInformation
from tests.fakes import fake_client, fake_session


class TestSystemInformation(unittest.TestCase):

    def test_facts(self):
        session = fake_session()
        session.system_information = SystemInformation(
            hardware_model="srx345", os_name="junos", os_version="21.4R3",
            serial_number="CZ0123", host_name="fw1",
        )

        facts = read_system_information(fake_client(session))

        self.assertEqual(facts, {
            "id": "srx345",
            "hardware_model": "srx345",
            "os_name": "junos",
            "os_version": "21.4R3",
            "serial_number": "CZ0123",
            "host_name": "fw1",
            "cluster_node": False,
        })
        session.command.assert_not_called()


if __name__ == '__main__':
    unittest.main()
