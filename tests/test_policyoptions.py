"""Tests for the policy-options prefix list resource"""

import unittest
from unittest.mock import MagicMock

from jnpr.junos.rpcmeta import _RpcMetaExec
from lxml import etree

from junos_provider.junos.session import Session
from junos_provider.resources.policyoptions_prefix_list import (
    PolicyoptionsPrefixList,
    PolicyoptionsPrefixListData,
)
from tests.fakes import fake_session


class TestPrefixList(unittest.TestCase):

    def setUp(self):
        self.resource = PolicyoptionsPrefixList()

    def test_set_lines(self):
        session = fake_session()
        self.resource.set(session, PolicyoptionsPrefixListData(
            name="pl1",
            apply_path="interfaces <*> unit <*> family inet address <*>",
            prefix=["192.0.2.0/24", "2001:db8::/32"],
        ))
        self.assertEqual(session.loaded, [
            'set policy-options prefix-list "pl1"',
            'set policy-options prefix-list "pl1" apply-path '
            '"interfaces <*> unit <*> family inet address <*>"',
            'set policy-options prefix-list "pl1" 192.0.2.0/24',
            'set policy-options prefix-list "pl1" 2001:db8::/32',
        ])

    def test_apply_path_reaches_device_unescaped(self):
        # PyEZ builds the load-configuration RPC; only the transport is mocked
        device = MagicMock()
        device.rpc = _RpcMetaExec(device)
        session = Session(device=device, cmd_sleep_short=0)

        self.resource.set(session, PolicyoptionsPrefixListData(
            name="radius", apply_path="system radius-server <*>",
        ))

        rpc = device.execute.call_args[0][0]
        self.assertEqual(rpc.tag, "load-configuration")
        self.assertEqual(rpc.get("action"), "set")
        self.assertEqual(rpc.findtext("configuration-set"), (
            'set policy-options prefix-list "radius"\n'
            'set policy-options prefix-list "radius" apply-path "system radius-server <*>"'
        ))
        self.assertIn(b"&lt;*&gt;", etree.tostring(rpc))
        self.assertNotIn(b"&amp;lt;", etree.tostring(rpc))

    def test_set_empty_list(self):
        session = fake_session()
        self.resource.set(session, PolicyoptionsPrefixListData(name="pl1"))
        self.assertEqual(session.loaded, ['set policy-options prefix-list "pl1"'])

    def test_read(self):
        session = fake_session({
            'show configuration policy-options prefix-list "pl1" | display set relative': (
                "set 192.0.2.0/24\n"
                "set 198.51.100.0/24\n"
                "set apply-path \"interfaces &lt;*&gt;\"\n"
                "set dynamic-db\n"
            ),
        })
        data = self.resource.read(session, "pl1")
        self.assertEqual(data.id, "pl1")
        self.assertEqual(data.prefix, ["192.0.2.0/24", "198.51.100.0/24"])
        self.assertEqual(data.apply_path, "interfaces <*>")
        self.assertTrue(data.dynamic_db)

    def test_read_missing(self):
        self.assertIsNone(self.resource.read(fake_session(), "pl1").id)

    def test_validate(self):
        self.assertEqual(self.resource.validate(PolicyoptionsPrefixListData(name="pl1")), [])

        issues = self.resource.validate(PolicyoptionsPrefixListData(
            name="pl1", prefix=["192.0.2.1", "198.51.100.0/24", "198.51.100.0/24"],
        ))
        self.assertIn('prefix "192.0.2.1" must be in CIDR format', issues)
        self.assertIn("prefix 198.51.100.0/24 is set more than once", issues)

    def test_prefixes_compared_without_order(self):
        self.assertEqual(self.resource.unordered_fields, ("prefix",))


if __name__ == '__main__':
    unittest.main()
