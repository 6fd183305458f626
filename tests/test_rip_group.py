"""Tests for the RIP / RIPng group resource"""

import unittest

from junos_provider.resources.base import BadIDFormatError, ConfigSetError
from junos_provider.resources.rip_group import BfdLivenessDetection, RipGroup, RipGroupData
from tests.fakes import fake_session


class TestRipGroup(unittest.TestCase):

    def setUp(self):
        self.resource = RipGroup()

    def test_set_lines(self):
        session = fake_session()
        self.resource.set(session, RipGroupData(
            name="g1",
            export=["exp1"],
            import_=["imp1"],
            metric_out=5,
            bfd_liveness_detection=BfdLivenessDetection(minimum_interval=300, multiplier=3),
        ))
        self.assertEqual(session.loaded, [
            'set protocols rip group "g1"',
            'set protocols rip group "g1" export exp1',
            'set protocols rip group "g1" import imp1',
            'set protocols rip group "g1" metric-out 5',
            'set protocols rip group "g1" bfd-liveness-detection minimum-interval 300',
            'set protocols rip group "g1" bfd-liveness-detection multiplier 3',
        ])

    def test_set_ripng_in_routing_instance(self):
        session = fake_session()
        self.resource.set(session, RipGroupData(name="g1", ng=True, routing_instance="ri1", preference=0))
        self.assertEqual(session.loaded, [
            'set routing-instances ri1 protocols ripng group "g1"',
            'set routing-instances ri1 protocols ripng group "g1" preference 0',
        ])

    def test_set_rejects_empty_bfd_block(self):
        with self.assertRaises(ConfigSetError):
            self.resource.set(fake_session(), RipGroupData(name="g1", bfd_liveness_detection=BfdLivenessDetection()))

    def test_fill_id(self):
        data = RipGroupData(name="g1", ng=True, routing_instance="ri1")
        self.resource.fill_id(data)
        self.assertEqual(data.id, "g1_-_ng_-_ri1")

        data = RipGroupData(name="g1")
        self.resource.fill_id(data)
        self.assertEqual(data.id, "g1_-_default")

    def test_parse_import_id(self):
        self.assertEqual(self.resource.parse_import_id("g1_-_default"), ("g1", False, "default"))
        self.assertEqual(self.resource.parse_import_id("g1_-_ng_-_ri1"), ("g1", True, "ri1"))
        with self.assertRaises(BadIDFormatError):
            self.resource.parse_import_id("g1")
        with self.assertRaises(BadIDFormatError):
            self.resource.parse_import_id("g1_-_x_-_ri1")

    def test_read(self):
        session = fake_session({
            'show configuration routing-instances ri1 protocols rip group "g1" | display set relative': (
                "set demand-circuit\n"
                "set import imp1\n"
                "set import imp2\n"
                "set route-timeout 40\n"
                "set bfd-liveness-detection authentication key-chain \"kc1\"\n"
                "set bfd-liveness-detection transmit-interval threshold 1000\n"
                "set bfd-liveness-detection version automatic\n"
            ),
        })
        data = self.resource.read(session, "g1", False, "ri1")

        self.assertEqual(data.id, "g1_-_ri1")
        self.assertTrue(data.demand_circuit)
        self.assertEqual(data.import_, ["imp1", "imp2"])
        self.assertEqual(data.route_timeout, 40)
        self.assertEqual(data.bfd_liveness_detection, BfdLivenessDetection(
            authentication_key_chain="kc1", transmit_interval_threshold=1000, version="automatic",
        ))

    def test_delete_opts_keeps_group(self):
        session = fake_session()
        self.resource.delete_opts(session, RipGroupData(name="g1", ng=True))
        self.assertNotIn('delete protocols ripng group "g1"', session.loaded)
        self.assertIn('delete protocols ripng group "g1" import', session.loaded)
        self.assertEqual(len(session.loaded), 9)

    def test_validate(self):
        self.assertEqual(self.resource.validate(RipGroupData(name="g1")), [])

        issues = self.resource.validate(RipGroupData(
            name="g1", ng=True, demand_circuit=True, metric_out=16,
        ))
        self.assertIn("ng and demand_circuit cannot be configured together", issues)
        self.assertIn("metric_out must be between 1 and 15, got 16", issues)

    def test_validate_bfd_block(self):
        issues = self.resource.validate(RipGroupData(
            name="g1", bfd_liveness_detection=BfdLivenessDetection(multiplier=0, version="2"),
        ))
        self.assertIn("multiplier must be between 1 and 255, got 0", issues)
        self.assertIn('version must be one of 0, 1, automatic, got "2"', issues)


if __name__ == '__main__':
    unittest.main()
