"""Tests for manifest loading"""

import tempfile
import unittest
from pathlib import Path

from junos_provider.engine.manifest import load_manifest, parse_manifest
from junos_provider.resources.firewall_policer import PolicerIfExceeding
from junos_provider.utils.error_handling import ValidationError

MANIFEST = """
resources:
  - type: junos_firewall_policer
    name: p1
    config:
      name: p1
      if_exceeding:
        burst_size_limit: 50k
        bandwidth_limit: 32k
      then:
        discard: true
  - type: junos_policyoptions_prefix_list
    name: pl1
    config:
      name: pl1
      prefix:
        - 192.0.2.0/24
"""


def policer_item(name="p1", **config):
    values = {
        "name": name,
        "if_exceeding": {"burst_size_limit": "50k", "bandwidth_limit": "32k"},
        "then": {"discard": True},
    }
    values.update(config)
    return {"type": "junos_firewall_policer", "name": name, "config": values}


class TestManifest(unittest.TestCase):

    def setUp(self):
        self.tmpdir = Path(tempfile.mkdtemp())

    def write(self, content):
        path = self.tmpdir / "main.yaml"
        path.write_text(content)
        return path

    def test_load(self):
        manifest = load_manifest(self.write(MANIFEST))

        self.assertEqual(manifest.addresses(), [
            "junos_firewall_policer.p1",
            "junos_policyoptions_prefix_list.pl1",
        ])
        policer = manifest.get("junos_firewall_policer.p1").data
        self.assertEqual(policer.if_exceeding, PolicerIfExceeding(burst_size_limit="50k", bandwidth_limit="32k"))
        self.assertTrue(policer.then.discard)
        self.assertIsNone(manifest.get("junos_firewall_policer.p2"))

    def test_empty_document(self):
        self.assertEqual(parse_manifest(None).entries, [])
        self.assertEqual(parse_manifest({"resources": []}).entries, [])

    def test_malformed_documents(self):
        with self.assertRaises(ValidationError) as ctx:
            parse_manifest(["junos_firewall_policer"])
        self.assertIn("top level must be a mapping", ctx.exception.message)

        with self.assertRaises(ValidationError) as ctx:
            parse_manifest({"resources": {"type": "junos_firewall_policer"}})
        self.assertIn("'resources' must be a list", ctx.exception.message)

    def test_all_problems_reported(self):
        document = {"resources": [
            {"type": "junos_nope", "name": "x"},
            {"name": "missing-type"},
            policer_item(),
            policer_item(),
            policer_item("p2", then=None),
            {
                "type": "junos_policyoptions_prefix_list",
                "name": "pl1",
                "config": {"name": "pl1", "prefix": ["192.0.2.1"]},
            },
        ]}

        with self.assertRaises(ValidationError) as ctx:
            parse_manifest(document, "main.yaml")

        message = ctx.exception.message
        self.assertTrue(message.startswith("5 problem(s) in main.yaml:"))
        self.assertIn('unknown resource type "junos_nope"', message)
        self.assertIn("resources[1] needs 'type' and 'name'", message)
        self.assertIn("duplicate resource junos_firewall_policer.p1", message)
        self.assertIn("junos_firewall_policer.p2: then block must be specified", message)
        self.assertIn('junos_policyoptions_prefix_list.pl1: prefix "192.0.2.1" must be in CIDR format', message)

    def test_unknown_attribute(self):
        with self.assertRaises(ValidationError) as ctx:
            parse_manifest({"resources": [policer_item(color="blue")]})
        self.assertIn("junos_firewall_policer.p1", ctx.exception.message)

    def test_missing_file(self):
        with self.assertRaises(ValidationError) as ctx:
            load_manifest(self.tmpdir / "absent.yaml")
        self.assertIn("Manifest not found", ctx.exception.message)

    def test_invalid_yaml(self):
        with self.assertRaises(ValidationError) as ctx:
            load_manifest(self.write("resources: [\n"))
        self.assertIn("Invalid YAML", ctx.exception.message)


if __name__ == '__main__':
    unittest.main()
