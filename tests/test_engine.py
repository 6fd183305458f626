"""Tests for the planner and the runner"""

import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from junos_provider.engine.manifest import parse_manifest
from junos_provider.engine.planner import (
    CREATE,
    DELETE,
    NOOP,
    REPLACE,
    UPDATE,
    build_plan,
    has_changes,
    normalize,
    summarize,
)
from junos_provider.engine.runner import Runner
from junos_provider.engine.state import StateStore
from junos_provider.junos.session import Session, SessionError
from junos_provider.resources.base import data_to_dict
from junos_provider.resources.firewall_policer import FirewallPolicer
from junos_provider.resources.security import Security, SecurityData, SecurityIkeTraceoptions
from junos_provider.utils.error_handling import ValidationError
from tests.fakes import fake_client, fake_session

POLICER = "junos_firewall_policer.p1"
PREFIX_LIST = "junos_policyoptions_prefix_list.pl1"


def policer_item(label="p1", name=None, bandwidth_limit="32k"):
    return {
        "type": "junos_firewall_policer",
        "name": label,
        "config": {
            "name": name or label,
            "if_exceeding": {"burst_size_limit": "50k", "bandwidth_limit": bandwidth_limit},
            "then": {"discard": True},
        },
    }


def prefix_list_item(prefixes):
    return {
        "type": "junos_policyoptions_prefix_list",
        "name": "pl1",
        "config": {"name": "pl1", "prefix": prefixes},
    }


def manifest_of(*items):
    return parse_manifest({"resources": list(items)})


def record(store, item):
    """Put a manifest item into the state as if it had been created"""
    data = parse_manifest({"resources": [item]}).entries[0].data
    data.id = data.name
    address = f"{item['type']}.{item['name']}"
    store.put(address, item["type"], data.id, data_to_dict(data))


class TestPlanner(unittest.TestCase):

    def setUp(self):
        self.store = StateStore(Path(tempfile.mkdtemp()) / "state.json")

    def actions(self, plan):
        return [(change.action, change.address) for change in plan]

    def test_create(self):
        plan = build_plan(manifest_of(policer_item()), self.store)
        self.assertEqual(self.actions(plan), [(CREATE, POLICER)])
        self.assertTrue(has_changes(plan))
        self.assertEqual(summarize(plan), "Plan: 1 to create, 0 to update, 0 to replace, 0 to delete")

    def test_noop(self):
        record(self.store, policer_item())
        plan = build_plan(manifest_of(policer_item()), self.store)
        self.assertEqual(self.actions(plan), [(NOOP, POLICER)])
        self.assertFalse(has_changes(plan))

    def test_update(self):
        record(self.store, policer_item())
        plan = build_plan(manifest_of(policer_item(bandwidth_limit="64k")), self.store)

        self.assertEqual(self.actions(plan), [(UPDATE, POLICER)])
        self.assertEqual(plan[0].changed, ["if_exceeding.bandwidth_limit"])
        self.assertEqual(plan[0].before.id, "p1")
        self.assertEqual(plan[0].describe(), f"~ {POLICER}: if_exceeding.bandwidth_limit")

    def test_identity_change_replaces(self):
        record(self.store, policer_item())
        plan = build_plan(manifest_of(policer_item(name="p2")), self.store)

        self.assertEqual(self.actions(plan), [(REPLACE, POLICER)])
        self.assertEqual(plan[0].describe(), f"-/+ {POLICER} (forces replacement): name")

    def test_deletes_come_first(self):
        record(self.store, policer_item())
        record(self.store, prefix_list_item(["192.0.2.0/24"]))
        plan = build_plan(manifest_of(policer_item("p3")), self.store)

        self.assertEqual(self.actions(plan), [
            (DELETE, PREFIX_LIST),
            (DELETE, POLICER),
            (CREATE, "junos_firewall_policer.p3"),
        ])
        self.assertEqual(summarize(plan), "Plan: 1 to create, 0 to update, 0 to replace, 2 to delete")

    def test_unordered_list_reordered_is_noop(self):
        record(self.store, prefix_list_item(["192.0.2.0/24", "198.51.100.0/24"]))
        plan = build_plan(manifest_of(prefix_list_item(["198.51.100.0/24", "192.0.2.0/24"])), self.store)
        self.assertEqual(self.actions(plan), [(NOOP, PREFIX_LIST)])

    def test_unordered_list_in_block_compared_sorted(self):
        resource = Security()
        before = SecurityData(ike_traceoptions=SecurityIkeTraceoptions(flag=["routing-socket", "all"]))
        after = SecurityData(ike_traceoptions=SecurityIkeTraceoptions(flag=["all", "routing-socket"]))
        self.assertEqual(normalize(resource, before), normalize(resource, after))
        self.assertEqual(normalize(resource, SecurityData()), {})

    def test_refreshed_object_gone_is_created_again(self):
        record(self.store, policer_item())
        plan = build_plan(manifest_of(policer_item()), self.store, {POLICER: None})
        self.assertEqual(self.actions(plan), [(CREATE, POLICER)])

    def test_refreshed_drift_is_updated(self):
        record(self.store, policer_item())
        drifted = manifest_of(policer_item(bandwidth_limit="1m")).entries[0].data
        plan = build_plan(manifest_of(policer_item()), self.store, {POLICER: drifted})
        self.assertEqual(self.actions(plan), [(UPDATE, POLICER)])


class TestRunner(unittest.TestCase):

    def setUp(self):
        tmpdir = Path(tempfile.mkdtemp())
        self.setfile = tmpdir / "lines.set"
        self.store = StateStore(tmpdir / "state.json")

    def setfile_client(self):
        session = Session(fake_setfile=str(self.setfile), cmd_sleep_short=0)
        return fake_client(session, setfile=str(self.setfile), update_also=True, delete_also=True)

    def setfile_lines(self):
        return self.setfile.read_text().splitlines()

    def test_apply_records_state(self):
        runner = Runner(self.setfile_client(), self.store)
        manifest = manifest_of(policer_item(), prefix_list_item(["192.0.2.0/24"]))

        result = runner.apply(runner.plan(manifest, refresh=False))

        self.assertTrue(result.success)
        self.assertEqual(len(result.applied), 2)
        self.assertEqual(self.store.addresses(), [POLICER, PREFIX_LIST])
        self.assertEqual(self.store.get(POLICER)["id"], "p1")
        self.assertEqual(self.store.serial, 2)
        self.assertIn('set policy-options prefix-list "pl1" 192.0.2.0/24', self.setfile_lines())

    def test_update_and_replace(self):
        record(self.store, policer_item())
        record(self.store, prefix_list_item(["192.0.2.0/24"]))
        runner = Runner(self.setfile_client(), self.store)
        manifest = manifest_of(policer_item(name="p2"), prefix_list_item(["198.51.100.0/24"]))

        result = runner.apply(runner.plan(manifest, refresh=False))

        self.assertTrue(result.success)
        self.assertEqual([change.action for change in result.applied], [REPLACE, UPDATE])
        self.assertEqual(self.store.get(POLICER)["id"], "p2")
        self.assertEqual(self.store.get(PREFIX_LIST)["attributes"]["prefix"], ["198.51.100.0/24"])
        lines = self.setfile_lines()
        self.assertEqual(lines[0], 'delete firewall policer "p1"')
        self.assertIn('delete policy-options prefix-list "pl1"', lines)

    def test_apply_stops_at_first_failure(self):
        runner = Runner(self.setfile_client(), self.store)
        manifest = manifest_of(policer_item(), prefix_list_item(["192.0.2.0/24"]))
        plan = runner.plan(manifest, refresh=False)

        with patch.object(FirewallPolicer, "create", side_effect=SessionError("commit failed")):
            result = runner.apply(plan)

        self.assertFalse(result.success)
        self.assertEqual(result.failed.address, POLICER)
        self.assertIsInstance(result.error, SessionError)
        self.assertEqual(result.applied, [])
        self.assertEqual(self.store.addresses(), [])

    def test_destroy_newest_first(self):
        record(self.store, policer_item())
        record(self.store, prefix_list_item(["192.0.2.0/24"]))
        runner = Runner(self.setfile_client(), self.store)

        result = runner.destroy()

        self.assertTrue(result.success)
        self.assertEqual(self.setfile_lines(), [
            'delete policy-options prefix-list "pl1"',
            'delete firewall policer "p1"',
        ])
        self.assertEqual(self.store.addresses(), [])

    def test_refresh_drops_gone_objects(self):
        record(self.store, policer_item())
        record(self.store, prefix_list_item(["192.0.2.0/24"]))
        session = fake_session({
            'show configuration policy-options prefix-list "pl1" | display set relative': (
                "set 192.0.2.0/24\nset 203.0.113.0/24\n"
            ),
        })
        runner = Runner(fake_client(session), self.store)

        refreshed = runner.refresh()

        self.assertIsNone(refreshed[POLICER])
        self.assertEqual(refreshed[PREFIX_LIST].prefix, ["192.0.2.0/24", "203.0.113.0/24"])
        self.assertEqual(self.store.addresses(), [PREFIX_LIST])
        self.assertEqual(self.store.get(PREFIX_LIST)["attributes"]["prefix"], ["192.0.2.0/24", "203.0.113.0/24"])
        self.assertEqual(self.store.serial, 1)

    def test_import(self):
        session = fake_session({
            'show configuration firewall policer "p1" | display set relative': (
                "set if-exceeding burst-size-limit 50k\nset then discard\n"
            ),
        })
        runner = Runner(fake_client(session), self.store)

        data = runner.import_resource("junos_firewall_policer", "edge", "p1")

        self.assertEqual(data.id, "p1")
        entry = self.store.get("junos_firewall_policer.edge")
        self.assertEqual(entry["attributes"]["if_exceeding"], {"burst_size_limit": "50k"})

    def test_import_already_managed(self):
        record(self.store, policer_item())
        runner = Runner(fake_client(fake_session()), self.store)
        with self.assertRaises(ValidationError):
            runner.import_resource("junos_firewall_policer", "p1", "p1")


if __name__ == '__main__':
    unittest.main()
