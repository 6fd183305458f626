"""
Tests for the Junos session wrapper

The PyEZ Device and Config objects are mocked; exceptions are real PyEZ
exception instances so error classification is exercised.
"""

import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from jnpr.junos.exception import CommitError, ConfigLoadError, LockError, RpcError, UnlockError
from lxml import etree

from junos_provider.junos.constants import EMPTY_W
from junos_provider.junos.session import ConfigLockError, Session, SessionError


def rpc_error_xml(message, severity="error"):
    return etree.XML(
        "<rpc-error>"
        f"<error-severity>{severity}</error-severity>"
        f"<error-message>{message}</error-message>"
        "</rpc-error>"
    )


def rpc_errs(*entries):
    return [{"severity": severity, "message": message, "bad_element": None} for severity, message in entries]


class TestSession(unittest.TestCase):

    def setUp(self):
        config_patcher = patch('junos_provider.junos.session.Config')
        self.mock_config_class = config_patcher.start()
        self.addCleanup(config_patcher.stop)
        self.device = MagicMock()
        self.session = Session(device=self.device, cmd_sleep_short=0, cmd_sleep_lock=1)
        self.config = self.session.config

    def test_command_output(self):
        self.device.rpc.cli.return_value = etree.XML("<output>\nset then discard\n</output>")
        output = self.session.command('show configuration firewall policer "p1" | display set')
        self.assertEqual(output, "\nset then discard\n")
        self.device.rpc.cli.assert_called_once_with(
            'show configuration firewall policer "p1" | display set', format="text"
        )

    def test_command_without_output(self):
        self.device.rpc.cli.return_value = etree.XML("<output>\n\n</output>")
        self.assertEqual(self.session.command("show configuration x"), EMPTY_W)
        self.device.rpc.cli.return_value = True
        self.assertEqual(self.session.command("show configuration x"), EMPTY_W)

    def test_command_error(self):
        self.device.rpc.cli.side_effect = RpcError()
        with self.assertRaises(SessionError):
            self.session.command("show configuration x")

    def test_config_get(self):
        self.device.rpc.get_config.return_value = etree.XML(
            "<configuration-set>set system host-name fw1</configuration-set>"
        )
        self.assertEqual(self.session.config_get(), "set system host-name fw1")
        self.device.rpc.get_config.assert_called_once_with(
            options={"database": "committed", "format": "set"}
        )

    def test_config_set_loads_set_format(self):
        self.session.config_set(["set a", "delete b"])
        self.config.load.assert_called_once_with("set a\ndelete b", format="set")

    def test_config_set_empty_does_nothing(self):
        self.session.config_set([])
        self.config.load.assert_not_called()

    def test_config_set_warnings_are_not_fatal(self):
        self.config.load.side_effect = ConfigLoadError(rsp=None, errs=rpc_errs(("warning", "statement not found")))
        self.session.config_set(["delete a"])

    def test_config_set_errors(self):
        self.config.load.side_effect = ConfigLoadError(
            rsp=None, errs=rpc_errs(("error", "syntax error"), ("warning", "ignored")),
        )
        with self.assertRaises(SessionError) as ctx:
            self.session.config_set(["set a"])
        self.assertEqual(ctx.exception.message, "syntax error")

    @patch('junos_provider.junos.session.time.sleep')
    def test_config_lock_retries(self, mock_sleep):
        self.config.lock.side_effect = [LockError(rsp=rpc_error_xml("configuration database locked")), True]
        self.session.config_lock(timeout=30)
        self.assertEqual(self.config.lock.call_count, 2)
        mock_sleep.assert_called_once_with(1)

    @patch('junos_provider.junos.session.time.sleep')
    def test_config_lock_gives_up(self, mock_sleep):
        self.session.cmd_sleep_lock = 10
        self.config.lock.side_effect = LockError(rsp=rpc_error_xml("configuration database locked"))
        with self.assertRaises(ConfigLockError):
            self.session.config_lock(timeout=5)
        self.assertEqual(self.config.lock.call_count, 1)
        mock_sleep.assert_not_called()

    def test_config_clear(self):
        self.assertEqual(self.session.config_clear(), [])
        self.config.rollback.assert_called_once_with(0)
        self.config.unlock.assert_called_once()

    def test_config_clear_reports_failures(self):
        self.config.rollback.side_effect = RpcError()
        self.config.unlock.side_effect = UnlockError(rsp=rpc_error_xml("not locked"))
        warnings = self.session.config_clear()
        self.assertEqual(len(warnings), 2)
        self.assertTrue(warnings[0].startswith("config clear: "))
        self.assertTrue(warnings[1].startswith("config unlock: "))

    def test_commit(self):
        self.assertEqual(self.session.commit_conf("create resource junos_firewall_policer"), [])
        self.config.commit.assert_called_once_with(comment="create resource junos_firewall_policer")

    def test_commit_warnings(self):
        self.config.commit.side_effect = CommitError(rsp=None, errs=rpc_errs(("warning", "statement has no effect")))
        self.assertEqual(self.session.commit_conf("msg"), ["statement has no effect"])

    def test_commit_errors(self):
        self.config.commit.side_effect = CommitError(rsp=None, errs=rpc_errs(("error", "missing mandatory statement")))
        with self.assertRaises(SessionError) as ctx:
            self.session.commit_conf("msg")
        self.assertIn("missing mandatory statement", ctx.exception.message)

    @patch('junos_provider.junos.session.time.sleep')
    def test_commit_confirmed(self, mock_sleep):
        self.session.commit_confirmed = 1
        self.session.commit_confirmed_wait_percent = 50

        self.session.commit_conf("msg")

        self.config.commit.assert_called_once_with(comment="msg", confirm=1)
        mock_sleep.assert_called_once_with(30.0)
        self.config.commit_check.assert_called_once()

    def test_gather_facts(self):
        self.device.rpc.get_system_information.return_value = etree.XML(
            "<system-information>"
            "<hardware-model>srx345</hardware-model>"
            "<os-name>junos</os-name>"
            "<os-version>21.4R3</os-version>"
            "<serial-number>CZ0123</serial-number>"
            "<host-name>fw1</host-name>"
            "</system-information>"
        )
        info = self.session.gather_facts()
        self.assertEqual(info.hardware_model, "srx345")
        self.assertEqual(info.os_version, "21.4R3")
        self.assertEqual(info.host_name, "fw1")
        self.assertFalse(info.cluster_node)
        self.assertTrue(info.check_compatibility_security())

    def test_close_removes_key_file(self):
        fd, key_file = tempfile.mkstemp()
        os.close(fd)
        self.session.key_file = key_file

        self.session.close()

        self.device.close.assert_called_once()
        self.assertIsNone(self.session.device)
        self.assertFalse(Path(key_file).exists())

    def test_close_removes_key_file_when_disconnect_fails(self):
        fd, key_file = tempfile.mkstemp()
        os.close(fd)
        self.session.key_file = key_file
        self.device.close.side_effect = RpcError()

        with self.assertRaises(RpcError):
            self.session.close()

        self.assertIsNone(self.session.device)
        self.assertIsNone(self.session.key_file)
        self.assertFalse(Path(key_file).exists())


class TestSetfileSession(unittest.TestCase):

    def setUp(self):
        self.setfile = Path(tempfile.mkdtemp()) / "lines.set"
        self.session = Session(fake_setfile=str(self.setfile), cmd_sleep_short=0, file_permission=0o600)

    def test_appends_lines(self):
        self.session.config_set(["set a"])
        self.session.config_set(["set b", "delete c"])
        self.assertEqual(self.setfile.read_text(), "set a\nset b\ndelete c\n")
        self.assertEqual(self.setfile.stat().st_mode & 0o777, 0o600)

    def test_netconf_actions_refused(self):
        self.assertFalse(self.session.netconf)
        with self.assertRaises(SessionError):
            self.session.command("show configuration")
        with self.assertRaises(SessionError):
            self.session.config_get()
        with self.assertRaises(SessionError):
            self.session.commit_conf("msg")


if __name__ == '__main__':
    unittest.main()
