"""Tests for system login class and system syslog host/user resources"""

import unittest

from junos_provider.resources.base import ConfigSetError
from junos_provider.resources.system_login_class import SystemLoginClass, SystemLoginClassData
from junos_provider.resources.system_syslog_host import (
    StructuredData,
    SystemSyslogHost,
    SystemSyslogHostData,
)
from junos_provider.resources.system_syslog_user import SystemSyslogUser, SystemSyslogUserData
from tests.fakes import fake_session


class TestSystemLoginClass(unittest.TestCase):

    def setUp(self):
        self.resource = SystemLoginClass()

    def test_set_lines(self):
        session = fake_session()
        self.resource.set(session, SystemLoginClassData(
            name="c1",
            allowed_days=["monday"],
            cli_prompt="lab> ",
            idle_timeout=10,
            permissions=["view", "configure"],
        ))
        self.assertEqual(session.loaded, [
            "set system login class c1 allowed-days monday",
            'set system login class c1 cli prompt "lab> "',
            "set system login class c1 idle-timeout 10",
            "set system login class c1 permissions view",
            "set system login class c1 permissions configure",
        ])

    def test_set_requires_an_option(self):
        with self.assertRaises(ConfigSetError):
            self.resource.set(fake_session(), SystemLoginClassData(name="c1"))

    def test_read(self):
        session = fake_session({
            "show configuration system login class c1 | display set relative": (
                "set access-end \"18:00:00 +0000\"\n"
                "set access-start \"08:00:00 +0000\"\n"
                "set allow-commands \"show .*\"\n"
                "set no-hidden-commands except \"show version\"\n"
                "set permissions view\n"
                "set security-role audit-administrator\n"
            ),
        })
        data = self.resource.read(session, "c1")

        self.assertEqual(data.id, "c1")
        self.assertEqual(data.access_end, "18:00:00")
        self.assertEqual(data.access_start, "08:00:00")
        self.assertEqual(data.allow_commands, "show .*")
        self.assertEqual(data.no_hidden_commands_except, ["show version"])
        self.assertEqual(data.permissions, ["view"])
        self.assertEqual(data.security_role, "audit-administrator")

    def test_validate(self):
        self.assertEqual(self.resource.validate(SystemLoginClassData(name="c1", login_tip=True)), [])

        issues = self.resource.validate(SystemLoginClassData(name="c1"))
        self.assertEqual(issues, ["at least one of arguments need to be set (in addition to `name`)"])

        issues = self.resource.validate(SystemLoginClassData(
            name="c1", access_start="25:00:00", permissions=["view", "fly", "view"],
            allow_commands="show", allow_commands_regexps=["show .*"],
        ))
        self.assertIn("access_end must be specified with access_start", issues)
        self.assertIn("access_start \"25:00:00\" must be in the format 'HH:MM:SS'", issues)
        self.assertIn("permission view is set more than once", issues)
        self.assertIn("allow_commands and allow_commands_regexps cannot be configured together", issues)
        self.assertTrue(any(issue.startswith("permissions must be one of") for issue in issues))


class TestSystemSyslogHost(unittest.TestCase):

    def setUp(self):
        self.resource = SystemSyslogHost()

    def test_set_lines(self):
        session = fake_session()
        self.resource.set(session, SystemSyslogHostData(
            host="192.0.2.10",
            match="error",
            port=514,
            any_severity="warning",
            interactivecommands_severity="info",
            structured_data=StructuredData(brief=True),
        ))
        self.assertEqual(session.loaded, [
            "set system syslog host 192.0.2.10",
            'set system syslog host 192.0.2.10 match "error"',
            "set system syslog host 192.0.2.10 port 514",
            "set system syslog host 192.0.2.10 any warning",
            "set system syslog host 192.0.2.10 interactive-commands info",
            "set system syslog host 192.0.2.10 structured-data",
            "set system syslog host 192.0.2.10 structured-data brief",
        ])

    def test_read(self):
        session = fake_session({
            "show configuration system syslog host 192.0.2.10 | display set relative": (
                "set any warning\n"
                "set change-log info\n"
                "set exclude-hostname\n"
                "set facility-override local3\n"
                "set log-prefix \"edge\"\n"
                "set match-strings \"fail\"\n"
                "set port 1514\n"
                "set structured-data\n"
            ),
        })
        data = self.resource.read(session, "192.0.2.10")

        self.assertEqual(data.id, "192.0.2.10")
        self.assertEqual(data.any_severity, "warning")
        self.assertEqual(data.changelog_severity, "info")
        self.assertTrue(data.exclude_hostname)
        self.assertEqual(data.facility_override, "local3")
        self.assertEqual(data.log_prefix, "edge")
        self.assertEqual(data.match_strings, ["fail"])
        self.assertEqual(data.port, 1514)
        self.assertEqual(data.structured_data, StructuredData(brief=False))

    def test_validate(self):
        self.assertEqual(self.resource.validate(SystemSyslogHostData(host="syslog.example.net")), [])

        issues = self.resource.validate(SystemSyslogHostData(
            host="192.0.2.10", port=70000, any_severity="loud", facility_override="mail",
            source_address="not-an-ip",
        ))
        self.assertIn("port must be between 1 and 65535, got 70000", issues)
        self.assertTrue(any(issue.startswith("any_severity must be one of") for issue in issues))
        self.assertTrue(any(issue.startswith("facility_override must be one of") for issue in issues))
        self.assertIn('source_address "not-an-ip" is not a valid IP address', issues)


class TestSystemSyslogUser(unittest.TestCase):

    def setUp(self):
        self.resource = SystemSyslogUser()

    def test_set_lines(self):
        session = fake_session()
        self.resource.set(session, SystemSyslogUserData(
            username="*", match_strings=["a", "b"], kernel_severity="critical",
        ))
        self.assertEqual(session.loaded, [
            "set system syslog user *",
            'set system syslog user * match-strings "a"',
            'set system syslog user * match-strings "b"',
            "set system syslog user * kernel critical",
        ])

    def test_read(self):
        session = fake_session({
            "show configuration system syslog user admin | display set relative": (
                "set allow-duplicates\n"
                "set match \"login\"\n"
                "set user notice\n"
            ),
        })
        data = self.resource.read(session, "admin")
        self.assertEqual(data.id, "admin")
        self.assertTrue(data.allow_duplicates)
        self.assertEqual(data.match, "login")
        self.assertEqual(data.user_severity, "notice")

    def test_validate(self):
        self.assertEqual(self.resource.validate(SystemSyslogUserData(username="*")), [])
        self.assertEqual(len(self.resource.validate(SystemSyslogUserData(username="bad user"))), 1)


if __name__ == '__main__':
    unittest.main()
