"""Tests for error formatting, the command error decorator and timeout budgets"""

import io
import os
import unittest
from contextlib import redirect_stdout
from unittest.mock import MagicMock, patch

from jnpr.junos.exception import ConnectAuthError, ConnectRefusedError

from junos_provider.utils import error_handling
from junos_provider.utils.error_handling import (
    ConfigurationError, ErrorFormatter, ErrorSeverity, ProviderError, ValidationError, handle_errors,
)
from junos_provider.utils.timeout_config import (
    LinearBackoff, TimeoutContext, TimeoutType, get_timeout, validate_timeouts,
)


class TestErrorFormatter(unittest.TestCase):

    def test_provider_error_with_guidance(self):
        error = ValidationError("name is required", "name", "Set name in the resource config")
        self.assertEqual(
            ErrorFormatter.format_error(error),
            "✗ name is required\n  Suggestion: Set name in the resource config",
        )

    def test_technical_details_only_when_requested(self):
        error = ProviderError("commit failed", technical_details="error: syntax error")
        self.assertNotIn("Technical", ErrorFormatter.format_error(error))
        self.assertIn("Technical: error: syntax error",
                      ErrorFormatter.format_error(error, hide_technical=False))

    def test_pyez_auth_error_matched_before_connect_error(self):
        dev = MagicMock(hostname="192.0.2.1")
        formatted = ErrorFormatter.format_error(ConnectAuthError(dev))
        self.assertTrue(formatted.startswith("✗ NETCONF authentication failed"))
        self.assertIn("JUNOS_USERNAME", formatted)

    def test_pyez_connect_error(self):
        dev = MagicMock(hostname="192.0.2.1")
        formatted = ErrorFormatter.format_error(ConnectRefusedError(dev))
        self.assertTrue(formatted.startswith("✗ NETCONF connection failed"))
        self.assertIn("system services netconf ssh", formatted)

    def test_builtin_errors(self):
        self.assertTrue(ErrorFormatter.format_error(FileNotFoundError("x.yaml")).startswith("✗ File not found"))
        self.assertTrue(ErrorFormatter.format_error(ValueError("bad")).startswith("✗ Invalid input"))
        self.assertEqual(ErrorFormatter.format_error(KeyboardInterrupt()),
                         "⚠ Operation interrupted by user")

    def test_unexpected_error(self):
        self.assertIn("Unexpected error occurred: boom", ErrorFormatter.format_error(RuntimeError("boom")))
        self.assertEqual(ErrorFormatter.format_error(RuntimeError("boom"), hide_technical=False),
                         "✗ Unexpected RuntimeError: boom")


class TestHandleErrors(unittest.TestCase):

    def call(self, exc):
        @handle_errors()
        def command():
            raise exc

        out = io.StringIO()
        with redirect_stdout(out):
            code = command()
        return code, out.getvalue()

    def test_error_exit_code_from_exception(self):
        code, output = self.call(ConfigurationError("Device address not configured"))
        self.assertEqual(code, 78)
        self.assertIn("✗ Device address not configured", output)

    def test_warning_severity_succeeds(self):
        code, _ = self.call(ProviderError("nothing to do", ErrorSeverity.WARNING))
        self.assertEqual(code, 0)

    def test_fatal_severity(self):
        code, _ = self.call(ProviderError("broken", ErrorSeverity.FATAL))
        self.assertEqual(code, 2)

    def test_interrupt(self):
        code, _ = self.call(KeyboardInterrupt())
        self.assertEqual(code, 130)

    def test_fatal_errors_use_fatal_symbol(self):
        _, output = self.call(ProviderError("state file corrupt", ErrorSeverity.FATAL))
        self.assertIn("✗ Fatal: state file corrupt", output)

    def test_print_helpers_exported(self):
        self.assertEqual(
            [name for name in error_handling.__all__ if name.startswith("print_")],
            ["print_success", "print_warning", "print_error"],
        )

    def test_unexpected_exception(self):
        code, output = self.call(RuntimeError("boom"))
        self.assertEqual(code, 1)
        self.assertIn("boom", output)


class TestTimeouts(unittest.TestCase):

    def test_default(self):
        with patch.dict(os.environ, {}, clear=True):
            self.assertEqual(get_timeout(TimeoutType.NETCONF_OPERATION), 60.0)

    def test_clamped_to_bounds(self):
        with patch.dict(os.environ, {"JUNOS_PROVIDER_TIMEOUT_OPERATION": "1"}, clear=True):
            self.assertEqual(get_timeout(TimeoutType.NETCONF_OPERATION), 10.0)
        with patch.dict(os.environ, {"JUNOS_PROVIDER_TIMEOUT_STATE_LOCK": "9999"}, clear=True):
            self.assertEqual(get_timeout(TimeoutType.STATE_LOCK), 600.0)

    def test_invalid_value_uses_default(self):
        with patch.dict(os.environ, {"JUNOS_PROVIDER_TIMEOUT_CONNECTION": "soon"}, clear=True):
            self.assertEqual(get_timeout(TimeoutType.NETCONF_CONNECTION), 30.0)
            results = validate_timeouts()
        self.assertFalse(results["valid"])
        self.assertEqual(results["errors"], ["Invalid value for JUNOS_PROVIDER_TIMEOUT_CONNECTION: soon"])

    def test_validate_reports_out_of_range(self):
        with patch.dict(os.environ, {"JUNOS_PROVIDER_TIMEOUT_CONFIG_LOCK": "5"}, clear=True):
            results = validate_timeouts()
        self.assertTrue(results["valid"])
        self.assertEqual(len(results["warnings"]), 1)
        self.assertEqual(results["timeouts"]["config_lock"]["value"], 10.0)

    def test_context_remaining_time(self):
        context = TimeoutContext(TimeoutType.CONFIG_LOCK, custom_timeout=5.0)
        self.assertEqual(context.remaining_time(), 5.0)

    @patch("junos_provider.utils.timeout_config.time.sleep")
    def test_linear_backoff(self, mock_sleep):
        backoff = LinearBackoff(initial_delay=1.0, max_delay=2.5, max_retries=3)
        self.assertTrue(backoff.delay())
        self.assertTrue(backoff.delay())
        self.assertTrue(backoff.delay())
        self.assertFalse(backoff.delay())
        self.assertEqual([c.args[0] for c in mock_sleep.call_args_list], [1.0, 2.0, 2.5])

    @patch("junos_provider.utils.timeout_config.time.sleep")
    def test_backoff_respects_context_budget(self, mock_sleep):
        backoff = LinearBackoff(initial_delay=10.0)
        with TimeoutContext(TimeoutType.CONFIG_LOCK, custom_timeout=5.0) as context:
            self.assertFalse(backoff.delay(context))
        mock_sleep.assert_not_called()


if __name__ == '__main__':
    unittest.main()
