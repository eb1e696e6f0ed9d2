"""
Tests for settings validation
"""

import pytest

from fhirproxy.config import ConfigIssue, ProxySettings, validate_settings


def paths(issues, level="error"):
    return [issue.path for issue in issues if issue.level == level]


class TestValidateSettings:
    def test_defaults_are_valid(self):
        assert validate_settings(ProxySettings()) == []

    @pytest.mark.parametrize("fmt", ["Client", "client", "JSON", "xml"])
    def test_known_upstream_formats(self, fmt):
        assert paths(validate_settings(ProxySettings(upstream_format=fmt))) == []

    def test_unknown_upstream_format(self):
        (issue,) = validate_settings(ProxySettings(upstream_format="YAML"))
        assert issue.level == "error"
        assert issue.path == "upstream-format"
        assert "Client, JSON, XML" in issue.hint

    def test_unsupported_fhir_version(self):
        issues = validate_settings(ProxySettings(fhir_version="STU3"))
        assert paths(issues) == ["fhir-context"]

    @pytest.mark.parametrize("changes,path", [
        ({"upstream_scheme": "ftp"}, "upstream-scheme"),
        ({"upstream_port": 0}, "upstream-port"),
        ({"listen_port": 70000}, "listen-port"),
        ({"log_level": "LOUD"}, "log-level"),
        ({"upstream_timeout_s": 0}, "upstream-timeout"),
    ])
    def test_errors(self, changes, path):
        assert paths(validate_settings(ProxySettings(**changes))) == [path]

    def test_validation_with_fixed_format_warns(self):
        issues = validate_settings(ProxySettings(validation_enabled=True, upstream_format="JSON"))
        assert paths(issues) == []
        assert paths(issues, level="warn") == ["validation-enabled"]

    def test_issue_str(self):
        issue = ConfigIssue(level="error", path="upstream-port", message="Port out of range: 0", hint="Use a port")
        assert str(issue) == "ERROR [upstream-port] Port out of range: 0\n   Hint: Use a port"
        assert str(ConfigIssue(level="warn", path="x", message="m")) == "WARN [x] m"
