"""
Unit tests for the small helpers in UTILS.
"""
import logging

import pytest
from d2sd.UTILS.duration import parse_duration
from d2sd.UTILS.host_port import join_host_port, split_host_port
from d2sd.UTILS.label_sanitizer import sanitize_label_name
from d2sd.UTILS.logging_setup import JsonFormatter, resolve_level


class TestLabelSanitizer:
    """Tests for sanitize_label_name."""

    def test_valid_name_unchanged(self):
        assert sanitize_label_name("prometheus_job") == "prometheus_job"

    def test_invalid_characters_replaced(self):
        assert sanitize_label_name("prometheus&=5b") == "prometheus__5b"
        assert sanitize_label_name("com.docker.compose.service") == "com_docker_compose_service"


class TestHostPort:
    """Tests for joining and splitting addresses."""

    def test_join(self):
        assert join_host_port("10.0.0.1", "9100") == "10.0.0.1:9100"

    def test_join_ipv6(self):
        assert join_host_port("::1", "9100") == "[::1]:9100"

    def test_split(self):
        assert split_host_port(":9200") == ("0.0.0.0", 9200)
        assert split_host_port("127.0.0.1:8080") == ("127.0.0.1", 8080)
        assert split_host_port("[::]:9200") == ("::", 9200)

    def test_split_invalid(self):
        with pytest.raises(ValueError):
            split_host_port("9200")
        with pytest.raises(ValueError):
            split_host_port("host:http")


class TestDuration:
    """Tests for parse_duration."""

    @pytest.mark.parametrize("text, seconds", [
        ("60s", 60.0),
        ("5m", 300.0),
        ("1h30m", 5400.0),
        ("500ms", 0.5),
        ("1m30s", 90.0),
        ("15", 15.0),
    ])
    def test_valid(self, text, seconds):
        assert parse_duration(text) == seconds

    @pytest.mark.parametrize("text", ["", "abc", "5x", "s5", "0s", "-1", "inf", "nan", "1e999"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_duration(text)


class TestLogging:
    """Tests for the logging helpers."""

    def test_resolve_level(self):
        assert resolve_level("debug") == logging.DEBUG
        assert resolve_level("WARNING") == logging.WARNING
        assert resolve_level("nonsense") == logging.INFO
        assert resolve_level(logging.ERROR) == logging.ERROR

    def test_json_formatter(self):
        record = logging.LogRecord("d2sd.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
        line = JsonFormatter().format(record)
        assert '"msg": "hello world"' in line
        assert '"level": "INFO"' in line
