#!/usr/bin/env python3
"""
Tests for config.py module.
"""

import json
import os
import sys
import unittest

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from config import DEFAULT_NOTIFY_TIMEOUT, DEFAULT_POLL_INTERVAL, load_config
from errors import ConfigError


class TestConfig(unittest.TestCase):
    """Test cases for load_config."""

    def test_defaults(self):
        """Test an empty environment yields defaults."""
        config = load_config({})

        assert dict(config.trusted_ca) == {}
        assert config.poll_interval == DEFAULT_POLL_INTERVAL == 5.0
        assert config.notify_timeout == DEFAULT_NOTIFY_TIMEOUT
        assert config.aws_region is None

    def test_userdata_trusted_ca(self):
        """Test trusted CAs are read from USERDATA and keyed by lower-case authority."""
        userdata = {"tls": {"trustedCA": {"Membrane.Example.com": "/etc/ssl/ca.pem"}}}
        config = load_config({"USERDATA": json.dumps(userdata)})

        assert dict(config.trusted_ca) == {"membrane.example.com": "/etc/ssl/ca.pem"}

    def test_trusted_ca_is_read_only(self):
        """Test the loaded config cannot be mutated."""
        config = load_config({})
        with self.assertRaises(TypeError):
            config.trusted_ca["x"] = "y"

    def test_numeric_settings(self):
        """Test interval, timeout and region overrides."""
        config = load_config({"CHANGE_POLL_INTERVAL": "0.5", "NOTIFY_TIMEOUT": "12", "AWS_REGION": "us-east-1"})

        assert config.poll_interval == 0.5
        assert config.notify_timeout == 12.0
        assert config.aws_region == "us-east-1"

    def test_invalid_userdata(self):
        """Test malformed USERDATA is rejected."""
        for raw in ("{not json", "[]", '{"tls": []}', '{"tls": {"trustedCA": "x"}}', '{"tls": {"trustedCA": {"a": ""}}}'):
            with self.subTest(raw=raw), self.assertRaises(ConfigError):
                load_config({"USERDATA": raw})

    def test_invalid_interval(self):
        """Test non-numeric and non-positive intervals are rejected."""
        for raw in ("soon", "0", "-5"):
            with self.subTest(raw=raw), self.assertRaises(ConfigError):
                load_config({"CHANGE_POLL_INTERVAL": raw})


if __name__ == "__main__":
    unittest.main()
