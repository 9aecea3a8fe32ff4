#!/usr/bin/env python3
"""
Tests for zone_matching.py module.
"""

import os
import sys
import unittest

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from zone_matching import ZoneDescriptor, matching_zones, select_most_specific


class TestZoneMatching(unittest.TestCase):
    """Test cases for hosted zone matching and selection."""

    def setUp(self):
        """Set up test fixtures."""
        self.zones = [
            ZoneDescriptor("example.com.", "ZROOT"),
            ZoneDescriptor("sub.example.com.", "ZSUB"),
            ZoneDescriptor("ample.com.", "ZAMPLE"),
            ZoneDescriptor("other.example.com.", "ZOTHER"),
        ]

    def test_from_provider_normalizes(self):
        """Test trailing dot and /hostedzone/ prefix handling."""
        zone = ZoneDescriptor.from_provider("example.com", "/hostedzone/Z123")
        assert zone == ZoneDescriptor("example.com.", "Z123")
        assert ZoneDescriptor.from_provider("example.com.", "Z9").id == "Z9"

    def test_matching_is_label_wise(self):
        """Test only ancestor zones match, never partial labels."""
        matches = matching_zones("my.sub.example.com", self.zones)
        assert [z.id for z in matches] == ["ZROOT", "ZSUB"]

    def test_matching_is_case_insensitive(self):
        """Test zone names match regardless of case."""
        matches = matching_zones("My.Sub.EXAMPLE.com", [ZoneDescriptor("sub.example.COM.", "ZSUB")])
        assert len(matches) == 1

    def test_apex_matches_itself(self):
        """Test a domain that is the zone apex matches the zone."""
        assert matching_zones("example.com", self.zones) == [self.zones[0]]

    def test_no_match(self):
        """Test unrelated zones do not match."""
        assert matching_zones("example.org", self.zones) == []

    def test_unparseable_zone_is_ignored(self):
        """Test malformed provider names are skipped."""
        zones = [ZoneDescriptor("bad..example.com.", "ZBAD"), ZoneDescriptor("example.com.", "ZROOT")]
        assert [z.id for z in matching_zones("www.example.com", zones)] == ["ZROOT"]

    def test_select_most_specific(self):
        """Test the zone with the most labels wins regardless of order."""
        matches = matching_zones("my.sub.example.com", self.zones)
        assert select_most_specific(matches).id == "ZSUB"
        assert select_most_specific(list(reversed(matches))).id == "ZSUB"

    def test_select_tie_break_is_deterministic(self):
        """Test equal-length matches resolve by name, then id, not listing order."""
        first = ZoneDescriptor("example.com.", "ZB")
        second = ZoneDescriptor("example.com.", "ZA")

        with self.assertLogs("zone_matching", level="WARNING"):
            assert select_most_specific([first, second]).id == "ZA"
        with self.assertLogs("zone_matching", level="WARNING"):
            assert select_most_specific([second, first]).id == "ZA"

    def test_select_empty(self):
        """Test no matches selects nothing."""
        assert select_most_specific([]) is None


if __name__ == "__main__":
    unittest.main()
