#!/usr/bin/env python3
"""
Tests for route53_client.py against stubbed Route53 responses.
"""

import os
import sys
import unittest
from datetime import datetime, timezone

import boto3
from botocore.stub import Stubber

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from errors import DependencyError
from route53_client import Route53Client, quote_txt_value
from zone_matching import ZoneDescriptor

SUBMITTED_AT = datetime(2024, 1, 1, tzinfo=timezone.utc)


def hosted_zone(zone_id, name):
    return {"Id": f"/hostedzone/{zone_id}", "Name": name, "CallerReference": f"ref-{zone_id}"}


def change_info(change_id, status):
    return {"ChangeInfo": {"Id": change_id, "Status": status, "SubmittedAt": SUBMITTED_AT}}


class TestRoute53Client(unittest.TestCase):
    """Test cases for Route53Client."""

    def setUp(self):
        """Set up test fixtures."""
        boto_client = boto3.client(
            "route53",
            region_name="us-east-1",
            aws_access_key_id="testing",
            aws_secret_access_key="testing",
        )
        self.stubber = Stubber(boto_client)
        self.stubber.activate()
        self.client = Route53Client(client=boto_client)

    def tearDown(self):
        self.stubber.deactivate()

    def test_list_zones_first_page(self):
        """Test the first page is requested without a marker and zones are normalized."""
        self.stubber.add_response(
            "list_hosted_zones",
            {
                "HostedZones": [hosted_zone("Z123", "domain.example.com.")],
                "Marker": "",
                "IsTruncated": True,
                "NextMarker": "next-marker-thingy",
                "MaxItems": "100",
            },
            {},
        )

        page = self.client.list_zones()

        assert page.zones == [ZoneDescriptor(name="domain.example.com.", id="Z123")]
        assert page.truncated
        assert page.next_token == "next-marker-thingy"
        self.stubber.assert_no_pending_responses()

    def test_list_zones_passes_marker(self):
        """Test the continuation token is sent as Marker."""
        self.stubber.add_response(
            "list_hosted_zones",
            {"HostedZones": [], "Marker": "next-marker-thingy", "IsTruncated": False, "MaxItems": "100"},
            {"Marker": "next-marker-thingy"},
        )

        page = self.client.list_zones("next-marker-thingy")

        assert page.zones == []
        assert not page.truncated
        assert page.next_token is None

    def test_list_zones_error(self):
        """Test API errors become DependencyError."""
        self.stubber.add_client_error("list_hosted_zones", service_error_code="Throttling", http_status_code=400)

        with self.assertRaises(DependencyError):
            self.client.list_zones()

    def test_upsert_txt_record(self):
        """Test the change batch carries a quoted value and TTL 5."""
        expected_params = {
            "HostedZoneId": "Z123",
            "ChangeBatch": {
                "Changes": [
                    {
                        "Action": "UPSERT",
                        "ResourceRecordSet": {
                            "Name": "_acme-challenge.my.domain.example.com.",
                            "Type": "TXT",
                            "TTL": 5,
                            "ResourceRecords": [{"Value": '"some-challenge"'}],
                        },
                    }
                ]
            },
        }
        self.stubber.add_response("change_resource_record_sets", change_info("C1", "PENDING"), expected_params)

        change_id = self.client.upsert_txt_record("Z123", "_acme-challenge.my.domain.example.com.", "some-challenge")

        assert change_id == "C1"
        self.stubber.assert_no_pending_responses()

    def test_upsert_txt_record_error(self):
        """Test a rejected change batch becomes DependencyError."""
        self.stubber.add_client_error(
            "change_resource_record_sets", service_error_code="InvalidChangeBatch", http_status_code=400
        )

        with self.assertRaises(DependencyError) as ctx:
            self.client.upsert_txt_record("Z123", "_acme-challenge.example.com.", "value")

        assert "InvalidChangeBatch" in str(ctx.exception)

    def test_get_change_status(self):
        """Test the status is read from ChangeInfo."""
        self.stubber.add_response("get_change", change_info("C1", "INSYNC"), {"Id": "C1"})

        assert self.client.get_change_status("C1") == "INSYNC"

    def test_get_change_status_error(self):
        """Test an unknown change becomes DependencyError."""
        self.stubber.add_client_error("get_change", service_error_code="NoSuchChange", http_status_code=404)

        with self.assertRaises(DependencyError):
            self.client.get_change_status("missing")

    def test_mask_sensitive_data(self):
        """Test record values are masked before logging."""
        masked = self.client._mask_sensitive_data({"ResourceRecords": [{"Value": '"secret"'}], "Name": "x."})
        assert masked == {"ResourceRecords": [{"Value": "***MASKED***"}], "Name": "x."}

    def test_quote_txt_value(self):
        """Test TXT values are wrapped in double quotes."""
        assert quote_txt_value("abc") == '"abc"'


if __name__ == "__main__":
    unittest.main()
