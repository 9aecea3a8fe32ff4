#!/usr/bin/env python3
"""
AWS Route53 client for publishing ACME challenge TXT records.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any

import boto3
import botocore.exceptions

from errors import DependencyError
from zone_matching import ZoneDescriptor

logger = logging.getLogger(__name__)

CHALLENGE_RECORD_TTL = 5
STATUS_INSYNC = "INSYNC"


@dataclass(frozen=True)
class ZonePage:
    """One page of the hosted zone listing."""

    zones: list[ZoneDescriptor] = field(default_factory=list)
    truncated: bool = False
    next_token: str | None = None


def quote_txt_value(value: str) -> str:
    """Wrap a TXT value in double quotes as Route53 expects."""
    return f'"{value}"'


class Route53Client:
    """Thin wrapper around the boto3 Route53 client for the three calls we need."""

    def __init__(self, client: Any = None, region_name: str | None = None):
        """
        Initialize the Route53 client.

        Args:
            client: Pre-built boto3 Route53 client (built from region_name if None)
            region_name: Optional AWS region for the default client
        """
        if client is None:
            client = boto3.client("route53", region_name=region_name)
        self.client = client

    def _safe_serialize(self, obj: Any) -> str:
        """Serialize an object for debug logging, truncated to keep logs readable."""
        try:
            serialized = json.dumps(obj, ensure_ascii=False, default=str)
        except (TypeError, ValueError):
            serialized = str(obj)
        if len(serialized) > 1000:
            return serialized[:1000] + "...[truncated]"
        return serialized

    def _mask_sensitive_data(self, data: Any) -> Any:
        """Mask record values and credentials in a request before logging it."""
        if isinstance(data, dict):
            masked = {}
            for key, value in data.items():
                if any(sensitive in key.lower() for sensitive in ["key", "secret", "token", "auth", "value"]):
                    masked[key] = "***MASKED***"
                else:
                    masked[key] = self._mask_sensitive_data(value)
            return masked
        if isinstance(data, list):
            return [self._mask_sensitive_data(item) for item in data]
        return data

    def _call(self, operation: str, **params: Any) -> dict[str, Any]:
        """
        Invoke a Route53 API operation, logging timing and wrapping failures.

        Raises:
            DependencyError: If the call fails for any reason
        """
        logger.debug(f"Route53 Request: {operation} {self._safe_serialize(self._mask_sensitive_data(params))}")
        start_time = time.time()
        try:
            response = getattr(self.client, operation)(**params)
        except botocore.exceptions.ClientError as e:
            duration = time.time() - start_time
            error = e.response.get("Error", {})
            logger.error(
                f"Route53 {operation} failed: {error.get('Code', 'Unknown')} {error.get('Message', '')} "
                f"(Duration: {duration:.2f}s)"
            )
            raise DependencyError(f"Route53 {operation}", error.get("Code", "")) from e
        except botocore.exceptions.BotoCoreError as e:
            duration = time.time() - start_time
            logger.error(f"Route53 {operation} failed: {type(e).__name__}: {e} (Duration: {duration:.2f}s)")
            raise DependencyError(f"Route53 {operation}", type(e).__name__) from e

        duration = time.time() - start_time
        status_code = response.get("ResponseMetadata", {}).get("HTTPStatusCode", "<?>")
        logger.info(f"Route53 Response: {operation} {status_code} (Duration: {duration:.2f}s)")
        return response

    def list_zones(self, next_token: str | None = None) -> ZonePage:
        """
        Fetch one page of hosted zones.

        Args:
            next_token: Continuation marker from the previous page

        Returns:
            ZonePage with normalized zone descriptors
        """
        params = {"Marker": next_token} if next_token else {}
        response = self._call("list_hosted_zones", **params)
        try:
            zones = [ZoneDescriptor.from_provider(z["Name"], z["Id"]) for z in response["HostedZones"]]
        except (KeyError, TypeError) as e:
            raise DependencyError("Route53 list_hosted_zones", "malformed response") from e
        truncated = bool(response.get("IsTruncated", False))
        next_marker = response.get("NextMarker") if truncated else None
        if truncated and not next_marker:
            raise DependencyError("Route53 list_hosted_zones", "truncated page without NextMarker")
        logger.debug(f"Listed {len(zones)} hosted zones (truncated={truncated})")
        return ZonePage(zones=zones, truncated=truncated, next_token=next_marker)

    def upsert_txt_record(self, zone_id: str, name: str, value: str, ttl: int = CHALLENGE_RECORD_TTL) -> str:
        """
        Create or replace a TXT record set holding a single value.

        Args:
            zone_id: Hosted zone id (without the /hostedzone/ prefix)
            name: Fully-qualified record name with trailing dot
            value: Unquoted TXT value
            ttl: Record TTL in seconds

        Returns:
            Change id to poll with get_change_status
        """
        change_batch = {
            "Changes": [
                {
                    "Action": "UPSERT",
                    "ResourceRecordSet": {
                        "Name": name,
                        "Type": "TXT",
                        "TTL": ttl,
                        "ResourceRecords": [{"Value": quote_txt_value(value)}],
                    },
                }
            ]
        }
        response = self._call("change_resource_record_sets", HostedZoneId=zone_id, ChangeBatch=change_batch)
        try:
            return response["ChangeInfo"]["Id"]
        except (KeyError, TypeError) as e:
            raise DependencyError("Route53 change_resource_record_sets", "malformed response") from e

    def get_change_status(self, change_id: str) -> str:
        """Return the propagation status of a change (PENDING or INSYNC)."""
        response = self._call("get_change", Id=change_id)
        try:
            return response["ChangeInfo"]["Status"]
        except (KeyError, TypeError) as e:
            raise DependencyError("Route53 get_change", "malformed response") from e
