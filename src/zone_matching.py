#!/usr/bin/env python3
"""
Hosted zone matching: which zones are authoritative for a domain, and which
of those is the most specific.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

import dns.exception
import dns.name

logger = logging.getLogger(__name__)

HOSTED_ZONE_PREFIX = "/hostedzone/"


@dataclass(frozen=True)
class ZoneDescriptor:
    """A hosted zone as reported by the DNS provider."""

    name: str
    id: str

    @classmethod
    def from_provider(cls, name: str, zone_id: str) -> ZoneDescriptor:
        """Normalize a provider zone: trailing-dot name, bare id."""
        if not name.endswith("."):
            name = f"{name}."
        if zone_id.startswith(HOSTED_ZONE_PREFIX):
            zone_id = zone_id[len(HOSTED_ZONE_PREFIX) :]
        return cls(name=name, id=zone_id)


def _to_dns_name(text: str) -> dns.name.Name | None:
    try:
        return dns.name.from_text(text)
    except dns.exception.DNSException as e:
        logger.debug(f"Ignoring unparseable DNS name {text!r}: {e}")
        return None


def matching_zones(domain: str, zones: Iterable[ZoneDescriptor]) -> list[ZoneDescriptor]:
    """
    Return the zones whose apex is the domain itself or one of its ancestors.

    Comparison is label-wise and case-insensitive, so ``ample.com.`` never
    matches ``example.com``.
    """
    target = _to_dns_name(domain)
    if target is None:
        return []
    matches = []
    for zone in zones:
        apex = _to_dns_name(zone.name)
        if apex is not None and target.is_subdomain(apex):
            matches.append(zone)
    return matches


def _specificity_key(zone: ZoneDescriptor) -> tuple[int, str, str]:
    apex = dns.name.from_text(zone.name)
    # More labels first, then alphabetical name, then id
    return (-len(apex.labels), apex.to_text().lower(), zone.id)


def select_most_specific(matches: Iterable[ZoneDescriptor]) -> ZoneDescriptor | None:
    """Pick the matching zone with the most labels, or None if there are none."""
    keyed = sorted(((_specificity_key(zone), zone) for zone in matches), key=lambda pair: pair[0])
    if not keyed:
        return None
    best_key, best = keyed[0]
    ties = [zone for key, zone in keyed if key[0] == best_key[0]]
    if len(ties) > 1:
        logger.warning(
            f"Multiple equally specific zones match: {[(z.name, z.id) for z in ties]}; choosing {best.id}"
        )
    return best
