#!/usr/bin/env python3
"""
Validation of incoming challenge update requests.

A request looks like::

    {
        "capabilities": {"challengeUpdated": "cpblty://membrane.example.com/#<token>"},
        "challenge": "<token issued by the ACME server>",
        "domain": "my.domain.example.com",
    }
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

from errors import ValidationError

CAPABILITY_SCHEME = "cpblty"

_LABEL_RE = re.compile(r"^(?!-)[A-Za-z0-9_-]{1,63}(?<!-)$")


@dataclass(frozen=True)
class CapabilityURI:
    """Parsed ``cpblty://<authority>/#<token>`` address."""

    authority: str
    token: str

    def __repr__(self):
        # Never render the token
        return f"CapabilityURI(authority={self.authority!r}, token='***')"


@dataclass(frozen=True)
class ChallengeRequest:
    domain: str
    challenge: str
    notify_target: CapabilityURI


def parse_capability_uri(value: Any) -> CapabilityURI | None:
    """Return the parsed capability URI, or None if value is not one."""
    if not isinstance(value, str):
        return None
    parts = urlsplit(value)
    if parts.scheme != CAPABILITY_SCHEME or not parts.netloc:
        return None
    if parts.path not in ("", "/") or parts.query:
        return None
    if not parts.fragment:
        return None
    return CapabilityURI(authority=parts.netloc.lower(), token=parts.fragment)


def is_valid_domain(value: Any) -> bool:
    """Check that value looks like a fully-qualified host name."""
    if not isinstance(value, str) or not value:
        return False
    name = value[:-1] if value.endswith(".") else value
    if not name or len(name) > 253:
        return False
    labels = name.split(".")
    return all(_LABEL_RE.match(label) for label in labels)


def parse_challenge_request(message: Any) -> ChallengeRequest:
    """
    Validate an incoming message, stopping at the first invalid field.

    Raises:
        ValidationError: naming the first invalid field path
    """
    if not isinstance(message, Mapping):
        raise ValidationError("message")

    capabilities = message.get("capabilities")
    if not isinstance(capabilities, Mapping):
        raise ValidationError("capabilities")
    notify_target = parse_capability_uri(capabilities.get("challengeUpdated"))
    if notify_target is None:
        raise ValidationError("capabilities.challengeUpdated")

    challenge = message.get("challenge")
    if not isinstance(challenge, str) or not challenge:
        raise ValidationError("challenge")

    domain = message.get("domain")
    if not is_valid_domain(domain):
        raise ValidationError("domain")

    return ChallengeRequest(domain=domain.rstrip("."), challenge=challenge, notify_target=notify_target)
