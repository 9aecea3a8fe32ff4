#!/usr/bin/env python3
"""
Runtime configuration for the ACME challenge updater.

Configuration comes from the process environment. TLS trust material for
notification targets is read from the ``USERDATA`` JSON document::

    {"tls": {"trustedCA": {"membrane.example.com": "/etc/ssl/membrane-ca.pem"}}}
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_NOTIFY_TIMEOUT = 30.0


@dataclass(frozen=True)
class UpdaterConfig:
    """Immutable settings shared by every workflow run in the process."""

    trusted_ca: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    poll_interval: float = DEFAULT_POLL_INTERVAL
    notify_timeout: float = DEFAULT_NOTIFY_TIMEOUT
    aws_region: str | None = None


def _positive_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError as e:
        msg = f"{name} must be a number, got {raw!r}"
        raise ConfigError(msg) from e
    if value <= 0:
        msg = f"{name} must be positive, got {raw!r}"
        raise ConfigError(msg)
    return value


def _trusted_ca_from_userdata(raw: str) -> dict[str, str]:
    try:
        userdata = json.loads(raw)
    except json.JSONDecodeError as e:
        msg = f"USERDATA is not valid JSON: {e}"
        raise ConfigError(msg) from e
    if not isinstance(userdata, dict):
        msg = "USERDATA must be a JSON object"
        raise ConfigError(msg)

    tls = userdata.get("tls") or {}
    if not isinstance(tls, dict):
        msg = "USERDATA tls must be a JSON object"
        raise ConfigError(msg)
    trusted_ca = tls.get("trustedCA") or {}
    if not isinstance(trusted_ca, dict):
        msg = "USERDATA tls.trustedCA must map authorities to CA bundle paths"
        raise ConfigError(msg)
    for authority, ca_path in trusted_ca.items():
        if not isinstance(ca_path, str) or not ca_path:
            msg = f"USERDATA tls.trustedCA[{authority!r}] must be a non-empty string"
            raise ConfigError(msg)
    return {authority.lower(): ca_path for authority, ca_path in trusted_ca.items()}


def load_config(environ: Mapping[str, str] | None = None) -> UpdaterConfig:
    """
    Build the updater configuration from environment variables.

    Args:
        environ: Environment mapping (defaults to os.environ)

    Returns:
        UpdaterConfig instance

    Raises:
        ConfigError: If any setting is malformed
    """
    if environ is None:
        environ = os.environ

    trusted_ca = _trusted_ca_from_userdata(environ.get("USERDATA") or "{}")
    config = UpdaterConfig(
        trusted_ca=MappingProxyType(trusted_ca),
        poll_interval=_positive_float(environ, "CHANGE_POLL_INTERVAL", DEFAULT_POLL_INTERVAL),
        notify_timeout=_positive_float(environ, "NOTIFY_TIMEOUT", DEFAULT_NOTIFY_TIMEOUT),
        aws_region=environ.get("AWS_REGION") or None,
    )
    logger.debug(
        f"Loaded config: poll_interval={config.poll_interval}s, notify_timeout={config.notify_timeout}s, "
        f"trusted authorities={sorted(config.trusted_ca)}, region={config.aws_region or 'default'}"
    )
    return config
