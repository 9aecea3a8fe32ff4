#!/usr/bin/env python3
"""
Certbot authentication hook for DNS-01 challenges on AWS Route53.

Publishes the TXT record, waits until Route53 reports the change in sync and
then signals the "challenge updated" capability.
"""

import asyncio
import json
import logging
import os
import sys

from capability_notifier import CapabilityNotifier
from challenge_workflow import ChallengeUpdater
from config import load_config
from errors import ConfigError
from logging_config import configure_logger, log_component_error, setup_logger
from route53_client import Route53Client

logger = setup_logger(__name__)

logger.debug(f"Current LOG_LEVEL environment variable: {os.environ.get('LOG_LEVEL', 'NOT_SET')}")

_LIBRARY_LOGGERS = ("capability_notifier", "challenge_workflow", "config", "route53_client", "zone_matching")


def build_message(environ) -> dict:
    """Assemble a workflow request from certbot's environment variables."""
    message = {}
    capability = environ.get("CHALLENGE_UPDATED_CAPABILITY")
    if capability:
        message["capabilities"] = {"challengeUpdated": capability}
    for key, variable in (("challenge", "CERTBOT_VALIDATION"), ("domain", "CERTBOT_DOMAIN")):
        if environ.get(variable):
            message[key] = environ[variable]
    return message


def build_updater(updater_config) -> ChallengeUpdater:
    """Construct the workflow and its clients once per process."""
    return ChallengeUpdater(
        Route53Client(region_name=updater_config.aws_region),
        CapabilityNotifier(updater_config.trusted_ca, timeout=updater_config.notify_timeout),
        poll_interval=updater_config.poll_interval,
    )


def main():
    """
    Main entry point for the auth hook.

    Environment variables:
    - CERTBOT_DOMAIN: The domain being validated
    - CERTBOT_VALIDATION: The validation string to publish as TXT record
    - CHALLENGE_UPDATED_CAPABILITY: Capability URI to signal once the record is in sync
    - USERDATA, CHANGE_POLL_INTERVAL, NOTIFY_TIMEOUT, AWS_REGION: see config.py
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_FORMAT, LOG_FILE: see logging_config.py
    """

    try:
        for name in _LIBRARY_LOGGERS:
            configure_logger(logging.getLogger(name), logger)

        try:
            updater_config = load_config()
        except ConfigError as e:
            log_component_error(logger, "auth_hook", f"Invalid configuration: {e}")
            return 1

        updater = build_updater(updater_config)
        response = asyncio.run(updater.handle(build_message(os.environ)))

        if response is None:
            logger.info(f"Challenge for {os.environ.get('CERTBOT_DOMAIN')} published and acknowledged")
            return 0
        log_component_error(logger, "auth_hook", json.dumps(response))
        return 1

    except Exception as e:
        logger.exception(f"Error in auth hook: {e}")
        return 1


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
