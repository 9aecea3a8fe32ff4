#!/usr/bin/env python3
"""
ACME DNS-01 challenge fulfillment workflow.

A run moves through the stages below, one handler per stage, until it reaches
DONE or FAILED::

    START -> RESOLVING_ZONE -> PUBLISHING -> WAITING -> NOTIFYING -> DONE

RESOLVING_ZONE repeats once per page of the zone listing and WAITING once per
change-status poll. Any provider or transport failure ends the run with a
generic 503 response.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from config import DEFAULT_POLL_INTERVAL
from errors import DependencyError, NotFoundError, ValidationError, service_unavailable
from logging_config import log_component_error, log_dns_operation
from request_schema import ChallengeRequest, parse_challenge_request
from route53_client import CHALLENGE_RECORD_TTL, STATUS_INSYNC
from zone_matching import ZoneDescriptor, matching_zones, select_most_specific

logger = logging.getLogger(__name__)

CHALLENGE_RECORD_PREFIX = "_acme-challenge"


class Stage(Enum):
    """Workflow stages"""

    START = "start"
    RESOLVING_ZONE = "resolving_zone"
    PUBLISHING = "publishing"
    WAITING = "waiting"
    NOTIFYING = "notifying"
    DONE = "done"
    FAILED = "failed"


TERMINAL_STAGES = frozenset({Stage.DONE, Stage.FAILED})


@dataclass
class WorkflowState:
    """Progress of a single run. Owned by the run; never shared."""

    request: ChallengeRequest
    stage: Stage = Stage.START
    zones: list[ZoneDescriptor] = field(default_factory=list)
    next_page_token: str | None = None
    resolved_zone_id: str | None = None
    change_id: str | None = None
    last_status: str | None = None


def challenge_record_name(domain: str) -> str:
    """Return the fully-qualified TXT record name for a domain's challenge."""
    return f"{CHALLENGE_RECORD_PREFIX}.{domain.rstrip('.')}."


class ChallengeUpdater:
    """Runs the challenge workflow against injected DNS and notification clients."""

    def __init__(
        self,
        dns_client: Any,
        notifier: Any,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Args:
            dns_client: Object with list_zones, upsert_txt_record and get_change_status
            notifier: Object with notify(target)
            poll_interval: Seconds between change-status polls
            sleep: Coroutine function used to wait between polls
        """
        self.dns_client = dns_client
        self.notifier = notifier
        self.poll_interval = poll_interval
        self._sleep = sleep
        self._handlers: dict[Stage, Callable[[WorkflowState], Awaitable[Stage]]] = {
            Stage.START: self._start,
            Stage.RESOLVING_ZONE: self._resolve_zone,
            Stage.PUBLISHING: self._publish_record,
            Stage.WAITING: self._wait_for_sync,
            Stage.NOTIFYING: self._notify,
        }

    async def handle(self, message: Any, abort: bool = False) -> dict[str, Any] | None:
        """
        Validate a request message and run the workflow for it.

        Args:
            message: Request mapping with capabilities, challenge and domain
            abort: Caller-requested abort; answers 503 before any stage runs

        Returns:
            None on success, otherwise an error response dict
        """
        if abort:
            logger.warning("Workflow aborted by caller before start")
            return service_unavailable()
        try:
            request = parse_challenge_request(message)
        except ValidationError as e:
            log_component_error(logger, "request", str(e))
            return e.to_response()
        return await self.run(request)

    async def run(self, request: ChallengeRequest) -> dict[str, Any] | None:
        """Drive one validated request through every stage until it terminates."""
        state = WorkflowState(request=request)
        try:
            while state.stage not in TERMINAL_STAGES:
                handler = self._handlers[state.stage]
                next_stage = await handler(state)
                if next_stage is not state.stage:
                    logger.debug(f"{request.domain}: {state.stage.value} -> {next_stage.value}")
                state.stage = next_stage
        except NotFoundError as e:
            log_component_error(logger, state.stage.value, str(e))
            state.stage = Stage.FAILED
            return e.to_response()
        except DependencyError as e:
            log_component_error(logger, state.stage.value, f"{e} (cause: {e.__cause__!r})")
            state.stage = Stage.FAILED
            return e.to_response()
        except Exception:
            logger.exception(f"Unexpected error while {state.stage.value} for {request.domain}")
            state.stage = Stage.FAILED
            return service_unavailable()

        log_dns_operation(logger, "challenge", request.domain, "completed")
        return None

    async def _start(self, state: WorkflowState) -> Stage:
        log_dns_operation(logger, "challenge start", state.request.domain, "resolving hosted zone")
        return Stage.RESOLVING_ZONE

    async def _resolve_zone(self, state: WorkflowState) -> Stage:
        domain = state.request.domain
        page = await asyncio.to_thread(self.dns_client.list_zones, state.next_page_token)
        state.zones.extend(matching_zones(domain, page.zones))
        if page.truncated:
            state.next_page_token = page.next_token
            return Stage.RESOLVING_ZONE

        state.next_page_token = None
        zone = select_most_specific(state.zones)
        if zone is None:
            raise NotFoundError(domain)
        state.resolved_zone_id = zone.id
        log_dns_operation(logger, "zone lookup", domain, f"using hosted zone {zone.name} ({zone.id})")
        return Stage.PUBLISHING

    async def _publish_record(self, state: WorkflowState) -> Stage:
        if state.resolved_zone_id is None:
            raise RuntimeError("publishing before a hosted zone was resolved")
        name = challenge_record_name(state.request.domain)
        # Not logging the challenge value
        state.change_id = await asyncio.to_thread(
            self.dns_client.upsert_txt_record,
            state.resolved_zone_id,
            name,
            state.request.challenge,
            CHALLENGE_RECORD_TTL,
        )
        log_dns_operation(logger, "record upsert", state.request.domain, f"{name} submitted ({state.change_id})")
        return Stage.WAITING

    async def _wait_for_sync(self, state: WorkflowState) -> Stage:
        if state.change_id is None:
            raise RuntimeError("waiting before a change was submitted")
        state.last_status = await asyncio.to_thread(self.dns_client.get_change_status, state.change_id)
        if state.last_status != STATUS_INSYNC:
            logger.debug(f"Change {state.change_id} is {state.last_status}, checking again in {self.poll_interval}s")
            await self._sleep(self.poll_interval)
            return Stage.WAITING
        log_dns_operation(logger, "propagation", state.request.domain, "change is in sync")
        return Stage.NOTIFYING

    async def _notify(self, state: WorkflowState) -> Stage:
        await asyncio.to_thread(self.notifier.notify, state.request.notify_target)
        log_dns_operation(
            logger, "notification", state.request.domain, f"delivered to {state.request.notify_target.authority}"
        )
        return Stage.DONE
