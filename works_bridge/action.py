"""
Actions runner entry point.

Reads inputs and the triggering event from the runner environment, runs one
dispatch, and writes outputs to ``GITHUB_OUTPUT``. Any failure is reported
as ``Action failed: <message>`` with exit status 1.
"""

import asyncio
import json
import os
from typing import Optional

import httpx

from works_bridge.config import Settings
from works_bridge.models.event import EventContext
from works_bridge.services.dispatcher import ActionDispatcher, DispatchResult
from works_bridge.services.mcp_client import create_mcp_client
from works_bridge.services.outputs import GitHubOutputSink, OutputSink, report_failure
from works_bridge.utils.logging import get_logger, log_error_with_context, setup_logging


logger = get_logger(__name__)


class InputError(Exception):
    """A required input is missing or the event payload is unreadable."""
    pass


def load_event(settings: Settings) -> EventContext:
    """
    Load the triggering event from the runner environment.

    Args:
        settings: Settings carrying GITHUB_EVENT_NAME and GITHUB_EVENT_PATH

    Returns:
        Event snapshot; the payload is empty when no event file exists
    """
    path = settings.github_event_path
    if not path or not os.path.exists(path):
        if path:
            logger.warning(f"GITHUB_EVENT_PATH {path} does not exist")
        return EventContext(event_name=settings.github_event_name)

    try:
        with open(path, encoding="utf-8") as fh:
            payload = json.load(fh)
    except (OSError, ValueError) as e:
        raise InputError(f"Unable to read event payload {path}: {e}") from e

    if not isinstance(payload, dict):
        raise InputError(f"Event payload {path} is not a JSON object")

    return EventContext(event_name=settings.github_event_name, payload=payload)


async def run_action(
    settings: Settings,
    http_client: Optional[httpx.AsyncClient] = None,
    outputs: Optional[OutputSink] = None,
) -> DispatchResult:
    """
    Execute one run of the action.

    Args:
        settings: Loaded settings
        http_client: Optional preconfigured httpx client for the Works call
        outputs: Output sink; defaults to the runner's GITHUB_OUTPUT file

    Returns:
        Result of the dispatch
    """
    if not settings.action:
        raise InputError("Input required and not supplied: action")

    request = settings.to_request()
    event = load_event(settings)
    sink = outputs or GitHubOutputSink(settings.github_output)

    async with create_mcp_client(settings, http_client=http_client) as client:
        dispatcher = ActionDispatcher(client, sink)
        return await dispatcher.run(request, event)


def main() -> int:
    """Run the action and return the process exit status."""
    settings: Optional[Settings] = None

    try:
        settings = Settings()
        setup_logging(settings.log_level)
        asyncio.run(run_action(settings))
    except Exception as e:
        log_error_with_context(
            logger,
            "Action failed",
            e,
            action=settings.action if settings else "",
            event_name=settings.github_event_name if settings else "",
        )
        report_failure(f"Action failed: {e}")
        return 1

    return 0
