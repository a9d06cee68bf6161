"""
Action dispatcher.

Maps (requested action, event view, resolved work ID) to at most one call
against the Works service, then emits the run outputs.

A run moves through three stages:

1. identifier resolution - explicit ``work-id`` input, else the first ID
   found in the event's commit messages or PR title/body
2. dispatch - a pure planning step (``plan_call``) followed by the single
   remote invocation, if one was planned
3. output - ``work-id`` always, ``status`` and ``agents-md`` on the
   branches that define them
"""

import re
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, Field

from works_bridge.models.action import ActionName, ActionRequest
from works_bridge.models.event import EventContext
from works_bridge.models.outputs import (
    OUTPUT_AGENTS_MD,
    OUTPUT_STATUS,
    OUTPUT_WORK_ID,
    ActionOutputs,
    WorkStatus,
)
from works_bridge.models.rpc import first_text
from works_bridge.services.event_classifier import (
    EventView,
    PullRequestView,
    PushView,
    classify_event,
)
from works_bridge.services.mcp_client import TOOLS_CALL, McpClient
from works_bridge.services.outputs import OutputSink
from works_bridge.services.work_id import find_work_id
from works_bridge.utils.logging import get_logger, log_dispatch, log_event_received


logger = get_logger(__name__)

MARK_COMPLETE = "mark_complete"
REPORT_PROGRESS = "report_progress"
GET_WORK_CONTEXT = "get_work_context"

DEFAULT_PROGRESS = 50
PR_OPEN_PROGRESS = 75
PUSH_PROGRESS = 50
DEFAULT_COMPLETE_SUMMARY = "Completed via GitHub Action"
DEFAULT_PROGRESS_MESSAGE = "Progress update from CI"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class DispatchError(Exception):
    """Base exception for dispatch failures."""
    pass


class MissingIdentifierError(DispatchError):
    """No work ID was supplied or detected for an action that needs one."""

    def __init__(self, action: str):
        super().__init__("No work ID provided or detected")
        self.action = action


class UnknownActionError(DispatchError):
    """The requested action is not one the bridge supports."""

    def __init__(self, action: str):
        super().__init__(f"Unknown action: {action}")
        self.action = action


class CallKind(str, Enum):
    """How a planned call's result is read."""

    TOOL = "tool"  # unwrapped via call_tool
    CONTEXT = "context"  # raw result, first text entry


class PlannedCall(BaseModel):
    """The single remote operation a run will perform."""

    kind: CallKind = CallKind.TOOL
    tool: str
    arguments: Dict[str, Any]
    status: Optional[WorkStatus] = None

    def params(self) -> Dict[str, Any]:
        return {"name": self.tool, "arguments": self.arguments}


class ResolvedContext(BaseModel):
    """Everything planning needs, after identifier resolution."""

    request: ActionRequest
    event: EventContext
    view: Optional[EventView] = None
    work_id: str = ""


class DispatchResult(BaseModel):
    """Outcome of a completed run."""

    work_id: str = ""
    planned_call: Optional[PlannedCall] = None
    call_result: Any = None
    outputs: ActionOutputs = Field(default_factory=ActionOutputs)


def parse_files(files: Optional[str]) -> List[str]:
    """Split a comma-separated path list, trimming and dropping blanks."""
    if not files:
        return []
    return [path.strip() for path in files.split(",") if path.strip()]


def parse_progress(progress: Optional[str]) -> int:
    """
    Parse the progress input as a leading integer.

    Trailing text is ignored (``"30%"`` is 30). Absent or non-numeric input
    falls back to DEFAULT_PROGRESS.
    """
    if progress is None or not progress.strip():
        return DEFAULT_PROGRESS
    match = _LEADING_INT.match(progress)
    if match is None:
        logger.warning(
            f"Invalid progress value {progress!r}, using {DEFAULT_PROGRESS}",
            extra={"progress_input": progress},
        )
        return DEFAULT_PROGRESS
    return int(match.group(1))


def resolve_work_id(request: ActionRequest, view: Optional[EventView]) -> str:
    """
    Resolve the work ID for a run.

    Args:
        request: Action request, possibly carrying an explicit work ID
        view: Classified event view

    Returns:
        The work ID, or an empty string when none was found
    """
    if request.work_id:
        return request.work_id

    if view is None:
        return ""

    work_id = find_work_id(view.candidate_texts())
    if not work_id:
        return ""

    source = "commit" if isinstance(view, PushView) else "PR"
    logger.info(f"Detected work ID from {source}: {work_id}", extra={"work_id": work_id})
    return work_id


def _plan_sync(context: ResolvedContext) -> Optional[PlannedCall]:
    view = context.view
    work_id = context.work_id
    if not work_id:
        return None

    if isinstance(view, PullRequestView):
        if view.merged:
            arguments: Dict[str, Any] = {
                "workId": work_id,
                "summary": f"Merged PR #{view.number}: {view.title}",
                "files": parse_files(context.request.files),
            }
            if view.html_url is not None:
                arguments["pullRequestUrl"] = view.html_url
            return PlannedCall(tool=MARK_COMPLETE, arguments=arguments, status=WorkStatus.COMPLETED)

        return PlannedCall(
            tool=REPORT_PROGRESS,
            arguments={
                "workId": work_id,
                "progress": PR_OPEN_PROGRESS,
                "message": f"PR #{view.number} opened: {view.title}",
            },
            status=WorkStatus.IN_PROGRESS,
        )

    if isinstance(view, PushView):
        return PlannedCall(
            tool=REPORT_PROGRESS,
            arguments={
                "workId": work_id,
                "progress": PUSH_PROGRESS,
                "message": f"{view.commit_count} commit(s) pushed",
            },
            status=WorkStatus.IN_PROGRESS,
        )

    return None


def _plan_complete(context: ResolvedContext) -> Optional[PlannedCall]:
    request = context.request
    arguments: Dict[str, Any] = {
        "workId": context.work_id,
        "summary": request.summary or DEFAULT_COMPLETE_SUMMARY,
    }

    files = parse_files(request.files)
    if files:
        arguments["files"] = files

    if isinstance(context.view, PullRequestView) and context.view.html_url is not None:
        arguments["pullRequestUrl"] = context.view.html_url

    return PlannedCall(tool=MARK_COMPLETE, arguments=arguments, status=WorkStatus.COMPLETED)


def _plan_progress(context: ResolvedContext) -> Optional[PlannedCall]:
    request = context.request
    return PlannedCall(
        tool=REPORT_PROGRESS,
        arguments={
            "workId": context.work_id,
            "progress": parse_progress(request.progress),
            "message": request.summary or DEFAULT_PROGRESS_MESSAGE,
        },
        status=WorkStatus.IN_PROGRESS,
    )


def _plan_init(context: ResolvedContext) -> Optional[PlannedCall]:
    return PlannedCall(
        kind=CallKind.CONTEXT,
        tool=GET_WORK_CONTEXT,
        arguments={"workId": context.work_id},
    )


_PLANNERS: Dict[ActionName, Callable[[ResolvedContext], Optional[PlannedCall]]] = {
    ActionName.SYNC: _plan_sync,
    ActionName.COMPLETE: _plan_complete,
    ActionName.PROGRESS: _plan_progress,
    ActionName.INIT: _plan_init,
}


def plan_call(action: ActionName, context: ResolvedContext) -> Optional[PlannedCall]:
    """
    Select the remote operation for an action.

    Performs no I/O; an unparseable progress input only logs a warning.

    Args:
        action: Validated action name
        context: Resolved run context

    Returns:
        The planned call, or None when the action has nothing to do
    """
    return _PLANNERS[action](context)


class ActionDispatcher:
    """Runs one action request against the Works service."""

    def __init__(self, client: McpClient, outputs: OutputSink):
        """
        Initialize the dispatcher.

        Args:
            client: Works MCP client used for the single remote call
            outputs: Sink receiving the run outputs
        """
        self.client = client
        self.outputs = outputs

    async def run(self, request: ActionRequest, event: EventContext) -> DispatchResult:
        """
        Resolve, dispatch and emit outputs for one run.

        Args:
            request: Requested action and inputs
            event: Triggering event snapshot

        Returns:
            DispatchResult describing the call made and the outputs emitted

        Raises:
            MissingIdentifierError: No work ID for an action other than sync
            UnknownActionError: Unsupported action name
            McpClientError: The remote call failed
        """
        log_event_received(logger, event.event_name, request.action)

        view = classify_event(event)
        work_id = resolve_work_id(request, view)

        if not work_id and request.action != ActionName.SYNC.value:
            raise MissingIdentifierError(request.action)

        try:
            action = ActionName(request.action)
        except ValueError:
            raise UnknownActionError(request.action) from None

        result = DispatchResult(work_id=work_id)
        self._emit_work_id(result, work_id)

        context = ResolvedContext(request=request, event=event, view=view, work_id=work_id)
        planned = plan_call(action, context)
        result.planned_call = planned

        if planned is None:
            logger.info(
                f"No work update for {event.event_name or 'unknown'} event",
                extra={"action": action.value, "event_name": event.event_name},
            )
            return result

        log_dispatch(
            logger,
            work_id=work_id,
            action=action.value,
            tool=planned.tool,
            status=planned.status.value if planned.status else None,
        )

        if planned.kind is CallKind.CONTEXT:
            raw = await self.client.invoke(TOOLS_CALL, planned.params())
            result.call_result = raw
            agents_md = first_text(raw) or ""
            self.outputs.set_output(OUTPUT_AGENTS_MD, agents_md)
            result.outputs.agents_md = agents_md
            logger.info(f"Retrieved AGENTS.md for work {work_id}", extra={"work_id": work_id})
        else:
            result.call_result = await self.client.call_tool(planned.tool, planned.arguments)

        if planned.status is not None:
            self.outputs.set_output(OUTPUT_STATUS, planned.status.value)
            result.outputs.status = planned.status
            logger.info(
                f"Work {work_id} is now {planned.status.value}",
                extra={"work_id": work_id, "action": action.value},
            )

        return result

    def _emit_work_id(self, result: DispatchResult, work_id: str) -> None:
        self.outputs.set_output(OUTPUT_WORK_ID, work_id)
        result.outputs.work_id = work_id
