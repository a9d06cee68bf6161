"""Business logic services package."""

from works_bridge.services.dispatcher import (
    ActionDispatcher,
    DispatchError,
    DispatchResult,
    MissingIdentifierError,
    PlannedCall,
    UnknownActionError,
    plan_call,
)
from works_bridge.services.event_classifier import (
    PullRequestView,
    PushView,
    classify_event,
)
from works_bridge.services.mcp_client import (
    McpClient,
    McpClientError,
    RemoteError,
    TransportError,
    create_mcp_client,
)
from works_bridge.services.outputs import (
    GitHubOutputSink,
    InMemoryOutputSink,
    OutputSink,
    report_failure,
)
from works_bridge.services.work_id import extract_work_id, find_work_id

__all__ = [
    'ActionDispatcher',
    'DispatchError',
    'DispatchResult',
    'MissingIdentifierError',
    'PlannedCall',
    'UnknownActionError',
    'plan_call',
    'PullRequestView',
    'PushView',
    'classify_event',
    'McpClient',
    'McpClientError',
    'RemoteError',
    'TransportError',
    'create_mcp_client',
    'GitHubOutputSink',
    'InMemoryOutputSink',
    'OutputSink',
    'report_failure',
    'extract_work_id',
    'find_work_id',
]
