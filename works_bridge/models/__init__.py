"""Data models for the Works bridge."""

from .action import ActionName, ActionRequest
from .api_response import WebhookResponse
from .event import Commit, EventContext, EventKind, IssueInfo, PullRequestInfo
from .outputs import (
    OUTPUT_AGENTS_MD,
    OUTPUT_STATUS,
    OUTPUT_WORK_ID,
    ActionOutputs,
    WorkStatus,
)
from .rpc import (
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    OpaqueResult,
    StructuredContent,
    TextContent,
    ToolResult,
    decode_tool_result,
    first_text,
)

__all__ = [
    # Action models
    "ActionName",
    "ActionRequest",
    # Event models
    "EventKind",
    "EventContext",
    "Commit",
    "PullRequestInfo",
    "IssueInfo",
    # JSON-RPC models
    "JsonRpcRequest",
    "JsonRpcResponse",
    "JsonRpcError",
    "StructuredContent",
    "TextContent",
    "OpaqueResult",
    "ToolResult",
    "decode_tool_result",
    "first_text",
    # Output models
    "WorkStatus",
    "ActionOutputs",
    "OUTPUT_WORK_ID",
    "OUTPUT_STATUS",
    "OUTPUT_AGENTS_MD",
    # API response models
    "WebhookResponse",
]
