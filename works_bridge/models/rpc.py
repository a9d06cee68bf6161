"""JSON-RPC envelope and tool result data models."""

import json
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel


JSONRPC_VERSION = "2.0"


class JsonRpcRequest(BaseModel):
    """Outbound JSON-RPC 2.0 request."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: int
    method: str
    params: Optional[Dict[str, Any]] = None


class JsonRpcError(BaseModel):
    """Error object returned by the remote service."""

    code: Optional[int] = None
    message: str = ""
    data: Any = None


class JsonRpcResponse(BaseModel):
    """Inbound JSON-RPC 2.0 response."""

    jsonrpc: Optional[str] = None
    id: Optional[Union[int, str]] = None
    result: Any = None
    error: Optional[JsonRpcError] = None


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not valid JSON
    raise ValueError(f"Invalid JSON constant: {name}")


class StructuredContent(BaseModel):
    """Tool result carrying a ``structuredContent`` payload."""

    kind: Literal["structured"] = "structured"
    data: Any

    def value(self) -> Any:
        return self.data


class TextContent(BaseModel):
    """Tool result whose first content entry is text."""

    kind: Literal["text"] = "text"
    text: str

    def value(self) -> Any:
        """Return the text parsed as JSON, or wrapped as ``{"text": ...}``."""
        try:
            return json.loads(self.text, parse_constant=_reject_constant)
        except ValueError:
            return {"text": self.text}


class OpaqueResult(BaseModel):
    """Tool result with no recognised content; passed through unchanged."""

    kind: Literal["opaque"] = "opaque"
    raw: Any = None

    def value(self) -> Any:
        return self.raw


ToolResult = Union[StructuredContent, TextContent, OpaqueResult]


def _is_present(value: Any) -> bool:
    # Empty containers still count as present
    if isinstance(value, (dict, list)):
        return True
    return bool(value)


def first_text(result: Any) -> Optional[str]:
    """
    Return the text of the first content entry of a raw tool result.

    Args:
        result: Raw ``result`` member of a JSON-RPC response

    Returns:
        The first entry's non-empty text, or None
    """
    if not isinstance(result, dict):
        return None
    content = result.get("content")
    if not isinstance(content, list) or not content:
        return None
    entry = content[0]
    if not isinstance(entry, dict):
        return None
    text = entry.get("text")
    if isinstance(text, str) and text:
        return text
    return None


def decode_tool_result(result: Any) -> ToolResult:
    """
    Classify a raw tool result, trying each tier in order.

    1. ``structuredContent`` when present
    2. the first textual content entry
    3. the raw result as-is

    Args:
        result: Raw ``result`` member of a JSON-RPC response

    Returns:
        The matching tagged variant
    """
    if isinstance(result, dict) and _is_present(result.get("structuredContent")):
        return StructuredContent(data=result["structuredContent"])

    text = first_text(result)
    if text is not None:
        return TextContent(text=text)

    return OpaqueResult(raw=result)
