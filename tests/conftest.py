"""
Shared fixtures: a fake Works MCP endpoint and sample repository events.
"""

import json
from typing import Any, Dict, List, Optional

import httpx
import pytest

from works_bridge.models.event import EventContext
from works_bridge.services.mcp_client import McpClient


WORK_ID = "cmj2r7f3e0029f7m0cgak7ccr"
SERVER_URL = "https://works.test"


class FakeWorksServer:
    """Records JSON-RPC requests and replies with queued results."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.bodies: List[Dict[str, Any]] = []
        self.replies: List[Dict[str, Any]] = []
        self.status_code = 200

    def reply_result(self, result: Any) -> None:
        self.replies.append({"result": result})

    def reply_error(self, message: str, code: int = -32000) -> None:
        self.replies.append({"error": {"code": code, "message": message}})

    @property
    def tool_calls(self) -> List[tuple]:
        return [
            (body["params"]["name"], body["params"]["arguments"])
            for body in self.bodies
            if body.get("method") == "tools/call"
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(request)
        self.bodies.append(body)

        if self.status_code != 200:
            return httpx.Response(self.status_code, text="upstream failure")

        reply = self.replies.pop(0) if self.replies else {
            "result": {"content": [{"type": "text", "text": '{"ok": true}'}]}
        }
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], **reply})


@pytest.fixture
def works_server() -> FakeWorksServer:
    """Fake Works service."""
    return FakeWorksServer()


@pytest.fixture
async def http_client(works_server):
    """httpx client routed to the fake Works service."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(works_server.handler)) as client:
        yield client


@pytest.fixture
def mcp_client(http_client) -> McpClient:
    """Works client bound to the fake service."""
    return McpClient(SERVER_URL, api_key="test-key", http_client=http_client)


def push_event(*messages: str) -> EventContext:
    """Build a push event with one commit per message."""
    return EventContext(
        event_name="push",
        payload={
            "ref": "refs/heads/main",
            "commits": [
                {"id": f"sha{i}", "message": message, "url": f"https://github.test/c/{i}"}
                for i, message in enumerate(messages)
            ],
        },
    )


def pull_request_event(
    number: int = 42,
    title: str = "Add X",
    body: Optional[str] = None,
    merged: bool = False,
    html_url: str = "https://github.test/acme/repo/pull/42",
) -> EventContext:
    """Build a pull_request event."""
    return EventContext(
        event_name="pull_request",
        payload={
            "action": "closed" if merged else "opened",
            "number": number,
            "pull_request": {
                "number": number,
                "title": title,
                "body": body,
                "html_url": html_url,
                "merged": merged,
            },
        },
    )
