"""
Works MCP client.

Sends JSON-RPC 2.0 requests to the Works service at ``<server-url>/api/mcp``
and unwraps tool results. Each call is made exactly once; failures surface
as TransportError (non-2xx status) or RemoteError (error object in body).
"""

import time
from typing import Any, Dict, Optional

import httpx

from works_bridge.models.rpc import (
    JsonRpcRequest,
    JsonRpcResponse,
    ToolResult,
    decode_tool_result,
)
from works_bridge.utils.logging import get_logger, log_api_call


logger = get_logger(__name__)

MCP_PATH = "/api/mcp"
TOOLS_CALL = "tools/call"
API_KEY_HEADER = "X-API-Key"


class McpClientError(Exception):
    """Base exception for Works MCP client errors."""
    pass


class TransportError(McpClientError):
    """HTTP-level failure talking to the Works service."""

    def __init__(self, status_code: int):
        super().__init__(f"HTTP error: {status_code}")
        self.status_code = status_code


class RemoteError(McpClientError):
    """Error object returned by the Works service."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class McpClient:
    """
    JSON-RPC client for the Works MCP endpoint.

    The correlation id counter belongs to the instance: it starts at
    ``start_id`` and is incremented before every request, so the first
    request of a fresh client carries id 1.
    """

    def __init__(
        self,
        server_url: str,
        api_key: str = "",
        http_client: Optional[httpx.AsyncClient] = None,
        start_id: int = 0,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the client.

        Args:
            server_url: Base URL of the Works service
            api_key: Credential sent as X-API-Key; empty means unauthenticated
            http_client: Optional preconfigured httpx client (not closed by us)
            start_id: Initial value of the correlation id counter
            timeout: Request timeout in seconds; httpx default when None
        """
        self.server_url = server_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._request_id = start_id
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def endpoint(self) -> str:
        return f"{self.server_url}{MCP_PATH}"

    @property
    def last_request_id(self) -> int:
        return self._request_id

    async def __aenter__(self) -> "McpClient":
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            kwargs: Dict[str, Any] = {}
            if self.timeout is not None:
                kwargs["timeout"] = self.timeout
            self._http_client = httpx.AsyncClient(**kwargs)
            self._owns_client = True
        return self._http_client

    def _next_request_id(self) -> int:
        self._request_id += 1
        return self._request_id

    def _build_headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers[API_KEY_HEADER] = self.api_key
        return headers

    async def invoke(self, method: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Send one JSON-RPC request and return its ``result`` unprocessed.

        Args:
            method: JSON-RPC method name
            params: Parameter object

        Returns:
            The response's ``result`` member

        Raises:
            TransportError: If the HTTP status is not 2xx
            RemoteError: If the response carries an error object
        """
        request = JsonRpcRequest(id=self._next_request_id(), method=method, params=params)
        client = self._ensure_client()

        start_time = time.time()
        response = await client.post(
            self.endpoint,
            json=request.model_dump(exclude_none=True),
            headers=self._build_headers(),
        )
        duration_ms = (time.time() - start_time) * 1000

        if not response.is_success:
            error = TransportError(response.status_code)
            log_api_call(
                logger,
                service="works",
                endpoint=self.endpoint,
                method=method,
                status_code=response.status_code,
                duration_ms=duration_ms,
                error=str(error),
            )
            raise error

        log_api_call(
            logger,
            service="works",
            endpoint=self.endpoint,
            method=method,
            status_code=response.status_code,
            duration_ms=duration_ms,
        )

        body = JsonRpcResponse.model_validate(response.json())
        if body.error is not None:
            logger.error(
                f"Works returned error for request {request.id}: {body.error.message}",
                extra={"request_id": request.id, "error_code": body.error.code},
            )
            raise RemoteError(body.error.message, body.error.code)

        return body.result

    async def call_tool_result(self, name: str, arguments: Dict[str, Any]) -> ToolResult:
        """Invoke a tool and return its decoded result variant."""
        result = await self.invoke(TOOLS_CALL, {"name": name, "arguments": arguments})
        decoded = decode_tool_result(result)
        logger.debug(f"Tool {name} returned {decoded.kind} content")
        return decoded

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> Any:
        """
        Invoke a tool and return its unwrapped value.

        Structured content is preferred, then the first text entry parsed as
        JSON (or wrapped as ``{"text": ...}``), then the raw result.
        """
        decoded = await self.call_tool_result(name, arguments)
        return decoded.value()


def create_mcp_client(settings: Any, http_client: Optional[httpx.AsyncClient] = None) -> McpClient:
    """
    Build a client from bridge settings.

    Args:
        settings: Settings carrying server_url, api_key and works_timeout
        http_client: Optional preconfigured httpx client

    Returns:
        A new McpClient with a fresh correlation counter
    """
    return McpClient(
        server_url=settings.server_url,
        api_key=settings.api_key,
        http_client=http_client,
        timeout=settings.works_timeout,
    )
