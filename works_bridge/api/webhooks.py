"""
Webhook endpoints for repository events.
"""

import hashlib
import hmac
import json
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from works_bridge.config import Settings
from works_bridge.models.action import ActionName, ActionRequest
from works_bridge.models.api_response import WebhookResponse
from works_bridge.models.event import EventContext, EventKind
from works_bridge.services.dispatcher import ActionDispatcher
from works_bridge.services.mcp_client import McpClient, McpClientError, create_mcp_client
from works_bridge.services.outputs import InMemoryOutputSink
from works_bridge.utils.logging import get_logger

logger = get_logger(__name__)

# Global settings instance for the receiver
settings = Settings()

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

SYNC_EVENTS = {EventKind.PUSH.value, EventKind.PULL_REQUEST.value}
SIGNATURE_PREFIX = "sha256="


def verify_webhook_signature(payload: bytes, signature: Optional[str], secret: str) -> bool:
    """
    Verify webhook signature for security.

    Args:
        payload: Raw request payload
        signature: ``sha256=<hex>`` value of the X-Hub-Signature-256 header
        secret: Shared webhook secret

    Returns:
        True if signature is valid, False otherwise
    """
    if not signature:
        return False

    expected_signature = SIGNATURE_PREFIX + hmac.new(
        secret.encode(),
        payload,
        hashlib.sha256
    ).hexdigest()

    # Constant-time comparison
    return hmac.compare_digest(signature, expected_signature)


async def get_mcp_client() -> AsyncIterator[McpClient]:
    """Provide a Works client with a fresh correlation counter per delivery."""
    async with create_mcp_client(settings) as client:
        yield client


@router.post("/github", response_model=WebhookResponse)
async def handle_github_webhook(
    request: Request,
    x_github_event: str = Header("", alias="X-GitHub-Event"),
    x_hub_signature: Optional[str] = Header(None, alias="X-Hub-Signature-256"),
    client: McpClient = Depends(get_mcp_client),
) -> WebhookResponse:
    """
    Receive a repository webhook and sync the referenced work item.

    This endpoint:
    1. Validates the webhook signature when a secret is configured
    2. Ignores events other than push and pull_request
    3. Runs the ``sync`` action for the delivered event
    4. Returns the resolved work ID and reported status

    Raises:
        HTTPException: 401 on a bad signature, 400 on a malformed payload,
            502 when the Works call fails
    """
    try:
        payload = await request.body()

        if settings.webhook_secret and not verify_webhook_signature(
            payload, x_hub_signature, settings.webhook_secret
        ):
            logger.warning("Invalid webhook signature received")
            raise HTTPException(status_code=401, detail="Invalid webhook signature")

        try:
            payload_json: Dict[str, Any] = json.loads(payload)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid webhook payload")

        if not isinstance(payload_json, dict):
            raise HTTPException(status_code=400, detail="Invalid webhook payload")

        if x_github_event not in SYNC_EVENTS:
            logger.info(f"Ignoring event type: {x_github_event or 'unknown'}")
            return WebhookResponse(
                status="ignored",
                message=f"Event type {x_github_event or 'unknown'} not processed"
            )

        event = EventContext(event_name=x_github_event, payload=payload_json)
        dispatcher = ActionDispatcher(client, InMemoryOutputSink())

        try:
            result = await dispatcher.run(ActionRequest(action=ActionName.SYNC.value), event)
        except McpClientError as e:
            logger.error(f"Works call failed for {x_github_event} event: {e}")
            raise HTTPException(status_code=502, detail=f"Action failed: {e}")

        if result.planned_call is None:
            return WebhookResponse(
                status="skipped",
                message=f"No work ID found in {x_github_event} event",
            )

        return WebhookResponse(
            status="synced",
            message=f"Work {result.work_id} synced from {x_github_event} event",
            work_id=result.work_id,
            work_status=result.outputs.status,
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error handling webhook: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error processing webhook")
