"""Push notification delivery over a webhook with retry logic."""

import asyncio
import logging
from typing import Any

import httpx

from pantry_tracker.core.config import constants, settings
from pantry_tracker.models.service_models import NotificationResult


logger = logging.getLogger(__name__)


# HTTP status code constants for error handling
HTTP_CLIENT_ERROR_START = 400
HTTP_CLIENT_ERROR_END = 500


def _extract_message_id(data: Any) -> str | None:  # noqa: ANN401
    """Extract a message ID from the webhook response, if it returned one."""
    if not isinstance(data, dict):
        return None
    raw_id = data.get("id")
    return str(raw_id) if raw_id is not None else None


async def _post_push(
    *,
    url: str,
    payload: dict[str, Any],
    max_retries: int,
    retry_delay: float,
) -> NotificationResult:
    """Core delivery logic with retry."""
    headers = {"Content-Type": "application/json"}
    if settings.push_api_key:
        headers["X-Api-Key"] = settings.push_api_key

    for attempt in range(max_retries):
        try:
            async with httpx.AsyncClient(timeout=constants.API_TIMEOUT_SECONDS) as client:
                response = await client.post(url, json=payload, headers=headers)

                if response.is_success:
                    try:
                        message_id = _extract_message_id(response.json())
                    except ValueError:
                        message_id = None
                    return NotificationResult(success=True, message_id=message_id)

                if HTTP_CLIENT_ERROR_START <= response.status_code < HTTP_CLIENT_ERROR_END:
                    return NotificationResult(success=False, error=f"Client error: {response.text}")

                raise httpx.HTTPStatusError(
                    f"Server error: {response.status_code}", request=response.request, response=response
                )
        except Exception as e:
            if attempt < max_retries - 1:
                await asyncio.sleep(retry_delay * (2**attempt))
            else:
                return NotificationResult(success=False, error=f"Failed after retries: {e!s}")

    return NotificationResult(success=False, error="Max retries exceeded")


async def send_push_notification(
    *,
    title: str,
    body: str,
    data: dict[str, Any] | None = None,
    max_retries: int = 3,
    retry_delay: float = 1.0,
) -> NotificationResult:
    """Deliver a notification to the configured push webhook.

    Without a webhook URL the notification is only logged.
    """
    if not settings.push_webhook_url:
        logger.info("Notification (no push webhook configured): %s - %s", title, body)
        return NotificationResult(success=True)

    payload = {"title": title, "body": body, "data": data or {}}
    result = await _post_push(
        url=settings.push_webhook_url,
        payload=payload,
        max_retries=max_retries,
        retry_delay=retry_delay,
    )

    if result.success:
        logger.info("Delivered notification: %s", title)
    else:
        logger.warning("Failed to deliver notification %s: %s", title, result.error)
    return result
