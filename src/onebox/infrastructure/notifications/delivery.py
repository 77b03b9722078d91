"""Shared JSON POST helper for notification sinks."""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from onebox.application.ports.notifier import DeliveryResult


def post_json(
    client: httpx.Client,
    url: str,
    payload: dict[str, Any],
    timeout: float,
    sink: str,
) -> DeliveryResult:
    try:
        response = client.post(url, json=payload, timeout=timeout)
    except httpx.TimeoutException:
        logger.error(f"{sink} timeout posting to {url}")
        return DeliveryResult(success=False, error="Request timeout")
    except httpx.HTTPError as e:
        logger.error(f"{sink} request failed: {e}")
        return DeliveryResult(success=False, error=str(e))

    if response.is_success:
        return DeliveryResult(success=True, status_code=response.status_code)

    error_text = response.text
    logger.error(f"{sink} error {response.status_code}: {error_text[:200]}")
    return DeliveryResult(
        success=False,
        status_code=response.status_code,
        error=f"HTTP {response.status_code}: {error_text[:200]}",
    )
