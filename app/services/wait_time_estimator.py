"""Best-effort wait-time estimates from an LLM chat-completions endpoint."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.core.config import settings
from app.services.errors import EstimationError

logger = logging.getLogger(__name__)

DEFAULT_ESTIMATION: str = "Estimated wait time: 10-15 minutes"

PROMPT_TEMPLATE: str = """You are an AI assistant for a college canteen ordering system.
This is an INSTANT ORDER. Estimate how many minutes until the order will be ready.

Current situation:
- Number of active orders in queue: {active_orders}
- Number of items in this order: {item_count}
- Average preparation time per item: 3-5 minutes
- Canteen has 2 cooking stations

Provide a realistic time estimate in minutes. Format: "Your order will be ready in approximately X-Y minutes"
Keep response under 15 words."""


class WaitTimeEstimator:
    """Client for an OpenAI-compatible ``/chat/completions`` endpoint."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url if base_url is not None else settings.estimator_base_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.estimator_api_key
        self.model = model or settings.estimator_model
        self.timeout = timeout if timeout is not None else settings.estimator_timeout_seconds
        self._transport = transport

    def estimate(self, active_order_count: int, item_count: int) -> str:
        """Return a short free-text estimate or raise ``EstimationError``."""
        if not self.base_url or not self.api_key:
            raise EstimationError("Wait-time estimator is not configured")

        prompt = PROMPT_TEMPLATE.format(active_orders=active_order_count, item_count=item_count)
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(
                    f"{self.base_url}/chat/completions",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json={"model": self.model, "messages": [{"role": "user", "content": prompt}]},
                )
                response.raise_for_status()
                payload: dict[str, Any] = response.json()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise EstimationError(f"Estimator request failed: {exc}") from exc
        except ValueError as exc:
            raise EstimationError("Estimator returned invalid JSON") from exc
        except Exception as exc:
            raise EstimationError(f"Estimator request failed: {exc!r}") from exc

        try:
            content = payload["choices"][0]["message"].get("content")
        except (KeyError, IndexError, TypeError, AttributeError) as exc:
            raise EstimationError("Estimator response has no choices") from exc

        estimation = str(content or "").strip()
        return estimation or DEFAULT_ESTIMATION


def get_wait_time_estimator() -> WaitTimeEstimator:
    return WaitTimeEstimator()
