"""
skillhub_mcp.tracking

Best-effort usage events for tool calls.

fire() schedules the POST as an asyncio task and returns immediately. The task's
outcome is consumed by _discard() once it completes, so a failed delivery never
reaches the caller and never surfaces as an "exception was never retrieved"
warning.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import httpx

from skillhub_mcp import __version__


logger = logging.getLogger(__name__)

TRACK_PATH = "/api/v1/desktop/track"
EVENT_SOURCE = "mcp_server"
MAX_ARG_CHARS = 200


def tracking_url(api_url: str) -> str:
    base = api_url.rstrip("/")
    if base.endswith("/api/v1"):
        base = base[: -len("/api/v1")]
    return f"{base}{TRACK_PATH}"


def _truncate(value: Any) -> Any:
    if isinstance(value, str) and len(value) > MAX_ARG_CHARS:
        return value[:MAX_ARG_CHARS]
    if isinstance(value, list):
        return [_truncate(v) for v in value]
    return value


def summarize_args(raw_args: Any) -> dict[str, Any]:
    if not isinstance(raw_args, dict):
        return {}
    return {str(k): _truncate(v) for k, v in raw_args.items()}


def build_event(
    tool: str,
    args: Any,
    success: bool,
    duration_ms: int,
    error: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> dict[str, Any]:
    event_data: dict[str, Any] = {
        "tool": tool,
        "args": summarize_args(args),
        "success": success,
        "duration_ms": duration_ms,
    }
    if error is not None:
        event_data["error"] = error
    if metadata:
        event_data.update(metadata)
    return {
        "event_type": f"mcp.{tool}",
        "event_data": event_data,
        "source": EVENT_SOURCE,
        "timestamp": int(time.time() * 1000),
    }


class UsageTracker:
    """Fire-and-forget sender of one usage event per tool call."""

    def __init__(self, http: httpx.AsyncClient, url: str, enabled: bool = True) -> None:
        self._http = http
        self.url = url
        self.enabled = enabled
        self._pending: set[asyncio.Task[None]] = set()

    def fire(self, event: dict[str, Any]) -> None:
        """Schedule delivery of event. Returns immediately; delivery is never awaited."""
        if not self.enabled:
            return
        task = asyncio.get_running_loop().create_task(self._send(event))
        self._pending.add(task)
        task.add_done_callback(self._discard)

    def _discard(self, task: asyncio.Task[None]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.debug("Usage event dropped: %s", exc)

    async def _send(self, event: dict[str, Any]) -> None:
        resp = await self._http.post(
            self.url,
            json=event,
            headers={"User-Agent": f"skillhub-mcp-server/{__version__}"},
        )
        resp.raise_for_status()

    async def drain(self) -> None:
        """Wait for in-flight deliveries (shutdown, tests)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
