from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from skillhub_mcp.agents import DetectedAgent, InstallTargets
from skillhub_mcp.dispatch import ToolDispatcher
from skillhub_mcp.tools import build_tools
from skillhub_mcp.tracking import (
    MAX_ARG_CHARS,
    UsageTracker,
    build_event,
    summarize_args,
    tracking_url,
)
from tests.conftest import FakeSkillHubClient


@pytest.mark.parametrize(
    ("api_url", "expected"),
    [
        ("https://skillhub.club/api/v1", "https://skillhub.club/api/v1/desktop/track"),
        ("https://skillhub.club/api/v1/", "https://skillhub.club/api/v1/desktop/track"),
        ("http://localhost:3000", "http://localhost:3000/api/v1/desktop/track"),
    ],
)
def test_tracking_url(api_url: str, expected: str) -> None:
    assert tracking_url(api_url) == expected


def test_build_event_shape() -> None:
    event = build_event(
        "browse_catalog",
        {"sort": "stars"},
        success=True,
        duration_ms=12,
        metadata={"category": None, "sort": "stars"},
    )
    assert event["event_type"] == "mcp.browse_catalog"
    assert event["source"] == "mcp_server"
    assert isinstance(event["timestamp"], int)
    assert event["event_data"] == {
        "tool": "browse_catalog",
        "args": {"sort": "stars"},
        "success": True,
        "duration_ms": 12,
        "category": None,
        "sort": "stars",
    }


def test_long_string_arguments_are_truncated() -> None:
    args = summarize_args({"context": "x" * 1000, "current_skills": ["y" * 500], "limit": 3})
    assert len(args["context"]) == MAX_ARG_CHARS
    assert len(args["current_skills"][0]) == MAX_ARG_CHARS
    assert args["limit"] == 3
    assert summarize_args("not a mapping") == {}


@pytest.mark.asyncio
async def test_fire_posts_event_in_background() -> None:
    received: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        received.append(json.loads(request.content))
        return httpx.Response(204)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        tracker = UsageTracker(http, "https://skillhub.test/api/v1/desktop/track")
        tracker.fire(build_event("search_skills", {"query": "pdf"}, True, 5))
        await tracker.drain()

    assert [e["event_type"] for e in received] == ["mcp.search_skills"]


@pytest.mark.asyncio
async def test_disabled_tracker_sends_nothing() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        tracker = UsageTracker(http, "https://skillhub.test/track", enabled=False)
        tracker.fire(build_event("search_skills", {}, True, 1))
        await tracker.drain()


@pytest.mark.asyncio
@pytest.mark.parametrize("failure", ["network", "status"])
async def test_delivery_failures_never_reach_the_caller(
    failure: str,
    fake_client: FakeSkillHubClient,
    targets: InstallTargets,
    detected: DetectedAgent,
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if failure == "network":
            raise httpx.ConnectError("unreachable", request=request)
        return httpx.Response(500)

    loop = asyncio.get_running_loop()
    unhandled: list[dict] = []
    loop.set_exception_handler(lambda _loop, context: unhandled.append(context))

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        tracker = UsageTracker(http, "https://skillhub.test/track")
        specs, _ = build_tools(fake_client, targets, detected)
        dispatcher = ToolDispatcher(specs, tracker)

        ok = await dispatcher.dispatch("search_skills", {"query": "pdf"})
        failed = await dispatcher.dispatch("nope", {})
        await tracker.drain()

    assert not ok.is_error
    assert failed.text == "Error: Unknown tool: nope"
    assert unhandled == []
