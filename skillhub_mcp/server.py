"""
skillhub_mcp.server

FastMCP stdio server exposing the SkillHub skill catalog as MCP tools and resources.

Server-level documentation:
- Purpose: Let MCP-aware agents discover, evaluate and install SkillHub skills.
- Tools:
  * search_skills: semantic search over the catalog
  * get_skill_detail: evaluation, pros/cons and optionally the raw SKILL.md
  * install_skill: preview first, then confirm=true writes <agent-root>/<slug>/SKILL.md
  * browse_catalog: filtered, sorted, paginated catalog listing
  * recommend_skills: recommendations for a description of the current task
- Resources: skillhub://categories, skillhub://popular, skillhub://recent
- Transport: STDIO by default (ideal for clients that spawn the server process)
- Safety: installs only ever write below ~/.<agent>/skills and only after confirmation
- Logging: Console (stderr) + rotating file logs
- Tracking: one best-effort usage event per tool call

Environment (optional): see skillhub_mcp.config.

Usage:
- As a script:
  python -m skillhub_mcp.server              # starts stdio server
  python -m skillhub_mcp.server --help       # CLI for inspection without starting server

- As a module within MCP client config (stdio):
  command: python
  args: ["-m", "skillhub_mcp"]
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.tools import Tool
from fastmcp.tools.tool import ToolResult
from mcp.types import TextContent
from pydantic import ConfigDict, Field

from skillhub_mcp import __version__
from skillhub_mcp.client import SkillHubClient
from skillhub_mcp.config import Settings
from skillhub_mcp.dispatch import TextResult, ToolDispatcher, ToolSpec
from skillhub_mcp.errors import SkillHubMCPError
from skillhub_mcp.tools import ResourceCatalog, ResourceSpec, build_tools
from skillhub_mcp.tracking import UsageTracker, tracking_url


SERVER_NAME = "skillhub"
LOGGER_NAME = "skillhub_mcp"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

INSTRUCTIONS = (
    "SkillHub MCP Server\n"
    "\n"
    "Purpose:\n"
    "- Search, inspect and install Claude Code / Codex / Gemini / OpenCode skills from SkillHub.\n"
    "\n"
    "Workflow:\n"
    "- Use search_skills or recommend_skills to find candidates, get_skill_detail to evaluate one.\n"
    "- install_skill without confirm shows what would be written; show it to the user.\n"
    "- Only call install_skill with confirm=true after the user agreed.\n"
    "\n"
    "Resources:\n"
    "- skillhub://categories, skillhub://popular, skillhub://recent (markdown)\n"
)


# --- Logging setup ---
def configure_logging(log_file: Path | None = None) -> logging.Logger:
    """
    function_purpose: Configure package logging to stderr and, when possible, a rotating file.

    - stdout is reserved for the MCP protocol, so the console handler writes to stderr.
    - Safe to call more than once; handlers are only attached the first time.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.INFO)
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT)

    sh = logging.StreamHandler()
    sh.setLevel(logging.INFO)
    sh.setFormatter(formatter)
    logger.addHandler(sh)

    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            # Rotating file handler (5 files, 5MB each)
            fh = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=5)
        except OSError as exc:
            logger.warning("File logging disabled (%s): %s", log_file, exc)
        else:
            fh.setLevel(logging.INFO)
            fh.setFormatter(formatter)
            logger.addHandler(fh)
            logger.info("Logging initialized. File: %s", str(log_file))
    return logger


# --- FastMCP adapters ---
class DispatchedTool(Tool):
    """A FastMCP tool whose calls go through ToolDispatcher instead of a bound function."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    dispatcher: ToolDispatcher = Field(exclude=True)

    @classmethod
    def from_spec(cls, spec: ToolSpec, dispatcher: ToolDispatcher) -> DispatchedTool:
        return cls(
            name=spec.name,
            description=spec.description,
            parameters=spec.input_schema(),
            dispatcher=dispatcher,
        )

    async def run(self, arguments: dict[str, Any]) -> ToolResult:
        result = await self.dispatcher.dispatch(self.name, arguments)
        if result.is_error:
            raise ToolError(result.text)
        return ToolResult(content=[TextContent(type="text", text=result.text)])


def _resource_reader(
    resources: ResourceCatalog, uri: str
) -> Callable[[], Awaitable[str]]:
    async def read() -> str:
        return await resources.read(uri)

    read.__name__ = uri.split("://", 1)[-1]
    return read


def _register_resource(mcp: FastMCP, resources: ResourceCatalog, spec: ResourceSpec) -> None:
    mcp.resource(
        spec.uri,
        name=spec.name,
        description=spec.description,
        mime_type=spec.mime_type,
    )(_resource_reader(resources, spec.uri))


@dataclass
class SkillHubServer:
    """Everything wired together for one process."""

    settings: Settings
    client: SkillHubClient
    tracker: UsageTracker
    dispatcher: ToolDispatcher
    resources: ResourceCatalog
    mcp: FastMCP

    async def call(self, name: str, arguments: dict[str, Any] | None = None) -> TextResult:
        return await self.dispatcher.dispatch(name, arguments or {})

    async def aclose(self) -> None:
        await self.tracker.drain()
        await self.client.aclose()


def build_server(settings: Settings, client: SkillHubClient | None = None) -> SkillHubServer:
    """
    function_purpose: Assemble client, tracker, dispatcher and the FastMCP server.

    A pre-built client can be passed in (tests hand in one backed by a MockTransport).
    """
    if client is None:
        client = SkillHubClient(
            settings.api_url, api_key=settings.api_key, timeout=settings.http_timeout
        )
    tracker = UsageTracker(
        client.http, tracking_url(settings.api_url), enabled=settings.tracking_enabled
    )
    specs, resources = build_tools(client, settings.targets, settings.detected)
    dispatcher = ToolDispatcher(specs, tracker)

    mcp = FastMCP(SERVER_NAME, instructions=INSTRUCTIONS)
    for spec in dispatcher.tools:
        mcp.add_tool(DispatchedTool.from_spec(spec, dispatcher))
    for resource in resources.resources:
        _register_resource(mcp, resources, resource)

    return SkillHubServer(
        settings=settings,
        client=client,
        tracker=tracker,
        dispatcher=dispatcher,
        resources=resources,
        mcp=mcp,
    )


# --- Entry points ---
async def serve(app: SkillHubServer) -> None:
    try:
        await app.mcp.run_async(transport="stdio")
    finally:
        await app.aclose()


def run(settings: Settings | None = None) -> None:
    """
    function_purpose: Entry point to start the MCP stdio server.

    - Reads settings (and detects the agent host) once
    - Configures logging
    - Runs the FastMCP stdio server until the host disconnects
    """
    settings = settings or Settings.from_env()
    logger = configure_logging(settings.log_file)
    logger.info(
        "SkillHub MCP %s starting: api=%s detected agent=%s (%s)",
        __version__,
        settings.api_url,
        settings.detected.agent.value,
        settings.detected.source,
    )
    asyncio.run(serve(build_server(settings)))


async def _call_once(app: SkillHubServer, name: str, arguments: dict[str, Any]) -> TextResult:
    try:
        return await app.call(name, arguments)
    finally:
        await app.aclose()


def cli_main(argv: list[str] | None = None) -> int:
    """
    function_purpose: CLI for inspecting the server without an MCP host.

    Usage:
      python -m skillhub_mcp --detect-agent
      python -m skillhub_mcp --list-tools
      python -m skillhub_mcp --call search_skills '{"query": "pdf"}'
      python -m skillhub_mcp [--serve]
    """
    import argparse
    import json

    parser = argparse.ArgumentParser(
        prog="skillhub-mcp",
        description="SkillHub MCP server: inspect tools or start the stdio MCP server.",
    )
    parser.add_argument(
        "--detect-agent",
        action="store_true",
        help="Print the detected agent host and how it was detected, then exit",
    )
    parser.add_argument(
        "--list-tools",
        action="store_true",
        help="Print tool names and input schemas as JSON, then exit",
    )
    parser.add_argument(
        "--call",
        nargs=2,
        metavar=("NAME", "JSON_ARGS"),
        help="Run one tool through the dispatcher and print its text result",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Start MCP stdio server (default when no flags used)",
    )

    args = parser.parse_args(argv)
    try:
        settings = Settings.from_env()
    except SkillHubMCPError as exc:
        parser.exit(2, f"skillhub-mcp: error: {exc}\n")

    if args.detect_agent:
        print(
            json.dumps(
                {
                    "agent": settings.detected.agent.value,
                    "source": settings.detected.source,
                    "install_root": str(settings.targets[settings.detected.agent]),
                },
                indent=2,
            )
        )
        return 0

    if args.list_tools:
        app = build_server(settings)
        tools = [
            {
                "name": spec.name,
                "description": spec.description,
                "inputSchema": spec.input_schema(),
            }
            for spec in app.dispatcher.tools
        ]
        print(json.dumps(tools, indent=2, ensure_ascii=False))
        return 0

    if args.call:
        name, raw = args.call
        configure_logging(settings.log_file)
        try:
            arguments = json.loads(raw)
        except json.JSONDecodeError as exc:
            parser.error(f"JSON_ARGS is not valid JSON: {exc}")
        result = asyncio.run(_call_once(build_server(settings), name, arguments))
        print(result.text)
        return 1 if result.is_error else 0

    # Default: start server
    run(settings)
    return 0


if __name__ == "__main__":
    raise SystemExit(cli_main())
