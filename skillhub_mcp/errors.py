"""Exceptions raised by the SkillHub MCP server."""

from __future__ import annotations


class SkillHubMCPError(Exception):
    """Base exception for skillhub_mcp."""


class ToolValidationError(SkillHubMCPError):
    """Tool arguments failed schema validation."""

    def __init__(self, tool_name: str, details: str):
        super().__init__(f"Invalid arguments for {tool_name}: {details}")
        self.tool_name = tool_name
        self.details = details


class UnknownToolError(SkillHubMCPError):
    """No tool is registered under the requested name."""

    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool: {tool_name}")
        self.tool_name = tool_name


class UnknownResourceError(SkillHubMCPError):
    """No resource is registered under the requested URI."""

    def __init__(self, uri: str):
        super().__init__(f"Unknown resource: {uri}")
        self.uri = uri


class PathEscapeError(SkillHubMCPError):
    """A computed install path resolves outside its agent's install root."""

    def __init__(self, agent: str, path: str, root: str):
        super().__init__(f"Security error: Invalid path for {agent}")
        self.agent = agent
        self.path = path
        self.root = root


class SkillHubAPIError(SkillHubMCPError):
    """The SkillHub API call failed (transport error or non-2xx status)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
