"""
skillhub_mcp: FastMCP stdio server exposing the SkillHub skill catalog as MCP tools.

This package provides the server entrypoint plus the pieces behind it: agent
detection, install path resolution, the preview/confirm install workflow, the
tool dispatcher, and the SkillHub API client.
"""

__version__: str = "1.0.0"


def version() -> str:
    return __version__


__all__: list[str] = ["__version__", "version"]
