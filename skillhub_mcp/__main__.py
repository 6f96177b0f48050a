"""
Package entry point for launching the skillhub_mcp server module.

This allows running:
  - python -m skillhub_mcp            -> invokes skillhub_mcp.server CLI
  - python -m skillhub_mcp.server     -> also available directly via the server module

The entry point delegates to skillhub_mcp.server.cli_main() which supports both
CLI inspection modes and starting the stdio MCP server.
"""

from skillhub_mcp.server import cli_main


def main() -> None:
    raise SystemExit(cli_main())


if __name__ == "__main__":
    main()
