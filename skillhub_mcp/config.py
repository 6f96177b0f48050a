"""
skillhub_mcp.config

Runtime configuration read once from the environment at startup.

Environment (optional):
- SKILLHUB_API_URL: SkillHub API base URL (default: https://skillhub.club/api/v1)
- SKILLHUB_API_KEY: bearer token sent to the SkillHub API
- SKILLHUB_DEFAULT_AGENT: force the agent host (claude, codex, gemini, opencode)
- SKILLHUB_HTTP_TIMEOUT: HTTP timeout in seconds (default: 30)
- SKILLHUB_DISABLE_TRACKING: set to 1/true/yes to stop sending usage events
- LOG_FILE: override log file path (default: ~/.skillhub-mcp/logs/skillhub_mcp_server.log)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from skillhub_mcp.agents import DetectedAgent, InstallTargets, detect_agent, user_home
from skillhub_mcp.errors import SkillHubMCPError


logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://skillhub.club/api/v1"
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_LOG_FILE_NAME = "skillhub_mcp_server.log"

_TRUTHY = {"1", "true", "yes", "on"}


def default_log_file(home: Path) -> Path:
    return home / ".skillhub-mcp" / "logs" / DEFAULT_LOG_FILE_NAME


def _parse_timeout(raw: str | None) -> float:
    if not raw:
        return DEFAULT_HTTP_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid SKILLHUB_HTTP_TIMEOUT=%r; using %s", raw, DEFAULT_HTTP_TIMEOUT)
        return DEFAULT_HTTP_TIMEOUT
    return value if value > 0 else DEFAULT_HTTP_TIMEOUT


@dataclass(frozen=True)
class Settings:
    """
    function_purpose: Everything the server needs, resolved once per process.

    The detected agent lives here so that it is computed a single time and handed
    to the install workflow explicitly.
    """

    api_url: str
    api_key: str | None
    http_timeout: float
    tracking_enabled: bool
    home: Path
    log_file: Path
    detected: DetectedAgent
    targets: InstallTargets

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, home: Path | None = None
    ) -> Settings:
        env = os.environ if environ is None else environ
        home_dir = user_home() if home is None else home
        if home_dir is None:
            raise SkillHubMCPError(
                "Cannot determine the home directory for skill install roots; set HOME"
            )

        log_file_env = env.get("LOG_FILE")
        return cls(
            api_url=(env.get("SKILLHUB_API_URL") or DEFAULT_API_URL).rstrip("/"),
            api_key=env.get("SKILLHUB_API_KEY") or None,
            http_timeout=_parse_timeout(env.get("SKILLHUB_HTTP_TIMEOUT")),
            tracking_enabled=(
                env.get("SKILLHUB_DISABLE_TRACKING", "").strip().lower() not in _TRUTHY
            ),
            home=home_dir,
            log_file=Path(log_file_env) if log_file_env else default_log_file(home_dir),
            detected=detect_agent(env, home_dir),
            targets=InstallTargets.for_home(home_dir),
        )
