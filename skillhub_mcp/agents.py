"""
skillhub_mcp.agents

Agent host detection and install target resolution.

- AgentKind: the closed set of agent hosts a skill can be installed for.
- detect_agent(): infer the active host from the environment and home directory.
- InstallTargets: fixed per-agent install roots plus the path containment check
  applied before any skill file is written.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from skillhub_mcp.errors import PathEscapeError


logger = logging.getLogger(__name__)

SKILL_FILENAME = "SKILL.md"
AGENT_OVERRIDE_ENV = "SKILLHUB_DEFAULT_AGENT"


class AgentKind(str, Enum):
    """Agent hosts, in detection priority order."""

    CLAUDE = "claude"
    CODEX = "codex"
    GEMINI = "gemini"
    OPENCODE = "opencode"


# Environment variables whose presence implies an agent host.
AGENT_ENV_SIGNALS: dict[AgentKind, tuple[str, ...]] = {
    AgentKind.CLAUDE: ("CLAUDE_CODE", "ANTHROPIC_API_KEY"),
    AgentKind.CODEX: ("CODEX_HOME",),
    AgentKind.GEMINI: ("GEMINI_API_KEY",),
}

DEFAULT_AGENT = AgentKind.CLAUDE


def config_dir_for(agent: AgentKind, home: Path) -> Path:
    return home / f".{agent.value}"


@dataclass(frozen=True)
class DetectedAgent:
    """
    function_purpose: The agent picked at startup and how it was picked.

    source is one of "override", "environment", "config_dir", "default".
    """

    agent: AgentKind
    source: str


def user_home() -> Path | None:
    """The current user's home directory, or None when it cannot be determined."""
    try:
        return Path.home()
    except RuntimeError:
        return None


def _is_dir(path: Path) -> bool:
    try:
        return path.is_dir()
    except OSError:
        return False


def detect_agent(
    environ: Mapping[str, str] | None = None, home: Path | None = None
) -> DetectedAgent:
    """
    function_purpose: Infer the active agent host. First match wins:

    1. SKILLHUB_DEFAULT_AGENT naming one of the known agents
    2. agent-specific environment variables
    3. an existing ~/.<agent> config directory
    4. claude

    Never raises; unreadable directories count as missing.
    """
    env = os.environ if environ is None else environ

    override = env.get(AGENT_OVERRIDE_ENV)
    if override:
        try:
            return DetectedAgent(AgentKind(override), "override")
        except ValueError:
            logger.warning(
                "Ignoring %s=%r: not one of %s",
                AGENT_OVERRIDE_ENV,
                override,
                ", ".join(a.value for a in AgentKind),
            )

    for agent, names in AGENT_ENV_SIGNALS.items():
        if any(env.get(name) for name in names):
            return DetectedAgent(agent, "environment")

    home_dir = user_home() if home is None else home
    if home_dir is not None:
        for agent in AgentKind:
            if _is_dir(config_dir_for(agent, home_dir)):
                return DetectedAgent(agent, "config_dir")

    return DetectedAgent(DEFAULT_AGENT, "default")


class InstallTargets(Mapping[AgentKind, Path]):
    """
    function_purpose: Immutable AgentKind -> install root mapping.

    Every agent has exactly one root, <home>/.<agent>/skills. Skills are written
    to <root>/<slug>/SKILL.md and only after resolve() has confirmed the skill
    directory stays inside the root.
    """

    def __init__(self, roots: Mapping[AgentKind, Path]):
        missing = [a.value for a in AgentKind if a not in roots]
        if missing:
            raise ValueError(f"missing install roots for: {', '.join(missing)}")
        self._roots = {agent: Path(roots[agent]) for agent in AgentKind}

    @classmethod
    def for_home(cls, home: Path) -> InstallTargets:
        return cls({agent: config_dir_for(agent, home) / "skills" for agent in AgentKind})

    def __getitem__(self, agent: AgentKind) -> Path:
        return self._roots[agent]

    def __iter__(self) -> Iterator[AgentKind]:
        return iter(self._roots)

    def __len__(self) -> int:
        return len(self._roots)

    def root_for(self, agent: AgentKind | str) -> Path | None:
        try:
            return self._roots.get(AgentKind(agent))
        except ValueError:
            return None

    def skill_file(self, agent: AgentKind, slug: str) -> Path:
        """Would-be install path, unvalidated. Used for previews only."""
        return self._roots[agent] / slug / SKILL_FILENAME

    def resolve(self, agent: AgentKind, slug: str) -> Path:
        """
        function_purpose: Return the canonical SKILL.md path for slug under agent's root.

        Both the skill directory and the root are resolved (symlinks and '..'
        segments) and the skill directory must be a proper descendant of the
        root, compared component-wise. Raises PathEscapeError otherwise, including
        for slugs the filesystem cannot represent (e.g. an embedded NUL byte).
        """
        root = self._roots[agent]
        resolved_root = root.resolve()
        try:
            skill_dir = (root / slug).resolve()
        except ValueError as exc:
            raise PathEscapeError(agent.value, repr(slug), str(resolved_root)) from exc
        if resolved_root not in skill_dir.parents:
            raise PathEscapeError(agent.value, str(skill_dir), str(resolved_root))
        return skill_dir / SKILL_FILENAME
