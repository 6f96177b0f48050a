"""
skillhub_mcp.install

Two-step install of a catalog skill onto the local filesystem.

A call without confirm renders a preview (target paths, skill summary, one-liner
commands) and touches nothing on disk. A call with confirm=True writes
<agent-root>/<slug>/SKILL.md for each requested agent. Agents are processed one
after another and independently: a failure for one agent is reported next to
the successes of the others.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol, Union

import yaml

from skillhub_mcp.agents import AgentKind, DetectedAgent, InstallTargets
from skillhub_mcp.errors import PathEscapeError
from skillhub_mcp.schemas import InstallSkillArgs


logger = logging.getLogger(__name__)


class InstallInfoSource(Protocol):
    async def get_install_info(self, skill_id: str, agents: Sequence[str]) -> dict[str, Any]: ...


@dataclass(frozen=True)
class InstallSuccess:
    agent: str
    path: str


@dataclass(frozen=True)
class InstallFailure:
    agent: str
    reason: str


InstallOutcome = Union[InstallSuccess, InstallFailure]


@dataclass(frozen=True)
class TargetSelection:
    """Agents to install for, and whether they came from detection or the caller."""

    agents: tuple[AgentKind, ...]
    auto_detected: bool


def select_targets(request: InstallSkillArgs, detected: DetectedAgent) -> TargetSelection:
    if request.agents:
        return TargetSelection(tuple(request.agents), auto_detected=False)
    return TargetSelection((detected.agent,), auto_detected=True)


# --- SKILL.md frontmatter ---
def parse_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """
    function_purpose: Parse YAML frontmatter delimited by '---' lines, followed by markdown body.

    Returns a (frontmatter_dict, body_text) tuple; raises ValueError on malformed input.
    """
    lines = text.splitlines(keepends=False)
    if not lines or lines[0].strip() != "---":
        raise ValueError("SKILL.md must begin with a '---' line for YAML frontmatter")

    fm_lines: list[str] = []
    idx = 1
    while idx < len(lines) and lines[idx].strip() != "---":
        fm_lines.append(lines[idx])
        idx += 1

    if idx >= len(lines):
        raise ValueError("YAML frontmatter must end with a '---' line")

    try:
        fm = yaml.safe_load("\n".join(fm_lines)) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"invalid YAML frontmatter: {exc}") from exc
    if not isinstance(fm, dict):
        raise ValueError("YAML frontmatter must parse to a mapping")
    return fm, "\n".join(lines[idx + 1 :])


def _frontmatter_summary(content: str) -> list[str]:
    try:
        fm, _ = parse_frontmatter(content)
    except ValueError as exc:
        return [f"- **Frontmatter:** missing or invalid ({exc})"]
    lines = []
    if isinstance(fm.get("name"), str):
        lines.append(f"- **Declared name:** {fm['name']}")
    if isinstance(fm.get("description"), str):
        lines.append(f"- **Description:** {fm['description'].strip()}")
    return lines


# --- Rendering ---
def render_preview(
    info: dict[str, Any],
    selection: TargetSelection,
    detected: DetectedAgent,
    targets: InstallTargets,
) -> str:
    skill = info["skill"]
    content = (info.get("install") or {}).get("content") or ""
    one_liners = info.get("one_liners") or {}
    slug = skill["slug"]

    install_paths = []
    for agent in selection.agents:
        marker = " (auto-detected)" if selection.auto_detected else ""
        install_paths.append(
            f"- **{agent.value}**{marker}: `{targets.skill_file(agent, slug)}`"
        )

    preview = [
        f"- **Name:** {skill.get('name', slug)}",
        f"- **Repository:** {skill.get('repo_url') or 'N/A'}",
        f"- **Content size:** {len(content)} characters",
        *_frontmatter_summary(content),
    ]

    paths_block = "\n".join(install_paths)
    preview_block = "\n".join(preview)

    return f"""# Install {skill.get('name', slug)}?

## Target Environment
Detected CLI: **{detected.agent.value}**

## This will create:
{paths_block}

## Skill Preview
{preview_block}

---

**To confirm installation, call again with `confirm: true`:**
```
install_skill({{ skill_id: "{slug}", confirm: true }})
```

Or use one-liner commands:

### macOS / Linux
```bash
{one_liners.get('unix', '')}
```

### Windows (PowerShell)
```powershell
{one_liners.get('windows', '')}
```"""


def render_report(skill: dict[str, Any], outcomes: Sequence[InstallOutcome]) -> str:
    installed = [o for o in outcomes if isinstance(o, InstallSuccess)]
    failed = [o for o in outcomes if isinstance(o, InstallFailure)]

    title = "✅ Installed" if installed else "❌ Not installed"
    output = f"# {title}: {skill.get('name', skill['slug'])}\n\n"
    if installed:
        output += "## Successfully Installed\n"
        output += "\n".join(f"✅ **{o.agent}**: `{o.path}`" for o in installed)
        output += "\n\n> **Note:** Restart your AI agent or start a new conversation to load the skill.\n\n"
    if failed:
        output += "## Errors\n"
        output += "\n".join(f"❌ **{o.agent}**: {o.reason}" for o in failed)
        output += "\n\n"
    output += (
        "## Skill Info\n"
        f"- **Repository:** {skill.get('repo_url') or 'N/A'}\n"
        f"- **Slug:** {skill['slug']}"
    )
    return output


# --- Workflow ---
class InstallWorkflow:
    """
    function_purpose: Run install_skill requests against fixed install targets.

    detected is computed once at startup and passed in; tests can hand in any agent
    without touching the environment or the home directory.
    """

    def __init__(
        self,
        client: InstallInfoSource,
        targets: InstallTargets,
        detected: DetectedAgent,
    ) -> None:
        self.client = client
        self.targets = targets
        self.detected = detected

    async def run(self, request: InstallSkillArgs) -> str:
        selection = select_targets(request, self.detected)
        info = await self.client.get_install_info(
            request.skill_id, [a.value for a in selection.agents]
        )
        skill = dict(info.get("skill") or {})
        skill["slug"] = skill.get("slug") or request.skill_id
        info = {**info, "skill": skill}

        if not request.confirm:
            return render_preview(info, selection, self.detected, self.targets)

        content = (info.get("install") or {}).get("content")
        if not isinstance(content, str):
            raise ValueError(f"SkillHub returned no installable content for '{request.skill_id}'")
        outcomes = tuple(
            self.install_one(agent, skill["slug"], content) for agent in selection.agents
        )
        return render_report(skill, outcomes)

    def install_one(self, agent: AgentKind | str, slug: str, content: str) -> InstallOutcome:
        """Write one agent's SKILL.md. Never raises; every problem becomes an InstallFailure."""
        name = getattr(agent, "value", agent)
        if self.targets.root_for(agent) is None:
            logger.warning("Install skipped for unknown agent %s", name)
            return InstallFailure(name, f"Unknown agent: {name}")

        try:
            skill_file = self.targets.resolve(AgentKind(agent), slug)
        except PathEscapeError as exc:
            logger.warning(
                "Refusing to install %r for %s: %s escapes %s", slug, name, exc.path, exc.root
            )
            return InstallFailure(name, str(exc))

        try:
            skill_file.parent.mkdir(parents=True, exist_ok=True)
            skill_file.write_text(content, encoding="utf-8")
        except (OSError, ValueError) as exc:
            logger.warning("Install of %r for %s failed: %s", slug, name, exc)
            return InstallFailure(name, str(exc))

        logger.info("Installed %s for %s at %s", slug, name, skill_file)
        return InstallSuccess(name, str(skill_file))
