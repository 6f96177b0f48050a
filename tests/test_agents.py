from __future__ import annotations

from pathlib import Path

import pytest

from skillhub_mcp.agents import (
    SKILL_FILENAME,
    AgentKind,
    InstallTargets,
    detect_agent,
)
from skillhub_mcp.errors import PathEscapeError


# --- detection ---
def test_detect_defaults_to_claude_without_signals(home: Path) -> None:
    detected = detect_agent({}, home)
    assert detected.agent is AgentKind.CLAUDE
    assert detected.source == "default"


def test_override_wins_over_every_other_signal(home: Path) -> None:
    (home / ".codex").mkdir()
    env = {
        "SKILLHUB_DEFAULT_AGENT": "gemini",
        "CLAUDE_CODE": "1",
        "CODEX_HOME": "/opt/codex",
    }
    detected = detect_agent(env, home)
    assert detected.agent == "gemini"
    assert detected.source == "override"


def test_unknown_override_is_ignored(home: Path) -> None:
    detected = detect_agent({"SKILLHUB_DEFAULT_AGENT": "cursor", "GEMINI_API_KEY": "k"}, home)
    assert detected.agent is AgentKind.GEMINI
    assert detected.source == "environment"


@pytest.mark.parametrize(
    ("env", "expected"),
    [
        ({"CLAUDE_CODE": "1"}, AgentKind.CLAUDE),
        ({"ANTHROPIC_API_KEY": "sk-ant"}, AgentKind.CLAUDE),
        ({"CODEX_HOME": "/opt/codex"}, AgentKind.CODEX),
        ({"GEMINI_API_KEY": "g"}, AgentKind.GEMINI),
        ({"GEMINI_API_KEY": "g", "CODEX_HOME": "/opt/codex"}, AgentKind.CODEX),
        ({"GEMINI_API_KEY": "g", "ANTHROPIC_API_KEY": "a"}, AgentKind.CLAUDE),
    ],
)
def test_environment_signals_in_priority_order(
    home: Path, env: dict[str, str], expected: AgentKind
) -> None:
    assert detect_agent(env, home).agent is expected


def test_empty_environment_values_are_not_signals(home: Path) -> None:
    assert detect_agent({"CLAUDE_CODE": "", "CODEX_HOME": ""}, home).source == "default"


def test_config_directories_checked_in_order(home: Path) -> None:
    (home / ".opencode").mkdir()
    (home / ".gemini").mkdir()
    detected = detect_agent({}, home)
    assert detected.agent is AgentKind.GEMINI
    assert detected.source == "config_dir"


def test_config_entry_that_is_a_file_is_skipped(home: Path) -> None:
    (home / ".claude").write_text("not a directory")
    (home / ".opencode").mkdir()
    assert detect_agent({}, home).agent is AgentKind.OPENCODE


def test_missing_home_directory_falls_back_to_default(tmp_path: Path) -> None:
    assert detect_agent({}, tmp_path / "does-not-exist").agent is AgentKind.CLAUDE


# --- install targets ---
def test_every_agent_has_a_root(targets: InstallTargets, home: Path) -> None:
    assert set(targets) == set(AgentKind)
    for agent in AgentKind:
        assert targets[agent] == home / f".{agent.value}" / "skills"


def test_partial_mapping_is_rejected(home: Path) -> None:
    with pytest.raises(ValueError, match="codex"):
        InstallTargets({a: home / a.value for a in AgentKind if a is not AgentKind.CODEX})


def test_root_for_unknown_agent_is_none(targets: InstallTargets) -> None:
    assert targets.root_for("cursor") is None
    assert targets.root_for("claude") == targets[AgentKind.CLAUDE]


@pytest.mark.parametrize("agent", list(AgentKind))
def test_benign_slug_resolves_inside_root(targets: InstallTargets, agent: AgentKind) -> None:
    path = targets.resolve(agent, "pdf-processor")
    root = targets[agent].resolve()
    assert path.name == SKILL_FILENAME
    assert path.parent.name == "pdf-processor"
    assert root in path.parents


def test_skill_file_is_unvalidated(targets: InstallTargets) -> None:
    path = targets.skill_file(AgentKind.CODEX, "../elsewhere")
    assert path == targets[AgentKind.CODEX] / "../elsewhere" / SKILL_FILENAME


@pytest.mark.parametrize(
    "slug",
    ["../evil", "../../etc", "a/../../x", "..", ".", "", "/etc", "/tmp/evil-skill", "bad\x00slug"],
)
@pytest.mark.parametrize("agent", list(AgentKind))
def test_adversarial_slugs_are_rejected(
    targets: InstallTargets, agent: AgentKind, slug: str
) -> None:
    with pytest.raises(PathEscapeError) as excinfo:
        targets.resolve(agent, slug)
    assert excinfo.value.agent == agent.value


def test_sibling_with_common_prefix_is_not_inside(tmp_path: Path) -> None:
    roots = {agent: tmp_path / "a" / "b" for agent in AgentKind}
    targets = InstallTargets(roots)
    with pytest.raises(PathEscapeError):
        targets.resolve(AgentKind.CLAUDE, "../bee/skill")


def test_symlink_out_of_root_is_rejected(targets: InstallTargets, tmp_path: Path) -> None:
    root = targets[AgentKind.CLAUDE]
    root.mkdir(parents=True)
    outside = tmp_path / "outside"
    outside.mkdir()
    (root / "linked").symlink_to(outside, target_is_directory=True)
    with pytest.raises(PathEscapeError):
        targets.resolve(AgentKind.CLAUDE, "linked")
