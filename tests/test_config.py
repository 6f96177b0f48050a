from __future__ import annotations

from pathlib import Path

import pytest

from skillhub_mcp.agents import AgentKind, DetectedAgent, detect_agent
from skillhub_mcp.config import DEFAULT_API_URL, DEFAULT_HTTP_TIMEOUT, Settings
from skillhub_mcp.errors import SkillHubMCPError


def test_defaults(home: Path) -> None:
    settings = Settings.from_env({}, home)

    assert settings.api_url == DEFAULT_API_URL
    assert settings.api_key is None
    assert settings.http_timeout == DEFAULT_HTTP_TIMEOUT
    assert settings.tracking_enabled is True
    assert settings.log_file == home / ".skillhub-mcp" / "logs" / "skillhub_mcp_server.log"
    assert settings.detected.agent is AgentKind.CLAUDE
    assert settings.detected.source == "default"
    assert settings.targets[AgentKind.GEMINI] == home / ".gemini" / "skills"


def test_environment_overrides(home: Path, tmp_path: Path) -> None:
    settings = Settings.from_env(
        {
            "SKILLHUB_API_URL": "http://localhost:3000/api/v1/",
            "SKILLHUB_API_KEY": "sk-test",
            "SKILLHUB_HTTP_TIMEOUT": "2.5",
            "SKILLHUB_DEFAULT_AGENT": "opencode",
            "LOG_FILE": str(tmp_path / "server.log"),
        },
        home,
    )

    assert settings.api_url == "http://localhost:3000/api/v1"
    assert settings.api_key == "sk-test"
    assert settings.http_timeout == 2.5
    assert settings.log_file == tmp_path / "server.log"
    assert settings.detected.agent is AgentKind.OPENCODE
    assert settings.detected.source == "override"


@pytest.mark.parametrize(("value", "enabled"), [("1", False), ("TRUE", False), ("no", True), ("", True)])
def test_tracking_switch(home: Path, value: str, enabled: bool) -> None:
    settings = Settings.from_env({"SKILLHUB_DISABLE_TRACKING": value}, home)
    assert settings.tracking_enabled is enabled


@pytest.mark.parametrize("value", ["soon", "0", "-5"])
def test_bad_timeout_falls_back_to_default(home: Path, value: str) -> None:
    settings = Settings.from_env({"SKILLHUB_HTTP_TIMEOUT": value}, home)
    assert settings.http_timeout == DEFAULT_HTTP_TIMEOUT


def test_empty_api_key_is_treated_as_unset(home: Path) -> None:
    assert Settings.from_env({"SKILLHUB_API_KEY": ""}, home).api_key is None


def _no_home(cls: type[Path]) -> Path:
    raise RuntimeError("Could not determine home directory.")


def test_unresolvable_home_is_a_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(Path, "home", classmethod(_no_home))
    with pytest.raises(SkillHubMCPError, match="set HOME"):
        Settings.from_env({})


def test_detection_without_home_falls_back_to_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(Path, "home", classmethod(_no_home))
    assert detect_agent({}) == DetectedAgent(AgentKind.CLAUDE, "default")
