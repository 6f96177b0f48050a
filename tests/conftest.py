from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pytest

from skillhub_mcp.agents import AgentKind, DetectedAgent, InstallTargets


SKILL_CONTENT = (
    "---\n"
    "name: pdf-processor\n"
    "description: Extract text and tables from PDF files.\n"
    "---\n"
    "\n"
    "# PDF Processor\n"
    "\n"
    "Use pdfplumber to read the document.\n"
)


def install_info(slug: str = "pdf-processor", content: str = SKILL_CONTENT) -> dict[str, Any]:
    return {
        "skill": {
            "id": "0b9f7c1e-1111-4222-8333-444455556666",
            "name": "PDF Processor",
            "slug": slug,
            "repo_url": "https://github.com/example/pdf-processor",
        },
        "install": {"content": content},
        "one_liners": {
            "unix": f"curl -fsSL https://skillhub.club/install/{slug}.sh | bash",
            "windows": f"irm https://skillhub.club/install/{slug}.ps1 | iex",
        },
    }


class FakeSkillHubClient:
    """In-memory stand-in for SkillHubClient that records every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []
        self.install = install_info()
        self.search_results: list[dict[str, Any]] = []
        self.recommendations: list[dict[str, Any]] = []
        self.catalog: dict[str, Any] = {"skills": [], "pagination": {"total": 0, "has_more": False}}
        self.error: Exception | None = None

    def _record(self, name: str, *args: Any, **kwargs: Any) -> None:
        self.calls.append((name, args, kwargs))
        if self.error is not None:
            raise self.error

    async def search(self, query: str, **kwargs: Any) -> list[dict[str, Any]]:
        self._record("search", query, **kwargs)
        return self.search_results

    async def get_skill(self, skill_id: str, include_content: bool = False) -> dict[str, Any]:
        self._record("get_skill", skill_id, include_content=include_content)
        return {"skill": dict(self.install["skill"]), "token_stats": {"total_tokens": 1200}}

    async def get_install_info(self, skill_id: str, agents: Sequence[str]) -> dict[str, Any]:
        self._record("get_install_info", skill_id, list(agents))
        return self.install

    async def get_catalog(self, **kwargs: Any) -> dict[str, Any]:
        self._record("get_catalog", **kwargs)
        return self.catalog

    async def public_recommend(self, **kwargs: Any) -> list[dict[str, Any]]:
        self._record("public_recommend", **kwargs)
        return self.recommendations

    async def get_categories(self) -> list[dict[str, Any]]:
        self._record("get_categories")
        return [{"name": "Documents", "count": 12}, {"name": "Git", "count": 4}]

    async def get_popular(self, limit: int = 10) -> list[dict[str, Any]]:
        self._record("get_popular", limit)
        return [{"name": "PDF Processor", "simple_rating": "A", "description": "PDFs"}]

    async def get_recent(self, limit: int = 10) -> list[dict[str, Any]]:
        self._record("get_recent", limit)
        return [{"name": "Commit Helper", "category": "Git", "description": "Commits"}]

    async def aclose(self) -> None:
        pass


class RecordingTracker:
    def __init__(self) -> None:
        self.events: list[dict[str, Any]] = []

    def fire(self, event: dict[str, Any]) -> None:
        self.events.append(event)


@pytest.fixture
def home(tmp_path: Path) -> Path:
    h = tmp_path / "home"
    h.mkdir()
    return h


@pytest.fixture
def targets(home: Path) -> InstallTargets:
    return InstallTargets.for_home(home)


@pytest.fixture
def detected() -> DetectedAgent:
    return DetectedAgent(AgentKind.CLAUDE, "default")


@pytest.fixture
def fake_client() -> FakeSkillHubClient:
    return FakeSkillHubClient()


@pytest.fixture
def tracker() -> RecordingTracker:
    return RecordingTracker()
