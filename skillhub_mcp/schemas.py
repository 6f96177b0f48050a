"""Argument models for the five SkillHub tools."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, Field, field_validator

from skillhub_mcp.agents import AgentKind


def _non_empty(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be empty")
    return value


NonEmptyStr = Annotated[str, AfterValidator(_non_empty)]

CatalogSort = Literal["score", "stars", "recent", "composite"]


class SearchSkillsArgs(BaseModel):
    query: NonEmptyStr = Field(
        description="Natural language search query (e.g., 'PDF processing', 'code review', 'git workflow')"
    )
    limit: int = Field(5, ge=1, le=20, description="Number of results (1-20, default: 5)")
    category: str | None = Field(None, description="Filter by category (optional)")
    min_score: float | None = Field(
        None, ge=0, le=100, description="Minimum quality score 0-100 (optional)"
    )


class GetSkillDetailArgs(BaseModel):
    skill_id: NonEmptyStr = Field(description="Skill ID or slug (e.g., 'pdf-processor' or UUID)")
    include_content: bool = Field(
        False, description="Include full SKILL.md content (default: false)"
    )


class InstallSkillArgs(BaseModel):
    """Arguments of install_skill; one install request per call."""

    skill_id: NonEmptyStr = Field(description="Skill ID or slug to install")
    agents: list[AgentKind] | None = Field(
        None,
        description="Target agents. Defaults to the auto-detected agent. Override to install for multiple agents.",
    )
    confirm: bool = Field(
        False,
        description="Set to true to confirm and execute installation. First call without confirm to preview.",
    )

    @field_validator("agents")
    @classmethod
    def _dedupe_agents(cls, value: list[AgentKind] | None) -> list[AgentKind] | None:
        if value is None:
            return None
        if not value:
            raise ValueError("must name at least one agent when given")
        return list(dict.fromkeys(value))


class BrowseCatalogArgs(BaseModel):
    category: str | None = Field(None, description="Filter by category (optional)")
    sort: CatalogSort = Field("composite", description="Sort order (default: composite)")
    limit: int = Field(10, ge=1, le=50, description="Number of results (1-50, default: 10)")
    offset: int = Field(0, ge=0, description="Pagination offset (default: 0)")
    min_score: float | None = Field(
        None, ge=0, le=100, description="Minimum quality score 0-100 (optional)"
    )


class RecommendSkillsArgs(BaseModel):
    context: NonEmptyStr = Field(description="Description of your current task or project")
    current_skills: list[str] = Field(
        default_factory=list, description="Already installed skill IDs/slugs to exclude"
    )
    limit: int = Field(5, ge=1, le=10, description="Number of recommendations (1-10, default: 5)")
