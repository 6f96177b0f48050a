"""
skillhub_mcp.tools

The five SkillHub tools and three SkillHub resources.

Handlers take validated argument models, call the SkillHub API and return
markdown. build_tool_specs() wires them to the dispatcher; ResourceCatalog
serves the skillhub:// resources.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from skillhub_mcp.agents import DetectedAgent, InstallTargets
from skillhub_mcp.client import SkillHubClient
from skillhub_mcp.dispatch import ToolSpec
from skillhub_mcp.errors import UnknownResourceError
from skillhub_mcp.formatting import (
    filter_recommendations,
    format_catalog,
    format_categories,
    format_popular,
    format_recent,
    format_recommendations,
    format_search_results,
    format_skill_detail,
)
from skillhub_mcp.install import InstallWorkflow
from skillhub_mcp.schemas import (
    BrowseCatalogArgs,
    GetSkillDetailArgs,
    InstallSkillArgs,
    RecommendSkillsArgs,
    SearchSkillsArgs,
)


MMR_LAMBDA = 0.7
RESOURCE_LIMIT = 10
RESOURCE_MIME_TYPE = "text/markdown"


class SkillHubTools:
    """Tool handlers bound to one SkillHub client."""

    def __init__(self, client: SkillHubClient, workflow: InstallWorkflow) -> None:
        self.client = client
        self.workflow = workflow

    async def search_skills(self, args: SearchSkillsArgs) -> str:
        results = await self.client.search(
            args.query,
            limit=args.limit,
            category=args.category,
            min_score=args.min_score,
            method="hybrid",
        )
        return format_search_results(args.query, results)

    async def get_skill_detail(self, args: GetSkillDetailArgs) -> str:
        data = await self.client.get_skill(args.skill_id, include_content=args.include_content)
        return format_skill_detail(data, include_content=args.include_content)

    async def install_skill(self, args: InstallSkillArgs) -> str:
        return await self.workflow.run(args)

    async def browse_catalog(self, args: BrowseCatalogArgs) -> str:
        data = await self.client.get_catalog(
            sort=args.sort,
            limit=args.limit,
            offset=args.offset,
            status="published",
            category=args.category,
            min_score=args.min_score,
        )
        return format_catalog(data, offset=args.offset, limit=args.limit)

    async def recommend_skills(self, args: RecommendSkillsArgs) -> str:
        # Over-fetch so that excluding already installed skills still leaves `limit`.
        recommendations = await self.client.public_recommend(
            query=args.context,
            limit=args.limit + len(args.current_skills),
            mmr_lambda=MMR_LAMBDA,
        )
        kept = filter_recommendations(recommendations, args.current_skills, args.limit)
        return format_recommendations(args.context, kept)


def build_tool_specs(tools: SkillHubTools, detected: DetectedAgent) -> list[ToolSpec]:
    agent = detected.agent.value
    return [
        ToolSpec(
            name="search_skills",
            description=(
                "Search for Claude Code Skills using natural language. "
                "Returns relevant skills based on semantic matching."
            ),
            args_model=SearchSkillsArgs,
            handler=tools.search_skills,
            track=lambda a: {"query": a.query},
        ),
        ToolSpec(
            name="get_skill_detail",
            description=(
                "Get detailed information about a specific skill including evaluation, "
                "pros/cons, and optionally the full SKILL.md content."
            ),
            args_model=GetSkillDetailArgs,
            handler=tools.get_skill_detail,
            track=lambda a: {"skill_id": a.skill_id},
        ),
        ToolSpec(
            name="install_skill",
            description=(
                "Install a skill to the local filesystem. First call shows a preview, then call "
                "with confirm=true to install. Auto-detects current CLI environment "
                f"(detected: {agent})."
            ),
            args_model=InstallSkillArgs,
            handler=tools.install_skill,
            track=lambda a: {"skill_id": a.skill_id},
        ),
        ToolSpec(
            name="browse_catalog",
            description=(
                "Browse the skill catalog with filtering and sorting options. "
                "Good for discovering skills by category or popularity."
            ),
            args_model=BrowseCatalogArgs,
            handler=tools.browse_catalog,
            track=lambda a: {"category": a.category, "sort": a.sort},
        ),
        ToolSpec(
            name="recommend_skills",
            description=(
                "Get skill recommendations based on what you're working on. "
                "Uses semantic matching to find relevant skills."
            ),
            args_model=RecommendSkillsArgs,
            handler=tools.recommend_skills,
            track=lambda a: {"context": a.context[:100]},
        ),
    ]


@dataclass(frozen=True)
class ResourceSpec:
    uri: str
    name: str
    description: str
    read: Callable[[], Awaitable[str]]
    mime_type: str = RESOURCE_MIME_TYPE


class ResourceCatalog:
    """The skillhub:// resources. read() raises UnknownResourceError for other URIs."""

    def __init__(self, client: SkillHubClient) -> None:
        self.client = client
        self._resources = {
            spec.uri: spec
            for spec in (
                ResourceSpec(
                    "skillhub://categories",
                    "Skill Categories",
                    "List of all skill categories with counts",
                    self.categories,
                ),
                ResourceSpec(
                    "skillhub://popular",
                    "Popular Skills",
                    "Top 10 most popular skills",
                    self.popular,
                ),
                ResourceSpec(
                    "skillhub://recent",
                    "Recent Skills",
                    "10 most recently added skills",
                    self.recent,
                ),
            )
        }

    @property
    def resources(self) -> list[ResourceSpec]:
        return list(self._resources.values())

    async def read(self, uri: str) -> str:
        spec = self._resources.get(uri)
        if spec is None:
            raise UnknownResourceError(uri)
        return await spec.read()

    async def categories(self) -> str:
        return format_categories(await self.client.get_categories())

    async def popular(self) -> str:
        return format_popular(await self.client.get_popular(RESOURCE_LIMIT))

    async def recent(self) -> str:
        return format_recent(await self.client.get_recent(RESOURCE_LIMIT))


def build_tools(
    client: SkillHubClient, targets: InstallTargets, detected: DetectedAgent
) -> tuple[list[ToolSpec], ResourceCatalog]:
    workflow = InstallWorkflow(client, targets, detected)
    specs = build_tool_specs(SkillHubTools(client, workflow), detected)
    return specs, ResourceCatalog(client)


__all__: list[str] = [
    "ResourceCatalog",
    "ResourceSpec",
    "SkillHubTools",
    "build_tool_specs",
    "build_tools",
]
