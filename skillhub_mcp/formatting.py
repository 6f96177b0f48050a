"""Markdown rendering of SkillHub API payloads for tool and resource results."""

from __future__ import annotations

from typing import Any


def _description(skill: dict[str, Any], fallback: str = "No description") -> str:
    return skill.get("description") or skill.get("description_zh") or fallback


def _or_na(value: Any) -> Any:
    return "N/A" if value is None or value == "" else value


def _percent(value: Any) -> str | None:
    if isinstance(value, (int, float)):
        return f"{value * 100:.0f}%"
    return None


def format_search_results(query: str, results: list[dict[str, Any]]) -> str:
    if not results:
        return f'No skills found for "{query}". Try different keywords or browse the catalog.'

    entries = []
    for i, s in enumerate(results, start=1):
        score = f"Score: {s['simple_score']}" if s.get("simple_score") else ""
        category = f"[{s['category']}]" if s.get("category") else ""
        relevance = _percent(s.get("similarity_score")) or "N/A"
        entries.append(
            f"{i}. **{s.get('name')}** ({s.get('slug')}) {category}\n"
            f"   {_description(s)}\n"
            f"   {score} | Relevance: {relevance}"
        )

    return (
        f'Found {len(results)} skills for "{query}":\n\n'
        + "\n\n".join(entries)
        + "\n\nUse `get_skill_detail` for more info or `install_skill` to install."
    )


def format_skill_detail(data: dict[str, Any], include_content: bool = False) -> str:
    skill = data["skill"]
    evaluation = data.get("evaluation")
    token_stats = data.get("token_stats") or {}
    tags = ", ".join(skill.get("tags") or []) or "None"

    lines = [
        f"# {skill.get('name')}",
        "",
        f"**Author:** {_or_na(skill.get('author'))}",
        f"**Category:** {skill.get('category') or 'Uncategorized'}",
        f"**Tags:** {tags}",
        f"**Rating:** {skill.get('simple_rating') or 'N/A'} (Score: {_or_na(skill.get('simple_score'))})",
        f"**GitHub Stars:** {_or_na(skill.get('github_stars'))}",
        f"**Repository:** {_or_na(skill.get('repo_url'))}",
        f"**Token Usage:** ~{_or_na(token_stats.get('total_tokens'))} tokens",
        "",
        "## Description",
        _description(skill, "No description available."),
    ]

    if evaluation:
        lines += [
            "",
            "## Evaluation",
            f"**Overall:** {evaluation.get('overall_rating') or 'N/A'} "
            f"({_or_na(evaluation.get('overall_score'))}/100)",
            f"**Target Audience:** {evaluation.get('target_audience') or 'General'}",
            "",
            f"**Summary:** {evaluation.get('summary') or 'No summary available.'}",
        ]
        if evaluation.get("pros"):
            lines += ["", "**Pros:**", *(f"- {p}" for p in evaluation["pros"])]
        if evaluation.get("cons"):
            lines += ["", "**Cons:**", *(f"- {c}" for c in evaluation["cons"])]

    if include_content and skill.get("skill_md_raw"):
        lines += [
            "",
            "---",
            "",
            "## SKILL.md Content",
            "",
            "```markdown",
            skill["skill_md_raw"],
            "```",
        ]

    lines += [
        "",
        "---",
        f'Install with: `install_skill({{ skill_id: "{skill.get("slug")}" }})`',
    ]
    return "\n".join(lines)


def format_catalog(data: dict[str, Any], offset: int, limit: int) -> str:
    skills = data.get("skills") or []
    if not skills:
        return "No skills found with the specified filters."

    entries = []
    for i, s in enumerate(skills, start=offset + 1):
        rating = f"[{s['simple_rating']}]" if s.get("simple_rating") else ""
        stars = f"{s['github_stars']}" if s.get("github_stars") else "-"
        category = f"({s['category']})" if s.get("category") else ""
        entries.append(
            f"{i}. **{s.get('name')}** {rating} {category}\n"
            f"   By {_or_na(s.get('author'))} | Stars: {stars}\n"
            f"   {s.get('description') or 'No description'}"
        )

    output = "# Skill Catalog\n\n" + "\n\n".join(entries)
    pagination = data.get("pagination") or {}
    if pagination.get("has_more"):
        total = pagination.get("total", "?")
        output += (
            f"\n\n_Showing {offset + 1}-{offset + len(skills)} of {total}. "
            f"Use offset={offset + limit} for more._"
        )
    return output


def filter_recommendations(
    recommendations: list[dict[str, Any]], exclude: list[str], limit: int
) -> list[dict[str, Any]]:
    excluded = set(exclude)
    kept = [
        r for r in recommendations if r.get("id") not in excluded and r.get("slug") not in excluded
    ]
    return kept[:limit]


def format_recommendations(context: str, recommendations: list[dict[str, Any]]) -> str:
    if not recommendations:
        return (
            "No new skill recommendations found for your context. "
            "Try browsing the catalog or searching with different keywords."
        )

    entries = []
    for i, s in enumerate(recommendations, start=1):
        score = f"Score: {s['simple_score']}" if s.get("simple_score") else ""
        category = f"[{s['category']}]" if s.get("category") else ""
        match = _percent(s.get("similarity")) if s.get("similarity") else None
        entries.append(
            f"{i}. **{s.get('name')}** ({s.get('slug')}) {category}\n"
            f"   {_description(s)}\n"
            f"   {score} | Match: {match or 'N/A'}"
        )

    shown = context[:100] + ("..." if len(context) > 100 else "")
    return (
        "# Recommended Skills for Your Context\n\n"
        f'Based on: "{shown}"\n\n'
        + "\n\n".join(entries)
        + "\n\nUse `install_skill` to install any of these skills."
    )


def format_categories(categories: list[dict[str, Any]]) -> str:
    entries = "\n".join(f"- **{c.get('name')}**: {c.get('count', 0)} skills" for c in categories)
    return (
        f"# SkillHub Categories\n\n{entries}\n\n"
        'Use `browse_catalog({ category: "CategoryName" })` to explore.'
    )


def format_popular(skills: list[dict[str, Any]]) -> str:
    entries = []
    for i, s in enumerate(skills, start=1):
        rating = f"[{s['simple_rating']}]" if s.get("simple_rating") else ""
        entries.append(f"{i}. **{s.get('name')}** {rating} - {s.get('description') or 'No description'}")
    return (
        "# Popular Skills on SkillHub\n\n"
        + "\n".join(entries)
        + "\n\nUse `get_skill_detail` for more info."
    )


def format_recent(skills: list[dict[str, Any]]) -> str:
    entries = []
    for i, s in enumerate(skills, start=1):
        category = f"[{s['category']}]" if s.get("category") else ""
        entries.append(f"{i}. **{s.get('name')}** {category} - {s.get('description') or 'No description'}")
    return (
        "# Recently Added Skills\n\n"
        + "\n".join(entries)
        + "\n\nUse `search_skills` to find specific skills."
    )
