"""
skillhub_mcp.client

Async HTTP client for the SkillHub REST API.

Usage::

    client = SkillHubClient("https://skillhub.club/api/v1", api_key="...")
    results = await client.search("pdf processing", limit=5)
    info = await client.get_install_info("pdf-processor", ["claude"])
    await client.aclose()

Every method returns decoded JSON (a {"data": ...} envelope is unwrapped) and
raises SkillHubAPIError on transport failures or non-2xx responses. Nothing is
retried.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

import httpx

from skillhub_mcp import __version__
from skillhub_mcp.errors import SkillHubAPIError


logger = logging.getLogger(__name__)

USER_AGENT = f"skillhub-mcp/{__version__}"


def _params(**kwargs: Any) -> dict[str, Any]:
    return {k: v for k, v in kwargs.items() if v is not None}


def _unwrap(payload: Any) -> Any:
    if isinstance(payload, dict) and set(payload) <= {"data", "success", "meta"} and "data" in payload:
        return payload["data"]
    return payload


def _as_list(payload: Any, *keys: str) -> list[dict[str, Any]]:
    """Accept either a bare list or an object holding the list under one of keys."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in keys:
            value = payload.get(key)
            if isinstance(value, list):
                return value
    raise SkillHubAPIError(
        f"Unexpected response from SkillHub API: expected a list of {keys[0] if keys else 'items'}"
    )


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text.strip()[:200]
    if isinstance(body, dict):
        for key in ("error", "message", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
            if isinstance(value, dict) and isinstance(value.get("message"), str):
                return value["message"]
    return ""


def _skill_path(skill_id: str, *suffix: str) -> str:
    return "/".join(["/skills", quote(skill_id, safe=""), *suffix])


class SkillHubClient:
    """Thin async wrapper around the SkillHub API.

    Args:
        base_url: API root, e.g. https://skillhub.club/api/v1
        api_key: Optional bearer token.
        timeout: Per-request timeout in seconds.
        http: Pre-built httpx.AsyncClient (tests pass one with a MockTransport).
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 30.0,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        if http is None:
            http = httpx.AsyncClient(timeout=timeout)
        http.headers.update({"User-Agent": USER_AGENT, "Accept": "application/json"})
        self._http = http

    @property
    def _headers(self) -> dict[str, str]:
        # Usage events share self._http and must go out without the key.
        if not self.api_key:
            return {}
        return {"Authorization": f"Bearer {self.api_key}"}

    @property
    def http(self) -> httpx.AsyncClient:
        return self._http

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("SkillHub %s %s params=%s", method, url, params)
        try:
            resp = await self._http.request(
                method, url, params=params, json=json, headers=self._headers
            )
        except httpx.HTTPError as exc:
            raise SkillHubAPIError(f"SkillHub API request failed: {exc}") from exc

        if resp.is_error:
            detail = _error_detail(resp)
            message = f"SkillHub API error {resp.status_code}"
            if detail:
                message = f"{message}: {detail}"
            raise SkillHubAPIError(message, status_code=resp.status_code)

        try:
            return _unwrap(resp.json())
        except ValueError as exc:
            raise SkillHubAPIError("SkillHub API returned invalid JSON") from exc

    async def search(
        self,
        query: str,
        limit: int = 5,
        category: str | None = None,
        min_score: float | None = None,
        method: str = "hybrid",
    ) -> list[dict[str, Any]]:
        payload = await self._request(
            "GET",
            "/skills/search",
            params=_params(
                q=query, limit=limit, category=category, min_score=min_score, method=method
            ),
        )
        return _as_list(payload, "results", "skills")

    async def get_skill(self, skill_id: str, include_content: bool = False) -> dict[str, Any]:
        """Returns {skill, evaluation?, token_stats}."""
        payload = await self._request(
            "GET",
            _skill_path(skill_id),
            params={"include_content": "true" if include_content else "false"},
        )
        if not isinstance(payload, dict) or "skill" not in payload:
            raise SkillHubAPIError("Unexpected response from SkillHub API: missing 'skill'")
        return payload

    async def get_install_info(self, skill_id: str, agents: Sequence[str]) -> dict[str, Any]:
        """Returns {skill, install: {content}, one_liners: {unix, windows}}."""
        payload = await self._request(
            "GET",
            _skill_path(skill_id, "install"),
            params={"agents": ",".join(agents)},
        )
        if not isinstance(payload, dict) or not {"skill", "install"} <= set(payload):
            raise SkillHubAPIError(
                "Unexpected response from SkillHub API: missing install information"
            )
        return payload

    async def get_catalog(
        self,
        sort: str = "composite",
        limit: int = 10,
        offset: int = 0,
        status: str = "published",
        category: str | None = None,
        min_score: float | None = None,
    ) -> dict[str, Any]:
        """Returns {skills, pagination: {total, has_more, ...}}."""
        payload = await self._request(
            "GET",
            "/skills",
            params=_params(
                sort=sort,
                limit=limit,
                offset=offset,
                status=status,
                category=category,
                min_score=min_score,
            ),
        )
        if isinstance(payload, list):
            return {"skills": payload, "pagination": {"total": len(payload), "has_more": False}}
        skills = _as_list(payload, "skills")
        return {"skills": skills, "pagination": payload.get("pagination") or {}}

    async def public_recommend(
        self, query: str, limit: int = 5, mmr_lambda: float = 0.7
    ) -> list[dict[str, Any]]:
        payload = await self._request(
            "POST",
            "/recommend",
            json={"query": query, "limit": limit, "mmr_lambda": mmr_lambda},
        )
        return _as_list(payload, "recommendations", "results", "skills")

    async def get_categories(self) -> list[dict[str, Any]]:
        payload = await self._request("GET", "/categories")
        return _as_list(payload, "categories")

    async def get_popular(self, limit: int = 10) -> list[dict[str, Any]]:
        payload = await self._request("GET", "/skills/popular", params={"limit": limit})
        return _as_list(payload, "skills")

    async def get_recent(self, limit: int = 10) -> list[dict[str, Any]]:
        payload = await self._request("GET", "/skills/recent", params={"limit": limit})
        return _as_list(payload, "skills")
