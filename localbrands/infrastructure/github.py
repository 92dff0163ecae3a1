"""Integration with the GitHub REST API for site repositories."""
from __future__ import annotations

import base64
import logging
from typing import Any
from urllib.parse import quote

import httpx

from localbrands.errors import GitHubError

from .hosting import RepositoryInfo

logger = logging.getLogger(__name__)


class GitHubClient:
    """Creates public repositories and commits files through the contents API."""

    def __init__(
        self,
        token: str,
        *,
        api_base: str = "https://api.github.com",
        user_agent: str = "LocalBrands-Worker",
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_base = api_base.rstrip("/")
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": user_agent,
        }
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _error_message(response: httpx.Response, default: str) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return f"{default}: {body['message']}"
        return f"{default}: HTTP {response.status_code}"

    async def _request(self, method: str, path: str, *, error: str, json: Any | None = None) -> dict[str, Any]:
        try:
            response = await self._client.request(
                method, f"{self._api_base}{path}", headers=self._headers, json=json
            )
        except httpx.TransportError as exc:
            raise GitHubError(f"{error}: {exc}") from exc
        if response.is_error:
            message = self._error_message(response, error)
            logger.error("GitHub %s %s failed: %s", method, path, message)
            raise GitHubError(message)
        return response.json() if response.content else {}

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    async def get_login(self) -> str:
        data = await self._request("GET", "/user", error="Failed to get user info")
        login = data.get("login")
        if not login:
            raise GitHubError("Failed to get user info: missing login")
        return str(login)

    async def create_repository(self, name: str, *, description: str = "") -> RepositoryInfo:
        data = await self._request(
            "POST",
            "/user/repos",
            error="Failed to create repository",
            json={"name": name, "description": description, "private": False, "auto_init": False},
        )
        owner = (data.get("owner") or {}).get("login") or ""
        return RepositoryInfo(
            name=str(data.get("name") or name),
            owner=str(owner),
            html_url=str(data.get("html_url") or f"https://github.com/{owner}/{name}"),
        )

    async def push_file(self, repository: RepositoryInfo, path: str, content: str, *, message: str) -> None:
        encoded = base64.b64encode(content.encode("utf-8")).decode("ascii")
        await self._request(
            "PUT",
            f"/repos/{quote(repository.owner)}/{quote(repository.name)}/contents/{quote(path)}",
            error="Failed to push files",
            json={"message": message, "content": encoded},
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["GitHubClient"]
