"""GitLab API client using httpx."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx

from .config import ResolvedConfig
from .exceptions import GitLabApiError, GitLabAuthError, GitLabNotFoundError

logger = logging.getLogger(__name__)

RETRY_BACKOFF_BASE = 1.0


class GitLabClient:
    """Async HTTP client for the parts of the GitLab REST and GraphQL APIs a release needs."""

    def __init__(
        self,
        config: ResolvedConfig,
        *,
        backoff_base: float = RETRY_BACKOFF_BASE,
    ) -> None:
        self.config = config
        self.backoff_base = backoff_base
        kwargs: dict[str, Any] = {}
        if config.proxy:
            kwargs["proxy"] = config.proxy
        self._client = httpx.AsyncClient(
            base_url=config.gitlab_api_url,
            headers=config.headers,
            timeout=config.timeout,
            trust_env=False,
            **kwargs,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> GitLabClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ── HTTP helpers ──────────────────────────────────────────────

    @staticmethod
    def _encode_id(project_id: str | int) -> str:
        """Encode a project ID. Numeric IDs pass through; paths are URL-encoded."""
        if isinstance(project_id, int):
            return str(project_id)
        try:
            return str(int(project_id))
        except ValueError:
            return quote(project_id, safe="")

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request, retrying on the configured status codes and on connection errors."""
        retry_limit = max(self.config.retry_limit, 0)
        for attempt in range(retry_limit):
            delay = self.backoff_base * (2**attempt)
            try:
                resp = await self._client.request(method, path, **kwargs)
            except (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError) as exc:
                logger.warning(
                    "%s %s failed (%s), retry %d/%d in %.1fs",
                    method, path, exc, attempt + 1, retry_limit, delay,
                )
                await asyncio.sleep(delay)
                continue
            if resp.status_code not in self.config.retry_status_codes:
                return resp
            logger.warning(
                "%s %s returned %d, retry %d/%d in %.1fs",
                method, path, resp.status_code, attempt + 1, retry_limit, delay,
            )
            await asyncio.sleep(delay)
        return await self._client.request(method, path, **kwargs)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_data: Any = None,
        params: dict[str, Any] | None = None,
        content: bytes | None = None,
        files: dict[str, Any] | None = None,
    ) -> Any:
        """Make an API request and return parsed JSON."""
        kwargs: dict[str, Any] = {"params": params}
        if json_data is not None:
            kwargs["json"] = json_data
        if content is not None:
            kwargs["content"] = content
        if files is not None:
            kwargs["files"] = files

        logger.debug("%s %s", method, path)
        resp = await self._send(method, path, **kwargs)

        if resp.status_code in (401, 403):
            raise GitLabAuthError(resp.status_code, resp.text)
        if resp.status_code == 404:
            raise GitLabNotFoundError(resp.text)
        if not resp.is_success:
            raise GitLabApiError(resp.status_code, resp.reason_phrase or "", resp.text)

        if resp.status_code == 204 or not resp.content:
            return None

        content_type = resp.headers.get("content-type", "")
        if "text/html" in content_type:
            msg = "Unexpected HTML response, check URL and authentication"
            raise GitLabApiError(resp.status_code, msg, resp.text[:500])

        try:
            return resp.json()
        except json.JSONDecodeError as e:
            raise GitLabApiError(
                resp.status_code,
                f"JSON parse error: {e}",
                resp.text[:500],
            ) from e

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self._request("GET", path, params=params)

    async def post(self, path: str, json_data: Any = None, **kwargs: Any) -> Any:
        return await self._request("POST", path, json_data=json_data, **kwargs)

    async def put(self, path: str, json_data: Any = None, **kwargs: Any) -> Any:
        return await self._request("PUT", path, json_data=json_data, **kwargs)

    # ── GraphQL ───────────────────────────────────────────────────

    async def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict:
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables
        result = await self.post(self.config.gitlab_graphql_api_url, payload) or {}
        if result.get("errors"):
            messages = "; ".join(e.get("message", "") for e in result["errors"])
            raise GitLabApiError(200, "GraphQL Error", messages)
        return result.get("data") or {}

    # ── Projects ──────────────────────────────────────────────────

    async def get_project(self, project_id: str | int) -> dict:
        enc = self._encode_id(project_id)
        return await self.get(f"/projects/{enc}")

    async def get_project_permissions(self, full_path: str) -> dict:
        query = (
            "query($fullPath: ID!) {"
            " project(fullPath: $fullPath) { userPermissions { pushCode downloadCode } } }"
        )
        data = await self.graphql(query, {"fullPath": full_path})
        return (data.get("project") or {}).get("userPermissions") or {}

    # ── Commits ───────────────────────────────────────────────────

    async def list_commit_merge_requests(self, project_id: str | int, sha: str) -> list[dict]:
        enc = self._encode_id(project_id)
        return await self.get(
            f"/projects/{enc}/repository/commits/{quote(sha, safe='')}/merge_requests"
        )

    # ── Merge Requests ────────────────────────────────────────────

    async def list_mr_closes_issues(self, project_id: str | int, mr_iid: int) -> list[dict]:
        enc = self._encode_id(project_id)
        return await self.get(f"/projects/{enc}/merge_requests/{mr_iid}/closes_issues")

    async def add_mr_note(self, project_id: str | int, mr_iid: int, body: str) -> dict:
        enc = self._encode_id(project_id)
        return await self.post(f"/projects/{enc}/merge_requests/{mr_iid}/notes", {"body": body})

    # ── Releases ──────────────────────────────────────────────────

    async def list_releases(
        self, project_id: str | int, params: dict[str, Any] | None = None
    ) -> list[dict]:
        enc = self._encode_id(project_id)
        p = {"per_page": 20, **(params or {})}
        return await self.get(f"/projects/{enc}/releases", params=p)

    async def create_release(self, project_id: str | int, params: dict[str, Any]) -> dict:
        enc = self._encode_id(project_id)
        return await self.post(f"/projects/{enc}/releases", params)

    # ── Uploads & packages ────────────────────────────────────────

    async def upload_file(self, project_id: str | int, file: Path) -> dict:
        enc = self._encode_id(project_id)
        files = {"file": (file.name, file.read_bytes())}
        return await self.post(f"/projects/{enc}/uploads", files=files)

    async def upload_generic_package(
        self,
        project_id: str | int,
        package_name: str,
        version: str,
        file_name: str,
        file: Path,
        status: str | None = None,
    ) -> dict:
        enc = self._encode_id(project_id)
        path = (
            f"/projects/{enc}/packages/generic/{quote(package_name, safe='')}"
            f"/{quote(version, safe='')}/{quote(file_name, safe='')}"
        )
        params: dict[str, Any] = {"select": "package_file"}
        if status:
            params = {"status": status, **params}
        return await self.put(path, params=params, content=file.read_bytes())

    # ── Issues ────────────────────────────────────────────────────

    async def list_issues(
        self, project_id: str | int, params: dict[str, Any] | None = None
    ) -> list[dict]:
        enc = self._encode_id(project_id)
        p = {"per_page": 20, **(params or {})}
        return await self.get(f"/projects/{enc}/issues", params=p)

    async def create_issue(self, project_id: str | int, params: dict[str, Any]) -> dict:
        enc = self._encode_id(project_id)
        return await self.post(f"/projects/{enc}/issues", params)

    async def add_issue_comment(self, project_id: str | int, issue_iid: int, body: str) -> dict:
        enc = self._encode_id(project_id)
        return await self.post(f"/projects/{enc}/issues/{issue_iid}/notes", {"body": body})
