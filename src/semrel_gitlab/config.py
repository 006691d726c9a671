"""Plugin configuration resolved from options, environment and CI context."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ._helpers import url_join
from .constants import (
    DEFAULT_API_PATH_PREFIX,
    DEFAULT_FAIL_TITLE,
    DEFAULT_GITLAB_URL,
    DEFAULT_LABELS,
    DEFAULT_RETRY_LIMIT,
    GRAPHQL_PATH,
    RETRY_STATUS_CODES,
)
from .context import Context
from .proxy import get_proxy

_API_VERSION_RE = re.compile(r"/api/v\d+/?$")


def _cast_list(value: Any) -> Any:
    if not value:
        return value
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _first_set(*values: Any) -> Any:
    """First value that is not ``None`` (empty strings count as set)."""
    for value in values:
        if value is not None:
            return value
    return None


def _first_truthy(*values: Any) -> Any:
    for value in values:
        if value:
            return value
    return None


def graphql_url(gitlab_api_url: str, gitlab_url: str) -> str:
    if _API_VERSION_RE.search(gitlab_api_url):
        return _API_VERSION_RE.sub(GRAPHQL_PATH, gitlab_api_url)
    return url_join(gitlab_url, GRAPHQL_PATH)


@dataclass(frozen=True)
class ResolvedConfig:
    """Fully defaulted plugin configuration for one step invocation."""

    gitlab_token: str | None
    gitlab_url: str
    gitlab_api_url: str
    gitlab_graphql_api_url: str
    token_header: str = "PRIVATE-TOKEN"
    assets: Any = None
    milestones: Any = None
    success_comment: str | bool | None = None
    success_comment_condition: str | bool | None = None
    fail_title: str | bool = DEFAULT_FAIL_TITLE
    fail_comment: str | bool | None = None
    fail_comment_condition: str | bool | None = None
    labels: str | bool = DEFAULT_LABELS
    assignee: str | None = None
    proxy: str | None = None
    retry_limit: int = DEFAULT_RETRY_LIMIT
    retry_status_codes: tuple[int, ...] = RETRY_STATUS_CODES
    use_job_token: bool = False
    released_at: str | None = None
    timeout: float = 30

    @property
    def headers(self) -> dict[str, str]:
        if not self.gitlab_token:
            return {}
        return {self.token_header: self.gitlab_token}

    @classmethod
    def from_context(cls, plugin_config: Mapping[str, Any], context: Context) -> ResolvedConfig:
        env = context.env
        on_gitlab_ci = context.on_gitlab_ci
        use_job_token = bool(plugin_config.get("use_job_token", False))

        user_api_path_prefix = _first_set(
            plugin_config.get("gitlab_api_path_prefix"),
            env.get("GL_PREFIX"),
            env.get("GITLAB_PREFIX"),
        )
        user_gitlab_url = _first_truthy(
            plugin_config.get("gitlab_url"), env.get("GL_URL"), env.get("GITLAB_URL")
        )

        ci_project_url = env.get("CI_PROJECT_URL")
        ci_project_path = env.get("CI_PROJECT_PATH")
        if user_gitlab_url:
            gitlab_url = user_gitlab_url
        elif on_gitlab_ci and ci_project_url and ci_project_path:
            gitlab_url = re.sub(f"/{re.escape(ci_project_path)}$", "", ci_project_url)
        else:
            gitlab_url = DEFAULT_GITLAB_URL
        gitlab_url = gitlab_url.rstrip("/")

        # CI_API_V4_URL only applies while neither the URL nor the prefix was chosen by the user.
        user_chose_api = bool(user_gitlab_url) or user_api_path_prefix is not None
        if on_gitlab_ci and not user_chose_api and env.get("CI_API_V4_URL"):
            gitlab_api_url = env["CI_API_V4_URL"]
        else:
            prefix = DEFAULT_API_PATH_PREFIX if user_api_path_prefix is None else user_api_path_prefix
            gitlab_api_url = url_join(gitlab_url, prefix)

        if use_job_token:
            gitlab_token = env.get("CI_JOB_TOKEN")
        else:
            gitlab_token = _first_truthy(env.get("GL_TOKEN"), env.get("GITLAB_TOKEN"))

        fail_title = plugin_config.get("fail_title")
        labels = plugin_config.get("labels")
        retry_limit = plugin_config.get("retry_limit")

        return cls(
            gitlab_token=gitlab_token or None,
            token_header="JOB-TOKEN" if use_job_token else "PRIVATE-TOKEN",
            gitlab_url=gitlab_url,
            gitlab_api_url=gitlab_api_url,
            gitlab_graphql_api_url=graphql_url(gitlab_api_url, gitlab_url),
            assets=_cast_list(plugin_config.get("assets")),
            milestones=_cast_list(plugin_config.get("milestones")),
            success_comment=plugin_config.get("success_comment"),
            success_comment_condition=plugin_config.get("success_comment_condition"),
            fail_title=DEFAULT_FAIL_TITLE if fail_title is None else fail_title,
            fail_comment=plugin_config.get("fail_comment"),
            fail_comment_condition=plugin_config.get("fail_comment_condition"),
            labels=DEFAULT_LABELS if labels is None else labels,
            assignee=plugin_config.get("assignee"),
            proxy=get_proxy(
                gitlab_url,
                _first_truthy(env.get("HTTP_PROXY"), env.get("http_proxy")),
                _first_truthy(env.get("HTTPS_PROXY"), env.get("https_proxy")),
                _first_truthy(env.get("NO_PROXY"), env.get("no_proxy")),
            ),
            retry_limit=DEFAULT_RETRY_LIMIT if retry_limit is None else int(retry_limit),
            use_job_token=use_job_token,
            released_at=plugin_config.get("released_at"),
        )


def resolve_config(plugin_config: Mapping[str, Any], context: Context) -> ResolvedConfig:
    """Merge plugin options, environment variables and CI defaults. Performs no I/O."""
    return ResolvedConfig.from_context(plugin_config, context)
