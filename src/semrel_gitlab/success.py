"""Success step: comment on the merge requests and issues a release resolves."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

from ._helpers import run_all
from .client import GitLabClient
from .comments import get_success_comment
from .config import resolve_config
from .context import Context, as_context
from .exceptions import GitLabError
from .models.issues import Issue
from .models.merge_requests import MergeRequest
from .project import get_project_context
from .templates import evaluate_condition, render

logger = logging.getLogger(__name__)

T = TypeVar("T", Issue, MergeRequest)


def _unique(items: Iterable[T]) -> list[T]:
    seen: set[tuple[int, int]] = set()
    result = []
    for item in items:
        if item.key in seen:
            continue
        seen.add(item.key)
        result.append(item)
    return result


async def _merged_requests(client: GitLabClient, project_id: str, sha: str) -> list[MergeRequest]:
    logger.debug("getting MRs of commit %s", sha)
    data = await client.list_commit_merge_requests(project_id, sha)
    merge_requests = MergeRequest.parse_list(data)
    return [mr for mr in merge_requests if mr.state == "merged"]


async def _closed_issues(client: GitLabClient, merge_request: MergeRequest) -> list[Issue]:
    logger.debug("getting issues closed by !%d", merge_request.iid)
    data = await client.list_mr_closes_issues(merge_request.project_id, merge_request.iid)
    issues = Issue.parse_list(data)
    return [issue for issue in issues if issue.state == "closed"]


async def success(plugin_config: Mapping[str, Any], context: Context | Mapping[str, Any]) -> None:
    """Post a note on every merged MR and closed issue included in the release."""
    context = as_context(context)
    config = resolve_config(plugin_config, context)

    if config.success_comment is False or config.success_comment_condition is False:
        context.logger.info("Skip commenting on issues and merge requests.")
        return

    project = get_project_context(
        context, config.gitlab_url, config.gitlab_api_url, context.repository_url
    )
    releases = [release for release in context.releases if release.get("name")]

    def body(issue: Issue | None, merge_request: MergeRequest | None) -> str | None:
        variables = context.template_vars(
            context=context,
            issue=issue.raw if issue else False,
            merge_request=merge_request.raw if merge_request else False,
        )
        if not evaluate_condition(config.success_comment_condition, variables):
            return None
        if config.success_comment:
            return render(config.success_comment, variables)
        return get_success_comment(
            context.next_release, releases, is_merge_request=merge_request is not None
        )

    async with GitLabClient(config) as client:
        try:
            found = await run_all(
                _merged_requests(client, project.api_id, commit["hash"])
                for commit in context.commits
                if commit.get("hash")
            )
            merge_requests = _unique(mr for group in found for mr in group)

            found = await run_all(_closed_issues(client, mr) for mr in merge_requests)
            issues = _unique(issue for group in found for issue in group)

            notes = []
            for issue in issues:
                text = body(issue, None)
                if text is None:
                    logger.debug("condition skipped issue #%d", issue.iid)
                    continue
                notes.append(client.add_issue_comment(issue.project_id, issue.iid, text))
            await run_all(notes)

            notes = []
            for mr in merge_requests:
                text = body(None, mr)
                if text is None:
                    logger.debug("condition skipped MR !%d", mr.iid)
                    continue
                notes.append(client.add_mr_note(mr.project_id, mr.iid, text))
            await run_all(notes)
        except GitLabError as e:
            context.logger.error(
                "An error occurred while posting comments to related issues and merge requests:\n%s",
                e,
            )
            raise
