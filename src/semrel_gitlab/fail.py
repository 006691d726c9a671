"""Fail step: open or update the issue tracking a failing release."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .client import GitLabClient
from .comments import get_fail_comment
from .config import resolve_config
from .context import Context, as_context
from .models.issues import Issue
from .project import get_project_context
from .templates import evaluate_condition, render

logger = logging.getLogger(__name__)


async def fail(plugin_config: Mapping[str, Any], context: Context | Mapping[str, Any]) -> None:
    """Report ``context.errors`` on the failure issue, creating it when none is open."""
    context = as_context(context)
    config = resolve_config(plugin_config, context)

    if config.fail_comment_condition is False:
        context.logger.info("Skip issue creation.")
        return
    if config.fail_comment is False or config.fail_title is False:
        context.logger.warning(
            "Skip issue creation. Setting `fail_comment` or `fail_title` to False is deprecated "
            "and will be removed in a future major version. Use `fail_comment_condition` instead."
        )
        return

    project = get_project_context(
        context, config.gitlab_url, config.gitlab_api_url, context.repository_url
    )
    variables = context.template_vars(context=context)
    title = render(config.fail_title, variables)
    if config.fail_comment:
        description = render(config.fail_comment, variables)
    else:
        description = get_fail_comment(context.branch, context.errors)

    async with GitLabClient(config) as client:
        open_issues = await client.list_issues(project.api_id, {"state": "opened", "search": title})
        existing = next(
            (issue for issue in Issue.parse_list(open_issues) if issue.title == title), None
        )

        condition_vars = {**variables, "issue": existing.raw if existing else False}
        if not evaluate_condition(config.fail_comment_condition, condition_vars):
            context.logger.info("Fail comment condition is not met, skip issue creation.")
            return

        if existing:
            logger.debug("comment on issue: %r", existing)
            await client.add_issue_comment(existing.project_id, existing.iid, description)
            context.logger.info("Commented on issue #%d: %s.", existing.id, existing.web_url)
            return

        new_issue: dict[str, Any] = {"title": title, "description": description}
        if config.labels is not False:
            new_issue["labels"] = config.labels
        if config.assignee:
            new_issue["assignee_id"] = config.assignee
        logger.debug("create issue: %r", new_issue)
        created = Issue.model_validate(await client.create_issue(project.api_id, new_issue))
        context.logger.info("Created issue #%d: %s.", created.id, created.web_url)
