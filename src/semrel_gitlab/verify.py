"""Verify step: options, token and project permissions."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .client import GitLabClient
from .config import ResolvedConfig, resolve_config
from .constants import PULL_ACCESS_LEVEL, PUSH_ACCESS_LEVEL
from .context import Context, as_context
from .errors import get_error
from .exceptions import AggregateError, GitLabApiError, SemanticReleaseError
from .models.projects import Permissions, Project, UserPermissions
from .options import validate_options
from .project import ProjectIdentity, get_project_context

logger = logging.getLogger(__name__)


async def _check_job_token(
    client: GitLabClient, project: ProjectIdentity
) -> list[SemanticReleaseError]:
    # Job tokens cannot introspect permissions; listing releases proves the token is accepted.
    await client.list_releases(project.api_id, {"per_page": 1})
    return []


async def _check_personal_token(
    client: GitLabClient, project: ProjectIdentity, dry_run: bool
) -> list[SemanticReleaseError]:
    data = await client.get_project(project.api_id)
    permissions = Project.model_validate(data).permissions or Permissions()

    if permissions.is_known:
        level = permissions.access_level
        can_pull = level >= PULL_ACCESS_LEVEL
        can_push = level >= PUSH_ACCESS_LEVEL
    else:
        logger.debug("no REST permissions for %s, asking GraphQL", project.project_path)
        user_permissions = UserPermissions.model_validate(
            await client.get_project_permissions(project.project_path)
        )
        can_pull = user_permissions.download_code or user_permissions.push_code
        can_push = user_permissions.push_code

    if dry_run and not can_pull:
        return [get_error("EGLNOPULLPERMISSION", project_path=project.project_path)]
    if not dry_run and not can_push:
        return [get_error("EGLNOPUSHPERMISSION", project_path=project.project_path)]
    return []


async def _check_access(
    config: ResolvedConfig, context: Context, project: ProjectIdentity
) -> list[SemanticReleaseError]:
    context.logger.info("Verify GitLab authentication (%s)", config.gitlab_api_url)
    async with GitLabClient(config) as client:
        try:
            if config.use_job_token:
                return await _check_job_token(client, project)
            return await _check_personal_token(client, project, context.dry_run)
        except GitLabApiError as e:
            if e.status_code == 401:
                return [get_error("EINVALIDGLTOKEN", project_path=project.project_path)]
            if e.status_code == 404:
                return [get_error("EMISSINGREPO", project_path=project.project_path)]
            context.logger.error("An error occurred while verifying the GitLab access: %s", e)
            raise


async def verify(
    plugin_config: Mapping[str, Any], context: Context | Mapping[str, Any]
) -> None:
    """Check options, credentials and permissions.

    Raises :class:`AggregateError` with every problem found.
    """
    context = as_context(context)
    config = resolve_config(plugin_config, context)
    project = get_project_context(
        context, config.gitlab_url, config.gitlab_api_url, context.repository_url
    )

    errors: list[Exception] = list(
        validate_options(
            {
                **plugin_config,
                "assets": config.assets,
                "fail_title": config.fail_title,
                "fail_comment": config.fail_comment,
                "labels": config.labels,
                "assignee": config.assignee,
            }
        )
    )

    if not project.is_valid:
        errors.append(get_error("EINVALIDGITLABURL"))

    if not config.gitlab_token:
        errors.append(get_error("ENOGLTOKEN", repository_url=context.repository_url))

    if project.is_valid and config.gitlab_token:
        errors.extend(await _check_access(config, context, project))

    if errors:
        raise AggregateError(errors)
