"""Publish step: upload assets and create the GitLab release."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ._helpers import encode_path_segment, run_all, url_join
from .assets import Asset, get_assets, get_file
from .client import GitLabClient
from .config import ResolvedConfig, resolve_config
from .constants import DEFAULT_PACKAGE_NAME, GENERIC_PACKAGE_TARGET, RELEASE_NAME
from .context import Context, as_context
from .exceptions import GitLabError
from .models.releases import PackageFile, ReleaseLink, Upload
from .project import ProjectIdentity, get_project_context
from .templates import render, render_optional

logger = logging.getLogger(__name__)


def _render_path(option: Any, variables: Mapping[str, Any]) -> Any:
    """Render the ``path`` of an ``assets`` entry before it is expanded.

    Matched file names are never rendered, so they may contain template syntax.
    """
    if isinstance(option, str):
        return render(option, variables)
    if isinstance(option, Mapping) and isinstance(option.get("path"), str):
        return {**option, "path": render(option["path"], variables)}
    return option


def _render_asset(asset: Asset, variables: Mapping[str, Any]) -> Asset:
    """Render every templated field of *asset* except ``path``."""
    update: dict[str, Any] = {}
    for field in ("label", "url", "type", "filepath", "target", "status", "package_name"):
        update[field] = render_optional(getattr(asset, field), variables)
    return asset.model_copy(update=update)


async def _upload_generic_package(
    client: GitLabClient,
    config: ResolvedConfig,
    context: Context,
    project: ProjectIdentity,
    asset: Asset,
    file: Path,
) -> str:
    version = str(context.next_release.get("version", ""))
    package_name = asset.package_name or DEFAULT_PACKAGE_NAME
    label = asset.label or file.name
    data = await client.upload_generic_package(
        project.api_id,
        package_name,
        version,
        label,
        file,
        status=asset.status,
    )
    package_file = PackageFile.model_validate(data)
    url = url_join(
        config.gitlab_url, project.project_path, f"/-/package_files/{package_file.id}/download"
    )
    context.logger.info("Uploaded file as generic package: %s", url)
    return url


async def _upload_file(
    client: GitLabClient,
    config: ResolvedConfig,
    context: Context,
    project: ProjectIdentity,
    file: Path,
) -> str:
    upload = Upload.model_validate(await client.upload_file(project.api_id, file))
    if upload.full_path:
        url = url_join(config.gitlab_url, upload.full_path)
    else:
        # Servers before GitLab 17 only return the project-relative url.
        url = url_join(config.gitlab_url, project.project_path, upload.url)
    context.logger.info("Uploaded file: %s", url)
    return url


async def _publish_asset(
    client: GitLabClient,
    config: ResolvedConfig,
    context: Context,
    project: ProjectIdentity,
    asset: Asset,
) -> ReleaseLink | None:
    asset = _render_asset(asset, context.template_vars())

    if asset.url:
        return ReleaseLink(
            name=asset.label or asset.url,
            url=asset.url,
            link_type=asset.type,
            filepath=asset.filepath,
        )

    path = asset.path if isinstance(asset.path, str) else " ".join(asset.patterns)
    file = get_file(path, context.cwd, context.logger)
    if file is None:
        return None

    logger.debug("uploading %s (target=%s)", file, asset.target)
    if asset.target == GENERIC_PACKAGE_TARGET:
        url = await _upload_generic_package(client, config, context, project, asset, file)
    else:
        url = await _upload_file(client, config, context, project, file)

    return ReleaseLink(
        name=asset.label or asset.name or file.name,
        url=url,
        link_type=asset.type,
        filepath=asset.filepath,
    )


def release_url(gitlab_url: str, project_path: str, tag: str) -> str:
    return url_join(gitlab_url, project_path, f"/-/releases/{encode_path_segment(tag)}")


async def publish(
    plugin_config: Mapping[str, Any], context: Context | Mapping[str, Any]
) -> dict[str, str]:
    """Upload the configured assets and create the release for ``next_release``.

    Returns the release descriptor ``{"name", "url"}`` handed back to the host.
    """
    context = as_context(context)
    config = resolve_config(plugin_config, context)
    project = get_project_context(
        context, config.gitlab_url, config.gitlab_api_url, context.repository_url
    )
    git_tag = context.next_release.get("git_tag", "")
    notes = context.next_release.get("notes") or ""

    logger.debug("release name: %s", git_tag)
    logger.debug("release ref: %s", context.next_release.get("git_head"))

    async with GitLabClient(config) as client:
        links: list[ReleaseLink] = []
        if config.assets:
            variables = context.template_vars()
            assets = get_assets(
                context.cwd, [_render_path(option, variables) for option in config.assets]
            )
            results = await run_all(
                _publish_asset(client, config, context, project, asset) for asset in assets
            )
            links = [link for link in results if link is not None]

        payload: dict[str, Any] = {
            "tag_name": git_tag,
            "description": notes if notes.strip() else git_tag,
            "assets": {"links": [link.to_dict() for link in links]},
        }
        if config.milestones:
            payload["milestones"] = config.milestones
        if config.released_at:
            payload["released_at"] = config.released_at

        logger.debug("POST-ing the following JSON to %s: %s", project.project_api_url, payload)
        try:
            await client.create_release(project.api_id, payload)
        except GitLabError as e:
            context.logger.error(
                "An error occurred while making a request to the GitLab release API:\n%s", e
            )
            raise

    url = release_url(config.gitlab_url, project.project_path, git_tag)
    context.logger.info("Published GitLab release: %s", git_tag)
    return {"name": RELEASE_NAME, "url": url}
