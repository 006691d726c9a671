"""Project identity: which GitLab project a release targets and how to address it."""

from __future__ import annotations

from dataclasses import dataclass

from ._helpers import encode_path_segment, url_join, url_path
from .context import Context


@dataclass(frozen=True)
class ProjectIdentity:
    project_path: str
    encoded_project_path: str
    project_api_url: str
    project_id: str | None = None

    @property
    def is_valid(self) -> bool:
        return bool(self.project_path)

    @property
    def api_id(self) -> str:
        """The numeric ID when known, else the raw path. The client encodes it."""
        return self.project_id or self.project_path


def _strip_prefix(path: str, prefix: str) -> str:
    prefix = prefix.rstrip("/")
    if not prefix:
        return path
    if path == prefix:
        return ""
    if path.startswith(prefix + "/"):
        return path[len(prefix) :]
    return path


def get_project_path(gitlab_url: str, repository_url: str) -> str:
    """Extract ``group/.../project`` from *repository_url*.

    The path of *gitlab_url* is removed when the repository path starts with
    it, so instances served under a sub-path resolve correctly.
    """
    path = url_path(repository_url).rstrip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]
    path = _strip_prefix(path, url_path(gitlab_url))
    return path.strip("/")


def get_project_context(
    context: Context,
    gitlab_url: str,
    gitlab_api_url: str,
    repository_url: str,
) -> ProjectIdentity:
    """Resolve the project a release targets.

    On GitLab CI the pipeline's own ``CI_PROJECT_ID``/``CI_PROJECT_PATH`` win
    over the repository URL.
    """
    env = context.env
    on_gitlab_ci = context.on_gitlab_ci
    project_id = env.get("CI_PROJECT_ID") if on_gitlab_ci else None
    if on_gitlab_ci and env.get("CI_PROJECT_PATH"):
        project_path = env["CI_PROJECT_PATH"]
    else:
        project_path = get_project_path(gitlab_url, repository_url)

    encoded_project_path = encode_path_segment(project_path)
    project_api_url = url_join(gitlab_api_url, f"/projects/{project_id or encoded_project_path}")
    return ProjectIdentity(
        project_path=project_path,
        encoded_project_path=encoded_project_path,
        project_api_url=project_api_url,
        project_id=project_id or None,
    )
