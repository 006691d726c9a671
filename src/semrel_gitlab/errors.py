"""Error code table.

Every error the plugin reports to the release tool is built here from its code,
so messages stay consistent between verification and the other steps.
"""

from __future__ import annotations

import reprlib
from collections.abc import Callable
from typing import Any

from .exceptions import SemanticReleaseError

_repr = reprlib.Repr()
_repr.maxlist = 5
_repr.maxdict = 5
_repr.maxstring = 200
_repr.maxother = 200

TOKEN_VARS = "`GL_TOKEN` or `GITLAB_TOKEN`"
PERSONAL_TOKEN_DOCS = "https://docs.gitlab.com/ee/user/profile/personal_access_tokens.html"
PERMISSIONS_DOCS = "https://docs.gitlab.com/ee/user/permissions.html#project-members-permissions"
REMOTES_DOCS = "https://git-scm.com/book/en/v2/Git-Basics-Working-with-Remotes"


def _stringify(value: Any) -> str:
    return _repr.repr(value)


def _invalid_option(name: str, expected: str) -> Callable[..., tuple[str, str]]:
    def build(**values: Any) -> tuple[str, str]:
        return (
            f"Invalid `{name}` option.",
            f"The `{name}` option, if defined, {expected}.\n\n"
            f"Your configuration for the `{name}` option is `{_stringify(values.get(name))}`.",
        )

    return build


def _invalid_gitlab_url(**values: Any) -> tuple[str, str]:
    return (
        "The git repository URL is not a valid GitLab URL.",
        "The `repository_url` option must be a valid GitLab URL with the format "
        "`<GitLab_URL>/<project_path>.git`.\n\n"
        "By default the `repository_url` option is retrieved from the "
        f"[git origin url]({REMOTES_DOCS}) of the repository cloned by your CI environment.",
    )


def _invalid_token(**values: Any) -> tuple[str, str]:
    project_path = values.get("project_path")
    return (
        "Invalid GitLab token.",
        f"The GitLab token configured in the {TOKEN_VARS} environment variable must be a valid "
        f"[personal access token]({PERSONAL_TOKEN_DOCS}) allowing to push to the repository "
        f"{project_path}.\n\n"
        f"Please make sure to set the {TOKEN_VARS} environment variable in your CI with the "
        "exact value of the GitLab personal token.",
    )


def _missing_repo(**values: Any) -> tuple[str, str]:
    project_path = values.get("project_path")
    return (
        f"The repository {project_path} doesn't exist.",
        "The `repository_url` option must refer to your GitLab repository. The repository must "
        "be accessible with the GitLab API.\n\n"
        "If you are using a self-managed GitLab instance please make sure to configure the "
        "`gitlab_url` and `gitlab_api_path_prefix` options.",
    )


def _no_push_permission(**values: Any) -> tuple[str, str]:
    project_path = values.get("project_path")
    return (
        f"The GitLab token doesn't allow to push on the repository {project_path}.",
        f"The user associated with the GitLab token configured in the {TOKEN_VARS} environment "
        f"variable must be allowed to push to the repository {project_path}.\n\n"
        "Please make sure the GitLab user associated with the token has the "
        f"[permission to push]({PERMISSIONS_DOCS}) to the repository {project_path}.",
    )


def _no_pull_permission(**values: Any) -> tuple[str, str]:
    project_path = values.get("project_path")
    return (
        f"The GitLab token doesn't allow to pull from the repository {project_path}.",
        f"The user associated with the GitLab token configured in the {TOKEN_VARS} environment "
        f"variable must be allowed to pull from the repository {project_path}.\n\n"
        "Please make sure the GitLab user associated with the token has the "
        f"[permission to pull]({PERMISSIONS_DOCS}) from the repository {project_path}.",
    )


def _no_token(**values: Any) -> tuple[str, str]:
    repository_url = values.get("repository_url")
    return (
        "No GitLab token specified.",
        f"A [GitLab personal access token]({PERSONAL_TOKEN_DOCS}) must be created and set in the "
        f"{TOKEN_VARS} environment variable on your CI environment, or `use_job_token` must be "
        "enabled on GitLab CI.\n\n"
        f"The token must allow to push to the repository {repository_url}.",
    )


ERROR_DEFINITIONS: dict[str, Callable[..., tuple[str, str]]] = {
    "EINVALIDASSETS": _invalid_option(
        "assets",
        "must be a `list` of strings, lists of strings, or mappings with a `path` or `url` key",
    ),
    "EINVALIDFAILTITLE": _invalid_option("fail_title", "must be a non empty `str` or `False`"),
    "EINVALIDFAILCOMMENT": _invalid_option("fail_comment", "must be a non empty `str` or `False`"),
    "EINVALIDLABELS": _invalid_option("labels", "must be a non empty `str` or `False`"),
    "EINVALIDASSIGNEE": _invalid_option("assignee", "must be a non empty `str`"),
    "EINVALIDGITLABURL": _invalid_gitlab_url,
    "EINVALIDGLTOKEN": _invalid_token,
    "EMISSINGREPO": _missing_repo,
    "EGLNOPUSHPERMISSION": _no_push_permission,
    "EGLNOPULLPERMISSION": _no_pull_permission,
    "ENOGLTOKEN": _no_token,
}


def get_error(code: str, **values: Any) -> SemanticReleaseError:
    """Build the error registered under *code*, filling its templates from *values*."""
    message, details = ERROR_DEFINITIONS[code](**values)
    return SemanticReleaseError(message, code, details)
