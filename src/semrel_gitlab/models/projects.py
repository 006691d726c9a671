"""Project permission models."""

from __future__ import annotations

from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

from .base import GitLabModel


class AccessLevel(GitLabModel):
    access_level: int = 0
    notification_level: int | None = None


class Permissions(GitLabModel):
    project_access: AccessLevel | None = None
    group_access: AccessLevel | None = None

    @property
    def is_known(self) -> bool:
        return self.project_access is not None or self.group_access is not None

    @property
    def access_level(self) -> int:
        levels = [a.access_level for a in (self.project_access, self.group_access) if a]
        return max(levels, default=0)


class Project(GitLabModel):
    id: int
    path_with_namespace: str = ""
    web_url: str = ""
    permissions: Permissions | None = None


class UserPermissions(GitLabModel):
    """``ProjectPermissions`` as returned by the GraphQL API."""

    model_config = ConfigDict(alias_generator=to_camel)

    push_code: bool = False
    download_code: bool = False
