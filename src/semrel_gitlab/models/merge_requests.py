"""Merge request models."""

from __future__ import annotations

from .base import GitLabModel


class MergeRequest(GitLabModel):
    id: int | None = None
    iid: int
    project_id: int
    title: str = ""
    state: str = ""
    source_branch: str = ""
    target_branch: str = ""
    web_url: str = ""

    @property
    def key(self) -> tuple[int, int]:
        return (self.project_id, self.iid)
