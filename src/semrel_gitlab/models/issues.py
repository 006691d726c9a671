"""Issue models."""

from __future__ import annotations

from .base import GitLabModel


class Issue(GitLabModel):
    id: int
    iid: int
    project_id: int
    title: str = ""
    description: str | None = None
    state: str = ""
    labels: list[str] = []
    web_url: str = ""

    @property
    def key(self) -> tuple[int, int]:
        return (self.project_id, self.iid)
