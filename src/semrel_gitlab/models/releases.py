"""Release, upload and generic package models."""

from __future__ import annotations

from .base import GitLabModel


class Upload(GitLabModel):
    """Response of ``POST /projects/:id/uploads``."""

    alt: str = ""
    url: str = ""
    full_path: str | None = None
    markdown: str = ""


class PackageFile(GitLabModel):
    """Response of a generic package upload with ``select=package_file``."""

    id: int
    package_id: int | None = None
    file_name: str = ""


class ReleaseLink(GitLabModel):
    name: str
    url: str
    link_type: str | None = None
    filepath: str | None = None
