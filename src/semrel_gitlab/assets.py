"""Release asset descriptors and their expansion to concrete files."""

from __future__ import annotations

import glob
import logging
import os
from collections.abc import Iterable, Mapping
from fnmatch import fnmatch
from pathlib import Path
from typing import Any

from pydantic import Field

from .models.base import GitLabModel

logger = logging.getLogger(__name__)


class Asset(GitLabModel):
    """One entry of the ``assets`` option.

    ``path`` is a glob or list of globs relative to the working directory;
    ``url`` makes the asset a plain link that is never uploaded.
    """

    path: str | list[str] | None = None
    url: str | None = None
    label: str | None = None
    type: str | None = None
    filepath: str | None = None
    target: str | None = None
    status: str | None = None
    package_name: str | None = Field(default=None, alias="packageName")
    name: str | None = None

    @classmethod
    def from_option(cls, value: Any) -> Asset:
        if isinstance(value, Mapping):
            return cls.model_validate(dict(value))
        return cls(path=value)

    @property
    def is_link(self) -> bool:
        return bool(self.url)

    @property
    def patterns(self) -> list[str]:
        if self.path is None:
            return []
        return [self.path] if isinstance(self.path, str) else list(self.path)


def _is_excluded(relative: str, negations: Iterable[str]) -> bool:
    for pattern in negations:
        if fnmatch(relative, pattern):
            return True
        if pattern.startswith("**/") and fnmatch(relative, pattern[3:]):
            return True
    return False


def expand_patterns(cwd: str, patterns: list[str]) -> list[str]:
    """Expand glob *patterns* under *cwd* into relative file paths.

    Patterns starting with ``!`` exclude matches, directories are expanded
    recursively and dotfiles are included.
    """
    positives = [p for p in patterns if not p.startswith("!")]
    negations = [p[1:] for p in patterns if p.startswith("!")]
    matches: list[str] = []
    for pattern in positives:
        if os.path.isdir(os.path.join(cwd, pattern)):
            pattern = os.path.join(pattern, "**")
        for match in sorted(glob.glob(pattern, root_dir=cwd, recursive=True, include_hidden=True)):
            if not os.path.isfile(os.path.join(cwd, match)):
                continue
            relative = os.path.normpath(match)
            if relative not in matches and not _is_excluded(relative, negations):
                matches.append(relative)
    return matches


def _expand(cwd: str, raw: Any) -> list[Asset]:
    asset = Asset.from_option(raw)
    if asset.is_link and not asset.patterns:
        return [asset]
    patterns = asset.patterns
    if not any(not p.startswith("!") for p in patterns):
        logger.debug("skipping the negated glob %r", patterns)
        return []
    files = expand_patterns(cwd, patterns)
    if not files:
        # Kept so the missing file is reported when publishing.
        return [asset]
    return [
        asset.model_copy(update={"path": file, "name": os.path.basename(file)}) for file in files
    ]


def get_assets(cwd: str, assets: Iterable[Any]) -> list[Asset]:
    """Expand every configured asset, dropping duplicates.

    When the same file is matched by a bare glob and by a mapping, the mapping
    wins since it carries the label and link metadata.
    """
    expanded: list[tuple[bool, Asset]] = []
    for raw in assets:
        described = isinstance(raw, Mapping)
        expanded.extend((described, asset) for asset in _expand(cwd, raw))

    result: list[Asset] = []
    seen: set[str] = set()
    for _, asset in sorted(expanded, key=lambda item: not item[0]):
        if asset.is_link and not asset.patterns:
            result.append(asset)
            continue
        if isinstance(asset.path, list):
            key = "\0".join(asset.patterns)
        else:
            key = str(Path(cwd, asset.path).resolve())
        if key in seen:
            continue
        seen.add(key)
        if asset.name is None and isinstance(asset.path, str):
            asset = asset.model_copy(update={"name": os.path.basename(asset.path)})
        result.append(asset)
    return result


def get_file(path: str, cwd: str, log: Any) -> Path | None:
    """Resolve *path* against *cwd*; log and return ``None`` when it is not a readable file."""
    file = Path(cwd, path).resolve()
    try:
        is_file = file.is_file()
        exists = file.exists()
    except OSError:
        is_file = exists = False
    if not exists:
        log.error("The asset %s cannot be read, and will be ignored.", path)
        return None
    if not is_file:
        log.error("The asset %s is not a file, and will be ignored.", path)
        return None
    return file
