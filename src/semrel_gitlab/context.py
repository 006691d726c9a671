"""Release context supplied by the host release tool."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any

from pydantic.alias_generators import to_snake

default_logger = logging.getLogger("semrel_gitlab")

# Nested mappings whose keys are also normalized to snake_case.
_SNAKE_CASED = frozenset({"options", "branch", "next_release", "last_release", "env_ci"})


def detect_ci(env: Mapping[str, str]) -> dict[str, Any]:
    """Minimal CI detection used when the host does not provide ``env_ci``."""
    if env.get("GITLAB_CI") == "true":
        return {
            "is_ci": True,
            "service": "gitlab",
            "branch": env.get("CI_COMMIT_REF_NAME"),
            "commit": env.get("CI_COMMIT_SHA"),
        }
    return {"is_ci": bool(env.get("CI")), "service": None}


@dataclass
class Context:
    """Everything the host passes to a plugin step.

    ``options`` carries the host options (``repository_url``, ``dry_run``),
    ``next_release`` the computed release (``git_tag``, ``git_head``, ``notes``,
    ``version``) and ``env_ci`` the detected CI service.
    """

    options: dict[str, Any] = field(default_factory=dict)
    branch: dict[str, Any] = field(default_factory=dict)
    errors: list[Any] = field(default_factory=list)
    next_release: dict[str, Any] = field(default_factory=dict)
    last_release: dict[str, Any] = field(default_factory=dict)
    commits: list[dict[str, Any]] = field(default_factory=list)
    releases: list[dict[str, Any]] = field(default_factory=list)
    logger: Any = default_logger
    cwd: str = field(default_factory=os.getcwd)
    env: Mapping[str, str] = field(default_factory=dict)
    env_ci: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        if self.env_ci is None:
            self.env_ci = detect_ci(self.env)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Context:
        """Build a context from a host mapping; camelCase keys are accepted."""
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        dropped = []
        for key, value in data.items():
            name = to_snake(key)
            if name not in known:
                dropped.append(key)
                continue
            if name in _SNAKE_CASED and isinstance(value, Mapping):
                value = {to_snake(k): v for k, v in value.items()}
            values[name] = value
        if dropped:
            default_logger.warning("Ignoring unknown context keys: %s", ", ".join(dropped))
        return cls(**values)

    @property
    def repository_url(self) -> str:
        return self.options.get("repository_url") or ""

    @property
    def dry_run(self) -> bool:
        return bool(self.options.get("dry_run"))

    @property
    def on_gitlab_ci(self) -> bool:
        return (self.env_ci or {}).get("service") == "gitlab"

    def template_vars(self, **extra: Any) -> dict[str, Any]:
        """Variables exposed to user templates."""
        variables = {
            "branch": self.branch,
            "errors": self.errors,
            "next_release": self.next_release,
            "last_release": self.last_release,
            "commits": self.commits,
            "releases": self.releases,
            "options": self.options,
        }
        variables.update(extra)
        return variables


def as_context(context: Context | Mapping[str, Any]) -> Context:
    if isinstance(context, Context):
        return context
    return Context.from_dict(context)
