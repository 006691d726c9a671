"""Release plugin that publishes to GitLab."""

from .context import Context
from .exceptions import AggregateError, SemanticReleaseError
from .plugin import (
    GitLabPlugin,
    VerificationState,
    fail,
    publish,
    success,
    verify_conditions,
)

__all__ = [
    "AggregateError",
    "Context",
    "GitLabPlugin",
    "SemanticReleaseError",
    "VerificationState",
    "fail",
    "publish",
    "success",
    "verify_conditions",
]
