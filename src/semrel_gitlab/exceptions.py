"""GitLab API and release plugin exceptions."""

from __future__ import annotations

from collections.abc import Iterable


class GitLabError(Exception):
    """Base exception for GitLab operations."""


class GitLabApiError(GitLabError):
    """Raised when the GitLab API returns a non-success response."""

    def __init__(self, status_code: int, status_text: str, body: str = "") -> None:
        self.status_code = status_code
        self.status_text = status_text
        self.body = body
        super().__init__(f"GitLab API Error {status_code} {status_text}: {body}")


class GitLabAuthError(GitLabApiError):
    """Raised on 401/403 authentication failures."""

    def __init__(self, status_code: int, body: str = "") -> None:
        status_text = "Unauthorized" if status_code == 401 else "Forbidden"
        super().__init__(status_code, status_text, body)


class GitLabNotFoundError(GitLabApiError):
    """Raised on 404 responses."""

    def __init__(self, body: str = "") -> None:
        super().__init__(404, "Not Found", body)


class SemanticReleaseError(Exception):
    """A configuration or permission problem reported back to the release tool."""

    def __init__(self, message: str, code: str, details: str = "") -> None:
        self.message = message
        self.code = code
        self.details = details
        super().__init__(message)

    def __repr__(self) -> str:
        return f"SemanticReleaseError(code={self.code!r}, message={self.message!r})"


class AggregateError(Exception):
    """Raised by verification with every problem found, not just the first."""

    def __init__(self, errors: Iterable[Exception]) -> None:
        self.errors = list(errors)
        codes = ", ".join(getattr(e, "code", type(e).__name__) for e in self.errors)
        super().__init__(f"{len(self.errors)} error(s): {codes}")

    def __iter__(self):
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)
