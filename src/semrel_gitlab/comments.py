"""Default bodies for success notes and failure issues."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from .constants import HOME_URL

FAQ_URL = "https://github.com/semantic-release/semantic-release/blob/master/docs/support/FAQ.md"
USAGE_URL = "https://github.com/semantic-release/semantic-release/blob/master/docs/usage/README.md"
SUPPORT_URL = "https://github.com/semantic-release/semantic-release#get-help"
NEW_ISSUE_URL = "https://github.com/semantic-release/semantic-release/issues/new"

SIGNATURE = f"Your **[semantic-release]({HOME_URL})** bot :package: :rocket:"


def _linkify(release: Mapping[str, Any]) -> str:
    if release.get("url"):
        return f"[{release['name']}]({release['url']})"
    return f"`{release['name']}`"


def get_success_comment(
    next_release: Mapping[str, Any],
    releases: Sequence[Mapping[str, Any]],
    *,
    is_merge_request: bool,
) -> str:
    subject = "MR is included" if is_merge_request else "issue has been resolved"
    comment = f":tada: This {subject} in version {next_release.get('version')} :tada:"
    named = [release for release in releases if release.get("name")]
    if len(named) == 1:
        comment += f"\n\nThe release is available on {_linkify(named[0])}."
    elif named:
        links = "\n".join(f"- {_linkify(release)}" for release in named)
        comment += f"\n\nThe release is available on:\n{links}"
    return f"{comment}\n\n{SIGNATURE}"


def _error_field(error: Any, name: str) -> Any:
    if isinstance(error, Mapping):
        return error.get(name)
    return getattr(error, name, None)


def format_error(error: Any) -> str:
    message = _error_field(error, "message") or str(error)
    details = _error_field(error, "details") or (
        "Unfortunately this error doesn't have any additional information."
    )
    return f"### {message}\n\n{details}\n\n---\n\n"


def get_fail_comment(branch: Mapping[str, Any], errors: Sequence[Any]) -> str:
    name = branch.get("name")
    formatted = "".join(format_error(error) for error in errors)
    return f"""## :rotating_light: The automated release from the `{name}` branch failed. :rotating_light:

I recommend you give this issue a high priority, so other packages depending on you can benefit from your bug fixes and new features again.

You can find below the list of errors reported by **semantic-release**. Each one of them has to be resolved in order to automatically publish your package. I'm sure you can fix this 💪.

Errors are usually caused by a misconfiguration or an authentication problem. With each error reported below you will find explanation and guidance to help you to resolve it.

Once all the errors are resolved, **semantic-release** will release your package the next time you push a commit to the `{name}` branch. You can also manually restart the failed CI job that runs **semantic-release**.

If you are not sure how to resolve this, here are some links that can help you:
- [Usage documentation]({USAGE_URL})
- [Frequently Asked Questions]({FAQ_URL})
- [Support channels]({SUPPORT_URL})

If those don't help, or if this issue is reporting something you think isn't right, you can always ask the humans behind **[semantic-release]({NEW_ISSUE_URL})**.

---

{formatted}Good luck with your project ✨

{SIGNATURE}"""
