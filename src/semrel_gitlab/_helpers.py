"""Shared URL and task helpers."""

from __future__ import annotations

import asyncio
import re
from collections.abc import Coroutine, Iterable
from typing import Any, TypeVar
from urllib.parse import quote, urlsplit

# Matches:  git@host:owner/repo.git  (scp-like syntax, no scheme)
_SCP_RE = re.compile(r"^(?:[^@/]+@)?[^/:]+:(?!\d+(?:/|$))(.*)$")
# Matches:  https://host:owner/repo.git  (scp-like path glued to a URL)
_URL_SCP_RE = re.compile(r"^[a-z][a-z0-9+.-]*://(?:[^@/]+@)?[^/:]+:(?!\d+(?:/|$))(.*)$", re.I)
_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*:", re.I)

T = TypeVar("T")


def url_join(*parts: str) -> str:
    """Join URL fragments with exactly one slash between them.

    Query strings are kept attached to the last fragment.
    """
    pieces = [p for p in (str(part) for part in parts) if p != ""]
    if not pieces:
        return ""
    joined = pieces[0].rstrip("/") if len(pieces) > 1 else pieces[0]
    for piece in pieces[1:]:
        if piece.startswith(("?", "#")):
            joined += piece
            continue
        joined = f"{joined}/{piece.strip('/')}" if piece.strip("/") else joined
    return joined


def url_path(url: str) -> str:
    """Return the path component of a URL or git remote, without query or fragment."""
    url = url.strip()
    match = _URL_SCP_RE.match(url)
    if match:
        return "/" + match.group(1).split("?", 1)[0].split("#", 1)[0]
    if _SCHEME_RE.match(url) and "://" in url:
        return urlsplit(url).path
    match = _SCP_RE.match(url)
    if match:
        return "/" + match.group(1)
    return urlsplit(url).path


def encode_path_segment(value: str | int) -> str:
    """Percent-encode *value* as a single URL path segment (``/`` becomes ``%2F``)."""
    return quote(str(value), safe="")


async def run_all(coros: Iterable[Coroutine[Any, Any, T]]) -> list[T]:
    """Run *coros* concurrently and return their results in order.

    The first failure cancels the remaining tasks and is re-raised once they
    have all finished.
    """
    tasks: list[asyncio.Task[T]] = []
    try:
        async with asyncio.TaskGroup() as group:
            for coro in coros:
                tasks.append(group.create_task(coro))
    except ExceptionGroup as eg:
        raise eg.exceptions[0] from None
    return [task.result() for task in tasks]
