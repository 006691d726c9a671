"""Proxy selection for the GitLab base URL.

``NO_PROXY`` handling follows the common convention: entries separated by
commas or whitespace, ``*`` disables proxying entirely, an entry may carry a
``:port``, and entries starting with ``.`` or ``*`` match any subdomain.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

DEFAULT_PORTS = {"ftp": 21, "gopher": 70, "http": 80, "https": 443, "ws": 80, "wss": 443}

_ENTRY_PORT_RE = re.compile(r"^(.+):(\d+)$")


def should_proxy(url: str, no_proxy: str | None) -> bool:
    """Return whether requests to *url* go through a proxy given *no_proxy*."""
    if not url.startswith(("http://", "https://")):
        return False
    parts = urlsplit(url)
    hostname = (parts.hostname or "").lower()
    if not hostname:
        return False
    try:
        port = parts.port or DEFAULT_PORTS.get(parts.scheme, 0)
    except ValueError:
        port = DEFAULT_PORTS.get(parts.scheme, 0)

    if not no_proxy:
        return True
    if no_proxy.strip() == "*":
        return False

    for entry in re.split(r"[,\s]", no_proxy.lower()):
        if not entry:
            continue
        match = _ENTRY_PORT_RE.match(entry)
        entry_host = match.group(1) if match else entry
        entry_port = int(match.group(2)) if match else 0
        if entry_port and entry_port != port:
            continue
        if not entry_host.startswith((".", "*")):
            if hostname == entry_host:
                return False
            continue
        if entry_host.startswith("*"):
            entry_host = entry_host[1:]
        if hostname.endswith(entry_host):
            return False
    return True


def get_proxy(
    gitlab_url: str,
    http_proxy: str | None,
    https_proxy: str | None,
    no_proxy: str | None,
) -> str | None:
    """Pick the proxy matching the scheme of *gitlab_url*, if any."""
    if not should_proxy(gitlab_url, no_proxy):
        return None
    if http_proxy and gitlab_url.startswith("http://"):
        return http_proxy
    if https_proxy and gitlab_url.startswith("https://"):
        return https_proxy
    return None
