"""Fixed values shared by the release flows."""

from __future__ import annotations

HOME_URL = "https://github.com/semantic-release/semantic-release"

RELEASE_NAME = "GitLab release"

DEFAULT_GITLAB_URL = "https://gitlab.com"
DEFAULT_API_PATH_PREFIX = "/api/v4"
GRAPHQL_PATH = "/api/graphql"

DEFAULT_FAIL_TITLE = "The automated release is failing 🚨"
DEFAULT_LABELS = "semantic-release"
DEFAULT_PACKAGE_NAME = "release"

DEFAULT_RETRY_LIMIT = 3
# 422 covers the releases API answering "already exists" to a retried create.
RETRY_STATUS_CODES = (408, 413, 422, 429, 500, 502, 503, 504, 521, 522, 524)

ACCESS_LEVELS = {
    "guest": 10,
    "reporter": 20,
    "developer": 30,
    "maintainer": 40,
    "owner": 50,
}

PULL_ACCESS_LEVEL = ACCESS_LEVELS["guest"]
PUSH_ACCESS_LEVEL = ACCESS_LEVELS["developer"]

GENERIC_PACKAGE_TARGET = "generic_package"
