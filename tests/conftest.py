"""Shared test fixtures for semrel-gitlab."""

from __future__ import annotations

import logging

import pytest
import respx

from semrel_gitlab.context import Context

TEST_URL = "https://gitlab.example.com"
TEST_TOKEN = "test-token"
API = f"{TEST_URL}/api/v4"
PROJECT_PATH = "owner/repo"
ENCODED = "owner%2Frepo"
REPOSITORY_URL = f"{TEST_URL}/{PROJECT_PATH}.git"


def make_context(**overrides) -> Context:
    data = {
        "options": {"repository_url": REPOSITORY_URL},
        "env": {"GL_TOKEN": TEST_TOKEN, "GL_URL": TEST_URL},
        "branch": {"name": "main"},
        "next_release": {
            "version": "1.0.0",
            "git_tag": "v1.0.0",
            "git_head": "123",
            "notes": "Test release note body",
        },
        "logger": logging.getLogger("semrel_gitlab.tests"),
        "env_ci": {"service": None},
    }
    data.update(overrides)
    return Context(**data)


@pytest.fixture
def context() -> Context:
    return make_context()


@pytest.fixture
def context_factory():
    return make_context


@pytest.fixture
def mock_api() -> respx.MockRouter:
    with respx.mock(assert_all_called=False) as router:
        yield router
