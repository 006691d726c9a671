"""Tests for the plugin entry points and verification state."""

from __future__ import annotations

import httpx
import pytest

import semrel_gitlab
from semrel_gitlab.exceptions import AggregateError
from semrel_gitlab.plugin import GitLabPlugin, VerificationState

API = "https://gitlab.example.com/api/v4"
PROJECT = f"{API}/projects/owner%2Frepo"
PERMISSIONS = {"id": 1, "permissions": {"project_access": {"access_level": 30}}}


@pytest.mark.asyncio
async def test_publish_verifies_once(mock_api, context):
    project = mock_api.get(PROJECT).mock(return_value=httpx.Response(200, json=PERMISSIONS))
    mock_api.post(f"{PROJECT}/releases").mock(return_value=httpx.Response(201, json={}))
    plugin = GitLabPlugin()

    await plugin.publish({}, context)
    await plugin.publish({}, context)

    assert plugin.state.verified
    assert project.call_count == 1


@pytest.mark.asyncio
async def test_verified_state_skips_verification(mock_api, context):
    project = mock_api.get(PROJECT)
    mock_api.post(f"{PROJECT}/releases").mock(return_value=httpx.Response(201, json={}))

    result = await semrel_gitlab.publish({}, context, VerificationState(verified=True))

    assert result["name"] == "GitLab release"
    assert not project.called


@pytest.mark.asyncio
async def test_failed_verification_keeps_state(mock_api, context_factory):
    context = context_factory(env={"GL_URL": "https://gitlab.example.com"})
    state = VerificationState()

    with pytest.raises(AggregateError):
        await semrel_gitlab.verify_conditions({}, context, state)

    assert not state.verified
    assert not mock_api.calls


@pytest.mark.asyncio
async def test_accepts_mapping_context(mock_api):
    mock_api.get(PROJECT).mock(return_value=httpx.Response(200, json=PERMISSIONS))
    state = VerificationState()
    await semrel_gitlab.verify_conditions(
        {},
        {
            "options": {"repository_url": "https://gitlab.example.com/owner/repo.git"},
            "env": {"GL_TOKEN": "t", "GL_URL": "https://gitlab.example.com"},
            "env_ci": {"service": None},
        },
        state,
    )
    assert state.verified
