"""Tests for the fail step."""

from __future__ import annotations

import json
import logging

import httpx
import pytest

from semrel_gitlab.comments import get_fail_comment
from semrel_gitlab.constants import DEFAULT_FAIL_TITLE
from semrel_gitlab.errors import get_error
from semrel_gitlab.fail import fail

API = "https://gitlab.example.com/api/v4"
PROJECT = f"{API}/projects/owner%2Frepo"


def _issue(iid, title=DEFAULT_FAIL_TITLE):
    return {
        "id": iid + 1000,
        "iid": iid,
        "project_id": 100,
        "title": title,
        "state": "opened",
        "web_url": f"https://gitlab.example.com/owner/repo/-/issues/{iid}",
    }


@pytest.fixture
def fail_context(context_factory):
    return context_factory(errors=[get_error("ENOGLTOKEN", repository_url="owner/repo")])


@pytest.mark.asyncio
async def test_creates_issue(mock_api, fail_context):
    search = mock_api.get(f"{PROJECT}/issues").mock(return_value=httpx.Response(200, json=[]))
    create = mock_api.post(f"{PROJECT}/issues").mock(
        return_value=httpx.Response(201, json=_issue(3))
    )

    await fail({"assignee": "7"}, fail_context)

    params = search.calls.last.request.url.params
    assert params["state"] == "opened"
    assert params["search"] == DEFAULT_FAIL_TITLE
    body = json.loads(create.calls.last.request.content)
    assert body["title"] == DEFAULT_FAIL_TITLE
    assert body["labels"] == "semantic-release"
    assert body["assignee_id"] == "7"
    assert "No GitLab token specified." in body["description"]
    assert "`main` branch failed" in body["description"]


@pytest.mark.asyncio
async def test_comments_on_existing_issue(mock_api, fail_context):
    mock_api.get(f"{PROJECT}/issues").mock(
        return_value=httpx.Response(200, json=[_issue(1, "Other"), _issue(2)])
    )
    create = mock_api.post(f"{PROJECT}/issues")
    note = mock_api.post(f"{API}/projects/100/issues/2/notes").mock(
        return_value=httpx.Response(201, json={})
    )

    await fail({}, fail_context)

    assert note.called
    assert not create.called


@pytest.mark.asyncio
async def test_custom_title_comment_and_no_labels(mock_api, fail_context):
    mock_api.get(f"{PROJECT}/issues").mock(return_value=httpx.Response(200, json=[]))
    create = mock_api.post(f"{PROJECT}/issues").mock(
        return_value=httpx.Response(201, json=_issue(3, "Release on main failed"))
    )

    await fail(
        {
            "fail_title": "Release on {{ branch.name }} failed",
            "fail_comment": "{{ errors | length }} error(s) on {{ branch.name }}",
            "labels": False,
        },
        fail_context,
    )

    body = json.loads(create.calls.last.request.content)
    assert body == {"title": "Release on main failed", "description": "1 error(s) on main"}


@pytest.mark.asyncio
async def test_condition_sees_existing_issue(mock_api, fail_context):
    mock_api.get(f"{PROJECT}/issues").mock(return_value=httpx.Response(200, json=[_issue(2)]))
    note = mock_api.post(f"{API}/projects/100/issues/2/notes")

    await fail({"fail_comment_condition": "not issue"}, fail_context)

    assert not note.called


@pytest.mark.asyncio
async def test_condition_false_skips(mock_api, fail_context):
    await fail({"fail_comment_condition": False}, fail_context)
    assert not mock_api.calls


@pytest.mark.asyncio
@pytest.mark.parametrize("plugin_config", [{"fail_title": False}, {"fail_comment": False}])
async def test_deprecated_disable(mock_api, fail_context, plugin_config, caplog):
    with caplog.at_level(logging.WARNING):
        await fail(plugin_config, fail_context)
    assert not mock_api.calls
    assert "deprecated" in caplog.text


def test_default_fail_comment_lists_errors():
    errors = [
        get_error("EINVALIDGLTOKEN", project_path="a/b"),
        {"message": "Plain", "details": None},
    ]
    comment = get_fail_comment({"name": "next"}, errors)
    assert "### Invalid GitLab token." in comment
    assert "### Plain" in comment
    assert "doesn't have any additional information" in comment
    assert "`next` branch" in comment


@pytest.mark.asyncio
async def test_condition_sees_every_api_field(mock_api, fail_context):
    assigned = {**_issue(2), "assignees": [{"username": "bot"}]}
    mock_api.get(f"{PROJECT}/issues").mock(return_value=httpx.Response(200, json=[assigned]))
    note = mock_api.post(f"{API}/projects/100/issues/2/notes").mock(
        return_value=httpx.Response(201, json={})
    )

    await fail(
        {"fail_comment_condition": "issue and issue.assignees[0].username == 'bot'"},
        fail_context,
    )

    assert note.called
