"""Tests for the success step."""

from __future__ import annotations

import json

import httpx
import pytest

from semrel_gitlab.comments import get_success_comment
from semrel_gitlab.exceptions import GitLabApiError
from semrel_gitlab.success import success

API = "https://gitlab.example.com/api/v4"
PROJECT = f"{API}/projects/owner%2Frepo"


def _mr(iid, state="merged", project_id=100):
    return {"id": iid, "iid": iid, "project_id": project_id, "state": state, "title": f"MR {iid}"}


def _issue(iid, state="closed", project_id=100):
    return {"id": iid, "iid": iid, "project_id": project_id, "state": state, "title": f"#{iid}"}


@pytest.fixture
def success_context(context_factory):
    return context_factory(
        commits=[{"hash": "abc"}, {"hash": "def"}],
        releases=[{"name": "GitLab release", "url": "https://gitlab.example.com/r"}, {"url": "x"}],
    )


@pytest.mark.asyncio
async def test_comments_on_merged_mrs_and_closed_issues(mock_api, success_context):
    mock_api.get(f"{PROJECT}/repository/commits/abc/merge_requests").mock(
        return_value=httpx.Response(200, json=[_mr(1), _mr(2, state="opened")])
    )
    mock_api.get(f"{PROJECT}/repository/commits/def/merge_requests").mock(
        return_value=httpx.Response(200, json=[_mr(1)])
    )
    closes = mock_api.get(f"{API}/projects/100/merge_requests/1/closes_issues").mock(
        return_value=httpx.Response(200, json=[_issue(3), _issue(4, state="opened")])
    )
    issue_note = mock_api.post(f"{API}/projects/100/issues/3/notes").mock(
        return_value=httpx.Response(201, json={})
    )
    mr_note = mock_api.post(f"{API}/projects/100/merge_requests/1/notes").mock(
        return_value=httpx.Response(201, json={})
    )
    opened_note = mock_api.post(f"{API}/projects/100/merge_requests/2/notes")

    await success({}, success_context)

    assert closes.call_count == 1
    assert issue_note.call_count == 1
    assert mr_note.call_count == 1
    assert not opened_note.called
    body = json.loads(mr_note.calls.last.request.content)["body"]
    assert "This MR is included in version 1.0.0" in body
    assert "[GitLab release](https://gitlab.example.com/r)" in body
    issue_body = json.loads(issue_note.calls.last.request.content)["body"]
    assert "This issue has been resolved in version 1.0.0" in issue_body


@pytest.mark.asyncio
async def test_custom_comment_and_condition(mock_api, success_context):
    mock_api.get(f"{PROJECT}/repository/commits/abc/merge_requests").mock(
        return_value=httpx.Response(200, json=[_mr(1)])
    )
    mock_api.get(f"{PROJECT}/repository/commits/def/merge_requests").mock(
        return_value=httpx.Response(200, json=[])
    )
    mock_api.get(f"{API}/projects/100/merge_requests/1/closes_issues").mock(
        return_value=httpx.Response(200, json=[_issue(3)])
    )
    issue_note = mock_api.post(f"{API}/projects/100/issues/3/notes")
    mr_note = mock_api.post(f"{API}/projects/100/merge_requests/1/notes").mock(
        return_value=httpx.Response(201, json={})
    )

    await success(
        {
            "success_comment": "Released in {{ next_release.version }} for !{{ merge_request.iid }}",
            "success_comment_condition": "not issue",
        },
        success_context,
    )

    assert not issue_note.called
    assert json.loads(mr_note.calls.last.request.content) == {"body": "Released in 1.0.0 for !1"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "plugin_config",
    [{"success_comment": False}, {"success_comment_condition": False}],
)
async def test_disabled(mock_api, success_context, plugin_config):
    await success(plugin_config, success_context)
    assert not mock_api.calls


@pytest.mark.asyncio
async def test_errors_are_raised(mock_api, success_context):
    mock_api.get(f"{PROJECT}/repository/commits/abc/merge_requests").mock(
        return_value=httpx.Response(400, text="bad")
    )
    mock_api.get(f"{PROJECT}/repository/commits/def/merge_requests").mock(
        return_value=httpx.Response(200, json=[])
    )
    with pytest.raises(GitLabApiError):
        await success({}, success_context)


def test_default_comment_links():
    releases = [{"name": "A", "url": "https://a"}, {"name": "B"}]
    comment = get_success_comment({"version": "2.0.0"}, releases, is_merge_request=False)
    assert comment.startswith(":tada: This issue has been resolved in version 2.0.0 :tada:")
    assert "- [A](https://a)" in comment
    assert "- `B`" in comment


@pytest.mark.asyncio
async def test_templates_see_every_api_field(mock_api, success_context):
    labelled = {**_mr(1), "labels": ["release"], "author": {"username": "dev"}}
    mock_api.get(f"{PROJECT}/repository/commits/abc/merge_requests").mock(
        return_value=httpx.Response(200, json=[labelled, _mr(2)])
    )
    mock_api.get(f"{PROJECT}/repository/commits/def/merge_requests").mock(
        return_value=httpx.Response(200, json=[])
    )
    mock_api.get(url__regex=rf"{API}/projects/100/merge_requests/\d+/closes_issues").mock(
        return_value=httpx.Response(200, json=[])
    )
    labelled_note = mock_api.post(f"{API}/projects/100/merge_requests/1/notes").mock(
        return_value=httpx.Response(201, json={})
    )
    other_note = mock_api.post(f"{API}/projects/100/merge_requests/2/notes")

    await success(
        {
            "success_comment": "Thanks @{{ merge_request.author.username }}",
            "success_comment_condition": "'release' in merge_request.get('labels', [])",
        },
        success_context,
    )

    assert json.loads(labelled_note.calls.last.request.content) == {"body": "Thanks @dev"}
    assert not other_note.called
