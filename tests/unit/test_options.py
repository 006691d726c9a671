"""Tests for plugin option validation."""

from __future__ import annotations

import pytest

from semrel_gitlab.options import (
    OPTIONS,
    get_option_definition,
    validate_option,
    validate_options,
)


def test_table_names():
    assert [option.name for option in OPTIONS] == [
        "assets",
        "fail_title",
        "fail_comment",
        "labels",
        "assignee",
    ]
    assert get_option_definition("labels").error_code == "LABELS"
    assert get_option_definition("gitlab_url") is None


@pytest.mark.parametrize(
    "value",
    [
        ["file.js"],
        [["dist/*.js", "!dist/*.map"]],
        [{"path": "file.js"}],
        [{"path": ["a", "b"], "label": "x"}],
        [{"url": "https://example.com/file"}],
        [],
    ],
)
def test_valid_assets(value):
    assert validate_option("assets", value)


@pytest.mark.parametrize(
    "value",
    [
        "file.js",
        [42],
        [""],
        [{"label": "no path"}],
        [{"path": ""}],
        [{"url": ""}],
        [["a", 1]],
    ],
)
def test_invalid_assets(value):
    assert not validate_option("assets", value)


@pytest.mark.parametrize("name", ["fail_title", "fail_comment", "labels"])
def test_can_be_disabled(name):
    assert validate_option(name, False)
    assert validate_option(name, "text")
    assert not validate_option(name, "  ")
    assert not validate_option(name, True)
    assert not validate_option(name, 1)


def test_assignee():
    assert validate_option("assignee", "7")
    assert not validate_option("assignee", False)
    assert not validate_option("assignee", "")


def test_unset_and_unknown_are_valid():
    assert validate_option("assets", None)
    assert validate_option("unknown", object())


def test_validate_options_collects_errors():
    errors = validate_options(
        {"assets": [42], "labels": "", "fail_title": "ok", "gitlab_url": 3, "assignee": None}
    )
    assert [e.code for e in errors] == ["EINVALIDASSETS", "EINVALIDLABELS"]
