"""Plugin option validators."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from .errors import get_error
from .exceptions import SemanticReleaseError

Validator = Callable[[Any], bool]


def is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def is_string_or_string_list(value: Any) -> bool:
    if is_non_empty_string(value):
        return True
    return isinstance(value, list) and all(is_non_empty_string(item) for item in value)


def is_list_of(validator: Validator) -> Validator:
    def check(value: Any) -> bool:
        return isinstance(value, list) and all(validator(item) for item in value)

    return check


def can_be_disabled(validator: Validator) -> Validator:
    def check(value: Any) -> bool:
        return value is False or validator(value)

    return check


def is_valid_asset(asset: Any) -> bool:
    if is_string_or_string_list(asset):
        return True
    if isinstance(asset, Mapping):
        return is_non_empty_string(asset.get("url")) or is_string_or_string_list(asset.get("path"))
    return False


@dataclass(frozen=True)
class OptionDefinition:
    name: str
    validate: Validator
    error_code: str
    description: str = ""


OPTIONS: tuple[OptionDefinition, ...] = (
    OptionDefinition(
        "assets",
        is_list_of(is_valid_asset),
        "ASSETS",
        "Asset globs, links or objects to attach to the release",
    ),
    OptionDefinition(
        "fail_title",
        can_be_disabled(is_non_empty_string),
        "FAILTITLE",
        "Title of the failure issue, False disables it",
    ),
    OptionDefinition(
        "fail_comment",
        can_be_disabled(is_non_empty_string),
        "FAILCOMMENT",
        "Body of the failure issue, False disables it",
    ),
    OptionDefinition(
        "labels",
        can_be_disabled(is_non_empty_string),
        "LABELS",
        "Labels of the failure issue, False disables them",
    ),
    OptionDefinition("assignee", is_non_empty_string, "ASSIGNEE", "Assignee of the failure issue"),
)

_OPTIONS_BY_NAME = {option.name: option for option in OPTIONS}


def get_option_definition(name: str) -> OptionDefinition | None:
    return _OPTIONS_BY_NAME.get(name)


def validate_option(name: str, value: Any) -> bool:
    """Return whether *value* is acceptable for option *name*.

    Unset values and options without a validator are always accepted.
    """
    option = get_option_definition(name)
    if option is None or value is None:
        return True
    return option.validate(value)


def validate_options(options: Mapping[str, Any]) -> list[SemanticReleaseError]:
    """Validate every option in *options* and return one error per invalid option."""
    errors = []
    for name, value in options.items():
        if validate_option(name, value):
            continue
        option = get_option_definition(name)
        if option is not None:
            errors.append(get_error(f"EINVALID{option.error_code}", **{name: value}))
    return errors
