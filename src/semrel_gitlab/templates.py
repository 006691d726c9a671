"""User-supplied templates and conditions.

Comments, titles and asset fields are Jinja templates; conditions are Jinja
expressions. Both run in a sandbox, so configuration cannot reach Python
internals.
"""

from __future__ import annotations

import functools
from collections.abc import Mapping
from typing import Any

from jinja2.sandbox import SandboxedEnvironment

_environment = SandboxedEnvironment(keep_trailing_newline=True, autoescape=False)


@functools.lru_cache(maxsize=128)
def _compile_template(source: str):
    return _environment.from_string(source)


@functools.lru_cache(maxsize=128)
def _compile_expression(source: str):
    return _environment.compile_expression(source)


def render(source: str, variables: Mapping[str, Any]) -> str:
    """Render *source* with *variables*."""
    return _compile_template(source).render(**variables)


def render_optional(source: str | None, variables: Mapping[str, Any]) -> str | None:
    if not source:
        return None
    return render(source, variables)


def evaluate_condition(condition: str | bool | None, variables: Mapping[str, Any]) -> bool:
    """Evaluate a condition; unset means true.

    ``"not issue"`` and ``"{{ not issue }}"`` are equivalent.
    """
    if condition is None:
        return True
    if isinstance(condition, bool):
        return condition
    expression = condition.strip()
    if expression.startswith("{{") and expression.endswith("}}"):
        expression = expression[2:-2].strip()
    return bool(_compile_expression(expression)(**variables))
