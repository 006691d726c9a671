"""Plugin entry points called by the release tool."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from . import fail as fail_step
from . import publish as publish_step
from . import success as success_step
from . import verify as verify_step
from .context import Context, as_context


@dataclass
class VerificationState:
    """Whether ``verify_conditions`` has succeeded for this plugin instance."""

    verified: bool = False


class GitLabPlugin:
    """The four release steps sharing one :class:`VerificationState`.

    ``publish``, ``success`` and ``fail`` verify first when that has not
    happened yet, so a host that skips ``verify_conditions`` still gets the
    same checks.
    """

    def __init__(self, state: VerificationState | None = None) -> None:
        self.state = state or VerificationState()

    async def _ensure_verified(self, plugin_config: Mapping[str, Any], context: Context) -> None:
        if not self.state.verified:
            await self.verify_conditions(plugin_config, context)

    async def verify_conditions(
        self, plugin_config: Mapping[str, Any], context: Context | Mapping[str, Any]
    ) -> None:
        await verify_step.verify(plugin_config, as_context(context))
        self.state.verified = True

    async def publish(
        self, plugin_config: Mapping[str, Any], context: Context | Mapping[str, Any]
    ) -> dict[str, str]:
        context = as_context(context)
        await self._ensure_verified(plugin_config, context)
        return await publish_step.publish(plugin_config, context)

    async def success(
        self, plugin_config: Mapping[str, Any], context: Context | Mapping[str, Any]
    ) -> None:
        context = as_context(context)
        await self._ensure_verified(plugin_config, context)
        await success_step.success(plugin_config, context)

    async def fail(
        self, plugin_config: Mapping[str, Any], context: Context | Mapping[str, Any]
    ) -> None:
        context = as_context(context)
        await self._ensure_verified(plugin_config, context)
        await fail_step.fail(plugin_config, context)


_default_plugin = GitLabPlugin()


def _plugin(state: VerificationState | None) -> GitLabPlugin:
    return _default_plugin if state is None else GitLabPlugin(state)


async def verify_conditions(
    plugin_config: Mapping[str, Any],
    context: Context | Mapping[str, Any],
    state: VerificationState | None = None,
) -> None:
    await _plugin(state).verify_conditions(plugin_config, context)


async def publish(
    plugin_config: Mapping[str, Any],
    context: Context | Mapping[str, Any],
    state: VerificationState | None = None,
) -> dict[str, str]:
    return await _plugin(state).publish(plugin_config, context)


async def success(
    plugin_config: Mapping[str, Any],
    context: Context | Mapping[str, Any],
    state: VerificationState | None = None,
) -> None:
    await _plugin(state).success(plugin_config, context)


async def fail(
    plugin_config: Mapping[str, Any],
    context: Context | Mapping[str, Any],
    state: VerificationState | None = None,
) -> None:
    await _plugin(state).fail(plugin_config, context)
