"""Resolve, check, validate and run one interaction."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Literal

from .components import Component
from .logging import get_logger
from .messages import MessagePayload, error_message
from .options import OptionsHandler
from .registry import ComponentRegistry
from .types import ReceivedInteraction
from .usage import UsageTracker

logger = get_logger("crossbuild.dispatch")

DispatchOutcome = Literal["ignored", "rejected", "succeeded", "failed"]

PreconditionCheck = Callable[
    [ReceivedInteraction, Component], Awaitable[MessagePayload | None]
]

DEFAULT_RESERVED_PREFIX = "x-"


async def no_preconditions(
    interaction: ReceivedInteraction, component: Component
) -> MessagePayload | None:
    return None


class Dispatcher:
    def __init__(
        self,
        registry: ComponentRegistry,
        *,
        usage: UsageTracker | None = None,
        support_server: str | None = None,
        checks: PreconditionCheck = no_preconditions,
        gate_preconditions: bool = False,
        reserved_prefix: str = DEFAULT_RESERVED_PREFIX,
    ) -> None:
        self.registry = registry
        self.usage = usage if usage is not None else UsageTracker()
        self.support_server = support_server
        self.checks = checks
        self.gate_preconditions = gate_preconditions
        self.reserved_prefix = reserved_prefix

    def resolve(self, interaction: ReceivedInteraction) -> Component | None:
        if (
            self.reserved_prefix
            and interaction.is_platform_component()
            and interaction.key.startswith(self.reserved_prefix)
        ):
            logger.debug(
                "crossbuild.dispatch.reserved_key",
                type=interaction.type,
                key=interaction.key,
                source=interaction.source,
            )
            return None
        component = self.registry.get(interaction.type, interaction.key)
        if component is None:
            logger.warning(
                "crossbuild.dispatch.unknown_component",
                type=interaction.type,
                key=interaction.key,
                source=interaction.source,
            )
        return component

    async def dispatch(self, interaction: ReceivedInteraction) -> DispatchOutcome:
        """Run the full pipeline for one interaction.

        Faults raised by ``Component.validate`` or ``Component.run`` are
        contained here and turned into a generic error reply; the outcome is
        ``"failed"``.
        """
        component = self.resolve(interaction)
        if component is None:
            return "ignored"

        options = OptionsHandler(interaction.raw_options or {}, component.options)

        precondition = await self._run_checks(interaction, component)
        if precondition is not None and self.gate_preconditions:
            logger.info(
                "crossbuild.dispatch.precondition_rejected",
                type=component.type,
                key=component.key,
                user_id=interaction.user.id,
            )
            await self._safe_reply(interaction, precondition)
            return "rejected"

        try:
            rejection = await component.validate(interaction, options)
        except Exception:
            logger.exception(
                "crossbuild.dispatch.validate_failed",
                type=component.type,
                key=component.key,
                source=interaction.source,
                user_id=interaction.user.id,
            )
            await self._reply_failure(interaction, component)
            return "failed"
        if rejection is not None:
            logger.info(
                "crossbuild.dispatch.rejected",
                type=component.type,
                key=component.key,
                user_id=interaction.user.id,
            )
            await self._safe_reply(interaction, rejection)
            return "rejected"

        return await self._run(component, interaction, options)

    async def _run_checks(
        self, interaction: ReceivedInteraction, component: Component
    ) -> MessagePayload | None:
        try:
            return await self.checks(interaction, component)
        except Exception:
            logger.exception(
                "crossbuild.dispatch.precondition_error",
                type=component.type,
                key=component.key,
            )
            return None

    async def _run(
        self,
        component: Component,
        interaction: ReceivedInteraction,
        options: OptionsHandler,
    ) -> DispatchOutcome:
        self.usage.mark(interaction.user.id)
        try:
            await component.run(interaction, options)
        except Exception:
            logger.exception(
                "crossbuild.dispatch.run_failed",
                type=component.type,
                key=component.key,
                source=interaction.source,
                user_id=interaction.user.id,
            )
            await self._reply_failure(interaction, component)
            return "failed"
        return "succeeded"

    async def _reply_failure(
        self, interaction: ReceivedInteraction, component: Component
    ) -> None:
        await self._safe_reply(
            interaction,
            error_message(
                component_type=component.type,
                support_server=self.support_server,
            ),
        )

    async def _safe_reply(
        self, interaction: ReceivedInteraction, message: MessagePayload
    ) -> None:
        try:
            await interaction.reply(message)
        except Exception as exc:
            logger.warning(
                "crossbuild.dispatch.reply_failed",
                key=interaction.key,
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
