"""Cross-platform command and component dispatch for chat bots."""

from __future__ import annotations

from .app import CrossBuild
from .components import Component
from .config import CrossBuildConfig, load_config
from .dispatch import DispatchOutcome, Dispatcher, no_preconditions
from .errors import (
    ComponentLoadError,
    ConfigError,
    CrossBuildError,
    MissingOptionError,
    OptionValidationError,
    SyncError,
)
from .messages import MessagePayload, error_message, render_plain
from .options import OptionSpec, OptionsHandler
from .registry import ComponentRegistry, ModuleSource, StaticSource
from .sync import CommandSynchronizer, DiscordCommandCatalog, to_discord_command
from .types import (
    ChannelInfo,
    DiscordInteraction,
    GuildedInteraction,
    ReceivedInteraction,
    ServerInfo,
    UserInfo,
)
from .usage import UsageTracker

__all__ = [
    "ChannelInfo",
    "CommandSynchronizer",
    "Component",
    "ComponentLoadError",
    "ComponentRegistry",
    "ConfigError",
    "CrossBuild",
    "CrossBuildConfig",
    "CrossBuildError",
    "DiscordCommandCatalog",
    "DiscordInteraction",
    "DispatchOutcome",
    "Dispatcher",
    "GuildedInteraction",
    "MessagePayload",
    "MissingOptionError",
    "ModuleSource",
    "OptionSpec",
    "OptionValidationError",
    "OptionsHandler",
    "ReceivedInteraction",
    "ServerInfo",
    "StaticSource",
    "SyncError",
    "UsageTracker",
    "UserInfo",
    "error_message",
    "load_config",
    "no_preconditions",
    "render_plain",
    "to_discord_command",
]
