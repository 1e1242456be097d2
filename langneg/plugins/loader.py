"""
Plugin Loader

Handles reading/writing plugin configuration and registering the
built-in plugins at application startup.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from langneg.config import settings

if TYPE_CHECKING:
    from langneg.plugins.registry import PluginRegistry

logger = logging.getLogger(__name__)

# ── Default plugin config (all built-in plugins enabled) ─────────────────────
_DEFAULT_CONFIG: dict[str, dict[str, Any]] = {
    "locale": {"enabled": True, "browser_detection": True},
}


def _config_file() -> Path:
    return Path(settings.plugins_config_file)


# ── Config I/O ────────────────────────────────────────────────────────────────


def load_plugins_config() -> dict[str, dict[str, Any]]:
    """
    Load plugin configuration from disk.

    Returns defaults if the file does not exist or cannot be parsed.
    """
    config_file = _config_file()
    if config_file.exists():
        try:
            return json.loads(config_file.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Failed to read plugins config: %s", exc)
    return copy.deepcopy(_DEFAULT_CONFIG)


def save_plugins_config(config: dict[str, dict[str, Any]]) -> None:
    """Persist plugin configuration to disk."""
    config_file = _config_file()
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(
        json.dumps(config, indent=2, ensure_ascii=False),
        encoding="utf-8",
    )


# ── Startup initialisation ────────────────────────────────────────────────────


async def initialize_plugins(registry: PluginRegistry) -> None:
    """
    Load and register every enabled built-in plugin.

    Called from the application lifespan before the negotiator is rebuilt.
    """
    from langneg.plugins.locale_plugin import LocalePlugin

    config = load_plugins_config()

    loaded = 0
    for plugin_class in [LocalePlugin]:
        plugin = plugin_class()
        plugin_config = config.get(plugin.meta.name, {})
        if not plugin_config.get("enabled", True):
            logger.info("Plugin disabled by config: %s", plugin.meta.name)
            continue
        await plugin.on_load(plugin_config)
        registry.register(plugin)
        loaded += 1

    logger.info("Plugin initialisation complete: %d plugins loaded", loaded)


async def shutdown_plugins(registry: PluginRegistry) -> None:
    for plugin in registry.all_plugins():
        await plugin.on_unload()
