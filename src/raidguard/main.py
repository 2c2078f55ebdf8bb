"""
RaidGuard Discord Bot
=====================

A Discord bot that assigns a role to every member of a server on demand and
guards servers against raids: it kicks bots and freshly created accounts on
join, and bans whoever deletes channels, creates channels, or deletes roles
while the matching protection is on.
"""

import os
import sys
from pathlib import Path

def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. RAIDGUARD_HOME environment variable, if set.
    2. If running in a frozen/compiled context (e.g., PyInstaller, Nuitka), use the executable's directory.
    3. Otherwise, assume running from source and use the grandparent of this file's directory.
    """
    if env_home := os.getenv("RAIDGUARD_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]

BASE_DIR = resolve_base_dir()
os.chdir(BASE_DIR)

import asyncio
import discord
from dotenv import load_dotenv

from raidguard.configuration.app_configuration import app_config
from raidguard.configuration.guild_settings import GuildSettingsManager
from raidguard.configuration.settings_store import SettingsFileError, SettingsStore
from raidguard.util.logger import get_logger, handle_exception


logger = get_logger("main")


def load_environment() -> str:
    """Load environment variables and return the Discord bot token.

    Returns
    -------
    str
        Discord bot token extracted from the loaded environment.

    Raises
    ------
    SystemExit
        If the required ``DISCORD_BOT_TOKEN`` variable is missing.
    """
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        logger.critical("'DISCORD_BOT_TOKEN' environment variable not set. Bot cannot start.")
        sys.exit(1)
    return token


def build_intents() -> discord.Intents:
    """Construct the Discord intents the protections rely on.

    Returns
    -------
    discord.Intents
        Intents enabling guild structure and member events.
    """
    intents = discord.Intents.default()
    intents.guilds = True
    intents.members = True
    return intents


def load_settings_manager() -> GuildSettingsManager:
    """Create the guild settings manager and load the persisted settings.

    Raises
    ------
    SettingsFileError
        If the settings file exists but cannot be parsed.
    """
    manager = GuildSettingsManager(SettingsStore(app_config.settings_path))
    manager.load_from_disk()
    return manager


def load_cogs(discord_bot_instance: discord.Bot, settings_manager: GuildSettingsManager) -> None:
    """Register all operational cogs with the provided Discord bot instance.

    Parameters
    ----------
    discord_bot_instance:
        Py-Cord bot object that should receive the RaidGuard cogs.
    settings_manager:
        Shared per-guild settings handed to every cog.
    """
    from raidguard.bot.cogs import antiraid_cmds, events_listener, protection_listener, role_cmds

    events_listener.setup(discord_bot_instance)
    protection_listener.setup(discord_bot_instance, settings_manager)
    antiraid_cmds.setup(discord_bot_instance, settings_manager)
    role_cmds.setup(discord_bot_instance, settings_manager)

    logger.info("All cogs loaded successfully.")


def create_bot(settings_manager: GuildSettingsManager) -> discord.Bot:
    """Instantiate the Discord bot and register all cogs."""
    bot = discord.Bot(intents=build_intents())
    load_cogs(bot, settings_manager)
    return bot


async def start_bot(bot: discord.Bot, token: str) -> None:
    """Start the Discord bot and handle lifecycle logging around the connection.

    Parameters
    ----------
    bot:
        Discord client to start.
    token:
        Authentication token used to connect to Discord.
    """
    logger.info("Attempting to connect to Discord…")
    try:
        await bot.start(token)
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    finally:
        logger.info("Discord bot start routine finished.")


async def shutdown_runtime(bot: discord.Bot | None = None) -> None:
    """Close the Discord connection if it is still open."""
    if bot is not None and not bot.is_closed():
        try:
            await bot.close()
            logger.info("Discord bot connection closed.")
        except Exception as exc:
            logger.exception("Error while closing Discord bot: %s", exc)

    logger.info("Shutdown complete.")


async def async_main() -> int:
    """Bootstrap settings and the bot, returning an exit code.

    Returns
    -------
    int
        Process exit code reflecting success or failure of initialization.
    """
    token = load_environment()

    try:
        logger.info("Loading guild settings from %s...", app_config.settings_path)
        settings_manager = load_settings_manager()
    except SettingsFileError as exc:
        logger.critical("Failed to load guild settings: %s", exc)
        return 1

    try:
        bot = create_bot(settings_manager)
    except Exception as exc:
        logger.critical("Failed to initialize Discord bot: %s", exc)
        return 1

    exit_code = 0
    try:
        await start_bot(bot, token)
    except Exception as exc:
        logger.critical("Discord bot runtime error: %s", exc)
        exit_code = 1
    finally:
        await shutdown_runtime(bot)

    return exit_code


def main() -> int:
    """Entrypoint that orchestrates the async runtime and returns the process code.

    Returns
    -------
    int
        Exit code propagated to the operating system.
    """
    logger.info("Starting RaidGuard…")
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0
    except SystemExit as exit_exc:
        code = exit_exc.code
        if isinstance(code, int):
            return code
        return 1
    except Exception as exc:
        logger.critical("An unexpected error occurred while running the bot: %s", exc)
        return 1


if __name__ == "__main__":
    sys.excepthook = handle_exception
    sys.exit(main())
