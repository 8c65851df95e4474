"""
jobwatch Discord bot
====================

Listens to guild messages, asks a language model whether each one is a job
post or recruitment pitch, and posts a report to the guild's moderation
channel when it is.
"""

import os
import sys
import asyncio
import discord
from dotenv import load_dotenv

from jobwatch.ai.model_client import ModelHandle, load_model
from jobwatch.cog import message_listener
from jobwatch.configuration.app_configuration import BASE_DIR, AppConfig, ConfigurationError, load_app_config
from jobwatch.configuration.moderation_settings import ModerationConfig
from jobwatch.moderation.handler import ModerationHandler
from jobwatch.util.logger import get_logger, handle_exception


logger = get_logger("main")


def load_environment() -> str:
    """Load environment variables and return the Discord bot token.

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
    """Intents for reading guild message events and their content."""
    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    intents.guild_messages = True
    intents.guild_reactions = True
    return intents


def create_model(app_config: AppConfig) -> ModelHandle:
    ai_settings = app_config.ai_settings
    return load_model(
        ai_settings.model_id,
        ai_settings.api_key_env,
        base_url=ai_settings.base_url,
        request_timeout=ai_settings.request_timeout_seconds,
        serialize_requests=ai_settings.serialize_requests,
    )


def create_bot(handler: ModerationHandler) -> discord.Bot:
    """Instantiate the Discord bot and register the message listener."""
    bot = discord.Bot(intents=build_intents())
    message_listener.setup(bot, handler)
    return bot


async def start_bot(bot: discord.Bot, token: str) -> None:
    logger.info("Attempting to connect to Discord…")
    try:
        await bot.start(token)
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    finally:
        logger.info("Discord bot start routine finished.")


async def shutdown_runtime(bot: discord.Bot | None, model: ModelHandle | None) -> None:
    """Close the Discord connection and the model client."""
    if bot is not None and not bot.is_closed():
        try:
            await bot.close()
        except Exception as exc:
            logger.exception("Error while closing Discord bot: %s", exc)

    if model is not None:
        try:
            await model.close()
        except Exception as exc:
            logger.exception("Error while closing model client: %s", exc)

    logger.info("Shutdown complete.")


async def async_main() -> int:
    """Bootstrap configuration, model and bot, returning an exit code."""
    token = load_environment()

    try:
        app_config = load_app_config()
        moderation_config = ModerationConfig.from_app_config(app_config)
        model = create_model(app_config)
    except ConfigurationError as exc:
        logger.critical("Invalid configuration: %s", exc)
        return 1

    logger.info(
        "Moderating %d communities; reporting as self id %s",
        len(moderation_config.channel_mapping),
        moderation_config.self_user_id,
    )

    bot = None
    exit_code = 0
    try:
        bot = create_bot(ModerationHandler(model, moderation_config))
        await start_bot(bot, token)
    except Exception as exc:
        logger.critical("Discord bot runtime error: %s", exc)
        exit_code = 1
    finally:
        await shutdown_runtime(bot, model)

    return exit_code


def main() -> int:
    """Entrypoint that runs the async runtime and returns the process code."""
    sys.excepthook = handle_exception
    logger.info("Starting jobwatch…")
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


if __name__ == "__main__":
    sys.exit(main())
