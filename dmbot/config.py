import logging
import os
import sys
from dataclasses import dataclass

import dotenv

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class ConfigError(Exception):
    pass


def _default_db_path() -> str:
    program_dir = os.path.dirname(os.path.abspath(sys.argv[0]))
    return os.path.join(program_dir, "dmbot.db")


def _log_level() -> str:
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    if level not in _LOG_LEVELS:
        logger.warning("Unknown LOG_LEVEL %r, using INFO", level)
        return "INFO"
    return level


@dataclass(frozen=True)
class Settings:
    token: str
    command_prefix: str = "!"
    db_path: str = ""
    ffmpeg_executable: str = "ffmpeg"
    log_level: str = "INFO"


def load_settings() -> Settings:
    """
    Reads settings from the environment, after loading a .env file if present
    :return: the settings
    :raises ConfigError: if the bot token is missing
    """
    dotenv.load_dotenv()
    token = os.getenv("DMBOT_TOKEN")
    if not token:
        raise ConfigError("Expected a token in the environment (DMBOT_TOKEN)")
    return Settings(
        token=token,
        command_prefix=os.getenv("DMBOT_PREFIX", "!"),
        db_path=os.getenv("DMBOT_DB_PATH") or _default_db_path(),
        ffmpeg_executable=os.getenv("DMBOT_FFMPEG", "ffmpeg"),
        log_level=_log_level(),
    )
