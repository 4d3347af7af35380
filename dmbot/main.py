import logging
import sys

from . import config
from .bot import DMBot
from .song_registry import SongRegistry

logger = logging.getLogger(__name__)


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    try:
        settings = config.load_settings()
    except config.ConfigError as e:
        logger.critical("%s", e)
        sys.exit(1)
    logging.getLogger().setLevel(settings.log_level)

    registry = SongRegistry(settings.db_path)
    dm_bot = DMBot(settings, registry)
    try:
        dm_bot.run(settings.token, log_handler=None)
    except KeyboardInterrupt:
        logger.info("bot quitting")
