import logging
import typing

import discord

from .commands import CommandRouter
from .config import Settings
from .music_player import MusicPlayer, Youtube
from .song_registry import SongRegistry

logger = logging.getLogger(__name__)


class DMBot(discord.Client):
    def __init__(self, settings: Settings, registry: SongRegistry):
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(intents=intents)
        self.settings = settings
        self.registry = registry
        self.music_players: dict[int, MusicPlayer] = {}
        self.commands = CommandRouter(
            registry,
            Youtube(),
            self.get_music_player,
            prefix=settings.command_prefix,
        )

    def get_music_player(
        self, guild: discord.Guild, create: bool = False
    ) -> typing.Optional[MusicPlayer]:
        player = self.music_players.get(guild.id)
        if player is None and create:
            player = MusicPlayer(ffmpeg_executable=self.settings.ffmpeg_executable)
            self.music_players[guild.id] = player
        return player

    async def on_ready(self):
        logger.info("Logged in as %s", self.user)

    async def on_message(self, message: discord.Message):
        if message.author == self.user:
            return
        await self.commands.received_message(message)

    async def close(self):
        for player in self.music_players.values():
            await player.leave()
        self.registry.close()
        await super().close()
