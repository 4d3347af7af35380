import asyncio
import logging
import typing

import discord

from .music_player import MusicPlayer, PlaybackError, Youtube, YoutubeError
from .music_player import youtube
from .song_registry import RegistryError, SongRegistry, resolve

logger = logging.getLogger(__name__)

PlayerLookup = typing.Callable[[discord.Guild, bool], typing.Optional[MusicPlayer]]


async def _send(channel: discord.abc.Messageable, content: str):
    try:
        await channel.send(content)
    except discord.HTTPException as e:
        logger.warning("Error sending message: %s", e)


class CommandRouter:
    """
    Parses prefixed chat commands and hands them to the matching handler
    """

    def __init__(
        self,
        registry: SongRegistry,
        youtube_client: Youtube,
        get_player: PlayerLookup,
        prefix: str = "!",
    ):
        self.registry = registry
        self.youtube = youtube_client
        self.get_player = get_player
        self.prefix = prefix
        self.commands = {
            "play": (self.play, "play <song name or URL>: adds a song to the queue"),
            "register": (
                self.register,
                "register <YouTube URL>: saves a song so it can be played by name",
            ),
            "reg": (self.register, "reg <YouTube URL>: same as register"),
            "skip": (self.skip, "skips the current song"),
            "stop": (self.stop, "stops the current song and clears the queue"),
            "leave": (self.leave, "leaves the voice channel"),
            "help": (self.help, "shows this message"),
        }

    async def received_message(self, message: discord.Message):
        if message.guild is None:
            return
        content = message.content.strip()
        if not content.startswith(self.prefix):
            return
        cmd, _, args = content[len(self.prefix):].partition(" ")
        if cmd not in self.commands:
            return
        logger.info("Running command %s from %s", cmd, message.author)
        await self.commands[cmd][0](message, args.strip())

    async def play(self, message: discord.Message, query: str):
        channel = message.channel
        if len(query) == 0:
            await _send(channel, f"{self.prefix}play <song name or URL>")
            return
        loop = asyncio.get_running_loop()
        resolution = await loop.run_in_executor(None, resolve, self.registry, query)
        if resolution.is_empty:
            await _send(channel, "No videos with a name like this exist")
            return
        if resolution.is_ambiguous:
            titles = ", ".join(title for _, title in resolution.matches)
            await _send(
                channel, f"More than one video was found: {titles}. Be more specific"
            )
            return

        voice = getattr(message.author, "voice", None)
        if not voice or not voice.channel:
            await _send(channel, "Not in a voice channel")
            return
        player = self.get_player(message.guild, True)
        try:
            await player.join(voice.channel)
            song = await self.youtube.get_song(resolution.url)
            position = player.enqueue(song)
        except (PlaybackError, YoutubeError) as e:
            await _send(channel, f"Could not play {resolution.url}. {e}")
            return
        await _send(channel, f"Added '{song.title}' in queue position {position}")

    async def register(self, message: discord.Message, args: str):
        channel = message.channel
        url = args.split(" ")[0] if args else ""
        if not url:
            await _send(channel, "Must provide a URL to a video or audio")
            return
        video_id = youtube.extract_video_id(url)
        if not video_id:
            await _send(channel, f"Could not find a video id in {url}")
            return
        try:
            title = await self.youtube.get_title(url)
        except YoutubeError as e:
            await _send(channel, f"Could not retrieve video name. {e}")
            return
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self.registry.insert, video_id, title)
        except RegistryError as e:
            await _send(channel, f"Could not store video in database. {e}")
            return
        await _send(channel, "Video registered in database.")

    async def skip(self, message: discord.Message, _args: str):
        player = self.get_player(message.guild, False)
        if player is None or not player.is_connected:
            await _send(message.channel, "Not in a voice channel")
            return
        if player.skip() == 0:
            await _send(
                message.channel, "Skipping current song. The queue is now empty."
            )
        else:
            await _send(message.channel, "Skipping current song")

    async def stop(self, message: discord.Message, _args: str):
        player = self.get_player(message.guild, False)
        if player is None or not player.is_connected:
            await _send(message.channel, "Not in a voice channel")
            return
        player.stop()
        await _send(message.channel, "Current song stopped and queue cleared.")

    async def leave(self, message: discord.Message, _args: str):
        player = self.get_player(message.guild, False)
        if player is None or not player.is_connected:
            await _send(message.channel, "Not in a voice channel")
            return
        await player.leave()
        await _send(message.channel, "Left the voice channel.")

    async def help(self, message: discord.Message, _args: str):
        await _send(
            message.channel,
            "\n".join(
                f"**{self.prefix}{key}** - *{val[1]}*"
                for key, val in self.commands.items()
            ),
        )
