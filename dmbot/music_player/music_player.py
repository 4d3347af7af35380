import asyncio
import logging
import typing
from collections import deque

import discord

from .song import Song

logger = logging.getLogger(__name__)

_FFMPEG_OPTIONS = {
    "before_options": "-reconnect 1 -reconnect_streamed 1 -reconnect_delay_max 5",
    "options": "-vn",
}


class PlaybackError(Exception):
    """Raised when the voice side can't do what a command asked for."""


class MusicPlayer:
    """
    Song queue for a single guild, played through that guild's voice client
    """

    def __init__(self, ffmpeg_executable: str = "ffmpeg"):
        self.ffmpeg_executable = ffmpeg_executable
        self.voice_client: typing.Optional[discord.VoiceClient] = None
        self.song_queue: deque[Song] = deque()
        self.current_song: typing.Optional[Song] = None
        self.song_playback_task: typing.Optional[asyncio.Task] = None
        self._join_lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self.voice_client is not None and self.voice_client.is_connected()

    @property
    def queue_length(self) -> int:
        """Number of queued songs, counting the one currently playing"""
        return len(self.song_queue) + (1 if self.current_song else 0)

    async def join(self, channel: discord.VoiceChannel):
        """
        Connects to the voice channel and starts the playback task if needed
        :param channel: the channel of the member who asked for a song
        :return:
        """
        async with self._join_lock:
            guild_voice_client = channel.guild.voice_client
            if not guild_voice_client:
                try:
                    guild_voice_client = await channel.connect()
                except (discord.ClientException, asyncio.TimeoutError) as e:
                    raise PlaybackError(f"Could not join {channel.name}: {e}") from e
                logger.info("Connected to voice channel %s", channel.name)
            elif guild_voice_client.channel != channel:
                raise PlaybackError("You're not in the same voice channel")
            self.voice_client = guild_voice_client
            if self.song_playback_task is None or self.song_playback_task.done():
                self.song_playback_task = asyncio.create_task(self._music_playback_task())

    def enqueue(self, song: Song) -> int:
        """
        Adds a song to the end of the queue
        :param song: the song to queue up
        :return: the song's position in the queue
        """
        if not self.is_connected:
            raise PlaybackError("Not in a voice channel to play in")
        logger.info("Adding song %s to end of queue", song)
        self.song_queue.append(song)
        return self.queue_length

    def skip(self) -> int:
        """
        Skips the current song
        :return: the number of songs still waiting
        """
        remaining = len(self.song_queue)
        if self.voice_client:
            self.voice_client.stop()
        return remaining

    def stop(self):
        """
        Stops playback and clears the queue
        :return:
        """
        self.song_queue.clear()
        if self.voice_client:
            self.voice_client.stop()

    async def leave(self):
        """
        Stops playback and leaves the voice channel
        :return:
        """
        self.song_queue.clear()
        if self.song_playback_task:
            self.song_playback_task.cancel()
            self.song_playback_task = None
        if self.voice_client:
            await self.voice_client.disconnect()
            self.voice_client = None
        self.current_song = None

    # PRIVATE METHODS

    async def _music_playback_task(self):
        while True:
            while len(self.song_queue) == 0:
                await asyncio.sleep(0.5)
            song = self.song_queue.popleft()
            await self._play_song(song)

    async def _play_song(self, song: Song):
        song_finished = asyncio.Event()
        loop = asyncio.get_running_loop()
        self.current_song = song
        logger.info("Playing song: %s", self.current_song)

        def song_finished_cb(err):
            if err:
                logger.warning("Track %s encountered an error: %s", song.video_id, err)
            else:
                logger.info("Song finished")
            self.current_song = None
            loop.call_soon_threadsafe(song_finished.set)

        if not self.is_connected:
            logger.warning("Dropping %s, voice client is not connected", song)
            self.current_song = None
            return
        try:
            self.voice_client.play(
                discord.FFmpegPCMAudio(
                    song.url, executable=self.ffmpeg_executable, **_FFMPEG_OPTIONS
                ),
                after=song_finished_cb,
            )
        except discord.ClientException:
            logger.exception("Could not play %s", song)
            self.current_song = None
            return
        await song_finished.wait()
