import asyncio
import functools
import logging
import re
import typing

import yt_dlp

from .song import Song

logger = logging.getLogger(__name__)

_YTDL_OPTIONS = {
    "format": "bestaudio/best",
    "noplaylist": True,
    "quiet": True,
    "no_warnings": True,
}

_VIDEO_ID_PATTERNS = [
    re.compile(r"^https?://(?:www\.|m\.|music\.)?youtube\.com/watch\?(?:\S*&)?v=([\w-]+)", re.I),
    re.compile(r"^https?://(?:www\.|m\.)?youtube\.com/shorts/([\w-]+)", re.I),
    re.compile(r"^https?://youtu\.be/([\w-]+)", re.I),
]


class YoutubeError(Exception):
    """Raised when yt-dlp cannot extract what was asked of it."""


def extract_video_id(url: str) -> typing.Optional[str]:
    """
    Finds the video id in a YouTube URL
    :param url: a watch, short or youtu.be link
    :return: the video id, or None if the URL doesn't contain one
    """
    for pattern in _VIDEO_ID_PATTERNS:
        match = pattern.match(url.strip())
        if match:
            return match.group(1)
    return None


def canonical_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


def _extract_info(url: str) -> dict:
    with yt_dlp.YoutubeDL(_YTDL_OPTIONS) as ytdl:
        data = ytdl.extract_info(url, download=False)
    if data is None:
        raise YoutubeError(f"No video information found for {url}")
    if "entries" in data:
        entries = [entry for entry in data["entries"] if entry]
        if not entries:
            raise YoutubeError(f"No videos found for {url}")
        data = entries[0]
    return data


class Youtube:
    """
    Async facade over yt-dlp. Extraction is blocking, so every call runs in the
    event loop's default executor.
    """

    async def _run(self, url: str) -> dict:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, functools.partial(_extract_info, url))
        except yt_dlp.utils.DownloadError as e:
            logger.warning("yt-dlp failed for %s: %s", url, e)
            raise YoutubeError(str(e)) from e
        except Exception as e:
            # extractor bugs surface as arbitrary exceptions
            logger.exception("yt-dlp crashed while extracting %s", url)
            raise YoutubeError(f"yt-dlp could not extract {url}: {e!r}") from e

    async def get_title(self, url: str) -> str:
        data = await self._run(url)
        title = (data.get("title") or "").strip()
        if not title:
            raise YoutubeError(f"yt-dlp returned an empty title for {url}")
        return title

    async def get_song(self, url: str) -> Song:
        data = await self._run(url)
        if not data.get("url"):
            raise YoutubeError(f"No playable audio stream found for {url}")
        return Song(
            url=data["url"],
            video_id=data.get("id", ""),
            title=data.get("title") or url,
            webpage_url=data.get("webpage_url") or url,
        )
