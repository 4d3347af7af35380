from dataclasses import dataclass


@dataclass(frozen=True)
class Song:
    url: str  # URL to stream from
    video_id: str  # YouTube video id
    title: str
    webpage_url: str  # URL the song was requested with
