import typing
from dataclasses import dataclass, field

from ..music_player.youtube import canonical_url
from .registry import SongRegistry

_URL_SCHEMES = ("http://", "https://")


@dataclass(frozen=True)
class Resolution:
    """Outcome of turning user text into something playable"""

    url: typing.Optional[str]
    matches: list[tuple[str, str]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.url is None and len(self.matches) == 0

    @property
    def is_ambiguous(self) -> bool:
        return self.url is None and len(self.matches) > 1


def is_url(text: str) -> bool:
    return text.lower().startswith(_URL_SCHEMES)


def resolve(registry: SongRegistry, text: str) -> Resolution:
    """
    Resolves a play request. URLs are used as-is; anything else is looked up by
    title in the registry and only a single match is playable.
    :param registry: the song registry
    :param text: what the user typed after the command
    :return: the resolution
    """
    if is_url(text):
        return Resolution(url=text)
    matches = registry.find_by_title_contains(text)
    if len(matches) == 1:
        video_id, _ = matches[0]
        return Resolution(url=canonical_url(video_id), matches=matches)
    return Resolution(url=None, matches=matches)
