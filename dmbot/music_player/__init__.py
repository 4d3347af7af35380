from .song import Song
from .music_player import MusicPlayer, PlaybackError
from .youtube import Youtube, YoutubeError
