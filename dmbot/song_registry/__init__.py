from .registry import (
    DuplicateSongError,
    RegistryError,
    SongEntry,
    SongRegistry,
    StorageError,
)
from .resolution import Resolution, resolve
