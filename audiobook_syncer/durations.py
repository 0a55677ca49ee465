import logging
import mimetypes
from pathlib import Path
from typing import Protocol, Union

import mutagen

from .errors import DurationUnavailable

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Audiobook containers missing from some platform mime tables
for _ext, _type in ((".m4a", "audio/mp4"), (".m4b", "audio/mp4"), (".aac", "audio/aac"),
                    (".flac", "audio/flac"), (".ogg", "audio/ogg"), (".opus", "audio/opus")):
    mimetypes.add_type(_type, _ext)

class DurationProvider(Protocol):
    def __call__(self, path: PathLike) -> int:
        """Returns the playback duration of `path` in milliseconds, 0 if unknown."""
        ...

def is_audio_file(path: PathLike) -> bool:
    mime_type, _ = mimetypes.guess_type(str(path))
    return mime_type is not None and mime_type.startswith("audio")

def read_duration_ms(path: PathLike) -> int:
    """Reads the stream length of an audio file. Raises DurationUnavailable."""
    try:
        audio = mutagen.File(str(path))
    except (mutagen.MutagenError, OSError) as e:
        raise DurationUnavailable(f"Cannot read {path}: {e}") from e

    length = getattr(getattr(audio, "info", None), "length", None)
    if not length:
        raise DurationUnavailable(f"No stream length in {path}")
    return int(round(float(length) * 1000))

class MutagenDurationProvider:
    """Duration provider backed by mutagen; failures count as zero-length files."""

    def __call__(self, path: PathLike) -> int:
        try:
            return read_duration_ms(path)
        except DurationUnavailable as e:
            logger.warning(f"Duration unavailable, treating as 0ms: {e}")
            return 0
