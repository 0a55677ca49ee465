import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Dict, Iterable, Iterator, List, Union

from .durations import is_audio_file
from .errors import DurationUnavailable, UnknownFileError

logger = logging.getLogger(__name__)

class Timeline(Mapping):
    """
    Immutable mapping of audio file name -> start offset (ms) on the book's
    global timeline. Replaced wholesale when the book changes.
    """

    def __init__(self, offsets: Dict[str, int], total_duration: int = 0):
        self._offsets = MappingProxyType(dict(offsets))
        self.total_duration = total_duration

    def __getitem__(self, file_name: str) -> int:
        return self._offsets[file_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._offsets)

    def __len__(self) -> int:
        return len(self._offsets)

    def __repr__(self) -> str:
        return f"Timeline({dict(self._offsets)!r}, total_duration={self.total_duration})"

    def start_of(self, file_name: str) -> int:
        try:
            return self._offsets[file_name]
        except KeyError:
            raise UnknownFileError(file_name) from None

    def global_offset(self, file_name: str, in_file_offset: int) -> int:
        return self.start_of(file_name) + in_file_offset

def scan_audio_files(directory: Union[str, Path]) -> List[Path]:
    """Regular files directly inside `directory` (not recursive)."""
    directory = Path(directory)
    if not directory.is_dir():
        return []
    return [p for p in directory.iterdir() if p.is_file()]

def build_timeline(files: Iterable[Union[str, Path]], duration_of: Callable[[Path], int]) -> Timeline:
    """
    Accumulates file durations in file-name order. Non-audio files are skipped;
    a file whose duration cannot be read is kept as zero-length so the files
    after it keep their offsets.
    """
    paths = sorted((Path(f) for f in files), key=lambda p: p.name)

    offsets: Dict[str, int] = {}
    running_total = 0
    for path in paths:
        if not is_audio_file(path):
            continue

        try:
            duration = duration_of(path)
        except (DurationUnavailable, OSError) as e:
            logger.warning(f"Could not get duration of {path.name}: {e}")
            duration = 0

        if duration <= 0:
            logger.warning(f"{path.name} has no usable duration; it will occupy no time on the timeline")
            duration = 0

        offsets[path.name] = running_total
        running_total += duration

    logger.debug(f"Timeline built for {len(offsets)} files, total {running_total}ms")
    return Timeline(offsets, total_duration=running_total)
