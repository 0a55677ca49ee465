import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

from .durations import DurationProvider, MutagenDurationProvider
from .errors import TranscriptNotFound
from .fragments import load_fragments
from .models import SyncFragment
from .timeline import Timeline, build_timeline, scan_audio_files

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class LoadedBook:
    """Everything needed to track one audiobook, swapped in as a single value."""
    folder: str
    timeline: Timeline
    fragments: Tuple[SyncFragment, ...]

class AudiobookLibrary:
    def __init__(self, root: Union[str, Path], sync_map_filename: str = "sync_map.json",
                 duration_provider: Optional[DurationProvider] = None):
        self.root = Path(root)
        self.sync_map_filename = sync_map_filename
        self.duration_provider = duration_provider or MutagenDurationProvider()

    def book_dir(self, folder: str) -> Path:
        root = self.root.resolve()
        book_dir = (root / folder).resolve()
        if book_dir == root or root not in book_dir.parents:
            raise TranscriptNotFound(f"Folder {folder!r} is outside the library at {root}")
        return book_dir

    def load(self, folder: str) -> LoadedBook:
        """
        Reads the sync map and measures the audio files of `folder`.
        Blocking; run it off the event loop.
        """
        book_dir = self.book_dir(folder)

        logger.debug(f"Loading sync map for {folder}...")
        fragments = load_fragments(book_dir / self.sync_map_filename)

        logger.debug(f"Loading audio files for {folder}...")
        timeline = build_timeline(scan_audio_files(book_dir), self.duration_provider)
        logger.info(f"Loaded {folder}: {len(fragments)} fragments, {len(timeline)} audio files")

        return LoadedBook(folder=folder, timeline=timeline, fragments=fragments)
