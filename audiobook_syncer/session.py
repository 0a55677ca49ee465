import asyncio
import logging
from typing import Callable, List, Optional, Tuple

from .channel import ObservationChannel
from .errors import TranscriptNotFound, UnknownFileError
from .library import AudiobookLibrary, LoadedBook
from .models import PlaybackObservation, PlayerState, SessionSnapshot, SessionStatus, SyncFragment
from .resolver import PositionResolver

logger = logging.getLogger(__name__)

Listener = Callable[[SessionSnapshot], None]

class SyncSession:
    """
    Keeps the highlighted transcript fragment in step with the player.

    Observations must be delivered one at a time (see `run`). A change of
    folder starts a background reload; while it runs, only the newest
    observation for that folder is kept and applied once the book is ready.
    A newer folder change cancels the reload in flight.
    """

    def __init__(self, library: AudiobookLibrary):
        self.library = library
        self.folder: Optional[str] = None
        self.status = SessionStatus.UNLOADED
        self.player_state = PlayerState.NONE

        self._book: Optional[LoadedBook] = None
        self._resolver = PositionResolver()
        self._reload_task: Optional[asyncio.Task] = None
        self._pending: Optional[PlaybackObservation] = None
        self._listeners: List[Listener] = []

    @property
    def fragments(self) -> Tuple[SyncFragment, ...]:
        book = self._book
        return book.fragments if book else ()

    @property
    def current_fragment_index(self) -> Optional[int]:
        return self._resolver.current_fragment_index

    def current_fragment(self) -> Optional[SyncFragment]:
        index = self._resolver.current_fragment_index
        fragments = self.fragments
        if index is None or index >= len(fragments):
            return None
        return fragments[index]

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            folder=self.folder,
            status=self.status,
            player_state=self.player_state,
            current_fragment_index=self._resolver.current_fragment_index,
            fragment_count=len(self.fragments),
            last_global_offset=self._resolver.last_global_offset,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    async def run(self, channel: ObservationChannel):
        logger.info("Session started")
        try:
            async for observation in channel:
                await self.handle(observation)
        finally:
            await self.close()

    async def handle(self, observation: Optional[PlaybackObservation]):
        if observation is None:
            self._clear()
            return

        changed = observation.player_state != self.player_state
        self.player_state = observation.player_state

        if observation.folder != self.folder:
            self._start_reload(observation.folder)
            changed = True

        if self.status == SessionStatus.LOADING:
            self._pending = observation
        elif self._apply_position(observation):
            changed = True

        if changed:
            self._notify()

    async def wait_loaded(self):
        """Waits for the reload in flight, if any, to finish or be cancelled."""
        task = self._reload_task
        if task is not None:
            await asyncio.wait({task})

    async def close(self):
        task = self._reload_task
        self._cancel_reload()
        if task is not None:
            await asyncio.wait({task})

    def _clear(self):
        if self.folder is not None:
            logger.info(f"Player session for {self.folder} ended")

        self._cancel_reload()
        self._book = None
        self._pending = None
        self._resolver.reset()
        self.folder = None
        self.status = SessionStatus.UNLOADED
        self.player_state = PlayerState.NONE
        self._notify()

    def _start_reload(self, folder: str):
        logger.info(f"Folder changed: {self.folder} -> {folder}")
        self._cancel_reload()

        self._book = None
        self._pending = None
        self._resolver.reset()
        self.folder = folder
        self.status = SessionStatus.LOADING
        self._reload_task = asyncio.create_task(self._reload(folder))

    def _cancel_reload(self):
        task = self._reload_task
        self._reload_task = None
        if task is not None and not task.done():
            logger.debug("Abandoning reload in flight")
            task.cancel()

    async def _reload(self, folder: str):
        try:
            book = await asyncio.to_thread(self.library.load, folder)
        except TranscriptNotFound as e:
            logger.info(f"Sync unavailable for {folder}: {e}")
            self._degrade(folder)
            return
        except Exception as e:
            logger.error(f"Failed to load {folder}: {e}", exc_info=True)
            self._degrade(folder)
            return

        if folder != self.folder:
            return

        if not book.timeline:
            logger.warning(f"No audio files found for {folder}, sync unavailable")
            self._degrade(folder)
            return

        # Timeline and fragments are swapped in together
        self._book = book
        self.status = SessionStatus.READY

        pending, self._pending = self._pending, None
        if pending is not None and pending.folder == folder:
            self._apply_position(pending)
        self._notify()

    def _degrade(self, folder: str):
        if folder != self.folder:
            return
        self._book = None
        self._pending = None
        self.status = SessionStatus.UNLOADED
        self._notify()

    def _apply_position(self, observation: PlaybackObservation) -> bool:
        book = self._book
        if book is None:
            return False

        try:
            global_offset = book.timeline.global_offset(observation.file, observation.in_file_offset)
        except UnknownFileError as e:
            logger.debug(f"Ignoring observation for {observation.folder}: {e}")
            return False

        before = (self._resolver.current_fragment_index, self._resolver.last_global_offset)
        self._resolver.update(global_offset, book.fragments)
        return before != (self._resolver.current_fragment_index, self._resolver.last_global_offset)

    def _notify(self):
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Session listener failed: {e}", exc_info=True)
