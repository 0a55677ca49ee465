import asyncio
from typing import AsyncIterator, Optional

from .models import PlaybackObservation

class ObservationChannel:
    """
    Latest-value channel between the observation source and the session.

    Consumers only ever see the most recent observation; one that equals the
    previously published value is not delivered again. Publishing None means
    the player session ended.
    """

    def __init__(self):
        self._value: Optional[PlaybackObservation] = None
        self._version = 0
        self._changed = asyncio.Event()
        self._closed = False

    @property
    def value(self) -> Optional[PlaybackObservation]:
        return self._value

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, observation: Optional[PlaybackObservation]) -> bool:
        """Returns False when the value was dropped as a duplicate or the channel is closed."""
        if self._closed:
            return False
        if self._version and observation == self._value:
            return False

        self._value = observation
        self._version += 1
        self._changed.set()
        return True

    def close(self):
        self._closed = True
        self._changed.set()

    async def __aiter__(self) -> AsyncIterator[Optional[PlaybackObservation]]:
        seen = 0
        while True:
            if self._version == seen:
                if self._closed:
                    return
                self._changed.clear()
                await self._changed.wait()
                continue

            seen = self._version
            yield self._value
