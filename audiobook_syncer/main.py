import asyncio
import logging
import signal
import sys
import uvicorn

from .config import settings
from .channel import ObservationChannel
from .clients.player_client import PlayerControlClient
from .library import AudiobookLibrary
from .models import SessionSnapshot
from .session import SyncSession
from . import server

# Setup logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
# Silence noisy libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("mutagen").setLevel(logging.WARNING)

logger = logging.getLogger("main")

class SyncService:
    def __init__(self):
        self.library = AudiobookLibrary(settings.AUDIOBOOKS_DIR, settings.SYNC_MAP_FILENAME)
        self.channel = ObservationChannel()
        self.session = SyncSession(self.library)
        self.player = PlayerControlClient()
        self.session.subscribe(self.log_snapshot)

        # Link session to server module
        server.session = self.session
        server.channel = self.channel
        server.player = self.player

    def log_snapshot(self, snapshot: SessionSnapshot):
        logger.debug(
            f"{snapshot.folder} [{snapshot.status.value}/{snapshot.player_state.value}] "
            f"fragment {snapshot.current_fragment_index} of {snapshot.fragment_count}"
        )

    async def serve_http(self):
        config = uvicorn.Config(server.app, host=settings.HTTP_SERVER_HOST, port=settings.HTTP_SERVER_PORT, log_level="warning")
        try:
            await uvicorn.Server(config).serve()
        finally:
            # Stopping the server ends the session loop too
            self.channel.close()

    async def start(self):
        logger.info(f"Serving audiobooks from {settings.AUDIOBOOKS_DIR}")
        tasks = [asyncio.create_task(self.session.run(self.channel))]

        if settings.HTTP_SERVER_ENABLED:
            tasks.append(asyncio.create_task(self.serve_http()))
        else:
            logger.warning("HTTP server disabled; no observations will arrive")

        try:
            await asyncio.gather(*tasks)
        except asyncio.CancelledError:
            pass
        finally:
            self.channel.close()
            await self.player.aclose()

def handle_sigterm(sig, frame):
    logger.info("Received SIGTERM, shutting down...")
    sys.exit(0)

if __name__ == "__main__":
    signal.signal(signal.SIGTERM, handle_sigterm)
    service = SyncService()
    try:
        asyncio.run(service.start())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
