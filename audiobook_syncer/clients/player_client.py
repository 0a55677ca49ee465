import logging
from typing import Optional

import httpx

from ..config import settings
from ..models import SeekAmount, SeekDirection

logger = logging.getLogger(__name__)

PLAY_PAUSE_ACTION = "Play / Pause"
# The player labels its rewind actions with U+2212, not a hyphen
SEEK_SIGNS = {
    SeekDirection.FORWARD: "+",
    SeekDirection.BACKWARD: "−",
}

class PlayerControlClient:
    """
    Sends playback commands to the player-control bridge, which triggers the
    player's notification action with the given title.
    """

    def __init__(self, base_url: Optional[str] = None, token: Optional[str] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        base_url = base_url if base_url is not None else settings.PLAYER_CONTROL_URL
        token = token if token is not None else settings.PLAYER_CONTROL_TOKEN

        self.enabled = bool(base_url)
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self.client = httpx.AsyncClient(
            base_url=(base_url or "http://localhost").rstrip('/'),
            headers=headers,
            timeout=settings.REQUEST_TIMEOUT_SECONDS,
            transport=transport
        )

    @staticmethod
    def seek_action(direction: SeekDirection, amount: SeekAmount) -> str:
        seconds = settings.SEEK_SMALL_SECONDS if amount == SeekAmount.SMALL else settings.SEEK_LARGE_SECONDS
        return f"{SEEK_SIGNS[direction]}{seconds}"

    async def toggle_playback(self) -> bool:
        logger.info("Toggling playback")
        return await self.send_action(PLAY_PAUSE_ACTION)

    async def seek(self, direction: SeekDirection, amount: SeekAmount) -> bool:
        action = self.seek_action(direction, amount)
        logger.info(f"Seeking {direction.value} ({action})")
        return await self.send_action(action)

    async def send_action(self, title: str) -> bool:
        if not self.enabled:
            logger.warning(f"No PLAYER_CONTROL_URL configured, dropping action {title!r}")
            return False

        if settings.DRY_RUN:
            logger.info(f"[DRY RUN] Would send player action {title!r}")
            return True

        try:
            resp = await self.client.post("/actions", json={"title": title})
            resp.raise_for_status()
            return True
        except httpx.HTTPError as e:
            logger.error(f"Failed to send player action {title!r}: {e}")
            return False

    async def aclose(self):
        await self.client.aclose()
