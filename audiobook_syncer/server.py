from fastapi import FastAPI, Depends, HTTPException, Header, Body
from pydantic import BaseModel
from typing import Optional

from .channel import ObservationChannel
from .clients.player_client import PlayerControlClient
from .config import settings
from .models import PlaybackObservation, SeekAmount, SeekDirection
from .session import SyncSession

app = FastAPI(title="Audiobook Syncer")
session: Optional[SyncSession] = None
channel: Optional[ObservationChannel] = None
player: Optional[PlayerControlClient] = None

class SeekRequest(BaseModel):
    direction: SeekDirection
    amount: SeekAmount = SeekAmount.SMALL

def get_token(x_token: Optional[str] = Header(None, alias="X-Token")):
    if settings.HTTP_SERVER_TOKEN and x_token != settings.HTTP_SERVER_TOKEN:
        raise HTTPException(status_code=401, detail="Invalid token")

def require_session() -> SyncSession:
    if not session:
        raise HTTPException(status_code=503, detail="Session not ready")
    return session

@app.get("/healthz")
def healthz():
    if not session or not channel:
        return {"status": "starting"}
    if channel.closed:
        return {"status": "stopping"}
    return {"status": "ok"}

@app.get("/status", dependencies=[Depends(get_token)])
def status():
    if not session:
        return {"status": "not_ready"}
    return session.snapshot().model_dump(mode="json")

@app.get("/fragments", dependencies=[Depends(get_token)])
def fragments():
    s = require_session()
    return {
        "folder": s.folder,
        "current_fragment_index": s.current_fragment_index,
        "fragments": [f.model_dump() for f in s.fragments],
    }

@app.get("/fragments/current", dependencies=[Depends(get_token)])
def current_fragment():
    s = require_session()
    fragment = s.current_fragment()
    if fragment is None:
        raise HTTPException(status_code=404, detail="No fragment matches the current position")
    return {"index": s.current_fragment_index, **fragment.model_dump()}

@app.post("/observations", dependencies=[Depends(get_token)])
async def post_observation(observation: Optional[PlaybackObservation] = Body(None)):
    if not channel:
        raise HTTPException(status_code=503, detail="Session not ready")
    accepted = channel.publish(observation)
    return {"accepted": accepted}

@app.post("/control/toggle", dependencies=[Depends(get_token)])
async def toggle():
    if not player:
        raise HTTPException(status_code=503, detail="Player control not configured")
    if not await player.toggle_playback():
        raise HTTPException(status_code=502, detail="Player did not accept the command")
    return {"status": "ok"}

@app.post("/control/seek", dependencies=[Depends(get_token)])
async def seek(request: SeekRequest):
    if not player:
        raise HTTPException(status_code=503, detail="Player control not configured")
    if not await player.seek(request.direction, request.amount):
        raise HTTPException(status_code=502, detail="Player did not accept the command")
    return {"status": "ok", "action": player.seek_action(request.direction, request.amount)}
