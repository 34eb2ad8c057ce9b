from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from secretkiss.api.deps import get_runtime
from secretkiss.api.models import InputKind, InputMessage, SessionView
from secretkiss.runtime import GameRuntime

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws/session")
async def session_ws(websocket: WebSocket) -> None:
    runtime: GameRuntime = websocket.app.state.runtime
    hub = runtime.hub
    await hub.connect(websocket)

    try:
        # Renderer may also be the input surface: press/release/restart messages.
        while True:
            raw = await websocket.receive_text()
            try:
                msg = InputMessage.model_validate_json(raw)
            except ValidationError:
                logger.debug("ignoring malformed input message %r", raw)
                continue
            runtime.handle_input(msg.type)
    except WebSocketDisconnect:
        await hub.disconnect(websocket)
    except Exception:
        await hub.disconnect(websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/session", response_model=SessionView)
async def get_session_route(runtime: GameRuntime = Depends(get_runtime)) -> SessionView:
    return SessionView.from_snapshot(runtime.session.snapshot())


@router.post("/session/press", response_model=SessionView)
async def press_route(runtime: GameRuntime = Depends(get_runtime)) -> SessionView:
    return SessionView.from_snapshot(runtime.handle_input(InputKind.press))


@router.post("/session/release", response_model=SessionView)
async def release_route(runtime: GameRuntime = Depends(get_runtime)) -> SessionView:
    return SessionView.from_snapshot(runtime.handle_input(InputKind.release))


@router.post("/session/restart", response_model=SessionView)
async def restart_route(runtime: GameRuntime = Depends(get_runtime)) -> SessionView:
    return SessionView.from_snapshot(runtime.handle_input(InputKind.restart))
