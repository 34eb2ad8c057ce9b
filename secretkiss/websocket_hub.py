from __future__ import annotations

import asyncio
import logging

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class FrameHub:
    """In-process WebSocket fan-out of render frames.

    Contract:
      - register a renderer via `connect(websocket)`.
      - push frames/events with `broadcast(payload)`.

    Payloads should be JSON-serializable dicts. A socket that fails a send is
    dropped; it never stops the frame loop.
    """

    def __init__(self) -> None:
        self._conns: set[WebSocket] = set()
        self._lock = asyncio.Lock()

    @property
    def connection_count(self) -> int:
        return len(self._conns)

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._conns.add(websocket)

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._conns.discard(websocket)

    async def broadcast(self, payload: dict[str, object]) -> None:
        async with self._lock:
            conns = list(self._conns)

        if not conns:
            return

        dead: list[WebSocket] = []
        for ws in conns:
            try:
                await ws.send_json(payload)
            except Exception:
                dead.append(ws)

        if dead:
            logger.debug("dropping %d dead renderer socket(s)", len(dead))
            async with self._lock:
                for ws in dead:
                    self._conns.discard(ws)
