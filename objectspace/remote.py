"""
Host Feed - keeps the object space in sync with a remote host over WebSocket.
Auto-reconnects on disconnect. Read-only: the only message sent is the subscribe request.
"""

from __future__ import annotations
import asyncio
import json
from typing import Any, Dict, Optional
import websockets
import logging

from objectspace.local import ObjectSpace

logger = logging.getLogger(__name__)


class HostFeed:
    """Applies host snapshots and change messages to an ObjectSpace."""

    def __init__(
        self,
        url: str,
        object_space: ObjectSpace,
        reconnect_seconds: int = 3,
        ping_interval: int = 20,
    ):
        self.url = url
        self.object_space = object_space
        self.reconnect_seconds = reconnect_seconds
        self._ping_interval = ping_interval
        self._ws: Optional[Any] = None
        self._running = False

    @property
    def connected(self) -> bool:
        return self._ws is not None

    async def start(self):
        """Run the connection with auto-reconnect until stop() is called."""
        self._running = True
        while self._running:
            try:
                async with websockets.connect(
                    self.url,
                    ping_interval=self._ping_interval,
                    ping_timeout=10,
                    close_timeout=5,
                ) as ws:
                    self._ws = ws
                    logger.info(f"[HOST] Connected to {self.url}")

                    await ws.send(json.dumps({"op": "subscribe", "args": ["components"]}))

                    async for raw in ws:
                        self.handle_message(raw)

            except websockets.ConnectionClosed as e:
                logger.warning(f"[HOST] Connection closed: {e}. Reconnecting in {self.reconnect_seconds}s...")
            except Exception as e:
                logger.error(f"[HOST] Error: {e}. Reconnecting in {self.reconnect_seconds}s...", exc_info=True)

            self._ws = None
            # Nothing on the host can be trusted while disconnected
            self.object_space.mark_all_unreachable()
            if self._running:
                await asyncio.sleep(self.reconnect_seconds)

    async def stop(self):
        """Gracefully close the connection."""
        self._running = False
        if self._ws:
            await self._ws.close()

    # ==================== Message Handling ====================

    def handle_message(self, raw: str):
        """Route one host message into the object space."""
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"[HOST] Invalid JSON: {raw[:100]}")
            return

        if not isinstance(data, dict):
            logger.warning(f"[HOST] Unexpected message: {raw[:100]}")
            return

        try:
            self._route(data)
        except Exception as e:
            logger.error(f"[HOST] Handler error: {e}", exc_info=True)

    def _route(self, data: Dict[str, Any]):
        op = data.get("op")
        if op == "snapshot":
            self.object_space.load(data)
            logger.info(f"[HOST] Snapshot: {len(self.object_space.names())} components")
            return
        if op is not None:
            if data.get("success") is False:
                logger.error(f"[HOST] Op failed: {data}")
            return

        topic = data.get("topic", "")
        payload = data.get("data") or {}
        if not isinstance(payload, dict):
            logger.warning(f"[HOST] Ignoring {topic!r} message with non-object data: {payload!r:.100}")
            return
        if topic == "control":
            self._on_control(payload)
        elif topic == "component":
            self._on_component(payload)
        elif topic:
            logger.debug(f"[HOST] Ignoring topic {topic}")

    def _on_control(self, payload: Dict[str, Any]):
        component_name = payload.get("component", "")
        control_name = payload.get("control", "")
        if not isinstance(component_name, str) or not isinstance(control_name, str):
            logger.warning(f"[HOST] Ignoring control change with non-string names: {payload!r:.100}")
            return
        component = self.object_space.try_component(component_name)
        if component is None:
            logger.debug(f"[HOST] Change for unknown component: {payload}")
            return
        control = component.get(control_name)
        if control is None:
            logger.debug(f"[HOST] Change for unknown control: {payload}")
            return
        control.update(payload.get("value"))

    def _on_component(self, payload: Dict[str, Any]):
        name = payload.get("name", "")
        if not isinstance(name, str):
            logger.warning(f"[HOST] Ignoring component change with non-string name: {payload!r:.100}")
            return
        if "accessible" in payload:
            self.object_space.set_accessible(name, bool(payload["accessible"]))
