"""
Dashboard - Lightweight web server exposing slot status and the per-slot inputs.
Uses aiohttp.web to serve a JSON API alongside the mirror.
"""

from __future__ import annotations
import os
import json
from datetime import datetime
from enum import Enum
from typing import Optional, TYPE_CHECKING
from aiohttp import web
import logging

from binding.models import DebugLevel

if TYPE_CHECKING:
    from binding.rebind import RebindController

logger = logging.getLogger(__name__)


class MirrorEncoder(json.JSONEncoder):
    """JSON encoder that handles enums and datetimes."""
    def default(self, o):
        if isinstance(o, Enum):
            return o.value
        if isinstance(o, datetime):
            return o.isoformat()
        return super().default(o)


def json_response(data, status=200):
    return web.Response(
        text=json.dumps(data, cls=MirrorEncoder),
        content_type="application/json",
        status=status,
    )


class Dashboard:
    """Web status server."""

    def __init__(
        self,
        controller: "RebindController",
        host: str = "0.0.0.0",
        port: int = 8080,
        log_path: str = "data/mirror.log",
    ):
        self.controller = controller
        self.host = host
        self.port = port
        self.log_path = log_path
        self.app = web.Application()
        self._runner: Optional[web.AppRunner] = None
        self._start_time = datetime.utcnow()
        self._setup_routes()

    def _setup_routes(self):
        self.app.router.add_get("/api/slots", self._api_slots)
        self.app.router.add_put("/api/slots/{index}", self._api_set_identifier)
        self.app.router.add_get("/api/config", self._api_config)
        self.app.router.add_put("/api/config", self._api_update_config)
        self.app.router.add_get("/api/logs", self._api_logs)

    async def start(self):
        """Start the web server."""
        self._runner = web.AppRunner(self.app, access_log=None)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info(f"[DASHBOARD] Running on http://{self.host}:{self.port}")

    async def stop(self):
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None

    # ─── Routes ───

    async def _api_slots(self, request: web.Request) -> web.Response:
        """Every slot's indicator state in one call."""
        table = self.controller.table
        return json_response({
            "count": table.count,
            "valid": table.count_valid(),
            "rebinds": self.controller.rebind_count,
            "uptime_seconds": int((datetime.utcnow() - self._start_time).total_seconds()),
            "slots": [slot.to_dict() for slot in self.controller.slots()],
        })

    async def _api_set_identifier(self, request: web.Request) -> web.Response:
        """Per-slot text input."""
        try:
            index = int(request.match_info["index"])
        except ValueError:
            return json_response({"error": "slot index must be an integer"}, status=400)

        slot = self.controller.table.get_slot(index)
        if slot is None:
            return json_response({"error": f"no slot {index}"}, status=404)

        try:
            body = await request.json()
        except json.JSONDecodeError:
            return json_response({"error": "body must be JSON"}, status=400)

        identifier = body.get("identifier") if isinstance(body, dict) else None
        if not isinstance(identifier, str):
            return json_response({"error": "'identifier' must be a string"}, status=400)

        changed = self.controller.set_identifier(index, identifier)
        logger.info(f"[DASHBOARD] Slot {index} identifier set to '{identifier}' (changed={changed})")
        return json_response({"changed": changed, "slot": slot.to_dict()})

    async def _api_config(self, request: web.Request) -> web.Response:
        return json_response(self._config_dict())

    async def _api_update_config(self, request: web.Request) -> web.Response:
        """Apply any of count / trigger_feedback_seconds / debug_level."""
        try:
            body = await request.json()
        except json.JSONDecodeError:
            return json_response({"error": "body must be JSON"}, status=400)
        if not isinstance(body, dict):
            return json_response({"error": "body must be an object"}, status=400)

        try:
            level = DebugLevel.parse(body["debug_level"]) if "debug_level" in body else None
            count = int(body["count"]) if "count" in body else None
            feedback = (
                float(body["trigger_feedback_seconds"])
                if "trigger_feedback_seconds" in body else None
            )
        except (TypeError, ValueError) as e:
            return json_response({"error": str(e)}, status=400)

        if level is not None:
            self.controller.set_debug_level(level)
        if feedback is not None:
            self.controller.set_trigger_feedback(feedback)
        if count is not None:
            self.controller.set_count(count)

        return json_response(self._config_dict())

    async def _api_logs(self, request: web.Request) -> web.Response:
        """Return last N lines from the log file."""
        try:
            n = int(request.query.get("n", 50))
        except ValueError:
            return json_response({"error": "n must be an integer"}, status=400)
        n = max(0, n)

        lines = []
        if n and os.path.exists(self.log_path):
            with open(self.log_path, "r") as f:
                lines = [l.rstrip("\n") for l in f.readlines()[-n:]]
        return json_response({"lines": lines, "total": len(lines)})

    def _config_dict(self):
        return {
            "count": self.controller.table.count,
            "trigger_feedback_seconds": self.controller.trigger_feedback_seconds,
            "debug_level": self.controller.debug_level,
            "separator": self.controller.separator,
        }
