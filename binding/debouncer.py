"""
Trigger Debouncer - "on for a fixed duration, non-retriggering".
"""

from __future__ import annotations
import asyncio
from typing import TYPE_CHECKING, Optional
from binding.models import CallLater, Slot
import logging

if TYPE_CHECKING:
    from binding.binding_table import BindingTable
    from binding.diagnostics import Diagnostics

logger = logging.getLogger(__name__)

MIN_FEEDBACK_SECONDS = 0.0
MAX_FEEDBACK_SECONDS = 300.0


def clamp_feedback(seconds: float) -> float:
    return min(MAX_FEEDBACK_SECONDS, max(MIN_FEEDBACK_SECONDS, float(seconds)))


class TriggerDebouncer:
    """
    Per-slot one-shot timer.

    Idle   --event-->  Active (lit, timer started)
    Active --event-->  Active (ignored, deadline unchanged)
    Active --expiry--> Idle   (unlit)
    """

    def __init__(
        self,
        table: "BindingTable",
        diagnostics: "Diagnostics",
        feedback_seconds: float = 1.0,
        call_later: Optional[CallLater] = None,
    ):
        self.table = table
        self.diag = diagnostics
        self.feedback_seconds = clamp_feedback(feedback_seconds)
        self._call_later = call_later

    def on_event(self, slot: Slot) -> bool:
        """Handle a trigger notification. Returns True if it started an on-period."""
        self.diag.call("TriggerDebouncer.on_event", slot.index)
        if slot.pending_timer is not None:
            self.diag.debug(f"[SLOT {slot.index}] Trigger while active, ignored")
            return False

        self.table.set_lit(slot, True)
        slot.pending_timer = self._schedule(self.feedback_seconds, self._expire, slot)
        self.diag.debug(f"[SLOT {slot.index}] Trigger on for {self.feedback_seconds:g}s")
        return True

    def _expire(self, slot: Slot):
        self.diag.call("TriggerDebouncer._expire", slot.index)
        slot.pending_timer = None
        self.table.set_lit(slot, False)
        self.diag.debug(f"[SLOT {slot.index}] Trigger feedback elapsed")

    def _schedule(self, delay: float, callback, *args):
        if self._call_later is not None:
            return self._call_later(delay, callback, *args)
        return asyncio.get_running_loop().call_later(delay, callback, *args)
