"""
Binding Table - owns the N monitored slots.
Handles slot lifecycle, resizing, teardown and indicator publication.
"""

from __future__ import annotations
from typing import Callable, Dict, List, Optional
from binding.models import Classification, ObservableRef, Slot, Subscription
import logging

logger = logging.getLogger(__name__)

MIN_SLOTS = 1
MAX_SLOTS = 100

# Receives (index, lit, indeterminate)
IndicatorListener = Callable[[int, bool, bool], None]


class BindingTable:
    """
    Per-slot binding state, indexed 1..N.
    The only place slot state is mutated.
    """

    def __init__(self, count: int):
        self._slots: Dict[int, Slot] = {}
        self._listeners: List[IndicatorListener] = []
        self.resize(count)

    @property
    def count(self) -> int:
        return len(self._slots)

    def get_slot(self, index: int) -> Optional[Slot]:
        return self._slots.get(index)

    def get_all_slots(self) -> List[Slot]:
        return [self._slots[i] for i in sorted(self._slots)]

    def add_listener(self, listener: IndicatorListener):
        self._listeners.append(listener)

    # ==================== Lifecycle ====================

    def resize(self, count: int):
        """
        Keep exactly `count` slots. Slots beyond the new count are detached
        and dropped together with their identifiers; new slots start empty.
        """
        if not MIN_SLOTS <= count <= MAX_SLOTS:
            raise ValueError(f"slot count must be {MIN_SLOTS}..{MAX_SLOTS}, got {count}")

        for index in [i for i in self._slots if i > count]:
            self.detach(self._slots.pop(index))

        for index in range(1, count + 1):
            if index not in self._slots:
                self._slots[index] = Slot(index=index)

    def set_identifier(self, index: int, identifier: str) -> bool:
        """Store a slot's raw identifier. Returns True if it changed."""
        slot = self._slots.get(index)
        if slot is None:
            raise KeyError(index)
        if slot.identifier == identifier:
            return False
        slot.identifier = identifier
        return True

    def detach(self, slot: Slot):
        """Dispose the subscription and discard any pending trigger timer."""
        if slot.subscription is not None:
            slot.subscription.dispose()
            slot.subscription = None
        if slot.pending_timer is not None:
            slot.pending_timer.cancel()
            slot.pending_timer = None
        slot.handle = None

    def reset(self, slot: Slot):
        """Detach and return the slot to indeterminate / unlit."""
        self.detach(slot)
        slot.component_name = None
        slot.control_name = None
        slot.classification = None
        slot.valid = False
        slot.error = None
        self.set_lit(slot, False)

    def reset_all(self):
        for slot in self.get_all_slots():
            self.reset(slot)

    def bind(
        self,
        slot: Slot,
        handle: ObservableRef,
        classification: Classification,
        subscription: Subscription,
        lit: bool,
    ):
        """Attach a resolved control. The slot must already be detached."""
        if slot.subscription is not None:
            raise RuntimeError(f"slot {slot.index} already holds a subscription")
        slot.handle = handle
        slot.classification = classification
        slot.subscription = subscription
        slot.valid = True
        slot.error = None
        self.set_lit(slot, lit)

    def mark_failed(self, slot: Slot, message: str):
        slot.error = message
        slot.valid = False
        self.set_lit(slot, False)

    # ==================== Indicator ====================

    def set_lit(self, slot: Slot, lit: bool):
        """Update the mirrored state. Invalid slots are always unlit."""
        slot.lit = bool(lit) and slot.valid
        self._publish(slot)

    def _publish(self, slot: Slot):
        for listener in list(self._listeners):
            try:
                listener(slot.index, slot.lit, slot.indeterminate)
            except Exception as e:
                logger.error(f"[SLOT {slot.index}] Indicator listener error: {e}", exc_info=True)

    # ==================== Reporting ====================

    def count_valid(self) -> int:
        return sum(1 for s in self._slots.values() if s.valid)

    def count_subscriptions(self) -> int:
        return sum(1 for s in self._slots.values() if s.subscription is not None)

    def get_status_summary(self) -> str:
        """Formatted status of all slots."""
        lines = ["=== SLOT STATUS ==="]
        for s in self.get_all_slots():
            if not s.identifier:
                state = "unmonitored"
            elif not s.valid:
                state = f"INDETERMINATE ({s.error})" if s.error else "INDETERMINATE"
            else:
                state = f"{s.classification.value} {'ON' if s.lit else 'off'}"
            ident = f" '{s.identifier}'" if s.identifier else ""
            lines.append(f"Slot {s.index}:{ident} [{state}]")
        lines.append(f"=== VALID: {self.count_valid()}/{self.count} ===")
        return "\n".join(lines)
