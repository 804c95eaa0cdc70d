"""
Rebind Controller - full teardown and rebuild of every slot binding.
Runs at startup and whenever the slot count or an identifier changes.
"""

from __future__ import annotations
from typing import Dict, List, Optional, TYPE_CHECKING
from binding.binding_table import BindingTable, IndicatorListener, MAX_SLOTS, MIN_SLOTS
from binding.debouncer import TriggerDebouncer, clamp_feedback
from binding.diagnostics import Diagnostics
from binding.errors import BindingError
from binding.identifier import DEFAULT_SEPARATOR, parse_identifier
from binding.models import CallLater, Classification, DebugLevel, ObservableRef, Slot, classify
from binding.resolver import ReferenceResolver
import logging

if TYPE_CHECKING:
    from objectspace.local import ObjectSpace

logger = logging.getLogger(__name__)


def clamp_count(count: int) -> int:
    return min(MAX_SLOTS, max(MIN_SLOTS, int(count)))


class RebindController:
    """
    Owns the Binding Table and everything attached to it.
    All entry points are synchronous, so a rebind always completes
    before the next queued event is handled.
    """

    def __init__(
        self,
        object_space: "ObjectSpace",
        count: int = 8,
        trigger_feedback_seconds: float = 1.0,
        debug_level: DebugLevel = DebugLevel.NONE,
        separator: str = DEFAULT_SEPARATOR,
        identifiers: Optional[Dict[int, str]] = None,
        call_later: Optional[CallLater] = None,
        diagnostics: Optional[Diagnostics] = None,
    ):
        self.diag = diagnostics or Diagnostics(debug_level)
        self.separator = separator
        self.resolver = ReferenceResolver(object_space)
        self.table = BindingTable(self._checked_count(count))
        self.debouncer = TriggerDebouncer(
            self.table, self.diag, self._checked_feedback(trigger_feedback_seconds), call_later
        )
        self.rebind_count = 0

        for index, text in (identifiers or {}).items():
            if self.table.get_slot(index) is not None:
                self.table.set_identifier(index, text)
            else:
                logger.warning(f"[REBIND] Ignoring identifier for slot {index} (count={self.table.count})")

    # ==================== Configuration Inputs ====================

    @property
    def trigger_feedback_seconds(self) -> float:
        return self.debouncer.feedback_seconds

    @property
    def debug_level(self) -> DebugLevel:
        return self.diag.level

    def add_indicator_listener(self, listener: IndicatorListener):
        self.table.add_listener(listener)

    def start(self):
        """Initial binding pass."""
        self.diag.call("RebindController.start")
        self.rebind()
        logger.info(self.table.get_status_summary())

    def set_identifier(self, index: int, identifier: str) -> bool:
        """Per-slot text input. Rebinds everything if the text changed."""
        self.diag.call("RebindController.set_identifier", index, identifier)
        if not self.table.set_identifier(index, identifier):
            return False
        self.rebind()
        return True

    def set_count(self, count: int) -> int:
        self.diag.call("RebindController.set_count", count)
        clamped = self._checked_count(count)
        self.table.resize(clamped)
        self.rebind()
        return clamped

    def set_trigger_feedback(self, seconds: float) -> float:
        """Applies to future trigger events; pending timers keep their deadline."""
        self.diag.call("RebindController.set_trigger_feedback", seconds)
        clamped = self._checked_feedback(seconds)
        self.debouncer.feedback_seconds = clamped
        return clamped

    def _checked_count(self, count: int) -> int:
        clamped = clamp_count(count)
        if clamped != count:
            self.diag.warning(f"[REBIND] Slot count {count} out of range, using {clamped}")
        return clamped

    def _checked_feedback(self, seconds: float) -> float:
        clamped = clamp_feedback(seconds)
        if clamped != seconds:
            self.diag.warning(f"[REBIND] Trigger feedback {seconds}s out of range, using {clamped}s")
        return clamped

    def set_debug_level(self, level: DebugLevel):
        self.diag.set_level(level)
        self.diag.debug(f"[REBIND] Debug level set to {self.diag.level.value}")

    def identifiers(self) -> Dict[int, str]:
        return {s.index: s.identifier for s in self.table.get_all_slots()}

    def slots(self) -> List[Slot]:
        return self.table.get_all_slots()

    # ==================== Rebind ====================

    def rebind(self):
        """Tear down every binding, then resolve and subscribe each slot independently."""
        self.diag.call("RebindController.rebind")
        self.rebind_count += 1

        self.table.reset_all()

        for slot in self.table.get_all_slots():
            if not slot.identifier:
                continue
            try:
                self._bind_slot(slot)
            except BindingError as e:
                self.diag.error(f"[SLOT {slot.index}] {e}")
                self.table.mark_failed(slot, str(e))

        self.diag.debug(
            f"[REBIND] #{self.rebind_count}: {self.table.count_valid()}/{self.table.count} slots valid"
        )

    def teardown(self):
        """Dispose all subscriptions and timers. Slots stay indeterminate."""
        self.diag.call("RebindController.teardown")
        self.table.reset_all()

    def _bind_slot(self, slot: Slot):
        component_name, control_name = parse_identifier(slot.identifier, self.separator)
        slot.component_name = component_name
        slot.control_name = control_name

        handle = self.resolver.resolve(component_name, control_name)
        classification = classify(handle.type_tag)

        if classification is Classification.TRIGGER:
            subscription = handle.subscribe(lambda ref, s=slot: self._on_trigger(s))
            initial = False
        else:
            subscription = handle.subscribe(lambda ref, s=slot: self._on_continuous(s, ref))
            initial = handle.boolean

        self.table.bind(slot, handle, classification, subscription, initial)
        self.diag.debug(
            f"[SLOT {slot.index}] Bound to {component_name}{self.separator}{control_name} "
            f"({handle.type_tag.value} -> {classification.value}, lit={slot.lit})"
        )

    # ==================== Change Handlers ====================

    def _on_continuous(self, slot: Slot, ref: ObservableRef):
        self.diag.call("RebindController._on_continuous", slot.index)
        if slot.handle is not ref:
            return
        self.table.set_lit(slot, ref.boolean)
        self.diag.debug(f"[SLOT {slot.index}] Mirrored {slot.lit}")

    def _on_trigger(self, slot: Slot):
        if slot.handle is None:
            return
        self.debouncer.on_event(slot)
