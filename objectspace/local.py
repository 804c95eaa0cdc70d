"""
Runtime Object Space - in-memory model of the host's named components.
Components can appear, disappear or become unreachable at any time;
controls push change notifications to their subscribers.
"""

from __future__ import annotations
import json
from typing import Any, Callable, Dict, Iterator, List, Optional
from binding.errors import ComponentUnavailable
from binding.models import TypeTag
import logging

logger = logging.getLogger(__name__)

ChangeHandler = Callable[["Control"], None]
TopologyListener = Callable[[], None]


class ControlSubscription:
    """Disposable handle returned by Control.subscribe()."""

    def __init__(self, control: "Control", handler: ChangeHandler):
        self._control = control
        self._handler = handler
        self.active = True

    def dispose(self):
        if not self.active:
            return
        self.active = False
        self._control._detach(self)

    def _deliver(self, control: "Control"):
        if self.active:
            self._handler(control)


class Control:
    """A named control on a component. Holds a raw value and its boolean view."""

    def __init__(self, name: str, type_tag: TypeTag = TypeTag.OTHER, value: Any = None):
        self.name = name
        self.type_tag = TypeTag.parse(type_tag)
        self.value = value
        self._subscriptions: List[ControlSubscription] = []

    @property
    def boolean(self) -> bool:
        value = self.value
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "on", "yes")
        return bool(value)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, handler: ChangeHandler) -> ControlSubscription:
        sub = ControlSubscription(self, handler)
        self._subscriptions.append(sub)
        return sub

    def _detach(self, sub: ControlSubscription):
        try:
            self._subscriptions.remove(sub)
        except ValueError:
            pass

    def update(self, value: Any):
        """Host-side change: store the value and notify every subscriber."""
        self.value = value
        for sub in list(self._subscriptions):
            try:
                sub._deliver(self)
            except Exception as e:
                logger.error(f"[OBJECTS] Change handler error on '{self.name}': {e}", exc_info=True)

    def __repr__(self):
        return f"Control({self.name!r}, {self.type_tag.value}, value={self.value!r})"


class Component:
    """A named component owning controls. May exist but be unreachable."""

    def __init__(self, name: str, accessible: bool = True):
        self.name = name
        self.accessible = accessible
        self._controls: Dict[str, Control] = {}

    def probe(self) -> List[str]:
        """Safe read of the member names. Raises ComponentUnavailable if unreachable."""
        if not self.accessible:
            raise ComponentUnavailable(self.name)
        return list(self._controls)

    def get(self, name: str) -> Optional[Control]:
        return self._controls.get(name)

    def add_control(self, control: Control) -> Control:
        self._controls[control.name] = control
        return control

    def remove_control(self, name: str) -> Optional[Control]:
        return self._controls.pop(name, None)

    def controls(self) -> Iterator[Control]:
        return iter(list(self._controls.values()))


class ObjectSpace:
    """Name -> component lookup, shared by the resolver and the host feed."""

    def __init__(self):
        self._components: Dict[str, Component] = {}
        self._topology_listeners: List[TopologyListener] = []

    # ==================== Lookup ====================

    def try_component(self, name: str) -> Optional[Component]:
        """Return the component registered under an exact name, or None."""
        return self._components.get(name)

    def names(self) -> List[str]:
        return sorted(self._components)

    def __contains__(self, name: str) -> bool:
        return name in self._components

    # ==================== Mutation ====================

    def on_topology_change(self, listener: TopologyListener):
        self._topology_listeners.append(listener)

    def add_component(self, component: Component) -> Component:
        self._components[component.name] = component
        self._notify_topology()
        return component

    def remove_component(self, name: str) -> Optional[Component]:
        component = self._components.pop(name, None)
        if component is not None:
            self._notify_topology()
        return component

    def set_accessible(self, name: str, accessible: bool) -> bool:
        """Flip a component's reachability. Returns True if anything changed."""
        component = self._components.get(name)
        if component is None or component.accessible == accessible:
            return False
        component.accessible = accessible
        logger.info(f"[OBJECTS] {name}: {'accessible' if accessible else 'unreachable'}")
        self._notify_topology()
        return True

    def mark_all_unreachable(self):
        changed = False
        for component in self._components.values():
            if component.accessible:
                component.accessible = False
                changed = True
        if changed:
            self._notify_topology()

    def load(self, snapshot: Dict[str, Any], replace: bool = True):
        """
        Upsert components and controls from a snapshot dict.
        Existing Control objects are updated in place so live subscriptions
        survive. With replace=True, components missing from the snapshot are removed.
        """
        entries = snapshot.get("components", [])
        if not isinstance(entries, list):
            logger.warning(f"[OBJECTS] Ignoring snapshot, components is not a list: {entries!r:.100}")
            return

        seen = set()
        changed = False
        for entry in entries:
            if not isinstance(entry, dict):
                logger.warning(f"[OBJECTS] Skipping malformed component entry: {entry!r:.100}")
                continue
            name = entry.get("name")
            if not name or not isinstance(name, str):
                logger.warning(f"[OBJECTS] Skipping unnamed component: {entry!r:.100}")
                continue
            seen.add(name)

            accessible = bool(entry.get("accessible", True))
            component = self._components.get(name)
            if component is None:
                component = Component(name, accessible)
                self._components[name] = component
                changed = True
            elif component.accessible != accessible:
                component.accessible = accessible
                changed = True

            listed = set()
            raw_controls = entry.get("controls", [])
            if not isinstance(raw_controls, list):
                logger.warning(f"[OBJECTS] {name}: controls is not a list, keeping current controls")
                continue
            for raw in raw_controls:
                ctl_name = raw.get("name") if isinstance(raw, dict) else None
                if not ctl_name or not isinstance(ctl_name, str):
                    logger.warning(f"[OBJECTS] {name}: skipping malformed control {raw!r:.100}")
                    continue
                listed.add(ctl_name)
                tag = TypeTag.parse(raw.get("type", TypeTag.OTHER))
                existing = component.get(ctl_name)
                if existing is None or existing.type_tag != tag:
                    component.add_control(Control(ctl_name, tag, raw.get("value")))
                    changed = True
                elif existing.value != raw.get("value"):
                    existing.update(raw.get("value"))

            if replace and "controls" in entry:
                for stale in [c.name for c in component.controls() if c.name not in listed]:
                    component.remove_control(stale)
                    changed = True

        if replace:
            for name in [n for n in self._components if n not in seen]:
                del self._components[name]
                changed = True

        if changed:
            self._notify_topology()

    @classmethod
    def from_file(cls, path: str) -> "ObjectSpace":
        """Seed an object space from a JSON snapshot file."""
        space = cls()
        with open(path, "r") as f:
            space.load(json.load(f))
        logger.info(f"[OBJECTS] Loaded {len(space.names())} components from {path}")
        return space

    def _notify_topology(self):
        for listener in list(self._topology_listeners):
            try:
                listener()
            except Exception as e:
                logger.error(f"[OBJECTS] Topology listener error: {e}", exc_info=True)
