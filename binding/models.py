"""
Data models for the control mirror.
Slots, control type tags, classifications and the contracts a resolved
control has to honour.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Protocol


class TypeTag(Enum):
    TRIGGER = "Trigger"
    TEXT = "Text"
    ENUM = "Enum"
    ARRAY = "Array"
    BUTTON = "Button"
    TOGGLE = "Toggle"
    MOMENTARY = "Momentary"
    BOOLEAN = "Boolean"
    KNOB = "Knob"
    FLOAT = "Float"
    INTEGER = "Integer"
    TIME = "Time"
    STATUS = "Status"
    OTHER = "Other"

    @classmethod
    def parse(cls, raw: Any) -> "TypeTag":
        """Map a host-reported type string onto a tag. Unknown types become OTHER."""
        if isinstance(raw, cls):
            return raw
        try:
            return cls(str(raw))
        except ValueError:
            return cls.OTHER


class Classification(Enum):
    TRIGGER = "TRIGGER"
    CONTINUOUS = "CONTINUOUS"


# Controls whose notifications are momentary events rather than durable state
TRIGGER_TYPES = frozenset({TypeTag.TRIGGER, TypeTag.TEXT, TypeTag.ENUM, TypeTag.ARRAY})


def classify(tag: TypeTag) -> Classification:
    if tag in TRIGGER_TYPES:
        return Classification.TRIGGER
    return Classification.CONTINUOUS


class DebugLevel(Enum):
    NONE = "None"
    DEBUGGING = "Debugging"
    FUNCTION_CALLS = "Function Calls"
    ALL = "All"

    @classmethod
    def parse(cls, raw: Any) -> "DebugLevel":
        """Accept the display value or the member name, case-insensitively."""
        if isinstance(raw, cls):
            return raw
        text = str(raw).strip().lower()
        for level in cls:
            if text in (level.value.lower(), level.name.lower()):
                return level
        raise ValueError(f"Unknown debug level: {raw!r}")

    @property
    def debugging(self) -> bool:
        return self in (DebugLevel.DEBUGGING, DebugLevel.ALL)

    @property
    def function_calls(self) -> bool:
        return self in (DebugLevel.FUNCTION_CALLS, DebugLevel.ALL)


class Subscription(Protocol):
    def dispose(self) -> None: ...


class ObservableRef(Protocol):
    """A resolved external control. Read-only from the mirror's point of view."""

    @property
    def type_tag(self) -> TypeTag: ...

    @property
    def boolean(self) -> bool: ...

    def subscribe(self, handler: Callable[["ObservableRef"], None]) -> Subscription: ...


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


# Same shape as asyncio's loop.call_later
CallLater = Callable[..., TimerHandle]


@dataclass
class Slot:
    """One monitored position and its indicator output."""
    index: int                                  # 1..N
    identifier: str = ""
    component_name: Optional[str] = None
    control_name: Optional[str] = None
    handle: Optional[ObservableRef] = None
    classification: Optional[Classification] = None
    valid: bool = False
    lit: bool = False
    subscription: Optional[Subscription] = None
    pending_timer: Optional[TimerHandle] = None
    error: Optional[str] = None

    @property
    def indeterminate(self) -> bool:
        return not self.valid

    @property
    def is_active(self) -> bool:
        """True while a trigger on-period is counting down."""
        return self.pending_timer is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "identifier": self.identifier,
            "component": self.component_name,
            "control": self.control_name,
            "classification": self.classification.value if self.classification else None,
            "valid": self.valid,
            "lit": self.lit,
            "indeterminate": self.indeterminate,
            "active": self.is_active,
            "error": self.error,
        }
