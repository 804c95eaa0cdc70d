"""
Binding errors. All of them are local to one slot and recoverable:
the slot goes indeterminate and the engine carries on.
"""

from __future__ import annotations
from enum import Enum


class ParseFailure(Enum):
    NO_SEPARATOR = "NoSeparator"


class ResolutionFailure(Enum):
    COMPONENT_NOT_FOUND = "ComponentNotFound"
    CONTROL_NOT_FOUND = "ControlNotFound"


class BindingError(Exception):
    """Base class for slot-local binding failures."""


class ParseError(BindingError):
    def __init__(self, reason: ParseFailure, identifier: str, separator: str):
        self.reason = reason
        self.identifier = identifier
        self.separator = separator
        super().__init__(
            f"Identifier '{identifier}' has no '{separator}' separator "
            f"(expected component{separator}control)"
        )


class ResolutionError(BindingError):
    def __init__(self, reason: ResolutionFailure, component_name: str, control_name: str):
        self.reason = reason
        self.component_name = component_name
        self.control_name = control_name
        if reason is ResolutionFailure.COMPONENT_NOT_FOUND:
            message = f"Component '{component_name}' not found or not accessible"
        else:
            message = f"Control '{control_name}' not found on component '{component_name}'"
        super().__init__(message)


class ComponentUnavailable(BindingError):
    """Raised by a component probe when the component exists but cannot be read."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Component '{name}' is not accessible")
