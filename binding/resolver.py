"""
Reference Resolver - turns (component, control) names into a live control.
"""

from __future__ import annotations
from typing import TYPE_CHECKING
from binding.errors import ComponentUnavailable, ResolutionError, ResolutionFailure
from binding.models import ObservableRef
import logging

if TYPE_CHECKING:
    from objectspace.local import ObjectSpace

logger = logging.getLogger(__name__)


class ReferenceResolver:
    """Resolves names against the runtime object space."""

    def __init__(self, object_space: "ObjectSpace"):
        self.object_space = object_space

    def resolve(self, component_name: str, control_name: str) -> ObservableRef:
        """
        Return the control, or raise ResolutionError.

        A component that exists but fails its probe read is treated
        exactly like one that does not exist.
        """
        component = self.object_space.try_component(component_name)
        if component is None:
            raise ResolutionError(ResolutionFailure.COMPONENT_NOT_FOUND, component_name, control_name)

        try:
            component.probe()
        except ComponentUnavailable:
            raise ResolutionError(
                ResolutionFailure.COMPONENT_NOT_FOUND, component_name, control_name
            ) from None

        control = component.get(control_name)
        if control is None:
            raise ResolutionError(ResolutionFailure.CONTROL_NOT_FOUND, component_name, control_name)

        return control
