import pytest

from binding.errors import ComponentUnavailable, ResolutionError, ResolutionFailure
from binding.models import TypeTag
from binding.resolver import ReferenceResolver
from objectspace.local import Control


def test_resolves_existing_control(space) -> None:
    ref = ReferenceResolver(space).resolve("Mixer", "mute")
    assert ref.name == "mute"
    assert ref.type_tag is TypeTag.BUTTON
    assert ref.boolean is False


def test_unknown_component(space) -> None:
    with pytest.raises(ResolutionError) as exc:
        ReferenceResolver(space).resolve("Nope", "mute")
    assert exc.value.reason is ResolutionFailure.COMPONENT_NOT_FOUND


def test_unreachable_component_is_treated_as_missing(space) -> None:
    with pytest.raises(ResolutionError) as exc:
        ReferenceResolver(space).resolve("Amp", "mute")
    assert exc.value.reason is ResolutionFailure.COMPONENT_NOT_FOUND


def test_unknown_control(space) -> None:
    with pytest.raises(ResolutionError) as exc:
        ReferenceResolver(space).resolve("Mixer", "Mute")
    assert exc.value.reason is ResolutionFailure.CONTROL_NOT_FOUND
    assert "Mute" in str(exc.value)


def test_lookup_is_case_sensitive(space) -> None:
    with pytest.raises(ResolutionError) as exc:
        ReferenceResolver(space).resolve("mixer", "mute")
    assert exc.value.reason is ResolutionFailure.COMPONENT_NOT_FOUND


class StubComponent:
    def __init__(self, controls, accessible=True):
        self._controls = controls
        self.accessible = accessible

    def probe(self):
        if not self.accessible:
            raise ComponentUnavailable("stub")
        return list(self._controls)

    def get(self, name):
        return self._controls.get(name)


class StubSpace:
    def __init__(self, components):
        self._components = components

    def try_component(self, name):
        return self._components.get(name)


def test_resolves_against_any_object_space_shape() -> None:
    ref = Control("level", TypeTag.KNOB, 0.0)
    resolver = ReferenceResolver(StubSpace({"Desk": StubComponent({"level": ref})}))

    assert resolver.resolve("Desk", "level") is ref
    with pytest.raises(ResolutionError) as exc:
        resolver.resolve("Desk", "pan")
    assert exc.value.reason is ResolutionFailure.CONTROL_NOT_FOUND

    resolver.object_space._components["Desk"].accessible = False
    with pytest.raises(ResolutionError) as exc:
        resolver.resolve("Desk", "level")
    assert exc.value.reason is ResolutionFailure.COMPONENT_NOT_FOUND
