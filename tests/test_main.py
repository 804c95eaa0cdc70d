import asyncio

import pytest

from binding.models import TypeTag
from config import MirrorConfig
from main import Mirror
from objectspace.local import Component, Control, ObjectSpace


def build_config():
    config = MirrorConfig()
    config.engine.count = 2
    config.engine.identifiers = {1: "Deck.play", 2: "Later.power"}
    config.dashboard.enabled = False
    return config


@pytest.mark.asyncio
async def test_mirror_binds_on_start_and_rebinds_on_topology_change() -> None:
    space = ObjectSpace()
    deck = Component("Deck")
    deck.add_control(Control("play", TypeTag.TOGGLE, True))
    space.add_component(deck)

    mirror = Mirror(build_config(), object_space=space)
    task = asyncio.create_task(mirror.start())
    await asyncio.sleep(0)

    play, power = mirror.controller.slots()
    assert (play.valid, play.lit) == (True, True)
    assert power.indeterminate is True

    later = Component("Later")
    later.add_control(Control("power", TypeTag.BOOLEAN, True))
    space.add_component(later)
    assert mirror.controller.slots()[1].lit is True

    await mirror.stop()
    await asyncio.wait_for(task, timeout=1)

    assert mirror.controller.table.count_subscriptions() == 0
    assert all(s.indeterminate for s in mirror.controller.slots())


def test_objects_file_seeds_object_space(tmp_path) -> None:
    path = tmp_path / "objects.json"
    path.write_text('{"components": [{"name": "Deck", "controls": [{"name": "play", "type": "Toggle", "value": 1}]}]}')
    config = build_config()
    config.host.objects_file = str(path)

    mirror = Mirror(config)
    mirror.controller.start()
    assert mirror.controller.slots()[0].lit is True
    assert mirror.feed is None
