import pytest
from aiohttp import test_utils

from dashboard import Dashboard


@pytest.fixture
def controller(make_controller):
    controller = make_controller(count=3, identifiers={1: "Mixer.mute", 2: "Ghost.x"})
    controller.start()
    return controller


@pytest.mark.asyncio
async def test_slots_endpoint_reports_indicator_state(controller) -> None:
    dashboard = Dashboard(controller)
    async with test_utils.TestClient(test_utils.TestServer(dashboard.app)) as client:
        resp = await client.get("/api/slots")
        assert resp.status == 200
        data = await resp.json()

    assert data["count"] == 3
    assert data["valid"] == 1
    first, second, third = data["slots"]
    assert first["identifier"] == "Mixer.mute"
    assert first["classification"] == "CONTINUOUS"
    assert first["indeterminate"] is False
    assert second["indeterminate"] is True
    assert "Ghost" in second["error"]
    assert third["identifier"] == ""


@pytest.mark.asyncio
async def test_put_identifier_rebinds(controller) -> None:
    dashboard = Dashboard(controller)
    async with test_utils.TestClient(test_utils.TestServer(dashboard.app)) as client:
        resp = await client.put("/api/slots/2", json={"identifier": "Router.bypass"})
        assert resp.status == 200
        data = await resp.json()

    assert data["changed"] is True
    assert data["slot"]["valid"] is True
    assert data["slot"]["lit"] is True
    assert controller.slots()[1].identifier == "Router.bypass"


@pytest.mark.asyncio
async def test_put_identifier_validation(controller) -> None:
    dashboard = Dashboard(controller)
    async with test_utils.TestClient(test_utils.TestServer(dashboard.app)) as client:
        assert (await client.put("/api/slots/9", json={"identifier": "a.b"})).status == 404
        assert (await client.put("/api/slots/x", json={"identifier": "a.b"})).status == 400
        assert (await client.put("/api/slots/1", json={"identifier": 5})).status == 400
        assert (await client.put("/api/slots/1", data="nope")).status == 400


@pytest.mark.asyncio
async def test_config_update(controller) -> None:
    dashboard = Dashboard(controller)
    async with test_utils.TestClient(test_utils.TestServer(dashboard.app)) as client:
        resp = await client.put(
            "/api/config",
            json={"count": 5, "trigger_feedback_seconds": 400, "debug_level": "All"},
        )
        assert resp.status == 200
        data = await resp.json()

        assert data == {
            "count": 5,
            "trigger_feedback_seconds": 300.0,
            "debug_level": "All",
            "separator": ".",
        }
        assert (await client.put("/api/config", json={"count": "many"})).status == 400
        assert (await client.put("/api/config", json={"debug_level": "Loud"})).status == 400

    assert controller.table.count == 5


@pytest.mark.asyncio
async def test_logs_endpoint_tails_file(controller, tmp_path) -> None:
    log_path = tmp_path / "mirror.log"
    log_path.write_text("one\ntwo\nthree\n")
    dashboard = Dashboard(controller, log_path=str(log_path))
    async with test_utils.TestClient(test_utils.TestServer(dashboard.app)) as client:
        data = await (await client.get("/api/logs?n=2")).json()
    assert data == {"lines": ["two", "three"], "total": 2}


@pytest.mark.asyncio
@pytest.mark.parametrize("n", [0, -2])
async def test_logs_endpoint_non_positive_n_returns_nothing(controller, tmp_path, n) -> None:
    log_path = tmp_path / "mirror.log"
    log_path.write_text("one\ntwo\nthree\n")
    dashboard = Dashboard(controller, log_path=str(log_path))
    async with test_utils.TestClient(test_utils.TestServer(dashboard.app)) as client:
        data = await (await client.get(f"/api/logs?n={n}")).json()
    assert data == {"lines": [], "total": 0}
