import asyncio
import json

import pytest
from fastapi import HTTPException

from biosphere.app import server


def _body(response) -> dict:
    return json.loads(response.body)


def test_status_and_snapshot_payloads():
    status = _body(asyncio.run(server.status()))
    snapshot = _body(asyncio.run(server.snapshot()))

    assert status["generation"] == snapshot["generation"]
    assert status["population"] == len(snapshot["organisms"])
    organism = snapshot["organisms"][0]
    for key in ["id", "x", "y", "z", "size", "traits", "energy", "age", "generation", "actions"]:
        assert key in organism
    assert snapshot["environment"]["resources"]["light"] == 100.0


def test_new_simulation_and_fast_forward_routes():
    created = _body(asyncio.run(server.new_simulation({"settings": {"motility": 0.3}, "count": 3})))
    assert created == {"generation": 0, "population": 3}

    advanced = _body(asyncio.run(server.fast_forward({"generations": 2})))
    assert advanced["generation"] == 2


def test_fast_forward_route_rejects_bad_counts():
    with pytest.raises(HTTPException) as excinfo:
        asyncio.run(server.fast_forward({"generations": -1}))
    assert excinfo.value.status_code == 400


def test_speed_route_clamps():
    assert _body(asyncio.run(server.set_speed({"multiplier": 50}))) == {"multiplier": 10.0}
    asyncio.run(server.set_speed({"multiplier": 1.0}))


@pytest.mark.parametrize("multiplier", ["fast", None, [2.0]])
def test_speed_route_rejects_non_numeric_multipliers(multiplier):
    with pytest.raises(HTTPException) as excinfo:
        asyncio.run(server.set_speed({"multiplier": multiplier}))
    assert excinfo.value.status_code == 400


@pytest.mark.parametrize(
    "payload",
    [{"count": "many"}, {"settings": {"motility": "quick"}}, {"settings": ["motility"]}],
)
def test_new_simulation_route_rejects_malformed_payloads(payload):
    with pytest.raises(HTTPException) as excinfo:
        asyncio.run(server.new_simulation(payload))
    assert excinfo.value.status_code == 400


@pytest.mark.parametrize("direction", [["left", 0, 0], [1.0, 0.0], 5])
def test_move_route_rejects_malformed_directions(direction):
    asyncio.run(server.new_simulation({"count": 2}))
    organism_id = _body(asyncio.run(server.snapshot()))["organisms"][0]["id"]
    asyncio.run(server.take_control({"id": organism_id}))

    with pytest.raises(HTTPException) as excinfo:
        asyncio.run(server.move_player({"direction": direction}))
    assert excinfo.value.status_code == 400
    asyncio.run(server.release_control())


def test_move_route_moves_the_controlled_organism():
    asyncio.run(server.new_simulation({"count": 2}))
    organism_id = _body(asyncio.run(server.snapshot()))["organisms"][0]["id"]
    asyncio.run(server.take_control({"id": organism_id}))

    moved = _body(asyncio.run(server.move_player({"direction": [0.0, 1.0, 0.0]})))

    assert moved == {"moved": True, "controlled": organism_id}
    asyncio.run(server.release_control())
