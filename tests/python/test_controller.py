from __future__ import annotations

import asyncio

import pytest
from pytest import approx

from biosphere.app.controller import SimulationController
from biosphere.sim.core.config import SimulationConfig
from biosphere.sim.core.errors import InvalidArgumentError
from biosphere.sim.core.organism import OrganismSettings


def _controller(**overrides) -> SimulationController:
    values = dict(seed=21, initial_population=4)
    values.update(overrides)
    return SimulationController(SimulationConfig(**values))


def test_timer_signals_are_ignored_while_paused():
    controller = _controller()

    assert controller.on_timer(5.0) == 0
    assert controller.snapshot.generation == 0


def test_timer_signals_accumulate_into_generations():
    controller = _controller(generation_interval=1.0)
    controller.start()

    assert controller.on_timer(2.5) == 2
    assert controller.snapshot.generation == 2
    assert controller.on_timer(0.5) == 1
    assert controller.snapshot.generation == 3


def test_speed_is_clamped_and_shortens_the_interval():
    controller = _controller(generation_interval=1.0)

    assert controller.set_speed(100.0) == 10.0
    assert controller.set_speed(0.0) == 0.1
    controller.set_speed(2.0)
    controller.start()

    assert controller.generation_interval == approx(0.5)
    assert controller.on_timer(1.0) == 2


def test_pause_discards_partial_interval():
    controller = _controller(generation_interval=1.0)
    controller.start()
    controller.on_timer(0.9)
    controller.pause()
    controller.start()

    assert controller.on_timer(0.2) == 0


def test_fast_forward_advances_and_restores_running_state():
    controller = _controller()
    controller.start()

    snapshot = asyncio.run(controller.fast_forward(6, batch_size=2))

    assert snapshot.generation == 6
    assert controller.snapshot is snapshot
    assert controller.running


def test_fast_forward_yields_to_the_event_loop_between_batches():
    controller = _controller()
    seen: list[int] = []

    async def observer() -> None:
        for _ in range(4):
            seen.append(controller.snapshot.generation)
            await asyncio.sleep(0)

    async def exercise() -> None:
        await asyncio.gather(controller.fast_forward(10, batch_size=2), observer())

    asyncio.run(exercise())

    assert controller.snapshot.generation == 10
    assert any(0 < generation < 10 for generation in seen)


def test_fast_forward_rejects_bad_counts_without_work():
    controller = _controller()
    before = controller.snapshot

    with pytest.raises(InvalidArgumentError):
        asyncio.run(controller.fast_forward(-3))

    assert controller.snapshot is before


def test_new_simulation_resets_state():
    controller = _controller()
    controller.start()
    asyncio.run(controller.tick())

    snapshot = asyncio.run(controller.new_simulation(OrganismSettings(motility=0.9), 3))

    assert not controller.running
    assert snapshot.generation == 0
    assert snapshot.population == 3
    assert all(o.traits.motility == approx(0.9) for o in snapshot.organisms)


def test_player_control_moves_the_organism():
    controller = _controller()
    asyncio.run(controller.new_simulation(OrganismSettings(motility=0.5), 2))
    bystander, target = controller.snapshot.organisms

    controller.take_control(target.id)
    assert asyncio.run(controller.move_player_organism((1.0, 0.0, 0.0)))

    moved = controller.snapshot.organisms[1]
    assert moved.id == target.id
    assert moved.position.x == approx(min(50.0, target.position.x + 1.5))
    assert moved.energy == approx(target.energy - 0.15)
    assert moved.actions[-1] == "player_moved"
    assert controller.snapshot.organisms[0] == bystander


def test_player_control_requires_a_known_organism():
    controller = _controller()

    with pytest.raises(ValueError):
        controller.take_control("organism-missing")
    assert not asyncio.run(controller.move_player_organism((1.0, 0.0, 0.0)))

    controller.take_control(controller.snapshot.organisms[0].id)
    controller.release_control()
    assert controller.controlled_id is None


def test_player_move_rejects_malformed_directions():
    controller = _controller()
    controller.take_control(controller.snapshot.organisms[0].id)

    with pytest.raises(ValueError):
        asyncio.run(controller.move_player_organism((1.0, 0.0)))


def test_new_simulation_waits_for_a_running_fast_forward():
    controller = _controller()

    async def reset_midway() -> None:
        await asyncio.sleep(0)
        await controller.new_simulation(OrganismSettings(motility=0.9), 7)

    async def exercise() -> None:
        await asyncio.gather(controller.fast_forward(20, batch_size=1), reset_midway())

    asyncio.run(exercise())

    snapshot = controller.snapshot
    assert snapshot.generation == 0
    assert snapshot.population == 7
    assert all(o.traits.motility == approx(0.9) for o in snapshot.organisms)
    assert not controller.running


def test_timer_signals_are_dropped_during_fast_forward():
    controller = _controller(generation_interval=1.0)
    counts: list[int] = []

    async def timer_midway() -> None:
        await asyncio.sleep(0)
        controller.running = True
        counts.append(controller.on_timer(5.0))
        controller.running = False

    async def exercise() -> None:
        await asyncio.gather(controller.fast_forward(10, batch_size=1), timer_midway())

    asyncio.run(exercise())

    assert counts == [0]
    assert controller.snapshot.generation == 10


def test_pause_during_fast_forward_is_not_reverted():
    controller = _controller()
    controller.start()

    async def pause_midway() -> None:
        await asyncio.sleep(0)
        controller.pause()

    async def exercise() -> None:
        await asyncio.gather(controller.fast_forward(10, batch_size=1), pause_midway())

    asyncio.run(exercise())

    assert controller.snapshot.generation == 10
    assert not controller.running


def test_cancelled_fast_forward_restores_running_state():
    controller = _controller()
    controller.start()

    async def exercise() -> None:
        task = asyncio.create_task(controller.fast_forward(50, batch_size=1))
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(exercise())

    assert controller.running
    assert 0 < controller.snapshot.generation < 50
