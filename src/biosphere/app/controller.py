from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Optional, Sequence

from pygame.math import Vector3

from ..sim.core.config import SimulationConfig
from ..sim.core.fast_forward import validate_generation_count
from ..sim.core.organism import OrganismSettings
from ..sim.core.scheduler import GenerationScheduler
from ..sim.types.snapshot import PopulationSnapshot
from ..sim.utils.math3d import clamp_position, clamp_value

logger = logging.getLogger(__name__)

MIN_SPEED = 0.1
MAX_SPEED = 10.0
PLAYER_SPEED_FACTOR = 3.0
PLAYER_ENERGY_FACTOR = 0.3


class SimulationController:
    """Owns the current snapshot plus run/pause/speed state.

    Generations advance only when a caller supplies a tick signal: ``tick()``
    directly, ``on_timer()`` with elapsed wall time, or the ``run()`` loop.
    """

    def __init__(self, config: SimulationConfig, batch_size: int = 25):
        self.config = config
        self.scheduler = GenerationScheduler(config)
        self.snapshot: PopulationSnapshot = self.scheduler.initial_snapshot()
        self.batch_size = max(1, batch_size)
        self.running = False
        self.speed_multiplier = 1.0
        self.controlled_id: Optional[str] = None
        self._elapsed = 0.0
        self._run_state_changed = False
        self._lock = asyncio.Lock()
        self._loop_task: asyncio.Task | None = None

    @property
    def generation_interval(self) -> float:
        return self.config.generation_interval / self.speed_multiplier

    def start(self) -> None:
        if not self.running:
            logger.info("simulation started at generation %d", self.snapshot.generation)
        self.running = True
        self._run_state_changed = True

    def pause(self) -> None:
        if self.running:
            logger.info("simulation paused at generation %d", self.snapshot.generation)
        self.running = False
        self._run_state_changed = True
        self._elapsed = 0.0

    def set_speed(self, multiplier: float) -> float:
        self.speed_multiplier = clamp_value(float(multiplier), MIN_SPEED, MAX_SPEED)
        return self.speed_multiplier

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def _advance(self) -> PopulationSnapshot:
        self.snapshot = self.scheduler.advance_one_generation(self.snapshot)
        return self.snapshot

    async def tick(self) -> PopulationSnapshot:
        async with self._lock:
            return self._advance()

    def on_timer(self, elapsed_seconds: float) -> int:
        """Advance one generation per elapsed interval; returns how many ran.

        Signals arriving while a fast-forward holds the snapshot are dropped.
        """
        if not self.running or self.busy:
            return 0
        self._elapsed += max(0.0, elapsed_seconds)
        interval = self.generation_interval
        advanced = 0
        while self._elapsed >= interval:
            self._elapsed -= interval
            self._advance()
            advanced += 1
        return advanced

    async def run(self) -> None:
        while True:
            await asyncio.sleep(self.generation_interval)
            if not self.running:
                continue
            await self.tick()

    def launch(self) -> asyncio.Task:
        if self._loop_task is None:
            self._loop_task = asyncio.create_task(self.run())
        return self._loop_task

    async def shutdown(self) -> None:
        if self._loop_task is not None:
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
            self._loop_task = None

    async def fast_forward(self, generations: int, batch_size: int | None = None) -> PopulationSnapshot:
        count = validate_generation_count(generations)
        batch = max(1, batch_size or self.batch_size)
        was_running = self.running
        self.running = False
        self._run_state_changed = False
        logger.info("fast-forwarding %d generations from %d", count, self.snapshot.generation)
        try:
            async with self._lock:
                for index, snapshot in enumerate(self.scheduler.iter_generations(self.snapshot, count), start=1):
                    self.snapshot = snapshot
                    if index % batch == 0:
                        await asyncio.sleep(0)
        finally:
            # start()/pause() during the run win over the saved state.
            if not self._run_state_changed:
                self.running = was_running
        return self.snapshot

    async def new_simulation(
        self, settings: OrganismSettings | None = None, count: int | None = None
    ) -> PopulationSnapshot:
        async with self._lock:
            self.pause()
            self.controlled_id = None
            self.snapshot = self.scheduler.initial_snapshot(settings, count)
            logger.info("new simulation with %d founding organisms", self.snapshot.population)
            return self.snapshot

    def take_control(self, organism_id: str) -> None:
        if not any(organism.id == organism_id for organism in self.snapshot.organisms):
            raise ValueError(f"Unknown organism: {organism_id}")
        self.controlled_id = organism_id

    def release_control(self) -> None:
        self.controlled_id = None

    async def move_player_organism(self, direction: Sequence[float]) -> bool:
        """Nudge the controlled organism; False when nothing is controlled."""
        if len(direction) != 3:
            raise ValueError(f"direction needs three components, got {len(direction)}")
        step_direction = Vector3(*direction)
        async with self._lock:
            if self.controlled_id is None:
                return False
            organisms = list(self.snapshot.organisms)
            for index, organism in enumerate(organisms):
                if organism.id != self.controlled_id:
                    continue
                motility = organism.traits.motility
                step = step_direction * (motility * PLAYER_SPEED_FACTOR)
                organisms[index] = organism.with_action(
                    "player_moved",
                    position=clamp_position(organism.position + step, self.config.half_extent),
                    energy=organism.energy - motility * PLAYER_ENERGY_FACTOR,
                )
                self.snapshot = replace(self.snapshot, organisms=tuple(organisms))
                return True
            # The controlled organism died or was eaten.
            self.controlled_id = None
            return False
