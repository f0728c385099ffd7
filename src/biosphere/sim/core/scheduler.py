from __future__ import annotations

import logging
from time import perf_counter
from typing import Iterator, List

from ..systems import lifecycle, metrics as metrics_system, predation
from ..systems.mutation import MutationPolicy, resolve_mutation_policy
from ..types.snapshot import PopulationSnapshot
from .config import SimulationConfig
from .environment import make_environment, regenerate_resources
from .fast_forward import advance_generations, iter_generations
from .organism import Organism, OrganismSettings, create_initial_population, create_organism
from .rng import DeterministicRng

logger = logging.getLogger(__name__)


class GenerationScheduler:
    """Advances population snapshots one generation at a time.

    The scheduler holds configuration and the random stream only; every
    snapshot passed in is left untouched and a new one is returned.
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        rng: DeterministicRng | None = None,
        mutation_policy: MutationPolicy | None = None,
    ):
        self._config = config or SimulationConfig()
        self._rng = rng or DeterministicRng(self._config.seed)
        self._mutation_policy = mutation_policy or resolve_mutation_policy(
            self._config.evolution.mutation_policy
        )

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def rng(self) -> DeterministicRng:
        return self._rng

    def create_organism(self, settings: OrganismSettings | None = None) -> Organism:
        return create_organism(settings, self._rng, self._config)

    def initial_snapshot(
        self, settings: OrganismSettings | None = None, count: int | None = None
    ) -> PopulationSnapshot:
        if count is None:
            count = self._config.initial_population
        organisms = create_initial_population(settings, count, self._rng, self._config)
        return PopulationSnapshot(
            organisms=tuple(organisms),
            environment=make_environment(self._config.environment),
        )

    def advance_one_generation(self, snapshot: PopulationSnapshot) -> PopulationSnapshot:
        start = perf_counter()
        config = self._config
        rng = self._rng
        max_lifespan = config.species.max_lifespan
        counters = metrics_system.TickCounters()
        next_population: List[Organism] = []

        for organism in snapshot.organisms:
            organism = lifecycle.reset_actions(organism)
            if organism.energy <= 0:
                counters.starved += 1
                continue
            if organism.age >= max_lifespan:
                counters.died_of_age += 1
                continue

            organism = lifecycle.apply_metabolism(organism, config)
            if organism.energy <= 0:
                counters.starved += 1
                continue

            organism = lifecycle.apply_movement(organism, rng, config)
            organism = lifecycle.apply_photosynthesis(organism, snapshot.environment, config)

            # Only organisms already carried into this generation can be hunted.
            pool_size = len(next_population)
            organism, next_population = predation.resolve_predation(
                organism, next_population, rng, config
            )
            if len(next_population) < pool_size:
                counters.consumed += 1
                counters.predation_successes += 1
            elif organism.actions and organism.actions[-1] == "failed_predation":
                counters.predation_failures += 1

            organism, offspring = lifecycle.apply_reproduction(
                organism, rng, config, self._mutation_policy
            )
            next_population.append(organism)
            if offspring is not None:
                next_population.append(offspring)
                counters.births += 1

        environment = regenerate_resources(snapshot.environment, config.environment)
        generation = snapshot.generation + 1
        duration_ms = (perf_counter() - start) * 1000.0
        tick_metrics = metrics_system.create_metrics(
            generation,
            counters,
            duration_ms,
            metrics_system.population_stats(next_population),
        )
        logger.debug(
            "generation %d: population=%d births=%d deaths=%d",
            generation,
            tick_metrics.population,
            tick_metrics.births,
            tick_metrics.deaths,
        )
        return PopulationSnapshot(
            organisms=tuple(next_population),
            environment=environment,
            generation=generation,
            metrics=tick_metrics,
        )

    def advance_generations(self, snapshot: PopulationSnapshot, generations: int) -> PopulationSnapshot:
        return advance_generations(self, snapshot, generations)

    def iter_generations(self, snapshot: PopulationSnapshot, generations: int) -> Iterator[PopulationSnapshot]:
        return iter_generations(self, snapshot, generations)
