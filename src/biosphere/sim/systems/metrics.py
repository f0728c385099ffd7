from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from ..core.organism import Organism
from ..types.metrics import GenerationMetrics


@dataclass(slots=True)
class TickCounters:
    births: int = 0
    starved: int = 0
    died_of_age: int = 0
    consumed: int = 0
    predation_successes: int = 0
    predation_failures: int = 0


def population_stats(organisms: Sequence[Organism]) -> Tuple[int, float, float, int]:
    population = len(organisms)
    if population == 0:
        return 0, 0.0, 0.0, 0
    energy_sum = 0.0
    age_sum = 0.0
    max_generation = 0
    for organism in organisms:
        energy_sum += organism.energy
        age_sum += organism.age
        if organism.generation > max_generation:
            max_generation = organism.generation
    return population, energy_sum / population, age_sum / population, max_generation


def create_metrics(
    generation: int,
    counters: TickCounters,
    duration_ms: float,
    stats: Tuple[int, float, float, int],
) -> GenerationMetrics:
    population, avg_energy, avg_age, max_generation = stats
    return GenerationMetrics(
        generation=generation,
        population=population,
        births=counters.births,
        deaths=counters.starved + counters.died_of_age + counters.consumed,
        starved=counters.starved,
        died_of_age=counters.died_of_age,
        consumed=counters.consumed,
        predation_successes=counters.predation_successes,
        predation_failures=counters.predation_failures,
        average_energy=avg_energy,
        average_age=avg_age,
        max_generation=max_generation,
        tick_duration_ms=duration_ms,
    )
