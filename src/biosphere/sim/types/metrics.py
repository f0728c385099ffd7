from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class GenerationMetrics:
    generation: int
    population: int
    births: int
    deaths: int
    starved: int
    died_of_age: int
    consumed: int
    predation_successes: int
    predation_failures: int
    average_energy: float
    average_age: float
    max_generation: int
    tick_duration_ms: float = 0.0
