from __future__ import annotations

from typing import List, Optional, Tuple

from ..core.config import SimulationConfig
from ..core.organism import Organism
from ..core.rng import DeterministicRng
from ..utils.math3d import distance

_MIN_DISTANCE = 1e-6


def find_prey(predator: Organism, pool: List[Organism], config: SimulationConfig) -> Optional[int]:
    """Index of the most vulnerable reachable prey in ``pool``, or None.

    Vulnerability is ``(1 - defense) / distance``; on ties the earliest
    candidate in pool order wins.
    """
    settings = config.predation
    sensory_range = predator.traits.sensory * settings.sensory_radius
    max_size = predator.size * settings.max_prey_size_ratio
    best_index: Optional[int] = None
    best_score = 0.0
    for index, candidate in enumerate(pool):
        if candidate.id == predator.id:
            continue
        if candidate.size >= max_size:
            continue
        dist = distance(predator.position, candidate.position)
        if dist > sensory_range:
            continue
        score = (1.0 - candidate.traits.defense) / max(dist, _MIN_DISTANCE)
        if best_index is None or score > best_score:
            best_index = index
            best_score = score
    return best_index


def predation_gain(prey: Organism, config: SimulationConfig) -> float:
    settings = config.predation
    return prey.energy * settings.energy_transfer + prey.size * settings.size_energy


def resolve_predation(
    predator: Organism,
    pool: List[Organism],
    rng: DeterministicRng,
    config: SimulationConfig,
) -> Tuple[Organism, List[Organism]]:
    """Let ``predator`` hunt once among ``pool``.

    ``pool`` is modified in place: consumed prey are removed and defended
    prey are replaced by their updated copy. The same list is returned.
    """
    if predator.traits.predation <= 0.0 or predator.energy <= 0.0:
        return predator, pool
    index = find_prey(predator, pool, config)
    if index is None:
        return predator, pool

    settings = config.predation
    prey = pool[index]
    attack = predator.traits.predation
    defense = prey.traits.defense
    if attack > defense and rng.next_float() < attack - defense + settings.success_bonus:
        del pool[index]
        predator = predator.with_action("predation", energy=predator.energy + predation_gain(prey, config))
        return predator, pool

    predator = predator.with_action(
        "failed_predation", energy=predator.energy - attack * settings.failed_attack_cost
    )
    pool[index] = prey.with_action("defended", energy=prey.energy - defense * settings.defense_cost)
    return predator, pool
