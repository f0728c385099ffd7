from __future__ import annotations

from dataclasses import replace
from typing import Optional, Tuple

from pygame.math import Vector3

from ..core.config import SimulationConfig
from ..core.environment import Environment
from ..core.organism import Organism, new_organism_id
from ..core.rng import DeterministicRng
from ..utils.math3d import clamp_position
from .mutation import MutationPolicy, inherit


def metabolic_cost(organism: Organism, config: SimulationConfig) -> float:
    species = config.species
    return (
        species.base_consumption
        * (1.0 + organism.traits.metabolism)
        * (1.0 + organism.size * species.size_consumption_factor)
    )


def degeneration_cost(age: int, config: SimulationConfig) -> float:
    species = config.species
    onset = species.max_lifespan * species.senescence_fraction
    if age <= onset:
        return 0.0
    return (age - onset) * species.degeneration_rate


def apply_metabolism(organism: Organism, config: SimulationConfig) -> Organism:
    age = organism.age + 1
    cost = metabolic_cost(organism, config) + degeneration_cost(age, config)
    return organism.with_action("metabolism", age=age, energy=organism.energy - cost)


def movement_distance(organism: Organism, config: SimulationConfig) -> float:
    return organism.traits.motility / organism.size * config.movement.move_distance_scale


def apply_movement(organism: Organism, rng: DeterministicRng, config: SimulationConfig) -> Organism:
    movement = config.movement
    if organism.traits.motility < movement.min_motility:
        return organism
    step = movement_distance(organism, config)
    cost = step * organism.size * movement.move_cost_factor
    if organism.energy <= cost:
        return organism

    offset = rng.next_horizontal_direction() * step
    if movement.vertical_jitter > 0.0:
        offset.y = rng.next_range(-movement.vertical_jitter, movement.vertical_jitter)
    position = clamp_position(organism.position + offset, config.half_extent)
    return organism.with_action("moved", position=position, energy=organism.energy - cost)


def depth_factor(organism: Organism, config: SimulationConfig) -> float:
    depth = max(0.0, -organism.position.y)
    return max(0.0, 1.0 - depth * config.photosynthesis.light_depth_falloff)


def apply_photosynthesis(
    organism: Organism, environment: Environment, config: SimulationConfig
) -> Organism:
    settings = config.photosynthesis
    if organism.traits.photosynthesis < settings.min_photosynthesis:
        return organism
    available_light = environment.resources.light / config.environment.resource_cap
    gain = (
        organism.traits.photosynthesis
        * environment.light_level
        * organism.size
        * available_light
        * settings.multiplier
        * depth_factor(organism, config)
    )
    return organism.with_action("photosynthesis", energy=organism.energy + gain)


def reproduction_chance(organism: Organism, config: SimulationConfig) -> float:
    scale = config.reproduction.energy_scale
    energy_factor = min(1.0, organism.energy / scale) if scale > 0 else 1.0
    return organism.traits.reproduction * energy_factor


def apply_reproduction(
    organism: Organism,
    rng: DeterministicRng,
    config: SimulationConfig,
    policy: MutationPolicy | None = None,
) -> Tuple[Organism, Optional[Organism]]:
    settings = config.reproduction
    if organism.energy <= settings.energy_threshold:
        return organism, None
    if rng.next_float() >= reproduction_chance(organism, config):
        return organism, None

    spread = settings.spawn_offset * 0.5
    position = clamp_position(
        Vector3(
            organism.position.x + rng.next_range(-spread, spread),
            organism.position.y,
            organism.position.z + rng.next_range(-spread, spread),
        ),
        config.half_extent,
    )
    low, high = settings.size_variation
    offspring = Organism(
        id=new_organism_id(rng),
        position=position,
        size=max(config.species.min_size, organism.size * rng.next_range(low, high)),
        traits=inherit(organism.traits, organism.actions, rng, config.evolution, policy),
        energy=settings.reproduction_cost * settings.offspring_energy_fraction,
        age=0,
        generation=organism.generation + 1,
        parent_id=organism.id,
        actions=["born"],
    )
    parent = organism.with_action("reproduced", energy=organism.energy - settings.reproduction_cost)
    return parent, offspring


def reset_actions(organism: Organism) -> Organism:
    return replace(organism, actions=[])
