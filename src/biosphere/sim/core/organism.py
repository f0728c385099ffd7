from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import List, Optional

from pygame.math import Vector3

from ..utils.math3d import clamp_value
from .config import SimulationConfig
from .rng import DeterministicRng

TRAIT_NAMES = (
    "motility",
    "photosynthesis",
    "predation",
    "defense",
    "sensory",
    "reproduction",
    "metabolism",
)


def clamp01(value: float) -> float:
    return clamp_value(value, 0.0, 1.0)


@dataclass(slots=True)
class Traits:
    motility: float = 0.1
    photosynthesis: float = 0.5
    predation: float = 0.1
    defense: float = 0.1
    sensory: float = 0.1
    reproduction: float = 0.3
    metabolism: float = 0.5

    def clamped(self) -> "Traits":
        return Traits(**{name: clamp01(getattr(self, name)) for name in TRAIT_NAMES})

    def as_dict(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in TRAIT_NAMES}


@dataclass(slots=True)
class Organism:
    id: str
    position: Vector3
    size: float
    traits: Traits
    energy: float
    age: int = 0
    generation: int = 0
    parent_id: Optional[str] = None
    actions: List[str] = field(default_factory=list)

    def with_action(self, tag: str, **changes) -> "Organism":
        return replace(self, actions=[*self.actions, tag], **changes)


@dataclass(slots=True)
class OrganismSettings:
    motility: float = 0.1
    photosynthesis: float = 0.5
    predation: float = 0.1
    defense: float = 0.1
    sensory: float = 0.1
    reproduction: float = 0.3
    metabolism: float = 0.5
    size: float = 1.0

    @classmethod
    def from_mapping(cls, raw: dict | None) -> "OrganismSettings":
        known = {f.name for f in fields(cls)}
        return cls(**{k: float(v) for k, v in (raw or {}).items() if k in known and v is not None})


def new_organism_id(rng: DeterministicRng) -> str:
    return f"organism-{rng.next_token()}"


def create_organism(
    settings: OrganismSettings | None,
    rng: DeterministicRng,
    config: SimulationConfig,
) -> Organism:
    settings = settings or OrganismSettings()
    traits = Traits(**{name: getattr(settings, name) for name in TRAIT_NAMES}).clamped()
    half = config.half_extent
    position = Vector3(rng.next_range(-half, half), 0.0, rng.next_range(-half, half))
    return Organism(
        id=new_organism_id(rng),
        position=position,
        size=max(config.species.min_size, settings.size),
        traits=traits,
        energy=config.species.starting_energy,
    )


def create_initial_population(
    settings: OrganismSettings | None,
    count: int,
    rng: DeterministicRng,
    config: SimulationConfig,
) -> list[Organism]:
    return [create_organism(settings, rng, config) for _ in range(max(0, count))]
