from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass
class SpeciesConfig:
    starting_energy: float = 100.0
    max_lifespan: int = 100
    base_consumption: float = 0.5
    size_consumption_factor: float = 0.5
    senescence_fraction: float = 0.7
    degeneration_rate: float = 0.05
    min_size: float = 0.1


@dataclass
class MovementConfig:
    min_motility: float = 0.05
    move_distance_scale: float = 0.5
    move_cost_factor: float = 2.0
    vertical_jitter: float = 0.0


@dataclass
class PhotosynthesisConfig:
    min_photosynthesis: float = 0.05
    multiplier: float = 5.0
    # Energy lost per unit of depth below the ground plane (y < 0).
    light_depth_falloff: float = 0.02


@dataclass
class ReproductionConfig:
    energy_threshold: float = 50.0
    energy_scale: float = 100.0
    reproduction_cost: float = 40.0
    offspring_energy_fraction: float = 0.75
    spawn_offset: float = 0.5
    size_variation: tuple[float, float] = (0.8, 1.2)


@dataclass
class PredationConfig:
    sensory_radius: float = 10.0
    max_prey_size_ratio: float = 1.2
    success_bonus: float = 0.2
    energy_transfer: float = 0.7
    size_energy: float = 3.0
    failed_attack_cost: float = 2.0
    defense_cost: float = 1.0


@dataclass
class EvolutionConfig:
    mutation_policy: str = "random_walk"
    mutation_rate: float = 0.1
    mutation_strength: float = 0.1
    behavior_bias: float = 0.05


@dataclass
class EnvironmentConfig:
    temperature: float = 0.5
    light_level: float = 0.8
    moisture: float = 0.6
    resource_cap: float = 100.0
    organic_regen: float = 0.5
    minerals_regen: float = 0.2


@dataclass
class SimulationConfig:
    seed: int = 42
    world_size: float = 100.0
    initial_population: int = 5
    generation_interval: float = 1.0
    config_version: str = "v1"
    species: SpeciesConfig = field(default_factory=SpeciesConfig)
    movement: MovementConfig = field(default_factory=MovementConfig)
    photosynthesis: PhotosynthesisConfig = field(default_factory=PhotosynthesisConfig)
    reproduction: ReproductionConfig = field(default_factory=ReproductionConfig)
    predation: PredationConfig = field(default_factory=PredationConfig)
    evolution: EvolutionConfig = field(default_factory=EvolutionConfig)
    environment: EnvironmentConfig = field(default_factory=EnvironmentConfig)

    @property
    def half_extent(self) -> float:
        return self.world_size * 0.5

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)


_SECTIONS = {
    "species": SpeciesConfig,
    "movement": MovementConfig,
    "photosynthesis": PhotosynthesisConfig,
    "reproduction": ReproductionConfig,
    "predation": PredationConfig,
    "evolution": EvolutionConfig,
    "environment": EnvironmentConfig,
}


def load_config(raw: dict) -> SimulationConfig:
    def _pair(value: tuple[float, float] | list[float] | None, default: tuple[float, float]) -> tuple[float, float]:
        if isinstance(value, (tuple, list)) and len(value) == 2:
            return (float(value[0]), float(value[1]))
        return default

    sections = {}
    for name, section_type in _SECTIONS.items():
        values = dict(raw.get(name) or {})
        if section_type is ReproductionConfig and "size_variation" in values:
            values["size_variation"] = _pair(values["size_variation"], ReproductionConfig().size_variation)
        sections[name] = section_type(**values)
    sim_values = {k: v for k, v in raw.items() if k not in _SECTIONS}
    return SimulationConfig(**sections, **sim_values)
