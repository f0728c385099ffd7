from __future__ import annotations

from dataclasses import dataclass, field, replace

from ..utils.math3d import clamp_value
from .config import EnvironmentConfig


@dataclass(frozen=True, slots=True)
class Resources:
    organic: float = 100.0
    minerals: float = 100.0
    light: float = 100.0


@dataclass(frozen=True, slots=True)
class Environment:
    temperature: float = 0.5
    light_level: float = 0.8
    moisture: float = 0.6
    resources: Resources = field(default_factory=Resources)


def make_environment(config: EnvironmentConfig | None = None) -> Environment:
    config = config or EnvironmentConfig()
    cap = config.resource_cap
    return Environment(
        temperature=clamp_value(config.temperature, 0.0, 1.0),
        light_level=clamp_value(config.light_level, 0.0, 1.0),
        moisture=clamp_value(config.moisture, 0.0, 1.0),
        resources=Resources(organic=cap, minerals=cap, light=cap),
    )


def regenerate_resources(environment: Environment, config: EnvironmentConfig) -> Environment:
    cap = config.resource_cap
    resources = environment.resources
    return replace(
        environment,
        resources=Resources(
            organic=min(cap, resources.organic + config.organic_regen),
            minerals=min(cap, resources.minerals + config.minerals_regen),
            light=cap,
        ),
    )
