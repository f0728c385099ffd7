from __future__ import annotations

from pygame.math import Vector3

from biosphere.sim.core.organism import TRAIT_NAMES, Organism, Traits


def make_organism(
    organism_id: str = "organism-a",
    position: tuple[float, float, float] = (0.0, 0.0, 0.0),
    size: float = 1.0,
    energy: float = 50.0,
    age: int = 0,
    **traits: float,
) -> Organism:
    values = Traits().as_dict()
    for name, value in traits.items():
        assert name in TRAIT_NAMES, name
        values[name] = value
    return Organism(
        id=organism_id,
        position=Vector3(*position),
        size=size,
        traits=Traits(**values),
        energy=energy,
        age=age,
    )
