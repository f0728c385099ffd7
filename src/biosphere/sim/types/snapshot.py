from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Tuple

from ..core.environment import Environment
from ..core.organism import Organism
from .metrics import GenerationMetrics


@dataclass(frozen=True, slots=True)
class PopulationSnapshot:
    organisms: Tuple[Organism, ...]
    environment: Environment
    generation: int = 0
    metrics: Optional[GenerationMetrics] = field(default=None, compare=False)

    @property
    def population(self) -> int:
        return len(self.organisms)


def organism_payload(organism: Organism) -> Dict[str, Any]:
    return {
        "id": organism.id,
        "x": organism.position.x,
        "y": organism.position.y,
        "z": organism.position.z,
        "size": organism.size,
        "traits": organism.traits.as_dict(),
        "energy": organism.energy,
        "age": organism.age,
        "generation": organism.generation,
        "parent_id": organism.parent_id,
        "actions": list(organism.actions),
    }


def snapshot_payload(snapshot: PopulationSnapshot) -> Dict[str, Any]:
    return {
        "generation": snapshot.generation,
        "organisms": [organism_payload(organism) for organism in snapshot.organisms],
        "environment": asdict(snapshot.environment),
        "metrics": asdict(snapshot.metrics) if snapshot.metrics is not None else None,
    }
