from __future__ import annotations

from typing import TYPE_CHECKING, Iterator

from ..types.snapshot import PopulationSnapshot
from .errors import InvalidArgumentError

if TYPE_CHECKING:
    from .scheduler import GenerationScheduler


def validate_generation_count(generations: object) -> int:
    if isinstance(generations, bool) or not isinstance(generations, int):
        raise InvalidArgumentError(f"generation count must be an integer, got {generations!r}")
    if generations < 0:
        raise InvalidArgumentError(f"generation count must be non-negative, got {generations}")
    return generations


def iter_generations(
    scheduler: GenerationScheduler, snapshot: PopulationSnapshot, generations: int
) -> Iterator[PopulationSnapshot]:
    """Yield each snapshot produced while advancing ``generations`` steps.

    The count is validated before the first step runs, so callers can pause
    between yields without any partial work on bad input.
    """
    count = validate_generation_count(generations)

    def _steps() -> Iterator[PopulationSnapshot]:
        current = snapshot
        for _ in range(count):
            current = scheduler.advance_one_generation(current)
            yield current

    return _steps()


def advance_generations(
    scheduler: GenerationScheduler, snapshot: PopulationSnapshot, generations: int
) -> PopulationSnapshot:
    count = validate_generation_count(generations)
    current = snapshot
    for _ in range(count):
        current = scheduler.advance_one_generation(current)
    return current
