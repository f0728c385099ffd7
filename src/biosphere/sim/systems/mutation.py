from __future__ import annotations

from typing import Callable, Sequence

from ..core.config import EvolutionConfig
from ..core.organism import TRAIT_NAMES, Traits, clamp01
from ..core.rng import DeterministicRng

MutationPolicy = Callable[[Traits, Sequence[str], DeterministicRng, EvolutionConfig], Traits]

# Action tag that nudges each trait upward under the behavior-biased policy.
ACTION_TRAIT_TAGS = {
    "motility": "moved",
    "photosynthesis": "photosynthesis",
    "predation": "predation",
    "defense": "defended",
    "sensory": "failed_predation",
    "reproduction": "reproduced",
    "metabolism": "metabolism",
}


def random_walk_mutation(
    traits: Traits, actions: Sequence[str], rng: DeterministicRng, config: EvolutionConfig
) -> Traits:
    """Perturb each trait independently with probability ``mutation_rate``.

    Selected traits move by a uniform draw from
    ``[-mutation_strength, mutation_strength]`` and are clamped to [0, 1];
    the rest are copied from the parent. ``actions`` is ignored.
    """
    values = {}
    strength = config.mutation_strength
    for name in TRAIT_NAMES:
        value = getattr(traits, name)
        if rng.next_float() < config.mutation_rate:
            value = clamp01(value + rng.next_range(-strength, strength))
        values[name] = value
    return Traits(**values)


def action_weights(actions: Sequence[str]) -> dict[str, float]:
    if not actions:
        return {}
    weights: dict[str, float] = {}
    for tag in actions:
        weights[tag] = weights.get(tag, 0.0) + 1.0
    total = float(len(actions))
    return {tag: count / total for tag, count in weights.items()}


def behavior_biased_mutation(
    traits: Traits, actions: Sequence[str], rng: DeterministicRng, config: EvolutionConfig
) -> Traits:
    """Perturb every trait, biased upward for behaviors the parent performed.

    Each trait moves by ``uniform(-s/2, s/2)`` plus
    ``behavior_bias * weight * uniform(0, 1)``, where ``weight`` is the share
    of the parent's action log carrying the trait's tag.
    """
    weights = action_weights(actions)
    half = config.mutation_strength * 0.5
    values = {}
    for name in TRAIT_NAMES:
        amount = rng.next_range(-half, half)
        weight = weights.get(ACTION_TRAIT_TAGS[name], 0.0)
        amount += config.behavior_bias * weight * rng.next_float()
        values[name] = clamp01(getattr(traits, name) + amount)
    return Traits(**values)


MUTATION_POLICIES: dict[str, MutationPolicy] = {
    "random_walk": random_walk_mutation,
    "behavior_biased": behavior_biased_mutation,
}


def resolve_mutation_policy(name: str) -> MutationPolicy:
    try:
        return MUTATION_POLICIES[name]
    except KeyError:
        raise ValueError(f"Unknown mutation policy: {name}") from None


def inherit(
    parent_traits: Traits,
    actions: Sequence[str],
    rng: DeterministicRng,
    config: EvolutionConfig,
    policy: MutationPolicy | None = None,
) -> Traits:
    policy = policy or resolve_mutation_policy(config.mutation_policy)
    return policy(parent_traits, actions, rng, config)
