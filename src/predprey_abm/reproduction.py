"""
reproduction.py

Per-tick offspring production with trait mutation and variant re-resolution.

Prey get a zone-dependent number of attempts, each succeeding with
``base_chance * resource_level``. Predators get one unscaled attempt, skipped
under zone locking when they stand outside their birth zone.

Offspring are staged for the whole pass and inserted afterwards at the patch
they were conceived in. Insertion obeys the grid's occupancy policy, so a
staged offspring whose patch is full is discarded. With one agent per patch
the parent still fills its conception patch, so every offspring is discarded
and the ``born`` counter stays at 0.

Random draws per agent, in grid order: one draw per attempt; each success is
followed by the alpha mutation trigger (plus a normal draw when it fires) and
then the tau mutation trigger (plus a normal draw when it fires).
"""
import logging
from typing import Dict, List, Optional, Tuple

import numpy as np

from predprey_abm.agents import Agent, OffspringFactory, default_offspring_factory
from predprey_abm.config import SimulationConfig
from predprey_abm.patches import PatchGrid, Zone

logger = logging.getLogger(__name__)


def mutate_trait(value: float, rng: np.random.Generator, mutation_rate: float, mutation_sd: float) -> float:
    """Perturb ``value`` by Normal(0, mutation_sd) with probability ``mutation_rate``.

    The result is always clamped to [0, 1].
    """
    if rng.random() < mutation_rate:
        value = value + rng.normal(0.0, mutation_sd)
    return float(np.clip(value, 0.0, 1.0))


def make_offspring(parent: Agent, birth_zone: Zone, rng: np.random.Generator, config: SimulationConfig,
                   factory: OffspringFactory = default_offspring_factory) -> Agent:
    """Clone ``parent``, mutate alpha then tau, and re-resolve the variant.

    A prey offspring whose tau crosses 0.5 comes out as the other prey
    sub-variant. move_rate is inherited unchanged.
    """
    child = parent.clone()
    child = child.with_alpha(mutate_trait(child.alpha, rng, config.mutation_rate, config.mutation_sd))
    child = child.with_tau(mutate_trait(child.tau, rng, config.mutation_rate, config.mutation_sd))
    return factory(child.is_prey, child.alpha, child.tau, child.move_rate, birth_zone)


def attempt_budget(agent: Agent, zone: Zone, config: SimulationConfig) -> Tuple[int, float]:
    """Return (attempts, success probability per attempt) for ``agent`` in ``zone``.

    ``resource_level`` scaling is applied by the caller for prey.
    """
    if agent.is_prey:
        return config.max_attempts(zone.name), config.base_chance
    if config.zone_locking and zone is not agent.birth_zone:
        return 0, 0.0
    return 1, config.predator_birth_chance


def stage_offspring(grid: PatchGrid, rng: np.random.Generator, config: SimulationConfig,
                    factory: Optional[OffspringFactory] = None) -> List[Tuple[Agent, int]]:
    """Run every agent's reproduction attempts and collect (offspring, patch) pairs."""
    factory = factory or default_offspring_factory
    staged = []
    for patch_index, agent in grid.iter_agents():
        patch = grid.patches[patch_index]
        zone = patch.zone
        attempts, chance = attempt_budget(agent, zone, config)
        if agent.is_prey:
            chance *= patch.resource_level
        for _ in range(attempts):
            if rng.random() < chance:
                staged.append((make_offspring(agent, zone, rng, config, factory), patch_index))
    return staged


def insert_offspring(grid: PatchGrid, staged: List[Tuple[Agent, int]]) -> Dict[str, int]:
    summary = {'born': 0, 'discarded': 0}
    for child, patch_index in staged:
        if grid.place(child, patch_index) is None:
            summary['discarded'] += 1
        else:
            summary['born'] += 1
    return summary


def reproduce(grid: PatchGrid, rng: np.random.Generator, config: SimulationConfig,
              factory: Optional[OffspringFactory] = None) -> Dict[str, int]:
    """Run the reproduction pass for one tick."""
    staged = stage_offspring(grid, rng, config, factory)
    summary = insert_offspring(grid, staged)
    logger.debug('reproduction: %d staged, %d born, %d discarded',
                 len(staged), summary['born'], summary['discarded'])
    return summary
