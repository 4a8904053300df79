"""Culling pass: predator mortality and the agent death predicate."""
import logging

import numpy as np

from predprey_abm.config import SimulationConfig
from predprey_abm.patches import PatchGrid

logger = logging.getLogger(__name__)


def cull(grid: PatchGrid, rng: np.random.Generator, config: SimulationConfig) -> int:
    """Remove dead agents and return how many were removed.

    Predators draw once against ``predator_death_rate``; prey draw nothing.
    Any agent whose death predicate holds is removed as well.
    """
    removed = 0
    for patch_index, slot in grid.iter_slots():
        agent = grid.arena[slot]
        killed = not agent.is_prey and rng.random() < config.predator_death_rate
        if killed or agent.is_dead():
            grid.destroy(slot, patch_index)
            removed += 1
    logger.debug('culling: %d removed', removed)
    return removed
