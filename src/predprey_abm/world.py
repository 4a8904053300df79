"""
world.py

This module defines the World class for the prey/predator patch model. It owns
the patch grid, the single random generator and the engine configuration, and
runs the per-tick pipeline by delegating to movement.py, reproduction.py and
culling.py.

Core Responsibilities:
----------------------
1. Grid Setup:
   • ``initialize(patch_count, resource_levels)`` builds a fresh grid; resource
     levels are fixed for the life of the grid.
   • ``place(agent, patch_index)`` seeds a scenario. A full patch silently
     destroys the inbound agent; an out-of-range index raises IndexError.

2. Time Stepping:
   • ``advance_one_tick()`` runs Move → Reproduce → Cull, strictly in that
     order, and returns a summary dict. The engine has no notion of a final
     tick; drivers decide how long to run.

3. Read-only Access:
   • ``occupants``, ``resource_level``, ``zone``, ``snapshot`` and the
     aggregate helpers ``count``, ``average_trait``, ``census`` and
     ``generation_record``. Agents are frozen values, so snapshots cannot
     alter engine state.

4. Configuration:
   • Setters validate and apply between ticks: mutation rate and sd, predator
     death rate, zone locking, offspring factory, fecundity tier, prey base
     chance and predator birth chance.

Usage Example:
--------------
    from predprey_abm.world import World
    from predprey_abm.agents import make_prey, make_predator

    world = World(seed=42)
    world.initialize(3, [0.1, 0.5, 0.9])
    world.place(make_prey(), 0)
    world.place(make_predator(), 2)
    for _ in range(10):
        world.advance_one_tick()
    print(world.count(), world.average_trait('alpha', prey=True))
"""
import logging
from dataclasses import replace
from typing import Any, Dict, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from predprey_abm import stats
from predprey_abm.agents import Agent, OffspringFactory, Variant, default_offspring_factory
from predprey_abm.config import SimulationConfig
from predprey_abm.culling import cull
from predprey_abm.movement import move_agents
from predprey_abm.patches import PatchGrid, Zone
from predprey_abm.reproduction import reproduce

logger = logging.getLogger(__name__)


class World:
    """Prey/predator population over a fixed set of resource patches.

    Parameters
    - patch_count, resource_levels: optional; when both are given the grid is
      built immediately, otherwise call ``initialize``.
    - seed: seed for the world's ``numpy.random.Generator``.
    - config: engine parameters; defaults come from config.py.
    - offspring_factory: callable resolving offspring variants.
    """

    def __init__(self, patch_count: Optional[int] = None,
                 resource_levels: Union[float, Sequence[float], None] = None,
                 seed: Optional[int] = None, config: Optional[SimulationConfig] = None,
                 offspring_factory: Optional[OffspringFactory] = None):
        self.config = config if config is not None else SimulationConfig()
        self.config.validate()
        self.rng = np.random.default_rng(seed)
        self.offspring_factory: OffspringFactory = offspring_factory or default_offspring_factory
        self.grid: Optional[PatchGrid] = None
        self.tick = 0
        if patch_count is not None:
            self.initialize(patch_count, 1.0 if resource_levels is None else resource_levels)

    # ------------------------------------------------------------------
    # setup
    # ------------------------------------------------------------------
    def initialize(self, patch_count: int, resource_levels: Union[float, Sequence[float]]) -> None:
        """Build an empty grid of ``patch_count`` patches.

        ``resource_levels`` is a scalar applied to every patch or one value
        per patch.
        """
        if patch_count <= 0:
            raise ValueError(f'patch_count must be positive, got {patch_count!r}')
        levels = np.asarray(resource_levels, dtype=float)
        if levels.ndim == 0:
            levels = np.full(patch_count, float(levels))
        if levels.shape != (patch_count,):
            raise ValueError(f'expected {patch_count} resource levels, got {levels.size}')
        self.grid = PatchGrid(levels)
        self.tick = 0
        logger.debug('initialized %d patches', patch_count)

    def _require_grid(self) -> PatchGrid:
        if self.grid is None:
            raise RuntimeError('world has no grid; call initialize() first')
        return self.grid

    def place(self, agent: Agent, patch_index: int) -> bool:
        """Seed ``agent`` into a patch. Returns False if it was discarded."""
        return self._require_grid().place(agent, patch_index) is not None

    # ------------------------------------------------------------------
    # stepping
    # ------------------------------------------------------------------
    def advance_one_tick(self) -> Dict[str, Any]:
        """Move, reproduce, then cull. Returns the per-pass summaries."""
        grid = self._require_grid()
        moves = move_agents(grid, self.rng, self.config)
        births = reproduce(grid, self.rng, self.config, self.offspring_factory)
        deaths = cull(grid, self.rng, self.config)
        self.tick += 1
        summary = {'tick': self.tick, 'population': len(grid.arena), 'deaths': deaths}
        summary.update(moves)
        summary.update(births)
        logger.debug('tick %(tick)d: population %(population)d', summary)
        return summary

    # ------------------------------------------------------------------
    # read-only accessors
    # ------------------------------------------------------------------
    @property
    def patch_count(self) -> int:
        return len(self._require_grid())

    def occupants(self, patch_index: int) -> Tuple[Agent, ...]:
        return self._require_grid().occupants(patch_index)

    def resource_level(self, patch_index: int) -> float:
        return self._require_grid().resource_level(patch_index)

    def zone(self, patch_index: int) -> Zone:
        return self._require_grid().zone(patch_index)

    def snapshot(self) -> Tuple[Tuple[Agent, ...], ...]:
        return self._require_grid().snapshot()

    def count(self, variant: Optional[Variant] = None, zone: Optional[Zone] = None,
              prey: Optional[bool] = None) -> int:
        return stats.count_agents(self._require_grid(), variant, zone, prey)

    def average_trait(self, trait: str = 'alpha', variant: Optional[Variant] = None,
                      zone: Optional[Zone] = None, prey: Optional[bool] = None) -> float:
        return stats.average_trait(self._require_grid(), trait, variant, zone, prey)

    def census(self) -> pd.DataFrame:
        return stats.census_frame(self._require_grid())

    def generation_record(self) -> Dict[str, Any]:
        return stats.generation_record(self._require_grid(), self.tick)

    # ------------------------------------------------------------------
    # configuration, applied between ticks
    # ------------------------------------------------------------------
    def _update_config(self, **changes) -> None:
        config = replace(self.config, **changes)
        config.validate()
        self.config = config

    def set_mutation_rate(self, rate: float) -> None:
        self._update_config(mutation_rate=rate)

    def set_mutation_sd(self, sd: float) -> None:
        self._update_config(mutation_sd=sd)

    def set_predator_death_rate(self, rate: float) -> None:
        self._update_config(predator_death_rate=rate)

    def set_zone_locking(self, enabled: bool) -> None:
        self._update_config(zone_locking=bool(enabled))

    def set_fecundity_tier(self, tier: str) -> None:
        self._update_config(fecundity_tier=tier)

    def set_base_chance(self, chance: float) -> None:
        self._update_config(base_chance=chance)

    def set_predator_birth_chance(self, chance: float) -> None:
        self._update_config(predator_birth_chance=chance)

    def set_offspring_factory(self, factory: OffspringFactory) -> None:
        if not callable(factory):
            raise ValueError('offspring factory must be callable')
        self.offspring_factory = factory
