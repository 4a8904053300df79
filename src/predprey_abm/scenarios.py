"""Scenario builders reproducing the standard seeding layouts.

Both builders draw any randomness they need from the world's own generator,
so a seeded world gives the same layout every time.
"""
import logging
from typing import List, Optional

from predprey_abm.agents import Agent, Variant, make_predator, make_prey
from predprey_abm.config import SCENARIOS, SimulationConfig
from predprey_abm.world import World

logger = logging.getLogger(__name__)


def cell_index(x: int, y: int, columns: int) -> int:
    """Row-major patch index of grid cell (x, y)."""
    return y * columns + x


def nine_patch_scenario(seed: Optional[int] = None, config: Optional[SimulationConfig] = None) -> World:
    """Three LOW, three MEDIUM and three HIGH patches, each seeded with prey then a predator.

    Seeding follows the occupancy policy, so only the first agent offered to
    each patch is kept.
    """
    layout = SCENARIOS['nine_patch']
    levels = layout['resource_levels']
    world = World(len(levels), levels, seed=seed, config=config)

    placed = 0
    for i in range(len(levels)):
        for _ in range(layout['prey_per_patch']):
            placed += world.place(Agent(Variant.PREY_A, **layout['prey_traits']), i)
        for _ in range(layout['predators_per_patch']):
            placed += world.place(make_predator(**layout['predator_traits']), i)
    logger.info('nine_patch scenario: %d agents placed', placed)
    return world


def block_cells(x_start: int, y_start: int, block_size: int, columns: int) -> List[int]:
    return [cell_index(x_start + dx, y_start + dy, columns)
            for dy in range(block_size) for dx in range(block_size)]


def zoned_grid_scenario(seed: Optional[int] = None, config: Optional[SimulationConfig] = None) -> World:
    """30x30 grid of nine 10x10 resource blocks.

    Block rows run HIGH, MEDIUM, LOW from top to bottom. Each block gets one
    predator at its centre and ten prey on distinct, randomly chosen cells.
    """
    layout = SCENARIOS['zoned_grid']
    columns, rows, size = layout['columns'], layout['rows'], layout['block_size']

    if config is None:
        config = SimulationConfig(predator_death_rate=layout['predator_death_rate'])
    world = World(seed=seed, config=config)

    levels = [0.0] * (columns * rows)
    blocks = []
    for row, resource in enumerate(layout['block_row_resources']):
        for col in range(columns // size):
            cells = block_cells(col * size, row * size, size, columns)
            for idx in cells:
                levels[idx] = resource
            blocks.append((col * size, row * size, cells))
    world.initialize(columns * rows, levels)

    for x_start, y_start, cells in blocks:
        centre = cell_index(x_start + size // 2, y_start + size // 2, columns)
        world.place(make_predator(**layout['predator_traits']), centre)

        candidates = [idx for idx in cells if idx != centre]
        chosen = world.rng.permutation(candidates)[:layout['prey_per_block']]
        for idx in chosen:
            world.place(make_prey(**layout['prey_traits']), int(idx))
    logger.info('zoned_grid scenario: %d agents placed', world.count())
    return world


SCENARIO_BUILDERS = {
    'nine_patch': nine_patch_scenario,
    'zoned_grid': zoned_grid_scenario,
}
