"""
movement.py

Per-tick relocation of agents by patch-desirability scoring.

Every agent present at the start of the tick decides against the same
start-of-tick occupancy counts, so the order agents are visited in cannot
bias what they see. Decisions are drawn first and committed afterwards:

1. stay/move draw against the agent's effective move rate
2. if moving, score all patches and pick one (roulette, or uniform when the
   scores sum to <= 0)
3. commit: stayers claim their patch first, relocations are granted in grid
   order, and a mover whose target is already filled this tick stays put

Random draws per agent, in grid order: one stay/move draw, then one
selection draw if moving.
"""
import logging
from typing import Dict, List, Optional, Tuple

import numpy as np

from predprey_abm.agents import Agent
from predprey_abm.config import SimulationConfig
from predprey_abm.patches import PatchGrid

logger = logging.getLogger(__name__)


def score_patches(agent: Agent, resources: np.ndarray, prey_counts: np.ndarray, predator_counts: np.ndarray,
                  zone_codes: Optional[np.ndarray] = None, zone_locking: bool = False) -> np.ndarray:
    """Return the desirability score of every patch for ``agent``.

    Prey weigh patch resource level against predator count. Predators treat
    prey count as the resource and predator count (themselves included) as
    the danger. With zone locking, predators score 0 outside their birth zone.
    """
    if agent.is_prey:
        food = np.asarray(resources, dtype=float)
    else:
        food = np.asarray(prey_counts, dtype=float)
    danger = np.asarray(predator_counts, dtype=float)

    scores = agent.alpha * (agent.tau * food - (1.0 - agent.tau) * danger)

    if zone_locking and not agent.is_prey and zone_codes is not None:
        scores = np.where(np.asarray(zone_codes) == agent.birth_zone.value, scores, 0.0)
    return scores


def select_patch(scores: np.ndarray, rng: np.random.Generator) -> int:
    """Pick a patch index from ``scores`` with a single draw.

    Non-positive totals fall back to a uniform pick over every patch.
    Otherwise the first patch whose cumulative normalized score covers the
    draw wins; a draw left uncovered by rounding resolves to patch 0.
    """
    scores = np.asarray(scores, dtype=float)
    total = float(scores.sum())
    if total <= 0.0:
        return int(rng.integers(scores.size))

    draw = rng.random()
    cumulative = np.cumsum(scores / total)
    hits = np.flatnonzero(cumulative >= draw)
    if hits.size == 0:
        return 0
    return int(hits[0])


def decide_moves(grid: PatchGrid, rng: np.random.Generator,
                 config: SimulationConfig) -> List[Tuple[int, int, Optional[int]]]:
    """Draw every agent's decision against start-of-tick occupancy.

    Returns (slot, origin, target) triples in grid order; target is None for
    agents that stay.
    """
    prey_counts, predator_counts = grid.class_counts()
    decisions = []
    for origin, slot in grid.iter_slots():
        agent = grid.arena[slot]
        if rng.random() >= agent.effective_move_rate:
            decisions.append((slot, origin, None))
            continue
        scores = score_patches(agent, grid.resource_levels, prey_counts, predator_counts,
                               grid.zone_codes, config.zone_locking)
        decisions.append((slot, origin, select_patch(scores, rng)))
    return decisions


def commit_moves(grid: PatchGrid, decisions: List[Tuple[int, int, Optional[int]]]) -> Dict[str, int]:
    """Apply decisions, honoring patch capacity. Movement never discards an agent.

    Stayers claim their origin first. Relocations are granted in grid order
    against stay-claims and earlier grants, so a mover may enter the origin of
    an agent that is itself leaving. A blocked mover falls back to its origin;
    any grant into that origin is cancelled in turn, repeating until every
    patch is within capacity.
    """
    claimed = np.zeros(len(grid), dtype=int)
    movers = []
    for index, (_, origin, target) in enumerate(decisions):
        if target is None or target == origin:
            claimed[origin] += 1
        else:
            movers.append(index)

    granted = {}
    for index in movers:
        target = decisions[index][2]
        if claimed[target] < grid.CAPACITY:
            claimed[target] += 1
            granted[index] = target
    for index in movers:
        if index not in granted:
            claimed[decisions[index][1]] += 1

    while True:
        crowded = np.flatnonzero(claimed > grid.CAPACITY)
        if crowded.size == 0:
            break
        for patch_index in crowded:
            # the latest grant into the patch gives way
            index = max(i for i, target in granted.items() if target == patch_index)
            del granted[index]
            claimed[patch_index] -= 1
            claimed[decisions[index][1]] += 1

    occupancy: List[List[int]] = [[] for _ in range(len(grid))]
    for index, (slot, origin, _) in enumerate(decisions):
        occupancy[granted.get(index, origin)].append(slot)
    grid.reassign(occupancy)

    summary = {
        'stayed': len(decisions) - len(movers),
        'moved': len(granted),
        'blocked': len(movers) - len(granted),
    }
    return summary


def move_agents(grid: PatchGrid, rng: np.random.Generator, config: SimulationConfig) -> Dict[str, int]:
    """Run the movement pass for one tick."""
    decisions = decide_moves(grid, rng, config)
    summary = commit_moves(grid, decisions)
    logger.debug('movement: %(moved)d moved, %(blocked)d blocked, %(stayed)d stayed', summary)
    return summary
