"""Aggregate statistics over a patch grid.

All functions read the grid and return plain numbers, dicts or a pandas
DataFrame; none of them hand out arena slots.
"""
from typing import Any, Dict, Iterator, Optional

import numpy as np
import pandas as pd

from predprey_abm.agents import Agent, Variant
from predprey_abm.patches import PatchGrid, Zone

TRAITS = ('alpha', 'tau', 'move_rate')

CENSUS_COLUMNS = ['patch', 'zone', 'variant', 'alpha', 'tau', 'move_rate', 'birth_zone']


def _select(grid: PatchGrid, variant: Optional[Variant] = None, zone: Optional[Zone] = None,
            prey: Optional[bool] = None) -> Iterator[Agent]:
    for patch_index, agent in grid.iter_agents():
        if variant is not None and agent.variant is not variant:
            continue
        if prey is not None and agent.is_prey != prey:
            continue
        if zone is not None and grid.patches[patch_index].zone is not zone:
            continue
        yield agent


def count_agents(grid: PatchGrid, variant: Optional[Variant] = None, zone: Optional[Zone] = None,
                 prey: Optional[bool] = None) -> int:
    """Number of living agents matching every given filter."""
    return sum(1 for _ in _select(grid, variant, zone, prey))


def average_trait(grid: PatchGrid, trait: str = 'alpha', variant: Optional[Variant] = None,
                  zone: Optional[Zone] = None, prey: Optional[bool] = None) -> float:
    """Mean of ``trait`` over matching agents; 0.0 when nothing matches."""
    if trait not in TRAITS:
        raise KeyError(f'unknown trait {trait!r}')
    values = [getattr(a, trait) for a in _select(grid, variant, zone, prey)]
    if not values:
        return 0.0
    return float(np.mean(values))


def zone_counts(grid: PatchGrid) -> Dict[str, int]:
    """Prey and predator counts per zone, keyed like ``prey_low`` / ``pred_high``."""
    counts = {}
    for zone in (Zone.LOW, Zone.MEDIUM, Zone.HIGH):
        suffix = zone.name.lower()
        counts[f'prey_{suffix}'] = count_agents(grid, zone=zone, prey=True)
        counts[f'pred_{suffix}'] = count_agents(grid, zone=zone, prey=False)
    return counts


def generation_record(grid: PatchGrid, generation: int) -> Dict[str, Any]:
    """Flat row of per-generation statistics for the experiment driver."""
    record = {
        'generation': generation,
        'avg_alpha_prey': average_trait(grid, 'alpha', prey=True),
        'avg_tau_prey': average_trait(grid, 'tau', prey=True),
        'avg_alpha_pred': average_trait(grid, 'alpha', prey=False),
        'prey_a': count_agents(grid, variant=Variant.PREY_A),
        'prey_b': count_agents(grid, variant=Variant.PREY_B),
    }
    record.update(zone_counts(grid))
    record['total'] = len(grid.arena)
    return record


def census_frame(grid: PatchGrid) -> pd.DataFrame:
    """One row per living agent, in grid order."""
    rows = []
    for patch_index, agent in grid.iter_agents():
        rows.append({
            'patch': patch_index,
            'zone': grid.patches[patch_index].zone.name,
            'variant': agent.variant.name,
            'alpha': agent.alpha,
            'tau': agent.tau,
            'move_rate': agent.move_rate,
            'birth_zone': agent.birth_zone.name,
        })
    return pd.DataFrame(rows, columns=CENSUS_COLUMNS)
