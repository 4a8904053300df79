"""Patch grid, zone classification and the agent arena.

The grid is the single owner of every agent. Agents live in arena slots and
patches hold slot ids, so destroying an agent is a slot release and nothing
outside the grid keeps a live reference across ticks.

Occupancy policy: a patch holds at most ``PatchGrid.CAPACITY`` (one) agent.
An inbound agent, placed or born, that targets a full patch is destroyed.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from predprey_abm.config import ZONE_THRESHOLDS

if TYPE_CHECKING:
    from predprey_abm.agents import Agent

logger = logging.getLogger(__name__)


class Zone(Enum):
    UNSET = -1
    LOW = 0
    MEDIUM = 1
    HIGH = 2


def classify_zone(resource_level: float) -> Zone:
    """Bucket a resource level into LOW / MEDIUM / HIGH."""
    if resource_level < ZONE_THRESHOLDS['low_upper']:
        return Zone.LOW
    if resource_level < ZONE_THRESHOLDS['medium_upper']:
        return Zone.MEDIUM
    return Zone.HIGH


@dataclass
class Patch:
    resource_level: float
    occupants: List[int] = field(default_factory=list)

    @property
    def zone(self) -> Zone:
        return classify_zone(self.resource_level)


class AgentArena:
    """Slot storage for agents with a free list.

    Slot ids are stable for the lifetime of an agent. Released slots are
    reused by later allocations.
    """

    def __init__(self):
        self._slots: List[Optional[Agent]] = []
        self._free: List[int] = []
        self._live = 0

    def allocate(self, agent: Agent) -> int:
        if self._free:
            slot = self._free.pop()
            self._slots[slot] = agent
        else:
            slot = len(self._slots)
            self._slots.append(agent)
        self._live += 1
        return slot

    def release(self, slot: int) -> Agent:
        agent = self[slot]
        self._slots[slot] = None
        self._free.append(slot)
        self._live -= 1
        return agent

    def __getitem__(self, slot: int) -> Agent:
        agent = self._slots[slot]
        if agent is None:
            raise KeyError(f'slot {slot} is not allocated')
        return agent

    def __len__(self) -> int:
        return self._live


class PatchGrid:
    """Fixed-size ordered collection of patches.

    Parameters
    - resource_levels: one value in [0, 1] per patch; immutable afterwards.
    """
    CAPACITY = 1

    def __init__(self, resource_levels: Sequence[float]):
        levels = np.asarray(resource_levels, dtype=float)
        if levels.ndim != 1 or levels.size == 0:
            raise ValueError('resource_levels must be a non-empty 1-D sequence')
        if np.any(levels < 0.0) or np.any(levels > 1.0):
            raise ValueError('resource levels must lie in [0, 1]')

        self.patches: Tuple[Patch, ...] = tuple(Patch(float(r)) for r in levels)
        self.arena = AgentArena()
        self.resource_levels = levels.copy()
        self.resource_levels.setflags(write=False)
        # integer zone codes, compared against Zone.value in vectorized masks
        self.zone_codes = np.array([p.zone.value for p in self.patches], dtype=int)
        self.zone_codes.setflags(write=False)

    def __len__(self) -> int:
        return len(self.patches)

    def _check_index(self, patch_index: int) -> None:
        if not 0 <= patch_index < len(self.patches):
            raise IndexError(f'patch index {patch_index} out of range for {len(self.patches)} patches')

    def resource_level(self, patch_index: int) -> float:
        self._check_index(patch_index)
        return self.patches[patch_index].resource_level

    def zone(self, patch_index: int) -> Zone:
        self._check_index(patch_index)
        return self.patches[patch_index].zone

    def is_full(self, patch_index: int) -> bool:
        self._check_index(patch_index)
        return len(self.patches[patch_index].occupants) >= self.CAPACITY

    def place(self, agent: Agent, patch_index: int) -> Optional[int]:
        """Insert ``agent`` into a patch.

        Returns the new slot id, or None when the patch is full and the agent
        was discarded. An agent without a birth zone is stamped with the zone
        of the patch it is placed in.
        """
        self._check_index(patch_index)
        if self.is_full(patch_index):
            logger.debug('patch %d full; discarding inbound %s', patch_index, agent.variant.name)
            return None
        patch = self.patches[patch_index]
        if agent.birth_zone is Zone.UNSET:
            agent = agent.born_in(patch.zone)
        slot = self.arena.allocate(agent)
        patch.occupants.append(slot)
        return slot

    def destroy(self, slot: int, patch_index: int) -> Agent:
        """Remove the agent in ``slot`` from ``patch_index`` and free the slot."""
        self.patches[patch_index].occupants.remove(slot)
        return self.arena.release(slot)

    def iter_slots(self) -> Iterator[Tuple[int, int]]:
        """Yield (patch_index, slot) in grid order over a copy of occupancy."""
        for i, patch in enumerate(self.patches):
            for slot in tuple(patch.occupants):
                yield i, slot

    def iter_agents(self) -> Iterator[Tuple[int, Agent]]:
        for i, slot in self.iter_slots():
            yield i, self.arena[slot]

    def occupants(self, patch_index: int) -> Tuple[Agent, ...]:
        self._check_index(patch_index)
        return tuple(self.arena[s] for s in self.patches[patch_index].occupants)

    def snapshot(self) -> Tuple[Tuple[Agent, ...], ...]:
        """Immutable per-patch occupant tuples for external consumers."""
        return tuple(self.occupants(i) for i in range(len(self.patches)))

    def class_counts(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return (prey_counts, predator_counts) arrays, one entry per patch."""
        n = len(self.patches)
        prey = np.zeros(n, dtype=float)
        predators = np.zeros(n, dtype=float)
        for i, agent in self.iter_agents():
            if agent.is_prey:
                prey[i] += 1.0
            else:
                predators[i] += 1.0
        return prey, predators

    def reassign(self, occupancy: List[List[int]]) -> None:
        """Replace every patch's occupant list. Used by the movement commit."""
        if len(occupancy) != len(self.patches):
            raise ValueError('occupancy must have one list per patch')
        for patch, slots in zip(self.patches, occupancy):
            if len(slots) > self.CAPACITY:
                raise ValueError('occupancy exceeds patch capacity')
            patch.occupants = list(slots)
