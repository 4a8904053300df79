"""Agent variants and their trait-level behavior.

Agents are immutable values. The variant tag is a closed enum; behavior that
differs between variants is resolved by checking the tag, never by subclassing.
Trait changes (mutation, birth-zone stamping) return a new ``Agent``.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable

import numpy as np

from predprey_abm.patches import Zone


class Variant(Enum):
    PREY_A = 'prey_a'
    PREY_B = 'prey_b'
    PREDATOR = 'predator'


# tau strictly above this value resolves a prey agent to PREY_A
PREY_TAU_SPLIT = 0.5


def clamp_unit(value: float) -> float:
    """Clip a trait value into [0, 1]."""
    return float(np.clip(value, 0.0, 1.0))


@dataclass(frozen=True)
class Agent:
    """A single organism.

    - alpha: sensitivity to differences between patch scores
    - tau: preference for food (1.0) versus safety (0.0)
    - move_rate: stored per-tick movement probability
    - birth_zone: zone of the patch the agent was created in
    """
    variant: Variant
    alpha: float
    tau: float
    move_rate: float
    birth_zone: Zone = Zone.UNSET

    def __post_init__(self):
        for name in ('alpha', 'tau', 'move_rate'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f'{name} must be in [0, 1], got {value!r}')

    @property
    def is_prey(self) -> bool:
        return self.variant is not Variant.PREDATOR

    @property
    def effective_move_rate(self) -> float:
        # PREY_B is sessile whatever its stored rate
        if self.variant is Variant.PREY_B:
            return 0.0
        return self.move_rate

    def is_dead(self) -> bool:
        """Death predicate. No baseline variant dies of its own accord."""
        return False

    def clone(self) -> 'Agent':
        return replace(self)

    def with_alpha(self, alpha: float) -> 'Agent':
        return replace(self, alpha=clamp_unit(alpha))

    def with_tau(self, tau: float) -> 'Agent':
        return replace(self, tau=clamp_unit(tau))

    def born_in(self, zone: Zone) -> 'Agent':
        """Return a copy stamped with ``zone``. Only valid while the zone is unset."""
        if self.birth_zone is not Zone.UNSET:
            raise ValueError('birth_zone is already assigned')
        return replace(self, birth_zone=zone)


OffspringFactory = Callable[[bool, float, float, float, Zone], Agent]


def prey_variant_for(tau: float) -> Variant:
    return Variant.PREY_A if tau > PREY_TAU_SPLIT else Variant.PREY_B


def default_offspring_factory(is_prey: bool, alpha: float, tau: float, move_rate: float,
                              birth_zone: Zone = Zone.UNSET) -> Agent:
    """Resolve the concrete variant from (is_prey, tau > 0.5) and build the agent."""
    variant = prey_variant_for(tau) if is_prey else Variant.PREDATOR
    return Agent(variant, alpha, tau, move_rate, birth_zone)


def make_prey(alpha: float = 0.5, tau: float = 0.5, move_rate: float = 0.5) -> Agent:
    """Prey whose sub-variant follows from ``tau``."""
    return default_offspring_factory(True, alpha, tau, move_rate)


def make_predator(alpha: float = 0.5, tau: float = 0.5, move_rate: float = 0.5) -> Agent:
    return Agent(Variant.PREDATOR, alpha, tau, move_rate)
