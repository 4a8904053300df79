# -*- coding: utf-8 -*-

"""
predprey_abm/config.py

This module centralizes the tunable parameters of the prey/predator patch model.
Engine modules (movement, reproduction, culling) and the experiment driver read
their defaults from here so that one edit changes every consumer consistently.

Contents:
---------
1. ZONE_THRESHOLDS:
   - Resource-level cut points that bucket a patch into LOW / MEDIUM / HIGH.

2. FECUNDITY_TIERS:
   - Maximum prey reproduction attempts per tick, keyed by zone.
   - "baseline" is the standard nine-patch setting; "high" is the fast-breeding tier.

3. REPRODUCTION / MUTATION / MORTALITY / MOVEMENT:
   - Per-tick probabilities used by the engine passes.

4. SCENARIOS:
   - Seeding layouts used by scenarios.py (resource levels, seed traits, counts).

5. SimulationConfig:
   - Mutable container the World owns. Setters on the World validate and replace
     fields between ticks.

Usage:
------
    from predprey_abm.config import SimulationConfig, FECUNDITY_TIERS

    cfg = SimulationConfig(mutation_rate=0.1)
    cfg.validate()
"""
from dataclasses import dataclass

# ───────────────────────────────────────────────────────────────────────────────
# 1) ZONE CLASSIFICATION (resource level is dimensionless, in [0, 1])
# ───────────────────────────────────────────────────────────────────────────────
ZONE_THRESHOLDS = {
    'low_upper': 0.33,      # resource < 0.33 -> LOW
    'medium_upper': 0.66,   # resource < 0.66 -> MEDIUM, otherwise HIGH
}

# ───────────────────────────────────────────────────────────────────────────────
# 2) PREY FECUNDITY (max reproduction attempts per tick, by zone name)
# ───────────────────────────────────────────────────────────────────────────────
FECUNDITY_TIERS = {
    'baseline': {'LOW': 1, 'MEDIUM': 2, 'HIGH': 3},
    'high': {'LOW': 4, 'MEDIUM': 7, 'HIGH': 10},
}

# ───────────────────────────────────────────────────────────────────────────────
# 3) PER-TICK PROBABILITIES
# ───────────────────────────────────────────────────────────────────────────────
REPRODUCTION = {
    # prey attempt succeeds with base_chance * resource_level
    'base_chance': 0.25,
    # predators get one unscaled attempt per tick
    'predator_birth_chance': 0.25,
    'fecundity_tier': 'baseline',
}

MUTATION = {
    'mutation_rate': 0.05,   # probability, applied to alpha and tau independently
    'mutation_sd': 0.025,    # standard deviation of the normal perturbation
}

MORTALITY = {
    'predator_death_rate': 0.1,
}

MOVEMENT = {
    # predators only score patches in their birth zone
    'zone_locking': True,
}

# ───────────────────────────────────────────────────────────────────────────────
# 4) SCENARIO LAYOUTS
# ───────────────────────────────────────────────────────────────────────────────
SCENARIOS = {
    'nine_patch': {
        'resource_levels': [0.1, 0.1, 0.1, 0.5, 0.5, 0.5, 0.9, 0.9, 0.9],
        'prey_per_patch': 5,
        'predators_per_patch': 1,
        'prey_traits': {'alpha': 0.5, 'tau': 0.5, 'move_rate': 0.5},
        'predator_traits': {'alpha': 0.5, 'tau': 0.5, 'move_rate': 0.5},
    },
    'zoned_grid': {
        'columns': 30,
        'rows': 30,
        'block_size': 10,
        # block rows from top to bottom
        'block_row_resources': [0.9, 0.5, 0.1],
        'prey_per_block': 10,
        'prey_traits': {'alpha': 0.5, 'tau': 1.0, 'move_rate': 0.5},
        'predator_traits': {'alpha': 0.5, 'tau': 0.0, 'move_rate': 0.5},
        'predator_death_rate': 0.03,
    },
}


def _check_probability(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f'{name} must be in [0, 1], got {value!r}')


@dataclass
class SimulationConfig:
    """Engine parameters applied between ticks.

    Defaults mirror the module-level dictionaries above.
    """
    mutation_rate: float = MUTATION['mutation_rate']
    mutation_sd: float = MUTATION['mutation_sd']
    predator_death_rate: float = MORTALITY['predator_death_rate']
    base_chance: float = REPRODUCTION['base_chance']
    predator_birth_chance: float = REPRODUCTION['predator_birth_chance']
    fecundity_tier: str = REPRODUCTION['fecundity_tier']
    zone_locking: bool = MOVEMENT['zone_locking']

    def validate(self) -> None:
        """Raise ValueError if any field is outside its domain."""
        _check_probability('mutation_rate', self.mutation_rate)
        _check_probability('predator_death_rate', self.predator_death_rate)
        _check_probability('base_chance', self.base_chance)
        _check_probability('predator_birth_chance', self.predator_birth_chance)
        if self.mutation_sd < 0.0:
            raise ValueError(f'mutation_sd must be non-negative, got {self.mutation_sd!r}')
        if self.fecundity_tier not in FECUNDITY_TIERS:
            raise ValueError(f'unknown fecundity tier {self.fecundity_tier!r}')

    def max_attempts(self, zone_name: str) -> int:
        """Prey reproduction attempts allowed in a zone under the active tier."""
        return FECUNDITY_TIERS[self.fecundity_tier][zone_name]
