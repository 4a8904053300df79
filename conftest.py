"""Shared pytest fixtures for predprey_abm unit and scenario tests."""
import sys
from pathlib import Path

import numpy as np
import pytest

# allow running from a checkout without an editable install
sys.path.insert(0, str(Path(__file__).parent / "src"))

from predprey_abm.config import SimulationConfig
from predprey_abm.patches import PatchGrid
from predprey_abm.world import World


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


@pytest.fixture
def config():
    return SimulationConfig()


@pytest.fixture
def three_zone_grid():
    """One LOW, one MEDIUM and one HIGH patch, empty."""
    return PatchGrid([0.1, 0.5, 0.9])


@pytest.fixture
def nine_levels():
    return [0.1, 0.1, 0.1, 0.5, 0.5, 0.5, 0.9, 0.9, 0.9]


@pytest.fixture
def empty_world(nine_levels):
    return World(len(nine_levels), nine_levels, seed=7)
