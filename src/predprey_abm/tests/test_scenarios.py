from predprey_abm.agents import Variant
from predprey_abm.config import SCENARIOS
from predprey_abm.patches import Zone
from predprey_abm.scenarios import block_cells, cell_index, nine_patch_scenario, zoned_grid_scenario


def test_cell_index_is_row_major():
    assert cell_index(0, 0, 30) == 0
    assert cell_index(5, 5, 30) == 155
    assert cell_index(29, 29, 30) == 899


def test_block_cells():
    cells = block_cells(10, 20, 10, 30)
    assert len(cells) == 100
    assert cells[0] == cell_index(10, 20, 30)
    assert cells[-1] == cell_index(19, 29, 30)


def test_nine_patch_keeps_first_agent_per_patch():
    world = nine_patch_scenario(seed=3)
    assert world.patch_count == 9
    assert [world.resource_level(i) for i in range(9)] == SCENARIOS['nine_patch']['resource_levels']
    assert world.count() == 9
    assert world.count(variant=Variant.PREY_A) == 9
    assert world.count(prey=False) == 0
    assert [world.occupants(i)[0].birth_zone for i in (0, 4, 8)] == [Zone.LOW, Zone.MEDIUM, Zone.HIGH]


def test_zoned_grid_layout():
    world = zoned_grid_scenario(seed=3)
    assert world.patch_count == 900
    assert world.count(prey=False) == 9
    assert world.count(prey=True) == 90
    assert world.count(variant=Variant.PREY_A) == 90
    assert world.resource_level(cell_index(0, 0, 30)) == 0.9
    assert world.resource_level(cell_index(15, 15, 30)) == 0.5
    assert world.resource_level(cell_index(29, 29, 30)) == 0.1
    centre = world.occupants(cell_index(5, 5, 30))
    assert len(centre) == 1 and centre[0].variant is Variant.PREDATOR
    assert world.config.predator_death_rate == SCENARIOS['zoned_grid']['predator_death_rate']


def test_zoned_grid_prey_stay_in_their_block():
    world = zoned_grid_scenario(seed=8)
    for zone in (Zone.LOW, Zone.MEDIUM, Zone.HIGH):
        assert world.count(zone=zone, prey=True) == 30
        assert world.count(zone=zone, prey=False) == 3


def test_zoned_grid_layout_is_seeded():
    assert zoned_grid_scenario(seed=21).snapshot() == zoned_grid_scenario(seed=21).snapshot()
