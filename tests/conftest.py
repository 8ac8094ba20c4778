from __future__ import annotations

import pytest

from bouncer.core import GameState
from factories import build_state


@pytest.fixture
def two_attribute_state() -> GameState:
    return build_state(
        [("young", 600), ("well_dressed", 600)],
        {"young": 0.3225, "well_dressed": 0.3225},
    )


@pytest.fixture
def scenario_config_dir(tmp_path):
    """A minimal config tree with one small scenario and one strategy per registry key."""
    scenarios = tmp_path / "scenarios"
    strategies = tmp_path / "strategies"
    scenarios.mkdir()
    strategies.mkdir()
    (scenarios / "scenario_7.yaml").write_text(
        "name: Tiny\n"
        "constraints:\n"
        "  - attribute: a\n"
        "    min_count: 3\n"
        "expected_frequencies:\n"
        "  a: 0.5\n"
        "  b: 0.5\n"
    )
    for key in ("deficit_greedy", "paced_feasible", "dual_pricing", "primal_lp"):
        (strategies / f"{key}.yaml").write_text(
            f"name: {key}\nstrategy: {key}\nparameters: {{}}\n"
        )
    (tmp_path / "settings.yaml").write_text(
        "game:\n  venue_capacity: 10\n  max_rejections: 200\n"
        f"logging:\n  game_logs_dir: {tmp_path / 'logs'}\n"
    )
    return tmp_path
