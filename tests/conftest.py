"""Shared fixtures for the generation engine tests."""

import sys
from pathlib import Path

import pytest

# Add src/ to the path so tests run without an editable install
_src_path = Path(__file__).parent.parent / "src"
if str(_src_path) not in sys.path:
    sys.path.insert(0, str(_src_path))

from orrery.generation import GenerationConfig  # noqa: E402

ALL_FEATURES = {
    "enable_black_holes": True,
    "black_hole_probability": 0.5,
    "enable_asteroid_belts": True,
    "belt_placement_mode": "both",
    "enable_kuiper_belt": True,
    "enable_planetary_rings": True,
    "enable_comets": True,
    "comet_min_count": 1,
    "enable_lagrange_points": True,
    "lagrange_marker_mode": "all",
    "lagrange_include_moons": True,
    "trojan_probability": 1.0,
    "enable_protoplanetary_disks": True,
    "disk_probability": 1.0,
    "enable_rogue_planets": True,
    "rogue_min_count": 2,
    "enable_nebulae": True,
    "eccentricity_range": (0.0, 0.3),
    "inclination_max": 20.0,
    "enable_orbit_offsets": True,
}


@pytest.fixture
def default_config() -> GenerationConfig:
    return GenerationConfig()


@pytest.fixture
def all_features_config() -> GenerationConfig:
    return GenerationConfig(**ALL_FEATURES)
