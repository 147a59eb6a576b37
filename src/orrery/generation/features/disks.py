"""Protoplanetary disks around young system centers."""

from __future__ import annotations

from typing import Tuple

from orrery.generation.config import GenerationConfig
from orrery.generation.models import ProtoplanetaryDisk
from orrery.generation.sampling import RandomGenerator
from orrery.generation.snapshot import FeatureOutput, UniverseBuilder

DISK_STYLES = ("dusty", "icy", "banded")
DISK_COLORS = {
    "dusty": ("#C2A27C", "#7A5C3E"),
    "icy": ("#D8ECFF", "#8FB8DE"),
    "banded": ("#E3C9A1", "#A0785A"),
}
# Disk edge relative to the innermost planet
OUTER_EDGE_FACTOR = 0.8
INNER_EDGE_RADII = 2.0


def generate_disks(
    view: UniverseBuilder,
    root_id: str,
    rng: RandomGenerator,
    config: GenerationConfig,
) -> Tuple[FeatureOutput, RandomGenerator]:
    output = FeatureOutput()
    if not rng.chance(config.disk_probability):
        return output, rng

    root = view.get(root_id)
    planets = view.planets_by_distance(root_id)
    if planets and planets[0].orbit.distance > 0:
        outer = planets[0].orbit.distance * OUTER_EDGE_FACTOR
    else:
        outer = config.orbit_base * OUTER_EDGE_FACTOR
    inner = min(root.radius * INNER_EDGE_RADII, outer * 0.5)

    style = rng.choice(DISK_STYLES)
    base_color, accent_color = DISK_COLORS[style]
    low, high = config.disk_particle_range
    output.disks.append(
        ProtoplanetaryDisk(
            id=f"{root_id}-disk",
            system_id=root_id,
            inner_radius=inner,
            outer_radius=outer,
            thickness=config.disk_thickness,
            particle_count=rng.randint(low, high),
            base_color=base_color,
            accent_color=accent_color,
            opacity=rng.uniform(*config.disk_opacity_range),
            style=style,
        )
    )
    return output, rng
