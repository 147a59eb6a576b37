"""
Asteroid and Kuiper belts.

Main belts sit in radial gaps: between two adjacent planets, or in the
region just beyond the outermost one. For a gap (a, b) the band is
``[a + (b - a) * inner_gap_scale, a + (b - a) * outer_gap_scale]`` which
keeps it strictly inside the gap. Kuiper belts are single icy bands well
beyond the outermost planet.

Small populations become individual asteroid bodies; larger ones are
recorded as a particle count for render-side instancing.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from loguru import logger

from orrery.generation.config import GenerationConfig
from orrery.generation.models import Belt, Body, BodyKind, Orbit, Vector3
from orrery.generation.properties import body_radius, jitter_color, orbital_speed
from orrery.generation.sampling import RandomGenerator
from orrery.generation.snapshot import FeatureOutput, UniverseBuilder

ROCKY_COLOR = "#8C8276"
ICY_COLOR = "#CFE3F2"
ASTEROID_MASS_MU = -2.0
ASTEROID_MASS_SIGMA = 0.6

# Kuiper band as multiples of the outermost planet distance
KUIPER_BANDS = {
    "tight": (1.6, 2.0),
    "classical": (2.0, 3.0),
    "wide": (3.0, 5.0),
}

Gap = Tuple[str, float, float]


def find_gaps(view: UniverseBuilder, root_id: str, config: GenerationConfig) -> List[Gap]:
    """Candidate regions as (region, a, b) with a < b, nearest first."""
    planets = view.planets_by_distance(root_id)
    gaps: List[Gap] = []
    if config.belt_placement_mode in ("between_planets", "both"):
        for near, far in zip(planets, planets[1:]):
            if far.orbit.distance > near.orbit.distance:
                gaps.append(("gap", near.orbit.distance, far.orbit.distance))
    if config.belt_placement_mode in ("outer", "both") and planets:
        outermost = planets[-1].orbit.distance
        if outermost > 0:
            gaps.append(("outer", outermost, outermost * config.belt_outer_multiplier))
    return gaps


def sample_population(
    rng: RandomGenerator,
    min_count: int,
    max_count: int,
    p: float,
) -> int:
    """Belt population; a result of 0 means the belt is not emitted."""
    return min(max_count, min_count + rng.geometric(p))


def populate_belt(
    belt: Belt,
    count: int,
    rng: RandomGenerator,
    config: GenerationConfig,
    member_inclination_sigma: float = 0.0,
) -> Tuple[Belt, List[Body]]:
    """Give ``belt`` either explicit members or a particle count."""
    if count > config.belt_particle_threshold:
        return belt.model_copy(update={"particle_count": count}), []

    members: List[Body] = []
    base_color = ICY_COLOR if belt.is_icy else ROCKY_COLOR
    for j in range(count):
        distance = rng.uniform(belt.inner_radius, belt.outer_radius)
        angle = rng.uniform(0.0, 360.0)
        lift = rng.normal(0.0, belt.thickness) if belt.thickness > 0 else 0.0
        inclination = belt.inclination
        if member_inclination_sigma > 0:
            inclination += rng.normal(0.0, member_inclination_sigma)
        mass = rng.log_normal(ASTEROID_MASS_MU, ASTEROID_MASS_SIGMA)
        members.append(
            Body(
                id=f"{belt.id}-{j}",
                name=f"{belt.name} {j + 1}",
                kind=BodyKind.ASTEROID,
                mass=mass,
                radius=body_radius(mass, config),
                color=jitter_color(base_color, rng),
                parent_id=belt.parent_id,
                system_id=belt.parent_id,
                belt_id=belt.id,
                orbit=Orbit(
                    distance=distance,
                    speed=orbital_speed(distance, config.orbit_k),
                    phase=angle,
                    inclination=inclination,
                    offset=Vector3(y=lift) if lift else None,
                ),
            )
        )
    return belt.model_copy(update={"member_ids": tuple(m.id for m in members)}), members


def generate_asteroid_belts(
    view: UniverseBuilder,
    root_id: str,
    rng: RandomGenerator,
    config: GenerationConfig,
) -> Tuple[FeatureOutput, RandomGenerator]:
    output = FeatureOutput()
    gaps = find_gaps(view, root_id, config)
    if not gaps or config.max_belts_per_system == 0:
        return output, rng

    if len(gaps) > config.max_belts_per_system:
        chosen = sorted(rng.shuffle(range(len(gaps)))[: config.max_belts_per_system])
        gaps = [gaps[i] for i in chosen]

    root = view.get(root_id)
    for i, (region, a, b) in enumerate(gaps):
        width = b - a
        belt = Belt(
            id=f"{root_id}-belt-{i}",
            name=f"{root.name} Belt {i + 1}",
            parent_id=root_id,
            belt_type="main",
            region=region,
            inner_radius=a + width * config.belt_inner_gap_scale,
            outer_radius=a + width * config.belt_outer_gap_scale,
            thickness=config.belt_thickness,
            eccentricity=rng.uniform(*config.belt_eccentricity_range),
            inclination=rng.normal(0.0, config.belt_inclination_sigma) if config.belt_inclination_sigma > 0 else 0.0,
            inclination_sigma=config.belt_inclination_sigma,
            color=ROCKY_COLOR,
        )
        count = sample_population(rng, config.belt_min_count, config.belt_max_count, config.belt_count_geometric_p)
        if count == 0:
            continue
        belt, members = populate_belt(belt, count, rng, config)
        output.belts.append(belt)
        output.bodies.extend(members)

    logger.debug(f"{root_id}: {len(output.belts)} asteroid belt(s), {len(output.bodies)} member bodies")
    return output, rng


def generate_kuiper_belt(
    view: UniverseBuilder,
    root_id: str,
    rng: RandomGenerator,
    config: GenerationConfig,
) -> Tuple[FeatureOutput, RandomGenerator]:
    output = FeatureOutput()
    planets = view.planets_by_distance(root_id)
    outermost: Optional[float] = planets[-1].orbit.distance if planets else None
    if not outermost:
        return output, rng

    inner_factor, outer_factor = KUIPER_BANDS[config.kuiper_distance_style]
    root = view.get(root_id)
    belt = Belt(
        id=f"{root_id}-kuiper",
        name=f"{root.name} Kuiper Belt",
        parent_id=root_id,
        belt_type="kuiper",
        region="kuiper",
        inner_radius=outermost * inner_factor,
        outer_radius=outermost * outer_factor,
        thickness=config.kuiper_thickness,
        inclination_sigma=config.kuiper_inclination_sigma,
        color=ICY_COLOR,
        is_icy=True,
    )
    count = sample_population(rng, config.kuiper_min_count, config.kuiper_max_count, config.kuiper_count_geometric_p)
    if count == 0:
        return output, rng
    belt, members = populate_belt(belt, count, rng, config, member_inclination_sigma=config.kuiper_inclination_sigma)
    output.belts.append(belt)
    output.bodies.extend(members)
    return output, rng
