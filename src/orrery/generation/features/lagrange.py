"""
Lagrange points and trojan companions.

Marker positions use the usual closed-form approximations in the
co-rotating frame of a primary/secondary pair with mass ratio
``mu = m2 / (m1 + m2)`` and separation ``R``:

    L1, L2   R -/+ R * (mu / 3) ** (1/3), in line with the secondary
    L3       R * (1 + 5 * mu / 12), opposite the secondary
    L4, L5   R, leading / trailing the secondary by 60 degrees

L4 and L5 are stable when ``m1 / m2`` exceeds the Routh ratio. Trojans are
asteroids librating around stable L4/L5 points of star-planet pairs.
"""

from __future__ import annotations

from typing import List, Tuple

from orrery.generation.config import GenerationConfig
from orrery.generation.models import (
    Body,
    BodyKind,
    LagrangeDescriptor,
    LagrangePoint,
    Orbit,
)
from orrery.generation.properties import body_radius, jitter_color
from orrery.generation.sampling import RandomGenerator
from orrery.generation.snapshot import FeatureOutput, UniverseBuilder

ROUTH_RATIO = 24.96
TROJAN_DISTANCE_SIGMA = 0.02
TROJAN_COLOR = "#9C8F7A"
TROJAN_MASS_MU = -2.5
TROJAN_MASS_SIGMA = 0.5

Pair = Tuple[Body, Body, str]


def lagrange_offsets(primary_mass: float, secondary: Body) -> List[Tuple[int, float, float]]:
    """(point index, distance from primary, phase) for L1-L5."""
    distance = secondary.orbit.distance
    phase = secondary.orbit.phase
    mu = secondary.mass / (primary_mass + secondary.mass)
    hill = distance * (mu / 3.0) ** (1.0 / 3.0)
    return [
        (1, distance - hill, phase % 360.0),
        (2, distance + hill, phase % 360.0),
        (3, distance * (1.0 + 5.0 * mu / 12.0), (phase + 180.0) % 360.0),
        (4, distance, (phase + 60.0) % 360.0),
        (5, distance, (phase - 60.0) % 360.0),
    ]


def is_stable(primary: Body, secondary: Body, point_index: int) -> bool:
    if point_index not in (4, 5) or secondary.mass <= 0:
        return False
    return primary.mass / secondary.mass > ROUTH_RATIO


def find_pairs(view: UniverseBuilder, root_id: str, config: GenerationConfig) -> List[Pair]:
    pairs: List[Pair] = []
    root = view.get(root_id)
    planets = view.children_of(root_id, BodyKind.PLANET)
    if root.kind.is_stellar:
        pairs.extend((root, planet, "star_planet") for planet in planets)
    if config.lagrange_include_moons:
        for planet in planets:
            pairs.extend((planet, moon, "planet_moon") for moon in view.children_of(planet.id, BodyKind.MOON))
    return [pair for pair in pairs if pair[1].orbit.distance > 0]


def generate_lagrange(
    view: UniverseBuilder,
    root_id: str,
    rng: RandomGenerator,
    config: GenerationConfig,
) -> Tuple[FeatureOutput, RandomGenerator]:
    output = FeatureOutput()

    for primary, secondary, pair_type in find_pairs(view, root_id, config):
        points = lagrange_offsets(primary.mass, secondary)

        if config.lagrange_marker_mode != "none":
            for index, distance, phase in points:
                stable = is_stable(primary, secondary, index)
                if config.lagrange_marker_mode == "stable_only" and not stable:
                    continue
                output.lagrange_points.append(
                    LagrangePoint(
                        id=f"{secondary.id}-L{index}",
                        primary_id=primary.id,
                        secondary_id=secondary.id,
                        point_index=index,
                        stable=stable,
                        pair_type=pair_type,
                        distance=distance,
                        phase=phase,
                        speed=secondary.orbit.speed,
                    )
                )

        if pair_type != "star_planet" or not is_stable(primary, secondary, 4):
            continue
        if not rng.chance(config.trojan_probability):
            continue
        for index, distance, phase in points[3:]:
            count = rng.randint(config.trojan_min_count, config.trojan_max_count)
            for j in range(count):
                mass = rng.log_normal(TROJAN_MASS_MU, TROJAN_MASS_SIGMA)
                trojan_distance = distance * (1.0 + rng.normal(0.0, TROJAN_DISTANCE_SIGMA))
                output.bodies.append(
                    Body(
                        id=f"{secondary.id}-L{index}-trojan-{j}",
                        name=f"{secondary.name} L{index} Trojan {j + 1}",
                        kind=BodyKind.ASTEROID,
                        mass=mass,
                        radius=body_radius(mass, config),
                        color=jitter_color(TROJAN_COLOR, rng),
                        parent_id=primary.id,
                        system_id=root_id,
                        orbit=Orbit(
                            distance=trojan_distance,
                            speed=secondary.orbit.speed,
                            phase=(phase + rng.normal(0.0, config.trojan_spread)) % 360.0,
                            inclination=secondary.orbit.inclination,
                        ),
                        metadata=LagrangeDescriptor(
                            primary_id=primary.id,
                            secondary_id=secondary.id,
                            point_index=index,
                            stable=True,
                            pair_type=pair_type,
                        ),
                    )
                )
    return output, rng
