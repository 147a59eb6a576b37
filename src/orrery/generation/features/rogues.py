"""
Rogue planets: bodies bound to no system.

Each rogue starts in a radial band around the universe origin and drifts
along a velocity drawn uniformly from a sphere band bounded by
``rogue_max_inclination``. Curvature 0 means straight drift; above 0 the
body follows a closed path whose semi-major axis and period reuse the
bound-orbit speed law.
"""

from __future__ import annotations

from typing import Tuple

from orrery.generation.config import GenerationConfig
from orrery.generation.models import Body, BodyKind, Orbit, RogueDescriptor, Vector3
from orrery.generation.properties import PLANET_PALETTE, body_radius, jitter_color, orbital_speed
from orrery.generation.sampling import RandomGenerator
from orrery.generation.snapshot import FeatureOutput, UniverseBuilder

# Probability of a curved path per trajectory mode
CURVED_PROBABILITY = {
    "linear_only": 0.0,
    "mixed": 0.5,
    "curved": 0.85,
}
PATH_ECCENTRICITY_MAX = 0.5


def generate_rogues(
    view: UniverseBuilder,
    rng: RandomGenerator,
    config: GenerationConfig,
) -> Tuple[FeatureOutput, RandomGenerator]:
    output = FeatureOutput()
    count = rng.randint(config.rogue_min_count, config.rogue_max_count)
    curved_probability = CURVED_PROBABILITY[config.rogue_trajectory_mode]

    for i in range(count):
        radius = rng.uniform(*config.rogue_distance_range)
        position = Vector3.from_tuple(c * radius for c in rng.unit_vector())
        speed = rng.uniform(*config.rogue_speed_range)
        velocity = Vector3.from_tuple(c * speed for c in rng.unit_vector(config.rogue_max_inclination))
        mass = rng.log_normal(config.mass_mu, config.mass_sigma) * config.planet_mass_multiplier

        curved = curved_probability > 0 and rng.chance(curved_probability)
        if curved:
            curvature = rng.uniform(*config.rogue_curvature_range)
            semi_major = radius * curvature
            path_speed = orbital_speed(semi_major, config.orbit_k)
            descriptor = RogueDescriptor(
                initial_position=position,
                velocity=velocity,
                curvature=curvature,
                semi_major_axis=semi_major,
                eccentricity=rng.uniform(0.0, PATH_ECCENTRICITY_MAX),
                period=360.0 / path_speed if path_speed > 0 else None,
                path_rotation=rng.uniform(0.0, 360.0),
            )
            orbit = Orbit(distance=semi_major, speed=path_speed, eccentricity=descriptor.eccentricity)
        else:
            descriptor = RogueDescriptor(initial_position=position, velocity=velocity)
            orbit = Orbit()

        rogue_id = f"rogue-{i}"
        output.bodies.append(
            Body(
                id=rogue_id,
                name=f"Rogue {i + 1}",
                kind=BodyKind.ROGUE_PLANET,
                mass=mass,
                radius=body_radius(mass, config),
                color=jitter_color(rng.choice(PLANET_PALETTE), rng),
                orbit=orbit,
                metadata=descriptor,
            )
        )
        output.rogue_ids.append(rogue_id)
    return output, rng
