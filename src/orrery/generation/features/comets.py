"""Comets on long eccentric orbits around a system center."""

from __future__ import annotations

from typing import Tuple

from orrery.generation.config import GenerationConfig
from orrery.generation.models import Body, BodyKind, CometDescriptor, Orbit
from orrery.generation.properties import body_radius, orbital_speed
from orrery.generation.sampling import RandomGenerator
from orrery.generation.snapshot import FeatureOutput, UniverseBuilder

COMET_COLOR = "#E0F0FF"
TAIL_COLOR = "#9FD8FF"
COMET_MASS_MU = -3.0
COMET_MASS_SIGMA = 0.5
MAX_COMET_INCLINATION = 45.0
# Orbit slot used as a reference distance when the system has no planets
FALLBACK_REFERENCE_SLOT = 3


def generate_comets(
    view: UniverseBuilder,
    root_id: str,
    rng: RandomGenerator,
    config: GenerationConfig,
) -> Tuple[FeatureOutput, RandomGenerator]:
    output = FeatureOutput()
    count = rng.randint(config.comet_min_count, config.comet_max_count)
    if count == 0:
        return output, rng

    planets = view.planets_by_distance(root_id)
    if planets and planets[-1].orbit.distance > 0:
        reference = planets[-1].orbit.distance
    else:
        reference = config.orbit_base * config.orbit_growth ** FALLBACK_REFERENCE_SLOT

    root = view.get(root_id)
    for i in range(count):
        eccentricity = rng.uniform(*config.comet_eccentricity_range)
        perihelion = reference * rng.uniform(*config.comet_perihelion_range)
        aphelion = perihelion * (1.0 + eccentricity) / (1.0 - eccentricity)
        semi_major = (perihelion + aphelion) / 2.0
        mass = rng.log_normal(COMET_MASS_MU, COMET_MASS_SIGMA)
        radius = body_radius(mass, config)
        descriptor = CometDescriptor(
            is_periodic=rng.chance(config.comet_periodic_probability),
            perihelion=perihelion,
            aphelion=aphelion,
            tail_length=rng.uniform(*config.comet_tail_length_range),
            tail_width=radius * rng.uniform(2.0, 6.0),
            tail_color=TAIL_COLOR,
            tail_opacity=rng.uniform(0.4, 0.8),
            activity_falloff_distance=config.comet_activity_falloff,
        )
        output.bodies.append(
            Body(
                id=f"{root_id}-comet-{i}",
                name=f"C/{root.name} {i + 1}",
                kind=BodyKind.COMET,
                mass=mass,
                radius=radius,
                color=COMET_COLOR,
                parent_id=root_id,
                system_id=root_id,
                orbit=Orbit(
                    distance=semi_major,
                    speed=orbital_speed(semi_major, config.orbit_k),
                    phase=rng.uniform(0.0, 360.0),
                    eccentricity=eccentricity,
                    inclination=rng.uniform(0.0, MAX_COMET_INCLINATION),
                ),
                metadata=descriptor,
            )
        )
    return output, rng
