"""Planetary rings, attached to their planet as metadata."""

from __future__ import annotations

from typing import Tuple

from orrery.generation.config import GenerationConfig
from orrery.generation.models import Body, BodyKind, RingDescriptor
from orrery.generation.properties import jitter_color
from orrery.generation.sampling import RandomGenerator
from orrery.generation.snapshot import FeatureOutput, UniverseBuilder


def ring_probability(planet: Body, config: GenerationConfig) -> float:
    """Base rate boosted by mass and orbital distance, clamped to [0, 1]."""
    mass_term = min(1.0, planet.mass / config.ring_reference_mass)
    distance_term = min(1.0, planet.orbit.distance / config.ring_reference_distance)
    p = (
        config.ring_base_probability
        + config.ring_mass_bias * mass_term
        + config.ring_distance_bias * distance_term
    )
    return min(1.0, max(0.0, p))


def sample_ring(planet: Body, rng: RandomGenerator, config: GenerationConfig) -> RingDescriptor:
    inner = rng.uniform(*config.ring_inner_radius_range)
    return RingDescriptor(
        inner_radius=inner,
        outer_radius=inner + rng.uniform(*config.ring_width_range),
        thickness=rng.uniform(*config.ring_thickness_range),
        opacity=rng.uniform(*config.ring_opacity_range),
        density=rng.uniform(*config.ring_density_range),
        albedo=rng.uniform(*config.ring_albedo_range),
        color=jitter_color(planet.color, rng),
    )


def generate_rings(
    view: UniverseBuilder,
    root_id: str,
    rng: RandomGenerator,
    config: GenerationConfig,
) -> Tuple[FeatureOutput, RandomGenerator]:
    output = FeatureOutput()
    planets = [
        body
        for body in view.bodies.values()
        if body.system_id == root_id and body.kind == BodyKind.PLANET and body.metadata is None
    ]
    for planet in planets:
        if rng.chance(ring_probability(planet, config)):
            output.attachments[planet.id] = sample_ring(planet, rng, config)
    return output, rng
