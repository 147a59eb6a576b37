"""
Topology grammars and style presets.

Topology presets decide the shape of each system (how many stars, planets,
moons and how deep the nesting goes). Style presets are bundles of
``GenerationConfig`` overrides that switch feature families on together.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Literal

from orrery.generation.config import GenerationConfig, load_config
from orrery.generation.errors import ConfigurationError
from orrery.generation.models import BodyKind
from orrery.generation.topology import Grammar, Production, Repeat

BODY_KINDS = {
    "star": BodyKind.STAR,
    "planet": BodyKind.PLANET,
    "moon": BodyKind.MOON,
    "submoon": BodyKind.MOON,
}

# ===================== Topology grammars =====================


def classic_grammar(config: GenerationConfig) -> Grammar:
    """system -> 1-3 stars; star -> geometric planets; planet -> geometric moons."""
    return Grammar(
        name="classic",
        rules={
            "system": (Production(1.0, (("star", Repeat.categorical(config.star_probabilities)),)),),
            "star": (
                Production(
                    1.0,
                    (("planet", Repeat.geometric(config.planet_geometric_p, max_count=config.max_planets_per_star)),),
                ),
            ),
            "planet": (
                Production(
                    1.0,
                    (("moon", Repeat.geometric(config.moon_geometric_p, max_count=config.max_moons_per_planet)),),
                ),
            ),
        },
        kinds=BODY_KINDS,
        max_depth=config.max_depth,
    )


def compact_grammar(config: GenerationConfig) -> Grammar:
    """One star, one or two planets, each with a swarm of 5-18 moons."""
    return Grammar(
        name="compact",
        rules={
            "system": (Production(1.0, (("star", Repeat.fixed(1)), ("planets", Repeat.fixed(1)))),),
            "planets": (Production(1.0, (("planet", Repeat.uniform(1, 2)),)),),
            "planet": (Production(1.0, (("moon", Repeat.geometric(0.08, min_count=5, max_count=18)),)),),
        },
        kinds=BODY_KINDS,
        max_depth=3,
    )


def multi_star_heavy_grammar(config: GenerationConfig) -> Grammar:
    """Mostly binary and ternary systems with few planets."""
    return Grammar(
        name="multi_star_heavy",
        rules={
            "system": (
                Production(
                    1.0,
                    (
                        ("star", Repeat.categorical((0.05, 0.55, 0.40))),
                        ("planet", Repeat.uniform(1, 4)),
                    ),
                ),
            ),
            "planet": (
                Production(0.7, (("moon", Repeat.uniform(1, 3)),)),
                Production(0.3),
            ),
        },
        kinds=BODY_KINDS,
        max_depth=3,
    )


def moon_rich_grammar(config: GenerationConfig) -> Grammar:
    """Single star, three to six planets, each with 4-25 moons."""
    return Grammar(
        name="moon_rich",
        rules={
            "system": (Production(1.0, (("star", Repeat.fixed(1)), ("planet", Repeat.uniform(3, 6)))),),
            "planet": (Production(1.0, (("moon", Repeat.geometric(0.05, min_count=4, max_count=25)),)),),
        },
        kinds=BODY_KINDS,
        max_depth=3,
    )


def sparse_outpost_grammar(config: GenerationConfig) -> Grammar:
    """Lonely systems: one star, zero to two planets, rare moons."""
    return Grammar(
        name="sparse_outpost",
        rules={
            "system": (Production(1.0, (("star", Repeat.fixed(1)), ("planets", Repeat.fixed(1)))),),
            "planets": (
                Production(0.15),
                Production(0.60, (("planet", Repeat.fixed(1)),)),
                Production(0.25, (("planet", Repeat.fixed(2)),)),
            ),
            "planet": (
                Production(0.75),
                Production(0.25, (("moons", Repeat.fixed(1)),)),
            ),
            "moons": (
                Production(0.85, (("moon", Repeat.fixed(1)),)),
                Production(0.15, (("moon", Repeat.fixed(2)),)),
            ),
        },
        kinds=BODY_KINDS,
        max_depth=3,
    )


def deep_hierarchy_grammar(config: GenerationConfig) -> Grammar:
    """Half of all moons carry one to four sub-moons."""
    return Grammar(
        name="deep_hierarchy",
        rules={
            "system": (Production(1.0, (("star", Repeat.fixed(1)), ("planet", Repeat.uniform(2, 5)))),),
            "planet": (Production(1.0, (("moon", Repeat.uniform(2, 6)),)),),
            "moon": (
                Production(0.5),
                Production(0.5, (("submoon", Repeat.uniform(1, 4)),)),
            ),
        },
        kinds=BODY_KINDS,
        max_depth=6,
    )


TOPOLOGY_PRESETS: Dict[str, Callable[[GenerationConfig], Grammar]] = {
    "classic": classic_grammar,
    "compact": compact_grammar,
    "multi_star_heavy": multi_star_heavy_grammar,
    "moon_rich": moon_rich_grammar,
    "sparse_outpost": sparse_outpost_grammar,
    "deep_hierarchy": deep_hierarchy_grammar,
}


def build_grammar(config: GenerationConfig) -> Grammar:
    try:
        factory = TOPOLOGY_PRESETS[config.topology_preset]
    except KeyError as exc:
        raise ConfigurationError("topology_preset", f"unknown topology preset {config.topology_preset!r}") from exc
    return factory(config)


# ===================== Style presets =====================

STYLE_PRESETS: Dict[str, Dict[str, Any]] = {
    "sparse": {
        "star_probabilities": (0.9, 0.1, 0.0),
        "planet_geometric_p": 0.6,
        "moon_geometric_p": 0.7,
        "max_depth": 2,
        "eccentricity_range": (0.0, 0.0),
        "min_groups": 1,
        "max_groups": 3,
    },
    "solar_like": {
        "star_probabilities": (0.8, 0.2, 0.0),
        "planet_geometric_p": 0.2,
        "moon_geometric_p": 0.4,
        "inclination_max": 10.0,
        "enable_asteroid_belts": True,
        "max_belts_per_system": 1,
        "belt_placement_mode": "between_planets",
        "enable_kuiper_belt": True,
        "enable_planetary_rings": True,
        "ring_base_probability": 0.2,
        "enable_comets": True,
        "comet_max_count": 2,
        "enable_lagrange_points": True,
        "lagrange_marker_mode": "all",
    },
    "crowded": {
        "star_probabilities": (0.5, 0.35, 0.15),
        "planet_geometric_p": 0.3,
        "moon_geometric_p": 0.25,
        "eccentricity_range": (0.0, 0.3),
        "inclination_max": 25.0,
        "enable_asteroid_belts": True,
        "max_belts_per_system": 2,
        "belt_placement_mode": "both",
        "enable_planetary_rings": True,
        "enable_comets": True,
        "comet_max_count": 5,
        "enable_lagrange_points": True,
        "enable_rogue_planets": True,
        "enable_nebulae": True,
        "nesting_probability": 0.3,
    },
    "super_dense": {
        "star_probabilities": (0.4, 0.4, 0.2),
        "planet_geometric_p": 0.15,
        "moon_geometric_p": 0.15,
        "max_depth": 4,
        "eccentricity_range": (0.1, 0.7),
        "inclination_max": 45.0,
        "enable_orbit_offsets": True,
        "enable_black_holes": True,
        "black_hole_probability": 0.25,
        "enable_asteroid_belts": True,
        "max_belts_per_system": 3,
        "belt_placement_mode": "both",
        "belt_min_count": 200,
        "belt_max_count": 1000,
        "enable_kuiper_belt": True,
        "enable_planetary_rings": True,
        "ring_base_probability": 0.35,
        "enable_comets": True,
        "comet_max_count": 8,
        "enable_lagrange_points": True,
        "lagrange_include_moons": True,
        "trojan_probability": 0.6,
        "enable_protoplanetary_disks": True,
        "enable_rogue_planets": True,
        "rogue_max_count": 8,
        "rogue_trajectory_mode": "curved",
        "enable_nebulae": True,
        "nebula_max_count": 8,
        "nesting_probability": 0.5,
        "max_group_depth": 4,
    },
}


def preset_config(name: str, **overrides: Any) -> GenerationConfig:
    """Build a config from a style preset plus explicit overrides."""
    try:
        base = dict(STYLE_PRESETS[name])
    except KeyError as exc:
        raise ConfigurationError("style_preset", f"unknown style preset {name!r}") from exc
    base.update(overrides)
    return load_config(base)


# ===================== Simple settings =====================

ScaleMode = Literal["toy", "compressed", "realistic"]
EccentricityStyle = Literal["circular", "mixed", "eccentric"]
GroupStructureMode = Literal["flat", "galaxy_cluster", "deep_hierarchy"]

# (orbit_base, orbit_growth, orbit_k)
SCALE_MODES = {
    "toy": (3.0, 1.5, 15.0),
    "compressed": (5.0, 1.6, 18.0),
    "realistic": (8.0, 1.8, 20.0),
}
ECCENTRICITY_STYLES = {
    "circular": (0.0, 0.0),
    "mixed": (0.0, 0.3),
    "eccentric": (0.1, 0.7),
}
GROUP_NESTING = {
    "flat": 0.0,
    "galaxy_cluster": 0.2,
    "deep_hierarchy": 0.5,
}


def density_to_geometric_p(density: float) -> float:
    """Map a 0..1 density slider to a geometric success probability.

    Higher density means a smaller p and therefore more bodies.
    """
    return 0.8 - density * 0.6


def config_from_settings(
    planet_density: float = 0.5,
    moon_density: float = 0.5,
    scale_mode: ScaleMode = "realistic",
    eccentricity_style: EccentricityStyle = "circular",
    inclination_max: float = 0.0,
    enable_offsets: bool = False,
    belt_density: float = 0.5,
    group_structure: GroupStructureMode = "galaxy_cluster",
    **overrides: Any,
) -> GenerationConfig:
    """Translate slider-style settings into a full ``GenerationConfig``."""
    for field, value in (("planet_density", planet_density), ("moon_density", moon_density), ("belt_density", belt_density)):
        if not 0.0 <= value <= 1.0:
            raise ConfigurationError(field, f"density must lie in [0, 1], got {value}")
    if scale_mode not in SCALE_MODES:
        raise ConfigurationError("scale_mode", f"unknown scale mode {scale_mode!r}")
    if eccentricity_style not in ECCENTRICITY_STYLES:
        raise ConfigurationError("eccentricity_style", f"unknown eccentricity style {eccentricity_style!r}")
    if group_structure not in GROUP_NESTING:
        raise ConfigurationError("group_structure", f"unknown group structure {group_structure!r}")

    orbit_base, orbit_growth, orbit_k = SCALE_MODES[scale_mode]
    settings: Dict[str, Any] = {
        "planet_geometric_p": density_to_geometric_p(planet_density),
        "moon_geometric_p": density_to_geometric_p(moon_density),
        "orbit_base": orbit_base,
        "orbit_growth": orbit_growth,
        "orbit_k": orbit_k,
        "eccentricity_range": ECCENTRICITY_STYLES[eccentricity_style],
        "inclination_max": inclination_max,
        "enable_orbit_offsets": enable_offsets,
        "orbit_offset_magnitude": 2.0 if enable_offsets else 0.0,
        "belt_min_count": int(round(50 + belt_density * 150)),
        "belt_max_count": int(round(500 + belt_density * 500)),
        "belt_thickness": 0.5,
        "belt_inner_gap_scale": 0.4,
        "belt_outer_gap_scale": 0.6,
        "belt_outer_multiplier": 1.5,
        "belt_eccentricity_range": (0.0, 0.1),
        "nesting_probability": GROUP_NESTING[group_structure],
    }
    settings.update(overrides)
    return load_config(settings)
