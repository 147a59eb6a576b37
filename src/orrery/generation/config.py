"""
Generation parameters.

``GenerationConfig`` is an immutable pydantic model holding every tunable of
the engine. Field names are snake_case; camelCase aliases are accepted on
input and used for serialization (``model_dump(by_alias=True)``).

Range checks live on the fields. Cross-field consistency (probability
vectors, min/max pairs, ordered ranges) is checked after validation and
raises :class:`ConfigurationError` naming the offending field.
Upper bounds keep every derived mass, radius and orbit distance finite.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from orrery.generation.errors import ConfigurationError

TopologyPresetName = Literal[
    "classic",
    "compact",
    "multi_star_heavy",
    "moon_rich",
    "sparse_outpost",
    "deep_hierarchy",
]
BeltPlacementMode = Literal["between_planets", "outer", "both"]
KuiperDistanceStyle = Literal["tight", "classical", "wide"]
LagrangeMarkerMode = Literal["none", "stable_only", "all"]
RogueTrajectoryMode = Literal["linear_only", "mixed", "curved"]
NebulaColorStyle = Literal["warm", "cool", "mixed", "monochrome"]

PROBABILITY_SUM_TOLERANCE = 1e-6
MAX_MASS_MULTIPLIER = 1e6
MAX_DISK_PARTICLES = 0xFFFFFFFF

# (min_field, max_field) pairs that must satisfy min <= max
MIN_MAX_PAIRS = (
    ("belt_min_count", "belt_max_count"),
    ("kuiper_min_count", "kuiper_max_count"),
    ("comet_min_count", "comet_max_count"),
    ("trojan_min_count", "trojan_max_count"),
    ("rogue_min_count", "rogue_max_count"),
    ("nebula_min_count", "nebula_max_count"),
    ("min_groups", "max_groups"),
)

Range = Tuple[float, float]


class GenerationConfig(BaseModel):
    """Every parameter that shapes a generated universe."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
        allow_inf_nan=False,
    )

    # --- Topology ---
    topology_preset: TopologyPresetName = "classic"
    star_probabilities: Tuple[float, float, float] = Field(
        (0.65, 0.25, 0.10),
        description="Probability of a system having 1, 2 or 3 stars; must sum to 1",
    )
    planet_geometric_p: float = Field(0.4, gt=0, le=1, description="Success probability of the per-star planet count")
    moon_geometric_p: float = Field(0.3, gt=0, le=1, description="Success probability of the per-planet moon count")
    max_depth: int = Field(3, ge=1, le=8, description="Deepest body level the grammar may expand to")
    max_planets_per_star: int = Field(12, ge=0, le=64)
    max_moons_per_planet: int = Field(8, ge=0, le=64)

    # --- Physical properties ---
    mass_mu: float = Field(1.5, ge=-50, le=50, description="Mean of the log-mass distribution")
    mass_sigma: float = Field(0.8, gt=0, le=10)
    star_mass_multiplier: float = Field(100.0, gt=0, le=MAX_MASS_MULTIPLIER)
    planet_mass_multiplier: float = Field(10.0, gt=0, le=MAX_MASS_MULTIPLIER)
    moon_mass_multiplier: float = Field(1.0, gt=0, le=MAX_MASS_MULTIPLIER)
    radius_power: float = Field(0.4, gt=0, le=3)
    radius_scale: float = Field(0.15, gt=0, le=1e6)

    # --- Orbits ---
    orbit_base: float = Field(1.0, gt=0, le=1e6)
    orbit_growth: float = Field(1.8, ge=1, le=10)
    orbit_jitter: float = Field(0.1, ge=0)
    orbit_k: float = Field(20.0, gt=0, description="Angular speed constant: speed = k / sqrt(distance)")
    moon_orbit_scale: float = Field(0.3, gt=0, le=1)
    eccentricity_range: Range = Field((0.0, 0.0), description="Eccentricity drawn uniformly from this range")
    inclination_max: float = Field(0.0, ge=0, le=90, description="Maximum orbital inclination in degrees")
    enable_orbit_offsets: bool = False
    orbit_offset_magnitude: float = Field(2.0, ge=0)

    # --- Black holes ---
    enable_black_holes: bool = False
    black_hole_probability: float = Field(0.1, ge=0, le=1)
    black_hole_allow_multiple: bool = False
    black_hole_mass_multiplier_range: Range = (5.0, 20.0)
    black_hole_accretion_disk_probability: float = Field(0.8, ge=0, le=1)
    black_hole_jet_probability: float = Field(0.3, ge=0, le=1)
    black_hole_spin_range: Range = (0.0, 0.99)

    # --- Asteroid belts ---
    enable_asteroid_belts: bool = False
    belt_placement_mode: BeltPlacementMode = "between_planets"
    max_belts_per_system: int = Field(2, ge=0)
    belt_min_count: int = Field(50, ge=0)
    belt_max_count: int = Field(500, ge=0)
    belt_count_geometric_p: float = Field(0.01, gt=0, le=1)
    belt_particle_threshold: int = Field(250, ge=0, description="Populations above this become a particle count")
    belt_thickness: float = Field(0.5, ge=0)
    belt_inner_gap_scale: float = Field(0.4, gt=0, lt=1)
    belt_outer_gap_scale: float = Field(0.6, gt=0, lt=1)
    belt_outer_multiplier: float = Field(1.5, gt=1)
    belt_eccentricity_range: Range = (0.0, 0.1)
    belt_inclination_sigma: float = Field(1.0, ge=0)

    # --- Kuiper belts ---
    enable_kuiper_belt: bool = False
    kuiper_distance_style: KuiperDistanceStyle = "classical"
    kuiper_min_count: int = Field(100, ge=0)
    kuiper_max_count: int = Field(800, ge=0)
    kuiper_count_geometric_p: float = Field(0.005, gt=0, le=1)
    kuiper_thickness: float = Field(1.5, ge=0)
    kuiper_inclination_sigma: float = Field(5.0, ge=0)

    # --- Planetary rings ---
    enable_planetary_rings: bool = False
    ring_base_probability: float = Field(0.15, ge=0, le=1)
    ring_mass_bias: float = Field(0.3, ge=0)
    ring_distance_bias: float = Field(0.2, ge=0)
    ring_reference_mass: float = Field(50.0, gt=0)
    ring_reference_distance: float = Field(20.0, gt=0)
    ring_inner_radius_range: Range = (1.3, 1.8)
    ring_width_range: Range = (0.4, 1.2)
    ring_thickness_range: Range = (0.01, 0.05)
    ring_opacity_range: Range = (0.3, 0.9)
    ring_density_range: Range = (0.2, 1.0)
    ring_albedo_range: Range = (0.3, 0.9)

    # --- Comets ---
    enable_comets: bool = False
    comet_min_count: int = Field(0, ge=0)
    comet_max_count: int = Field(3, ge=0)
    comet_eccentricity_range: Range = (0.6, 0.95)
    comet_perihelion_range: Range = Field((0.3, 1.2), description="Perihelion as a multiple of the outermost planet distance")
    comet_periodic_probability: float = Field(0.7, ge=0, le=1)
    comet_tail_length_range: Range = (2.0, 8.0)
    comet_activity_falloff: float = Field(30.0, gt=0)

    # --- Lagrange points ---
    enable_lagrange_points: bool = False
    lagrange_marker_mode: LagrangeMarkerMode = "stable_only"
    lagrange_include_moons: bool = False
    trojan_probability: float = Field(0.3, ge=0, le=1)
    trojan_min_count: int = Field(2, ge=0)
    trojan_max_count: int = Field(12, ge=0)
    trojan_spread: float = Field(8.0, ge=0, description="Angular spread of trojans around L4/L5 in degrees")

    # --- Protoplanetary disks ---
    enable_protoplanetary_disks: bool = False
    disk_probability: float = Field(0.3, ge=0, le=1)
    disk_particle_range: Range = (500.0, 3000.0)
    disk_thickness: float = Field(0.3, ge=0)
    disk_opacity_range: Range = (0.3, 0.8)

    # --- Rogue planets ---
    enable_rogue_planets: bool = False
    rogue_min_count: int = Field(0, ge=0)
    rogue_max_count: int = Field(3, ge=0)
    rogue_distance_range: Range = (60.0, 150.0)
    rogue_speed_range: Range = (0.05, 0.3)
    rogue_max_inclination: float = Field(30.0, ge=0, le=90)
    rogue_trajectory_mode: RogueTrajectoryMode = "mixed"
    rogue_curvature_range: Range = (0.1, 1.0)

    # --- Nebulae ---
    enable_nebulae: bool = False
    nebula_min_count: int = Field(1, ge=0)
    nebula_max_count: int = Field(4, ge=0)
    nebula_position_sigma: float = Field(120.0, gt=0)
    nebula_radius_range: Range = (15.0, 60.0)
    nebula_density_range: Range = (0.2, 0.8)
    nebula_brightness_range: Range = (0.3, 1.0)
    nebula_min_clearance: float = Field(10.0, ge=0)
    nebula_max_attempts: int = Field(24, ge=1)
    nebula_color_style: NebulaColorStyle = "mixed"

    # --- Grouping ---
    min_groups: int = Field(3, ge=1)
    max_groups: int = Field(7, ge=1)
    nesting_probability: float = Field(0.2, ge=0, le=1)
    max_group_depth: int = Field(3, ge=1)
    group_position_sigma: float = Field(50.0, gt=0)
    nested_position_scale: float = Field(0.35, gt=0)
    system_spread: float = Field(8.0, ge=0, description="Gaussian spread of systems around their group")

    @model_validator(mode="after")
    def _check_consistency(self) -> "GenerationConfig":
        probabilities = self.star_probabilities
        if any(p < 0 for p in probabilities):
            raise ConfigurationError("star_probabilities", "probabilities must be non-negative")
        if not math.isclose(sum(probabilities), 1.0, abs_tol=PROBABILITY_SUM_TOLERANCE):
            raise ConfigurationError(
                "star_probabilities",
                f"probabilities must sum to 1, got {sum(probabilities):.6f}",
            )

        for low_field, high_field in MIN_MAX_PAIRS:
            low, high = getattr(self, low_field), getattr(self, high_field)
            if low > high:
                raise ConfigurationError(low_field, f"{low_field}={low} exceeds {high_field}={high}")

        for name in type(self).model_fields:
            if name.endswith("_range"):
                low, high = getattr(self, name)
                if low > high:
                    raise ConfigurationError(name, f"range minimum {low} exceeds maximum {high}")
                if low < 0:
                    raise ConfigurationError(name, f"range minimum {low} must be non-negative")

        if self.belt_inner_gap_scale >= self.belt_outer_gap_scale:
            raise ConfigurationError(
                "belt_inner_gap_scale",
                "belt_inner_gap_scale must be smaller than belt_outer_gap_scale",
            )
        for name in ("eccentricity_range", "belt_eccentricity_range", "comet_eccentricity_range"):
            if getattr(self, name)[1] >= 1.0:
                raise ConfigurationError(name, "eccentricity must stay below 1 for bound orbits")
        if self.black_hole_spin_range[1] > 1.0:
            raise ConfigurationError("black_hole_spin_range", "spin must lie in [0, 1]")
        if self.black_hole_mass_multiplier_range[1] > MAX_MASS_MULTIPLIER:
            raise ConfigurationError(
                "black_hole_mass_multiplier_range",
                f"multiplier must not exceed {MAX_MASS_MULTIPLIER:g}",
            )
        if self.disk_particle_range[1] > MAX_DISK_PARTICLES:
            raise ConfigurationError("disk_particle_range", "particle count must fit in 32 bits")
        return self

    def with_overrides(self, **overrides: Any) -> "GenerationConfig":
        """Return a validated copy with ``overrides`` applied."""
        data = self.model_dump()
        data.update(overrides)
        return load_config(data)


def _alias_map() -> Dict[str, str]:
    return {
        (field.alias or name): name
        for name, field in GenerationConfig.model_fields.items()
    }


def load_config(
    overrides: Optional[Mapping[str, Any]] = None,
    **kwargs: Any,
) -> GenerationConfig:
    """Build a config from a mapping of snake_case or camelCase keys.

    Every failure surfaces as :class:`ConfigurationError`.
    """
    data: Dict[str, Any] = dict(overrides or {})
    data.update(kwargs)
    try:
        return GenerationConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError.from_validation_error(exc, _alias_map()) from exc


def coerce_config(config: Any) -> GenerationConfig:
    """Accept a ``GenerationConfig``, a mapping or ``None`` (defaults)."""
    if config is None:
        return GenerationConfig()
    if isinstance(config, GenerationConfig):
        return config
    if isinstance(config, Mapping):
        return load_config(config)
    raise ConfigurationError("config", f"expected GenerationConfig or mapping, got {type(config).__name__}")
