"""Data models for generated universes.

All models are frozen pydantic models. Serialization uses camelCase keys
(``model_dump(by_alias=True)``) and round-trips through
``GeneratedUniverse.model_validate_json``.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Dict, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FrozenModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class Vector3(FrozenModel):
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    @classmethod
    def from_tuple(cls, values) -> "Vector3":
        x, y, z = values
        return cls(x=float(x), y=float(y), z=float(z))


class Orbit(FrozenModel):
    """Closed-form orbit around the parent body.

    ``speed`` is in degrees per time unit, ``phase`` and ``inclination`` in
    degrees. ``distance`` is the semi-major axis for eccentric orbits.
    """

    distance: float = 0.0
    speed: float = 0.0
    phase: float = 0.0
    eccentricity: float = 0.0
    inclination: float = 0.0
    offset: Optional[Vector3] = None


class BodyKind(str, Enum):
    """Kinds of generated bodies."""

    STAR = "star"
    PLANET = "planet"
    MOON = "moon"
    ASTEROID = "asteroid"
    COMET = "comet"
    ROGUE_PLANET = "rogue_planet"
    BLACK_HOLE = "black_hole"

    @classmethod
    def from_str(cls, value: str) -> "BodyKind":
        try:
            return cls(value.lower())
        except ValueError as exc:
            raise ValueError(f"Unknown body kind: {value}") from exc

    @property
    def is_stellar(self) -> bool:
        return self in (BodyKind.STAR, BodyKind.BLACK_HOLE)


# Kinds that compete for the center of a system
CENTER_CANDIDATE_KINDS = frozenset({BodyKind.STAR, BodyKind.BLACK_HOLE, BodyKind.PLANET})


# ---------------------------------------------------------------------------
# Feature metadata, one variant per feature family
# ---------------------------------------------------------------------------


class RingDescriptor(FrozenModel):
    """Planetary ring; radii are multiples of the planet radius."""

    kind: Literal["ring"] = "ring"
    inner_radius: float
    outer_radius: float
    thickness: float
    opacity: float
    density: float
    albedo: float
    color: str


class CometDescriptor(FrozenModel):
    kind: Literal["comet"] = "comet"
    is_periodic: bool
    perihelion: float
    aphelion: float
    has_tail: bool = True
    tail_length: float
    tail_width: float
    tail_color: str
    tail_opacity: float
    activity_falloff_distance: float


class RogueDescriptor(FrozenModel):
    """Trajectory of an unbound body.

    ``curvature`` 0 is straight drift along ``velocity``; above 0 the body
    follows a closed path described by the semi-major axis, eccentricity and
    period.
    """

    kind: Literal["rogue"] = "rogue"
    initial_position: Vector3
    velocity: Vector3
    curvature: float = 0.0
    semi_major_axis: Optional[float] = None
    eccentricity: float = 0.0
    period: Optional[float] = None
    path_rotation: float = 0.0


class LagrangeDescriptor(FrozenModel):
    kind: Literal["lagrange"] = "lagrange"
    primary_id: str
    secondary_id: str
    point_index: int = Field(ge=1, le=5)
    stable: bool
    pair_type: Literal["star_planet", "planet_moon"]


class BlackHoleDescriptor(FrozenModel):
    kind: Literal["black_hole"] = "black_hole"
    has_accretion_disk: bool
    has_relativistic_jet: bool
    has_photon_ring: bool = True
    spin: float
    shadow_radius: float
    accretion_inner_radius: float
    accretion_outer_radius: float
    disk_thickness: float
    disk_brightness: float
    jet_length: float = 0.0
    jet_opening_angle: float = 0.0


BodyMetadata = Annotated[
    Union[
        RingDescriptor,
        CometDescriptor,
        RogueDescriptor,
        LagrangeDescriptor,
        BlackHoleDescriptor,
    ],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


class Body(FrozenModel):
    id: str
    name: str
    kind: BodyKind
    mass: float
    radius: float
    color: str
    parent_id: Optional[str] = None
    system_id: Optional[str] = None
    children: Tuple[str, ...] = ()
    orbit: Orbit = Field(default_factory=Orbit)
    belt_id: Optional[str] = None
    metadata: Optional[BodyMetadata] = None


class Belt(FrozenModel):
    """Torus-shaped population around a system center.

    Exactly one of ``member_ids`` (individual asteroid bodies) or
    ``particle_count`` (render-side instancing) describes the population.
    """

    id: str
    name: str
    parent_id: str
    belt_type: Literal["main", "kuiper"] = "main"
    region: Literal["gap", "outer", "kuiper"] = "gap"
    inner_radius: float
    outer_radius: float
    thickness: float
    eccentricity: float = 0.0
    inclination: float = 0.0
    inclination_sigma: float = 0.0
    color: str
    is_icy: bool = False
    member_ids: Tuple[str, ...] = ()
    particle_count: Optional[int] = None

    @property
    def is_particle_field(self) -> bool:
        return self.particle_count is not None

    @property
    def population(self) -> int:
        return self.particle_count if self.particle_count is not None else len(self.member_ids)


class GroupChild(FrozenModel):
    kind: Literal["system", "group"]
    id: str


class Group(FrozenModel):
    id: str
    name: str
    children: Tuple[GroupChild, ...] = ()
    parent_group_id: Optional[str] = None
    position: Vector3 = Field(default_factory=Vector3)
    color: str


class NebulaRegion(FrozenModel):
    id: str
    name: str
    position: Vector3
    radius: float
    density: float
    brightness: float
    base_color: str
    accent_color: str
    noise_scale: float
    noise_detail: int
    associated_group_ids: Tuple[str, ...] = ()


class LagrangePoint(FrozenModel):
    """L1-L5 marker of a primary/secondary pair, co-rotating with the secondary."""

    id: str
    primary_id: str
    secondary_id: str
    point_index: int = Field(ge=1, le=5)
    stable: bool
    pair_type: Literal["star_planet", "planet_moon"]
    distance: float
    phase: float
    speed: float


class ProtoplanetaryDisk(FrozenModel):
    id: str
    system_id: str
    inner_radius: float
    outer_radius: float
    thickness: float
    particle_count: int
    base_color: str
    accent_color: str
    opacity: float
    style: Literal["dusty", "icy", "banded"]


class UniverseStats(FrozenModel):
    systems: int = 0
    total_bodies: int = 0
    stars: int = 0
    planets: int = 0
    moons: int = 0
    asteroids: int = 0
    comets: int = 0
    rogue_planets: int = 0
    black_holes: int = 0
    belts: int = 0
    kuiper_belts: int = 0
    belt_particles: int = 0
    ringed_planets: int = 0
    trojans: int = 0
    lagrange_points: int = 0
    nebulae: int = 0
    protoplanetary_disks: int = 0
    groups: int = 0
    max_group_depth: int = 0


class GeneratedUniverse(FrozenModel):
    """The complete output of one generation call.

    Fields cannot be reassigned and every entity is itself frozen, but the
    id-keyed tables (``bodies``, ``belts``, ``groups`` and the like) are
    plain dicts so they serialize without conversion. Treat them as
    read-only; derive a changed universe with ``model_copy(update=...)``
    and fresh dicts rather than editing them in place.
    """

    seed: int
    bodies: Dict[str, Body] = Field(default_factory=dict)
    root_ids: Tuple[str, ...] = ()
    rogue_ids: Tuple[str, ...] = ()
    belts: Dict[str, Belt] = Field(default_factory=dict)
    groups: Dict[str, Group] = Field(default_factory=dict)
    root_group_ids: Tuple[str, ...] = ()
    system_positions: Dict[str, Vector3] = Field(default_factory=dict)
    nebulae: Dict[str, NebulaRegion] = Field(default_factory=dict)
    lagrange_points: Dict[str, LagrangePoint] = Field(default_factory=dict)
    protoplanetary_disks: Dict[str, ProtoplanetaryDisk] = Field(default_factory=dict)
    stats: UniverseStats = Field(default_factory=UniverseStats)

    def system_bodies(self, root_id: str) -> Dict[str, Body]:
        return {bid: body for bid, body in self.bodies.items() if body.system_id == root_id}

    def bodies_of_kind(self, kind: BodyKind):
        return [body for body in self.bodies.values() if body.kind == kind]
