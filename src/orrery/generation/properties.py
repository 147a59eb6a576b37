"""
Physical and orbital properties for skeleton bodies.

Mass is log-normal times a per-kind multiplier, radius follows a power law
of mass, colors come from spectral bands (stars) or a jittered palette
(planets, moons). Orbits use a geometric spacing law with jitter and a
Kepler-flavoured speed ``k / sqrt(distance)``.

Results land in a ``DraftTable``: a flat, id-indexed table of mutable
drafts that the hierarchy resolver can re-parent in O(1) before the system
is committed to the snapshot.
"""

from __future__ import annotations

import colorsys
import math
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from loguru import logger

from orrery.generation.config import GenerationConfig
from orrery.generation.models import (
    BlackHoleDescriptor,
    Body,
    BodyKind,
    BodyMetadata,
    Orbit,
    Vector3,
)
from orrery.generation.sampling import RandomGenerator
from orrery.generation.topology import Skeleton, SkeletonNode

# --- Visual tables ---

# (minimum mass, color), checked in order
STAR_COLOR_BANDS = (
    (600.0, "#9BB0FF"),
    (200.0, "#CAD7FF"),
    (100.0, "#F8F7FF"),
    (50.0, "#FFF4EA"),
)
STAR_COLOR_FALLBACK = "#FFD2A1"
PLANET_PALETTE = ("#4A90E2", "#E25822", "#8B7355", "#C0A080", "#A0C0E0")
MOON_BASE_COLOR = "#CCCCCC"
BLACK_HOLE_COLOR = "#000000"

HUE_JITTER = 0.03
LIGHTNESS_JITTER = 0.08

# --- Names ---

GREEK_LETTERS = (
    "Alpha", "Beta", "Gamma", "Delta", "Epsilon", "Zeta", "Eta", "Theta",
    "Iota", "Kappa", "Lambda", "Mu", "Nu", "Xi", "Omicron", "Pi", "Rho",
    "Sigma", "Tau", "Upsilon", "Phi", "Chi", "Psi", "Omega",
)
CONSTELLATIONS = (
    "Andromedae", "Aquilae", "Arietis", "Aurigae", "Bootis", "Cancri",
    "Carinae", "Centauri", "Cephei", "Ceti", "Cygni", "Draconis", "Eridani",
    "Geminorum", "Herculis", "Hydrae", "Leonis", "Librae", "Lyrae", "Orionis",
    "Pegasi", "Persei", "Piscium", "Sagittarii", "Scorpii", "Tauri", "Ursae",
    "Virginis",
)
PLANET_NAMES = ("Mercury", "Venus", "Earth", "Mars", "Jupiter", "Saturn", "Uranus", "Neptune", "Pluto")
MOON_NAMES = (
    "Moon", "Phobos", "Deimos", "Io", "Europa", "Ganymede", "Callisto",
    "Titan", "Rhea", "Iapetus", "Dione", "Tethys", "Enceladus", "Mimas",
    "Miranda", "Ariel", "Umbriel", "Titania", "Oberon", "Triton", "Nereid",
    "Charon",
)

# --- Black hole shape ---
BLACK_HOLE_RADIUS_FACTOR = 0.3
ACCRETION_INNER_FACTOR = 3.0
ACCRETION_OUTER_FACTOR = (8.0, 15.0)


@dataclass
class BodyDraft:
    """Mutable body record used until the system is committed."""

    id: str
    name: str
    kind: BodyKind
    mass: float
    radius: float
    color: str
    parent_id: Optional[str] = None
    orbit: Orbit = field(default_factory=Orbit)
    metadata: Optional[BodyMetadata] = None
    skeleton_key: str = ""

    def to_body(self, system_id: str) -> Body:
        return Body(
            id=self.id,
            name=self.name,
            kind=self.kind,
            mass=self.mass,
            radius=self.radius,
            color=self.color,
            parent_id=self.parent_id,
            system_id=system_id,
            orbit=self.orbit,
            metadata=self.metadata,
        )


class DraftTable:
    """Flat, id-indexed arena of drafts in generation order."""

    def __init__(self) -> None:
        self._drafts: Dict[str, BodyDraft] = {}

    def __len__(self) -> int:
        return len(self._drafts)

    def __iter__(self) -> Iterator[BodyDraft]:
        return iter(self._drafts.values())

    def __contains__(self, draft_id: str) -> bool:
        return draft_id in self._drafts

    def add(self, draft: BodyDraft) -> None:
        if draft.id in self._drafts:
            raise ValueError(f"Duplicate draft id: {draft.id}")
        self._drafts[draft.id] = draft

    def get(self, draft_id: str) -> BodyDraft:
        return self._drafts[draft_id]

    def reparent(self, draft_id: str, parent_id: Optional[str]) -> None:
        self._drafts[draft_id].parent_id = parent_id

    def of_kinds(self, *kinds: BodyKind) -> List[BodyDraft]:
        return [d for d in self._drafts.values() if d.kind in kinds]


# ===================== Formulas =====================


def star_color(mass: float) -> str:
    for threshold, color in STAR_COLOR_BANDS:
        if mass > threshold:
            return color
    return STAR_COLOR_FALLBACK


def body_radius(mass: float, config: GenerationConfig) -> float:
    return (mass ** config.radius_power) * config.radius_scale


def orbital_speed(distance: float, k: float) -> float:
    """Angular speed in degrees per time unit."""
    if distance <= 0:
        return 0.0
    return k / math.sqrt(distance)


def orbit_distance(index: int, config: GenerationConfig, rng: RandomGenerator) -> float:
    jitter = rng.uniform(-config.orbit_jitter, config.orbit_jitter)
    return max(0.0, config.orbit_base * config.orbit_growth ** index + jitter)


def jitter_color(hex_color: str, rng: RandomGenerator) -> str:
    """Shift hue and lightness slightly; consumes two draws."""
    r, g, b = (int(hex_color[i:i + 2], 16) / 255.0 for i in (1, 3, 5))
    hue, lightness, saturation = colorsys.rgb_to_hls(r, g, b)
    hue = (hue + rng.uniform(-HUE_JITTER, HUE_JITTER)) % 1.0
    lightness = min(1.0, max(0.0, lightness + rng.uniform(-LIGHTNESS_JITTER, LIGHTNESS_JITTER)))
    r, g, b = colorsys.hls_to_rgb(hue, lightness, saturation)
    return "#{:02X}{:02X}{:02X}".format(round(r * 255), round(g * 255), round(b * 255))


def mass_multiplier(kind: BodyKind, config: GenerationConfig) -> float:
    if kind == BodyKind.STAR:
        return config.star_mass_multiplier
    if kind == BodyKind.PLANET:
        return config.planet_mass_multiplier
    return config.moon_mass_multiplier


def ordinal_name(names: Tuple[str, ...], index: int, fallback: str) -> str:
    if index < len(names):
        return names[index]
    return f"{fallback} {index + 1}"


def sample_orbit_shape(config: GenerationConfig, rng: RandomGenerator) -> Tuple[float, float, Optional[Vector3]]:
    """Eccentricity, inclination and center offset for one orbit."""
    low, high = config.eccentricity_range
    eccentricity = rng.uniform(low, high) if high > 0 else 0.0
    inclination = rng.uniform(0.0, config.inclination_max) if config.inclination_max > 0 else 0.0
    offset = None
    if config.enable_orbit_offsets and config.orbit_offset_magnitude > 0:
        direction = rng.unit_vector()
        magnitude = rng.uniform(0.0, config.orbit_offset_magnitude)
        offset = Vector3.from_tuple(c * magnitude for c in direction)
    return eccentricity, inclination, offset


# ===================== Assignment =====================


def assign_properties(
    skeleton: Skeleton,
    rng: RandomGenerator,
    config: GenerationConfig,
    prefix: str,
) -> Tuple[DraftTable, RandomGenerator]:
    """Turn skeleton nodes into drafts with mass, radius, color, name and orbit.

    Orbit slots are counted over the system's top-level members: co-orbital
    stars share slot 0 and phases spaced 360/N apart; planets take the
    following slots. Moons are slotted among their siblings and scaled by
    ``moon_orbit_scale`` per nesting level. Orbit shapes come from a
    separate ``orbit_shape`` fork so eccentricity settings never shift mass
    or color draws.
    """
    shape_rng = rng.fork("orbit_shape")
    drafts = DraftTable()
    ids: Dict[str, str] = {}
    counters = {BodyKind.STAR: 0, BodyKind.PLANET: 0, BodyKind.MOON: 0}

    stars = skeleton.of_kind(BodyKind.STAR)
    top_level = {node.key for node in skeleton.top_level()}
    companions = max(0, len(stars) - 1)
    star_distance: Optional[float] = None
    star_slot = 0
    planet_slot = 0
    moon_slots: Dict[str, int] = {}
    moon_scales: Dict[str, float] = {}

    for node in skeleton.nodes:
        kind = node.kind
        index = counters[kind]
        counters[kind] = index + 1
        body_id = f"{prefix}-{kind.value}-{index}"
        ids[node.key] = body_id

        mass = rng.log_normal(config.mass_mu, config.mass_sigma) * mass_multiplier(kind, config)
        radius = body_radius(mass, config)
        if kind == BodyKind.STAR:
            color = star_color(mass)
            name = f"{rng.choice(GREEK_LETTERS)} {rng.choice(CONSTELLATIONS)}"
        elif kind == BodyKind.PLANET:
            color = jitter_color(rng.choice(PLANET_PALETTE), rng)
            name = ordinal_name(PLANET_NAMES, index, "Planet")
        else:
            color = jitter_color(MOON_BASE_COLOR, rng)
            name = ordinal_name(MOON_NAMES, index, "Moon")

        if node.key in top_level and kind == BodyKind.STAR:
            if star_distance is None:
                star_distance = orbit_distance(0, config, rng)
            distance = star_distance
            phase = 360.0 * star_slot / len(stars)
            star_slot += 1
        elif node.key in top_level:
            distance = orbit_distance(planet_slot + companions, config, rng)
            phase = rng.uniform(0.0, 360.0)
            planet_slot += 1
        else:
            parent_key = node.parent_key
            slot = moon_slots.get(parent_key, 0)
            moon_slots[parent_key] = slot + 1
            scale = moon_scales.get(parent_key, 1.0) * config.moon_orbit_scale
            moon_scales[node.key] = scale
            distance = orbit_distance(slot, config, rng) * scale
            phase = rng.uniform(0.0, 360.0)

        eccentricity, inclination, offset = sample_orbit_shape(config, shape_rng)
        orbit = Orbit(
            distance=distance,
            speed=orbital_speed(distance, config.orbit_k),
            phase=phase,
            eccentricity=eccentricity,
            inclination=inclination,
            offset=offset,
        )
        parent_id = ids[node.parent_key] if node.parent_key is not None else None
        drafts.add(
            BodyDraft(
                id=body_id,
                name=name,
                kind=kind,
                mass=mass,
                radius=radius,
                color=color,
                parent_id=parent_id,
                orbit=orbit,
                skeleton_key=node.key,
            )
        )

    return drafts, rng


def convert_black_holes(
    drafts: DraftTable,
    rng: RandomGenerator,
    config: GenerationConfig,
) -> Tuple[List[str], RandomGenerator]:
    """Collapse one (or, when allowed, several) stars into black holes.

    Returns the ids of converted drafts.
    """
    converted: List[str] = []
    stars = drafts.of_kinds(BodyKind.STAR)
    if not stars:
        return converted, rng

    if config.black_hole_allow_multiple:
        candidates = [star for star in stars if rng.chance(config.black_hole_probability)]
    elif rng.chance(config.black_hole_probability):
        candidates = [rng.choice(stars)]
    else:
        candidates = []

    for star in candidates:
        low, high = config.black_hole_mass_multiplier_range
        star.mass *= rng.uniform(low, high)
        star.radius = body_radius(star.mass, config) * BLACK_HOLE_RADIUS_FACTOR
        star.kind = BodyKind.BLACK_HOLE
        star.color = BLACK_HOLE_COLOR
        star.name = f"{star.name} X-1"
        star.metadata = _black_hole_descriptor(star.radius, rng, config)
        converted.append(star.id)

    if converted:
        logger.debug(f"Converted {len(converted)} star(s) into black holes")
    return converted, rng


def _black_hole_descriptor(radius: float, rng: RandomGenerator, config: GenerationConfig) -> BlackHoleDescriptor:
    has_disk = rng.chance(config.black_hole_accretion_disk_probability)
    has_jet = rng.chance(config.black_hole_jet_probability)
    spin = rng.uniform(*config.black_hole_spin_range)
    shadow = radius * 2.6
    inner = radius * ACCRETION_INNER_FACTOR * (1.0 - 0.5 * spin)
    outer = radius * rng.uniform(*ACCRETION_OUTER_FACTOR)
    return BlackHoleDescriptor(
        has_accretion_disk=has_disk,
        has_relativistic_jet=has_jet,
        spin=spin,
        shadow_radius=shadow,
        accretion_inner_radius=inner,
        accretion_outer_radius=outer,
        disk_thickness=rng.uniform(0.05, 0.2) * outer if has_disk else 0.0,
        disk_brightness=rng.uniform(0.6, 1.0) if has_disk else 0.0,
        jet_length=outer * rng.uniform(2.0, 5.0) if has_jet else 0.0,
        jet_opening_angle=rng.uniform(2.0, 8.0) if has_jet else 0.0,
    )
