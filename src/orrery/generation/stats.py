"""Aggregate counts over a generated universe."""

from __future__ import annotations

from collections import Counter
from typing import Dict

from orrery.generation.models import (
    BodyKind,
    GeneratedUniverse,
    LagrangeDescriptor,
    RingDescriptor,
    UniverseStats,
)


def group_depths(universe: GeneratedUniverse) -> Dict[str, int]:
    """Depth of every group, root groups being depth 1."""
    depths: Dict[str, int] = {}
    stack = [(gid, 1) for gid in universe.root_group_ids]
    while stack:
        gid, depth = stack.pop()
        if gid in depths or gid not in universe.groups:
            continue
        depths[gid] = depth
        for child in universe.groups[gid].children:
            if child.kind == "group":
                stack.append((child.id, depth + 1))
    return depths


def compute_stats(universe: GeneratedUniverse) -> UniverseStats:
    kinds = Counter(body.kind for body in universe.bodies.values())
    ringed = sum(1 for body in universe.bodies.values() if isinstance(body.metadata, RingDescriptor))
    trojans = sum(1 for body in universe.bodies.values() if isinstance(body.metadata, LagrangeDescriptor))
    depths = group_depths(universe)

    return UniverseStats(
        systems=len(universe.root_ids),
        total_bodies=len(universe.bodies),
        stars=kinds[BodyKind.STAR],
        planets=kinds[BodyKind.PLANET],
        moons=kinds[BodyKind.MOON],
        asteroids=kinds[BodyKind.ASTEROID],
        comets=kinds[BodyKind.COMET],
        rogue_planets=kinds[BodyKind.ROGUE_PLANET],
        black_holes=kinds[BodyKind.BLACK_HOLE],
        belts=sum(1 for belt in universe.belts.values() if belt.belt_type == "main"),
        kuiper_belts=sum(1 for belt in universe.belts.values() if belt.belt_type == "kuiper"),
        belt_particles=sum(belt.particle_count or 0 for belt in universe.belts.values()),
        ringed_planets=ringed,
        trojans=trojans,
        lagrange_points=len(universe.lagrange_points),
        nebulae=len(universe.nebulae),
        protoplanetary_disks=len(universe.protoplanetary_disks),
        groups=len(universe.groups),
        max_group_depth=max(depths.values(), default=0),
    )
