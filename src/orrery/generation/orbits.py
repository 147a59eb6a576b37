"""
Closed-form motion.

Every position is a pure function of elapsed time ``t``; nothing is
integrated. Orbits lie in the XZ plane before inclination (a rotation
about the X axis) and the optional center offset are applied. Eccentric
orbits use the polar ellipse equation with the orbital angle standing in
for the true anomaly.
"""

from __future__ import annotations

import math
from typing import Tuple

from orrery.generation.models import (
    Body,
    GeneratedUniverse,
    Orbit,
    RogueDescriptor,
    Vector3,
)

Point = Tuple[float, float, float]

# Guards against malformed parent chains in hand-edited snapshots
MAX_CHAIN_LENGTH = 64


def orbit_angle(orbit: Orbit, t: float) -> float:
    """Orbital angle in degrees at time ``t``."""
    return (orbit.phase + orbit.speed * t) % 360.0


def orbital_radius(orbit: Orbit, angle_deg: float) -> float:
    if orbit.eccentricity <= 0:
        return orbit.distance
    e = orbit.eccentricity
    return orbit.distance * (1.0 - e * e) / (1.0 + e * math.cos(math.radians(angle_deg)))


def _in_plane(radius: float, angle_deg: float, inclination_deg: float) -> Point:
    theta = math.radians(angle_deg)
    x = radius * math.cos(theta)
    z = radius * math.sin(theta)
    inc = math.radians(inclination_deg)
    return (x, -z * math.sin(inc), z * math.cos(inc))


def relative_position(orbit: Orbit, t: float) -> Point:
    """Position relative to the parent body at time ``t``."""
    angle = orbit_angle(orbit, t)
    x, y, z = _in_plane(orbital_radius(orbit, angle), angle, orbit.inclination)
    if orbit.offset is not None:
        x, y, z = x + orbit.offset.x, y + orbit.offset.y, z + orbit.offset.z
    return (x, y, z)


def rogue_position(body: Body, t: float) -> Point:
    """Straight drift, bent into a closed loop as curvature rises."""
    descriptor = body.metadata
    if not isinstance(descriptor, RogueDescriptor):
        raise ValueError(f"{body.id} carries no rogue trajectory")
    start = descriptor.initial_position
    v = descriptor.velocity
    drift = 1.0 - descriptor.curvature
    x = start.x + v.x * t * drift
    y = start.y + v.y * t * drift
    z = start.z + v.z * t * drift
    if descriptor.curvature > 0 and descriptor.semi_major_axis:
        path = Orbit(
            distance=descriptor.semi_major_axis,
            speed=body.orbit.speed,
            phase=descriptor.path_rotation,
            eccentricity=descriptor.eccentricity,
        )
        # Anchor the loop so the body sits at its initial position at t = 0
        lx, ly, lz = relative_position(path, t)
        ax, ay, az = relative_position(path, 0.0)
        x, y, z = x + lx - ax, y + ly - ay, z + lz - az
    return (x, y, z)


def body_position(universe: GeneratedUniverse, body_id: str, t: float = 0.0) -> Vector3:
    """World position of a body, following its parent chain to the system placement."""
    body = universe.bodies[body_id]
    if isinstance(body.metadata, RogueDescriptor) and body.parent_id is None:
        return Vector3.from_tuple(rogue_position(body, t))

    x = y = z = 0.0
    for _ in range(MAX_CHAIN_LENGTH):
        if body.parent_id is None:
            base = universe.system_positions.get(body.id)
            if base is not None:
                x, y, z = x + base.x, y + base.y, z + base.z
            return Vector3(x=x, y=y, z=z)
        rx, ry, rz = relative_position(body.orbit, t)
        x, y, z = x + rx, y + ry, z + rz
        body = universe.bodies[body.parent_id]
    raise ValueError(f"parent chain of {body_id} is longer than {MAX_CHAIN_LENGTH}")


def lagrange_position(universe: GeneratedUniverse, point_id: str, t: float = 0.0) -> Vector3:
    """World position of a Lagrange marker, co-rotating with its secondary."""
    point = universe.lagrange_points[point_id]
    primary = body_position(universe, point.primary_id, t)
    secondary = universe.bodies[point.secondary_id]
    angle = (point.phase + point.speed * t) % 360.0
    x, y, z = _in_plane(point.distance, angle, secondary.orbit.inclination)
    return Vector3(x=primary.x + x, y=primary.y + y, z=primary.z + z)


def orbital_period(orbit: Orbit) -> float:
    """Time units for one revolution; infinite for a motionless orbit."""
    if orbit.speed == 0:
        return math.inf
    return 360.0 / abs(orbit.speed)
