"""
Nebula regions placed between clusters.

Candidates are drawn from a Gaussian cloud around the origin and rejected
while they would overlap an existing cluster (a group or system placement,
looked up through a KD-tree) or a nebula already placed. When every
attempt fails, the best candidate is pushed radially outward past the
farthest cluster.
"""

from __future__ import annotations

import math
from typing import List, Tuple

import numpy as np
from loguru import logger
from scipy.spatial import cKDTree

from orrery.generation.config import GenerationConfig
from orrery.generation.models import NebulaRegion, Vector3
from orrery.generation.sampling import RandomGenerator
from orrery.generation.snapshot import FeatureOutput, UniverseBuilder

WARM_PALETTE = ("#FF6B6B", "#FFA07A", "#F7DC6F", "#E25822")
COOL_PALETTE = ("#4ECDC4", "#45B7D1", "#85C1E2", "#BB8FCE")
MONOCHROME_PALETTE = ("#B0B0C0", "#8A8A9A", "#D0D0DC")
PALETTES = {
    "warm": WARM_PALETTE,
    "cool": COOL_PALETTE,
    "mixed": WARM_PALETTE + COOL_PALETTE,
    "monochrome": MONOCHROME_PALETTE,
}
NEBULA_NAMES = (
    "Veil", "Crab", "Lagoon", "Trifid", "Eagle", "Horsehead", "Rosette",
    "Helix", "Carina", "Omega", "Pelican", "Cat's Eye", "Ring", "Tarantula",
)
# Groups within this many radii of a nebula are associated with it
ASSOCIATION_RADII = 3.0


def cluster_positions(view: UniverseBuilder) -> np.ndarray:
    points = [p.as_tuple() for p in view.system_positions.values()]
    points.extend(group.position.as_tuple() for group in view.groups.values())
    return np.array(points, dtype=float).reshape(-1, 3)


def nebula_name(index: int) -> str:
    base = NEBULA_NAMES[index % len(NEBULA_NAMES)]
    cycle = index // len(NEBULA_NAMES)
    return f"{base} Nebula" if cycle == 0 else f"{base} Nebula {cycle + 1}"


def _clearance(
    candidate: np.ndarray,
    radius: float,
    tree: cKDTree | None,
    placed: List[Tuple[np.ndarray, float]],
) -> float:
    """Free space between the candidate's edge and the nearest obstacle."""
    clearance = math.inf
    if tree is not None:
        nearest, _ = tree.query(candidate)
        clearance = float(nearest) - radius
    for center, other_radius in placed:
        gap = float(np.linalg.norm(candidate - center)) - radius - other_radius
        clearance = min(clearance, gap)
    return clearance


def _push_outward(candidate: np.ndarray, radius: float, clusters: np.ndarray, clearance: float) -> np.ndarray:
    if len(clusters) == 0:
        return candidate
    centroid = clusters.mean(axis=0)
    direction = candidate - centroid
    norm = float(np.linalg.norm(direction))
    if norm == 0.0:
        direction = np.array([1.0, 0.0, 0.0])
    else:
        direction = direction / norm
    farthest = float(np.max(np.linalg.norm(clusters - centroid, axis=1)))
    return centroid + direction * (farthest + radius + clearance)


def generate_nebulae(
    view: UniverseBuilder,
    rng: RandomGenerator,
    config: GenerationConfig,
) -> Tuple[FeatureOutput, RandomGenerator]:
    output = FeatureOutput()
    count = rng.randint(config.nebula_min_count, config.nebula_max_count)
    if count == 0:
        return output, rng

    clusters = cluster_positions(view)
    tree = cKDTree(clusters) if len(clusters) else None
    group_ids = list(view.groups)
    group_points = np.array([view.groups[g].position.as_tuple() for g in group_ids], dtype=float).reshape(-1, 3)
    palette = PALETTES[config.nebula_color_style]
    placed: List[Tuple[np.ndarray, float]] = []
    fallbacks = 0

    for i in range(count):
        radius = rng.uniform(*config.nebula_radius_range)
        best = None
        best_clearance = -math.inf
        for _ in range(config.nebula_max_attempts):
            candidate = np.array([rng.normal(0.0, config.nebula_position_sigma) for _ in range(3)])
            clearance = _clearance(candidate, radius, tree, placed)
            if clearance > best_clearance:
                best, best_clearance = candidate, clearance
            if clearance >= config.nebula_min_clearance:
                break
        if best_clearance < config.nebula_min_clearance:
            best = _push_outward(best, radius, clusters, config.nebula_min_clearance)
            fallbacks += 1
        placed.append((best, radius))

        associated: Tuple[str, ...] = ()
        if group_ids:
            distances = np.linalg.norm(group_points - best, axis=1)
            order = np.argsort(distances, kind="stable")
            associated = tuple(
                group_ids[j] for j in order if distances[j] <= radius * ASSOCIATION_RADII
            )

        output.nebulae.append(
            NebulaRegion(
                id=f"nebula-{i}",
                name=nebula_name(i),
                position=Vector3.from_tuple(best),
                radius=radius,
                density=rng.uniform(*config.nebula_density_range),
                brightness=rng.uniform(*config.nebula_brightness_range),
                base_color=rng.choice(palette),
                accent_color=rng.choice(palette),
                noise_scale=rng.uniform(0.5, 2.0),
                noise_detail=rng.randint(2, 6),
                associated_group_ids=associated,
            )
        )

    if fallbacks:
        logger.debug(f"{fallbacks} nebula(e) placed by outward push after rejection sampling failed")
    return output, rng
