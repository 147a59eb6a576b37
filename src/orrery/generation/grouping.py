"""
Spatial grouping of generated systems.

Systems are partitioned into ``min_groups``..``max_groups`` groups (never
more groups than systems, never an empty group). Each group may then be
nested under another with ``nesting_probability``; nestings that would
close a cycle or exceed ``max_group_depth`` are rejected using a networkx
containment graph. Top-level groups are placed from a Gaussian cloud around
the origin, nested groups from a tighter cloud around their parent, and
systems around their group.
"""

from __future__ import annotations

import string
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import networkx as nx
from loguru import logger

from orrery.generation.config import GenerationConfig
from orrery.generation.models import Group, GroupChild, Vector3
from orrery.generation.sampling import RandomGenerator

GROUP_COLORS = (
    "#FF6B6B", "#4ECDC4", "#45B7D1", "#FFA07A",
    "#98D8C8", "#F7DC6F", "#BB8FCE", "#85C1E2",
)


@dataclass
class GroupLayout:
    groups: List[Group] = field(default_factory=list)
    system_positions: Dict[str, Vector3] = field(default_factory=dict)


def group_name(index: int) -> str:
    letter = string.ascii_uppercase[index % 26]
    cycle = index // 26
    return f"Cluster {letter}" if cycle == 0 else f"Cluster {letter}{cycle + 1}"


def _depth(graph: nx.DiGraph, node: int) -> int:
    """1 for a top-level group."""
    return len(nx.ancestors(graph, node)) + 1


def _height(graph: nx.DiGraph, node: int) -> int:
    """Levels in the subtree rooted at ``node``, itself included."""
    subtree = graph.subgraph(nx.descendants(graph, node) | {node})
    return nx.dag_longest_path_length(subtree) + 1


def _gaussian(rng: RandomGenerator, center: Tuple[float, float, float], sigma: float) -> Vector3:
    return Vector3(
        x=center[0] + rng.normal(0.0, sigma),
        y=center[1] + rng.normal(0.0, sigma),
        z=center[2] + rng.normal(0.0, sigma),
    )


def nest_groups(count: int, rng: RandomGenerator, config: GenerationConfig) -> nx.DiGraph:
    """Containment graph over group indices; edges point parent -> child."""
    graph = nx.DiGraph()
    graph.add_nodes_from(range(count))
    for i in range(count):
        if not rng.chance(config.nesting_probability):
            continue
        if graph.in_degree(i) > 0:
            continue
        height = _height(graph, i)
        candidates = [
            j
            for j in range(count)
            if j != i
            and not nx.has_path(graph, i, j)
            and _depth(graph, j) + height <= config.max_group_depth
        ]
        if candidates:
            graph.add_edge(rng.choice(candidates), i)
    return graph


def generate_groups(
    system_ids: List[str],
    rng: RandomGenerator,
    config: GenerationConfig,
) -> Tuple[GroupLayout, RandomGenerator]:
    layout = GroupLayout()
    if not system_ids:
        return layout, rng

    n = len(system_ids)
    count = rng.randint(min(config.min_groups, n), min(config.max_groups, n))

    # Seed every group with one system so none is empty
    shuffled = rng.shuffle(system_ids)
    assignment: Dict[str, int] = {}
    for position, system_id in enumerate(shuffled):
        assignment[system_id] = position if position < count else rng.randint(0, count - 1)
    members: List[List[str]] = [[] for _ in range(count)]
    for system_id in system_ids:
        members[assignment[system_id]].append(system_id)

    graph = nest_groups(count, rng, config)

    positions: Dict[int, Vector3] = {}
    for node in nx.topological_sort(graph):
        parents = list(graph.predecessors(node))
        if parents:
            positions[node] = _gaussian(
                rng,
                positions[parents[0]].as_tuple(),
                config.group_position_sigma * config.nested_position_scale,
            )
        else:
            positions[node] = _gaussian(rng, (0.0, 0.0, 0.0), config.group_position_sigma)

    for i in range(count):
        for system_id in members[i]:
            if config.system_spread > 0:
                layout.system_positions[system_id] = _gaussian(rng, positions[i].as_tuple(), config.system_spread)
            else:
                layout.system_positions[system_id] = positions[i]

    for i in range(count):
        parents = list(graph.predecessors(i))
        parent: Optional[int] = parents[0] if parents else None
        children = [GroupChild(kind="system", id=sid) for sid in members[i]]
        children.extend(GroupChild(kind="group", id=f"group-{j}") for j in sorted(graph.successors(i)))
        layout.groups.append(
            Group(
                id=f"group-{i}",
                name=group_name(i),
                children=tuple(children),
                parent_group_id=f"group-{parent}" if parent is not None else None,
                position=positions[i],
                color=GROUP_COLORS[i % len(GROUP_COLORS)],
            )
        )

    nested = graph.number_of_edges()
    logger.info(f"Grouped {n} systems into {count} groups ({nested} nested)")
    return layout, rng
