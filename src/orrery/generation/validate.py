"""
Structural checks over a generated universe.

The validator never repairs anything. It walks every table and returns a
``ValidationReport`` listing all violations it finds:

- referential integrity of parents, children, roots, rogues, belts,
  groups, Lagrange points, nebulae and disks
- acyclicity of the body-parent graph and the group-containment graph
- system centers outweigh every star, black hole or planet orbiting them
- belt members lie inside their belt's radial band and belts use exactly
  one population representation
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

import networkx as nx
from loguru import logger

from orrery.generation.errors import UniverseValidationError
from orrery.generation.models import (
    CENTER_CANDIDATE_KINDS,
    GeneratedUniverse,
    LagrangeDescriptor,
)

# Relative tolerance for floating point comparisons on belt radii
RADIUS_TOLERANCE = 1e-9


@dataclass(frozen=True)
class Violation:
    code: str
    entity_id: str
    message: str


@dataclass
class ValidationReport:
    violations: List[Violation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations

    def add(self, code: str, entity_id: str, message: str) -> None:
        self.violations.append(Violation(code, entity_id, message))

    def codes(self) -> Counter:
        return Counter(v.code for v in self.violations)

    def by_code(self, code: str) -> List[Violation]:
        return [v for v in self.violations if v.code == code]

    def raise_for_violations(self) -> None:
        if self.violations:
            raise UniverseValidationError(self.violations)


# ===================== Bodies =====================


def check_references(universe: GeneratedUniverse, report: ValidationReport) -> None:
    bodies = universe.bodies
    expected: Dict[str, List[str]] = {body_id: [] for body_id in bodies}
    for body_id, body in bodies.items():
        if body.id != body_id:
            report.add("key_mismatch", body_id, f"stored under {body_id} but declares id {body.id}")
        if body.parent_id is None:
            continue
        if body.parent_id not in bodies:
            report.add("missing_parent", body_id, f"parent {body.parent_id} does not exist")
        else:
            expected[body.parent_id].append(body_id)

    for body_id, body in bodies.items():
        for child_id in body.children:
            if child_id not in bodies:
                report.add("missing_child", body_id, f"child {child_id} does not exist")
        duplicates = [cid for cid, n in Counter(body.children).items() if n > 1]
        if duplicates:
            report.add("duplicate_child", body_id, f"children listed more than once: {duplicates}")
        if set(body.children) != set(expected[body_id]):
            report.add(
                "child_mismatch",
                body_id,
                f"children {sorted(body.children)} differ from bodies naming it parent {sorted(expected[body_id])}",
            )


def check_roots(universe: GeneratedUniverse, report: ValidationReport) -> None:
    roots = set(universe.root_ids)
    rogues = set(universe.rogue_ids)
    for root_id in universe.root_ids:
        body = universe.bodies.get(root_id)
        if body is None:
            report.add("missing_root", root_id, "root id does not resolve to a body")
        elif body.parent_id is not None:
            report.add("root_has_parent", root_id, f"root orbits {body.parent_id}")
    for rogue_id in universe.rogue_ids:
        body = universe.bodies.get(rogue_id)
        if body is None:
            report.add("missing_rogue", rogue_id, "rogue id does not resolve to a body")
        elif body.parent_id is not None:
            report.add("rogue_has_parent", rogue_id, f"rogue orbits {body.parent_id}")
    for body_id, body in universe.bodies.items():
        if body.parent_id is None and body_id not in roots and body_id not in rogues:
            report.add("orphan_body", body_id, "body has no parent and is neither a root nor a rogue")
        if body.system_id is not None and body.system_id not in roots:
            report.add("unknown_system", body_id, f"system {body.system_id} is not a root")


def find_cycles(edges: Iterable, nodes: Iterable) -> List[List[str]]:
    graph = nx.DiGraph()
    graph.add_nodes_from(nodes)
    graph.add_edges_from(edges)
    if nx.is_directed_acyclic_graph(graph):
        return []
    return [list(cycle) for cycle in nx.simple_cycles(graph)]


def check_body_cycles(universe: GeneratedUniverse, report: ValidationReport) -> None:
    edges = [
        (body.parent_id, body_id)
        for body_id, body in universe.bodies.items()
        if body.parent_id is not None and body.parent_id in universe.bodies
    ]
    for cycle in find_cycles(edges, universe.bodies):
        report.add("body_cycle", cycle[0], f"parent chain loops: {' -> '.join(cycle)}")


def check_centers(universe: GeneratedUniverse, report: ValidationReport) -> None:
    for root_id in universe.root_ids:
        root = universe.bodies.get(root_id)
        if root is None:
            continue
        for child_id in root.children:
            child = universe.bodies.get(child_id)
            if child is None or child.kind not in CENTER_CANDIDATE_KINDS:
                continue
            if child.mass > root.mass:
                report.add(
                    "center_not_heaviest",
                    root_id,
                    f"{child_id} ({child.mass:.4f}) outweighs center ({root.mass:.4f})",
                )


# ===================== Belts =====================


def check_belts(universe: GeneratedUniverse, report: ValidationReport) -> None:
    for belt_id, belt in universe.belts.items():
        if belt.parent_id not in universe.bodies:
            report.add("missing_belt_host", belt_id, f"host {belt.parent_id} does not exist")
        if belt.inner_radius > belt.outer_radius:
            report.add("belt_radii", belt_id, "inner radius exceeds outer radius")
        if belt.member_ids and belt.particle_count is not None:
            report.add("belt_representation", belt_id, "belt has both members and a particle count")
        if not belt.member_ids and belt.particle_count is None:
            report.add("belt_representation", belt_id, "belt has neither members nor a particle count")

        slack = RADIUS_TOLERANCE * max(1.0, belt.outer_radius)
        for member_id in belt.member_ids:
            member = universe.bodies.get(member_id)
            if member is None:
                report.add("missing_belt_member", belt_id, f"member {member_id} does not exist")
                continue
            if member.belt_id != belt_id:
                report.add("belt_membership", member_id, f"listed in {belt_id} but claims {member.belt_id}")
            distance = member.orbit.distance
            if distance < belt.inner_radius - slack or distance > belt.outer_radius + slack:
                report.add(
                    "belt_containment",
                    member_id,
                    f"distance {distance:.4f} outside [{belt.inner_radius:.4f}, {belt.outer_radius:.4f}]",
                )

    for body_id, body in universe.bodies.items():
        if body.belt_id is None:
            continue
        belt = universe.belts.get(body.belt_id)
        if belt is None:
            report.add("missing_belt", body_id, f"belt {body.belt_id} does not exist")
        elif body_id not in belt.member_ids:
            report.add("belt_membership", body_id, f"claims {body.belt_id} but is not listed as a member")


# ===================== Groups =====================


def check_groups(universe: GeneratedUniverse, report: ValidationReport) -> None:
    groups = universe.groups
    roots = set(universe.root_ids)
    system_owner: Dict[str, str] = {}
    edges = []

    for group_id, group in groups.items():
        if group.parent_group_id is not None and group.parent_group_id not in groups:
            report.add("missing_parent_group", group_id, f"parent group {group.parent_group_id} does not exist")
        for child in group.children:
            if child.kind == "system":
                if child.id not in roots:
                    report.add("missing_group_system", group_id, f"system {child.id} is not a root body")
                if child.id in system_owner:
                    report.add("system_multiply_grouped", child.id, f"in {system_owner[child.id]} and {group_id}")
                system_owner[child.id] = group_id
            else:
                child_group = groups.get(child.id)
                if child_group is None:
                    report.add("missing_child_group", group_id, f"child group {child.id} does not exist")
                    continue
                if child_group.parent_group_id != group_id:
                    report.add(
                        "group_parent_mismatch",
                        child.id,
                        f"contained by {group_id} but names {child_group.parent_group_id} as parent",
                    )
                edges.append((group_id, child.id))

    for group_id in universe.root_group_ids:
        group = groups.get(group_id)
        if group is None:
            report.add("missing_root_group", group_id, "root group id does not resolve")
        elif group.parent_group_id is not None:
            report.add("root_group_has_parent", group_id, f"root group nested in {group.parent_group_id}")

    for cycle in find_cycles(edges, groups):
        report.add("group_cycle", cycle[0], f"containment loops: {' -> '.join(cycle)}")


# ===================== Feature references =====================


def check_feature_refs(universe: GeneratedUniverse, report: ValidationReport) -> None:
    bodies = universe.bodies
    for point_id, point in universe.lagrange_points.items():
        for ref in (point.primary_id, point.secondary_id):
            if ref not in bodies:
                report.add("missing_lagrange_body", point_id, f"{ref} does not exist")
    for body_id, body in bodies.items():
        if isinstance(body.metadata, LagrangeDescriptor):
            for ref in (body.metadata.primary_id, body.metadata.secondary_id):
                if ref not in bodies:
                    report.add("missing_lagrange_body", body_id, f"{ref} does not exist")
    for nebula_id, nebula in universe.nebulae.items():
        for group_id in nebula.associated_group_ids:
            if group_id not in universe.groups:
                report.add("missing_nebula_group", nebula_id, f"group {group_id} does not exist")
    for disk_id, disk in universe.protoplanetary_disks.items():
        if disk.system_id not in bodies:
            report.add("missing_disk_system", disk_id, f"system {disk.system_id} does not exist")


CHECKS = (
    check_references,
    check_roots,
    check_body_cycles,
    check_centers,
    check_belts,
    check_groups,
    check_feature_refs,
)


def validate_universe(universe: GeneratedUniverse) -> ValidationReport:
    report = ValidationReport()
    for check in CHECKS:
        check(universe, report)
    if report.ok:
        logger.debug(f"Universe {universe.seed} passed validation")
    else:
        logger.warning(f"Universe {universe.seed} has {len(report.violations)} violation(s): {dict(report.codes())}")
    return report
