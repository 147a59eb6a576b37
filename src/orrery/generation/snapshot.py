"""
Append-only universe snapshot.

Phases extend the snapshot and never rewrite what is already committed.
Bodies are stored in a flat id-indexed table with a parent -> children
index kept alongside. Feature metadata for existing bodies goes into a
set-once attachment table. ``freeze()`` materializes child lists and
attachments into the immutable ``GeneratedUniverse``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from loguru import logger

from orrery.generation.models import (
    Belt,
    Body,
    BodyKind,
    BodyMetadata,
    GeneratedUniverse,
    Group,
    LagrangePoint,
    NebulaRegion,
    ProtoplanetaryDisk,
    Vector3,
)
from orrery.generation.properties import DraftTable
from orrery.generation.stats import compute_stats


class SnapshotError(ValueError):
    """An addition would overwrite or dangle against committed entities."""


@dataclass
class FeatureOutput:
    """Entities a feature pass wants appended to the snapshot."""

    bodies: List[Body] = field(default_factory=list)
    belts: List[Belt] = field(default_factory=list)
    attachments: Dict[str, BodyMetadata] = field(default_factory=dict)
    lagrange_points: List[LagrangePoint] = field(default_factory=list)
    nebulae: List[NebulaRegion] = field(default_factory=list)
    disks: List[ProtoplanetaryDisk] = field(default_factory=list)
    rogue_ids: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (
            self.bodies or self.belts or self.attachments or self.lagrange_points
            or self.nebulae or self.disks
        )


class UniverseBuilder:
    """Mutable, append-only staging area for one generation call."""

    def __init__(self, seed: int):
        self.seed = seed
        self._bodies: Dict[str, Body] = {}
        self._children: Dict[str, List[str]] = {}
        self._attachments: Dict[str, BodyMetadata] = {}
        self._root_ids: List[str] = []
        self._rogue_ids: List[str] = []
        self._belts: Dict[str, Belt] = {}
        self._groups: Dict[str, Group] = {}
        self._root_group_ids: List[str] = []
        self._system_positions: Dict[str, Vector3] = {}
        self._nebulae: Dict[str, NebulaRegion] = {}
        self._lagrange_points: Dict[str, LagrangePoint] = {}
        self._disks: Dict[str, ProtoplanetaryDisk] = {}

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def bodies(self) -> Mapping[str, Body]:
        return MappingProxyType(self._bodies)

    @property
    def belts(self) -> Mapping[str, Belt]:
        return MappingProxyType(self._belts)

    @property
    def groups(self) -> Mapping[str, Group]:
        return MappingProxyType(self._groups)

    @property
    def root_ids(self) -> Tuple[str, ...]:
        return tuple(self._root_ids)

    @property
    def system_positions(self) -> Mapping[str, Vector3]:
        return MappingProxyType(self._system_positions)

    def get(self, body_id: str) -> Body:
        return self._bodies[body_id]

    def children_of(self, body_id: str, kind: Optional[BodyKind] = None) -> List[Body]:
        children = [self._bodies[cid] for cid in self._children.get(body_id, ())]
        if kind is not None:
            children = [child for child in children if child.kind == kind]
        return children

    def planets_by_distance(self, root_id: str) -> List[Body]:
        """Planets orbiting ``root_id``, nearest first; ties keep generation order."""
        planets = self.children_of(root_id, BodyKind.PLANET)
        return sorted(planets, key=lambda body: body.orbit.distance)

    def metadata_of(self, body_id: str) -> Optional[BodyMetadata]:
        return self._attachments.get(body_id, self._bodies[body_id].metadata)

    # ------------------------------------------------------------------
    # Appends
    # ------------------------------------------------------------------
    def add_body(self, body: Body, root: bool = False, rogue: bool = False) -> None:
        if body.id in self._bodies:
            raise SnapshotError(f"Duplicate body id: {body.id}")
        if body.parent_id is not None and body.parent_id not in self._bodies:
            raise SnapshotError(f"Body {body.id} references unknown parent {body.parent_id}")
        self._bodies[body.id] = body
        self._children.setdefault(body.id, [])
        if body.parent_id is not None:
            self._children[body.parent_id].append(body.id)
        if root:
            self._root_ids.append(body.id)
        if rogue:
            self._rogue_ids.append(body.id)

    def commit_system(self, drafts: DraftTable, root_id: str) -> None:
        """Append a resolved system; the root goes first so parents precede children."""
        self.add_body(drafts.get(root_id).to_body(root_id), root=True)
        for draft in drafts:
            if draft.id != root_id:
                self.add_body(draft.to_body(root_id))

    def attach(self, body_id: str, metadata: BodyMetadata) -> None:
        if body_id not in self._bodies:
            raise SnapshotError(f"Cannot attach metadata to unknown body {body_id}")
        if body_id in self._attachments or self._bodies[body_id].metadata is not None:
            raise SnapshotError(f"Body {body_id} already carries metadata")
        self._attachments[body_id] = metadata

    def add_belt(self, belt: Belt) -> None:
        if belt.id in self._belts:
            raise SnapshotError(f"Duplicate belt id: {belt.id}")
        self._belts[belt.id] = belt

    def add_group(self, group: Group) -> None:
        if group.id in self._groups:
            raise SnapshotError(f"Duplicate group id: {group.id}")
        self._groups[group.id] = group
        if group.parent_group_id is None:
            self._root_group_ids.append(group.id)

    def set_system_position(self, root_id: str, position: Vector3) -> None:
        if root_id in self._system_positions:
            raise SnapshotError(f"System {root_id} is already placed")
        self._system_positions[root_id] = position

    def apply(self, output: FeatureOutput) -> None:
        """Commit everything a feature pass produced."""
        rogue_ids = set(output.rogue_ids)
        for body in output.bodies:
            self.add_body(body, rogue=body.id in rogue_ids)
        for body_id, metadata in output.attachments.items():
            self.attach(body_id, metadata)
        for belt in output.belts:
            self.add_belt(belt)
        for point in output.lagrange_points:
            if point.id in self._lagrange_points:
                raise SnapshotError(f"Duplicate Lagrange point id: {point.id}")
            self._lagrange_points[point.id] = point
        for nebula in output.nebulae:
            if nebula.id in self._nebulae:
                raise SnapshotError(f"Duplicate nebula id: {nebula.id}")
            self._nebulae[nebula.id] = nebula
        for disk in output.disks:
            if disk.id in self._disks:
                raise SnapshotError(f"Duplicate disk id: {disk.id}")
            self._disks[disk.id] = disk

    # ------------------------------------------------------------------
    # Freeze
    # ------------------------------------------------------------------
    def freeze(self) -> GeneratedUniverse:
        bodies: Dict[str, Body] = {}
        for body_id, body in self._bodies.items():
            update = {"children": tuple(self._children[body_id])}
            if body_id in self._attachments:
                update["metadata"] = self._attachments[body_id]
            bodies[body_id] = body.model_copy(update=update)

        universe = GeneratedUniverse(
            seed=self.seed,
            bodies=bodies,
            root_ids=tuple(self._root_ids),
            rogue_ids=tuple(self._rogue_ids),
            belts=dict(self._belts),
            groups=dict(self._groups),
            root_group_ids=tuple(self._root_group_ids),
            system_positions=dict(self._system_positions),
            nebulae=dict(self._nebulae),
            lagrange_points=dict(self._lagrange_points),
            protoplanetary_disks=dict(self._disks),
        )
        universe = universe.model_copy(update={"stats": compute_stats(universe)})
        logger.info(
            f"Universe frozen: {len(bodies)} bodies, {len(self._root_ids)} systems, "
            f"{len(self._belts)} belts, {len(self._groups)} groups"
        )
        return universe
