"""Tests for the append-only universe builder."""

import pytest
from pydantic import ValidationError

from orrery.generation.models import Belt, Body, BodyKind, Group, GroupChild, Orbit, RingDescriptor, Vector3
from orrery.generation.properties import BodyDraft, DraftTable
from orrery.generation.snapshot import FeatureOutput, SnapshotError, UniverseBuilder


def make_body(body_id, parent_id=None, kind=BodyKind.PLANET, distance=1.0):
    return Body(
        id=body_id,
        name=body_id,
        kind=kind,
        mass=1.0,
        radius=1.0,
        color="#FFFFFF",
        parent_id=parent_id,
        orbit=Orbit(distance=distance),
    )


def ring():
    return RingDescriptor(
        inner_radius=1.5,
        outer_radius=2.5,
        thickness=0.02,
        opacity=0.5,
        density=0.5,
        albedo=0.5,
        color="#AAAAAA",
    )


@pytest.fixture
def builder():
    b = UniverseBuilder(seed=7)
    b.add_body(make_body("s", kind=BodyKind.STAR), root=True)
    b.add_body(make_body("p2", "s", distance=9.0))
    b.add_body(make_body("p1", "s", distance=3.0))
    return b


class TestAppends:
    """Tests for append-only rules."""

    def test_duplicate_body(self, builder):
        with pytest.raises(SnapshotError):
            builder.add_body(make_body("p1", "s"))

    def test_unknown_parent(self, builder):
        with pytest.raises(SnapshotError):
            builder.add_body(make_body("m", "nowhere"))

    def test_attach_is_set_once(self, builder):
        builder.attach("p1", ring())
        with pytest.raises(SnapshotError):
            builder.attach("p1", ring())

    def test_attach_unknown(self, builder):
        with pytest.raises(SnapshotError):
            builder.attach("ghost", ring())

    def test_duplicate_belt_and_group(self, builder):
        belt = Belt(id="b", name="b", parent_id="s", inner_radius=4.0, outer_radius=5.0, thickness=0.1, color="#888888", particle_count=300)
        builder.add_belt(belt)
        with pytest.raises(SnapshotError):
            builder.add_belt(belt)
        group = Group(id="g", name="g", children=(GroupChild(kind="system", id="s"),), color="#FFFFFF")
        builder.add_group(group)
        with pytest.raises(SnapshotError):
            builder.add_group(group)

    def test_position_is_set_once(self, builder):
        builder.set_system_position("s", Vector3())
        with pytest.raises(SnapshotError):
            builder.set_system_position("s", Vector3(x=1.0))

    def test_commit_system_puts_root_first(self):
        drafts = DraftTable()
        drafts.add(BodyDraft(id="p", name="p", kind=BodyKind.PLANET, mass=1.0, radius=1.0, color="#FFFFFF", parent_id="s"))
        drafts.add(BodyDraft(id="s", name="s", kind=BodyKind.STAR, mass=9.0, radius=1.0, color="#FFFFFF"))
        b = UniverseBuilder(seed=1)
        b.commit_system(drafts, "s")
        assert b.root_ids == ("s",)
        assert list(b.bodies) == ["s", "p"]
        assert b.get("p").system_id == "s"


class TestReads:
    """Tests for read views."""

    def test_children_and_planet_order(self, builder):
        assert [c.id for c in builder.children_of("s")] == ["p2", "p1"]
        assert [p.id for p in builder.planets_by_distance("s")] == ["p1", "p2"]
        assert builder.children_of("s", BodyKind.MOON) == []

    def test_views_are_read_only(self, builder):
        with pytest.raises(TypeError):
            builder.bodies["x"] = make_body("x")


class TestFreeze:
    """Tests for materializing the universe."""

    def test_children_and_attachments(self, builder):
        output = FeatureOutput(attachments={"p2": ring()}, bodies=[make_body("m", "p2", kind=BodyKind.MOON)])
        builder.apply(output)
        universe = builder.freeze()
        assert universe.seed == 7
        assert universe.bodies["s"].children == ("p2", "p1")
        assert universe.bodies["p2"].children == ("m",)
        assert universe.bodies["p2"].metadata == ring()
        assert universe.stats.ringed_planets == 1
        assert universe.stats.total_bodies == 4

    def test_rogues_are_tracked(self):
        b = UniverseBuilder(seed=1)
        b.apply(FeatureOutput(bodies=[make_body("rogue-0", kind=BodyKind.ROGUE_PLANET)], rogue_ids=["rogue-0"]))
        universe = b.freeze()
        assert universe.rogue_ids == ("rogue-0",)
        assert universe.root_ids == ()

    def test_universe_fields_are_not_reassignable(self, builder):
        universe = builder.freeze()
        with pytest.raises(ValidationError):
            universe.bodies = {}
        with pytest.raises(ValidationError):
            universe.bodies["s"].mass = 0.0
        renamed = universe.model_copy(update={"seed": 8})
        assert renamed.seed == 8
        assert universe.seed == 7
