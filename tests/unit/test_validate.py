"""Tests for the structural validator on hand-built universes."""

import pytest

from orrery.generation import (
    Belt,
    Body,
    BodyKind,
    GeneratedUniverse,
    Group,
    GroupChild,
    LagrangePoint,
    Orbit,
    UniverseValidationError,
    validate_universe,
)


def body(body_id, kind, mass, parent_id=None, children=(), distance=0.0, belt_id=None, system_id="s"):
    return Body(
        id=body_id,
        name=body_id,
        kind=kind,
        mass=mass,
        radius=1.0,
        color="#FFFFFF",
        parent_id=parent_id,
        system_id=system_id,
        children=tuple(children),
        orbit=Orbit(distance=distance, speed=1.0),
        belt_id=belt_id,
    )


@pytest.fixture
def universe():
    bodies = {
        "s": body("s", BodyKind.STAR, 100.0, children=("p", "a")),
        "p": body("p", BodyKind.PLANET, 5.0, parent_id="s", children=("m",), distance=4.0),
        "m": body("m", BodyKind.MOON, 0.1, parent_id="p", distance=0.5),
        "a": body("a", BodyKind.ASTEROID, 0.01, parent_id="s", distance=7.0, belt_id="b"),
    }
    belt = Belt(
        id="b",
        name="Belt",
        parent_id="s",
        inner_radius=6.0,
        outer_radius=8.0,
        thickness=0.5,
        color="#8C8276",
        member_ids=("a",),
    )
    group = Group(id="g0", name="Cluster A", children=(GroupChild(kind="system", id="s"),), color="#FF6B6B")
    return GeneratedUniverse(
        seed=1,
        bodies=bodies,
        root_ids=("s",),
        belts={"b": belt},
        groups={"g0": group},
        root_group_ids=("g0",),
    )


def replace_body(universe, body_id, **update):
    bodies = dict(universe.bodies)
    bodies[body_id] = bodies[body_id].model_copy(update=update)
    return universe.model_copy(update={"bodies": bodies})


class TestValidUniverse:
    """Tests for a well-formed universe."""

    def test_clean(self, universe):
        report = validate_universe(universe)
        assert report.ok
        report.raise_for_violations()


class TestBodyChecks:
    """Tests for parent, child and root checks."""

    def test_missing_parent(self, universe):
        broken = replace_body(universe, "m", parent_id="ghost")
        report = validate_universe(broken)
        assert report.by_code("missing_parent")[0].entity_id == "m"
        assert "child_mismatch" in report.codes()

    def test_missing_child(self, universe):
        broken = replace_body(universe, "p", children=("m", "ghost"))
        assert "missing_child" in validate_universe(broken).codes()

    def test_duplicate_child(self, universe):
        broken = replace_body(universe, "p", children=("m", "m"))
        assert "duplicate_child" in validate_universe(broken).codes()

    def test_key_mismatch(self, universe):
        broken = replace_body(universe, "m", id="moon")
        assert "key_mismatch" in validate_universe(broken).codes()

    def test_orphan(self, universe):
        broken = replace_body(universe, "m", parent_id=None)
        broken = replace_body(broken, "p", children=())
        report = validate_universe(broken)
        assert report.by_code("orphan_body")[0].entity_id == "m"

    def test_root_with_parent(self, universe):
        broken = universe.model_copy(update={"root_ids": ("s", "p")})
        codes = validate_universe(broken).codes()
        assert "root_has_parent" in codes

    def test_missing_root_and_rogue(self, universe):
        broken = universe.model_copy(update={"root_ids": ("s", "nowhere"), "rogue_ids": ("drifter",)})
        codes = validate_universe(broken).codes()
        assert "missing_root" in codes
        assert "missing_rogue" in codes

    def test_unknown_system(self, universe):
        broken = replace_body(universe, "m", system_id="elsewhere")
        assert "unknown_system" in validate_universe(broken).codes()

    def test_cycle(self, universe):
        broken = replace_body(universe, "p", parent_id="m", children=("m",))
        broken = replace_body(broken, "m", children=("p",))
        broken = replace_body(broken, "s", children=("a",))
        report = validate_universe(broken)
        assert report.by_code("body_cycle")

    def test_center_not_heaviest(self, universe):
        broken = replace_body(universe, "p", mass=500.0)
        report = validate_universe(broken)
        assert report.by_code("center_not_heaviest")[0].entity_id == "s"

    def test_heavy_asteroid_does_not_count(self, universe):
        heavy = replace_body(universe, "a", mass=500.0)
        assert validate_universe(heavy).ok


class TestBeltChecks:
    """Tests for belt integrity."""

    def test_member_outside_band(self, universe):
        broken = replace_body(universe, "a", orbit=Orbit(distance=9.5, speed=1.0))
        assert validate_universe(broken).by_code("belt_containment")[0].entity_id == "a"

    def test_both_representations(self, universe):
        belt = universe.belts["b"].model_copy(update={"particle_count": 400})
        broken = universe.model_copy(update={"belts": {"b": belt}})
        assert "belt_representation" in validate_universe(broken).codes()

    def test_reversed_radii(self, universe):
        belt = universe.belts["b"].model_copy(update={"inner_radius": 9.0})
        broken = universe.model_copy(update={"belts": {"b": belt}})
        assert "belt_radii" in validate_universe(broken).codes()

    def test_unlisted_member(self, universe):
        belt = universe.belts["b"].model_copy(update={"member_ids": (), "particle_count": 10})
        broken = universe.model_copy(update={"belts": {"b": belt}})
        assert validate_universe(broken).by_code("belt_membership")[0].entity_id == "a"

    def test_missing_belt(self, universe):
        broken = universe.model_copy(update={"belts": {}})
        assert "missing_belt" in validate_universe(broken).codes()


class TestGroupChecks:
    """Tests for group integrity."""

    def test_system_in_two_groups(self, universe):
        extra = Group(id="g1", name="Cluster B", children=(GroupChild(kind="system", id="s"),), color="#4ECDC4")
        broken = universe.model_copy(
            update={"groups": {**universe.groups, "g1": extra}, "root_group_ids": ("g0", "g1")}
        )
        assert "system_multiply_grouped" in validate_universe(broken).codes()

    def test_group_cycle(self, universe):
        g0 = Group(
            id="g0",
            name="Cluster A",
            children=(GroupChild(kind="system", id="s"), GroupChild(kind="group", id="g1")),
            parent_group_id="g1",
            color="#FF6B6B",
        )
        g1 = Group(
            id="g1",
            name="Cluster B",
            children=(GroupChild(kind="group", id="g0"),),
            parent_group_id="g0",
            color="#4ECDC4",
        )
        broken = universe.model_copy(update={"groups": {"g0": g0, "g1": g1}, "root_group_ids": ()})
        assert "group_cycle" in validate_universe(broken).codes()

    def test_missing_child_group(self, universe):
        group = universe.groups["g0"].model_copy(
            update={"children": universe.groups["g0"].children + (GroupChild(kind="group", id="g9"),)}
        )
        broken = universe.model_copy(update={"groups": {"g0": group}})
        assert "missing_child_group" in validate_universe(broken).codes()

    def test_ungrouped_system_member(self, universe):
        group = universe.groups["g0"].model_copy(update={"children": (GroupChild(kind="system", id="p"),)})
        broken = universe.model_copy(update={"groups": {"g0": group}})
        assert "missing_group_system" in validate_universe(broken).codes()


class TestFeatureRefs:
    """Tests for feature cross-references."""

    def test_missing_lagrange_body(self, universe):
        point = LagrangePoint(
            id="p-L4",
            primary_id="s",
            secondary_id="gone",
            point_index=4,
            stable=True,
            pair_type="star_planet",
            distance=4.0,
            phase=60.0,
            speed=1.0,
        )
        broken = universe.model_copy(update={"lagrange_points": {"p-L4": point}})
        assert "missing_lagrange_body" in validate_universe(broken).codes()


class TestReport:
    """Tests for the report object."""

    def test_raise_for_violations(self, universe):
        broken = replace_body(universe, "p", mass=500.0)
        with pytest.raises(UniverseValidationError) as exc_info:
            validate_universe(broken).raise_for_violations()
        assert exc_info.value.violations[0].code == "center_not_heaviest"
        assert "center_not_heaviest" in str(exc_info.value)
