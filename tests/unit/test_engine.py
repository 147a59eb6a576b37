"""End-to-end tests for the generation entry points."""

import pytest

from orrery.generation import (
    BodyKind,
    ConfigurationError,
    GenerationConfig,
    generate_many_systems,
    generate_one_system,
    generate_universe,
    hash_string,
    validate_universe,
)
from orrery.generation.models import CENTER_CANDIDATE_KINDS, RingDescriptor

CORE_KINDS = {BodyKind.STAR, BodyKind.PLANET, BodyKind.MOON}


def without_children(body):
    return body.model_copy(update={"children": ()})


def top_level_members(universe, root_id):
    root = universe.bodies[root_id]
    return [universe.bodies[cid] for cid in root.children if universe.bodies[cid].kind in CENTER_CANDIDATE_KINDS]


class TestDeterminism:
    """Identical (seed, config) pairs reproduce identical universes."""

    def test_one_system_repeatable(self, all_features_config):
        a = generate_one_system(all_features_config, 2024)
        b = generate_one_system(all_features_config, 2024)
        assert a == b
        assert a.model_dump_json() == b.model_dump_json()

    def test_many_systems_repeatable(self, all_features_config):
        a = generate_many_systems(6, all_features_config, "galaxy")
        b = generate_many_systems(6, all_features_config, "galaxy")
        assert a == b

    def test_different_seeds_differ(self, default_config):
        assert generate_one_system(default_config, 1) != generate_one_system(default_config, 2)

    def test_round_trips_through_json(self, all_features_config):
        from orrery.generation import GeneratedUniverse

        universe = generate_many_systems(3, all_features_config, 8)
        restored = GeneratedUniverse.model_validate_json(universe.model_dump_json(by_alias=True))
        assert restored == universe


class TestReferenceSeeds:
    """Known seeds with checkable outcomes."""

    def test_kepler_452(self, default_config):
        """One root system centered on its most massive member."""
        universe = generate_one_system(default_config, "Kepler-452")
        assert len(universe.root_ids) == 1
        root = universe.bodies[universe.root_ids[0]]
        assert root.parent_id is None
        assert all(member.mass <= root.mass for member in top_level_members(universe, root.id))

        again = generate_one_system(default_config, "Kepler-452")
        stars = [b for b in universe.bodies.values() if b.kind == BodyKind.STAR]
        stars_again = [b for b in again.bodies.values() if b.kind == BodyKind.STAR]
        assert len(stars) == len(stars_again)
        assert [(s.mass, s.radius, s.color) for s in stars] == [(s.mass, s.radius, s.color) for s in stars_again]

    @pytest.mark.parametrize("systems", [None, 12])
    def test_belts_seed_42(self, systems):
        """One belt per system with two or more planets, inside a gap."""
        config = GenerationConfig(enableAsteroidBelts=True, maxBeltsPerSystem=1)
        universe = generate_universe(config, 42, systems)
        for root_id in universe.root_ids:
            planets = sorted(
                (b for b in universe.bodies.values() if b.parent_id == root_id and b.kind == BodyKind.PLANET),
                key=lambda b: b.orbit.distance,
            )
            belts = [belt for belt in universe.belts.values() if belt.parent_id == root_id]
            if len(planets) < 2:
                assert belts == []
                continue
            assert len(belts) == 1
            belt = belts[0]
            gaps = list(zip(planets, planets[1:]))
            assert any(
                near.orbit.distance < belt.inner_radius < belt.outer_radius < far.orbit.distance
                for near, far in gaps
            )

    def test_numeric_and_string_seed_equivalence(self, default_config):
        """Seeds normalizing to the same value give the same universe."""
        numeric = generate_one_system(default_config, 12345)
        assert generate_one_system(default_config, 12345 + 2**32) == numeric
        assert generate_one_system(default_config, 12345.0) == numeric
        assert generate_one_system(default_config, "Kepler-452") == generate_one_system(
            default_config, hash_string("Kepler-452")
        )


class TestBoundary:
    """Disabled features leave no trace."""

    @pytest.mark.parametrize("seed", [0, 42, "Kepler-452"])
    def test_only_core_bodies(self, default_config, seed):
        universe = generate_many_systems(5, default_config, seed)
        assert {body.kind for body in universe.bodies.values()} <= CORE_KINDS
        assert not universe.belts
        assert not universe.nebulae
        assert not universe.lagrange_points
        assert not universe.protoplanetary_disks
        assert not universe.rogue_ids
        assert all(body.metadata is None for body in universe.bodies.values())


class TestStreamIndependence:
    """Toggling one feature never shifts another feature's draws."""

    def test_rings_do_not_move_belts(self):
        base = GenerationConfig(enable_asteroid_belts=True, enable_comets=True, comet_min_count=1)
        with_rings = base.with_overrides(enable_planetary_rings=True, ring_base_probability=0.5)
        a = generate_many_systems(8, base, 77)
        b = generate_many_systems(8, with_rings, 77)

        assert a.belts == b.belts
        for body_id, body in a.bodies.items():
            other = b.bodies[body_id]
            if isinstance(other.metadata, RingDescriptor):
                other = other.model_copy(update={"metadata": None})
            assert without_children(body) == without_children(other)
        assert b.stats.ringed_planets > 0

    def test_belts_do_not_move_rings(self):
        base = GenerationConfig(enable_planetary_rings=True, ring_base_probability=0.5)
        with_belts = base.with_overrides(enable_asteroid_belts=True, enable_kuiper_belt=True)
        a = generate_many_systems(8, base, 5)
        b = generate_many_systems(8, with_belts, 5)
        rings_a = {bid: body.metadata for bid, body in a.bodies.items() if body.metadata is not None}
        rings_b = {bid: body.metadata for bid, body in b.bodies.items() if isinstance(body.metadata, RingDescriptor)}
        assert rings_a == rings_b

    def test_reparameterizing_a_feature(self):
        base = GenerationConfig(enable_asteroid_belts=True, enable_comets=True, comet_min_count=1)
        tweaked = base.with_overrides(belt_min_count=10, belt_max_count=20)
        a = generate_many_systems(6, base, 9)
        b = generate_many_systems(6, tweaked, 9)
        comets_a = [without_children(x) for x in a.bodies.values() if x.kind == BodyKind.COMET]
        comets_b = [without_children(x) for x in b.bodies.values() if x.kind == BodyKind.COMET]
        assert comets_a == comets_b
        assert a.groups == b.groups

    def test_universe_features_independent_of_system_features(self):
        base = GenerationConfig(enable_rogue_planets=True, rogue_min_count=2)
        busier = base.with_overrides(enable_comets=True, enable_lagrange_points=True)
        a = generate_many_systems(4, base, 31)
        b = generate_many_systems(4, busier, 31)
        assert [a.bodies[rid] for rid in a.rogue_ids] == [b.bodies[rid] for rid in b.rogue_ids]


class TestStructure:
    """Structural invariants over fully featured universes."""

    @pytest.mark.parametrize("seed", [1, 2, 3, "nebula", "Kepler-452"])
    def test_validates_clean(self, all_features_config, seed):
        universe = generate_many_systems(6, all_features_config, seed)
        report = validate_universe(universe)
        assert report.ok, report.violations

    @pytest.mark.parametrize(
        "overrides",
        [
            {"enable_asteroid_belts": True, "belt_min_count": 0, "belt_max_count": 0},
            {"enable_kuiper_belt": True, "kuiper_min_count": 0, "kuiper_max_count": 0},
        ],
    )
    def test_empty_belt_populations_validate(self, overrides):
        universe = generate_many_systems(6, GenerationConfig(**overrides), 42)
        assert validate_universe(universe).ok
        assert not universe.belts

    def test_extreme_config_values_generate(self):
        """Test the largest accepted mass and orbit settings stay finite."""
        config = GenerationConfig(
            planet_geometric_p=1e-17,
            mass_mu=50.0,
            mass_sigma=10.0,
            radius_power=3.0,
            orbit_base=1e6,
            orbit_growth=10.0,
        )
        universe = generate_one_system(config, "seed\udcff")
        assert universe.stats.planets >= 1

    @pytest.mark.parametrize("preset", ["compact", "multi_star_heavy", "moon_rich", "sparse_outpost", "deep_hierarchy"])
    def test_topology_presets_validate(self, preset):
        config = GenerationConfig(topology_preset=preset, enable_asteroid_belts=True, enable_lagrange_points=True)
        universe = generate_many_systems(5, config, preset)
        assert validate_universe(universe).ok

    def test_root_ids_unique_and_prefixed(self, default_config):
        universe = generate_many_systems(4, default_config, 10)
        assert len(set(universe.root_ids)) == 4
        for i, root_id in enumerate(universe.root_ids):
            assert root_id.startswith(f"sys{i}-")

    def test_every_system_is_grouped_once(self, default_config):
        universe = generate_many_systems(9, default_config, 10)
        grouped = [child.id for group in universe.groups.values() for child in group.children if child.kind == "system"]
        assert sorted(grouped) == sorted(universe.root_ids)

    def test_single_system_is_ungrouped(self, default_config):
        universe = generate_one_system(default_config, 10)
        assert not universe.groups
        assert universe.system_positions[universe.root_ids[0]].as_tuple() == (0.0, 0.0, 0.0)

    def test_stats_match_tables(self, all_features_config):
        universe = generate_many_systems(4, all_features_config, 12)
        stats = universe.stats
        assert stats.systems == 4
        assert stats.total_bodies == len(universe.bodies)
        assert stats.groups == len(universe.groups)
        assert stats.belts + stats.kuiper_belts == len(universe.belts)
        assert stats.rogue_planets == len(universe.rogue_ids)

    def test_black_holes_can_anchor_systems(self):
        config = GenerationConfig(enable_black_holes=True, black_hole_probability=1.0)
        universe = generate_many_systems(4, config, 3)
        assert universe.stats.black_holes == 4
        assert validate_universe(universe).ok


class TestErrors:
    """Configuration errors are raised before generation."""

    @pytest.mark.parametrize("count", [0, -3, 2.5, True])
    def test_bad_count(self, default_config, count):
        with pytest.raises(ConfigurationError) as exc_info:
            generate_many_systems(count, default_config, 1)
        assert exc_info.value.field == "count"

    def test_bad_config_mapping(self):
        with pytest.raises(ConfigurationError) as exc_info:
            generate_one_system({"starProbabilities": [0.2, 0.2, 0.2]}, 1)
        assert exc_info.value.field == "star_probabilities"

    def test_bad_seed(self, default_config):
        with pytest.raises(ConfigurationError):
            generate_one_system(default_config, float("nan"))
