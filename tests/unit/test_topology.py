"""Tests for grammar expansion and topology presets."""

import pytest

from orrery.generation import GenerationConfig, RandomGenerator
from orrery.generation.models import BodyKind
from orrery.generation.presets import TOPOLOGY_PRESETS, build_grammar
from orrery.generation.topology import Grammar, Production, Repeat, expand_topology


def expand(config, seed):
    skeleton, _ = expand_topology(build_grammar(config), RandomGenerator.from_seed(seed), config.max_depth)
    return skeleton


class TestRepeat:
    """Tests for repeat distributions."""

    def test_fixed(self):
        assert Repeat.fixed(3).sample(RandomGenerator.from_seed(1)) == 3

    def test_uniform_bounds(self):
        rng = RandomGenerator.from_seed(1)
        assert {Repeat.uniform(2, 4).sample(rng) for _ in range(200)} == {2, 3, 4}

    def test_clamps_to_min_and_max(self):
        rng = RandomGenerator.from_seed(1)
        repeat = Repeat.geometric(0.05, min_count=5, max_count=18)
        assert all(5 <= repeat.sample(rng) <= 18 for _ in range(300))

    def test_categorical_counts_start_at_one(self):
        rng = RandomGenerator.from_seed(1)
        assert {Repeat.categorical((0.0, 1.0, 0.0)).sample(rng) for _ in range(50)} == {2}

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            Repeat("zipf").sample(RandomGenerator.from_seed(1))


class TestClassicGrammar:
    """Tests for the classic star/planet/moon grammar."""

    def test_star_count_in_range(self):
        for seed in range(40):
            stars = expand(GenerationConfig(), seed).of_kind(BodyKind.STAR)
            assert 1 <= len(stars) <= 3

    def test_planets_hang_off_stars(self):
        skeleton = expand(GenerationConfig(planet_geometric_p=0.2), 3)
        for node in skeleton.of_kind(BodyKind.PLANET):
            assert skeleton.index[node.parent_key].kind == BodyKind.STAR
            assert node.depth == 2

    def test_depth_one_yields_only_stars(self):
        for seed in range(20):
            skeleton = expand(GenerationConfig(max_depth=1), seed)
            assert {node.kind for node in skeleton.nodes} == {BodyKind.STAR}

    def test_depth_two_has_no_moons(self):
        for seed in range(20):
            skeleton = expand(GenerationConfig(max_depth=2, planet_geometric_p=0.2), seed)
            assert not skeleton.of_kind(BodyKind.MOON)

    def test_parents_precede_children(self):
        skeleton = expand(GenerationConfig(planet_geometric_p=0.2, moon_geometric_p=0.2), 11)
        seen = set()
        for node in skeleton.nodes:
            assert node.parent_key is None or node.parent_key in seen
            seen.add(node.key)

    def test_children_index_matches_parents(self):
        skeleton = expand(GenerationConfig(planet_geometric_p=0.2, moon_geometric_p=0.2), 11)
        for node in skeleton.nodes:
            for child_key in node.children:
                assert skeleton.index[child_key].parent_key == node.key

    def test_deterministic(self):
        a = expand(GenerationConfig(), "Kepler-452")
        b = expand(GenerationConfig(), "Kepler-452")
        assert [(n.key, n.parent_key) for n in a.nodes] == [(n.key, n.parent_key) for n in b.nodes]


class TestPresetGrammars:
    """Tests for the alternative topology presets."""

    def test_every_preset_builds(self):
        for name in TOPOLOGY_PRESETS:
            grammar = build_grammar(GenerationConfig(topology_preset=name))
            assert grammar.name == name

    def test_compact(self):
        for seed in range(15):
            skeleton = expand(GenerationConfig(topology_preset="compact"), seed)
            assert len(skeleton.of_kind(BodyKind.STAR)) == 1
            planets = skeleton.of_kind(BodyKind.PLANET)
            assert 1 <= len(planets) <= 2
            for planet in planets:
                assert 5 <= len(planet.children) <= 18

    def test_moon_rich(self):
        skeleton = expand(GenerationConfig(topology_preset="moon_rich"), 5)
        planets = skeleton.of_kind(BodyKind.PLANET)
        assert 3 <= len(planets) <= 6
        assert all(4 <= len(p.children) <= 25 for p in planets)

    def test_sparse_outpost(self):
        for seed in range(30):
            skeleton = expand(GenerationConfig(topology_preset="sparse_outpost"), seed)
            assert len(skeleton.of_kind(BodyKind.STAR)) == 1
            assert len(skeleton.of_kind(BodyKind.PLANET)) <= 2
            assert all(len(p.children) <= 2 for p in skeleton.of_kind(BodyKind.PLANET))

    def test_multi_star_heavy_prefers_multiples(self):
        multiples = sum(
            len(expand(GenerationConfig(topology_preset="multi_star_heavy"), seed).of_kind(BodyKind.STAR)) > 1
            for seed in range(60)
        )
        assert multiples > 45

    def test_deep_hierarchy_bounded_by_config_depth(self):
        deepest = 0
        for seed in range(20):
            skeleton = expand(GenerationConfig(topology_preset="deep_hierarchy"), seed)
            deepest = max(deepest, max(node.depth for node in skeleton.nodes))
        assert deepest == 3

        shallow = expand(GenerationConfig(topology_preset="deep_hierarchy", max_depth=2), 0)
        assert max(node.depth for node in shallow.nodes) <= 2


class TestCustomGrammar:
    """Tests for hand-built grammars."""

    def test_structural_symbols_do_not_become_bodies(self):
        grammar = Grammar(
            name="pair",
            rules={
                "system": (Production(1.0, (("star", Repeat.fixed(1)), ("ring", Repeat.fixed(1)))),),
                "ring": (Production(1.0, (("planet", Repeat.fixed(2)),)),),
            },
            kinds={"star": BodyKind.STAR, "planet": BodyKind.PLANET},
        )
        skeleton, _ = expand_topology(grammar, RandomGenerator.from_seed(0), 3)
        assert [n.key for n in skeleton.nodes] == ["star0", "planet0", "planet1"]
        assert all(n.parent_key is None for n in skeleton.nodes)
