"""
Generation entry points.

Pipeline per system: topology -> properties -> black holes -> hierarchy ->
commit -> feature passes. Every phase draws from ``rng.fork(label)`` of the
system generator, so each phase (and each feature) owns an independent
stream whose values do not depend on which other features are enabled.

For many systems, each system seed is drawn from the master generator;
grouping, rogues and nebulae then fork the master with their own labels.
"""

from __future__ import annotations

from typing import Any, Optional

from loguru import logger

from orrery.generation.config import GenerationConfig, coerce_config
from orrery.generation.errors import ConfigurationError
from orrery.generation.features import SYSTEM_FEATURES, generate_nebulae, generate_rogues
from orrery.generation.grouping import generate_groups
from orrery.generation.hierarchy import resolve_hierarchy
from orrery.generation.models import GeneratedUniverse, Vector3
from orrery.generation.presets import build_grammar
from orrery.generation.prng import Seed, normalize_seed
from orrery.generation.properties import assign_properties, convert_black_holes
from orrery.generation.sampling import RandomGenerator
from orrery.generation.snapshot import UniverseBuilder
from orrery.generation.topology import Grammar, expand_topology

MAX_SYSTEM_SEED = 2147483647


def build_system(
    builder: UniverseBuilder,
    grammar: Grammar,
    config: GenerationConfig,
    rng: RandomGenerator,
    prefix: str,
) -> str:
    """Generate one system into ``builder`` and return its root id."""
    skeleton, _ = expand_topology(grammar, rng.fork("topology"), config.max_depth)
    drafts, _ = assign_properties(skeleton, rng.fork("properties"), config, prefix)
    if config.enable_black_holes:
        convert_black_holes(drafts, rng.fork("black_holes"), config)
    root_id = resolve_hierarchy(drafts)
    builder.commit_system(drafts, root_id)

    for feature in SYSTEM_FEATURES:
        if getattr(config, feature.toggle):
            output, _ = feature.run(builder, root_id, rng.fork(feature.label), config)
            builder.apply(output)
    return root_id


def _add_universe_features(builder: UniverseBuilder, master: RandomGenerator, config: GenerationConfig) -> None:
    if config.enable_rogue_planets:
        output, _ = generate_rogues(builder, master.fork("rogues"), config)
        builder.apply(output)
    if config.enable_nebulae:
        output, _ = generate_nebulae(builder, master.fork("nebulae"), config)
        builder.apply(output)


def generate_one_system(config: Any = None, seed: Seed = 0) -> GeneratedUniverse:
    """Generate a single system centered on the origin. No grouping."""
    config = coerce_config(config)
    normalized = normalize_seed(seed)
    grammar = build_grammar(config)
    logger.info(f"Generating one system (seed {normalized}, topology {grammar.name})")

    builder = UniverseBuilder(normalized)
    master = RandomGenerator.from_seed(normalized)
    root_id = build_system(builder, grammar, config, master, "sys0")
    builder.set_system_position(root_id, Vector3())
    _add_universe_features(builder, master, config)
    return builder.freeze()


def generate_many_systems(count: int, config: Any = None, seed: Seed = 0) -> GeneratedUniverse:
    """Generate ``count`` independent systems and arrange them into groups."""
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise ConfigurationError("count", f"system count must be a positive integer, got {count!r}")
    config = coerce_config(config)
    normalized = normalize_seed(seed)
    grammar = build_grammar(config)
    logger.info(f"Generating {count} systems (seed {normalized}, topology {grammar.name})")

    builder = UniverseBuilder(normalized)
    master = RandomGenerator.from_seed(normalized)
    for i in range(count):
        system_seed = master.randint(0, MAX_SYSTEM_SEED)
        build_system(builder, grammar, config, RandomGenerator.from_seed(system_seed), f"sys{i}")

    layout, _ = generate_groups(list(builder.root_ids), master.fork("groups"), config)
    for group in layout.groups:
        builder.add_group(group)
    for root_id, position in layout.system_positions.items():
        builder.set_system_position(root_id, position)

    _add_universe_features(builder, master, config)
    return builder.freeze()


def generate_universe(config: Any = None, seed: Seed = 0, systems: Optional[int] = None) -> GeneratedUniverse:
    """Dispatch to the single- or multi-system entry point."""
    if systems is None:
        return generate_one_system(config, seed)
    return generate_many_systems(systems, config, seed)
