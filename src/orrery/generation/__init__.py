"""Procedural universe generation engine."""

from orrery.generation.config import GenerationConfig, coerce_config, load_config
from orrery.generation.engine import generate_many_systems, generate_one_system, generate_universe
from orrery.generation.errors import ConfigurationError, OrreryError, UniverseValidationError
from orrery.generation.models import (
    Belt,
    Body,
    BodyKind,
    GeneratedUniverse,
    Group,
    GroupChild,
    LagrangePoint,
    NebulaRegion,
    Orbit,
    ProtoplanetaryDisk,
    UniverseStats,
    Vector3,
)
from orrery.generation.presets import STYLE_PRESETS, TOPOLOGY_PRESETS, config_from_settings, preset_config
from orrery.generation.prng import create_prng, hash_string, normalize_seed
from orrery.generation.sampling import RandomGenerator
from orrery.generation.validate import ValidationReport, Violation, validate_universe

__all__ = [
    "Belt",
    "Body",
    "BodyKind",
    "ConfigurationError",
    "GeneratedUniverse",
    "GenerationConfig",
    "Group",
    "GroupChild",
    "LagrangePoint",
    "NebulaRegion",
    "Orbit",
    "OrreryError",
    "ProtoplanetaryDisk",
    "RandomGenerator",
    "STYLE_PRESETS",
    "TOPOLOGY_PRESETS",
    "UniverseStats",
    "UniverseValidationError",
    "ValidationReport",
    "Vector3",
    "Violation",
    "coerce_config",
    "config_from_settings",
    "create_prng",
    "generate_many_systems",
    "generate_one_system",
    "generate_universe",
    "hash_string",
    "load_config",
    "normalize_seed",
    "preset_config",
    "validate_universe",
]
