"""Optional feature passes.

Each pass receives the committed snapshot (read only), a generator forked
with its own label, and the config, and returns a ``FeatureOutput`` with
the advanced generator. Passes only read the stars, planets and moons of
the resolved hierarchy, never each other's output.
"""

from typing import Callable, NamedTuple, Tuple

from orrery.generation.config import GenerationConfig
from orrery.generation.features.belts import generate_asteroid_belts, generate_kuiper_belt
from orrery.generation.features.comets import generate_comets
from orrery.generation.features.disks import generate_disks
from orrery.generation.features.lagrange import generate_lagrange
from orrery.generation.features.nebulae import generate_nebulae
from orrery.generation.features.rings import generate_rings
from orrery.generation.features.rogues import generate_rogues
from orrery.generation.sampling import RandomGenerator
from orrery.generation.snapshot import FeatureOutput, UniverseBuilder

SystemFeatureFn = Callable[
    [UniverseBuilder, str, RandomGenerator, GenerationConfig],
    Tuple[FeatureOutput, RandomGenerator],
]


class SystemFeature(NamedTuple):
    label: str
    toggle: str
    run: SystemFeatureFn


# Run per system, in this order, each on rng.fork(label)
SYSTEM_FEATURES = (
    SystemFeature("belts", "enable_asteroid_belts", generate_asteroid_belts),
    SystemFeature("kuiper", "enable_kuiper_belt", generate_kuiper_belt),
    SystemFeature("rings", "enable_planetary_rings", generate_rings),
    SystemFeature("comets", "enable_comets", generate_comets),
    SystemFeature("lagrange", "enable_lagrange_points", generate_lagrange),
    SystemFeature("disks", "enable_protoplanetary_disks", generate_disks),
)

__all__ = [
    "SYSTEM_FEATURES",
    "SystemFeature",
    "generate_asteroid_belts",
    "generate_comets",
    "generate_disks",
    "generate_kuiper_belt",
    "generate_lagrange",
    "generate_nebulae",
    "generate_rings",
    "generate_rogues",
]
