"""
Stochastic grammar expansion into a system skeleton.

A grammar maps symbols to weighted productions. Each production emits zero
or more child symbols, each repeated a sampled number of times. Symbols
listed in ``Grammar.kinds`` are bodies; the start symbol is the system
itself and never becomes a body.

The skeleton only records who descends from whom. Physical and orbital
attributes are assigned afterwards by the property assigner.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Mapping, Optional, Tuple

from loguru import logger

from orrery.generation.models import BodyKind
from orrery.generation.sampling import RandomGenerator

RepeatMode = Literal["fixed", "uniform", "geometric", "poisson", "categorical"]

SYSTEM_SYMBOL = "system"


@dataclass(frozen=True)
class Repeat:
    """Distribution of how many times a symbol is emitted.

    ``categorical`` draws a count in 1..len(weights) with the given weights.
    The sampled count is then bounded by ``min_count`` and ``max_count``.
    """

    mode: RepeatMode
    value: int = 0
    low: int = 0
    high: int = 0
    p: float = 0.5
    lam: float = 1.0
    weights: Tuple[float, ...] = ()
    min_count: int = 0
    max_count: Optional[int] = None

    def sample(self, rng: RandomGenerator) -> int:
        if self.mode == "fixed":
            count = self.value
        elif self.mode == "uniform":
            count = rng.randint(self.low, self.high)
        elif self.mode == "geometric":
            count = rng.geometric(self.p)
        elif self.mode == "poisson":
            count = rng.poisson(self.lam)
        elif self.mode == "categorical":
            count = rng.weighted_index(self.weights) + 1
        else:
            raise ValueError(f"Unknown repeat mode: {self.mode}")
        count = max(self.min_count, count)
        if self.max_count is not None:
            count = min(self.max_count, count)
        return count

    @classmethod
    def fixed(cls, value: int) -> "Repeat":
        return cls("fixed", value=value)

    @classmethod
    def uniform(cls, low: int, high: int) -> "Repeat":
        return cls("uniform", low=low, high=high)

    @classmethod
    def geometric(cls, p: float, min_count: int = 0, max_count: Optional[int] = None) -> "Repeat":
        return cls("geometric", p=p, min_count=min_count, max_count=max_count)

    @classmethod
    def categorical(cls, weights) -> "Repeat":
        return cls("categorical", weights=tuple(weights))


@dataclass(frozen=True)
class Production:
    weight: float
    emits: Tuple[Tuple[str, Repeat], ...] = ()


@dataclass(frozen=True)
class Grammar:
    name: str
    rules: Mapping[str, Tuple[Production, ...]]
    kinds: Mapping[str, BodyKind]
    max_depth: int = 3
    start: str = SYSTEM_SYMBOL

    def productions(self, symbol: str) -> Tuple[Production, ...]:
        return tuple(self.rules.get(symbol, ()))


@dataclass
class SkeletonNode:
    key: str
    symbol: str
    kind: BodyKind
    depth: int
    parent_key: Optional[str] = None
    children: List[str] = field(default_factory=list)
    sibling_index: int = 0


@dataclass
class Skeleton:
    """Body nodes of one system in generation (depth-first) order."""

    grammar: str
    nodes: List[SkeletonNode] = field(default_factory=list)
    index: Dict[str, SkeletonNode] = field(default_factory=dict)

    def add(self, node: SkeletonNode) -> None:
        self.nodes.append(node)
        self.index[node.key] = node
        if node.parent_key is not None:
            self.index[node.parent_key].children.append(node.key)

    def of_kind(self, kind: BodyKind) -> List[SkeletonNode]:
        return [node for node in self.nodes if node.kind == kind]

    def top_level(self) -> List[SkeletonNode]:
        """Stars plus planets, in generation order.

        Planets count as top level whether the grammar hangs them off the
        system or off a star: both end up orbiting the system center.
        """
        return [
            node
            for node in self.nodes
            if node.kind == BodyKind.STAR
            or (node.kind == BodyKind.PLANET and self._under_system_or_star(node))
        ]

    def _under_system_or_star(self, node: SkeletonNode) -> bool:
        if node.parent_key is None:
            return True
        return self.index[node.parent_key].kind == BodyKind.STAR


def expand_topology(
    grammar: Grammar,
    rng: RandomGenerator,
    max_depth: int,
) -> Tuple[Skeleton, RandomGenerator]:
    """Expand ``grammar`` from its start symbol.

    Bodies emitted directly by the start symbol sit at depth 1. A body
    expands further only while its depth is below the effective bound,
    ``min(grammar.max_depth, max_depth)``.
    """
    depth_limit = min(grammar.max_depth, max_depth)
    skeleton = Skeleton(grammar=grammar.name)
    counters: Dict[str, int] = {}

    def expand(symbol: str, parent_key: Optional[str], depth: int) -> None:
        productions = grammar.productions(symbol)
        if not productions:
            return
        if len(productions) == 1:
            production = productions[0]
        else:
            production = rng.weighted_choice(productions, [p.weight for p in productions])

        sibling_index = 0
        for child_symbol, repeat in production.emits:
            count = repeat.sample(rng)
            kind = grammar.kinds.get(child_symbol)
            for _ in range(count):
                if kind is None:
                    # Structural symbol: expands in place without a body
                    expand(child_symbol, parent_key, depth)
                    continue
                n = counters.get(child_symbol, 0)
                counters[child_symbol] = n + 1
                node = SkeletonNode(
                    key=f"{child_symbol}{n}",
                    symbol=child_symbol,
                    kind=kind,
                    depth=depth + 1,
                    parent_key=parent_key,
                    sibling_index=sibling_index,
                )
                sibling_index += 1
                skeleton.add(node)
                if node.depth < depth_limit:
                    expand(child_symbol, node.key, node.depth)

    expand(grammar.start, None, 0)

    logger.debug(
        f"Expanded grammar '{grammar.name}': {len(skeleton.nodes)} bodies "
        f"(depth limit {depth_limit})"
    )
    return skeleton, rng
