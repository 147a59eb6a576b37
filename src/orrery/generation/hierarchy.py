"""Pick the center of each freshly expanded system and re-parent around it."""

from __future__ import annotations

from typing import List

from loguru import logger

from orrery.generation.models import CENTER_CANDIDATE_KINDS, BodyKind, Orbit
from orrery.generation.properties import BodyDraft, DraftTable


def center_candidates(drafts: DraftTable) -> List[BodyDraft]:
    """Top-level members of the system: stellar bodies and their planets.

    Moons are excluded; they stay with their planet whatever happens.
    """
    top_level = []
    for draft in drafts:
        if draft.kind not in CENTER_CANDIDATE_KINDS:
            continue
        if draft.kind == BodyKind.PLANET and draft.parent_id is not None:
            parent = drafts.get(draft.parent_id)
            if not parent.kind.is_stellar:
                continue
        top_level.append(draft)
    return top_level


def resolve_hierarchy(drafts: DraftTable) -> str:
    """Make the heaviest top-level member the root and return its id.

    Equal masses resolve to the first generated member. All other top-level
    members re-parent to the root; remaining stellar members are co-orbital
    companions and are re-spaced evenly in phase.
    """
    candidates = center_candidates(drafts)
    if not candidates:
        raise ValueError("system has no body that can act as its center")

    root = candidates[0]
    for draft in candidates[1:]:
        if draft.mass > root.mass:
            root = draft

    drafts.reparent(root.id, None)
    root.orbit = Orbit()
    for draft in candidates:
        if draft is not root:
            drafts.reparent(draft.id, root.id)

    companions = [d for d in candidates if d is not root and d.kind.is_stellar]
    for i, companion in enumerate(companions):
        companion.orbit = companion.orbit.model_copy(update={"phase": 360.0 * i / len(companions)})

    logger.debug(
        f"System center {root.id} ({root.kind.value}, mass {root.mass:.2f}) "
        f"with {len(companions)} companion(s)"
    )
    return root.id
