"""
Layout engine: deterministic placement of tiered modules on the map canvas.

Tiers run left to right across the 10-90% band; modules within a tier are
spread top to bottom across the 20-80% band.  Each module then gets a small
id-derived wobble (``sin``/``cos`` of its numeric id) so the map reads as a
path rather than a grid, while staying identical across re-renders.

The engine returns a fresh ``{module_id: Placement}`` mapping and never
touches the ``Module`` objects it is given.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from learnmap.config import MapConfig
from learnmap.models import Module, Placement
from learnmap.tiers import TierSequence, assign_tiers
from learnmap.utils import parse_numeric_id

logger = logging.getLogger(__name__)


class NonNumericModuleIdError(ValueError):
    """Raised in strict mode when a module id cannot seed the layout jitter.

    Attributes:
        module_id: The offending id.
    """

    def __init__(self, module_id: str) -> None:
        self.module_id = module_id
        super().__init__(f"module id {module_id!r} is not numeric")


# =========================================================================
# Jitter seeds
# =========================================================================


def _jitter_seeds(
    modules: Sequence[Module], strict: bool
) -> Tuple[np.ndarray, np.ndarray]:
    """Return ``(seeds, valid)`` arrays for *modules*.

    ``seeds`` holds each numeric id as float64 (0 where not numeric);
    ``valid`` masks the modules that get jitter at all.
    """
    seeds = np.zeros(len(modules), dtype=np.float64)
    valid = np.zeros(len(modules), dtype=bool)
    for i, m in enumerate(modules):
        numeric = parse_numeric_id(m.id)
        if numeric is None:
            if strict:
                raise NonNumericModuleIdError(m.id)
            logger.warning(
                "Module id %r is not numeric — placing it without jitter.", m.id
            )
            continue
        seeds[i] = numeric
        valid[i] = True
    return seeds, valid


# =========================================================================
# Placement
# =========================================================================


def tier_base_x(tier_index: int, total_tiers: int, config: MapConfig) -> float:
    """Horizontal grid position of a tier column, before jitter."""
    tier_progress = tier_index / max(1, total_tiers - 1)
    return config.x_start + tier_progress * config.x_span


def _place_tier(
    members: List[Module],
    tier: int,
    tier_index: int,
    total_tiers: int,
    config: MapConfig,
) -> Dict[str, Placement]:
    count = len(members)
    base_x = tier_base_x(tier_index, total_tiers, config)
    seeds, valid = _jitter_seeds(members, config.strict_ids)

    if count == 1:
        base_y = np.array([config.y_single])
        y = base_y.copy()
    else:
        base_y = config.y_start + (np.arange(count) / (count - 1)) * config.y_span
        y_offset = np.where(
            valid, np.sin(seeds * config.y_jitter_freq) * config.y_jitter, 0.0
        )
        y = np.clip(base_y + y_offset, *config.y_clamp)

    x_offset = np.where(
        valid, np.cos(seeds * config.x_jitter_freq) * config.x_jitter, 0.0
    )
    x = np.clip(base_x + x_offset, *config.x_clamp)

    return {
        m.id: Placement(
            x=float(x[i]),
            y=float(y[i]),
            base_x=float(base_x),
            base_y=float(base_y[i]),
            tier=tier,
            tier_index=tier_index,
            index_in_tier=i,
        )
        for i, m in enumerate(members)
    }


def compute_layout(
    tiers: TierSequence,
    config: Optional[MapConfig] = None,
) -> Dict[str, Placement]:
    """Place every module of an already-tiered course.

    Args:
        tiers: Output of :func:`learnmap.tiers.assign_tiers`.
        config: Layout constants; defaults to ``MapConfig()``.

    Returns:
        ``{module_id: Placement}`` in tier order, then in-tier order.

    Raises:
        NonNumericModuleIdError: In strict mode, for a non-numeric id.
    """
    if config is None:
        config = MapConfig()

    placements: Dict[str, Placement] = {}
    total_tiers = len(tiers)
    for tier_index, (tier, members) in enumerate(tiers):
        placements.update(
            _place_tier(members, tier, tier_index, total_tiers, config)
        )

    logger.debug(
        "Laid out %d module(s) across %d tier(s).", len(placements), total_tiers
    )
    return placements


def layout_modules(
    modules: Sequence[Module],
    config: Optional[MapConfig] = None,
) -> Dict[str, Placement]:
    """Tier and place *modules* in one call."""
    if config is None:
        config = MapConfig()
    return compute_layout(assign_tiers(modules, mode=config.tier_mode), config)
