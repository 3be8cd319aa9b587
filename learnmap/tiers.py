"""
Tier assignment: grouping modules into ordered columns of the learning map.

Two modes:

- ``declared``: trust each module's author-supplied ``tier`` (absent = 0).
- ``depth``: derive tiers from the prerequisite graph with
  ``networkx.topological_generations`` (roots are tier 0, every other module
  sits one tier past its deepest prerequisite).

Also provides a tier/prerequisite consistency audit and graph metrics.
"""

import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Sequence, Tuple

import networkx as nx

from learnmap.models import Module

logger = logging.getLogger(__name__)

TierSequence = List[Tuple[int, List[Module]]]


class PrerequisiteCycleError(Exception):
    """Raised when depth tiers are requested for a cyclic prerequisite graph.

    Attributes:
        cycle: The offending edges as ``(prerequisite_id, module_id)`` pairs.
    """

    def __init__(self, cycle: List[Tuple[str, str]]) -> None:
        self.cycle = cycle
        path = " → ".join([u for u, _ in cycle] + [cycle[0][0]]) if cycle else ""
        super().__init__(f"prerequisite cycle: {path}")


# =========================================================================
# Graph construction
# =========================================================================


def build_prerequisite_graph(modules: Sequence[Module]) -> nx.DiGraph:
    """Return a ``DiGraph`` with an edge prerequisite → module.

    Every module is a node (isolated ones included).  Prerequisite ids
    that do not name a module in *modules* are skipped.
    """
    G = nx.DiGraph()
    for m in modules:
        G.add_node(m.id)
    known = set(G.nodes)
    for m in modules:
        for prereq_id in m.prerequisites:
            if prereq_id in known:
                G.add_edge(prereq_id, m.id)
            else:
                logger.debug(
                    "Ignoring dangling prerequisite %r of module %r.",
                    prereq_id, m.id,
                )
    return G


# =========================================================================
# Tier assignment
# =========================================================================


def group_by_tier(modules: Iterable[Module], tiers: Dict[str, int]) -> TierSequence:
    """Group *modules* by ``tiers[module.id]``, ascending, insertion-stable."""
    groups: Dict[int, List[Module]] = defaultdict(list)
    for m in modules:
        groups[tiers[m.id]].append(m)
    return [(t, groups[t]) for t in sorted(groups)]


def declared_tiers(modules: Sequence[Module]) -> Dict[str, int]:
    return {m.id: m.effective_tier for m in modules}


def depth_tiers(modules: Sequence[Module]) -> Dict[str, int]:
    """Compute each module's tier as its depth in the prerequisite DAG.

    Raises:
        PrerequisiteCycleError: If the prerequisite graph has a cycle.
    """
    G = build_prerequisite_graph(modules)
    tiers: Dict[str, int] = {}
    try:
        for depth, generation in enumerate(nx.topological_generations(G)):
            for module_id in generation:
                tiers[module_id] = depth
    except nx.NetworkXUnfeasible:
        # find_cycle yields (u, v, direction) with orientation="original"
        cycle = [(u, v) for u, v, _ in nx.find_cycle(G, orientation="original")]
        logger.error("Cannot compute depth tiers: %d-edge cycle found.", len(cycle))
        raise PrerequisiteCycleError(cycle) from None
    return tiers


def assign_tiers(modules: Sequence[Module], mode: str = "declared") -> TierSequence:
    """Partition *modules* into an ordered sequence of ``(tier, modules)``.

    Args:
        modules: Modules in course order.
        mode: ``"declared"`` (author tiers) or ``"depth"`` (graph depth).

    Returns:
        ``[(tier_number, [module, ...]), ...]`` with tier numbers ascending
        and modules in their original order within each tier.  An empty
        input yields an empty list.
    """
    if mode == "declared":
        tiers = declared_tiers(modules)
    elif mode == "depth":
        tiers = depth_tiers(modules)
    else:
        raise ValueError(f"unknown tier mode {mode!r}")

    result = group_by_tier(modules, tiers)
    logger.debug(
        "Assigned %d module(s) to %d tier(s) (mode=%s).",
        len(modules), len(result), mode,
    )
    return result


# =========================================================================
# Audit
# =========================================================================


def find_tier_violations(modules: Sequence[Module]) -> List[Tuple[str, str]]:
    """Return ``(prerequisite_id, module_id)`` pairs whose declared tiers
    do not increase along the prerequisite edge.

    Violations are logged but never raised: declared tiers are the
    author's call.
    """
    by_id = {m.id: m for m in modules}
    violations: List[Tuple[str, str]] = []
    for m in modules:
        for prereq_id in m.prerequisites:
            prereq = by_id.get(prereq_id)
            if prereq is None:
                continue
            if prereq.effective_tier >= m.effective_tier:
                violations.append((prereq_id, m.id))
    if violations:
        logger.warning(
            "%d prerequisite edge(s) do not advance a tier, e.g. %s → %s.",
            len(violations), violations[0][0], violations[0][1],
        )
    return violations


# =========================================================================
# Metrics
# =========================================================================


def compute_graph_metrics(modules: Sequence[Module]) -> Dict[str, Any]:
    """Compute prerequisite-graph summary metrics.

    Returns dict with: total_modules, total_edges, root_count,
    dangling_prerequisites, max_depth.
    """
    G = build_prerequisite_graph(modules)
    known = set(G.nodes)
    dangling = sum(
        1 for m in modules for p in m.prerequisites if p not in known
    )
    # Roots by the progression rule: nothing listed at all.
    roots = sum(1 for m in modules if not m.prerequisites)

    total_edges = G.number_of_edges()
    if total_edges > 0 and nx.is_directed_acyclic_graph(G):
        max_depth = nx.dag_longest_path_length(G)
    else:
        max_depth = 0

    return {
        "total_modules": len(modules),
        "total_edges": total_edges,
        "root_count": roots,
        "dangling_prerequisites": dangling,
        "max_depth": max_depth,
    }
