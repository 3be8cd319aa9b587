"""
Learning map CLI: tiering, layout and progression for one course.

Usage::

    python -m learnmap.map_builder \\
        --input ./data/courses.json \\
        --course-id 1 \\
        --out ./data/course-1-map.json

Reads the course catalog, lays out the chosen course, resolves every
module's status and writes the resulting ``LearningMap`` as JSON.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from pydantic import ValidationError

from learnmap.catalog import CatalogLoadError, CourseNotFoundError, load_catalog
from learnmap.config import ConfigLoadError, MapConfig, load_config, save_config
from learnmap.connections import derive_connections
from learnmap.layout import NonNumericModuleIdError, compute_layout
from learnmap.models import Course, LearningMap, MapNode, MapSummary, TierGroup
from learnmap.progression import (
    find_current_module,
    node_state,
    percent_complete,
    progress_counts,
    resolve_statuses,
)
from learnmap.tiers import (
    PrerequisiteCycleError,
    assign_tiers,
    compute_graph_metrics,
    find_tier_violations,
)
from learnmap.utils import setup_logging, timed

logger = logging.getLogger(__name__)


# =========================================================================
# Pipeline
# =========================================================================


def build_learning_map(
    course: Course,
    config: Optional[MapConfig] = None,
    current_module_id: Optional[str] = None,
) -> LearningMap:
    """Run the full pipeline for *course*.

    Args:
        course: The course to lay out.  It is not modified.
        config: Layout constants and tier mode; defaults to ``MapConfig()``.
        current_module_id: Module the learner is on, if known.  Falls back
            to the first available module.

    Returns:
        A ``LearningMap`` with tiers, positioned nodes, connections and a
        progress summary.
    """
    if config is None:
        config = MapConfig()
    modules = course.modules

    with timed("Tier assignment"):
        tiers = assign_tiers(modules, mode=config.tier_mode)
        if config.tier_mode == "declared":
            find_tier_violations(modules)

    with timed("Layout"):
        placements = compute_layout(tiers, config)

    with timed("Progression"):
        statuses = resolve_statuses(modules)
        current = find_current_module(modules, statuses, current_module_id)

    connections = derive_connections(modules)
    metrics = compute_graph_metrics(modules)

    nodes: List[MapNode] = []
    for m in modules:
        placement = placements[m.id]
        status = statuses[m.id]
        is_current = m.id == current
        nodes.append(
            MapNode(
                id=m.id,
                title=m.title,
                type=m.type,
                completed=m.completed,
                locked=status == "locked",
                current=is_current,
                status=status,
                state=node_state(status, is_current),
                tier=placement.tier,
                prerequisites=list(m.prerequisites),
                position=placement.position,
            )
        )

    counts = progress_counts(statuses)
    summary = MapSummary(
        total_modules=len(modules),
        completed=counts["completed"],
        available=counts["available"],
        locked=counts["locked"],
        percent_complete=round(percent_complete(statuses), 4),
        current_module_id=current,
        tier_count=len(tiers),
        connection_count=len(connections),
        dangling_prerequisites=metrics["dangling_prerequisites"],
        max_depth=metrics["max_depth"],
    )

    logger.info(
        "Built map for course %r — modules=%d, tiers=%d, edges=%d, "
        "completed=%d, locked=%d, current=%s",
        course.id, summary.total_modules, summary.tier_count,
        summary.connection_count, summary.completed, summary.locked, current,
    )

    return LearningMap(
        course_id=course.id,
        course_title=course.title,
        tiers=[TierGroup(tier=t, module_ids=[m.id for m in ms]) for t, ms in tiers],
        nodes=nodes,
        connections=connections,
        summary=summary,
    )


# =========================================================================
# CLI
# =========================================================================


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="python -m learnmap.map_builder",
        description="Lay out a course as a learning map and resolve module status.",
    )
    parser.add_argument(
        "--input", required=True,
        help="Path to a JSON course catalog.",
    )
    parser.add_argument("--course-id", required=True)
    parser.add_argument(
        "--out", default=None,
        help="Write the map JSON here (default: stdout).",
    )
    parser.add_argument(
        "--current", default=None,
        help="Id of the module the learner is currently on.",
    )
    parser.add_argument(
        "--tier-mode", choices=["declared", "depth"], default=None,
        help="Use author tiers or derive them from prerequisites.",
    )
    parser.add_argument(
        "--strict-ids", action="store_true",
        help="Fail on non-numeric module ids instead of skipping jitter.",
    )
    parser.add_argument(
        "--apply-config", type=str, default=None,
        help="Load layout settings from a config JSON.",
    )
    parser.add_argument(
        "--save-config", type=str, default=None,
        help="Save the effective settings to a config JSON.",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def _effective_config(args: argparse.Namespace) -> MapConfig:
    config = load_config(args.apply_config) if args.apply_config else MapConfig()
    overrides = {}
    if args.tier_mode is not None:
        overrides["tier_mode"] = args.tier_mode
    if args.strict_ids:
        overrides["strict_ids"] = True
    if overrides:
        config = config.model_copy(update=overrides)
    return config


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry-point."""
    args = _parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        config = _effective_config(args)
        if args.save_config:
            save_config(config, args.save_config)

        catalog = load_catalog(args.input)
        course = catalog.get(args.course_id)
        learning_map = build_learning_map(course, config, args.current)
    except (
        CatalogLoadError,
        ConfigLoadError,
        CourseNotFoundError,
        NonNumericModuleIdError,
        PrerequisiteCycleError,
        OSError,
        ValidationError,
    ) as exc:
        logger.error("%s", exc)
        sys.exit(1)

    payload = learning_map.model_dump_json(indent=2)
    if args.out:
        os.makedirs(os.path.dirname(os.path.abspath(args.out)), exist_ok=True)
        with open(args.out, "w", encoding="utf-8") as fh:
            fh.write(payload)
        logger.info("📄 Map → %s", args.out)
    else:
        sys.stdout.write(payload + "\n")

    sys.exit(0)


if __name__ == "__main__":
    main()
