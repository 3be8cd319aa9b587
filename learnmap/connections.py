"""
Connection derivation for the path renderer.

One directed edge per (prerequisite → module) pair where the prerequisite
exists in the course.  An edge is drawn in the completed style when its
*prerequisite* is completed, regardless of the target's status.
"""

import logging
from typing import List, Sequence

from learnmap.models import Connection, Module

logger = logging.getLogger(__name__)


def derive_connections(modules: Sequence[Module]) -> List[Connection]:
    """Return the edges of the learning map in module order.

    Dangling prerequisite ids produce no edge.
    """
    by_id = {m.id: m for m in modules}
    connections: List[Connection] = []
    skipped = 0

    for m in modules:
        for prereq_id in m.prerequisites:
            prereq = by_id.get(prereq_id)
            if prereq is None:
                skipped += 1
                continue
            connections.append(
                Connection(
                    from_id=prereq.id,
                    to_id=m.id,
                    completed_style=prereq.completed,
                )
            )

    if skipped:
        logger.debug("Skipped %d dangling prerequisite reference(s).", skipped)
    return connections
