"""
Progression rules: which modules are completed, available or locked.

The rules are a pure function of the current ``completed`` flags and the
prerequisite lists.  Nothing is remembered between evaluations, so revoking
a prerequisite's completion re-locks its dependents on the next pass.

Prerequisite ids that do not name a module in the course are ignored,
which makes them vacuously satisfied.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence

from learnmap.models import Module, ModuleStatus, NodeState

logger = logging.getLogger(__name__)


# =========================================================================
# Status resolution
# =========================================================================


def is_available(module: Module, completed: Dict[str, bool]) -> bool:
    """Return ``True`` if every known prerequisite of *module* is completed.

    *completed* maps every module id in the course to its completion flag;
    ids missing from it are dangling and do not block.
    """
    return all(completed.get(p, True) for p in module.prerequisites)


def resolve_status(module: Module, completed: Dict[str, bool]) -> ModuleStatus:
    if module.completed:
        return "completed"
    return "available" if is_available(module, completed) else "locked"


def resolve_statuses(modules: Sequence[Module]) -> Dict[str, ModuleStatus]:
    """Resolve the status of every module, in course order."""
    completed = {m.id: m.completed for m in modules}
    statuses = {m.id: resolve_status(m, completed) for m in modules}
    logger.debug(
        "Resolved %d status(es): %d locked.",
        len(statuses), sum(1 for s in statuses.values() if s == "locked"),
    )
    return statuses


def apply_lock_state(modules: Sequence[Module]) -> List[Module]:
    """Return copies of *modules* with ``locked`` set from the rules."""
    statuses = resolve_statuses(modules)
    return [m.model_copy(update={"locked": statuses[m.id] == "locked"}) for m in modules]


# =========================================================================
# Current module & display state
# =========================================================================


def find_current_module(
    modules: Sequence[Module],
    statuses: Dict[str, ModuleStatus],
    requested: Optional[str] = None,
) -> Optional[str]:
    """Pick the module the learner is working on.

    An explicitly *requested* id wins if it exists in the course;
    otherwise the first available (not completed, not locked) module in
    course order is used.  Returns ``None`` when nothing qualifies.
    """
    if requested is not None:
        if requested in statuses:
            return requested
        logger.debug("Requested current module %r is not in the course.", requested)

    for m in modules:
        if statuses.get(m.id) == "available":
            return m.id
    return None


def node_state(status: ModuleStatus, is_current: bool) -> NodeState:
    """Display state with precedence completed > current > locked > available."""
    if status == "completed":
        return "completed"
    if is_current:
        return "current"
    return status


# =========================================================================
# Selection
# =========================================================================


def activate_module(
    statuses: Dict[str, ModuleStatus],
    module_id: str,
    on_activate: Callable[[str], None],
) -> bool:
    """Attempt to open *module_id*.

    Locked or unknown modules are a no-op; anything else is handed to
    *on_activate*.

    Returns:
        ``True`` if *on_activate* was called.
    """
    status = statuses.get(module_id)
    if status is None:
        logger.debug("Ignoring activation of unknown module %r.", module_id)
        return False
    if status == "locked":
        logger.debug("Ignoring activation of locked module %r.", module_id)
        return False
    on_activate(module_id)
    return True


# =========================================================================
# Progress
# =========================================================================


def progress_counts(statuses: Dict[str, ModuleStatus]) -> Dict[str, int]:
    """Return ``{"completed": n, "available": n, "locked": n}``."""
    counts = {"completed": 0, "available": 0, "locked": 0}
    for status in statuses.values():
        counts[status] += 1
    return counts


def percent_complete(statuses: Dict[str, ModuleStatus]) -> float:
    """Share of completed modules as a percentage; 0.0 for an empty course."""
    if not statuses:
        return 0.0
    done = sum(1 for s in statuses.values() if s == "completed")
    return done / len(statuses) * 100
