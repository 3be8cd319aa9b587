"""
pytest suite for the progression rules: status, selection, current module
and progress figures.
"""

import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from learnmap.models import Module
from learnmap.progression import (
    activate_module,
    apply_lock_state,
    find_current_module,
    node_state,
    percent_complete,
    progress_counts,
    resolve_statuses,
)


# =========================================================================
# Helpers
# =========================================================================


def _m(mid, prereqs=(), completed=False, tier=None):
    return Module(
        id=mid, title=f"Module {mid}", prerequisites=list(prereqs),
        completed=completed, tier=tier,
    )


def _random_course(n: int, seed: int):
    """Random DAG-ish course: each module may depend on earlier ones."""
    rng = np.random.RandomState(seed)
    modules = []
    for i in range(1, n + 1):
        k = rng.randint(0, min(3, i - 1) + 1) if i > 1 else 0
        prereqs = [str(int(p)) for p in rng.choice(np.arange(1, i), size=k, replace=False)] if k else []
        if rng.rand() < 0.1:
            prereqs.append("999")
        modules.append(_m(str(i), prereqs=prereqs, completed=bool(rng.rand() < 0.4)))
    return modules


# =========================================================================
# Test: Scenarios
# =========================================================================


class TestScenarios:
    def test_root_is_available(self):
        assert resolve_statuses([_m("1")]) == {"1": "available"}

    def test_incomplete_prerequisite_locks(self):
        modules = [_m("1", tier=0), _m("2", tier=1, prereqs=["1"])]
        assert resolve_statuses(modules)["2"] == "locked"

    def test_completed_prerequisite_unlocks(self):
        modules = [_m("1", tier=0, completed=True), _m("2", tier=1, prereqs=["1"])]
        statuses = resolve_statuses(modules)
        assert statuses == {"1": "completed", "2": "available"}

    def test_dangling_prerequisite_is_satisfied(self):
        assert resolve_statuses([_m("1", prereqs=["99"])]) == {"1": "available"}

    def test_completed_never_locked(self):
        modules = [_m("1"), _m("2", prereqs=["1"], completed=True)]
        assert resolve_statuses(modules)["2"] == "completed"

    def test_all_prerequisites_required(self):
        modules = [
            _m("1", completed=True),
            _m("2"),
            _m("3", prereqs=["1", "2"]),
        ]
        assert resolve_statuses(modules)["3"] == "locked"

    def test_empty(self):
        assert resolve_statuses([]) == {}

    def test_regression_relocks(self):
        modules = [_m("1", completed=True), _m("2", prereqs=["1"])]
        assert resolve_statuses(modules)["2"] == "available"
        modules[0] = modules[0].model_copy(update={"completed": False})
        assert resolve_statuses(modules)["2"] == "locked"

    def test_supplied_locked_flag_ignored(self):
        m = Module(id="1", title="x", locked=True)
        assert resolve_statuses([m]) == {"1": "available"}

    def test_apply_lock_state_returns_copies(self):
        modules = [_m("1"), _m("2", prereqs=["1"])]
        locked = apply_lock_state(modules)
        assert [m.locked for m in locked] == [False, True]
        assert modules[1].locked is False


# =========================================================================
# Test: Properties
# =========================================================================


class TestProperties:
    @pytest.mark.parametrize("seed", [0, 1, 7, 42])
    def test_lock_consistency(self, seed):
        modules = _random_course(40, seed)
        by_id = {m.id: m for m in modules}
        statuses = resolve_statuses(modules)
        for m in modules:
            known = [by_id[p] for p in m.prerequisites if p in by_id]
            all_done = all(p.completed for p in known)
            if statuses[m.id] == "locked":
                assert not m.completed
                assert not all_done
            elif statuses[m.id] == "available":
                assert not m.completed
                assert all_done
            else:
                assert m.completed

    @pytest.mark.parametrize("seed", [3, 4])
    def test_idempotent(self, seed):
        modules = _random_course(30, seed)
        assert resolve_statuses(modules) == resolve_statuses(modules)


# =========================================================================
# Test: Selection & current module
# =========================================================================


class TestSelection:
    def test_activate_available(self):
        opened = []
        statuses = {"1": "available"}
        assert activate_module(statuses, "1", opened.append) is True
        assert opened == ["1"]

    def test_activate_completed(self):
        opened = []
        assert activate_module({"1": "completed"}, "1", opened.append) is True
        assert opened == ["1"]

    def test_activate_locked_is_noop(self):
        opened = []
        assert activate_module({"2": "locked"}, "2", opened.append) is False
        assert opened == []

    def test_activate_unknown_is_noop(self):
        opened = []
        assert activate_module({}, "42", opened.append) is False
        assert opened == []

    def test_current_is_first_available(self):
        modules = [
            _m("1", completed=True),
            _m("2", prereqs=["3"]),
            _m("3", prereqs=["1"]),
            _m("4"),
        ]
        statuses = resolve_statuses(modules)
        assert find_current_module(modules, statuses) == "3"

    def test_current_requested(self):
        modules = [_m("1"), _m("2")]
        statuses = resolve_statuses(modules)
        assert find_current_module(modules, statuses, requested="2") == "2"
        assert find_current_module(modules, statuses, requested="9") == "1"

    def test_no_current_module(self):
        modules = [_m("1", completed=True)]
        assert find_current_module(modules, resolve_statuses(modules)) is None
        assert find_current_module([], {}) is None

    def test_node_state_precedence(self):
        assert node_state("completed", True) == "completed"
        assert node_state("available", True) == "current"
        assert node_state("locked", True) == "current"
        assert node_state("locked", False) == "locked"
        assert node_state("available", False) == "available"


# =========================================================================
# Test: Progress
# =========================================================================


class TestProgress:
    def test_counts_and_percent(self):
        statuses = {"1": "completed", "2": "available", "3": "locked", "4": "locked"}
        assert progress_counts(statuses) == {"completed": 1, "available": 1, "locked": 2}
        assert percent_complete(statuses) == 25.0

    def test_empty_course(self):
        assert progress_counts({}) == {"completed": 0, "available": 0, "locked": 0}
        assert percent_complete({}) == 0.0
