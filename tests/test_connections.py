"""
pytest suite for connection derivation.
"""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from learnmap.connections import derive_connections
from learnmap.models import Module


def _m(mid, prereqs=(), completed=False):
    return Module(id=mid, title=f"Module {mid}", prerequisites=list(prereqs), completed=completed)


class TestDeriveConnections:
    def test_empty(self):
        assert derive_connections([]) == []

    def test_edge_direction_and_order(self):
        modules = [
            _m("1", completed=True),
            _m("2"),
            _m("3", prereqs=["2", "1"]),
            _m("4", prereqs=["3"]),
        ]
        edges = [(c.from_id, c.to_id) for c in derive_connections(modules)]
        assert edges == [("2", "3"), ("1", "3"), ("3", "4")]

    def test_style_follows_prerequisite_completion(self):
        # "2" is available (its prerequisite is done) yet its outgoing
        # edge stays pending until "2" itself is completed.
        modules = [
            _m("1", completed=True),
            _m("2", prereqs=["1"]),
            _m("3", prereqs=["2"]),
        ]
        styles = {(c.from_id, c.to_id): c.completed_style for c in derive_connections(modules)}
        assert styles == {("1", "2"): True, ("2", "3"): False}

    def test_dangling_prerequisite_no_edge(self):
        modules = [_m("1", prereqs=["99"]), _m("2", prereqs=["1", "98"])]
        edges = derive_connections(modules)
        assert [(c.from_id, c.to_id) for c in edges] == [("1", "2")]
