"""
Learning Map Engine
Turns prerequisite-linked course modules into a tiered 2D learning map
and resolves which modules a learner can enter.
"""

__version__ = "0.1.0"
