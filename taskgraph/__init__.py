"""
Task dependency graph and prioritization engine.

Owns the task status state machine, blocker/blocked dependency edges,
completion cascades, dependency graph layout and the "what's next" ranking.
"""

__version__ = "0.1.0"
