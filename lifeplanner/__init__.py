"""
Life Planner

Core of a single-user personal planner: goals and tasks, mood check-ins,
social connections, learning resources and personal finance, persisted
locally as JSON documents.
"""

__version__ = "0.1.0"
