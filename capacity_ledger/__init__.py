"""Capacity planning ledger: teams, sprints, capacities and role breakdowns."""

# Re-export the common database helpers for convenience.
from .database import Base, get_db  # noqa: F401

__all__ = ["Base", "get_db"]
