"""Service layer helpers."""

from .capacities import get_capacity, list_capacities, upsert_capacity

__all__ = ["get_capacity", "list_capacities", "upsert_capacity"]
