"""
Delivery Module: question bank loading, persistence and the CLI.
"""

from strata.delivery.catalog import ItemCatalog
from strata.delivery.state_store import StateStore, create_initial_state

__all__ = ["ItemCatalog", "StateStore", "create_initial_state"]
