"""Contract Storage API: paginated reads over contract ledger-entry snapshots."""

__version__ = "1.0.0"
